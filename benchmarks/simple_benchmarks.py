from dataclasses import dataclass
from timeit import timeit
from typing import Callable

from luastack import config, pop_value, push_value
from luastack.classify import describe
from luastack.vm import LuaState


@dataclass
class Point:
    x: float
    y: float


def time_round_trip(value, tp, rounds: int) -> float:
    """Time push_value followed by pop_value of the same value on one state."""
    L = LuaState()

    def once():
        push_value(L, value)
        pop_value(L, tp)

    # Warmup
    once()
    # Timed
    return timeit(once, number=rounds)


def time_call(rounds: int) -> float:
    """Time a Python -> VM -> Python call through a BoundFunction."""
    L = LuaState()
    push_value(L, lambda a, b: a + b)
    add = pop_value(L, Callable[[int, int], int])
    add(1, 2)
    return timeit(lambda: add(1, 2), number=rounds)


# Classification is memoized; this measures the cache hit path
def bench_describe(n_lookups: int = 100000) -> float:
    describe(list[int])
    return timeit(lambda: describe(list[int]), number=n_lookups)


WORKLOADS = [
    ("integer", 123, int, 50000),
    ("string", "foobar", str, 50000),
    ("list[int] (100 items)", list(range(100)), list[int], 1000),
    ("dict[str, float] (50 items)", {str(i): float(i) for i in range(50)}, dict[str, float], 1000),
    ("dataclass record", Point(1.0, 2.0), Point, 10000),
]


def _print_pair(name: str, value, tp, rounds: int) -> None:
    config.set_stack_checks(True)
    checked = time_round_trip(value, tp, rounds)
    config.set_stack_checks(False)
    unchecked = time_round_trip(value, tp, rounds)
    print(f"Benchmark: {name}")
    print(f"  checked: {checked:.6f}s  |  unchecked: {unchecked:.6f}s  [rounds={rounds}]")


if __name__ == "__main__":
    print("Benchmark: describe() cache hit")
    print(f"  time: {bench_describe():.6f}s")

    for name, value, tp, rounds in WORKLOADS:
        _print_pair(name, value, tp, rounds)

    config.set_stack_checks(False)
    print("Benchmark: BoundFunction call")
    print(f"  time: {time_call(20000):.6f}s")
