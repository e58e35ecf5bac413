from __future__ import annotations

from luastack.errors import StackImbalanceError
from luastack.debug_utils.pprint import dump_stack


class StackGuard:
    """Assert that a block changes the stack depth by exactly `delta`.

    On the error path the expected change is 0: whatever raised must not have
    left anything behind. A violation found while an exception is already
    propagating is raised chained to that exception.
    """

    __slots__ = ("L", "delta", "what", "top")

    def __init__(self, L, delta: int = 0, what: str = "stack operation"):
        self.L = L
        self.delta = delta
        self.what = what
        self.top = 0

    def __enter__(self) -> StackGuard:
        self.top = self.L.get_top()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if self.L.closed:
            return False
        expected = self.top + (self.delta if exc_type is None else 0)
        actual = self.L.get_top()
        if actual != expected:
            outcome = "succeeded" if exc_type is None else f"raised {exc_type.__name__}"
            raise StackImbalanceError(
                f"{self.what} {outcome} with stack depth {actual}, expected {expected}\n"
                f"{dump_stack(self.L)}"
            ) from exc
        return False
