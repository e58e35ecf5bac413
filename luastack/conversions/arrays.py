"""Sequences <-> tables with consecutive integer keys starting at 1.

`list[T]` and `tuple[T, ...]` convert every element as T; a fixed
`tuple[A, B]` converts element i as the i-th annotation argument. Without
annotation arguments elements are pushed as whatever they are and read as
their natural host value.
"""

from __future__ import annotations

from typing import Any, Sequence

from luastack import stack
from luastack.types.descriptor import HostType


def _is_fixed_tuple(host: HostType) -> bool:
    return (issubclass(host.origin, tuple) and bool(host.args)
            and not (len(host.args) == 2 and host.args[1] is Ellipsis)
            and host.args != ((),))


def _element_type(host: HostType, i: int) -> Any:
    if not host.args or host.args == ((),):
        return None
    if _is_fixed_tuple(host):
        return host.args[i]
    return host.args[0]


def push_array(L, value: Sequence[Any], host: HostType) -> None:
    if _is_fixed_tuple(host) and len(value) != len(host.args):
        raise ValueError(f"expected {len(host.args)} elements for {host.annotation}, got {len(value)}")
    L.create_table(len(value), 0)
    for i, item in enumerate(value):
        stack.push_value(L, item, _element_type(host, i))
        L.raw_seti(-2, i + 1)


def get_array(L, idx: int, host: HostType, handler) -> Sequence[Any]:
    idx = L.abs_index(idx)
    n = len(host.args) if _is_fixed_tuple(host) else L.raw_len(idx)
    items = []
    with stack.restore_top(L):
        for i in range(n):
            L.raw_geti(idx, i + 1)
            tp = _element_type(host, i)
            items.append(stack.pop_value(L, Any if tp is None else tp, handler))
    if issubclass(host.origin, (list, tuple)):
        return host.origin(items)
    # abstract sequences read back as lists
    return items
