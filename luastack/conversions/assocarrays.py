from __future__ import annotations

from typing import Any, Mapping

from luastack import stack
from luastack.types.descriptor import HostType


def _key_value_types(host: HostType) -> tuple[Any, Any]:
    if len(host.args) == 2:
        return host.args
    return None, None


def push_mapping(L, value: Mapping[Any, Any], host: HostType) -> None:
    ktp, vtp = _key_value_types(host)
    L.create_table(0, len(value))
    for k, v in value.items():
        stack.push_value(L, k, ktp)
        stack.push_value(L, v, vtp)
        L.raw_set(-3)


def get_mapping(L, idx: int, host: HostType, handler) -> Mapping[Any, Any]:
    """Read every key/value pair of the table at `idx`. Keys and values
    without annotation arguments are read as natural host values."""
    ktp, vtp = _key_value_types(host)
    idx = L.abs_index(idx)
    result = {}
    with stack.restore_top(L):
        L.push_nil()
        while L.next(idx):
            value = stack.get_value(L, -1, Any if vtp is None else vtp, handler)
            key = stack.get_value(L, -2, Any if ktp is None else ktp, handler)
            L.pop(1)
            result[key] = value
    if issubclass(host.origin, dict) and host.origin is not dict:
        return host.origin(result)
    return result
