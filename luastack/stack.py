"""Conversion between Python values and VM stack slots.

Conversion goes both ways, by category, checked in this order:

    dynamic   LuaObject (any category), typing.Any (natural host value)
    nil       Nil / None
    boolean   bool, numpy.bool_
    number    integral types, then real types
    string    CString, str, bytes, bytearray
    table     mappings, dataclasses / NamedTuple records, sequences
    function  callables

Even though bool is an int, a bool is pushed and read as a boolean: the
boolean rule comes first. Every operation takes the state `L` explicitly.
"""

from __future__ import annotations

import math
from contextlib import contextmanager
from typing import Any, Callable, Iterator

from luastack import config
from luastack.classify import describe
from luastack.conversions.arrays import get_array, push_array
from luastack.conversions.assocarrays import get_mapping, push_mapping
from luastack.conversions.functions import get_function, push_function
from luastack.conversions.structs import get_record, push_record
from luastack.debug_utils.stack_guard import StackGuard
from luastack.errors import LuaAPIError
from luastack.mismatch import MismatchHandler, default_type_mismatch
from luastack.objects import LuaObject
from luastack.types.category import Category
from luastack.types.descriptor import HostType, HostTypeLike, Shape
from luastack.types.nil import Nil, NilType
from luastack.vm import constants as C


@contextmanager
def restore_top(L) -> Iterator[int]:
    """Drop anything a failing block left above the entry depth."""
    top = L.get_top()
    try:
        yield top
    except BaseException:
        if not L.closed and L.get_top() > top:
            L.set_top(top)
        raise


# --- Push ---
def _push_nil(L, value: Any, host: HostType) -> None:
    L.push_nil()


def _push_boolean(L, value: Any, host: HostType) -> None:
    L.push_boolean(bool(value))


def _push_integer(L, value: Any, host: HostType) -> None:
    n = int(value)
    if C.MININTEGER <= n <= C.MAXINTEGER:
        L.push_integer(n)
    else:
        L.push_number(float(n))


def _push_float(L, value: Any, host: HostType) -> None:
    L.push_number(float(value))


def _push_buffer(L, value: Any, host: HostType) -> None:
    if isinstance(value, str):
        value = value.encode(config.get_string_encoding())
    L.push_lstring(value)


def _push_text_pointer(L, value: Any, host: HostType) -> None:
    L.push_string(value)


def _push_dynamic(L, value: Any, host: HostType) -> None:
    if isinstance(value, LuaObject):
        if value.state is not L:
            raise LuaAPIError("LuaObject belongs to a different state")
        value.push()
    else:
        # typing.Any: dispatch on the value itself
        push_value(L, value)


_PUSHERS: dict[Shape, Callable[[Any, Any, HostType], None]] = {
    Shape.DYNAMIC: _push_dynamic,
    Shape.ABSENT: _push_nil,
    Shape.BOOLEAN: _push_boolean,
    Shape.INTEGER: _push_integer,
    Shape.FLOAT: _push_float,
    Shape.TEXT_POINTER: _push_text_pointer,
    Shape.BUFFER: _push_buffer,
    Shape.MAPPING: push_mapping,
    Shape.RECORD: push_record,
    Shape.SEQUENCE: push_array,
    Shape.CALLABLE: push_function,
}


def push_value(L, value: Any, tp: HostTypeLike = None) -> None:
    """Push `value` as one slot.

    Params:
        L = state to push to
        value = value to push
        tp = host type to convert as; defaults to type(value)
    """
    host = describe(type(value) if tp is None else tp, "push")
    pusher = _PUSHERS[host.shape]
    if not config.stack_checks_enabled():
        with restore_top(L):
            pusher(L, value, host)
        return
    with StackGuard(L, 1, f"push of {host!r}"):
        with restore_top(L):
            pusher(L, value, host)


# --- Get ---
def _get_natural(L, idx: int) -> Any:
    tag = L.type(idx)
    if tag <= C.TNIL:
        return None
    if tag == C.TBOOLEAN:
        return L.to_boolean(idx)
    if tag == C.TNUMBER:
        return L.to_integer(idx) if L.is_integer(idx) else L.to_number(idx)
    if tag == C.TSTRING:
        return L.to_lstring(idx).decode(config.get_string_encoding())
    return LuaObject(L, idx)


def _get_dynamic(L, idx: int, host: HostType, handler: MismatchHandler) -> Any:
    if host.origin is Any:
        return _get_natural(L, idx)
    return host.origin(L, idx)


def _get_absent(L, idx: int, host: HostType, handler: MismatchHandler) -> Any:
    return Nil if issubclass(host.origin, NilType) else None


def _get_boolean(L, idx: int, host: HostType, handler: MismatchHandler) -> Any:
    b = L.to_boolean(idx)
    return b if host.origin is bool else host.origin(b)


def _get_integer(L, idx: int, host: HostType, handler: MismatchHandler) -> Any:
    if L.is_integer(idx):
        n = L.to_integer(idx)
    else:
        # float slot: truncated toward zero, not limited to 64 bits
        x = L.to_number(idx)
        n = int(x) if math.isfinite(x) else 0
    return n if host.origin is int else host.origin(n)


def _get_float(L, idx: int, host: HostType, handler: MismatchHandler) -> Any:
    x = L.to_number(idx)
    return x if host.origin is float else host.origin(x)


def _get_buffer(L, idx: int, host: HostType, handler: MismatchHandler) -> Any:
    data = L.to_lstring(idx)
    if issubclass(host.origin, str):
        text = data.decode(config.get_string_encoding())
        return text if host.origin is str else host.origin(text)
    if host.origin is memoryview:
        return memoryview(data)
    # bytes are immutable, so sharing the VM's copy is as good as duplicating it
    return data if host.origin is bytes else host.origin(data)


def _get_text_pointer(L, idx: int, host: HostType, handler: MismatchHandler) -> Any:
    return host.origin(L.to_lstring(idx).split(b"\0", 1)[0])


_GETTERS: dict[Shape, Callable[[Any, int, HostType, MismatchHandler], Any]] = {
    Shape.DYNAMIC: _get_dynamic,
    Shape.ABSENT: _get_absent,
    Shape.BOOLEAN: _get_boolean,
    Shape.INTEGER: _get_integer,
    Shape.FLOAT: _get_float,
    Shape.TEXT_POINTER: _get_text_pointer,
    Shape.BUFFER: _get_buffer,
    Shape.MAPPING: get_mapping,
    Shape.RECORD: get_record,
    Shape.SEQUENCE: get_array,
    Shape.CALLABLE: get_function,
}


def _get_value(L, idx: int, host: HostType, handler: MismatchHandler) -> Any:
    if host.shape is not Shape.DYNAMIC:
        tag = L.type(idx)
        expected = host.category
        if tag != expected:
            return handler(L, Category(tag), expected)
    return _GETTERS[host.shape](L, idx, host, handler)


def get_value(L, idx: int, tp: HostTypeLike,
              type_mismatch_handler: MismatchHandler = default_type_mismatch) -> Any:
    """Read the slot at `idx` as host type `tp` without changing the stack depth.

    Params:
        L = state to read from
        idx = stack index of the value
        tp = host type of the result
        type_mismatch_handler = called as handler(L, actual, expected) when the
            slot's category is not the one `tp` requires; if it returns, its
            return value is the result.
    """
    host = describe(tp, "read")
    if not config.stack_checks_enabled():
        return _get_value(L, idx, host, type_mismatch_handler)
    with StackGuard(L, 0, f"read of {host!r}"):
        return _get_value(L, idx, host, type_mismatch_handler)


def pop_value(L, tp: HostTypeLike,
              type_mismatch_handler: MismatchHandler = default_type_mismatch) -> Any:
    """Same as get_value(L, -1, tp, type_mismatch_handler), then pop one slot.

    The slot is popped only when the read succeeds.
    """
    value = get_value(L, -1, tp, type_mismatch_handler)
    L.pop(1)
    return value
