"""Classification of host types into VM value categories.

The rules are checked in order and the first match wins:

    dynamic   LuaObject (and subclasses), typing.Any
    nil       NilType, None
    boolean   bool, numpy.bool_
    number    integral types (int, IntEnum, numpy integers), then real types
              (float, numpy floating types, Fraction)
    string    CString (zero-terminated), str / bytes / bytearray / memoryview
    table     mappings, records (dataclasses, NamedTuple), sequences
    function  anything whose instances are callable

bool is an int subclass and would be a number if it were checked later;
likewise a NamedTuple is a sequence, but the record rule comes first.
"""

from __future__ import annotations

import dataclasses
import typing
from collections.abc import Callable, Mapping, Sequence
from numbers import Integral, Real
from types import NoneType
from typing import Any, Iterator

import numpy as np

from luastack.errors import UnsupportedTypeError
from luastack.objects import LuaObject
from luastack.types.category import Category
from luastack.types.cstring import CString
from luastack.types.descriptor import HostType, Shape
from luastack.types.nil import NilType


def _is_record(o: type) -> bool:
    return dataclasses.is_dataclass(o) or (issubclass(o, tuple) and hasattr(o, "_fields"))


RULES: tuple[tuple[Callable[[type], bool], Shape], ...] = (
    (lambda o: issubclass(o, LuaObject), Shape.DYNAMIC),
    (lambda o: issubclass(o, (NilType, NoneType)), Shape.ABSENT),
    (lambda o: issubclass(o, (bool, np.bool_)), Shape.BOOLEAN),
    (lambda o: issubclass(o, (Integral, np.integer)), Shape.INTEGER),
    (lambda o: issubclass(o, (Real, np.floating)), Shape.FLOAT),
    (lambda o: issubclass(o, CString), Shape.TEXT_POINTER),
    (lambda o: issubclass(o, (str, bytes, bytearray, memoryview)), Shape.BUFFER),
    (lambda o: issubclass(o, Mapping), Shape.MAPPING),
    (_is_record, Shape.RECORD),
    (lambda o: issubclass(o, Sequence), Shape.SEQUENCE),
    (lambda o: issubclass(o, Callable), Shape.CALLABLE),
)

_cache: dict[Any, HostType] = {}


def _describe(tp: Any, operation: str) -> HostType:
    if tp is Any:
        return HostType(tp, Any, Shape.DYNAMIC)
    if tp is None:
        tp = NoneType
    origin = typing.get_origin(tp) or tp
    args = typing.get_args(tp)
    if not isinstance(origin, type):
        raise UnsupportedTypeError(tp, operation)
    for matches, shape in RULES:
        if matches(origin):
            return HostType(tp, origin, shape, args)
    raise UnsupportedTypeError(tp, operation)


def _nested_types(host: HostType) -> Iterator[Any]:
    """Element, key, value, parameter and field types a conversion of `host`
    will convert in turn."""
    for arg in host.args:
        if arg is Ellipsis:
            continue
        if isinstance(arg, (list, tuple)):
            # Callable[[A, B], R] parameters; tuple[()]
            yield from arg
        else:
            yield arg
    if host.shape is Shape.RECORD:
        hints = typing.get_type_hints(host.origin)
        if dataclasses.is_dataclass(host.origin):
            names = [f.name for f in dataclasses.fields(host.origin)]
        else:
            names = host.origin._fields
        yield from (hints[name] for name in names if name in hints)


def describe(tp: Any, operation: str = "conversion") -> HostType:
    """Build the HostType for `tp`, raising UnsupportedTypeError when no
    category applies to it or to any type nested in it. Descriptors are
    returned unchanged."""
    if isinstance(tp, HostType):
        return tp
    try:
        return _cache[tp]
    except KeyError:
        pass
    except TypeError:
        # unhashable annotation
        host = _describe(tp, operation)
        for nested in _nested_types(host):
            describe(nested, operation)
        return host
    host = _describe(tp, operation)
    # cached first so that self-referencing records terminate
    _cache[tp] = host
    try:
        for nested in _nested_types(host):
            describe(nested, operation)
    except UnsupportedTypeError:
        del _cache[tp]
        raise
    return host


def classify(tp: Any) -> Category:
    """The VM category a value of host type `tp` occupies."""
    return describe(tp).category
