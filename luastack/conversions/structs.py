"""Records (dataclasses and NamedTuple classes) <-> tables keyed by field name.

A field missing from the table (nil) is an error unless the field has a
default, in which case the default is used.
"""

from __future__ import annotations

import dataclasses
import typing
from functools import lru_cache
from typing import Any, NamedTuple

from luastack import stack
from luastack.types.descriptor import HostType
from luastack.vm import constants as C


class RecordField(NamedTuple):
    name: str
    annotation: Any
    init: bool
    has_default: bool


@lru_cache(maxsize=None)
def record_fields(cls: type) -> tuple[RecordField, ...]:
    hints = typing.get_type_hints(cls)
    if dataclasses.is_dataclass(cls):
        return tuple(
            RecordField(
                f.name,
                hints.get(f.name),
                f.init,
                f.default is not dataclasses.MISSING or f.default_factory is not dataclasses.MISSING,
            )
            for f in dataclasses.fields(cls)
        )
    defaults = getattr(cls, "_field_defaults", {})
    return tuple(RecordField(name, hints.get(name), True, name in defaults) for name in cls._fields)


def push_record(L, value: Any, host: HostType) -> None:
    fields = record_fields(host.origin)
    L.create_table(0, len(fields))
    for field in fields:
        stack.push_value(L, getattr(value, field.name), field.annotation)
        L.set_field(-2, field.name)


def get_record(L, idx: int, host: HostType, handler) -> Any:
    idx = L.abs_index(idx)
    kwargs = {}
    with stack.restore_top(L):
        for field in record_fields(host.origin):
            if not field.init:
                continue
            if L.get_field(idx, field.name) == C.TNIL and field.has_default:
                L.pop(1)
                continue
            tp = Any if field.annotation is None else field.annotation
            kwargs[field.name] = stack.pop_value(L, tp, handler)
    return host.origin(**kwargs)
