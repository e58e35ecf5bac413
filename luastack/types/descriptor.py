from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from luastack.types.category import Category

# Host type alias: a class or typing annotation
HostTypeLike = Any


class Shape(Enum):
    DYNAMIC = "dynamic"
    ABSENT = "absent"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOAT = "float"
    TEXT_POINTER = "text-pointer"
    BUFFER = "buffer"
    MAPPING = "mapping"
    RECORD = "record"
    SEQUENCE = "sequence"
    CALLABLE = "callable"


CATEGORY_OF_SHAPE = {
    Shape.DYNAMIC: Category.DYNAMIC,
    Shape.ABSENT: Category.NIL,
    Shape.BOOLEAN: Category.BOOLEAN,
    Shape.INTEGER: Category.NUMBER,
    Shape.FLOAT: Category.NUMBER,
    Shape.TEXT_POINTER: Category.STRING,
    Shape.BUFFER: Category.STRING,
    Shape.MAPPING: Category.TABLE,
    Shape.RECORD: Category.TABLE,
    Shape.SEQUENCE: Category.TABLE,
    Shape.CALLABLE: Category.FUNCTION,
}


@dataclass(frozen=True)
class HostType:
    """What the bridge knows about a host type before touching the VM.

    `annotation` is what the caller passed, `origin` the runtime class behind
    it (`list` for `list[int]`) and `args` the annotation's parameters.
    """
    annotation: Any
    origin: Any
    shape: Shape
    args: tuple = ()

    @property
    def category(self) -> Category:
        return CATEGORY_OF_SHAPE[self.shape]

    def __repr__(self):
        return f"HostType({self.annotation!r}, {self.shape.value})"
