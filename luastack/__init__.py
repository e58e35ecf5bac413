# Core type aliases and public surface of luastack.
#
# A host type is anything `describe` accepts: a class (int, str, a dataclass,
# LuaObject, ...) or a typing annotation (list[int], dict[str, float],
# Callable[[int], str], Any). Values on the Python side are plain Python
# objects; the VM side is reached only through an explicit LuaState handle.

import logging

from luastack.errors import (
    LuastackError,
    UnsupportedTypeError,
    TypeMismatchError,
    LuaError,
    LuaAPIError,
    StackImbalanceError,
)
from luastack.types import Nil, NilType, CString, Category
from luastack.types.descriptor import HostTypeLike
from luastack.vm import LuaState, new_state
from luastack.stack import push_value, get_value, pop_value
from luastack.classify import classify, describe
from luastack.mismatch import default_type_mismatch, raise_type_mismatch
from luastack.objects import LuaObject
from luastack.conversions.functions import BoundFunction

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "HostTypeLike",
    "LuastackError",
    "UnsupportedTypeError",
    "TypeMismatchError",
    "LuaError",
    "LuaAPIError",
    "StackImbalanceError",
    "Nil",
    "NilType",
    "CString",
    "Category",
    "LuaState",
    "new_state",
    "push_value",
    "get_value",
    "pop_value",
    "classify",
    "describe",
    "default_type_mismatch",
    "raise_type_mismatch",
    "LuaObject",
    "BoundFunction",
]
