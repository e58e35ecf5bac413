from __future__ import annotations

from enum import IntEnum

from luastack.vm import constants as C


class Category(IntEnum):
    """VM value categories.

    The VM members share the numeric tags reported by `LuaState.type`, so a
    category compares equal to the tag of a slot holding such a value.
    `DYNAMIC` is host-only; `NONE`, `LIGHTUSERDATA` and `THREAD` are only ever
    reported by the VM.
    """
    DYNAMIC = -2
    NONE = C.TNONE
    NIL = C.TNIL
    BOOLEAN = C.TBOOLEAN
    LIGHTUSERDATA = C.TLIGHTUSERDATA
    NUMBER = C.TNUMBER
    STRING = C.TSTRING
    TABLE = C.TTABLE
    FUNCTION = C.TFUNCTION
    USERDATA = C.TUSERDATA
    THREAD = C.TTHREAD

    @property
    def label(self) -> str:
        if self is Category.DYNAMIC:
            return "any"
        return C.TYPE_NAMES[int(self)]

