from __future__ import annotations

import weakref
from typing import Any

from luastack.errors import LuaAPIError
from luastack.types.category import Category
from luastack.vm.constants import NOREF, REFNIL, REGISTRY_INDEX


def _unref(L, ref: int) -> None:
    if not L.closed:
        L.unref(REGISTRY_INDEX, ref)


class LuaObject:
    """A reference to whatever value occupied a stack slot, of any category.

    The value is kept alive in the registry until `release` is called or the
    wrapper is collected, so the slot it was read from may be popped freely.
    """

    __slots__ = ("state", "ref", "_finalizer", "__weakref__")

    def __init__(self, L, idx: int):
        L.push_value(idx)
        self.state = L
        self.ref = L.ref(REGISTRY_INDEX)
        self._finalizer = weakref.finalize(self, _unref, L, self.ref)

    def push(self) -> None:
        """Push the referenced value onto the owning state's stack."""
        if self.ref == NOREF:
            raise LuaAPIError("LuaObject used after release")
        if self.ref == REFNIL:
            self.state.push_nil()
        else:
            self.state.raw_geti(REGISTRY_INDEX, self.ref)

    @property
    def category(self) -> Category:
        L = self.state
        self.push()
        try:
            return Category(L.type(-1))
        finally:
            L.pop(1)

    @property
    def type_name(self) -> str:
        return self.category.label

    def to(self, tp: Any) -> Any:
        """Read the referenced value as host type `tp`."""
        from luastack.stack import pop_value

        self.push()
        return pop_value(self.state, tp)

    def release(self) -> None:
        """Drop the registry reference now instead of when the wrapper is collected."""
        if self.ref != NOREF:
            self._finalizer()
            self.ref = NOREF

    def __eq__(self, other):
        if not isinstance(other, LuaObject):
            return NotImplemented
        if other.state is not self.state:
            return False
        L = self.state
        self.push()
        other.push()
        try:
            return L.raw_equal(-1, -2)
        finally:
            L.pop(2)

    __hash__ = None

    def __repr__(self):
        if self.ref == NOREF:
            return "LuaObject(<released>)"
        return f"LuaObject({self.type_name})"
