from __future__ import annotations

# Public surface for the VM package
from . import constants
from .constants import REGISTRY_INDEX, MULTRET
from .state import LuaState
from .values import Function, Table, Userdata


def new_state() -> LuaState:
    return LuaState()


__all__ = [
    "constants",
    "REGISTRY_INDEX",
    "MULTRET",
    "LuaState",
    "Function",
    "Table",
    "Userdata",
    "new_state",
]
