from __future__ import annotations

from typing import Any


class LuastackError(Exception):
    """ Base class for all luastack errors"""
    pass


class UnsupportedTypeError(LuastackError, TypeError):
    """ Raised when a host type maps to no VM category"""

    def __init__(self, tp: Any, operation: str = "conversion"):
        name = getattr(tp, "__qualname__", None) or repr(tp)
        super().__init__(f"Unsupported type `{name}` in stack {operation}")
        self.type = tp
        self.operation = operation


class TypeMismatchError(LuastackError, TypeError):
    """ Raised by the host-side mismatch strategy"""

    def __init__(self, actual, expected):
        super().__init__(f"expected {expected.label}, got {actual.label}")
        self.actual = actual
        self.expected = expected


class LuaError(LuastackError):
    """ An error value unwinding through the VM.

    `value` is the VM value that was raised (usually the message as bytes).
    """

    def __init__(self, value: Any):
        self.value = value
        super().__init__(self.message)

    @property
    def message(self) -> str:
        if isinstance(self.value, bytes):
            return self.value.decode("utf-8", errors="replace")
        return repr(self.value)


class LuaAPIError(LuastackError):
    """ Raised when the stack API is used incorrectly"""


class StackImbalanceError(LuastackError, AssertionError):
    """ Raised when an operation leaves the stack at an unexpected depth"""
