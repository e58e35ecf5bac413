"""In-process VM state exposing the Lua C-API stack surface.

Index conventions follow the C API: positive indices are 1-based from the
base of the running function's frame, negative indices count down from the
top (-1 is the top slot), and `REGISTRY_INDEX` addresses the registry table.
An index above the top but inside the frame is *acceptable*: it reads as
"no value" (type `TNONE`) instead of failing.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Callable, List, NoReturn, Optional

from luastack.errors import LuaAPIError, LuaError
from luastack.types.nil import Nil
from luastack.vm import constants as C
from luastack.vm.values import (
    Function,
    Table,
    Userdata,
    bytes_to_number,
    number_to_bytes,
    raw_equals,
    tag_of,
    wrap_integer,
)

logger = logging.getLogger(__name__)

_NONE = object()  # marker for an acceptable index with no value


class LuaState:
    """A single VM stack with its call frames and registry."""

    __slots__ = ("stack", "frames", "registry", "_free_refs", "closed")

    def __init__(self):
        self.stack: List[Any] = []
        # Base (absolute list position) of each active frame; frame 0 is the host
        self.frames: List[int] = [0]
        self.registry = Table()
        self._free_refs: dict[int, list[int]] = {}
        self.closed = False

    def __enter__(self) -> LuaState:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self):
        return f"<LuaState top={self.get_top()} frames={len(self.frames)}>"

    def close(self) -> None:
        self.stack.clear()
        self.frames = [0]
        self.registry = Table()
        self._free_refs.clear()
        self.closed = True

    # --- Index resolution ---
    @property
    def _base(self) -> int:
        return self.frames[-1]

    def _slot(self, idx: int) -> int:
        """Absolute list position of an existing slot."""
        if idx > 0:
            pos = self._base + idx - 1
        elif C.REGISTRY_INDEX < idx < 0:
            pos = len(self.stack) + idx
        else:
            raise LuaAPIError(f"invalid stack index {idx}")
        if pos < self._base or pos >= len(self.stack):
            raise LuaAPIError(f"invalid stack index {idx}")
        return pos

    def _at(self, idx: int) -> Any:
        if idx == C.REGISTRY_INDEX:
            return self.registry
        if idx > 0:
            pos = self._base + idx - 1
            if pos >= len(self.stack):
                return _NONE
            return self.stack[pos]
        return self.stack[self._slot(idx)]

    def _table(self, idx: int) -> Table:
        t = self._at(idx)
        if not isinstance(t, Table):
            raise LuaAPIError(f"table expected at index {idx}, got {self.type_name(self.type(idx))}")
        return t

    def _take(self) -> Any:
        if len(self.stack) <= self._base:
            raise LuaAPIError("not enough elements in the stack")
        return self.stack.pop()

    # --- Basic stack manipulation ---
    def get_top(self) -> int:
        return len(self.stack) - self._base

    def set_top(self, idx: int) -> None:
        if idx >= 0:
            target = self._base + idx
        else:
            target = len(self.stack) + idx + 1
        if target < self._base:
            raise LuaAPIError(f"invalid new top {idx}")
        if target > len(self.stack):
            self.stack.extend([Nil] * (target - len(self.stack)))
        else:
            del self.stack[target:]

    def pop(self, n: int = 1) -> None:
        if n > self.get_top():
            raise LuaAPIError(f"cannot pop {n} values from a stack of {self.get_top()}")
        self.set_top(-n - 1)

    def abs_index(self, idx: int) -> int:
        if idx > 0 or idx <= C.REGISTRY_INDEX:
            return idx
        return self.get_top() + idx + 1

    def check_stack(self, n: int) -> bool:
        return len(self.stack) + n <= C.MAXSTACK

    def push_value(self, idx: int) -> None:
        v = self._at(idx)
        if v is _NONE:
            raise LuaAPIError(f"invalid stack index {idx}")
        self.stack.append(v)

    # --- Push functions (host -> stack) ---
    def push_nil(self) -> None:
        self.stack.append(Nil)

    def push_boolean(self, b: Any) -> None:
        self.stack.append(bool(b))

    def push_integer(self, n: int) -> None:
        self.stack.append(wrap_integer(int(n)))

    def push_number(self, x: float) -> None:
        self.stack.append(float(x))

    def push_lstring(self, data: bytes | bytearray | memoryview) -> bytes:
        s = bytes(data)
        self.stack.append(s)
        return s

    def push_string(self, s: Optional[bytes]) -> Optional[bytes]:
        """Push a zero-terminated string: everything from the first NUL on is
        dropped. Pushing None pushes nil."""
        if s is None:
            self.push_nil()
            return None
        data = bytes(s).split(b"\0", 1)[0]
        self.stack.append(data)
        return data

    def push_function(self, fn: Callable[[LuaState], int], name: str | None = None,
                      upvalues: list[Any] | None = None) -> Function:
        f = Function(fn, name, list(upvalues or ()))
        self.stack.append(f)
        return f

    def new_userdata(self, payload: Any = None) -> Userdata:
        u = Userdata(payload)
        self.stack.append(u)
        return u

    def create_table(self, narr: int = 0, nrec: int = 0) -> Table:
        t = Table()
        self.stack.append(t)
        return t

    def new_table(self) -> Table:
        return self.create_table(0, 0)

    # --- Access functions (stack -> host) ---
    def type(self, idx: int) -> int:
        v = self._at(idx)
        if v is _NONE:
            return C.TNONE
        return tag_of(v)

    def type_name(self, tag: int) -> str:
        return C.TYPE_NAMES[int(tag)]

    def is_none(self, idx: int) -> bool:
        return self.type(idx) == C.TNONE

    def is_nil(self, idx: int) -> bool:
        return self.type(idx) == C.TNIL

    def is_none_or_nil(self, idx: int) -> bool:
        return self.type(idx) <= C.TNIL

    def is_boolean(self, idx: int) -> bool:
        return self.type(idx) == C.TBOOLEAN

    def is_number(self, idx: int) -> bool:
        v = self._at(idx)
        if isinstance(v, bytes):
            return bytes_to_number(v) is not None
        return self.type(idx) == C.TNUMBER

    def is_integer(self, idx: int) -> bool:
        v = self._at(idx)
        return isinstance(v, int) and not isinstance(v, bool)

    def is_string(self, idx: int) -> bool:
        return self.type(idx) in (C.TSTRING, C.TNUMBER)

    def is_table(self, idx: int) -> bool:
        return self.type(idx) == C.TTABLE

    def is_function(self, idx: int) -> bool:
        return self.type(idx) == C.TFUNCTION

    def to_boolean(self, idx: int) -> bool:
        v = self._at(idx)
        return not (v is _NONE or v is Nil or v is False)

    def to_integer(self, idx: int) -> int:
        """Integer value of the slot. Floats are truncated toward zero, numeric
        strings are converted, everything else (and floats outside the integer
        range) reads 0."""
        v = self._at(idx)
        if isinstance(v, bytes):
            v = bytes_to_number(v)
        if isinstance(v, bool) or v is None:
            return 0
        if isinstance(v, int):
            return v
        if isinstance(v, float):
            if not math.isfinite(v):
                return 0
            n = int(v)
            return n if C.MININTEGER <= n <= C.MAXINTEGER else 0
        return 0

    def to_number(self, idx: int) -> float:
        v = self._at(idx)
        if isinstance(v, bytes):
            v = bytes_to_number(v)
        if isinstance(v, bool) or v is None:
            return 0.0
        if isinstance(v, (int, float)):
            return float(v)
        return 0.0

    def to_lstring(self, idx: int) -> Optional[bytes]:
        """Bytes of a string slot. A number slot is converted to a string in
        place, as the C API does; other types give None."""
        v = self._at(idx)
        if isinstance(v, bytes):
            return v
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            s = number_to_bytes(v)
            self.stack[self._slot(idx)] = s
            return s
        return None

    to_string = to_lstring

    def to_userdata(self, idx: int) -> Any:
        v = self._at(idx)
        return v.payload if isinstance(v, Userdata) else None

    def raw_equal(self, idx1: int, idx2: int) -> bool:
        a, b = self._at(idx1), self._at(idx2)
        if a is _NONE or b is _NONE:
            return False
        return raw_equals(a, b)

    def raw_len(self, idx: int) -> int:
        v = self._at(idx)
        if isinstance(v, Table):
            return v.length()
        if isinstance(v, bytes):
            return len(v)
        return 0

    # --- Tables ---
    def raw_get(self, idx: int) -> int:
        t = self._table(idx)
        k = self._take()
        v = t.get(k)
        self.stack.append(v)
        return tag_of(v)

    def raw_geti(self, idx: int, n: int) -> int:
        v = self._table(idx).get(n)
        self.stack.append(v)
        return tag_of(v)

    def raw_set(self, idx: int) -> None:
        t = self._table(idx)
        v = self._take()
        k = self._take()
        t.set(k, v)

    def raw_seti(self, idx: int, n: int) -> None:
        t = self._table(idx)
        t.set(n, self._take())

    def get_field(self, idx: int, name: str | bytes) -> int:
        key = name.encode("utf-8") if isinstance(name, str) else bytes(name)
        v = self._table(idx).get(key)
        self.stack.append(v)
        return tag_of(v)

    def set_field(self, idx: int, name: str | bytes) -> None:
        key = name.encode("utf-8") if isinstance(name, str) else bytes(name)
        t = self._table(idx)
        t.set(key, self._take())

    def next(self, idx: int) -> bool:
        """Pop a key and push the next key/value pair of the table at `idx`.
        Returns False (pushing nothing) once the traversal is done."""
        t = self._table(idx)
        entry = t.next(self._take())
        if entry is None:
            return False
        self.stack.extend(entry)
        return True

    # --- Calls and errors ---
    def call(self, nargs: int, nresults: int) -> None:
        func_pos = len(self.stack) - nargs - 1
        if nargs < 0 or func_pos < self._base:
            raise LuaAPIError("not enough elements in the stack")
        f = self.stack[func_pos]
        if not isinstance(f, Function):
            self.raise_error(f"attempt to call a {self.type_name(tag_of(f))} value")
        self.frames.append(func_pos + 1)
        try:
            n = f.fn(self) or 0
            if n > self.get_top():
                raise LuaAPIError(f"function returned {n} results but left {self.get_top()}")
            results = self.stack[len(self.stack) - n:] if n else []
        finally:
            self.frames.pop()
        del self.stack[func_pos:]
        if nresults == C.MULTRET:
            self.stack.extend(results)
        else:
            results = results[:nresults]
            results.extend([Nil] * (nresults - len(results)))
            self.stack.extend(results)

    def pcall(self, nargs: int, nresults: int) -> int:
        """Call in protected mode. On error the function and its arguments are
        replaced by the error value and ERRRUN is returned."""
        func_pos = len(self.stack) - nargs - 1
        depth = len(self.frames)
        try:
            self.call(nargs, nresults)
        except LuaError as err:
            del self.frames[depth:]
            del self.stack[max(func_pos, self._base):]
            self.stack.append(err.value)
            logger.debug("protected call failed: %s", err.message)
            return C.ERRRUN
        return C.OK

    def error(self) -> NoReturn:
        """Raise the value on top of the stack as a VM error."""
        raise LuaError(self._take())

    def raise_error(self, message: str) -> NoReturn:
        """Raise a VM error carrying `message`; the stack is left untouched."""
        logger.debug("VM error: %s", message)
        raise LuaError(message.encode("utf-8"))

    # --- References ---
    def ref(self, t: int = C.REGISTRY_INDEX) -> int:
        table = self._table(self.abs_index(t))
        v = self._take()
        if v is Nil:
            return C.REFNIL
        free = self._free_refs.setdefault(id(table), [])
        r = free.pop() if free else table.length() + 1
        table.set(r, v)
        return r

    def unref(self, t: int, r: int) -> None:
        if r < 0:
            return
        table = self._table(t)
        table.set(r, Nil)
        self._free_refs.setdefault(id(table), []).append(r)
