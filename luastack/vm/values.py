"""Value representation used inside the VM state.

Every live stack slot holds one of: `Nil`, `bool`, `int` (integer subtype),
`float` (float subtype), `bytes` (string), `Table`, `Function` or `Userdata`.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Optional

from luastack.errors import LuaAPIError
from luastack.types.nil import Nil, NilType
from luastack.vm import constants as C


@dataclass(eq=False)
class Function:
    """A host function callable by the VM (lua_CFunction).

    `fn` receives the state with its arguments at positions 1..n and returns
    the number of results it left on top of the stack.
    """
    fn: Callable[[Any], int]
    name: str | None = None
    upvalues: list[Any] = field(default_factory=list)

    def __repr__(self):
        return f"<function {self.name or hex(id(self))}>"


@dataclass(eq=False)
class Userdata:
    payload: Any = None

    def __repr__(self):
        return f"<userdata {type(self.payload).__name__}>"


def _key(k: Any) -> tuple[int, Any]:
    # true and 1 are distinct keys; 1 and 1.0 are the same key
    if k is Nil:
        raise LuaAPIError("table index is nil")
    if isinstance(k, bool):
        return (C.TBOOLEAN, k)
    if isinstance(k, float):
        if math.isnan(k):
            raise LuaAPIError("table index is NaN")
        if k.is_integer():
            return (C.TNUMBER, int(k))
        return (C.TNUMBER, k)
    if isinstance(k, int):
        return (C.TNUMBER, k)
    if isinstance(k, bytes):
        return (C.TSTRING, k)
    return (tag_of(k), id(k))


class Table:
    __slots__ = ("_entries", "_keys", "_pos")

    def __init__(self):
        # normalised key -> (original key, value)
        self._entries: dict[tuple[int, Any], tuple[Any, Any]] = {}
        # traversal order; a removed key keeps its position until the next compaction
        self._keys: list[tuple[int, Any]] = []
        self._pos: dict[tuple[int, Any], int] = {}

    def get(self, k: Any) -> Any:
        if k is Nil:
            return Nil
        if isinstance(k, float) and math.isnan(k):
            return Nil
        entry = self._entries.get(_key(k))
        return Nil if entry is None else entry[1]

    def set(self, k: Any, v: Any) -> None:
        nk = _key(k)
        if isinstance(k, float) and k.is_integer():
            k = int(k)
        if v is Nil:
            self._entries.pop(nk, None)
            return
        if nk not in self._pos:
            # compaction renumbers positions, so only a new key triggers it
            if len(self._keys) > 2 * len(self._entries) + 8:
                self._compact()
            self._pos[nk] = len(self._keys)
            self._keys.append(nk)
        self._entries[nk] = (k, v)

    def _compact(self) -> None:
        self._keys = [nk for nk in self._keys if nk in self._entries]
        self._pos = {nk: i for i, nk in enumerate(self._keys)}

    def length(self) -> int:
        """Border of the table: n such that t[n] is not nil and t[n+1] is."""
        n = 0
        while (C.TNUMBER, n + 1) in self._entries:
            n += 1
        return n

    def next(self, k: Any) -> Optional[tuple[Any, Any]]:
        if k is Nil:
            pos = 0
        else:
            try:
                pos = self._pos[_key(k)] + 1
            except KeyError:
                raise LuaAPIError("invalid key to 'next'") from None
        while pos < len(self._keys):
            entry = self._entries.get(self._keys[pos])
            if entry is not None:
                return entry
            pos += 1
        return None

    def items(self) -> Iterator[tuple[Any, Any]]:
        return iter(list(self._entries.values()))

    def __len__(self):
        return len(self._entries)

    def __repr__(self):
        return f"<table {hex(id(self))}>"


def tag_of(v: Any) -> int:
    if v is Nil or isinstance(v, NilType):
        return C.TNIL
    if isinstance(v, bool):
        return C.TBOOLEAN
    if isinstance(v, (int, float)):
        return C.TNUMBER
    if isinstance(v, bytes):
        return C.TSTRING
    if isinstance(v, Table):
        return C.TTABLE
    if isinstance(v, Function):
        return C.TFUNCTION
    if isinstance(v, Userdata):
        return C.TUSERDATA
    raise LuaAPIError(f"value of host type {type(v).__name__} cannot live on the VM stack")


def raw_equals(a: Any, b: Any) -> bool:
    ta, tb = tag_of(a), tag_of(b)
    if ta != tb:
        return False
    if ta in (C.TNIL, C.TBOOLEAN, C.TNUMBER, C.TSTRING):
        return a == b
    return a is b


def number_to_bytes(v: int | float) -> bytes:
    if isinstance(v, int):
        return str(v).encode("ascii")
    if math.isinf(v):
        return b"inf" if v > 0 else b"-inf"
    if math.isnan(v):
        return b"nan" if math.copysign(1.0, v) > 0 else b"-nan"
    s = "%.14g" % v
    if all(c in "-0123456789" for c in s):
        s += ".0"
    return s.encode("ascii")


def bytes_to_number(s: bytes) -> int | float | None:
    text = s.decode("ascii", errors="replace").strip()
    try:
        return int(text, 0) if text.lower().startswith(("0x", "-0x")) else int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        return None


def wrap_integer(n: int) -> int:
    """Two's complement wrap of `n` to the VM's integer width."""
    n &= (1 << C.INTEGER_BITS) - 1
    if n > C.MAXINTEGER:
        n -= 1 << C.INTEGER_BITS
    return n
