from __future__ import annotations

# Basic type tags, numbered as in lua.h
TNONE = -1
TNIL = 0
TBOOLEAN = 1
TLIGHTUSERDATA = 2
TNUMBER = 3
TSTRING = 4
TTABLE = 5
TFUNCTION = 6
TUSERDATA = 7
TTHREAD = 8

TYPE_NAMES = {
    TNONE: "no value",
    TNIL: "nil",
    TBOOLEAN: "boolean",
    TLIGHTUSERDATA: "userdata",
    TNUMBER: "number",
    TSTRING: "string",
    TTABLE: "table",
    TFUNCTION: "function",
    TUSERDATA: "userdata",
    TTHREAD: "thread",
}

# Status codes
OK = 0
YIELD = 1
ERRRUN = 2
ERRERR = 5

MULTRET = -1

# Stack limits and pseudo-indices
MAXSTACK = 1_000_000
REGISTRY_INDEX = -MAXSTACK - 1000

# Reference system (luaL_ref)
NOREF = -2
REFNIL = -1

# lua_Integer is a signed 64-bit integer
INTEGER_BITS = 64
MAXINTEGER = (1 << (INTEGER_BITS - 1)) - 1
MININTEGER = -(1 << (INTEGER_BITS - 1))
