from enum import IntEnum
from typing import Any

import numpy as np
import pytest

from luastack import CString, LuaObject, Nil, NilType, get_value, pop_value, push_value
from luastack.types.category import Category
from luastack.vm import constants as C


class Color(IntEnum):
    RED = 1
    GREEN = 2


def test_primitives_scenario(L):
    push_value(L, 123)
    assert L.type(-1) == Category.NUMBER
    assert pop_value(L, int) == 123

    push_value(L, 1.23)
    assert L.is_number(-1)
    assert pop_value(L, float) == 1.23

    push_value(L, "foobar")
    assert L.type(-1) == Category.STRING
    assert pop_value(L, str) == "foobar"

    push_value(L, True)
    assert L.is_boolean(-1)
    assert pop_value(L, bool) is True

    cstr = CString(b"hi")
    push_value(L, cstr)
    assert L.is_string(-1)
    assert pop_value(L, CString) == cstr

    assert L.get_top() == 0, "bad pop_value semantics for primitives"


def test_push_adds_exactly_one_slot(L):
    values = [Nil, None, False, 7, 2.5, "s", b"b", CString(b"c"), [1, 2], {"k": 1}, len]
    for n, value in enumerate(values, 1):
        push_value(L, value)
        assert L.get_top() == n


def test_get_leaves_depth_unchanged(L):
    push_value(L, 42)
    push_value(L, "x")
    assert get_value(L, -2, int) == 42
    assert get_value(L, 1, int) == 42
    assert get_value(L, -1, str) == "x"
    assert get_value(L, 2, str) == "x"
    assert L.get_top() == 2


def test_pop_removes_exactly_one_slot(L):
    push_value(L, 1)
    push_value(L, [1, 2, 3])
    push_value(L, "top")
    assert pop_value(L, LuaObject).category is Category.STRING
    assert L.get_top() == 2
    assert pop_value(L, list[int]) == [1, 2, 3]
    assert L.get_top() == 1
    assert pop_value(L, Any) == 1
    assert L.get_top() == 0


def test_embedded_nul_in_buffers(L):
    data = b"foo\0bar"
    push_value(L, data)
    assert L.raw_len(-1) == 7
    out = pop_value(L, bytes)
    assert out == data
    assert len(out) == 7

    push_value(L, "a\0b")
    assert pop_value(L, str) == "a\0b"


def test_cstring_stops_at_first_nul(L):
    push_value(L, CString(b"head\0tail"))
    assert L.raw_len(-1) == 4
    assert pop_value(L, bytes) == b"head"


def test_reading_cstring_gives_bytes_up_to_nul(L):
    push_value(L, b"abc\0def")
    s = pop_value(L, CString)
    assert isinstance(s, CString)
    assert s == b"abc"


def test_cstring_from_text():
    assert CString("héllo") == "héllo".encode("utf-8")
    assert CString(b"x\0y").terminated() == b"x"


def test_integer_and_float_subtypes(L):
    push_value(L, 5)
    assert L.is_integer(-1)
    push_value(L, 5.0)
    assert not L.is_integer(-1)
    push_value(L, 3, float)
    assert not L.is_integer(-1)
    assert pop_value(L, float) == 3.0
    assert pop_value(L, float) == 5.0
    assert pop_value(L, float) == 5.0


def test_integer_read_truncates_toward_zero(L):
    push_value(L, 5.7)
    assert pop_value(L, int) == 5
    push_value(L, -5.7)
    assert pop_value(L, int) == -5


def test_integers_outside_the_vm_range_are_pushed_as_floats(L):
    big = 2 ** 70
    push_value(L, big)
    assert L.type(-1) == Category.NUMBER
    assert not L.is_integer(-1)
    assert pop_value(L, float) == float(big)

    push_value(L, C.MAXINTEGER)
    assert L.is_integer(-1)
    assert pop_value(L, int) == C.MAXINTEGER


@pytest.mark.parametrize("big", [2 ** 63, 2 ** 70, -(2 ** 64)])
def test_integers_outside_the_vm_range_read_back_whole(L, big):
    push_value(L, big)
    assert pop_value(L, int) == big
    assert L.get_top() == 0


def test_out_of_range_float_does_not_wrap_through_the_vm(L):
    push_value(L, 2 ** 63)
    # the VM-level conversion fails rather than flipping the sign
    assert L.to_integer(-1) == 0
    with pytest.raises(OverflowError):
        pop_value(L, np.int64)


def test_bool_is_pushed_as_boolean(L):
    push_value(L, True)
    assert L.type(-1) == Category.BOOLEAN
    push_value(L, False)
    assert pop_value(L, bool) is False
    assert pop_value(L, bool) is True


def test_numpy_scalars(L):
    push_value(L, np.int16(7))
    assert L.is_integer(-1)
    out = pop_value(L, np.int16)
    assert isinstance(out, np.int16) and out == 7

    push_value(L, np.float32(0.5))
    assert pop_value(L, np.float32) == np.float32(0.5)

    push_value(L, np.bool_(True))
    assert L.type(-1) == Category.BOOLEAN
    assert pop_value(L, np.bool_) == np.True_


def test_int_enum(L):
    push_value(L, Color.GREEN)
    assert L.is_integer(-1)
    assert pop_value(L, Color) is Color.GREEN


def test_nil_and_none(L):
    push_value(L, Nil)
    assert L.is_nil(-1)
    assert pop_value(L, NilType) is Nil

    push_value(L, None)
    assert L.is_nil(-1)
    assert pop_value(L, type(None)) is None
    assert L.get_top() == 0


def test_bytearray_and_str_subclass(L):
    class Name(str):
        pass

    push_value(L, bytearray(b"xy"))
    out = pop_value(L, bytearray)
    assert isinstance(out, bytearray) and out == bytearray(b"xy")

    push_value(L, Name("bob"))
    out = pop_value(L, Name)
    assert type(out) is Name and out == "bob"


def test_any_reads_natural_values(L):
    for value in (None, True, 3, 2.5, "text"):
        push_value(L, value)
        assert pop_value(L, Any) == value
    push_value(L, {"a": 1})
    obj = pop_value(L, Any)
    assert isinstance(obj, LuaObject)
    assert obj.category is Category.TABLE


def test_push_with_explicit_type_converts(L):
    push_value(L, "12", int)
    assert L.is_integer(-1)
    assert pop_value(L, int) == 12
    push_value(L, 1, bool)
    assert pop_value(L, bool) is True


def test_string_encoding_is_configurable(L, monkeypatch):
    from luastack import config

    monkeypatch.setattr(config, "_string_encoding", "latin-1")
    push_value(L, "é")
    assert get_value(L, -1, bytes) == b"\xe9"
    assert pop_value(L, str) == "é"


def test_host_conversion_errors_propagate(L):
    push_value(L, 5)
    with pytest.raises(ValueError):
        pop_value(L, Color)
    # the read failed, so the slot is still there
    assert L.get_top() == 1
