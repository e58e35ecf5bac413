from hypothesis import given, strategies as st

from luastack import CString, LuaState, pop_value, push_value
from luastack.vm import constants as C


def _round_trip(value, tp):
    with LuaState() as L:
        push_value(L, value)
        assert L.get_top() == 1
        out = pop_value(L, tp)
        assert L.get_top() == 0
        return out


@given(st.integers(min_value=C.MININTEGER, max_value=C.MAXINTEGER))
def test_integers(n):
    assert _round_trip(n, int) == n


@given(st.floats(allow_nan=False))
def test_floats(x):
    assert _round_trip(x, float) == x


@given(st.booleans())
def test_booleans(b):
    assert _round_trip(b, bool) is b


@given(st.text())
def test_text(s):
    assert _round_trip(s, str) == s


@given(st.binary())
def test_binary_keeps_length_and_nul_bytes(data):
    out = _round_trip(data, bytes)
    assert out == data
    assert len(out) == len(data)


@given(st.binary().filter(lambda b: b"\0" not in b))
def test_cstrings_without_nul(data):
    assert _round_trip(CString(data), CString) == data


@given(st.lists(st.integers(min_value=C.MININTEGER, max_value=C.MAXINTEGER)))
def test_integer_lists(xs):
    assert _round_trip(xs, list[int]) == xs


@given(st.dictionaries(st.text(), st.floats(allow_nan=False)))
def test_text_to_float_dicts(d):
    assert _round_trip(d, dict[str, float]) == d


# beyond 64 bits integers travel as floats; exact whenever the float is exact
@given(st.integers(min_value=63, max_value=1000), st.booleans())
def test_integers_beyond_the_vm_range(exponent, negative):
    n = -(2 ** exponent) if negative else 2 ** exponent
    assert _round_trip(n, int) == n
