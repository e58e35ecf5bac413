import gc

import pytest

from luastack import LuaAPIError, LuaObject, LuaState, get_value, pop_value, push_value
from luastack.types.category import Category


def test_wrapper_passthrough(L):
    push_value(L, {"a": 1, "b": 2})
    obj = get_value(L, -1, LuaObject)
    L.pop(1)
    assert L.get_top() == 0

    push_value(L, obj)
    assert L.get_top() == 1
    assert L.type(-1) == Category.TABLE
    assert pop_value(L, dict[str, int]) == {"a": 1, "b": 2}


def test_wrapper_pushes_the_same_table(L):
    push_value(L, [1, 2])
    obj = pop_value(L, LuaObject)
    push_value(L, obj)
    push_value(L, obj)
    assert L.raw_equal(-1, -2)


def test_reading_a_wrapper_skips_the_type_check(L):
    def handler(state, actual, expected):
        raise AssertionError("dynamic reads are never checked")

    for value in (None, True, 1, "s", [1], len):
        push_value(L, value)
        obj = pop_value(L, LuaObject, handler)
        assert isinstance(obj, LuaObject)
    assert L.get_top() == 0


def test_wrapper_category_and_conversion(L):
    push_value(L, "hello")
    obj = pop_value(L, LuaObject)
    assert obj.category is Category.STRING
    assert obj.type_name == "string"
    assert obj.to(str) == "hello"
    assert repr(obj) == "LuaObject(string)"
    assert L.get_top() == 0


def test_wrapper_over_nil(L):
    push_value(L, None)
    obj = pop_value(L, LuaObject)
    assert obj.category is Category.NIL
    push_value(L, obj)
    assert L.is_nil(-1)


def test_wrapper_equality_is_raw_equality(L):
    push_value(L, "same")
    push_value(L, "same")
    push_value(L, [1])
    push_value(L, [1])
    t2, t1, s2, s1 = (pop_value(L, LuaObject) for _ in range(4))
    assert s1 == s2
    assert t1 != t2
    assert t1 == t1
    assert L.get_top() == 0


def test_released_wrapper_cannot_be_pushed(L):
    push_value(L, 1)
    obj = pop_value(L, LuaObject)
    obj.release()
    assert repr(obj) == "LuaObject(<released>)"
    with pytest.raises(LuaAPIError):
        push_value(L, obj)
    assert L.get_top() == 0


def test_wrapper_from_another_state_is_rejected(L):
    other = LuaState()
    push_value(other, 1)
    obj = pop_value(other, LuaObject)
    with pytest.raises(LuaAPIError, match="different state"):
        push_value(L, obj)
    assert L.get_top() == 0


def test_wrapper_keeps_value_alive_in_registry(L):
    push_value(L, {"k": "v"})
    obj = pop_value(L, LuaObject)
    # churn the stack; the wrapper does not depend on the original slot
    for i in range(5):
        push_value(L, i)
    L.set_top(0)
    assert obj.to(dict[str, str]) == {"k": "v"}


def test_collected_wrappers_free_their_registry_slots(L):
    push_value(L, [[1], [2], [3]])
    for _ in range(100):
        get_value(L, -1, list)
    gc.collect()
    assert len(L.registry) == 0

    obj = get_value(L, -1, LuaObject)
    assert len(L.registry) == 1
    obj.release()
    del obj
    gc.collect()
    assert len(L.registry) == 0


def test_wrapper_outliving_its_state(L):
    other = LuaState()
    push_value(other, [1])
    obj = pop_value(other, LuaObject)
    other.close()
    del obj
    gc.collect()
    assert len(other.registry) == 0
