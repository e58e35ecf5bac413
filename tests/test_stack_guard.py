import pytest

from luastack import LuaError, StackImbalanceError, config, get_value, push_value
from luastack.debug_utils.pprint import dump_stack
from luastack.debug_utils.stack_guard import StackGuard


def _pushing_handler(state, actual, expected):
    state.push_nil()
    return 0


def _pushing_then_raising_handler(state, actual, expected):
    state.push_nil()
    state.raise_error("leaky handler")


def test_guard_reports_a_handler_that_leaves_a_slot(L):
    config.set_stack_checks(True)
    push_value(L, "x")
    with pytest.raises(StackImbalanceError, match="read of"):
        get_value(L, -1, int, _pushing_handler)


def test_guard_checks_the_error_path(L):
    config.set_stack_checks(True)
    push_value(L, "x")
    with pytest.raises(StackImbalanceError) as err:
        get_value(L, -1, int, _pushing_then_raising_handler)
    assert isinstance(err.value.__cause__, LuaError)
    assert "raised LuaError" in str(err.value)


def test_default_handler_passes_the_guard(L):
    config.set_stack_checks(True)
    push_value(L, "x")
    with pytest.raises(LuaError):
        get_value(L, -1, int)


def test_unchecked_runs_skip_the_guard(L):
    config.set_stack_checks(False)
    push_value(L, "x")
    assert get_value(L, -1, int, _pushing_handler) == 0
    assert L.get_top() == 2


def test_stack_guard_delta(L):
    with StackGuard(L, 1):
        L.push_nil()
    with pytest.raises(StackImbalanceError, match="depth 2, expected 1"):
        with StackGuard(L):
            L.push_nil()


def test_stack_guard_error_path_expects_no_change(L):
    with pytest.raises(KeyError):
        with StackGuard(L, 1):
            raise KeyError("nothing pushed")
    with pytest.raises(StackImbalanceError):
        with StackGuard(L, 1):
            L.push_nil()
            raise KeyError("pushed then failed")


def test_dump_stack(L):
    assert dump_stack(L) == "<empty stack>"
    push_value(L, 1)
    push_value(L, "two")
    push_value(L, [3])
    lines = dump_stack(L).splitlines()
    assert lines[0] == "[-1 | 3] table table"
    assert lines[1] == "[-2 | 2] string b'two'"
    assert lines[2] == "[-3 | 1] number 1"
    assert L.get_top() == 3


def test_dump_stack_colors(L):
    push_value(L, True)
    out = dump_stack(L, {"color": True})
    assert "\033[93mtrue\033[0m" in out
