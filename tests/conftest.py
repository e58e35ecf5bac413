import pytest

from luastack import config
from luastack.vm import LuaState

# This test configuration runs every test twice:
# 1) with the debug stack guards enabled ["checked"]
# 2) with the guards disabled, as under `python -O` ["unchecked"]
# Depth invariants must hold either way; only the checked run catches an
# operation that breaks them.


@pytest.fixture(params=["checked", "unchecked"])
def check_mode(request):
    return request.param


@pytest.fixture(autouse=True)
def _force_stack_checks(check_mode, monkeypatch):
    monkeypatch.setattr(config, "_check_stack", check_mode == "checked")


@pytest.fixture
def L():
    state = LuaState()
    yield state
    state.close()
