# tests/models/test_enums.py
from tool_state_sync.models import ClearScope, HydrationSource, InputSide, ParamsMode


def test_input_side_values():
    assert InputSide.LEFT == "left"
    assert InputSide.RIGHT == "right"


def test_hydration_source_values():
    assert [s.value for s in HydrationSource] == ["url", "history", "default"]


def test_params_mode_values():
    assert ParamsMode.INTERPRETATION == "interpretation"
    assert ParamsMode.DEFERRED == "deferred"


def test_clear_scope_from_text():
    assert ClearScope("tool") is ClearScope.TOOL
    assert ClearScope("all") is ClearScope.ALL
