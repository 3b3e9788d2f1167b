from __future__ import annotations

import pytest

from gridsim.catalog import ALL_TOOLS, SLIDER_TOOLS, TOGGLE_TOOLS, SliderTool, ToggleTool, default_tool_states, get_tool_by_id
from gridsim.tools import ToolRegistry, tool_multiplier


def test_slider_multiplier_is_one_plus_value() -> None:
    slider = SliderTool("s", "S", "", "demand", -0.3, 0.3)
    assert tool_multiplier(slider, -0.3) == pytest.approx(0.7)
    assert tool_multiplier(slider, 0.0) == 1.0
    assert tool_multiplier(slider, 0.15) == pytest.approx(1.15)


def test_toggle_multiplier_only_when_on() -> None:
    toggle = ToggleTool("t", "T", "", "supply", 1.1)
    assert tool_multiplier(toggle, 0) == 1.0
    assert tool_multiplier(toggle, 1) == 1.1
    assert tool_multiplier(toggle, 0.5) == 1.0


def test_unknown_variant_rejected() -> None:
    with pytest.raises(TypeError):
        tool_multiplier(object(), 1.0)


def test_defaults_are_neutral() -> None:
    states = default_tool_states()
    assert set(states) == {t.tool_id for t in ALL_TOOLS}
    registry = ToolRegistry()
    assert registry.multiplier("demand") == 1.0
    assert registry.multiplier("supply") == 1.0


def test_demand_tools_compose_by_product() -> None:
    registry = ToolRegistry()
    registry.set_value("ev-charging", -0.15)
    registry.set_value("industrial-load", 0.10)
    registry.set_value("pause-non-essential", 1)
    expected = 0.85 * 1.10 * 0.85
    assert registry.multiplier("demand") == pytest.approx(expected)
    assert registry.multiplier("supply") == 1.0


def test_composition_is_order_independent() -> None:
    forward = ToolRegistry(ALL_TOOLS)
    backward = ToolRegistry(tuple(reversed(ALL_TOOLS)))
    for registry in (forward, backward):
        registry.set_value("residential-load", -0.12)
        registry.set_value("battery-storage", 0.05)
        registry.set_value("emergency-repairs", 1)
        registry.set_value("ev-charging", 0.07)
    assert forward.multiplier("demand") == pytest.approx(backward.multiplier("demand"))
    assert forward.multiplier("supply") == pytest.approx(backward.multiplier("supply"))


def test_unknown_tool_is_stored_but_inert() -> None:
    registry = ToolRegistry()
    registry.set_value("flux-capacitor", 5.0)
    assert registry.get_value("flux-capacitor") == 5.0
    assert registry.snapshot()["flux-capacitor"] == 5.0
    assert registry.multiplier("demand") == 1.0
    assert registry.multiplier("supply") == 1.0


def test_set_value_returns_previous_and_reset_restores_defaults() -> None:
    registry = ToolRegistry()
    assert registry.set_value("battery-storage", 0.1) == 0.0
    assert registry.set_value("battery-storage", -0.1) == pytest.approx(0.1)
    registry.reset()
    assert registry.values == default_tool_states()


def test_catalog_lookup_and_shapes() -> None:
    assert len(SLIDER_TOOLS) == 4
    assert len(TOGGLE_TOOLS) == 2
    tool = get_tool_by_id("industrial-load")
    assert isinstance(tool, SliderTool)
    assert (tool.min_value, tool.max_value) == (-0.20, 0.20)
    assert get_tool_by_id("nope") is None
