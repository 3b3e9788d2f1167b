from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Literal, Optional, Tuple, Union

Impact = Literal["supply", "demand"]

# -----------------------------
# Random events
# -----------------------------
@dataclass(frozen=True)
class EventDefinition:
    event_id: str
    name: str
    description: str
    impact: Impact
    multiplier: float          # 0.9 = -10%, 1.1 = +10%
    duration: int              # ticks
    probability: float         # rarity hint only, admission does not roll against it
    conflicts: frozenset[str] = frozenset()

DEMAND_EVENTS: Tuple[EventDefinition, ...] = (
    EventDefinition(
        "factory-shift", "Factory Shift Change",
        "Major industrial facilities starting operations",
        "demand", 1.3, 5, 0.15,
    ),
    EventDefinition(
        "sports-event", "Major Sports Event",
        "Large sporting event causing spike in viewership",
        "demand", 1.2, 3, 0.08,
    ),
    EventDefinition(
        "cold-weather", "Cold Weather Snap",
        "Unseasonably cold weather increasing heating demand",
        "demand", 1.4, 7, 0.12,
        frozenset({"heatwave-demand", "mild-weather"}),
    ),
    EventDefinition(
        "heatwave-demand", "Heatwave",
        "Extreme heat causing air conditioning surge",
        "demand", 1.35, 6, 0.10,
        frozenset({"cold-weather", "mild-weather"}),
    ),
    EventDefinition(
        "holiday-season", "Holiday Season",
        "Increased residential energy consumption during holidays",
        "demand", 1.15, 4, 0.20,
    ),
    EventDefinition(
        "mild-weather", "Mild Weather",
        "Pleasant temperatures reducing heating/cooling needs",
        "demand", 0.85, 11, 0.15,
        frozenset({"cold-weather", "heatwave-demand"}),
    ),
)

SUPPLY_EVENTS: Tuple[EventDefinition, ...] = (
    EventDefinition(
        "wind-surge", "Wind Surge",
        "Strong consistent winds boosting wind power generation",
        "supply", 1.3, 4, 0.12,
        frozenset({"wind-drop"}),
    ),
    EventDefinition(
        "solar-dip", "Solar Dip",
        "Extended cloudy period reducing solar output",
        "supply", 0.7, 7, 0.15,
        frozenset({"optimal-conditions"}),
    ),
    EventDefinition(
        "wind-drop", "Wind Drop",
        "Calm weather reducing wind power generation",
        "supply", 0.75, 5, 0.15,
        frozenset({"wind-surge"}),
    ),
    EventDefinition(
        "drought", "Drought",
        "Low water levels affecting hydroelectric generation",
        "supply", 0.8, 4, 0.08,
        frozenset({"extreme-downpour", "optimal-conditions"}),
    ),
    EventDefinition(
        "extreme-downpour", "Extreme Downpour",
        "Heavy rainfall boosting hydroelectric output",
        "supply", 1.25, 3, 0.10,
        frozenset({"drought"}),
    ),
    EventDefinition(
        "heatwave-supply", "Heatwave (Infrastructure)",
        "Extreme heat causing equipment efficiency losses",
        "supply", 0.85, 5, 0.10,
        frozenset({"extreme-cold"}),
    ),
    EventDefinition(
        "extreme-cold", "Extreme Cold",
        "Freezing conditions damaging infrastructure",
        "supply", 0.65, 8, 0.07,
        frozenset({"heatwave-supply", "optimal-conditions"}),
    ),
    EventDefinition(
        "optimal-conditions", "Optimal Generation Conditions",
        "Perfect weather conditions for renewable energy",
        "supply", 1.2, 5, 0.10,
        frozenset({"solar-dip", "extreme-cold", "drought"}),
    ),
)

ALL_EVENTS: Tuple[EventDefinition, ...] = DEMAND_EVENTS + SUPPLY_EVENTS

# -----------------------------
# Flexibility tools
# -----------------------------
@dataclass(frozen=True)
class SliderTool:
    """Continuous lever. The value is the signed fractional adjustment (-0.15 = -15%)."""
    tool_id: str
    name: str
    description: str
    impact: Impact
    min_value: float
    max_value: float
    step: float = 0.01
    default_value: float = 0.0

@dataclass(frozen=True)
class ToggleTool:
    """On/off lever. Applies ``multiplier`` while the value is 1."""
    tool_id: str
    name: str
    description: str
    impact: Impact
    multiplier: float

Tool = Union[SliderTool, ToggleTool]

SLIDER_TOOLS: Tuple[SliderTool, ...] = (
    SliderTool(
        "ev-charging", "EV Charging Control",
        "Delay charging (left) or accelerate charging (right)",
        "demand", -0.15, 0.15,
    ),
    SliderTool(
        "residential-load", "Residential Load Control",
        "Decrease (left) or increase (right) residential consumption",
        "demand", -0.15, 0.15,
    ),
    SliderTool(
        "industrial-load", "Industrial Load Shifting",
        "Shift industrial loads to reduce (left) or increase (right) demand",
        "demand", -0.20, 0.20,
    ),
    SliderTool(
        "battery-storage", "Battery Storage Control",
        "Send to storage (left) or draw from storage (right)",
        "supply", -0.15, 0.15,
    ),
)

TOGGLE_TOOLS: Tuple[ToggleTool, ...] = (
    ToggleTool(
        "pause-non-essential", "Pause Non-Essential Loads",
        "Temporarily reduce power to non-critical systems",
        "demand", 0.85,
    ),
    ToggleTool(
        "emergency-repairs", "Emergency Repairs",
        "Rapidly repair infrastructure to restore generation",
        "supply", 1.10,
    ),
)

ALL_TOOLS: Tuple[Tool, ...] = SLIDER_TOOLS + TOGGLE_TOOLS

# -----------------------------
# Infrastructure tiers
# -----------------------------
@dataclass(frozen=True)
class InfrastructureTier:
    name: str
    population_threshold: float
    supply_capacity: float     # kW

# ascending by threshold; capacity sits ~25% above demand at the threshold
INFRASTRUCTURE_TIERS: Tuple[InfrastructureTier, ...] = (
    InfrastructureTier("Hamlet", 0, 2_300),
    InfrastructureTier("Village", 3_000, 3_750),
    InfrastructureTier("Large Village", 4_500, 5_600),
    InfrastructureTier("Small Town", 7_000, 8_750),
    InfrastructureTier("Town", 10_000, 12_500),
    InfrastructureTier("Large Town", 15_000, 18_750),
    InfrastructureTier("Small City", 25_000, 31_250),
    InfrastructureTier("City", 40_000, 50_000),
    InfrastructureTier("Large City", 60_000, 75_000),
    InfrastructureTier("Regional Hub", 90_000, 112_500),
    InfrastructureTier("Major City", 140_000, 175_000),
    InfrastructureTier("Metropolis", 220_000, 275_000),
    InfrastructureTier("Large Metropolis", 330_000, 412_500),
    InfrastructureTier("Megacity", 500_000, 625_000),
)

TARGET_POPULATION: float = float(INFRASTRUCTURE_TIERS[-1].population_threshold)

_TOOLS_BY_ID: Dict[str, Tool] = {t.tool_id: t for t in ALL_TOOLS}
_EVENTS_BY_ID: Dict[str, EventDefinition] = {e.event_id: e for e in ALL_EVENTS}

def get_tool_by_id(tool_id: str) -> Optional[Tool]:
    return _TOOLS_BY_ID.get(tool_id)

def get_event_by_id(event_id: str) -> Optional[EventDefinition]:
    return _EVENTS_BY_ID.get(event_id)

def default_tool_states(tools: Tuple[Tool, ...] = ALL_TOOLS) -> Dict[str, float]:
    """Every tool at its neutral position: sliders at their default, toggles off."""
    states: Dict[str, float] = {}
    for tool in tools:
        if isinstance(tool, SliderTool):
            states[tool.tool_id] = float(tool.default_value)
        else:
            states[tool.tool_id] = 0.0
    return states
