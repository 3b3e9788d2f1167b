from __future__ import annotations

import pytest

from gridsim.catalog import INFRASTRUCTURE_TIERS, InfrastructureTier
from gridsim.config import EngineConfig
from gridsim.network import UNSERVED_TIER, NetworkModel


def test_tier_is_step_function_of_population() -> None:
    model = NetworkModel(EngineConfig())
    assert model.tier_for(2_000).name == "Hamlet"
    assert model.tier_for(2_999.9).name == "Hamlet"
    assert model.tier_for(3_000).name == "Village"
    assert model.tier_for(499_999).name == "Large Metropolis"
    assert model.tier_for(500_000).name == "Megacity"
    assert model.tier_for(10_000_000).name == "Megacity"


def test_tier_never_regresses_as_population_grows() -> None:
    model = NetworkModel(EngineConfig())
    order = {t.name: i for i, t in enumerate(INFRASTRUCTURE_TIERS)}
    last = -1
    population = 1.0
    while population < 2_000_000:
        idx = order[model.tier_for(population).name]
        assert idx >= last
        last = idx
        population *= 1.07


def test_tiers_sorted_even_if_given_unsorted() -> None:
    tiers = (
        InfrastructureTier("big", 100, 1000),
        InfrastructureTier("small", 10, 100),
    )
    model = NetworkModel(EngineConfig(), tiers)
    assert model.tier_for(50).name == "small"
    assert model.tier_for(150).name == "big"


def test_fallback_supply_below_lowest_threshold() -> None:
    tiers = (InfrastructureTier("town", 1000, 5000),)
    model = NetworkModel(EngineConfig(base_supply=800), tiers)
    reading = model.compute(500)
    assert reading.tier == UNSERVED_TIER
    assert reading.base_supply == 800
    assert reading.capacity_factor == pytest.approx(500 / 800)


def test_totals_and_capacity_factor() -> None:
    model = NetworkModel(EngineConfig(demand_per_capita=1.0))
    reading = model.compute(
        2_000,
        demand_event_multiplier=1.3,
        supply_event_multiplier=0.7,
        demand_tool_multiplier=0.85,
        supply_tool_multiplier=1.1,
    )
    assert reading.base_demand == 2_000
    assert reading.base_supply == 2_300
    assert reading.total_demand == pytest.approx(2_000 * 1.3 * 0.85)
    assert reading.total_supply == pytest.approx(2_300 * 0.7 * 1.1)
    assert reading.capacity_factor == pytest.approx(reading.total_demand / reading.total_supply)
    assert not reading.supply_floored


def test_demand_slider_at_minimum_scales_demand_regardless_of_events() -> None:
    model = NetworkModel(EngineConfig())
    for event_mult in (1.0, 1.3, 0.85 * 1.4):
        baseline = model.compute(5_000, demand_event_multiplier=event_mult)
        adjusted = model.compute(5_000, demand_event_multiplier=event_mult, demand_tool_multiplier=1 - 0.30)
        assert adjusted.total_demand / baseline.total_demand == pytest.approx(0.70)
        assert adjusted.total_supply == baseline.total_supply


def test_zero_supply_is_floored() -> None:
    cfg = EngineConfig(supply_floor=1e-3)
    model = NetworkModel(cfg)
    reading = model.compute(1_000, supply_tool_multiplier=0.0)
    assert reading.total_supply == 0.0
    assert reading.supply_floored
    assert reading.capacity_factor == pytest.approx(1_000 / 1e-3)


def test_default_tiers_cover_empty_towns() -> None:
    model = NetworkModel(EngineConfig(base_supply=1.0))
    reading = model.compute(0)
    assert reading.tier == INFRASTRUCTURE_TIERS[0].name
    assert reading.base_supply == INFRASTRUCTURE_TIERS[0].supply_capacity
