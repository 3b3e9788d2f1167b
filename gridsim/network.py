from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple
import logging

from .catalog import INFRASTRUCTURE_TIERS, InfrastructureTier
from .config import EngineConfig

logger = logging.getLogger(__name__)

UNSERVED_TIER = "Unserved"

@dataclass
class NetworkReading:
    base_demand: float
    base_supply: float
    demand_event_multiplier: float
    supply_event_multiplier: float
    demand_tool_multiplier: float
    supply_tool_multiplier: float
    total_demand: float
    total_supply: float
    capacity_factor: float
    tier: str
    supply_floored: bool = False


class NetworkModel:
    """
    Demand = population * per-capita demand, scaled by demand events and demand tools.
    Supply = capacity of the highest tier reached, scaled by supply events and supply tools.
    """

    def __init__(self, cfg: EngineConfig, tiers: Sequence[InfrastructureTier] = INFRASTRUCTURE_TIERS) -> None:
        self.tiers: Tuple[InfrastructureTier, ...] = tuple(
            sorted(tiers, key=lambda t: t.population_threshold)
        )
        self.demand_per_capita = float(cfg.demand_per_capita)
        self.base_supply_fallback = float(cfg.base_supply)
        self.supply_floor = float(cfg.supply_floor) if cfg.supply_floor > 0 else 1e-12

    def tier_for(self, population: float) -> Optional[InfrastructureTier]:
        for tier in reversed(self.tiers):
            if tier.population_threshold <= population:
                return tier
        return None

    def base_demand(self, population: float) -> float:
        return max(0.0, population) * self.demand_per_capita

    def compute(
        self,
        population: float,
        demand_event_multiplier: float = 1.0,
        supply_event_multiplier: float = 1.0,
        demand_tool_multiplier: float = 1.0,
        supply_tool_multiplier: float = 1.0,
    ) -> NetworkReading:
        tier = self.tier_for(population)
        if tier is None:
            base_supply = self.base_supply_fallback
            tier_name = UNSERVED_TIER
        else:
            base_supply = float(tier.supply_capacity)
            tier_name = tier.name

        base_demand = self.base_demand(population)
        total_demand = base_demand * demand_event_multiplier * demand_tool_multiplier
        total_supply = base_supply * supply_event_multiplier * supply_tool_multiplier

        divisor = total_supply
        floored = False
        if divisor < self.supply_floor:
            divisor = self.supply_floor
            floored = True
            logger.warning("supply %.6f kW below floor, capacity factor uses %.6f", total_supply, divisor)

        return NetworkReading(
            base_demand=base_demand,
            base_supply=base_supply,
            demand_event_multiplier=demand_event_multiplier,
            supply_event_multiplier=supply_event_multiplier,
            demand_tool_multiplier=demand_tool_multiplier,
            supply_tool_multiplier=supply_tool_multiplier,
            total_demand=total_demand,
            total_supply=total_supply,
            capacity_factor=total_demand / divisor,
            tier=tier_name,
            supply_floored=floored,
        )
