"""Time acceleration and population growth.

Time speeds up exponentially with the tick count so that the configured
number of game years fits in the real-time budget. Population is a closed
form of elapsed game time, P(t) = P0 * exp(k * t), recomputed every tick
(never accumulated) and then perturbed by a bounded random factor.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict
import math
import random

import numpy as np

from .config import EngineConfig
from .core import SimulationState


@dataclass
class GrowthStep:
    time_multiplier: float
    years_advanced: float
    volatility_factor: float


class GrowthModel:
    def __init__(self, cfg: EngineConfig) -> None:
        self.cfg = cfg
        self.initial_population = max(0.0, float(cfg.initial_population))
        self.time_growth_rate = float(cfg.time_growth_rate)
        self.population_growth_rate = float(cfg.population_growth_rate or 0.0)
        self.volatility = max(0.0, float(cfg.population_volatility))
        self.years_per_base_tick = cfg.years_per_base_tick

    def time_multiplier(self, tick_count: int) -> float:
        return math.exp(self.time_growth_rate * tick_count)

    def years_per_tick(self, time_multiplier: float) -> float:
        return self.years_per_base_tick * time_multiplier

    def population_at(self, years: float) -> float:
        return self.initial_population * math.exp(self.population_growth_rate * years)

    def volatility_factor(self, rng: random.Random) -> float:
        if self.volatility <= 0.0:
            return 1.0
        return 1.0 + (rng.random() - 0.5) * 2.0 * self.volatility

    def tick_interval(self, time_multiplier: float) -> float:
        cfg = self.cfg
        interval = cfg.base_tick_interval_ms * (1.0 + math.log1p(time_multiplier))
        return min(cfg.max_tick_interval_ms, max(cfg.min_tick_interval_ms, interval))

    def advance(self, state: SimulationState, rng: random.Random) -> GrowthStep:
        """Move time forward for ``state.tick_count`` and recompute population from it."""
        tm = self.time_multiplier(state.tick_count)
        years = self.years_per_tick(tm)
        state.time_multiplier = tm
        state.current_time = max(0.0, state.current_time + years)

        factor = self.volatility_factor(rng)
        state.current_population = max(0.0, self.population_at(state.current_time) * factor)
        if self.initial_population > 0:
            state.population_multiplier = state.current_population / self.initial_population
        else:
            state.population_multiplier = 1.0
        return GrowthStep(time_multiplier=tm, years_advanced=years, volatility_factor=factor)

    def projection(self, ticks: int) -> Dict[str, np.ndarray]:
        """Volatility-free trajectory for ticks 1..ticks."""
        n = np.arange(1, max(0, int(ticks)) + 1, dtype=float)
        tm = np.exp(self.time_growth_rate * n)
        years = self.cfg.initial_time + np.cumsum(self.years_per_base_tick * tm)
        population = self.initial_population * np.exp(self.population_growth_rate * years)
        interval = np.clip(
            self.cfg.base_tick_interval_ms * (1.0 + np.log1p(tm)),
            self.cfg.min_tick_interval_ms,
            self.cfg.max_tick_interval_ms,
        )
        return {
            "tick": n.astype(int),
            "time_multiplier": tm,
            "years": years,
            "population": population,
            "tick_interval_ms": interval,
        }
