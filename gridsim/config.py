from dataclasses import dataclass
import math

from .catalog import TARGET_POPULATION

@dataclass
class EngineConfig:
    # Starting point
    initial_population: float = 2000.0
    initial_time: float = 0.0         # years

    # Tick cadence (milliseconds)
    base_tick_interval_ms: float = 500.0
    min_tick_interval_ms: float = 100.0
    max_tick_interval_ms: float = 5000.0

    # Growth
    time_growth_rate: float = 0.0002              # per tick, drives time acceleration
    population_growth_rate: float | None = None   # per year; derived from target when None
    population_volatility: float = 0.01           # +/- fraction applied each tick
    target_game_years: float = 100.0
    target_real_minutes: float = 120.0

    # Network
    base_supply: float = 2300.0       # kW, only used by tier tables whose lowest threshold is above 0
    demand_per_capita: float = 1.0    # kW per inhabitant
    supply_floor: float = 1e-6        # kW, lower bound on the capacity factor divisor

    # Random events
    event_check_interval: int = 5     # ticks between admission attempts
    max_active_events: int = 4
    event_admission_attempts: int = 10

    # Warnings
    healthy_min: float = 0.8
    healthy_max: float = 0.95
    red_zone_ticks: int = 10          # consecutive red ticks per warning
    max_warnings: int = 3

    # Misc
    event_log_maxlen: int | None = 1000
    auto_start: bool = False

    def __post_init__(self) -> None:
        if self.base_tick_interval_ms <= 0:
            raise ValueError("base_tick_interval_ms must be positive")
        if self.min_tick_interval_ms > self.max_tick_interval_ms:
            raise ValueError("min_tick_interval_ms must not exceed max_tick_interval_ms")
        if self.population_growth_rate is None:
            if self.initial_population > 0 and self.target_game_years > 0:
                self.population_growth_rate = (
                    math.log(TARGET_POPULATION / self.initial_population) / self.target_game_years
                )
            else:
                self.population_growth_rate = 0.0

    @property
    def total_planned_ticks(self) -> float:
        """Ticks that fit in the real-time budget at the base cadence."""
        return (self.target_real_minutes * 60_000.0) / self.base_tick_interval_ms

    @property
    def years_per_base_tick(self) -> float:
        planned = self.total_planned_ticks
        if planned <= 0:
            return 0.0
        return self.target_game_years / planned
