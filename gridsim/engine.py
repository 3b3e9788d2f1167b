from __future__ import annotations
from typing import Callable, Optional, Sequence
import logging
import random
import threading

import pandas as pd

from .catalog import ALL_EVENTS, ALL_TOOLS, INFRASTRUCTURE_TIERS, EventDefinition, InfrastructureTier, Tool
from .config import EngineConfig
from .core import ActivityLog, EntryType, Observer, ObserverRegistry, SimulationState, StateSnapshot
from .events import EventManager
from .growth import GrowthModel
from .metrics import MetricsStore
from .network import NetworkModel, NetworkReading
from .scheduler import TickScheduler, TimerFactory
from .tools import ToolRegistry
from .warning_state import WarningStateMachine

logger = logging.getLogger(__name__)

class GameEngine:
    """
    Tick-driven grid simulation. Each tick runs growth -> events -> network -> warnings,
    recomputes the next tick interval and publishes a snapshot. Tool writes and manual
    overrides recompute the network immediately and publish outside the tick cadence.

    All mutation happens under one re-entrant lock, shared with the scheduler, so a timer
    thread and callers on other threads never interleave inside a tick.
    """

    def __init__(
        self,
        cfg: Optional[EngineConfig] = None,
        seed: Optional[int] = None,
        *,
        timer_factory: Optional[TimerFactory] = None,
        event_catalog: Sequence[EventDefinition] = ALL_EVENTS,
        tool_catalog: Sequence[Tool] = ALL_TOOLS,
        tiers: Sequence[InfrastructureTier] = INFRASTRUCTURE_TIERS,
    ) -> None:
        self.cfg = cfg if cfg is not None else EngineConfig()
        self.seed = seed
        self.rng = random.Random(seed)
        self._lock = threading.RLock()

        cfg = self.cfg
        self.growth = GrowthModel(cfg)
        self.events = EventManager(
            self.rng,
            event_catalog,
            check_interval=cfg.event_check_interval,
            max_active=cfg.max_active_events,
            max_attempts=cfg.event_admission_attempts,
        )
        self.tools = ToolRegistry(tool_catalog)
        self.network = NetworkModel(cfg, tiers)
        self.warnings = WarningStateMachine(
            healthy_min=cfg.healthy_min,
            healthy_max=cfg.healthy_max,
            red_zone_ticks=cfg.red_zone_ticks,
            max_warnings=cfg.max_warnings,
        )
        self.scheduler = TickScheduler(self._on_timer, lock=self._lock, timer_factory=timer_factory)

        self.log = ActivityLog(maxlen=cfg.event_log_maxlen)
        self.metrics = MetricsStore()
        self._state_observers = ObserverRegistry()
        self._time_observers = ObserverRegistry()
        self._population_observers = ObserverRegistry()

        self._current_tick_interval: float = cfg.base_tick_interval_ms
        self._state = self._initial_state()

        if cfg.auto_start:
            self.start()

    # ------------------------------------------------------------------
    # state helpers
    # ------------------------------------------------------------------
    def _initial_state(self) -> SimulationState:
        self.events.reset()
        self.tools.reset()
        self.warnings.reset()
        state = SimulationState(
            current_time=max(0.0, float(self.cfg.initial_time)),
            current_population=max(0.0, float(self.cfg.initial_population)),
        )
        self._state = state
        reading = self._recompute_network()
        state.infrastructure_tier = reading.tier
        self.warnings.observe(reading.capacity_factor)
        self._sync_warnings()
        return state

    def _snapshot(self) -> StateSnapshot:
        return self._state.snapshot(self._current_tick_interval, self.cfg.max_warnings)

    def _recompute_network(self) -> NetworkReading:
        st = self._state
        reading = self.network.compute(
            st.current_population,
            demand_event_multiplier=self.events.multiplier("demand"),
            supply_event_multiplier=self.events.multiplier("supply"),
            demand_tool_multiplier=self.tools.multiplier("demand"),
            supply_tool_multiplier=self.tools.multiplier("supply"),
        )
        st.active_events = list(self.events.active)
        st.tool_states = self.tools.snapshot()
        st.total_demand = reading.total_demand
        st.total_supply = reading.total_supply
        st.capacity_factor = reading.capacity_factor
        st.demand_event_multiplier = reading.demand_event_multiplier
        st.supply_event_multiplier = reading.supply_event_multiplier
        st.demand_tool_multiplier = reading.demand_tool_multiplier
        st.supply_tool_multiplier = reading.supply_tool_multiplier
        if st.infrastructure_tier and reading.tier != st.infrastructure_tier:
            logger.info("tick=%d infrastructure tier %s -> %s", st.tick_count, st.infrastructure_tier, reading.tier)
            self.log.record(st.tick_count, "TIER_REACHED", reading.tier, st.current_population,
                            previous=st.infrastructure_tier)
        st.infrastructure_tier = reading.tier
        return reading

    def _sync_warnings(self) -> None:
        st = self._state
        w = self.warnings
        st.capacity_zone = w.last_zone
        st.warning_count = w.warning_count
        st.ticks_in_red_zone = w.ticks_in_red_zone
        st.is_game_over = w.is_game_over
        st.game_over_reason = w.game_over_reason

    def _publish_external_change(self, entry_type: EntryType, ref_id: Optional[str] = None,
                                 value: Optional[float] = None, **meta) -> StateSnapshot:
        reading = self._recompute_network()
        self.warnings.observe(reading.capacity_factor)
        self._sync_warnings()
        self.log.record(self._state.tick_count, entry_type, ref_id, value, **meta)
        snap = self._snapshot()
        self._state_observers.notify(snap)
        return snap

    # ------------------------------------------------------------------
    # tick
    # ------------------------------------------------------------------
    def _tick(self) -> None:
        st = self._state
        if st.is_game_over:
            return
        st.tick_count += 1
        tick = st.tick_count

        self.growth.advance(st, self.rng)

        update = self.events.update(tick)
        for ev in update.expired:
            logger.info("tick=%d event ended: %s", tick, ev.event_id)
            self.log.record(tick, "EVENT_ENDED", ev.event_id, ev.multiplier)
            self.metrics.event_ended(ev, tick)
        if update.admitted is not None:
            ev = update.admitted
            logger.info("tick=%d event started: %s (%s x%.2f until tick %d)",
                        tick, ev.event_id, ev.impact, ev.multiplier, ev.end_tick)
            self.log.record(tick, "EVENT_STARTED", ev.event_id, ev.multiplier,
                            impact=ev.impact, end_tick=ev.end_tick)
            # st.capacity_factor still holds the previous tick's reading here
            self.metrics.event_started(ev, st.capacity_factor)

        reading = self._recompute_network()

        outcome = self.warnings.evaluate(reading.capacity_factor)
        self._sync_warnings()
        if outcome == "warning":
            self.log.record(tick, "WARNING_ISSUED", None, st.warning_count,
                            zone=st.capacity_zone, capacity_factor=st.capacity_factor)
        elif outcome == "game_over":
            st.is_running = False
            self.scheduler.cancel()
            self.log.record(tick, "GAME_OVER", None, st.capacity_factor, reason=st.game_over_reason)

        self._current_tick_interval = self.growth.tick_interval(st.time_multiplier)

        snap = self._snapshot()
        self.metrics.add_tick(snap.to_row())
        logger.debug(
            "tick=%d t=%.2fy pop=%.0f demand=%.1f supply=%.1f cf=%.3f red=%d warn=%d next=%.0fms",
            tick, st.current_time, st.current_population, st.total_demand, st.total_supply,
            st.capacity_factor, st.ticks_in_red_zone, st.warning_count, self._current_tick_interval,
        )
        # subscribers only ever see a fully applied tick
        self._time_observers.notify(snap)
        self._population_observers.notify(snap)
        self._state_observers.notify(snap)

    def _on_timer(self) -> None:
        if not self._state.is_running:
            return
        try:
            self._tick()
        finally:
            # a raising subscriber must not leave a running engine without a pending timer
            if self._state.is_running:
                self.scheduler.arm(self._current_tick_interval)

    def step(self, n_ticks: int = 1) -> None:
        """Run ticks synchronously, independent of the timer. Stops early on game over."""
        with self._lock:
            for _ in range(n_ticks):
                if self._state.is_game_over:
                    break
                self._tick()

    # ------------------------------------------------------------------
    # lifecycle
    # ------------------------------------------------------------------
    def start(self) -> None:
        with self._lock:
            st = self._state
            if st.is_game_over:
                logger.warning("GameEngine is over; call reset() before starting again")
                return
            if st.is_running:
                logger.warning("GameEngine is already running")
                return
            st.is_running = True
            self.log.record(st.tick_count, "ENGINE_STARTED")
            logger.info("engine started at tick=%d interval=%.0fms", st.tick_count, self._current_tick_interval)
            self.scheduler.arm(self._current_tick_interval)

    def stop(self) -> None:
        with self._lock:
            self.scheduler.cancel()
            st = self._state
            if st.is_running:
                st.is_running = False
                self.log.record(st.tick_count, "ENGINE_STOPPED")
                logger.info("engine stopped at tick=%d", st.tick_count)

    def reset(self) -> None:
        with self._lock:
            self.scheduler.cancel()
            if self.seed is not None:
                self.rng.seed(self.seed)
            self._current_tick_interval = self.cfg.base_tick_interval_ms
            self._initial_state()
            self.metrics.clear()
            self.log.record(0, "ENGINE_RESET")
            logger.info("engine reset")

    def toggle(self) -> None:
        with self._lock:
            if self._state.is_running:
                self.stop()
            else:
                self.start()

    # ------------------------------------------------------------------
    # external input
    # ------------------------------------------------------------------
    def set_tool_value(self, tool_id: str, value: float) -> None:
        with self._lock:
            previous = self.tools.set_value(tool_id, value)
            self._publish_external_change("TOOL_CHANGED", tool_id, value, previous=previous)

    def set_population(self, population: float) -> None:
        with self._lock:
            st = self._state
            st.current_population = max(0.0, float(population))
            if self.growth.initial_population > 0:
                st.population_multiplier = st.current_population / self.growth.initial_population
            self._publish_external_change("POPULATION_SET", value=st.current_population)

    def adjust_population(self, delta: float) -> None:
        with self._lock:
            self.set_population(self._state.current_population + float(delta))

    def set_time(self, years: float) -> None:
        with self._lock:
            st = self._state
            st.current_time = max(0.0, float(years))
            self._publish_external_change("TIME_SET", value=st.current_time)

    # ------------------------------------------------------------------
    # read side
    # ------------------------------------------------------------------
    def get_state(self) -> StateSnapshot:
        with self._lock:
            return self._snapshot()

    def get_current_tick_interval(self) -> float:
        with self._lock:
            return self._current_tick_interval

    @property
    def tick(self) -> int:
        return self._state.tick_count

    @property
    def is_running(self) -> bool:
        return self._state.is_running

    def on_state_update(self, callback: Observer) -> Callable[[], None]:
        with self._lock:
            return self._state_observers.subscribe(callback)

    def on_time_tick(self, callback: Observer) -> Callable[[], None]:
        with self._lock:
            return self._time_observers.subscribe(callback)

    def on_population_tick(self, callback: Observer) -> Callable[[], None]:
        with self._lock:
            return self._population_observers.subscribe(callback)

    def history_df(self) -> pd.DataFrame:
        with self._lock:
            return self.metrics.history_df()

    def events_df(self) -> pd.DataFrame:
        with self._lock:
            return self.metrics.events_df()
