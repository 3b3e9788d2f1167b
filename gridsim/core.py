from __future__ import annotations
from dataclasses import dataclass, field, fields
from types import MappingProxyType
from typing import Any, Callable, Deque, Dict, List, Literal, Mapping, Optional, Tuple
from collections import Counter, deque
import itertools

from .catalog import EventDefinition, Impact

CapacityZone = str  # "inefficient" | "optimal" | "overload"

# -----------------------------
# Activity log
# -----------------------------
EntryType = Literal[
    "ENGINE_STARTED", "ENGINE_STOPPED", "ENGINE_RESET",
    "EVENT_STARTED", "EVENT_ENDED", "TOOL_CHANGED", "TIER_REACHED",
    "WARNING_ISSUED", "GAME_OVER", "POPULATION_SET", "TIME_SET",
]

@dataclass(frozen=True)
class LogEntry:
    tick: int
    entry_type: EntryType
    ref_id: Optional[str] = None
    value: Optional[float] = None
    meta: Mapping[str, Any] = field(default_factory=dict)

class ActivityLog:
    """Bounded, newest-last record of what the engine did. Survives ``reset``."""

    def __init__(self, maxlen: Optional[int] = None) -> None:
        self._entries: Deque[LogEntry] = deque(maxlen=maxlen)

    def record(self, tick: int, entry_type: EntryType, ref_id: Optional[str] = None,
               value: Optional[float] = None, **meta: Any) -> LogEntry:
        entry = LogEntry(int(tick), entry_type, ref_id,
                         None if value is None else float(value), MappingProxyType(meta))
        self._entries.append(entry)
        return entry

    def __len__(self) -> int:
        return len(self._entries)

    def tail(self, n: int = 200) -> List[LogEntry]:
        return list(self._entries)[-n:] if n > 0 else []

    def of_type(self, entry_type: EntryType) -> List[LogEntry]:
        return [e for e in self._entries if e.entry_type == entry_type]

    def counts(self) -> Counter:
        return Counter(e.entry_type for e in self._entries)


# -----------------------------
# Active events
# -----------------------------
@dataclass(frozen=True)
class ActiveEvent:
    definition: EventDefinition
    start_tick: int
    end_tick: int

    @classmethod
    def materialize(cls, definition: EventDefinition, tick: int) -> "ActiveEvent":
        return cls(definition=definition, start_tick=tick, end_tick=tick + int(definition.duration))

    @property
    def event_id(self) -> str:
        return self.definition.event_id

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def impact(self) -> Impact:
        return self.definition.impact

    @property
    def multiplier(self) -> float:
        return self.definition.multiplier

    def to_dict(self) -> dict:
        return {
            "event_id": self.event_id,
            "name": self.name,
            "impact": self.impact,
            "multiplier": float(self.multiplier),
            "start_tick": int(self.start_tick),
            "end_tick": int(self.end_tick),
        }


# -----------------------------
# Engine state + snapshots
# -----------------------------
@dataclass
class SimulationState:
    """The engine's only mutable record. Never handed out directly; see ``snapshot``."""
    current_time: float
    current_population: float
    tick_count: int = 0
    time_multiplier: float = 1.0
    population_multiplier: float = 1.0
    is_running: bool = False
    is_game_over: bool = False
    game_over_reason: Optional[str] = None
    active_events: List[ActiveEvent] = field(default_factory=list)
    tool_states: Dict[str, float] = field(default_factory=dict)
    total_demand: float = 0.0
    total_supply: float = 0.0
    capacity_factor: float = 0.0
    capacity_zone: CapacityZone = "optimal"
    infrastructure_tier: str = ""
    demand_event_multiplier: float = 1.0
    supply_event_multiplier: float = 1.0
    demand_tool_multiplier: float = 1.0
    supply_tool_multiplier: float = 1.0
    warning_count: int = 0
    ticks_in_red_zone: int = 0

    def snapshot(self, tick_interval_ms: float, max_warnings: int) -> "StateSnapshot":
        return StateSnapshot(
            current_time=float(self.current_time),
            current_population=float(self.current_population),
            tick_count=int(self.tick_count),
            time_multiplier=float(self.time_multiplier),
            population_multiplier=float(self.population_multiplier),
            is_running=bool(self.is_running),
            is_game_over=bool(self.is_game_over),
            game_over_reason=self.game_over_reason,
            active_events=tuple(self.active_events),
            tool_states=MappingProxyType(dict(self.tool_states)),
            total_demand=float(self.total_demand),
            total_supply=float(self.total_supply),
            capacity_factor=float(self.capacity_factor),
            capacity_zone=self.capacity_zone,
            infrastructure_tier=self.infrastructure_tier,
            demand_event_multiplier=float(self.demand_event_multiplier),
            supply_event_multiplier=float(self.supply_event_multiplier),
            demand_tool_multiplier=float(self.demand_tool_multiplier),
            supply_tool_multiplier=float(self.supply_tool_multiplier),
            warning_count=int(self.warning_count),
            warnings_remaining=max(0, int(max_warnings) - int(self.warning_count)),
            ticks_in_red_zone=int(self.ticks_in_red_zone),
            tick_interval_ms=float(tick_interval_ms),
        )

@dataclass(frozen=True)
class StateSnapshot:
    current_time: float
    current_population: float
    tick_count: int
    time_multiplier: float
    population_multiplier: float
    is_running: bool
    is_game_over: bool
    game_over_reason: Optional[str]
    active_events: Tuple[ActiveEvent, ...]
    tool_states: Mapping[str, float]
    total_demand: float
    total_supply: float
    capacity_factor: float
    capacity_zone: CapacityZone
    infrastructure_tier: str
    demand_event_multiplier: float
    supply_event_multiplier: float
    demand_tool_multiplier: float
    supply_tool_multiplier: float
    warning_count: int
    warnings_remaining: int
    ticks_in_red_zone: int
    tick_interval_ms: float

    def to_row(self) -> Dict[str, Any]:
        """Flat, scalar-only view used for metrics history."""
        row = {
            f.name: getattr(self, f.name) for f in fields(self)
            if f.name not in ("active_events", "tool_states")
        }
        row["active_event_ids"] = ",".join(e.event_id for e in self.active_events)
        row["active_event_count"] = len(self.active_events)
        for tool_id, value in sorted(self.tool_states.items()):
            row[f"tool:{tool_id}"] = float(value)
        return row


# -----------------------------
# Observers
# -----------------------------
Observer = Callable[[StateSnapshot], None]

class ObserverRegistry:
    """Id-keyed callbacks; ``subscribe`` hands back the matching unsubscribe."""

    def __init__(self) -> None:
        self._observers: Dict[int, Observer] = {}
        self._ids = itertools.count(1)

    def subscribe(self, callback: Observer) -> Callable[[], None]:
        observer_id = next(self._ids)
        self._observers[observer_id] = callback

        def unsubscribe() -> None:
            self._observers.pop(observer_id, None)

        return unsubscribe

    def notify(self, snapshot: StateSnapshot) -> None:
        for callback in list(self._observers.values()):
            callback(snapshot)

    def __len__(self) -> int:
        return len(self._observers)
