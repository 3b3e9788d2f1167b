from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List
import pandas as pd

from .core import ActiveEvent

@dataclass
class MetricsStore:
    """Per-tick snapshot rows plus one row per admitted event, closed when the event ends."""
    tick_rows: List[Dict[str, Any]] = field(default_factory=list)
    event_rows: List[Dict[str, Any]] = field(default_factory=list)
    _open_events: Dict[str, int] = field(default_factory=dict, repr=False)

    def add_tick(self, row: Dict[str, Any]) -> None:
        self.tick_rows.append(row)

    def event_started(self, ev: ActiveEvent, capacity_factor: float) -> None:
        row = ev.to_dict()
        row.update(capacity_factor_before=float(capacity_factor), ended_tick=None)
        self._open_events[ev.event_id] = len(self.event_rows)
        self.event_rows.append(row)

    def event_ended(self, ev: ActiveEvent, tick: int) -> None:
        idx = self._open_events.pop(ev.event_id, None)
        if idx is not None:
            self.event_rows[idx]["ended_tick"] = int(tick)

    def clear(self) -> None:
        self.tick_rows.clear()
        self.event_rows.clear()
        self._open_events.clear()

    def history_df(self) -> pd.DataFrame:
        return pd.DataFrame(self.tick_rows)

    def events_df(self) -> pd.DataFrame:
        df = pd.DataFrame(self.event_rows)
        if df.empty:
            return df
        # still-active events have no ended_tick yet
        df["ended_tick"] = df["ended_tick"].astype(float)
        df["ticks_active"] = df["ended_tick"] - df["start_tick"]
        return df
