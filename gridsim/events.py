from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple
import logging
import random

from .catalog import ALL_EVENTS, EventDefinition
from .core import ActiveEvent

logger = logging.getLogger(__name__)

@dataclass
class EventUpdate:
    expired: List[ActiveEvent] = field(default_factory=list)
    admitted: Optional[ActiveEvent] = None
    attempted: bool = False


def conflicts_with(candidate: EventDefinition, active: Sequence[ActiveEvent]) -> bool:
    """True when ``candidate`` shares a conflict edge with any active event, in either direction."""
    for ev in active:
        if ev.event_id in candidate.conflicts or candidate.event_id in ev.definition.conflicts:
            return True
    return False


class EventManager:
    """
    Keeps the active random events. Admission runs on a fixed cadence, not per-event
    probability rolls: every ``check_interval`` ticks, while under the cap, draw from the
    whole catalog up to ``max_attempts`` times and keep the first event that is neither
    active nor in conflict with anything active. Running out of attempts just skips the cycle.
    """

    def __init__(
        self,
        rng: random.Random,
        catalog: Sequence[EventDefinition] = ALL_EVENTS,
        *,
        check_interval: int = 5,
        max_active: int = 4,
        max_attempts: int = 10,
    ) -> None:
        self.rng = rng
        self.catalog: Tuple[EventDefinition, ...] = tuple(catalog)
        self.check_interval = max(1, int(check_interval))
        self.max_active = max(0, int(max_active))
        self.max_attempts = max(0, int(max_attempts))
        self.active: List[ActiveEvent] = []

    def reset(self) -> None:
        self.active = []

    def active_ids(self) -> set[str]:
        return {e.event_id for e in self.active}

    def expire(self, tick: int) -> List[ActiveEvent]:
        expired = [e for e in self.active if e.end_tick <= tick]
        if expired:
            self.active = [e for e in self.active if e.end_tick > tick]
        return expired

    def try_admit(self, tick: int) -> Optional[ActiveEvent]:
        if not self.catalog or len(self.active) >= self.max_active:
            return None
        active_ids = self.active_ids()
        for _ in range(self.max_attempts):
            candidate = self.rng.choice(self.catalog)
            if candidate.event_id in active_ids:
                continue
            if conflicts_with(candidate, self.active):
                continue
            ev = ActiveEvent.materialize(candidate, tick)
            self.active.append(ev)
            return ev
        logger.debug("tick=%d no admissible event after %d draws", tick, self.max_attempts)
        return None

    def update(self, tick: int) -> EventUpdate:
        result = EventUpdate(expired=self.expire(tick))
        if tick % self.check_interval == 0 and len(self.active) < self.max_active:
            result.attempted = True
            result.admitted = self.try_admit(tick)
        return result

    def multiplier(self, impact: str) -> float:
        m = 1.0
        for ev in self.active:
            if ev.impact == impact:
                m *= ev.multiplier
        return m
