from __future__ import annotations

from typing import Callable, List

import pytest

from gridsim.config import EngineConfig


class ManualTimer:
    def __init__(self, delay_s: float, callback: Callable[[], None]) -> None:
        self.delay_s = delay_s
        self.callback = callback
        self.started = False
        self.cancelled = False
        self.fired = False

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        if self.cancelled or self.fired:
            return
        self.fired = True
        self.callback()


class ManualClock:
    """Timer factory that never fires on its own; tests call ``advance``."""

    def __init__(self) -> None:
        self.timers: List[ManualTimer] = []

    def __call__(self, delay_s: float, callback: Callable[[], None]) -> ManualTimer:
        t = ManualTimer(delay_s, callback)
        self.timers.append(t)
        return t

    @property
    def pending(self) -> List[ManualTimer]:
        return [t for t in self.timers if t.started and not t.cancelled and not t.fired]

    def advance(self) -> ManualTimer:
        pending = self.pending
        assert len(pending) == 1, f"expected one pending timer, found {len(pending)}"
        timer = pending[0]
        timer.fire()
        return timer


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def steady_cfg() -> EngineConfig:
    return EngineConfig(population_volatility=0.0)
