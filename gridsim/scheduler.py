from __future__ import annotations
from typing import Callable, Optional, Protocol
import logging
import threading

logger = logging.getLogger(__name__)

class TimerHandle(Protocol):
    def start(self) -> None: ...
    def cancel(self) -> None: ...

TimerFactory = Callable[[float, Callable[[], None]], TimerHandle]

def thread_timer(delay_s: float, callback: Callable[[], None]) -> TimerHandle:
    t = threading.Timer(delay_s, callback)
    t.daemon = True
    return t


class TickScheduler:
    """
    Owns at most one pending timer. Each ``arm`` bumps a generation counter and the
    timer carries the generation it was armed with; ``cancel`` bumps it again. A timer
    that fires late (cancel lost the race against the timer thread) sees a stale
    generation under ``lock`` and returns without ticking.
    """

    def __init__(
        self,
        on_fire: Callable[[], None],
        lock: Optional[threading.RLock] = None,
        timer_factory: Optional[TimerFactory] = None,
    ) -> None:
        self._on_fire = on_fire
        self._lock = lock if lock is not None else threading.RLock()
        self._timer_factory = timer_factory or thread_timer
        self._handle: Optional[TimerHandle] = None
        self._generation = 0

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def arm(self, interval_ms: float) -> None:
        with self._lock:
            self._cancel_handle()
            self._generation += 1
            generation = self._generation
            handle = self._timer_factory(max(0.0, interval_ms) / 1000.0, lambda: self._fire(generation))
            self._handle = handle
            handle.start()

    def cancel(self) -> None:
        with self._lock:
            self._generation += 1
            self._cancel_handle()

    def _cancel_handle(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                logger.debug("dropping stale timer generation=%d current=%d", generation, self._generation)
                return
            self._handle = None
            self._on_fire()
