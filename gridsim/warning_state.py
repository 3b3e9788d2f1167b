from __future__ import annotations
from dataclasses import dataclass
from typing import Literal, Optional
import logging

logger = logging.getLogger(__name__)

HEALTHY_MIN = 0.8
HEALTHY_MAX = 0.95
RED_ZONE_TICKS = 10
MAX_WARNINGS = 3

OVERLOAD_REASON = (
    "Grid overload: demand stayed above 95% of available supply for too long "
    "and the network collapsed."
)
UNDERUSE_REASON = (
    "Grid inefficiency: capacity stayed below 80% utilisation for too long "
    "and the operator was shut down."
)

Outcome = Literal["ok", "red", "warning", "game_over", "terminal"]

def classify_capacity(capacity_factor: float, healthy_min: float = HEALTHY_MIN,
                      healthy_max: float = HEALTHY_MAX) -> str:
    if capacity_factor < healthy_min:
        return "inefficient"
    if capacity_factor >= healthy_max:
        return "overload"
    return "optimal"


@dataclass
class WarningStateMachine:
    """
    Counts consecutive red-zone ticks. Every ``red_zone_ticks`` of them issue one warning
    and restart the count; ``max_warnings`` warnings end the game for good.
    """
    healthy_min: float = HEALTHY_MIN
    healthy_max: float = HEALTHY_MAX
    red_zone_ticks: int = RED_ZONE_TICKS
    max_warnings: int = MAX_WARNINGS

    warning_count: int = 0
    ticks_in_red_zone: int = 0
    is_game_over: bool = False
    game_over_reason: Optional[str] = None
    last_zone: str = "optimal"

    def reset(self) -> None:
        self.warning_count = 0
        self.ticks_in_red_zone = 0
        self.is_game_over = False
        self.game_over_reason = None
        self.last_zone = "optimal"

    def classify(self, capacity_factor: float) -> str:
        return classify_capacity(capacity_factor, self.healthy_min, self.healthy_max)

    def observe(self, capacity_factor: float) -> str:
        """Refresh the zone without counting a tick (used for out-of-cadence recomputes)."""
        if not self.is_game_over:
            self.last_zone = self.classify(capacity_factor)
        return self.last_zone

    def evaluate(self, capacity_factor: float) -> Outcome:
        if self.is_game_over:
            return "terminal"

        zone = self.classify(capacity_factor)
        self.last_zone = zone
        if zone == "optimal":
            self.ticks_in_red_zone = 0
            return "ok"

        self.ticks_in_red_zone += 1
        if self.ticks_in_red_zone < self.red_zone_ticks:
            return "red"

        self.warning_count += 1
        self.ticks_in_red_zone = 0
        if self.warning_count >= self.max_warnings:
            self.is_game_over = True
            # cf == healthy_max already counts as overload here, same as the zone
            self.game_over_reason = OVERLOAD_REASON if zone == "overload" else UNDERUSE_REASON
            logger.info("game over after %d warnings: %s", self.warning_count, zone)
            return "game_over"
        logger.warning("warning %d/%d issued (%s, capacity factor %.3f)",
                       self.warning_count, self.max_warnings, zone, capacity_factor)
        return "warning"
