from __future__ import annotations
from typing import Dict, Sequence, Tuple
import logging

from .catalog import ALL_TOOLS, SliderTool, ToggleTool, Tool, default_tool_states

logger = logging.getLogger(__name__)

def tool_multiplier(tool: Tool, value: float) -> float:
    """
    Slider: the value is the fractional adjustment, so -0.10 becomes 0.90.
    Toggle: the declared multiplier while switched on (value == 1), identity otherwise.
    """
    if isinstance(tool, SliderTool):
        return 1.0 + float(value)
    if isinstance(tool, ToggleTool):
        return float(tool.multiplier) if float(value) == 1.0 else 1.0
    raise TypeError(f"unsupported tool variant: {type(tool).__name__}")


class ToolRegistry:
    def __init__(self, catalog: Sequence[Tool] = ALL_TOOLS) -> None:
        self.catalog: Tuple[Tool, ...] = tuple(catalog)
        self.values: Dict[str, float] = default_tool_states(self.catalog)

    def reset(self) -> None:
        self.values = default_tool_states(self.catalog)

    def get_value(self, tool_id: str) -> float:
        return float(self.values.get(tool_id, 0.0))

    def set_value(self, tool_id: str, value: float) -> float:
        """Store ``value`` and return the previous one. Unknown ids are kept but never composed."""
        previous = self.get_value(tool_id)
        if not any(t.tool_id == tool_id for t in self.catalog):
            logger.debug("storing value for unknown tool id=%s", tool_id)
        self.values[tool_id] = float(value)
        return previous

    def multiplier(self, impact: str) -> float:
        m = 1.0
        for tool in self.catalog:
            if tool.impact != impact:
                continue
            m *= tool_multiplier(tool, self.get_value(tool.tool_id))
        return m

    def snapshot(self) -> Dict[str, float]:
        return dict(self.values)
