"""Core domain services."""

from toolcrib.core.services.stock_status import StockThresholds
from toolcrib.core.services.tool_change_recorder import ToolChangeRecorder

__all__ = [
    "StockThresholds",
    "ToolChangeRecorder",
]
