"""Core domain entities."""

from toolcrib.core.entities.catalog import (
    Equipment,
    ToolType,
    normalize_equipment_number,
)
from toolcrib.core.entities.stock import (
    ItemKey,
    StockAggregate,
    StockStatus,
    StockTransaction,
    TransactionType,
    utc_now,
)
from toolcrib.core.entities.tool_change import ToolChangeRecord

__all__ = [
    # Catalog
    "Equipment",
    "ToolType",
    "normalize_equipment_number",
    # Stock
    "ItemKey",
    "StockAggregate",
    "StockStatus",
    "StockTransaction",
    "TransactionType",
    "utc_now",
    # History
    "ToolChangeRecord",
]
