"""Core interfaces (ports) for dependency injection."""

from toolcrib.core.interfaces.aggregate_store import IStockAggregateStore
from toolcrib.core.interfaces.catalog_store import ICatalogStore
from toolcrib.core.interfaces.ledger import ITransactionLedger
from toolcrib.core.interfaces.tool_change_store import IToolChangeStore

__all__ = [
    "IStockAggregateStore",
    "ICatalogStore",
    "ITransactionLedger",
    "IToolChangeStore",
]
