"""Storage infrastructure implementations."""

from toolcrib.infrastructure.storage.sqlite import (
    ConnectionPool,
    SQLiteCatalogStore,
    SQLiteStockAggregateStore,
    SQLiteToolChangeStore,
    SQLiteTransactionLedger,
)

__all__ = [
    "ConnectionPool",
    "SQLiteCatalogStore",
    "SQLiteStockAggregateStore",
    "SQLiteToolChangeStore",
    "SQLiteTransactionLedger",
]
