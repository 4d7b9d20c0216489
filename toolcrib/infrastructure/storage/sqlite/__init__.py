"""SQLite storage implementations."""

from toolcrib.infrastructure.storage.sqlite.aggregate_store import SQLiteStockAggregateStore
from toolcrib.infrastructure.storage.sqlite.catalog_store import SQLiteCatalogStore
from toolcrib.infrastructure.storage.sqlite.connection import ConnectionPool
from toolcrib.infrastructure.storage.sqlite.ledger_store import SQLiteTransactionLedger
from toolcrib.infrastructure.storage.sqlite.tool_change_store import SQLiteToolChangeStore

__all__ = [
    # Connection
    "ConnectionPool",
    # Store classes
    "SQLiteCatalogStore",
    "SQLiteStockAggregateStore",
    "SQLiteToolChangeStore",
    "SQLiteTransactionLedger",
]
