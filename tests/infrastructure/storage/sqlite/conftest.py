"""Pytest fixtures for SQLite storage tests."""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest

from toolcrib.core.entities.catalog import Equipment, ToolType
from toolcrib.core.entities.stock import ItemKey, StockAggregate
from toolcrib.infrastructure.storage.sqlite import (
    ConnectionPool,
    SQLiteCatalogStore,
    SQLiteStockAggregateStore,
    SQLiteToolChangeStore,
    SQLiteTransactionLedger,
)
from toolcrib.infrastructure.storage.sqlite.migrations import initialize_database


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary database path."""
    return tmp_path / "test.db"


@pytest.fixture
async def pool(temp_db_path: Path) -> AsyncGenerator[ConnectionPool, None]:
    """Connection pool over a migrated database."""
    await initialize_database(temp_db_path, create_backup_before=False)
    pool = ConnectionPool(temp_db_path, pool_size=2, busy_timeout=5000)
    await pool.initialize()
    yield pool
    await pool.close()


@pytest.fixture
def aggregate_store(pool: ConnectionPool) -> SQLiteStockAggregateStore:
    return SQLiteStockAggregateStore(pool)


@pytest.fixture
def ledger(pool: ConnectionPool) -> SQLiteTransactionLedger:
    return SQLiteTransactionLedger(pool)


@pytest.fixture
def tool_change_store(pool: ConnectionPool) -> SQLiteToolChangeStore:
    return SQLiteToolChangeStore(pool)


@pytest.fixture
def catalog_store(pool: ConnectionPool) -> SQLiteCatalogStore:
    return SQLiteCatalogStore(pool)


@pytest.fixture
async def tool_type(catalog_store: SQLiteCatalogStore) -> ToolType:
    return await catalog_store.add_tool_type(
        ToolType(code="EM-10", name="10mm flat endmill", unit_cost=1000.0)
    )


@pytest.fixture
async def equipment(catalog_store: SQLiteCatalogStore) -> Equipment:
    return await catalog_store.add_equipment(Equipment(equipment_number=7, location="Line 1"))


@pytest.fixture
async def aggregate(
    aggregate_store: SQLiteStockAggregateStore, tool_type: ToolType
) -> StockAggregate:
    """Empty aggregate for EM-10 without a factory."""
    created, _ = await aggregate_store.find_or_create(
        ItemKey(tool_type_id=tool_type.id), min_stock=5, max_stock=50
    )
    return created
