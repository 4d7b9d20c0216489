"""SQLite implementation of stock aggregate storage."""

import aiosqlite

from toolcrib.config import get_logger
from toolcrib.core.entities.stock import ItemKey, StockAggregate, StockStatus, utc_now
from toolcrib.core.exceptions import AggregateNotFoundError, NegativeStockError
from toolcrib.core.interfaces.aggregate_store import IStockAggregateStore
from toolcrib.core.services.stock_status import StockThresholds
from toolcrib.infrastructure.storage.sqlite.connection import ConnectionPool
from toolcrib.infrastructure.storage.sqlite.rows import (
    from_db_factory,
    from_db_timestamp_or_now,
    to_db_factory,
    to_db_timestamp,
)

logger = get_logger(__name__)


class SQLiteStockAggregateStore(IStockAggregateStore):
    """One row per (tool type, factory) holding current stock and status."""

    def __init__(self, pool: ConnectionPool, thresholds: StockThresholds | None = None):
        self._pool = pool
        self._thresholds = thresholds or StockThresholds()

    async def find_or_create(
        self,
        key: ItemKey,
        min_stock: int,
        max_stock: int,
        location: str | None = None,
    ) -> tuple[StockAggregate, bool]:
        now = to_db_timestamp(utc_now())
        async with self._pool.transaction() as conn:
            # Concurrent first receipts race on the unique key; the loser reads the winner's row
            cursor = await conn.execute(
                """
                INSERT INTO stock_aggregates (
                    tool_type_id, factory_id, current_stock, min_stock, max_stock,
                    status, location, last_updated, created_at
                ) VALUES (?, ?, 0, ?, ?, ?, ?, ?, ?)
                ON CONFLICT (tool_type_id, factory_id) DO NOTHING
                """,
                (
                    key.tool_type_id,
                    to_db_factory(key.factory_id),
                    min_stock,
                    max_stock,
                    self._thresholds.classify(0).value,
                    location,
                    now,
                    now,
                ),
            )
            created = cursor.rowcount == 1
            row = await self._fetch_by_key(conn, key)

        aggregate = self._row_to_aggregate(row)
        if created:
            logger.info(
                "stock_aggregate_created",
                aggregate_id=aggregate.id,
                tool_type_id=key.tool_type_id,
                factory_id=key.factory_id,
            )
        return aggregate, created

    async def get(self, aggregate_id: int) -> StockAggregate | None:
        async with self._pool.acquire() as conn:
            row = await self._fetch(conn, aggregate_id)
        return self._row_to_aggregate(row) if row else None

    async def get_by_key(self, key: ItemKey) -> StockAggregate | None:
        async with self._pool.acquire() as conn:
            row = await self._fetch_by_key(conn, key)
        return self._row_to_aggregate(row) if row else None

    async def list_aggregates(
        self,
        status: StockStatus | None = None,
        factory_id: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[StockAggregate]:
        clauses: list[str] = []
        params: list = []
        if status is not None:
            clauses.append("status = ?")
            params.append(status.value)
        if factory_id is not None:
            clauses.append("factory_id = ?")
            params.append(to_db_factory(factory_id))
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        async with self._pool.acquire() as conn:
            cursor = await conn.execute(
                f"""
                SELECT * FROM stock_aggregates
                {where}
                ORDER BY current_stock ASC, id ASC
                LIMIT ? OFFSET ?
                """,
                (*params, limit, offset),
            )
            rows = await cursor.fetchall()
        return [self._row_to_aggregate(row) for row in rows]

    async def apply_delta(self, aggregate_id: int, delta: int) -> StockAggregate:
        """Conditional read-modify-write in a single statement.

        The WHERE clause carries the non-negativity check, so two concurrent
        dispenses cannot both pass a stale read. Status is recomputed in the
        same transaction.
        """
        async with self._pool.transaction() as conn:
            cursor = await conn.execute(
                """
                UPDATE stock_aggregates
                SET current_stock = current_stock + ?
                WHERE id = ? AND current_stock + ? >= 0
                """,
                (delta, aggregate_id, delta),
            )
            if cursor.rowcount == 0:
                row = await self._fetch(conn, aggregate_id)
                if row is None:
                    raise AggregateNotFoundError(aggregate_id=aggregate_id)
                raise NegativeStockError(aggregate_id, row["current_stock"], delta)

            row = await self._restamp(conn, aggregate_id)

        aggregate = self._row_to_aggregate(row)
        logger.info(
            "stock_delta_applied",
            aggregate_id=aggregate_id,
            delta=delta,
            current_stock=aggregate.current_stock,
            status=aggregate.status.value,
        )
        return aggregate

    async def set_bounds(
        self, aggregate_id: int, min_stock: int, max_stock: int
    ) -> StockAggregate:
        async with self._pool.transaction() as conn:
            cursor = await conn.execute(
                """
                UPDATE stock_aggregates
                SET min_stock = ?, max_stock = ?, last_updated = ?
                WHERE id = ?
                """,
                (min_stock, max_stock, to_db_timestamp(utc_now()), aggregate_id),
            )
            if cursor.rowcount == 0:
                raise AggregateNotFoundError(aggregate_id=aggregate_id)
            row = await self._fetch(conn, aggregate_id)

        logger.info(
            "stock_bounds_updated",
            aggregate_id=aggregate_id,
            min_stock=min_stock,
            max_stock=max_stock,
        )
        return self._row_to_aggregate(row)

    async def overwrite_stock(self, aggregate_id: int, current_stock: int) -> StockAggregate:
        if current_stock < 0:
            raise NegativeStockError(aggregate_id, current_stock, 0)
        async with self._pool.transaction() as conn:
            cursor = await conn.execute(
                "UPDATE stock_aggregates SET current_stock = ? WHERE id = ?",
                (current_stock, aggregate_id),
            )
            if cursor.rowcount == 0:
                raise AggregateNotFoundError(aggregate_id=aggregate_id)
            row = await self._restamp(conn, aggregate_id)

        logger.warning(
            "stock_overwritten",
            aggregate_id=aggregate_id,
            current_stock=current_stock,
        )
        return self._row_to_aggregate(row)

    async def _restamp(self, conn: aiosqlite.Connection, aggregate_id: int) -> aiosqlite.Row:
        """Recompute status and last_updated from the stored stock."""
        row = await self._fetch(conn, aggregate_id)
        status = self._thresholds.classify(row["current_stock"])
        await conn.execute(
            "UPDATE stock_aggregates SET status = ?, last_updated = ? WHERE id = ?",
            (status.value, to_db_timestamp(utc_now()), aggregate_id),
        )
        return await self._fetch(conn, aggregate_id)

    @staticmethod
    async def _fetch(conn: aiosqlite.Connection, aggregate_id: int) -> aiosqlite.Row | None:
        cursor = await conn.execute(
            "SELECT * FROM stock_aggregates WHERE id = ?", (aggregate_id,)
        )
        return await cursor.fetchone()

    @staticmethod
    async def _fetch_by_key(conn: aiosqlite.Connection, key: ItemKey) -> aiosqlite.Row | None:
        cursor = await conn.execute(
            "SELECT * FROM stock_aggregates WHERE tool_type_id = ? AND factory_id = ?",
            (key.tool_type_id, to_db_factory(key.factory_id)),
        )
        return await cursor.fetchone()

    @staticmethod
    def _row_to_aggregate(row: aiosqlite.Row) -> StockAggregate:
        """Convert a database row to a StockAggregate entity."""
        return StockAggregate(
            id=row["id"],
            tool_type_id=row["tool_type_id"],
            factory_id=from_db_factory(row["factory_id"]),
            current_stock=row["current_stock"],
            min_stock=row["min_stock"],
            max_stock=row["max_stock"],
            status=StockStatus(row["status"]),
            location=row["location"],
            last_updated=from_db_timestamp_or_now(row["last_updated"]),
            created_at=from_db_timestamp_or_now(row["created_at"]),
        )
