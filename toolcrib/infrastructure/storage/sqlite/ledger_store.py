"""SQLite implementation of the transaction ledger."""

from datetime import datetime

import aiosqlite

from toolcrib.config import get_logger
from toolcrib.core.entities.stock import StockTransaction, TransactionType, utc_now
from toolcrib.core.exceptions import TransactionNotFoundError
from toolcrib.core.interfaces.ledger import ITransactionLedger
from toolcrib.infrastructure.storage.sqlite.connection import ConnectionPool
from toolcrib.infrastructure.storage.sqlite.rows import (
    from_db_factory,
    from_db_timestamp,
    from_db_timestamp_or_now,
    to_db_factory,
    to_db_timestamp,
)

logger = get_logger(__name__)

_SIGNED_QUANTITY = """
    CASE transaction_type WHEN 'outbound' THEN -quantity ELSE quantity END
"""


class SQLiteTransactionLedger(ITransactionLedger):
    """Append-mostly store of stock movements."""

    def __init__(self, pool: ConnectionPool):
        self._pool = pool

    async def append(self, entry: StockTransaction) -> StockTransaction:
        now = utc_now()
        entry.processed_at = entry.processed_at or now
        entry.created_at = now
        entry.updated_at = now
        if entry.total_amount is None:
            entry.total_amount = entry.computed_total()

        async with self._pool.transaction() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO stock_transactions (
                    aggregate_id, tool_type_id, factory_id, transaction_type,
                    quantity, unit_price, total_amount, counterparty,
                    equipment_id, equipment_number, tool_position, notes,
                    processed_at, processed_by, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    entry.aggregate_id,
                    entry.tool_type_id,
                    to_db_factory(entry.factory_id),
                    entry.transaction_type.value,
                    entry.quantity,
                    entry.unit_price,
                    entry.total_amount,
                    entry.counterparty,
                    entry.equipment_id,
                    entry.equipment_number,
                    entry.tool_position,
                    entry.notes,
                    to_db_timestamp(entry.processed_at),
                    entry.processed_by,
                    to_db_timestamp(entry.created_at),
                    to_db_timestamp(entry.updated_at),
                ),
            )
            entry.id = cursor.lastrowid

        logger.info(
            "ledger_entry_appended",
            transaction_id=entry.id,
            aggregate_id=entry.aggregate_id,
            type=entry.transaction_type.value,
            qty=entry.quantity,
        )
        return entry

    async def get(self, transaction_id: int) -> StockTransaction | None:
        async with self._pool.acquire() as conn:
            cursor = await conn.execute(
                "SELECT * FROM stock_transactions WHERE id = ?", (transaction_id,)
            )
            row = await cursor.fetchone()
        return self._row_to_transaction(row) if row else None

    async def update(self, entry: StockTransaction) -> StockTransaction:
        """Rewrite the editable fields; aggregate, type and processed_at stay."""
        if entry.id is None:
            raise TransactionNotFoundError(0)
        entry.updated_at = utc_now()
        if entry.total_amount is None:
            entry.total_amount = entry.computed_total()

        async with self._pool.transaction() as conn:
            cursor = await conn.execute(
                """
                UPDATE stock_transactions SET
                    quantity = ?,
                    unit_price = ?,
                    total_amount = ?,
                    counterparty = ?,
                    equipment_id = ?,
                    equipment_number = ?,
                    tool_position = ?,
                    notes = ?,
                    processed_by = ?,
                    updated_at = ?
                WHERE id = ?
                """,
                (
                    entry.quantity,
                    entry.unit_price,
                    entry.total_amount,
                    entry.counterparty,
                    entry.equipment_id,
                    entry.equipment_number,
                    entry.tool_position,
                    entry.notes,
                    entry.processed_by,
                    to_db_timestamp(entry.updated_at),
                    entry.id,
                ),
            )
            if cursor.rowcount == 0:
                raise TransactionNotFoundError(entry.id, entry.transaction_type.value)

        logger.info("ledger_entry_updated", transaction_id=entry.id, qty=entry.quantity)
        return entry

    async def delete(self, transaction_id: int) -> StockTransaction | None:
        async with self._pool.transaction() as conn:
            cursor = await conn.execute(
                "SELECT * FROM stock_transactions WHERE id = ?", (transaction_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            await conn.execute(
                "DELETE FROM stock_transactions WHERE id = ?", (transaction_id,)
            )

        logger.info("ledger_entry_deleted", transaction_id=transaction_id)
        return self._row_to_transaction(row)

    async def list_for(
        self,
        aggregate_id: int | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        factory_id: str | None = None,
        transaction_type: TransactionType | None = None,
        limit: int = 100,
    ) -> list[StockTransaction]:
        clauses: list[str] = []
        params: list = []
        if aggregate_id is not None:
            clauses.append("aggregate_id = ?")
            params.append(aggregate_id)
        if start is not None:
            clauses.append("processed_at >= ?")
            params.append(to_db_timestamp(start))
        if end is not None:
            clauses.append("processed_at <= ?")
            params.append(to_db_timestamp(end))
        if factory_id is not None:
            clauses.append("factory_id = ?")
            params.append(to_db_factory(factory_id))
        if transaction_type is not None:
            clauses.append("transaction_type = ?")
            params.append(transaction_type.value)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        async with self._pool.acquire() as conn:
            cursor = await conn.execute(
                f"""
                SELECT * FROM stock_transactions
                {where}
                ORDER BY processed_at DESC, id DESC
                LIMIT ?
                """,
                (*params, limit),
            )
            rows = await cursor.fetchall()
        return [self._row_to_transaction(row) for row in rows]

    async def signed_sum(self, aggregate_id: int) -> int:
        async with self._pool.acquire() as conn:
            cursor = await conn.execute(
                f"""
                SELECT COALESCE(SUM({_SIGNED_QUANTITY}), 0) AS total
                FROM stock_transactions WHERE aggregate_id = ?
                """,
                (aggregate_id,),
            )
            row = await cursor.fetchone()
        return int(row["total"])

    async def count_for(self, aggregate_id: int) -> int:
        async with self._pool.acquire() as conn:
            cursor = await conn.execute(
                "SELECT COUNT(*) AS n FROM stock_transactions WHERE aggregate_id = ?",
                (aggregate_id,),
            )
            row = await cursor.fetchone()
        return int(row["n"])

    @staticmethod
    def _row_to_transaction(row: aiosqlite.Row) -> StockTransaction:
        """Convert a database row to a StockTransaction entity."""
        return StockTransaction(
            id=row["id"],
            aggregate_id=row["aggregate_id"],
            tool_type_id=row["tool_type_id"],
            factory_id=from_db_factory(row["factory_id"]),
            transaction_type=TransactionType(row["transaction_type"]),
            quantity=row["quantity"],
            unit_price=float(row["unit_price"]),
            total_amount=float(row["total_amount"]),
            counterparty=row["counterparty"],
            equipment_id=row["equipment_id"],
            equipment_number=row["equipment_number"],
            tool_position=row["tool_position"],
            notes=row["notes"],
            processed_at=from_db_timestamp(row["processed_at"]),
            processed_by=row["processed_by"],
            created_at=from_db_timestamp_or_now(row["created_at"]),
            updated_at=from_db_timestamp_or_now(row["updated_at"]),
        )
