"""SQLite implementation of tool-change history storage."""

from datetime import datetime

import aiosqlite

from toolcrib.config import get_logger
from toolcrib.core.entities.tool_change import ToolChangeRecord
from toolcrib.core.interfaces.tool_change_store import IToolChangeStore
from toolcrib.infrastructure.storage.sqlite.connection import ConnectionPool
from toolcrib.infrastructure.storage.sqlite.rows import (
    from_db_timestamp_or_now,
    to_db_timestamp,
)

logger = get_logger(__name__)


class SQLiteToolChangeStore(IToolChangeStore):
    def __init__(self, pool: ConnectionPool):
        self._pool = pool

    async def add(self, record: ToolChangeRecord) -> ToolChangeRecord:
        async with self._pool.transaction() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO tool_change_records (
                    equipment_id, equipment_number, tool_position, tool_type_id,
                    tool_type_code, change_reason, change_date, changed_by, notes
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    record.equipment_id,
                    record.equipment_number,
                    record.tool_position,
                    record.tool_type_id,
                    record.tool_type_code,
                    record.change_reason,
                    to_db_timestamp(record.change_date),
                    record.changed_by,
                    record.notes,
                ),
            )
            record.id = cursor.lastrowid
        return record

    async def delete_matching(
        self,
        equipment_id: int,
        tool_position: int,
        tool_type_id: int,
        start: datetime,
        end: datetime,
    ) -> int:
        async with self._pool.transaction() as conn:
            cursor = await conn.execute(
                """
                DELETE FROM tool_change_records
                WHERE equipment_id = ?
                  AND tool_position = ?
                  AND tool_type_id = ?
                  AND change_date BETWEEN ? AND ?
                """,
                (
                    equipment_id,
                    tool_position,
                    tool_type_id,
                    to_db_timestamp(start),
                    to_db_timestamp(end),
                ),
            )
            removed = cursor.rowcount
        if removed:
            logger.info(
                "tool_change_records_deleted",
                equipment_id=equipment_id,
                tool_position=tool_position,
                removed=removed,
            )
        return removed

    async def list_records(
        self, equipment_id: int | None = None, limit: int = 100
    ) -> list[ToolChangeRecord]:
        async with self._pool.acquire() as conn:
            if equipment_id is None:
                cursor = await conn.execute(
                    """
                    SELECT * FROM tool_change_records
                    ORDER BY change_date DESC, id DESC LIMIT ?
                    """,
                    (limit,),
                )
            else:
                cursor = await conn.execute(
                    """
                    SELECT * FROM tool_change_records
                    WHERE equipment_id = ?
                    ORDER BY change_date DESC, id DESC LIMIT ?
                    """,
                    (equipment_id, limit),
                )
            rows = await cursor.fetchall()
        return [self._row_to_record(row) for row in rows]

    @staticmethod
    def _row_to_record(row: aiosqlite.Row) -> ToolChangeRecord:
        return ToolChangeRecord(
            id=row["id"],
            equipment_id=row["equipment_id"],
            equipment_number=row["equipment_number"],
            tool_position=row["tool_position"],
            tool_type_id=row["tool_type_id"],
            tool_type_code=row["tool_type_code"],
            change_reason=row["change_reason"],
            change_date=from_db_timestamp_or_now(row["change_date"]),
            changed_by=row["changed_by"],
            notes=row["notes"],
        )
