"""SQLite implementation of the tool type and equipment catalog."""

import aiosqlite

from toolcrib.config import get_logger
from toolcrib.core.entities.catalog import Equipment, ToolType
from toolcrib.core.exceptions import DuplicateEquipmentError, DuplicateToolTypeError
from toolcrib.core.interfaces.catalog_store import ICatalogStore
from toolcrib.infrastructure.storage.sqlite.connection import ConnectionPool
from toolcrib.infrastructure.storage.sqlite.rows import (
    from_db_factory,
    from_db_timestamp_or_now,
    to_db_factory,
    to_db_timestamp,
)

logger = get_logger(__name__)


class SQLiteCatalogStore(ICatalogStore):
    """Read-mostly reference data used to resolve requests."""

    def __init__(self, pool: ConnectionPool):
        self._pool = pool

    async def add_tool_type(self, tool_type: ToolType) -> ToolType:
        async with self._pool.acquire() as conn:
            try:
                cursor = await conn.execute(
                    """
                    INSERT INTO tool_types (code, name, unit_cost, created_at)
                    VALUES (?, ?, ?, ?)
                    """,
                    (
                        tool_type.code,
                        tool_type.name,
                        tool_type.unit_cost,
                        to_db_timestamp(tool_type.created_at),
                    ),
                )
                await conn.commit()
            except aiosqlite.IntegrityError as e:
                await conn.rollback()
                raise DuplicateToolTypeError(tool_type.code) from e
            tool_type.id = cursor.lastrowid

        logger.info("tool_type_created", tool_type_id=tool_type.id, code=tool_type.code)
        return tool_type

    async def get_tool_type(self, tool_type_id: int) -> ToolType | None:
        async with self._pool.acquire() as conn:
            cursor = await conn.execute(
                "SELECT * FROM tool_types WHERE id = ?", (tool_type_id,)
            )
            row = await cursor.fetchone()
        return self._row_to_tool_type(row) if row else None

    async def get_tool_type_by_code(self, code: str) -> ToolType | None:
        async with self._pool.acquire() as conn:
            cursor = await conn.execute(
                "SELECT * FROM tool_types WHERE code = ?", (code,)
            )
            row = await cursor.fetchone()
        return self._row_to_tool_type(row) if row else None

    async def add_equipment(self, equipment: Equipment) -> Equipment:
        async with self._pool.acquire() as conn:
            try:
                cursor = await conn.execute(
                    """
                    INSERT INTO equipment (equipment_number, location, factory_id, created_at)
                    VALUES (?, ?, ?, ?)
                    """,
                    (
                        equipment.equipment_number,
                        equipment.location,
                        to_db_factory(equipment.factory_id),
                        to_db_timestamp(equipment.created_at),
                    ),
                )
                await conn.commit()
            except aiosqlite.IntegrityError as e:
                await conn.rollback()
                raise DuplicateEquipmentError(
                    equipment.equipment_number, equipment.factory_id
                ) from e
            equipment.id = cursor.lastrowid

        logger.info(
            "equipment_created",
            equipment_id=equipment.id,
            equipment_number=equipment.equipment_number,
        )
        return equipment

    async def get_equipment_by_number(
        self, equipment_number: int, factory_id: str | None = None
    ) -> Equipment | None:
        """Factory-scoped lookup first, then any factory when unscoped."""
        async with self._pool.acquire() as conn:
            if factory_id is not None:
                cursor = await conn.execute(
                    "SELECT * FROM equipment WHERE equipment_number = ? AND factory_id = ?",
                    (equipment_number, to_db_factory(factory_id)),
                )
            else:
                cursor = await conn.execute(
                    """
                    SELECT * FROM equipment WHERE equipment_number = ?
                    ORDER BY factory_id ASC, id ASC LIMIT 1
                    """,
                    (equipment_number,),
                )
            row = await cursor.fetchone()
        return self._row_to_equipment(row) if row else None

    @staticmethod
    def _row_to_tool_type(row: aiosqlite.Row) -> ToolType:
        return ToolType(
            id=row["id"],
            code=row["code"],
            name=row["name"],
            unit_cost=float(row["unit_cost"]),
            created_at=from_db_timestamp_or_now(row["created_at"]),
        )

    @staticmethod
    def _row_to_equipment(row: aiosqlite.Row) -> Equipment:
        return Equipment(
            id=row["id"],
            equipment_number=row["equipment_number"],
            location=row["location"],
            factory_id=from_db_factory(row["factory_id"]),
            created_at=from_db_timestamp_or_now(row["created_at"]),
        )
