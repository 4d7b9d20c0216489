"""Abstract interface for tool-change history storage."""

from abc import ABC, abstractmethod
from datetime import datetime

from toolcrib.core.entities.tool_change import ToolChangeRecord


class IToolChangeStore(ABC):
    """Interface for tool-change record persistence."""

    @abstractmethod
    async def add(self, record: ToolChangeRecord) -> ToolChangeRecord:
        """Insert a record."""
        pass

    @abstractmethod
    async def delete_matching(
        self,
        equipment_id: int,
        tool_position: int,
        tool_type_id: int,
        start: datetime,
        end: datetime,
    ) -> int:
        """Delete records for a position changed within [start, end]; return count."""
        pass

    @abstractmethod
    async def list_records(
        self, equipment_id: int | None = None, limit: int = 100
    ) -> list[ToolChangeRecord]:
        """List records, newest first."""
        pass
