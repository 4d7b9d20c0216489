"""Abstract interface for tool type and equipment lookups."""

from abc import ABC, abstractmethod

from toolcrib.core.entities.catalog import Equipment, ToolType


class ICatalogStore(ABC):
    """Interface for the tool type / equipment catalog."""

    @abstractmethod
    async def add_tool_type(self, tool_type: ToolType) -> ToolType:
        """Register a tool type. Raises DuplicateToolTypeError."""
        pass

    @abstractmethod
    async def get_tool_type(self, tool_type_id: int) -> ToolType | None:
        """Get tool type by ID."""
        pass

    @abstractmethod
    async def get_tool_type_by_code(self, code: str) -> ToolType | None:
        """Get tool type by catalog code."""
        pass

    @abstractmethod
    async def add_equipment(self, equipment: Equipment) -> Equipment:
        """Register equipment. Raises DuplicateEquipmentError."""
        pass

    @abstractmethod
    async def get_equipment_by_number(
        self, equipment_number: int, factory_id: str | None = None
    ) -> Equipment | None:
        """Get equipment by its floor number."""
        pass
