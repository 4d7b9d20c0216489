"""Tests for SQLiteCatalogStore."""

import pytest

from toolcrib.core.entities.catalog import Equipment, ToolType
from toolcrib.core.exceptions import DuplicateEquipmentError, DuplicateToolTypeError


class TestToolTypes:
    async def test_lookup_by_code_and_id(self, catalog_store, tool_type: ToolType):
        by_code = await catalog_store.get_tool_type_by_code("EM-10")
        by_id = await catalog_store.get_tool_type(tool_type.id)

        assert by_code.id == tool_type.id
        assert by_id.code == "EM-10"
        assert by_id.unit_cost == 1000.0

    async def test_unknown_code(self, catalog_store):
        assert await catalog_store.get_tool_type_by_code("NOPE") is None

    async def test_duplicate_code(self, catalog_store, tool_type: ToolType):
        with pytest.raises(DuplicateToolTypeError):
            await catalog_store.add_tool_type(ToolType(code="EM-10"))

    async def test_store_usable_after_duplicate(self, catalog_store, tool_type: ToolType):
        """The failed insert is rolled back and the connection goes back clean."""
        with pytest.raises(DuplicateToolTypeError):
            await catalog_store.add_tool_type(ToolType(code="EM-10"))
        added = await catalog_store.add_tool_type(ToolType(code="EM-12"))
        assert added.id is not None


class TestEquipment:
    async def test_lookup_without_factory(self, catalog_store, equipment: Equipment):
        found = await catalog_store.get_equipment_by_number(7)
        assert found.id == equipment.id
        assert found.factory_id is None

    async def test_factory_scoped_lookup(self, catalog_store, equipment: Equipment):
        scoped = await catalog_store.add_equipment(Equipment(equipment_number=7, factory_id="F2"))

        assert (await catalog_store.get_equipment_by_number(7, "F2")).id == scoped.id
        assert await catalog_store.get_equipment_by_number(7, "F3") is None

    async def test_duplicate_in_same_factory(self, catalog_store, equipment: Equipment):
        with pytest.raises(DuplicateEquipmentError):
            await catalog_store.add_equipment(Equipment(equipment_number=7))

    async def test_unknown_number(self, catalog_store):
        assert await catalog_store.get_equipment_by_number(99) is None
