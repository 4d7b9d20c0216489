"""Tests for SQLiteStockAggregateStore."""

import asyncio

import pytest

from toolcrib.core.entities.catalog import ToolType
from toolcrib.core.entities.stock import ItemKey, StockAggregate, StockStatus
from toolcrib.core.exceptions import AggregateNotFoundError, NegativeStockError
from toolcrib.core.services.stock_status import StockThresholds
from toolcrib.infrastructure.storage.sqlite import SQLiteStockAggregateStore


class TestFindOrCreate:
    async def test_creates_empty_aggregate(self, aggregate_store, tool_type: ToolType):
        aggregate, created = await aggregate_store.find_or_create(
            ItemKey(tool_type_id=tool_type.id), min_stock=5, max_stock=50, location="Rack 2"
        )

        assert created is True
        assert aggregate.id is not None
        assert aggregate.current_stock == 0
        assert aggregate.min_stock == 5
        assert aggregate.max_stock == 50
        assert aggregate.status == StockStatus.CRITICAL
        assert aggregate.location == "Rack 2"
        assert aggregate.factory_id is None

    async def test_second_call_returns_existing(self, aggregate_store, aggregate):
        again, created = await aggregate_store.find_or_create(
            aggregate.key, min_stock=1, max_stock=2
        )
        assert created is False
        assert again.id == aggregate.id
        assert again.min_stock == 5

    async def test_factories_are_separate_items(self, aggregate_store, tool_type: ToolType):
        a, _ = await aggregate_store.find_or_create(
            ItemKey(tool_type_id=tool_type.id, factory_id="F1"), 0, 10
        )
        b, _ = await aggregate_store.find_or_create(
            ItemKey(tool_type_id=tool_type.id, factory_id="F2"), 0, 10
        )
        assert a.id != b.id
        assert a.factory_id == "F1"

    async def test_concurrent_first_receipts_share_one_row(
        self, aggregate_store, tool_type: ToolType
    ):
        key = ItemKey(tool_type_id=tool_type.id)
        results = await asyncio.gather(
            aggregate_store.find_or_create(key, 0, 10),
            aggregate_store.find_or_create(key, 0, 10),
        )
        assert results[0][0].id == results[1][0].id
        assert sorted(created for _, created in results) == [False, True]


class TestApplyDelta:
    async def test_increase_restamps_status(self, aggregate_store, aggregate: StockAggregate):
        updated = await aggregate_store.apply_delta(aggregate.id, 30)

        assert updated.current_stock == 30
        assert updated.status == StockStatus.LOW
        assert updated.last_updated >= aggregate.last_updated

    async def test_decrease_to_zero_allowed(self, aggregate_store, aggregate: StockAggregate):
        await aggregate_store.apply_delta(aggregate.id, 3)
        updated = await aggregate_store.apply_delta(aggregate.id, -3)
        assert updated.current_stock == 0
        assert updated.status == StockStatus.CRITICAL

    async def test_negative_result_rejected(self, aggregate_store, aggregate: StockAggregate):
        """The conditional write refuses and leaves stock untouched."""
        await aggregate_store.apply_delta(aggregate.id, 3)

        with pytest.raises(NegativeStockError) as exc_info:
            await aggregate_store.apply_delta(aggregate.id, -5)

        assert exc_info.value.current_stock == 3
        assert exc_info.value.delta == -5
        assert (await aggregate_store.get(aggregate.id)).current_stock == 3

    async def test_missing_aggregate(self, aggregate_store):
        with pytest.raises(AggregateNotFoundError):
            await aggregate_store.apply_delta(999, 1)

    async def test_concurrent_decrements_never_go_negative(
        self, aggregate_store, aggregate: StockAggregate
    ):
        await aggregate_store.apply_delta(aggregate.id, 5)

        results = await asyncio.gather(
            aggregate_store.apply_delta(aggregate.id, -5),
            aggregate_store.apply_delta(aggregate.id, -5),
            return_exceptions=True,
        )

        errors = [r for r in results if isinstance(r, NegativeStockError)]
        assert len(errors) == 1
        assert (await aggregate_store.get(aggregate.id)).current_stock == 0

    async def test_custom_thresholds(self, pool, aggregate: StockAggregate):
        store = SQLiteStockAggregateStore(pool, StockThresholds(sufficient_level=10, low_level=5))
        updated = await store.apply_delta(aggregate.id, 10)
        assert updated.status == StockStatus.SUFFICIENT


class TestBoundsAndOverwrite:
    async def test_set_bounds(self, aggregate_store, aggregate: StockAggregate):
        updated = await aggregate_store.set_bounds(aggregate.id, 10, 100)
        assert (updated.min_stock, updated.max_stock) == (10, 100)

    async def test_set_bounds_missing(self, aggregate_store):
        with pytest.raises(AggregateNotFoundError):
            await aggregate_store.set_bounds(999, 1, 2)

    async def test_overwrite_stock(self, aggregate_store, aggregate: StockAggregate):
        updated = await aggregate_store.overwrite_stock(aggregate.id, 60)
        assert updated.current_stock == 60
        assert updated.status == StockStatus.SUFFICIENT

    async def test_overwrite_rejects_negative(self, aggregate_store, aggregate: StockAggregate):
        with pytest.raises(NegativeStockError):
            await aggregate_store.overwrite_stock(aggregate.id, -1)


class TestQueries:
    async def test_get_by_key(self, aggregate_store, aggregate: StockAggregate):
        found = await aggregate_store.get_by_key(aggregate.key)
        assert found.id == aggregate.id
        assert await aggregate_store.get_by_key(ItemKey(tool_type_id=999)) is None

    async def test_get_missing(self, aggregate_store):
        assert await aggregate_store.get(999) is None

    async def test_list_lowest_stock_first(self, aggregate_store, catalog_store):
        for code, stock in (("A", 60), ("B", 10), ("C", 30)):
            tool_type = await catalog_store.add_tool_type(ToolType(code=code))
            item, _ = await aggregate_store.find_or_create(
                ItemKey(tool_type_id=tool_type.id), 0, 100
            )
            await aggregate_store.apply_delta(item.id, stock)

        listed = await aggregate_store.list_aggregates()
        assert [a.current_stock for a in listed] == [10, 30, 60]

        low = await aggregate_store.list_aggregates(status=StockStatus.LOW)
        assert [a.current_stock for a in low] == [30]

        page = await aggregate_store.list_aggregates(limit=1, offset=1)
        assert [a.current_stock for a in page] == [30]

    async def test_list_by_factory(self, aggregate_store, tool_type: ToolType):
        await aggregate_store.find_or_create(
            ItemKey(tool_type_id=tool_type.id, factory_id="F1"), 0, 10
        )
        await aggregate_store.find_or_create(ItemKey(tool_type_id=tool_type.id), 0, 10)

        listed = await aggregate_store.list_aggregates(factory_id="F1")
        assert [a.factory_id for a in listed] == ["F1"]
