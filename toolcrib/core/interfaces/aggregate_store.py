"""Abstract interface for stock aggregate storage."""

from abc import ABC, abstractmethod

from toolcrib.core.entities.stock import ItemKey, StockAggregate, StockStatus


class IStockAggregateStore(ABC):
    """Interface for the per-item current stock rows."""

    @abstractmethod
    async def find_or_create(
        self,
        key: ItemKey,
        min_stock: int,
        max_stock: int,
        location: str | None = None,
    ) -> tuple[StockAggregate, bool]:
        """Return the aggregate for key, creating it at zero stock if missing.

        The boolean is True when a new row was created.
        """
        pass

    @abstractmethod
    async def get(self, aggregate_id: int) -> StockAggregate | None:
        """Get aggregate by ID."""
        pass

    @abstractmethod
    async def get_by_key(self, key: ItemKey) -> StockAggregate | None:
        """Get aggregate by tool type and factory."""
        pass

    @abstractmethod
    async def list_aggregates(
        self,
        status: StockStatus | None = None,
        factory_id: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[StockAggregate]:
        """List aggregates, lowest stock first."""
        pass

    @abstractmethod
    async def apply_delta(self, aggregate_id: int, delta: int) -> StockAggregate:
        """Add a signed delta to current stock as one conditional write.

        Raises NegativeStockError when the result would be below zero and
        AggregateNotFoundError when the row does not exist.
        """
        pass

    @abstractmethod
    async def set_bounds(
        self, aggregate_id: int, min_stock: int, max_stock: int
    ) -> StockAggregate:
        """Update min/max bounds."""
        pass

    @abstractmethod
    async def overwrite_stock(self, aggregate_id: int, current_stock: int) -> StockAggregate:
        """Force current stock to a value recomputed from the ledger."""
        pass
