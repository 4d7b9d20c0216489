"""Abstract interface for the transaction ledger."""

from abc import ABC, abstractmethod
from datetime import datetime

from toolcrib.core.entities.stock import StockTransaction, TransactionType


class ITransactionLedger(ABC):
    """Interface for stock transaction persistence.

    The ledger never touches aggregates.
    """

    @abstractmethod
    async def append(self, entry: StockTransaction) -> StockTransaction:
        """Record a ledger entry; fills id, processed_at and total_amount."""
        pass

    @abstractmethod
    async def get(self, transaction_id: int) -> StockTransaction | None:
        """Get ledger entry by ID."""
        pass

    @abstractmethod
    async def update(self, entry: StockTransaction) -> StockTransaction:
        """Rewrite an entry's editable fields (edit path only)."""
        pass

    @abstractmethod
    async def delete(self, transaction_id: int) -> StockTransaction | None:
        """Delete an entry, returning what was deleted (None if missing)."""
        pass

    @abstractmethod
    async def list_for(
        self,
        aggregate_id: int | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        factory_id: str | None = None,
        transaction_type: TransactionType | None = None,
        limit: int = 100,
    ) -> list[StockTransaction]:
        """List entries, newest first."""
        pass

    @abstractmethod
    async def signed_sum(self, aggregate_id: int) -> int:
        """Sum of signed quantities for an aggregate."""
        pass

    @abstractmethod
    async def count_for(self, aggregate_id: int) -> int:
        """Number of entries for an aggregate."""
        pass
