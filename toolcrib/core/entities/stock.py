"""Stock ledger domain entities."""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


def utc_now() -> datetime:
    """Naive UTC timestamp, the form stored in SQLite."""
    return datetime.now(UTC).replace(tzinfo=None)


# Upper bound for quantities, stock levels and machine numbers
MAX_QUANTITY = 2**31 - 1


class TransactionType(str, Enum):
    """Types of ledger entries."""

    INBOUND = "inbound"
    OUTBOUND = "outbound"
    ADJUSTMENT = "adjustment"


class StockStatus(str, Enum):
    """Stock health classification."""

    CRITICAL = "critical"
    LOW = "low"
    SUFFICIENT = "sufficient"


class ItemKey(BaseModel):
    """A tool type at a factory; identifies one aggregate."""

    model_config = ConfigDict(frozen=True)

    tool_type_id: int
    factory_id: str | None = None


class StockAggregate(BaseModel):
    """Current stock summary for one tool type at one factory."""

    id: int | None = None
    tool_type_id: int
    factory_id: str | None = None
    current_stock: int = 0
    min_stock: int = 0
    max_stock: int = 0
    status: StockStatus = StockStatus.CRITICAL
    location: str | None = None
    last_updated: datetime = Field(default_factory=utc_now)
    created_at: datetime = Field(default_factory=utc_now)

    @property
    def key(self) -> ItemKey:
        return ItemKey(tool_type_id=self.tool_type_id, factory_id=self.factory_id)


class StockTransaction(BaseModel):
    """A single ledger entry.

    ``quantity`` is positive for inbound and outbound entries; the sign is
    applied only when the entry touches the aggregate. Adjustment entries
    carry their signed delta directly.
    """

    id: int | None = None
    aggregate_id: int  # FK -> stock_aggregates.id
    tool_type_id: int
    factory_id: str | None = None
    transaction_type: TransactionType
    quantity: int
    unit_price: float = 0.0
    total_amount: float | None = None
    counterparty: str = ""  # supplier (inbound), purpose (outbound), reason (adjustment)
    equipment_id: int | None = None
    equipment_number: str | None = None
    tool_position: int | None = None
    notes: str | None = None
    processed_at: datetime | None = None
    processed_by: str | None = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @model_validator(mode="after")
    def check_quantity(self) -> "StockTransaction":
        if self.transaction_type == TransactionType.ADJUSTMENT:
            if self.quantity == 0:
                raise ValueError("adjustment quantity must be non-zero")
        elif self.quantity <= 0:
            raise ValueError("quantity must be positive")
        return self

    @property
    def signed_quantity(self) -> int:
        """Effect of this entry on current stock."""
        if self.transaction_type == TransactionType.OUTBOUND:
            return -self.quantity
        return self.quantity

    @property
    def has_equipment_link(self) -> bool:
        return self.equipment_id is not None and self.tool_position is not None

    def computed_total(self) -> float:
        return self.quantity * self.unit_price
