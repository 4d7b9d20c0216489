"""Response DTOs for API endpoints.

Pydantic v2 models for API response serialization.
These are the ONLY contracts between use cases and API layer.
Serialized with camelCase keys.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from toolcrib.core.entities.catalog import Equipment, ToolType
from toolcrib.core.entities.stock import StockAggregate, StockTransaction, utc_now
from toolcrib.core.entities.tool_change import ToolChangeRecord


class CamelResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TransactionResponse(CamelResponse):
    """Ledger entry response DTO."""

    id: int
    aggregate_id: int
    tool_type_id: int
    factory_id: str | None = None
    transaction_type: str
    quantity: int
    unit_price: float
    total_amount: float
    counterparty: str
    equipment_id: int | None = None
    equipment_number: str | None = None
    tool_position: int | None = None
    notes: str | None = None
    processed_at: datetime | None = None
    processed_by: str | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, entry: StockTransaction) -> "TransactionResponse":
        return cls(
            id=entry.id,  # type: ignore[arg-type]
            aggregate_id=entry.aggregate_id,
            tool_type_id=entry.tool_type_id,
            factory_id=entry.factory_id,
            transaction_type=entry.transaction_type.value,
            quantity=entry.quantity,
            unit_price=entry.unit_price,
            total_amount=(
                entry.total_amount if entry.total_amount is not None else entry.computed_total()
            ),
            counterparty=entry.counterparty,
            equipment_id=entry.equipment_id,
            equipment_number=entry.equipment_number,
            tool_position=entry.tool_position,
            notes=entry.notes,
            processed_at=entry.processed_at,
            processed_by=entry.processed_by,
            created_at=entry.created_at,
            updated_at=entry.updated_at,
        )


class AggregateSnapshotResponse(CamelResponse):
    """Current stock of one item."""

    id: int
    tool_type_id: int
    factory_id: str | None = None
    current_stock: int
    min_stock: int
    max_stock: int
    status: str
    location: str | None = None
    last_updated: datetime

    @classmethod
    def from_entity(cls, aggregate: StockAggregate) -> "AggregateSnapshotResponse":
        return cls(
            id=aggregate.id,  # type: ignore[arg-type]
            tool_type_id=aggregate.tool_type_id,
            factory_id=aggregate.factory_id,
            current_stock=aggregate.current_stock,
            min_stock=aggregate.min_stock,
            max_stock=aggregate.max_stock,
            status=aggregate.status.value,
            location=aggregate.location,
            last_updated=aggregate.last_updated,
        )


class ToolChangeRecordResponse(CamelResponse):
    id: int
    equipment_id: int
    equipment_number: int | None = None
    tool_position: int
    tool_type_id: int
    tool_type_code: str | None = None
    change_reason: str
    change_date: datetime
    changed_by: str | None = None
    notes: str | None = None

    @classmethod
    def from_entity(cls, record: ToolChangeRecord) -> "ToolChangeRecordResponse":
        return cls(**record.model_dump(exclude={"id"}), id=record.id)


class MovementResponse(CamelResponse):
    """Response for inbound/outbound create and edit."""

    success: bool = True
    transaction: TransactionResponse
    aggregate_snapshot: AggregateSnapshotResponse
    created: bool = Field(default=False, description="True if a new aggregate was created")
    tool_change_record: ToolChangeRecordResponse | None = None


class DeleteInboundResponse(CamelResponse):
    success: bool = True
    transaction: TransactionResponse
    aggregate_snapshot: AggregateSnapshotResponse


class DeleteOutboundResponse(CamelResponse):
    """Outbound delete result; the aggregate may need reconciliation."""

    success: bool = True
    transaction: TransactionResponse
    aggregate_snapshot: AggregateSnapshotResponse | None = None
    reconciliation_required: bool = False
    tool_changes_removed: int = 0


class AdjustmentResponse(CamelResponse):
    success: bool = True
    transaction: TransactionResponse | None = None
    aggregate_snapshot: AggregateSnapshotResponse
    delta: int = 0


class AggregateResponse(CamelResponse):
    success: bool = True
    aggregate_snapshot: AggregateSnapshotResponse


class AggregateListResponse(CamelResponse):
    success: bool = True
    items: list[AggregateSnapshotResponse]
    limit: int
    offset: int


class TransactionListResponse(CamelResponse):
    success: bool = True
    transactions: list[TransactionResponse]


class ToolChangeListResponse(CamelResponse):
    success: bool = True
    records: list[ToolChangeRecordResponse]


class ReconciliationEntryResponse(CamelResponse):
    aggregate_id: int
    previous_stock: int
    ledger_stock: int
    corrected: bool
    unresolvable: bool = False


class ReconciliationResponse(CamelResponse):
    success: bool = True
    dry_run: bool
    checked: int
    drifted: list[ReconciliationEntryResponse]


class ToolTypeResponse(CamelResponse):
    success: bool = True
    id: int
    code: str
    name: str
    unit_cost: float

    @classmethod
    def from_entity(cls, tool_type: ToolType) -> "ToolTypeResponse":
        return cls(
            id=tool_type.id,  # type: ignore[arg-type]
            code=tool_type.code,
            name=tool_type.name,
            unit_cost=tool_type.unit_cost,
        )


class EquipmentResponse(CamelResponse):
    success: bool = True
    id: int
    equipment_number: int
    location: str | None = None
    factory_id: str | None = None

    @classmethod
    def from_entity(cls, equipment: Equipment) -> "EquipmentResponse":
        return cls(
            id=equipment.id,  # type: ignore[arg-type]
            equipment_number=equipment.equipment_number,
            location=equipment.location,
            factory_id=equipment.factory_id,
        )


class HealthResponse(CamelResponse):
    """Health check response."""

    status: str
    version: str = "1.0.0"
    uptime_seconds: float
    database: str


class ErrorResponse(CamelResponse):
    """Standardized error response DTO.

    Every error response includes:
    - error: human-readable description
    - error_code: machine-readable code (e.g. INSUFFICIENT_STOCK)
    - hint: suggested recovery action
    - path: request path that triggered the error
    """

    success: bool = False
    error: str = Field(..., description="Human-readable error description")
    error_code: str = Field(..., description="Machine-readable error code")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: str | None = Field(default=None, description="Additional details")
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=utc_now)
