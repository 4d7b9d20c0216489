"""Request DTOs for API endpoints.

Pydantic v2 models for API request validation.
These are the ONLY contracts between API and use cases.
Fields accept camelCase (as sent by the web tier) or snake_case.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for DTOs exchanged with the web tier."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Movements ---


class InboundRequest(CamelModel):
    """Request to receive stock from a supplier."""

    tool_type_code: str = Field(..., description="Endmill catalog code")
    counterparty: str = Field(..., description="Supplier name")
    quantity: int = Field(..., description="Quantity received (> 0)")
    unit_price: float = Field(..., allow_inf_nan=False, description="Price per unit (>= 0)")
    total_amount: float | None = Field(
        default=None,
        allow_inf_nan=False,
        description="Line total; quantity * unit_price when omitted",
    )
    factory_id: str | None = Field(default=None, description="Owning factory")
    processed_by: str | None = Field(default=None, description="Operator name")
    notes: str | None = Field(default=None, description="Free-form notes")


class InboundUpdateRequest(CamelModel):
    """Correct a recorded receipt."""

    quantity: int = Field(..., description="Corrected quantity (> 0)")
    unit_price: float = Field(..., allow_inf_nan=False, description="Corrected price per unit")
    counterparty: str = Field(..., description="Supplier name")


class OutboundRequest(CamelModel):
    """Request to dispense stock, optionally to a machine tool position."""

    tool_type_code: str = Field(..., description="Endmill catalog code")
    quantity: int = Field(..., description="Quantity dispensed (> 0)")
    equipment_number: str | int | None = Field(
        default=None,
        description="Machine number, e.g. 'C007', '007' or 7",
    )
    tool_position_number: int | None = Field(
        default=None, description="Tool position (T number) on the machine"
    )
    purpose: str | None = Field(default=None, description="Why the tool was issued")
    factory_id: str | None = Field(default=None, description="Owning factory")
    processed_by: str | None = Field(default=None, description="Operator name")
    notes: str | None = Field(default=None, description="Free-form notes")


class OutboundUpdateRequest(CamelModel):
    """Correct a recorded dispense."""

    quantity: int = Field(..., description="Corrected quantity (> 0)")
    equipment_number: str | int | None = Field(default=None)
    tool_position_number: int | None = Field(default=None)
    purpose: str | None = Field(default=None)


class AdjustmentRequest(CamelModel):
    """Set the counted stock for an item."""

    tool_type_code: str = Field(..., description="Endmill catalog code")
    counted_stock: int = Field(..., ge=0, description="Physically counted stock")
    reason: str = Field(default="stock count", description="Why the count changed")
    factory_id: str | None = Field(default=None)
    processed_by: str | None = Field(default=None)


class BoundsRequest(CamelModel):
    """Update min/max stock bounds of an aggregate."""

    min_stock: int = Field(..., description="Reorder point")
    max_stock: int = Field(..., description="Target maximum")


# --- Catalog ---


class ToolTypeCreateRequest(CamelModel):
    """Register an endmill catalog entry."""

    code: str = Field(..., min_length=1, description="Unique catalog code")
    name: str = Field(default="", description="Display name")
    unit_cost: float = Field(default=0.0, ge=0, allow_inf_nan=False, description="Standard unit cost")


class EquipmentCreateRequest(CamelModel):
    """Register a CNC machine."""

    equipment_number: str | int = Field(..., description="Machine number, e.g. 'C007'")
    location: str | None = Field(default=None)
    factory_id: str | None = Field(default=None)
