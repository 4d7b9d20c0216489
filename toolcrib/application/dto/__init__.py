"""Data Transfer Objects for API layer.

Request DTOs: Validate and parse incoming API requests.
Response DTOs: Structure and serialize API responses.

These are the ONLY contracts between API handlers and use cases.
"""

from toolcrib.application.dto.requests import (
    AdjustmentRequest,
    BoundsRequest,
    EquipmentCreateRequest,
    InboundRequest,
    InboundUpdateRequest,
    OutboundRequest,
    OutboundUpdateRequest,
    ToolTypeCreateRequest,
)
from toolcrib.application.dto.responses import (
    AggregateSnapshotResponse,
    ErrorResponse,
    MovementResponse,
    ToolChangeRecordResponse,
    TransactionResponse,
)

__all__ = [
    # Requests
    "AdjustmentRequest",
    "BoundsRequest",
    "EquipmentCreateRequest",
    "InboundRequest",
    "InboundUpdateRequest",
    "OutboundRequest",
    "OutboundUpdateRequest",
    "ToolTypeCreateRequest",
    # Responses
    "AggregateSnapshotResponse",
    "ErrorResponse",
    "MovementResponse",
    "ToolChangeRecordResponse",
    "TransactionResponse",
]
