"""Outbound (dispensing) endpoints."""

from datetime import date

from fastapi import APIRouter, Depends, Query, status

from toolcrib.api.dependencies import get_coordinator, get_ledger
from toolcrib.api.routes.common import day_bounds
from toolcrib.application.dto.requests import OutboundRequest, OutboundUpdateRequest
from toolcrib.application.dto.responses import (
    DeleteOutboundResponse,
    ErrorResponse,
    MovementResponse,
    TransactionListResponse,
    TransactionResponse,
)
from toolcrib.application.use_cases import StockMovementCoordinator
from toolcrib.core.entities.stock import TransactionType
from toolcrib.core.interfaces import ITransactionLedger

router = APIRouter(prefix="/api/inventory/outbound", tags=["outbound"])


@router.post(
    "",
    response_model=MovementResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def create_outbound(
    request: OutboundRequest,
    coordinator: StockMovementCoordinator = Depends(get_coordinator),
) -> MovementResponse:
    """Dispense stock; links tool-change history when a machine position is given."""
    result = await coordinator.dispense(request)
    return coordinator.to_response(result)


@router.get("", response_model=TransactionListResponse)
async def list_outbound(
    day: date | None = Query(default=None, alias="date"),
    factory_id: str | None = Query(default=None, alias="factoryId"),
    limit: int = Query(default=100, ge=1, le=1000),
    ledger: ITransactionLedger = Depends(get_ledger),
) -> TransactionListResponse:
    start, end = day_bounds(day)
    entries = await ledger.list_for(
        start=start,
        end=end,
        factory_id=factory_id,
        transaction_type=TransactionType.OUTBOUND,
        limit=limit,
    )
    return TransactionListResponse(
        transactions=[TransactionResponse.from_entity(e) for e in entries]
    )


@router.put(
    "/{transaction_id}",
    response_model=MovementResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_outbound(
    transaction_id: int,
    request: OutboundUpdateRequest,
    coordinator: StockMovementCoordinator = Depends(get_coordinator),
) -> MovementResponse:
    result = await coordinator.edit_outbound(transaction_id, request)
    return coordinator.to_response(result)


@router.delete(
    "/{transaction_id}",
    response_model=DeleteOutboundResponse,
    responses={404: {"model": ErrorResponse}},
)
async def delete_outbound(
    transaction_id: int,
    coordinator: StockMovementCoordinator = Depends(get_coordinator),
) -> DeleteOutboundResponse:
    """Return dispensed stock. Flags the item when reconciliation is needed."""
    result = await coordinator.delete_outbound(transaction_id)
    return coordinator.to_delete_response(result)
