"""Inbound (receiving) endpoints."""

from datetime import date

from fastapi import APIRouter, Depends, Query, status

from toolcrib.api.dependencies import get_coordinator, get_ledger
from toolcrib.api.routes.common import day_bounds
from toolcrib.application.dto.requests import InboundRequest, InboundUpdateRequest
from toolcrib.application.dto.responses import (
    AggregateSnapshotResponse,
    DeleteInboundResponse,
    ErrorResponse,
    MovementResponse,
    TransactionListResponse,
    TransactionResponse,
)
from toolcrib.application.use_cases import StockMovementCoordinator
from toolcrib.core.entities.stock import TransactionType
from toolcrib.core.interfaces import ITransactionLedger

router = APIRouter(prefix="/api/inventory/inbound", tags=["inbound"])


@router.post(
    "",
    response_model=MovementResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def create_inbound(
    request: InboundRequest,
    coordinator: StockMovementCoordinator = Depends(get_coordinator),
) -> MovementResponse:
    """Receive stock from a supplier."""
    result = await coordinator.receive(request)
    return coordinator.to_response(result)


@router.get("", response_model=TransactionListResponse)
async def list_inbound(
    day: date | None = Query(default=None, alias="date"),
    factory_id: str | None = Query(default=None, alias="factoryId"),
    limit: int = Query(default=100, ge=1, le=1000),
    ledger: ITransactionLedger = Depends(get_ledger),
) -> TransactionListResponse:
    """List receipts, optionally for one day."""
    start, end = day_bounds(day)
    entries = await ledger.list_for(
        start=start,
        end=end,
        factory_id=factory_id,
        transaction_type=TransactionType.INBOUND,
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
async def update_inbound(
    transaction_id: int,
    request: InboundUpdateRequest,
    coordinator: StockMovementCoordinator = Depends(get_coordinator),
) -> MovementResponse:
    """Correct a receipt."""
    result = await coordinator.edit_inbound(transaction_id, request)
    return coordinator.to_response(result)


@router.delete(
    "/{transaction_id}",
    response_model=DeleteInboundResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def delete_inbound(
    transaction_id: int,
    coordinator: StockMovementCoordinator = Depends(get_coordinator),
) -> DeleteInboundResponse:
    """Reverse a receipt. Rejected when the stock has already been issued."""
    result = await coordinator.delete_inbound(transaction_id)
    return DeleteInboundResponse(
        transaction=TransactionResponse.from_entity(result.transaction),
        aggregate_snapshot=AggregateSnapshotResponse.from_entity(result.aggregate),
    )
