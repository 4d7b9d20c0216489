"""Inventory management endpoints."""

from datetime import datetime

from fastapi import APIRouter, Depends, Query

from toolcrib.api.dependencies import (
    get_aggregate_store,
    get_coordinator,
    get_ledger,
    get_reconciler,
)
from toolcrib.application.dto.requests import AdjustmentRequest, BoundsRequest
from toolcrib.application.dto.responses import (
    AdjustmentResponse,
    AggregateListResponse,
    AggregateResponse,
    AggregateSnapshotResponse,
    ErrorResponse,
    ReconciliationResponse,
    TransactionListResponse,
    TransactionResponse,
)
from toolcrib.application.use_cases import StockMovementCoordinator, StockReconciler
from toolcrib.core.entities.stock import StockStatus, TransactionType
from toolcrib.core.exceptions import AggregateNotFoundError
from toolcrib.core.interfaces import IStockAggregateStore, ITransactionLedger

router = APIRouter(prefix="/api/inventory", tags=["inventory"])


@router.get("", response_model=AggregateListResponse)
async def list_inventory(
    stock_status: StockStatus | None = Query(default=None, alias="status"),
    factory_id: str | None = Query(default=None, alias="factoryId"),
    limit: int = Query(default=100, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    store: IStockAggregateStore = Depends(get_aggregate_store),
) -> AggregateListResponse:
    """Current stock for all items, lowest first."""
    items = await store.list_aggregates(
        status=stock_status, factory_id=factory_id, limit=limit, offset=offset
    )
    return AggregateListResponse(
        items=[AggregateSnapshotResponse.from_entity(item) for item in items],
        limit=limit,
        offset=offset,
    )


@router.post(
    "/adjustments",
    response_model=AdjustmentResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def adjust_stock(
    request: AdjustmentRequest,
    coordinator: StockMovementCoordinator = Depends(get_coordinator),
) -> AdjustmentResponse:
    """Record a stock count; the difference is booked as an adjustment."""
    result = await coordinator.adjust(request)
    return coordinator.to_adjustment_response(result)


@router.post("/reconcile", response_model=ReconciliationResponse)
async def reconcile_stock(
    dry_run: bool = Query(default=False, alias="dryRun"),
    aggregate_id: int | None = Query(default=None, alias="aggregateId"),
    reconciler: StockReconciler = Depends(get_reconciler),
) -> ReconciliationResponse:
    """Recompute stock from the ledger and correct drift."""
    report = await reconciler.reconcile(aggregate_id=aggregate_id, dry_run=dry_run)
    return reconciler.to_response(report)


@router.get(
    "/{aggregate_id}",
    response_model=AggregateResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_inventory_item(
    aggregate_id: int,
    store: IStockAggregateStore = Depends(get_aggregate_store),
) -> AggregateResponse:
    aggregate = await store.get(aggregate_id)
    if aggregate is None:
        raise AggregateNotFoundError(aggregate_id=aggregate_id)
    return AggregateResponse(aggregate_snapshot=AggregateSnapshotResponse.from_entity(aggregate))


@router.put(
    "/{aggregate_id}/bounds",
    response_model=AggregateResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_bounds(
    aggregate_id: int,
    request: BoundsRequest,
    coordinator: StockMovementCoordinator = Depends(get_coordinator),
) -> AggregateResponse:
    aggregate = await coordinator.set_bounds(aggregate_id, request)
    return AggregateResponse(aggregate_snapshot=AggregateSnapshotResponse.from_entity(aggregate))


@router.get(
    "/{aggregate_id}/transactions",
    response_model=TransactionListResponse,
    responses={404: {"model": ErrorResponse}},
)
async def list_item_transactions(
    aggregate_id: int,
    start: datetime | None = None,
    end: datetime | None = None,
    transaction_type: TransactionType | None = Query(default=None, alias="type"),
    limit: int = Query(default=100, ge=1, le=1000),
    store: IStockAggregateStore = Depends(get_aggregate_store),
    ledger: ITransactionLedger = Depends(get_ledger),
) -> TransactionListResponse:
    """Ledger entries for one item, newest first."""
    if await store.get(aggregate_id) is None:
        raise AggregateNotFoundError(aggregate_id=aggregate_id)
    entries = await ledger.list_for(
        aggregate_id=aggregate_id,
        start=start,
        end=end,
        transaction_type=transaction_type,
        limit=limit,
    )
    return TransactionListResponse(
        transactions=[TransactionResponse.from_entity(e) for e in entries]
    )
