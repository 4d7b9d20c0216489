"""Stock Movement Use Case: ledger-first writes with compensation.

Every movement appends to the ledger before touching the aggregate. If the
aggregate write fails, the ledger entry is removed again so the two stay in
step. Tool-change history is linked after the movement commits and never
rolls it back.
"""

import math
from dataclasses import dataclass

from toolcrib.application.dto.requests import (
    AdjustmentRequest,
    BoundsRequest,
    InboundRequest,
    InboundUpdateRequest,
    OutboundRequest,
    OutboundUpdateRequest,
)
from toolcrib.application.dto.responses import (
    AdjustmentResponse,
    AggregateSnapshotResponse,
    DeleteOutboundResponse,
    MovementResponse,
    ToolChangeRecordResponse,
    TransactionResponse,
)
from toolcrib.config import StockSettings, get_logger
from toolcrib.core.entities.catalog import Equipment, ToolType, normalize_equipment_number
from toolcrib.core.entities.stock import (
    MAX_QUANTITY,
    ItemKey,
    StockAggregate,
    StockTransaction,
    TransactionType,
)
from toolcrib.core.entities.tool_change import ToolChangeRecord
from toolcrib.core.exceptions import (
    AggregateNotFoundError,
    InsufficientStockError,
    NegativeStockError,
    ReversalBlockedError,
    ToolcribError,
    ToolTypeNotFoundError,
    TransactionNotFoundError,
    ValidationError,
)
from toolcrib.core.interfaces import (
    ICatalogStore,
    IStockAggregateStore,
    ITransactionLedger,
)
from toolcrib.core.services.tool_change_recorder import ToolChangeRecorder

logger = get_logger(__name__)

PRE_ISSUED_NOTE = "pre-issued (no equipment assigned)"


@dataclass
class MovementResult:
    """Result of a committed movement."""

    transaction: StockTransaction
    aggregate: StockAggregate
    created: bool = False  # True if the movement created the aggregate
    tool_change: ToolChangeRecord | None = None


@dataclass
class OutboundDeleteResult:
    """Result of deleting an outbound entry."""

    transaction: StockTransaction
    aggregate: StockAggregate | None
    reconciliation_required: bool = False
    tool_changes_removed: int = 0


@dataclass
class AdjustmentResult:
    transaction: StockTransaction | None
    aggregate: StockAggregate
    delta: int = 0


class StockMovementCoordinator:
    """Receive, dispense, edit and delete stock movements."""

    def __init__(
        self,
        aggregates: IStockAggregateStore,
        ledger: ITransactionLedger,
        catalog: ICatalogStore,
        recorder: ToolChangeRecorder,
        settings: StockSettings | None = None,
    ):
        self._aggregates = aggregates
        self._ledger = ledger
        self._catalog = catalog
        self._recorder = recorder
        self._settings = settings or StockSettings()

    # --- Inbound ---

    async def receive(self, request: InboundRequest) -> MovementResult:
        """Record a receipt; creates the aggregate on first receipt."""
        code = _require_code(request.tool_type_code)
        _require_positive("quantity", request.quantity)
        _require_price(request.unit_price)
        if request.total_amount is not None:
            _require_amount("total_amount", request.total_amount)
        supplier = _require_text("counterparty", request.counterparty)
        log = logger.bind(movement="inbound", tool_type_code=code, quantity=request.quantity)

        log.debug("movement_resolving")
        tool_type = await self._catalog.get_tool_type_by_code(code)
        if tool_type is None:
            raise ToolTypeNotFoundError(code)
        aggregate, created = await self._find_or_create(tool_type, request.factory_id)

        log.debug("movement_appending", aggregate_id=aggregate.id)
        entry = await self._ledger.append(
            StockTransaction(
                aggregate_id=aggregate.id,  # type: ignore[arg-type]
                tool_type_id=tool_type.id,  # type: ignore[arg-type]
                factory_id=request.factory_id,
                transaction_type=TransactionType.INBOUND,
                quantity=request.quantity,
                unit_price=request.unit_price,
                total_amount=request.total_amount,
                counterparty=supplier,
                notes=request.notes,
                processed_by=request.processed_by or self._settings.default_operator,
            )
        )

        log.debug("movement_adjusting", transaction_id=entry.id)
        try:
            aggregate = await self._aggregates.apply_delta(
                aggregate.id, entry.signed_quantity  # type: ignore[arg-type]
            )
        except Exception as e:
            await self._compensate_append(entry, e)
            raise

        log.info(
            "inbound_committed",
            transaction_id=entry.id,
            aggregate_id=aggregate.id,
            current_stock=aggregate.current_stock,
            created=created,
        )
        return MovementResult(transaction=entry, aggregate=aggregate, created=created)

    async def edit_inbound(
        self, transaction_id: int, request: InboundUpdateRequest
    ) -> MovementResult:
        """Correct a receipt and shift stock by the quantity difference."""
        _require_positive("quantity", request.quantity)
        _require_price(request.unit_price)
        supplier = _require_text("counterparty", request.counterparty)

        existing = await self._require_transaction(transaction_id, TransactionType.INBOUND)
        delta = request.quantity - existing.quantity
        aggregate = await self._require_aggregate(existing.aggregate_id)
        if delta < 0 and aggregate.current_stock + delta < 0:
            raise InsufficientStockError(None, -delta, aggregate.current_stock)

        updated = existing.model_copy(
            update={
                "quantity": request.quantity,
                "unit_price": request.unit_price,
                "total_amount": None,
                "counterparty": supplier,
            }
        )
        return await self._commit_edit(existing, updated, delta)

    async def delete_inbound(self, transaction_id: int) -> MovementResult:
        """Reverse a receipt. Blocked when stock has already been used."""
        existing = await self._require_transaction(transaction_id, TransactionType.INBOUND)
        aggregate = await self._require_aggregate(existing.aggregate_id)
        if aggregate.current_stock < existing.quantity:
            raise ReversalBlockedError(
                transaction_id, aggregate.current_stock, existing.quantity
            )

        try:
            aggregate = await self._aggregates.apply_delta(
                existing.aggregate_id, -existing.quantity
            )
        except NegativeStockError as e:
            raise ReversalBlockedError(
                transaction_id, e.current_stock, existing.quantity
            ) from e

        try:
            deleted = await self._ledger.delete(transaction_id)
        except Exception:
            await self._reapply(existing.aggregate_id, existing.quantity, transaction_id)
            raise
        if deleted is None:
            # Removed concurrently; undo our reversal
            await self._reapply(existing.aggregate_id, existing.quantity, transaction_id)
            raise TransactionNotFoundError(transaction_id, TransactionType.INBOUND.value)

        logger.info(
            "inbound_deleted",
            transaction_id=transaction_id,
            aggregate_id=aggregate.id,
            current_stock=aggregate.current_stock,
        )
        return MovementResult(transaction=existing, aggregate=aggregate)

    # --- Outbound ---

    async def dispense(self, request: OutboundRequest) -> MovementResult:
        """Issue stock, optionally to a machine tool position."""
        code = _require_code(request.tool_type_code)
        _require_positive("quantity", request.quantity)
        _check_tool_position(request.tool_position_number)
        log = logger.bind(movement="outbound", tool_type_code=code, quantity=request.quantity)

        log.debug("movement_resolving")
        tool_type = await self._catalog.get_tool_type_by_code(code)
        if tool_type is None:
            raise ValidationError("tool_type_code", "unknown tool type", code)
        key = ItemKey(tool_type_id=tool_type.id, factory_id=request.factory_id)  # type: ignore[arg-type]
        aggregate = await self._aggregates.get_by_key(key)
        if aggregate is None:
            raise AggregateNotFoundError(
                tool_type_id=tool_type.id, factory_id=request.factory_id
            )
        if aggregate.current_stock < request.quantity:
            raise InsufficientStockError(code, request.quantity, aggregate.current_stock)

        equipment = await self._resolve_equipment(request.equipment_number, request.factory_id)
        purpose = request.purpose or self._settings.default_outbound_purpose

        log.debug("movement_appending", aggregate_id=aggregate.id)
        entry = await self._ledger.append(
            StockTransaction(
                aggregate_id=aggregate.id,  # type: ignore[arg-type]
                tool_type_id=tool_type.id,  # type: ignore[arg-type]
                factory_id=request.factory_id,
                transaction_type=TransactionType.OUTBOUND,
                quantity=request.quantity,
                unit_price=tool_type.unit_cost,
                counterparty=purpose,
                equipment_id=equipment.id if equipment else None,
                equipment_number=_equipment_label(request.equipment_number),
                tool_position=request.tool_position_number,
                notes=_outbound_notes(
                    request.equipment_number, request.tool_position_number, request.notes
                ),
                processed_by=request.processed_by or self._settings.default_operator,
            )
        )

        log.debug("movement_adjusting", transaction_id=entry.id)
        try:
            aggregate = await self._aggregates.apply_delta(
                aggregate.id, entry.signed_quantity  # type: ignore[arg-type]
            )
        except NegativeStockError as e:
            # Lost a race with a concurrent dispense
            await self._compensate_append(entry, e)
            raise InsufficientStockError(code, request.quantity, e.current_stock) from e
        except Exception as e:
            await self._compensate_append(entry, e)
            raise

        log.debug("movement_linking_history", transaction_id=entry.id)
        tool_change = await self._link_history(entry, tool_type, purpose)

        log.info(
            "outbound_committed",
            transaction_id=entry.id,
            aggregate_id=aggregate.id,
            current_stock=aggregate.current_stock,
            tool_change_id=tool_change.id if tool_change else None,
        )
        return MovementResult(transaction=entry, aggregate=aggregate, tool_change=tool_change)

    async def edit_outbound(
        self, transaction_id: int, request: OutboundUpdateRequest
    ) -> MovementResult:
        """Correct a dispense; re-resolves equipment and regenerates notes."""
        _require_positive("quantity", request.quantity)
        _check_tool_position(request.tool_position_number)

        existing = await self._require_transaction(transaction_id, TransactionType.OUTBOUND)
        delta = request.quantity - existing.quantity
        aggregate = await self._require_aggregate(existing.aggregate_id)
        if delta > 0 and aggregate.current_stock < delta:
            raise InsufficientStockError(None, delta, aggregate.current_stock)

        unit_price = existing.unit_price
        if not unit_price:
            tool_type = await self._catalog.get_tool_type(existing.tool_type_id)
            unit_price = tool_type.unit_cost if tool_type else 0.0

        equipment = await self._resolve_equipment(request.equipment_number, existing.factory_id)
        updated = existing.model_copy(
            update={
                "quantity": request.quantity,
                "unit_price": unit_price,
                "total_amount": None,
                "counterparty": request.purpose or self._settings.default_edit_purpose,
                "equipment_id": equipment.id if equipment else None,
                "equipment_number": _equipment_label(request.equipment_number),
                "tool_position": request.tool_position_number,
                "notes": _outbound_notes(
                    request.equipment_number,
                    request.tool_position_number,
                    None,
                    unassigned=PRE_ISSUED_NOTE,
                ),
            }
        )
        return await self._commit_edit(existing, updated, -delta)

    async def delete_outbound(self, transaction_id: int) -> OutboundDeleteResult:
        """Return dispensed stock and drop the linked history record."""
        existing = await self._require_transaction(transaction_id, TransactionType.OUTBOUND)
        reconciliation_required = False

        aggregate: StockAggregate | None = None
        try:
            aggregate = await self._aggregates.apply_delta(
                existing.aggregate_id, existing.quantity
            )
        except AggregateNotFoundError:
            logger.error(
                "reversal_target_missing",
                transaction_id=transaction_id,
                aggregate_id=existing.aggregate_id,
            )
            reconciliation_required = True

        try:
            deleted = await self._ledger.delete(transaction_id)
        except Exception:
            if aggregate is not None:
                await self._reapply(existing.aggregate_id, -existing.quantity, transaction_id)
            raise
        if deleted is None:
            if aggregate is not None:
                await self._reapply(existing.aggregate_id, -existing.quantity, transaction_id)
            raise TransactionNotFoundError(transaction_id, TransactionType.OUTBOUND.value)

        removed = 0
        try:
            removed = await self._recorder.delete_linked_to(existing)
        except ToolcribError as e:
            logger.warning(
                "tool_change_unlink_failed", transaction_id=transaction_id, error=str(e)
            )

        if aggregate is not None:
            aggregate = await self._aggregates.get(existing.aggregate_id)
            ledger_total = await self._ledger.signed_sum(existing.aggregate_id)
            if aggregate is None or aggregate.current_stock != ledger_total:
                logger.warning(
                    "stock_drift_detected",
                    aggregate_id=existing.aggregate_id,
                    current_stock=aggregate.current_stock if aggregate else None,
                    ledger_total=ledger_total,
                )
                reconciliation_required = True

        logger.info(
            "outbound_deleted",
            transaction_id=transaction_id,
            tool_changes_removed=removed,
            reconciliation_required=reconciliation_required,
        )
        return OutboundDeleteResult(
            transaction=existing,
            aggregate=aggregate,
            reconciliation_required=reconciliation_required,
            tool_changes_removed=removed,
        )

    # --- Corrections ---

    async def adjust(self, request: AdjustmentRequest) -> AdjustmentResult:
        """Book the difference between counted and recorded stock."""
        code = _require_code(request.tool_type_code)
        if not 0 <= request.counted_stock <= MAX_QUANTITY:
            raise ValidationError("counted_stock", "is out of range", request.counted_stock)

        tool_type = await self._catalog.get_tool_type_by_code(code)
        if tool_type is None:
            raise ToolTypeNotFoundError(code)
        aggregate, _ = await self._find_or_create(tool_type, request.factory_id)

        delta = request.counted_stock - aggregate.current_stock
        if delta == 0:
            logger.info("adjustment_not_needed", aggregate_id=aggregate.id)
            return AdjustmentResult(transaction=None, aggregate=aggregate)

        entry = await self._ledger.append(
            StockTransaction(
                aggregate_id=aggregate.id,  # type: ignore[arg-type]
                tool_type_id=tool_type.id,  # type: ignore[arg-type]
                factory_id=request.factory_id,
                transaction_type=TransactionType.ADJUSTMENT,
                quantity=delta,
                unit_price=tool_type.unit_cost,
                counterparty=request.reason,
                processed_by=request.processed_by or self._settings.default_operator,
            )
        )
        try:
            aggregate = await self._aggregates.apply_delta(
                aggregate.id, entry.signed_quantity  # type: ignore[arg-type]
            )
        except NegativeStockError as e:
            await self._compensate_append(entry, e)
            raise InsufficientStockError(code, -delta, e.current_stock) from e
        except Exception as e:
            await self._compensate_append(entry, e)
            raise

        logger.info(
            "adjustment_committed",
            transaction_id=entry.id,
            aggregate_id=aggregate.id,
            delta=delta,
            current_stock=aggregate.current_stock,
        )
        return AdjustmentResult(transaction=entry, aggregate=aggregate, delta=delta)

    async def set_bounds(self, aggregate_id: int, request: BoundsRequest) -> StockAggregate:
        if request.min_stock < 0:
            raise ValidationError("min_stock", "must not be negative", request.min_stock)
        if request.min_stock > request.max_stock:
            raise ValidationError(
                "max_stock", "must be greater than or equal to min_stock", request.max_stock
            )
        if request.max_stock > MAX_QUANTITY:
            raise ValidationError("max_stock", f"must not exceed {MAX_QUANTITY}", request.max_stock)
        return await self._aggregates.set_bounds(
            aggregate_id, request.min_stock, request.max_stock
        )

    # --- Helpers ---

    async def _find_or_create(
        self, tool_type: ToolType, factory_id: str | None
    ) -> tuple[StockAggregate, bool]:
        return await self._aggregates.find_or_create(
            ItemKey(tool_type_id=tool_type.id, factory_id=factory_id),  # type: ignore[arg-type]
            min_stock=self._settings.default_min_stock,
            max_stock=self._settings.default_max_stock,
            location=self._settings.default_location,
        )

    async def _require_transaction(
        self, transaction_id: int, transaction_type: TransactionType
    ) -> StockTransaction:
        entry = await self._ledger.get(transaction_id)
        if entry is None or entry.transaction_type != transaction_type:
            raise TransactionNotFoundError(transaction_id, transaction_type.value)
        return entry

    async def _require_aggregate(self, aggregate_id: int) -> StockAggregate:
        aggregate = await self._aggregates.get(aggregate_id)
        if aggregate is None:
            raise AggregateNotFoundError(aggregate_id=aggregate_id)
        return aggregate

    async def _resolve_equipment(
        self, reference: str | int | None, factory_id: str | None
    ) -> Equipment | None:
        """Unknown or malformed references mean no history linkage."""
        number = normalize_equipment_number(reference)
        if number is None:
            return None
        equipment = await self._catalog.get_equipment_by_number(number, factory_id)
        if equipment is None and factory_id is not None:
            equipment = await self._catalog.get_equipment_by_number(number)
        if equipment is None:
            logger.info("equipment_not_resolved", equipment_number=reference)
        return equipment

    async def _commit_edit(
        self,
        previous: StockTransaction,
        updated: StockTransaction,
        aggregate_delta: int,
    ) -> MovementResult:
        snapshot = previous.model_copy()
        updated = await self._ledger.update(updated)

        if aggregate_delta == 0:
            aggregate = await self._require_aggregate(updated.aggregate_id)
        else:
            try:
                aggregate = await self._aggregates.apply_delta(
                    updated.aggregate_id, aggregate_delta
                )
            except NegativeStockError as e:
                await self._restore_entry(snapshot, e)
                raise InsufficientStockError(None, -aggregate_delta, e.current_stock) from e
            except Exception as e:
                await self._restore_entry(snapshot, e)
                raise

        logger.info(
            "movement_edited",
            transaction_id=updated.id,
            type=updated.transaction_type.value,
            aggregate_delta=aggregate_delta,
            current_stock=aggregate.current_stock,
        )
        return MovementResult(transaction=updated, aggregate=aggregate)

    async def _compensate_append(self, entry: StockTransaction, cause: Exception) -> None:
        """Remove a ledger entry whose aggregate write failed."""
        if isinstance(cause, NegativeStockError) and entry.signed_quantity > 0:
            logger.critical("negative_stock_on_increase", transaction_id=entry.id)
        try:
            await self._ledger.delete(entry.id)  # type: ignore[arg-type]
        except ToolcribError as e:
            # Ledger now holds an entry with no effect; reconciliation repairs it
            logger.critical(
                "compensation_failed",
                transaction_id=entry.id,
                cause=str(cause),
                error=str(e),
            )
            return
        logger.warning(
            "movement_compensated",
            transaction_id=entry.id,
            type=entry.transaction_type.value,
            cause=cause.__class__.__name__,
        )

    async def _restore_entry(self, snapshot: StockTransaction, cause: Exception) -> None:
        try:
            await self._ledger.update(snapshot)
        except ToolcribError as e:
            logger.critical(
                "compensation_failed",
                transaction_id=snapshot.id,
                cause=str(cause),
                error=str(e),
            )
            return
        logger.warning(
            "movement_compensated",
            transaction_id=snapshot.id,
            type=snapshot.transaction_type.value,
            cause=cause.__class__.__name__,
        )

    async def _reapply(self, aggregate_id: int, delta: int, transaction_id: int) -> None:
        try:
            await self._aggregates.apply_delta(aggregate_id, delta)
        except ToolcribError as e:
            logger.critical(
                "compensation_failed",
                transaction_id=transaction_id,
                aggregate_id=aggregate_id,
                error=str(e),
            )
            return
        logger.warning(
            "movement_compensated", transaction_id=transaction_id, aggregate_id=aggregate_id
        )

    async def _link_history(
        self, entry: StockTransaction, tool_type: ToolType, purpose: str
    ) -> ToolChangeRecord | None:
        try:
            return await self._recorder.record_from_outbound(entry, tool_type, purpose)
        except ToolcribError as e:
            logger.warning("tool_change_link_failed", transaction_id=entry.id, error=str(e))
            return None

    # --- Response mapping ---

    def to_response(self, result: MovementResult) -> MovementResponse:
        """Convert result to API response."""
        return MovementResponse(
            transaction=TransactionResponse.from_entity(result.transaction),
            aggregate_snapshot=AggregateSnapshotResponse.from_entity(result.aggregate),
            created=result.created,
            tool_change_record=(
                ToolChangeRecordResponse.from_entity(result.tool_change)
                if result.tool_change
                else None
            ),
        )

    def to_delete_response(self, result: OutboundDeleteResult) -> DeleteOutboundResponse:
        return DeleteOutboundResponse(
            transaction=TransactionResponse.from_entity(result.transaction),
            aggregate_snapshot=(
                AggregateSnapshotResponse.from_entity(result.aggregate)
                if result.aggregate
                else None
            ),
            reconciliation_required=result.reconciliation_required,
            tool_changes_removed=result.tool_changes_removed,
        )

    def to_adjustment_response(self, result: AdjustmentResult) -> AdjustmentResponse:
        return AdjustmentResponse(
            transaction=(
                TransactionResponse.from_entity(result.transaction)
                if result.transaction
                else None
            ),
            aggregate_snapshot=AggregateSnapshotResponse.from_entity(result.aggregate),
            delta=result.delta,
        )


def _require_code(code: str | None) -> str:
    if code is None or not code.strip():
        raise ValidationError("tool_type_code", "is required", code)
    return code.strip()


def _require_positive(field: str, value: int | None) -> None:
    if value is None or value <= 0:
        raise ValidationError(field, "must be greater than zero", value)
    if value > MAX_QUANTITY:
        raise ValidationError(field, f"must not exceed {MAX_QUANTITY}", value)


def _require_amount(field: str, value: float | None) -> None:
    if value is None or not math.isfinite(value) or value < 0:
        raise ValidationError(field, "must be a finite, non-negative number", value)


def _require_price(value: float | None) -> None:
    _require_amount("unit_price", value)


def _check_tool_position(value: int | None) -> None:
    if value is not None and not 0 <= value <= MAX_QUANTITY:
        raise ValidationError("tool_position_number", "is out of range", value)


def _require_text(field: str, value: str | None) -> str:
    if value is None or not value.strip():
        raise ValidationError(field, "is required", value)
    return value.strip()


def _equipment_label(reference: str | int | None) -> str | None:
    if reference is None:
        return None
    label = str(reference).strip()
    return label or None


def _outbound_notes(
    reference: str | int | None,
    tool_position: int | None,
    notes: str | None,
    unassigned: str | None = None,
) -> str | None:
    """``C007 T03 <notes>`` for machine issues, else the notes as given."""
    label = _equipment_label(reference)
    if label and tool_position is not None:
        prefix = f"{label} T{tool_position:02d}"
        return f"{prefix} {notes}".strip() if notes else prefix
    if unassigned is not None:
        return unassigned
    return notes
