"""Reconcile Stock Use Case: recompute aggregates from the ledger."""

from dataclasses import dataclass, field

from toolcrib.application.dto.responses import (
    ReconciliationEntryResponse,
    ReconciliationResponse,
)
from toolcrib.config import get_logger
from toolcrib.core.entities.stock import StockAggregate
from toolcrib.core.exceptions import AggregateNotFoundError
from toolcrib.core.interfaces import IStockAggregateStore, ITransactionLedger

logger = get_logger(__name__)

_PAGE_SIZE = 500


@dataclass
class ReconciliationEntry:
    aggregate_id: int
    previous_stock: int
    ledger_stock: int
    corrected: bool = False
    unresolvable: bool = False  # ledger sums below zero


@dataclass
class ReconciliationReport:
    dry_run: bool
    checked: int = 0
    drifted: list[ReconciliationEntry] = field(default_factory=list)

    @property
    def corrected(self) -> int:
        return sum(1 for entry in self.drifted if entry.corrected)


class StockReconciler:
    """
    Heals drift left by interrupted requests.

    The ledger is the source of truth: each aggregate's current stock is
    compared with the signed sum of its entries and overwritten when they
    differ. Running it twice leaves the same stock.
    """

    def __init__(self, aggregates: IStockAggregateStore, ledger: ITransactionLedger):
        self._aggregates = aggregates
        self._ledger = ledger

    async def reconcile(
        self, aggregate_id: int | None = None, dry_run: bool = False
    ) -> ReconciliationReport:
        report = ReconciliationReport(dry_run=dry_run)
        logger.info("reconciliation_started", aggregate_id=aggregate_id, dry_run=dry_run)

        for aggregate in await self._targets(aggregate_id):
            report.checked += 1
            ledger_stock = await self._ledger.signed_sum(aggregate.id)  # type: ignore[arg-type]
            if ledger_stock == aggregate.current_stock:
                continue

            entry = ReconciliationEntry(
                aggregate_id=aggregate.id,  # type: ignore[arg-type]
                previous_stock=aggregate.current_stock,
                ledger_stock=ledger_stock,
            )
            if ledger_stock < 0:
                entry.unresolvable = True
                logger.error(
                    "reconciliation_unresolvable",
                    aggregate_id=aggregate.id,
                    current_stock=aggregate.current_stock,
                    ledger_stock=ledger_stock,
                )
            elif not dry_run:
                await self._aggregates.overwrite_stock(aggregate.id, ledger_stock)  # type: ignore[arg-type]
                entry.corrected = True
            report.drifted.append(entry)
            logger.warning(
                "stock_drift_found",
                aggregate_id=aggregate.id,
                current_stock=aggregate.current_stock,
                ledger_stock=ledger_stock,
                corrected=entry.corrected,
            )

        logger.info(
            "reconciliation_finished",
            checked=report.checked,
            drifted=len(report.drifted),
            corrected=report.corrected,
        )
        return report

    async def _targets(self, aggregate_id: int | None) -> list[StockAggregate]:
        """Load every target before writing; overwrites reorder the listing."""
        if aggregate_id is not None:
            aggregate = await self._aggregates.get(aggregate_id)
            if aggregate is None:
                raise AggregateNotFoundError(aggregate_id=aggregate_id)
            return [aggregate]

        targets: list[StockAggregate] = []
        offset = 0
        while True:
            page = await self._aggregates.list_aggregates(limit=_PAGE_SIZE, offset=offset)
            targets.extend(page)
            if len(page) < _PAGE_SIZE:
                return targets
            offset += _PAGE_SIZE

    def to_response(self, report: ReconciliationReport) -> ReconciliationResponse:
        return ReconciliationResponse(
            dry_run=report.dry_run,
            checked=report.checked,
            drifted=[
                ReconciliationEntryResponse(
                    aggregate_id=entry.aggregate_id,
                    previous_stock=entry.previous_stock,
                    ledger_stock=entry.ledger_stock,
                    corrected=entry.corrected,
                    unresolvable=entry.unresolvable,
                )
                for entry in report.drifted
            ],
        )
