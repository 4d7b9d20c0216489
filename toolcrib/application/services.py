"""
Service container for dependency injection.

Wires infrastructure implementations to core services and use cases.
Built once per process (FastAPI lifespan or CLI command) and passed
explicitly; nothing here is a module-level singleton.

Clean Architecture: Application layer orchestrates DI, not core layer.
"""

from dataclasses import dataclass
from datetime import timedelta

from toolcrib.application.use_cases.reconcile_stock import StockReconciler
from toolcrib.application.use_cases.stock_movement import StockMovementCoordinator
from toolcrib.config import Settings, get_logger
from toolcrib.core.interfaces import (
    ICatalogStore,
    IStockAggregateStore,
    IToolChangeStore,
    ITransactionLedger,
)
from toolcrib.core.services import StockThresholds, ToolChangeRecorder
from toolcrib.infrastructure.storage.sqlite import (
    ConnectionPool,
    SQLiteCatalogStore,
    SQLiteStockAggregateStore,
    SQLiteToolChangeStore,
    SQLiteTransactionLedger,
)

logger = get_logger(__name__)


@dataclass
class ServiceContainer:
    """Everything a request handler or CLI command needs."""

    settings: Settings
    pool: ConnectionPool | None
    aggregates: IStockAggregateStore
    ledger: ITransactionLedger
    catalog: ICatalogStore
    tool_changes: IToolChangeStore
    recorder: ToolChangeRecorder
    coordinator: StockMovementCoordinator
    reconciler: StockReconciler

    async def close(self) -> None:
        if self.pool is not None:
            await self.pool.close()


def build_container(settings: Settings, pool: ConnectionPool | None = None) -> ServiceContainer:
    """
    Build the service graph over one connection pool.

    Args:
        settings: Application settings
        pool: Connection pool override (default: a pool on settings.storage)

    Returns:
        Configured ServiceContainer
    """
    if pool is None:
        pool = ConnectionPool(
            settings.storage.db_path,
            pool_size=settings.storage.pool_size,
            busy_timeout=settings.storage.busy_timeout,
        )

    stock = settings.stock
    thresholds = StockThresholds(
        sufficient_level=stock.sufficient_level,
        low_level=stock.low_level,
    )

    aggregates = SQLiteStockAggregateStore(pool, thresholds)
    ledger = SQLiteTransactionLedger(pool)
    catalog = SQLiteCatalogStore(pool)
    tool_changes = SQLiteToolChangeStore(pool)

    recorder = ToolChangeRecorder(
        tool_changes,
        replace_purpose=stock.replace_purpose,
        replace_reason=stock.replace_change_reason,
        fallback_reason=stock.fallback_change_reason,
        window=timedelta(seconds=stock.tool_change_window_seconds),
    )
    coordinator = StockMovementCoordinator(
        aggregates=aggregates,
        ledger=ledger,
        catalog=catalog,
        recorder=recorder,
        settings=stock,
    )

    logger.debug("service_container_built", db_path=str(pool.db_path))
    return ServiceContainer(
        settings=settings,
        pool=pool,
        aggregates=aggregates,
        ledger=ledger,
        catalog=catalog,
        tool_changes=tool_changes,
        recorder=recorder,
        coordinator=coordinator,
        reconciler=StockReconciler(aggregates, ledger),
    )
