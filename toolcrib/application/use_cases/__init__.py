"""Application use cases."""

from toolcrib.application.use_cases.reconcile_stock import (
    ReconciliationReport,
    StockReconciler,
)
from toolcrib.application.use_cases.stock_movement import (
    AdjustmentResult,
    MovementResult,
    OutboundDeleteResult,
    StockMovementCoordinator,
)

__all__ = [
    "AdjustmentResult",
    "MovementResult",
    "OutboundDeleteResult",
    "ReconciliationReport",
    "StockMovementCoordinator",
    "StockReconciler",
]
