"""Stock health classification."""

from dataclasses import dataclass

from toolcrib.core.entities.stock import StockStatus


@dataclass(frozen=True)
class StockThresholds:
    """Fixed cut points for stock status.

    ``current >= sufficient_level`` is sufficient, ``current >= low_level``
    is low, anything below is critical. Aggregate min/max bounds do not
    take part in the classification.
    """

    sufficient_level: int = 50
    low_level: int = 20

    def __post_init__(self) -> None:
        if self.low_level > self.sufficient_level:
            raise ValueError("low_level must not exceed sufficient_level")

    def classify(self, current_stock: int) -> StockStatus:
        if current_stock >= self.sufficient_level:
            return StockStatus.SUFFICIENT
        if current_stock >= self.low_level:
            return StockStatus.LOW
        return StockStatus.CRITICAL
