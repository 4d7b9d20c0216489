"""
Domain exceptions for the Toolcrib stock ledger.

Provides specific exception types for different error scenarios.
"""

from typing import Any


class ToolcribError(Exception):
    """Base exception for all Toolcrib errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Validation Exceptions
class ValidationError(ToolcribError):
    """Input validation failed."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )


# Lookup Exceptions
class NotFoundError(ToolcribError):
    """Base exception for missing resources."""

    pass


class ToolTypeNotFoundError(NotFoundError):
    """Tool type code is not in the catalog."""

    def __init__(self, code: str):
        super().__init__(
            f"Tool type not found: {code}",
            code="TOOL_TYPE_NOT_FOUND",
            details={"tool_type_code": code},
        )


class EquipmentNotFoundError(NotFoundError):
    """Equipment number is not registered."""

    def __init__(self, equipment_number: str):
        super().__init__(
            f"Equipment not found: {equipment_number}",
            code="EQUIPMENT_NOT_FOUND",
            details={"equipment_number": equipment_number},
        )


class AggregateNotFoundError(NotFoundError):
    """No stock aggregate exists for the item."""

    def __init__(
        self,
        aggregate_id: int | None = None,
        tool_type_id: int | None = None,
        factory_id: str | None = None,
    ):
        if aggregate_id is not None:
            message = f"Stock record not found: {aggregate_id}"
        else:
            message = (
                f"No stock record for tool type {tool_type_id}"
                + (f" at factory {factory_id}" if factory_id else "")
            )
        super().__init__(
            message,
            code="AGGREGATE_NOT_FOUND",
            details={
                "aggregate_id": aggregate_id,
                "tool_type_id": tool_type_id,
                "factory_id": factory_id,
            },
        )


class TransactionNotFoundError(NotFoundError):
    """Ledger entry missing or not of the expected type."""

    def __init__(self, transaction_id: int, transaction_type: str | None = None):
        kind = f"{transaction_type} transaction" if transaction_type else "Transaction"
        super().__init__(
            f"{kind.capitalize()} not found: {transaction_id}",
            code="TRANSACTION_NOT_FOUND",
            details={
                "transaction_id": transaction_id,
                "transaction_type": transaction_type,
            },
        )


# Stock Exceptions
class StockError(ToolcribError):
    """Base exception for stock arithmetic failures."""

    pass


class InsufficientStockError(StockError):
    """Not enough stock to dispense or reduce."""

    def __init__(self, tool_type_code: str | None, requested: int, available: int):
        super().__init__(
            f"Insufficient stock. Current stock: {available} "
            f"(requested {requested})",
            code="INSUFFICIENT_STOCK",
            details={
                "tool_type_code": tool_type_code,
                "requested": requested,
                "available": available,
            },
        )
        self.requested = requested
        self.available = available


class ReversalBlockedError(StockError):
    """Deleting a receipt would drive stock negative."""

    def __init__(self, transaction_id: int, current_stock: int, quantity: int):
        super().__init__(
            f"Cannot delete inbound transaction {transaction_id}: "
            f"current stock {current_stock} is less than received quantity {quantity}",
            code="REVERSAL_BLOCKED",
            details={
                "transaction_id": transaction_id,
                "current_stock": current_stock,
                "quantity": quantity,
            },
        )


class NegativeStockError(StockError):
    """A delta would drive an aggregate below zero.

    Raised by the aggregate store's conditional write. The coordinator
    translates it; if one escapes, the ledger needs reconciliation.
    """

    def __init__(self, aggregate_id: int, current_stock: int, delta: int):
        super().__init__(
            f"Stock for aggregate {aggregate_id} would become negative "
            f"({current_stock} {delta:+d})",
            code="NEGATIVE_STOCK",
            details={
                "aggregate_id": aggregate_id,
                "current_stock": current_stock,
                "delta": delta,
            },
        )
        self.aggregate_id = aggregate_id
        self.current_stock = current_stock
        self.delta = delta


# Catalog Exceptions
class ConflictError(ToolcribError):
    """Resource already exists."""

    pass


class DuplicateToolTypeError(ConflictError):
    """Tool type code already registered."""

    def __init__(self, code: str):
        super().__init__(
            f"Tool type already registered: {code}",
            code="DUPLICATE_TOOL_TYPE",
            details={"tool_type_code": code},
        )


class DuplicateEquipmentError(ConflictError):
    """Equipment number already registered for the factory."""

    def __init__(self, equipment_number: int, factory_id: str | None = None):
        super().__init__(
            f"Equipment already registered: {equipment_number}",
            code="DUPLICATE_EQUIPMENT",
            details={"equipment_number": equipment_number, "factory_id": factory_id},
        )


# Storage Exceptions
class PersistenceError(ToolcribError):
    """Database operation failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="PERSISTENCE_ERROR",
            details={"operation": operation, "error": error},
        )


class ConfigurationError(ToolcribError):
    """Configuration error."""

    pass
