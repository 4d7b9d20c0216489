"""
Error handling middleware.

Standardizes all API error responses to include:
- success: always false
- error: human-readable description
- error_code: machine-readable identifier
- hint: suggested recovery action
"""

import traceback
from collections.abc import Awaitable, Callable

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from toolcrib.application.dto.responses import ErrorResponse
from toolcrib.config import get_logger
from toolcrib.core.exceptions import (
    ConfigurationError,
    ConflictError,
    InsufficientStockError,
    NegativeStockError,
    NotFoundError,
    PersistenceError,
    ReversalBlockedError,
    StockError,
    ToolcribError,
    ValidationError,
)

logger = get_logger(__name__)


# Map exceptions to HTTP status codes; first isinstance match wins
EXCEPTION_STATUS_MAP: dict[type[Exception], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InsufficientStockError: status.HTTP_400_BAD_REQUEST,
    ReversalBlockedError: status.HTTP_400_BAD_REQUEST,
    NegativeStockError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    StockError: status.HTTP_400_BAD_REQUEST,
    ConflictError: status.HTTP_409_CONFLICT,
    PersistenceError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ConfigurationError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

# Hint messages per error code
HINT_MAP: dict[str, str] = {
    "TOOL_TYPE_NOT_FOUND": "Check the tool type code or register it via POST /api/catalog/tool-types.",
    "EQUIPMENT_NOT_FOUND": "Check the equipment number or register it via POST /api/catalog/equipment.",
    "AGGREGATE_NOT_FOUND": "No stock is recorded for this item. Receive stock before dispensing.",
    "TRANSACTION_NOT_FOUND": "Check the transaction ID and type.",
    "INSUFFICIENT_STOCK": "Reduce the quantity or receive more stock first.",
    "REVERSAL_BLOCKED": "Stock from this receipt has already been issued. Delete the outbound entries first.",
    "NEGATIVE_STOCK": "Run POST /api/inventory/reconcile to repair stock from the ledger.",
    "DUPLICATE_TOOL_TYPE": "Use the existing tool type or choose a new code.",
    "DUPLICATE_EQUIPMENT": "The equipment number is already registered for this factory.",
    "VALIDATION_ERROR": "Check the request body against the API schema.",
    "PERSISTENCE_ERROR": "A database operation failed. Check server logs.",
    "INTERNAL_ERROR": "An internal error occurred. Check server logs.",
}

# Default hints by HTTP status code
STATUS_HINTS: dict[int, str] = {
    400: "Check the request parameters and body.",
    404: "The requested resource was not found. Verify the ID.",
    409: "The resource already exists.",
    500: "An internal error occurred. Check server logs.",
}


def _get_hint(error_code: str, status_code: int) -> str:
    """Resolve hint from error code, falling back to status-based hint."""
    return HINT_MAP.get(error_code) or STATUS_HINTS.get(status_code, "")


def _status_for(exc: Exception) -> int:
    for exc_type, code in EXCEPTION_STATUS_MAP.items():
        if isinstance(exc, exc_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_response(request: Request, exc: Exception) -> JSONResponse:
    """Convert exception to standardized JSON response."""
    status_code = _status_for(exc)
    error_code = exc.code if isinstance(exc, ToolcribError) else "INTERNAL_ERROR"
    request_id = getattr(request.state, "request_id", None)

    if isinstance(exc, NegativeStockError):
        logger.critical(
            "negative_stock_escaped",
            request_id=request_id,
            path=request.url.path,
            **exc.details,
        )
    elif status_code >= 500:
        logger.error(
            "unhandled_exception",
            request_id=request_id,
            path=request.url.path,
            error_type=exc.__class__.__name__,
            error=str(exc),
            traceback=traceback.format_exc(),
        )
    else:
        logger.info(
            "request_rejected",
            request_id=request_id,
            path=request.url.path,
            error_type=error_code,
            error=str(exc),
        )

    body = ErrorResponse(
        error=exc.message if isinstance(exc, ToolcribError) else "An unexpected error occurred",
        error_code=error_code,
        hint=_get_hint(error_code, status_code),
        path=request.url.path,
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", by_alias=True),
    )


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Global error handling middleware.

    Last line of defence for exceptions no handler claimed.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            return error_response(request, e)


def setup_exception_handlers(app: FastAPI) -> None:
    """Set up FastAPI exception handlers."""
    from fastapi.exceptions import RequestValidationError
    from starlette.exceptions import HTTPException

    @app.exception_handler(ToolcribError)
    async def domain_exception_handler(request: Request, exc: ToolcribError) -> JSONResponse:
        return error_response(request, exc)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        """Handle Pydantic validation errors as 400."""
        errors = []
        for error in exc.errors():
            loc = " -> ".join(str(part) for part in error["loc"])
            errors.append(f"{loc}: {error['msg']}")

        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=ErrorResponse(
                error="Request validation failed",
                error_code="VALIDATION_ERROR",
                hint=HINT_MAP["VALIDATION_ERROR"],
                detail="; ".join(errors),
                path=request.url.path,
            ).model_dump(mode="json", by_alias=True),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(
        request: Request,
        exc: HTTPException,
    ) -> JSONResponse:
        """Handle HTTP exceptions with standardized format."""
        error_code = "NOT_FOUND" if exc.status_code == 404 else "HTTP_ERROR"
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error=str(exc.detail or "An error occurred"),
                error_code=error_code,
                hint=_get_hint(error_code, exc.status_code),
                path=request.url.path,
            ).model_dump(mode="json", by_alias=True),
        )
