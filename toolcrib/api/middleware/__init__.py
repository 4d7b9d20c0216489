"""API middleware."""

from toolcrib.api.middleware.error_handler import ErrorHandlerMiddleware
from toolcrib.api.middleware.logging import LoggingMiddleware

__all__ = ["LoggingMiddleware", "ErrorHandlerMiddleware"]
