"""
Application layer - Use cases, DTOs, and the service container.

This layer orchestrates business logic by:
1. Defining request/response DTOs for API contracts
2. Implementing use cases that coordinate core services
3. Wiring stores and services for dependency injection

Use cases are the only entry point for API handlers that write.
"""

from toolcrib.application.services import ServiceContainer, build_container
from toolcrib.application.use_cases import (
    StockMovementCoordinator,
    StockReconciler,
)

__all__ = [
    "ServiceContainer",
    "build_container",
    "StockMovementCoordinator",
    "StockReconciler",
]
