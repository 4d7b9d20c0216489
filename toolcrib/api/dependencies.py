"""
Dependency providers for FastAPI.

Hands the per-app ServiceContainer's members to route handlers.
Tests override these with `app.dependency_overrides`.
"""

from fastapi import Depends, Request

from toolcrib.application.services import ServiceContainer
from toolcrib.application.use_cases import StockMovementCoordinator, StockReconciler
from toolcrib.config import Settings
from toolcrib.core.exceptions import ConfigurationError
from toolcrib.core.interfaces import ICatalogStore, IStockAggregateStore, ITransactionLedger
from toolcrib.core.services import ToolChangeRecorder


def get_container(request: Request) -> ServiceContainer:
    container = getattr(request.app.state, "container", None)
    if container is None:
        raise ConfigurationError("Service container is not initialized")
    return container


def get_app_settings(container: ServiceContainer = Depends(get_container)) -> Settings:
    return container.settings


# Use cases
def get_coordinator(
    container: ServiceContainer = Depends(get_container),
) -> StockMovementCoordinator:
    return container.coordinator


def get_reconciler(container: ServiceContainer = Depends(get_container)) -> StockReconciler:
    return container.reconciler


def get_recorder(container: ServiceContainer = Depends(get_container)) -> ToolChangeRecorder:
    return container.recorder


# Store dependencies (read paths)
def get_aggregate_store(
    container: ServiceContainer = Depends(get_container),
) -> IStockAggregateStore:
    return container.aggregates


def get_ledger(container: ServiceContainer = Depends(get_container)) -> ITransactionLedger:
    return container.ledger


def get_catalog_store(container: ServiceContainer = Depends(get_container)) -> ICatalogStore:
    return container.catalog
