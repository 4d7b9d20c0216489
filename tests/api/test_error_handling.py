"""API tests for error mapping, using mocked use cases."""

from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from toolcrib.api.dependencies import get_coordinator
from toolcrib.api.main import create_app
from toolcrib.application.use_cases import StockMovementCoordinator
from toolcrib.config import Settings
from toolcrib.core.exceptions import NegativeStockError, PersistenceError


@pytest.fixture
def mock_coordinator():
    return AsyncMock(spec=StockMovementCoordinator)


@pytest.fixture
async def mocked_client(container, mock_coordinator):
    app = create_app(container=container)
    app.dependency_overrides[get_coordinator] = lambda: mock_coordinator
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


OUTBOUND_BODY = {"toolTypeCode": "EM-10", "quantity": 1}


class TestErrorMapping:
    async def test_escaped_negative_stock_is_server_error(self, mocked_client, mock_coordinator):
        mock_coordinator.dispense.side_effect = NegativeStockError(1, 0, -1)

        resp = await mocked_client.post("/api/inventory/outbound", json=OUTBOUND_BODY)

        assert resp.status_code == 500
        data = resp.json()
        assert data["errorCode"] == "NEGATIVE_STOCK"
        assert "reconcile" in data["hint"]

    async def test_persistence_error(self, mocked_client, mock_coordinator):
        mock_coordinator.dispense.side_effect = PersistenceError("transaction", "disk full")

        resp = await mocked_client.post("/api/inventory/outbound", json=OUTBOUND_BODY)

        assert resp.status_code == 500
        assert resp.json()["errorCode"] == "PERSISTENCE_ERROR"

    async def test_unexpected_error(self, mocked_client, mock_coordinator):
        """Anything else still gets the standard error body."""
        mock_coordinator.dispense.side_effect = RuntimeError("boom")

        resp = await mocked_client.post("/api/inventory/outbound", json=OUTBOUND_BODY)

        assert resp.status_code == 500
        data = resp.json()
        assert data["success"] is False
        assert data["errorCode"] == "INTERNAL_ERROR"
        assert "boom" not in data["error"]


async def test_missing_container_is_configuration_error(settings: Settings):
    """Without the lifespan nothing builds the services."""
    app = create_app(settings=settings)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        resp = await ac.get("/api/inventory")

    assert resp.status_code == 500
    assert resp.json()["errorCode"] == "ConfigurationError"
