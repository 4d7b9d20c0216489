"""API tests for inventory, adjustment and reconciliation endpoints."""

import pytest

from toolcrib.application.services import ServiceContainer


async def _receive(api_client, code: str, quantity: int) -> dict:
    resp = await api_client.post(
        "/api/inventory/inbound",
        json={"toolTypeCode": code, "counterparty": "Acme Tools", "quantity": quantity, "unitPrice": 10},
    )
    assert resp.status_code == 201
    return resp.json()


@pytest.fixture
async def two_items(api_client) -> dict:
    em10 = await _receive(api_client, "EM-10", 60)
    em6 = await _receive(api_client, "EM-6", 10)
    return {
        "em10": em10["aggregateSnapshot"]["id"],
        "em6": em6["aggregateSnapshot"]["id"],
    }


class TestListInventory:
    async def test_lowest_stock_first(self, api_client, two_items):
        resp = await api_client.get("/api/inventory")

        assert resp.status_code == 200
        items = resp.json()["items"]
        assert [i["id"] for i in items] == [two_items["em6"], two_items["em10"]]
        assert items[0]["status"] == "critical"
        assert items[1]["status"] == "sufficient"

    async def test_status_filter(self, api_client, two_items):
        resp = await api_client.get("/api/inventory", params={"status": "critical"})

        assert [i["id"] for i in resp.json()["items"]] == [two_items["em6"]]

    async def test_bad_status(self, api_client):
        resp = await api_client.get("/api/inventory", params={"status": "plenty"})

        assert resp.status_code == 400
        assert resp.json()["errorCode"] == "VALIDATION_ERROR"

    async def test_paging(self, api_client, two_items):
        resp = await api_client.get("/api/inventory", params={"limit": 1, "offset": 1})

        data = resp.json()
        assert [i["id"] for i in data["items"]] == [two_items["em10"]]
        assert data["limit"] == 1
        assert data["offset"] == 1


class TestInventoryItem:
    async def test_get(self, api_client, two_items):
        resp = await api_client.get(f"/api/inventory/{two_items['em10']}")

        assert resp.status_code == 200
        snapshot = resp.json()["aggregateSnapshot"]
        assert snapshot["currentStock"] == 60
        assert snapshot["location"] == "Warehouse A"

    async def test_get_missing(self, api_client):
        resp = await api_client.get("/api/inventory/999")

        assert resp.status_code == 404
        assert resp.json()["errorCode"] == "AGGREGATE_NOT_FOUND"

    async def test_update_bounds(self, api_client, two_items):
        resp = await api_client.put(
            f"/api/inventory/{two_items['em6']}/bounds", json={"minStock": 5, "maxStock": 50}
        )

        assert resp.status_code == 200
        snapshot = resp.json()["aggregateSnapshot"]
        assert (snapshot["minStock"], snapshot["maxStock"]) == (5, 50)

    async def test_update_bounds_inverted(self, api_client, two_items):
        resp = await api_client.put(
            f"/api/inventory/{two_items['em6']}/bounds", json={"minStock": 60, "maxStock": 50}
        )

        assert resp.status_code == 400
        assert resp.json()["errorCode"] == "VALIDATION_ERROR"

    async def test_item_transactions(self, api_client, two_items):
        await api_client.post(
            "/api/inventory/outbound", json={"toolTypeCode": "EM-10", "quantity": 4}
        )

        resp = await api_client.get(f"/api/inventory/{two_items['em10']}/transactions")
        types = [t["transactionType"] for t in resp.json()["transactions"]]
        assert types == ["outbound", "inbound"]

        only_in = await api_client.get(
            f"/api/inventory/{two_items['em10']}/transactions", params={"type": "inbound"}
        )
        assert len(only_in.json()["transactions"]) == 1

    async def test_update_bounds_too_large(self, api_client, two_items):
        resp = await api_client.put(
            f"/api/inventory/{two_items['em6']}/bounds", json={"minStock": 0, "maxStock": 10**20}
        )

        assert resp.status_code == 400
        assert resp.json()["errorCode"] == "VALIDATION_ERROR"

    async def test_transactions_for_missing_item(self, api_client):
        resp = await api_client.get("/api/inventory/999/transactions")
        assert resp.status_code == 404


class TestAdjustments:
    async def test_count_books_difference(self, api_client, two_items):
        resp = await api_client.post(
            "/api/inventory/adjustments",
            json={"toolTypeCode": "EM-6", "countedStock": 7, "reason": "broken in drawer"},
        )

        assert resp.status_code == 200
        data = resp.json()
        assert data["delta"] == -3
        assert data["transaction"]["transactionType"] == "adjustment"
        assert data["transaction"]["counterparty"] == "broken in drawer"
        assert data["aggregateSnapshot"]["currentStock"] == 7

    async def test_matching_count(self, api_client, two_items):
        resp = await api_client.post(
            "/api/inventory/adjustments", json={"toolTypeCode": "EM-6", "countedStock": 10}
        )

        data = resp.json()
        assert data["delta"] == 0
        assert data["transaction"] is None

    async def test_negative_count(self, api_client):
        resp = await api_client.post(
            "/api/inventory/adjustments", json={"toolTypeCode": "EM-6", "countedStock": -1}
        )
        assert resp.status_code == 400

    async def test_count_too_large(self, api_client, two_items):
        resp = await api_client.post(
            "/api/inventory/adjustments", json={"toolTypeCode": "EM-6", "countedStock": 10**20}
        )

        assert resp.status_code == 400
        item = await api_client.get(f"/api/inventory/{two_items['em6']}")
        assert item.json()["aggregateSnapshot"]["currentStock"] == 10


class TestReconcile:
    async def test_repairs_drift(self, api_client, two_items, container: ServiceContainer):
        await container.aggregates.overwrite_stock(two_items["em6"], 99)

        dry = await api_client.post("/api/inventory/reconcile", params={"dryRun": "true"})
        assert dry.status_code == 200
        assert dry.json()["drifted"][0]["corrected"] is False

        resp = await api_client.post("/api/inventory/reconcile")
        data = resp.json()
        assert data["checked"] == 2
        assert data["drifted"] == [
            {
                "aggregateId": two_items["em6"],
                "previousStock": 99,
                "ledgerStock": 10,
                "corrected": True,
                "unresolvable": False,
            }
        ]

        again = await api_client.post(
            "/api/inventory/reconcile", params={"aggregateId": two_items["em6"]}
        )
        assert again.json()["drifted"] == []

    async def test_unknown_aggregate(self, api_client):
        resp = await api_client.post("/api/inventory/reconcile", params={"aggregateId": 999})
        assert resp.status_code == 404


class TestToolChanges:
    async def test_history_for_machine(self, api_client, two_items):
        await api_client.post(
            "/api/inventory/outbound",
            json={"toolTypeCode": "EM-10", "quantity": 1, "equipmentNumber": "C007", "toolPositionNumber": 5},
        )

        resp = await api_client.get("/api/tool-changes", params={"equipmentNumber": "007"})

        assert resp.status_code == 200
        records = resp.json()["records"]
        assert len(records) == 1
        assert records[0]["toolPosition"] == 5

    async def test_unknown_machine(self, api_client):
        resp = await api_client.get("/api/tool-changes", params={"equipmentNumber": "C099"})

        assert resp.status_code == 404
        assert resp.json()["errorCode"] == "EQUIPMENT_NOT_FOUND"
