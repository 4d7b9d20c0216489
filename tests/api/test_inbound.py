"""API tests for inbound (receiving) endpoints."""

import pytest

from toolcrib.core.entities.stock import utc_now

INBOUND = "/api/inventory/inbound"


def _body(**kwargs) -> dict:
    body = {
        "toolTypeCode": "EM-10",
        "counterparty": "Acme Tools",
        "quantity": 30,
        "unitPrice": 1000,
    }
    body.update(kwargs)
    return body


class TestCreateInbound:
    async def test_receive_returns_snapshot(self, api_client):
        resp = await api_client.post(INBOUND, json=_body())

        assert resp.status_code == 201
        data = resp.json()
        assert data["success"] is True
        assert data["created"] is True
        assert data["transaction"]["transactionType"] == "inbound"
        assert data["transaction"]["totalAmount"] == 30000.0
        assert data["transaction"]["processedBy"] == "admin"
        assert data["aggregateSnapshot"]["currentStock"] == 30
        assert data["aggregateSnapshot"]["status"] == "low"

    async def test_snake_case_body_accepted(self, api_client):
        resp = await api_client.post(
            INBOUND,
            json={
                "tool_type_code": "EM-10",
                "counterparty": "Acme Tools",
                "quantity": 2,
                "unit_price": 10,
            },
        )
        assert resp.status_code == 201

    async def test_unknown_tool_type(self, api_client):
        resp = await api_client.post(INBOUND, json=_body(toolTypeCode="NOPE"))

        assert resp.status_code == 404
        data = resp.json()
        assert data["success"] is False
        assert data["errorCode"] == "TOOL_TYPE_NOT_FOUND"
        assert data["hint"]
        assert data["path"] == INBOUND

    async def test_zero_quantity(self, api_client):
        resp = await api_client.post(INBOUND, json=_body(quantity=0))

        assert resp.status_code == 400
        assert resp.json()["errorCode"] == "VALIDATION_ERROR"

    async def test_missing_field(self, api_client):
        body = _body()
        del body["counterparty"]

        resp = await api_client.post(INBOUND, json=body)

        assert resp.status_code == 400
        data = resp.json()
        assert data["errorCode"] == "VALIDATION_ERROR"
        assert "counterparty" in data["detail"]

    @pytest.mark.parametrize(
        "raw",
        [
            '{"toolTypeCode": "EM-10", "counterparty": "Acme", "quantity": 3, "unitPrice": NaN}',
            '{"toolTypeCode": "EM-10", "counterparty": "Acme", "quantity": 3, "unitPrice": Infinity}',
            '{"toolTypeCode": "EM-10", "counterparty": "Acme", "quantity": 3, "unitPrice": 1,'
            ' "totalAmount": NaN}',
        ],
    )
    async def test_non_finite_amounts(self, api_client, raw):
        resp = await api_client.post(
            INBOUND, content=raw, headers={"Content-Type": "application/json"}
        )

        assert resp.status_code == 400
        assert resp.json()["errorCode"] == "VALIDATION_ERROR"
        assert (await api_client.get("/api/inventory")).json()["items"] == []

    @pytest.mark.parametrize(
        "override",
        [{"quantity": 10**20}, {"totalAmount": -5}],
    )
    async def test_out_of_range_values(self, api_client, override):
        resp = await api_client.post(INBOUND, json=_body(**override))

        assert resp.status_code == 400
        assert resp.json()["errorCode"] == "VALIDATION_ERROR"
        assert (await api_client.get("/api/inventory")).json()["items"] == []


class TestEditAndDeleteInbound:
    async def test_edit_shifts_stock(self, api_client):
        created = (await api_client.post(INBOUND, json=_body())).json()
        transaction_id = created["transaction"]["id"]

        resp = await api_client.put(
            f"{INBOUND}/{transaction_id}",
            json={"quantity": 35, "unitPrice": 900, "counterparty": "Beta Supply"},
        )

        assert resp.status_code == 200
        data = resp.json()
        assert data["aggregateSnapshot"]["currentStock"] == 35
        assert data["transaction"]["counterparty"] == "Beta Supply"
        assert data["transaction"]["totalAmount"] == 31500.0

    async def test_delete_then_delete_again(self, api_client):
        created = (await api_client.post(INBOUND, json=_body())).json()
        transaction_id = created["transaction"]["id"]

        resp = await api_client.delete(f"{INBOUND}/{transaction_id}")
        assert resp.status_code == 200
        assert resp.json()["aggregateSnapshot"]["currentStock"] == 0

        again = await api_client.delete(f"{INBOUND}/{transaction_id}")
        assert again.status_code == 404
        assert again.json()["errorCode"] == "TRANSACTION_NOT_FOUND"

    async def test_delete_blocked_after_issue(self, api_client):
        created = (await api_client.post(INBOUND, json=_body())).json()
        await api_client.post(
            "/api/inventory/outbound", json={"toolTypeCode": "EM-10", "quantity": 20}
        )

        resp = await api_client.delete(f"{INBOUND}/{created['transaction']['id']}")

        assert resp.status_code == 400
        assert resp.json()["errorCode"] == "REVERSAL_BLOCKED"


class TestListInbound:
    async def test_list_for_today(self, api_client):
        await api_client.post(INBOUND, json=_body())
        await api_client.post(INBOUND, json=_body(quantity=5, factoryId="F2"))

        today = utc_now().date().isoformat()
        resp = await api_client.get(INBOUND, params={"date": today})
        assert resp.status_code == 200
        assert len(resp.json()["transactions"]) == 2

        scoped = await api_client.get(INBOUND, params={"factoryId": "F2"})
        assert [t["quantity"] for t in scoped.json()["transactions"]] == [5]

    async def test_other_day_is_empty(self, api_client):
        await api_client.post(INBOUND, json=_body())

        resp = await api_client.get(INBOUND, params={"date": "2001-01-01"})

        assert resp.json()["transactions"] == []
