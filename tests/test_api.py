"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from src.middleware.admin_auth import require_admin
from src.routes.dependencies import get_db
from src.server import app
from src.utils.exceptions import AuthenticationError


@pytest.fixture
def client(db):
    """Test client on the in-memory database, authorized as user ``clerk``."""
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[require_admin] = lambda: "clerk"
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


@pytest.fixture
def ids(client):
    product = client.post("/api/products", json={"name": "Widget", "category": "Hardware", "unitPrice": 100})
    supplier = client.post("/api/suppliers", json={"name": "Acme Supply"})
    return product.json()["data"]["id"], supplier.json()["data"]["id"]


class TestServiceEndpoints:

    def test_root(self, client):
        assert client.get("/").json()["status"] == "running"

    def test_health(self, client):
        assert client.get("/health").json()["status"] == "healthy"


class TestLedgerEndpoints:
    """End-to-end flow over the API."""

    def test_example_flow(self, client, ids):
        product_id, supplier_id = ids

        response = client.post("/api/stock-in", json={
            "product": product_id, "supplier": supplier_id, "quantity": 10, "unitPrice": 80,
            "deliveryDate": "2025-05-02T09:00:00Z"
        })
        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["data"]["createdBy"] == "clerk"
        assert body["data"]["supplier"]["name"] == "Acme Supply"

        response = client.post("/api/stock-out", json={
            "product": product_id, "quantity": 4, "salePrice": 100, "saleDate": "2025-05-10T12:00:00Z"
        })
        assert response.status_code == 201
        assert response.json()["data"]["totalAmount"] == 400

        response = client.post("/api/stock-out", json={"product": product_id, "quantity": 7, "salePrice": 100})
        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "message": "Not enough stock. Available: 6, Requested: 7",
            "details": {"available": 6, "requested": 7}
        }

        report = client.get("/api/reports/profit", params={"startDate": "2025-05-01", "endDate": "2025-05-31"})
        assert report.status_code == 200
        assert report.json()["grossProfit"] == pytest.approx(80.0)
        assert report.json()["profitMargin"] == pytest.approx(20.0)

    def test_list_envelope(self, client, ids):
        body = client.get("/api/products").json()

        assert body["success"] is True
        assert body["count"] == 1

    def test_delete_returns_empty_data(self, client, ids):
        product_id, supplier_id = ids
        entry = client.post("/api/stock-in", json={
            "product": product_id, "supplier": supplier_id, "quantity": 1, "unitPrice": 5
        }).json()["data"]

        response = client.delete(f"/api/stock-in/{entry['id']}")

        assert response.json() == {"success": True, "data": {}}

    def test_immutable_fields(self, client, ids):
        product_id, supplier_id = ids
        entry = client.post("/api/stock-in", json={
            "product": product_id, "supplier": supplier_id, "quantity": 1, "unitPrice": 5
        }).json()["data"]

        response = client.put(f"/api/stock-in/{entry['id']}", json={"quantity": 3})

        assert response.status_code == 400
        assert "Cannot update product or quantity directly" in response.json()["message"]


class TestErrorResponses:

    def test_not_found(self, client):
        response = client.get("/api/products/unknown")

        assert response.status_code == 404
        assert response.json()["success"] is False

    def test_request_validation_is_400(self, client):
        response = client.post("/api/suppliers", json={"name": "Bad", "email": "nope"})

        assert response.status_code == 400
        assert response.json()["message"] == "Please add a valid email"

    def test_report_requires_dates(self, client):
        response = client.get("/api/reports/sales")

        assert response.status_code == 400
        assert response.json()["message"] == "Please provide start and end dates"

    def test_supplier_delete_blocked(self, client, ids):
        product_id, supplier_id = ids
        client.post("/api/stock-in", json={
            "product": product_id, "supplier": supplier_id, "quantity": 1, "unitPrice": 5
        })

        response = client.delete(f"/api/suppliers/{supplier_id}")

        assert response.status_code == 400
        assert response.json()["details"] == {"deliveryCount": 1}

    def test_missing_token_is_401(self, db, monkeypatch):
        class MockValidator:
            def authorize(self, request):
                raise AuthenticationError("Not authorized, no token")

        monkeypatch.setattr("src.middleware.admin_auth.AdminAuthValidator", MockValidator)
        app.dependency_overrides[get_db] = lambda: db
        try:
            response = TestClient(app).get("/api/products")
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 401
        assert response.json()["message"] == "Not authorized, no token"
