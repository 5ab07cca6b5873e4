"""
HTTP API tests. The app is exercised through TestClient with the processor
and worker swapped for in-memory instances.
"""
import pytest
from fastapi.testclient import TestClient

from conftest import digital_payload, physical_payload
from main import app
from services.order_processing_service import (
    OrderProcessingWorker,
    get_order_processing_worker,
    get_order_processor,
)


@pytest.fixture
def client(processor):
    worker = OrderProcessingWorker(processor, interval_seconds=3600)
    app.dependency_overrides[get_order_processor] = lambda: processor
    app.dependency_overrides[get_order_processing_worker] = lambda: worker
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _create(client, payload):
    response = client.post("/api/orders", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


class TestInfo:
    def test_info_lists_payment_methods(self, client):
        data = client.get("/api/info").json()

        names = [item["name"] for item in data["payment_methods"]]
        assert names[:4] == ["credit_card", "paypal", "bank_transfer", "cash_on_delivery"]
        assert "percentage" in data["discount_types"]
        assert data["notification_channel"] == "recording"
        assert data["order_store"] == "memory"

    def test_health(self, client):
        assert client.get("/api/health").json() == {"status": "ok"}


class TestOrders:
    def test_create_and_read(self, client):
        created = _create(client, physical_payload())

        assert created["status"] == "pending"
        assert created["pricing"]["total"] == "203.19"
        assert "payment_details" not in created

        fetched = client.get(f"/api/orders/{created['order_id']}").json()
        assert fetched["order_id"] == created["order_id"]

    def test_validation_errors(self, client):
        response = client.post("/api/orders", json=digital_payload(payment={"method": "cash_on_delivery", "details": {}}))

        assert response.status_code == 422
        assert response.json()["detail"] == ["payment method 'cash_on_delivery' is only available for physical orders"]

    def test_non_finite_discount_is_a_validation_error(self, client):
        response = client.post("/api/orders", json=digital_payload(discount={"type": "percentage", "percent": "NaN"}))

        assert response.status_code == 422
        assert response.json()["detail"] == ["discount 'percent' must be a finite number, got NaN"]

    def test_unknown_order(self, client):
        assert client.get("/api/orders/nope").status_code == 404
        assert client.post("/api/orders/nope/process").status_code == 404

    def test_full_physical_flow(self, client):
        order_id = _create(client, physical_payload())["order_id"]

        paid = client.post(f"/api/orders/{order_id}/process").json()
        assert paid["status"] == "paid"
        assert paid["receipt"]["reference"] == "**** **** **** 1111"

        shipped = client.post(f"/api/orders/{order_id}/ship", json={"tracking_number": "TRACK-1"}).json()
        assert shipped["tracking_number"] == "TRACK-1"

        assert client.post(f"/api/orders/{order_id}/deliver").json()["status"] == "delivered"
        assert client.post(f"/api/orders/{order_id}/return", json={"reason": "too loud"}).json()["status"] == "returned"

        partial = client.post(f"/api/orders/{order_id}/refund", json={"amount": "3.19"}).json()
        assert partial["receipt"]["refunded_amount"] == "3.19"

        refunded = client.post(f"/api/orders/{order_id}/refund")
        assert refunded.status_code == 200
        assert refunded.json()["status"] == "refunded"

        log = client.get(f"/api/orders/{order_id}/log").json()
        actions = [entry["action"] for entry in log["entries"]]
        assert actions[0] == "place_order"
        assert actions.count("refund_order") == 2

    def test_declined_payment_is_402(self, client):
        payload = physical_payload(payment={"method": "credit_card", "details": {"card_number": "1234", "expiry": "12/99"}})
        order_id = _create(client, payload)["order_id"]

        response = client.post(f"/api/orders/{order_id}/process")

        assert response.status_code == 402
        assert client.get(f"/api/orders/{order_id}").json()["status"] == "payment_failed"

    def test_digital_order_cannot_be_returned(self, client):
        order_id = _create(client, digital_payload())["order_id"]
        client.post(f"/api/orders/{order_id}/process")

        download = client.post(f"/api/orders/{order_id}/download").json()
        assert download["download_url"].startswith("https://downloads.test/")

        response = client.post(f"/api/orders/{order_id}/return", json={"reason": "meh"})
        assert response.status_code == 409

    def test_cash_on_delivery_refund_conflict(self, client):
        order_id = _create(client, physical_payload(payment={"method": "cash_on_delivery", "details": {}}))["order_id"]
        client.post(f"/api/orders/{order_id}/process")
        client.post(f"/api/orders/{order_id}/ship", json={"tracking_number": "T"})
        client.post(f"/api/orders/{order_id}/deliver")
        client.post(f"/api/orders/{order_id}/return", json={"reason": "broken"})

        response = client.post(f"/api/orders/{order_id}/refund")

        assert response.status_code == 409
        assert "does not support refund" in response.json()["detail"]

    def test_list_filtered_by_status(self, client):
        first = _create(client, digital_payload())["order_id"]
        second = _create(client, digital_payload())["order_id"]
        client.post(f"/api/orders/{first}/process")

        pending = client.get("/api/orders", params={"status": "pending"}).json()["items"]
        everything = client.get("/api/orders").json()["items"]

        assert [item["order_id"] for item in pending] == [second]
        assert len(everything) == 2


class TestOrderProcessingWorker:
    def test_status_start_stop(self, client):
        status = client.get("/api/order-processing/status").json()
        assert status["running"] is False
        assert status["interval_seconds"] == 3600

        assert client.post("/api/order-processing/start").json()["running"] is True
        assert client.post("/api/order-processing/stop").json()["running"] is False

