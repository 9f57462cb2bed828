"""Tests for order endpoints"""
from decimal import Decimal

from fastapi.testclient import TestClient


def test_orders_require_session(client: TestClient, make_order):
    """Test that order endpoints require an approved admin"""
    order = make_order()

    assert client.get("/orders").status_code == 401
    assert client.get(f"/orders/{order['id']}").status_code == 401
    response = client.post(f"/orders/{order['id']}/transition", json={
        "current_status": "pending_admin_approval",
        "target_status": "rejected_by_admin",
    })
    assert response.status_code == 401


def test_list_orders_with_bucket_counts(client: TestClient, approved_admin: dict, make_order):
    """Test listing orders with per-bucket counts"""
    make_order()
    make_order()
    make_order(status="shipped")
    make_order(status="delivered")

    response = client.get("/orders", headers=approved_admin["headers"])
    assert response.status_code == 200

    data = response.json()
    assert data["total"] == 4
    assert len(data["items"]) == 4
    assert data["bucket_counts"]["all"] == 4
    assert data["bucket_counts"]["pending"] == 2
    assert data["bucket_counts"]["shipped"] == 1
    assert data["bucket_counts"]["completed"] == 1


def test_filter_orders_by_bucket(client: TestClient, approved_admin: dict, make_order):
    """Test filtering orders by bucket"""
    make_order()
    make_order(status="cancelled_by_user")
    make_order(status="rejected_by_admin")

    response = client.get("/orders?bucket=cancelled", headers=approved_admin["headers"])
    assert response.status_code == 200

    data = response.json()
    assert data["total"] == 2
    assert {item["status"] for item in data["items"]} == {"cancelled_by_user", "rejected_by_admin"}


def test_filter_orders_unknown_bucket(client: TestClient, approved_admin: dict):
    """Test that an unknown bucket is a 400"""
    response = client.get("/orders?bucket=archived", headers=approved_admin["headers"])
    assert response.status_code == 400


def test_get_order_detail(client: TestClient, approved_admin: dict, make_order, catalog):
    """Test getting an order with items and open transitions"""
    order = make_order(total="199.99")

    response = client.get(f"/orders/{order['id']}", headers=approved_admin["headers"])
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "pending_admin_approval"
    assert Decimal(data["total_amount"]) == Decimal("199.99")
    assert data["available_transitions"] == ["admin_approved_pending_payment", "rejected_by_admin"]
    assert len(data["items"]) == 1
    assert data["items"][0]["product_id"] == catalog["product"]["id"]


def test_get_order_not_found(client: TestClient, approved_admin: dict):
    """Test getting a non-existent order"""
    response = client.get("/orders/4242", headers=approved_admin["headers"])
    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


def test_transitions_for_terminal_order(client: TestClient, approved_admin: dict, make_order):
    """Test that terminal orders offer no transitions"""
    order = make_order(status="completed")

    response = client.get(f"/orders/{order['id']}/transitions", headers=approved_admin["headers"])
    assert response.status_code == 200

    data = response.json()
    assert data["available_transitions"] == []
    assert data["is_terminal"] is True


def test_transition_order(client: TestClient, approved_admin: dict, make_order):
    """Test a legal status change with a note"""
    order = make_order(admin_notes="old note")

    response = client.post(f"/orders/{order['id']}/transition", headers=approved_admin["headers"], json={
        "current_status": "pending_admin_approval",
        "target_status": "admin_approved_pending_payment",
        "note": "stock confirmed",
    })
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "admin_approved_pending_payment"
    assert data["admin_notes"] == "stock confirmed"


def test_illegal_transition(client: TestClient, approved_admin: dict, make_order):
    """Test that a transition outside the table is refused and nothing changes"""
    order = make_order()

    response = client.post(f"/orders/{order['id']}/transition", headers=approved_admin["headers"], json={
        "current_status": "pending_admin_approval",
        "target_status": "shipped",
    })
    assert response.status_code == 422
    assert response.json()["error"] == "illegal_transition"
    assert response.json()["category"] == "invalid"

    detail = client.get(f"/orders/{order['id']}", headers=approved_admin["headers"]).json()
    assert detail["status"] == "pending_admin_approval"


def test_unknown_target_status(client: TestClient, approved_admin: dict, make_order):
    """Test that an unknown status string is an illegal transition"""
    order = make_order()

    response = client.post(f"/orders/{order['id']}/transition", headers=approved_admin["headers"], json={
        "current_status": "pending_admin_approval",
        "target_status": "teleported",
    })
    assert response.status_code == 422
    assert response.json()["error"] == "illegal_transition"


def test_stale_transition_is_conflict(client: TestClient, approved_admin: dict, make_order):
    """Test that acting on an outdated status is a retryable conflict"""
    order = make_order()
    headers = approved_admin["headers"]

    first = client.post(f"/orders/{order['id']}/transition", headers=headers, json={
        "current_status": "pending_admin_approval",
        "target_status": "admin_approved_pending_payment",
    })
    assert first.status_code == 200

    second = client.post(f"/orders/{order['id']}/transition", headers=headers, json={
        "current_status": "pending_admin_approval",
        "target_status": "rejected_by_admin",
    })
    assert second.status_code == 409
    assert second.json()["error"] == "concurrent_modification"
    assert second.json()["category"] == "retryable"


def test_transition_missing_order(client: TestClient, approved_admin: dict):
    """Test transitioning a non-existent order"""
    response = client.post("/orders/4242/transition", headers=approved_admin["headers"], json={
        "current_status": "pending_admin_approval",
        "target_status": "rejected_by_admin",
    })
    assert response.status_code == 404
