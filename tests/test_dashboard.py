"""Tests for the dashboard and health endpoints"""
from decimal import Decimal

from fastapi.testclient import TestClient

from airdealer.services.dashboard import DashboardService


def test_dashboard_requires_session(client: TestClient):
    """Test that dashboard stats require an approved admin"""
    assert client.get("/dashboard/stats").status_code == 401


def test_dashboard_stats(client: TestClient, approved_admin: dict, make_order):
    """Test headline figures"""
    make_order()
    make_order(status="completed", total="10.10")
    make_order(status="delivered", total="50.00", final_total="0.05")
    make_order(status="rejected_by_admin", total="75.00")

    response = client.get("/dashboard/stats", headers=approved_admin["headers"])
    assert response.status_code == 200

    data = response.json()
    assert data["total_products"] == 1
    assert data["active_users"] == 1
    assert data["pending_orders"] == 1
    assert Decimal(str(data["total_revenue"])) == Decimal("10.15")
    assert data["orders_by_bucket"]["completed"] == 2
    assert data["orders_by_bucket"]["cancelled"] == 1
    assert data["pending_orders_need_attention"] is False


def test_pending_orders_need_attention(store, make_order):
    """Test the attention flag once pending orders pile up"""
    for _ in range(6):
        make_order()

    stats = DashboardService(store).get_stats()

    assert stats.pending_orders == 6
    assert stats.pending_orders_need_attention is True


def test_empty_dashboard(store):
    """Test stats on an empty database"""
    stats = DashboardService(store).get_stats()

    assert stats.total_products == 0
    assert stats.total_revenue == Decimal("0")
    assert stats.orders_by_bucket["all"] == 0


def test_health_check(client: TestClient):
    """Test basic health check"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_readiness_check(client: TestClient):
    """Test readiness check"""
    response = client.get("/health/ready")
    assert response.status_code == 200
    assert response.json()["checks"]["database"] is True


def test_liveness_check(client: TestClient):
    """Test liveness check"""
    response = client.get("/health/live")
    assert response.status_code == 200
    assert response.json()["status"] == "alive"
