"""Dashboard figures for the admin home page"""
from decimal import Decimal
from typing import Dict, NamedTuple

from airdealer.config import settings
from airdealer.services.order_lifecycle import OrderLifecycle
from airdealer.store.base import RecordStore


class DashboardStats(NamedTuple):
    total_products: int
    active_users: int
    pending_orders: int
    total_revenue: Decimal
    orders_by_bucket: Dict[str, int]
    pending_orders_need_attention: bool


class DashboardService:
    def __init__(self, store: RecordStore):
        self.store = store
        self.orders = OrderLifecycle(store)

    def get_stats(self) -> DashboardStats:
        buckets = self.orders.count_orders_by_bucket()
        pending = buckets["pending"]
        return DashboardStats(
            total_products=self.store.count("products"),
            active_users=self.store.count("users", {"is_blocked": False}),
            pending_orders=pending,
            total_revenue=self.orders.revenue(),
            orders_by_bucket=buckets,
            pending_orders_need_attention=pending > settings.PENDING_ORDERS_ATTENTION_THRESHOLD,
        )
