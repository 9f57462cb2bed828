"""Back-office decision logic"""
from airdealer.services.access_gate import AccessGate, AdminListing, GateResult, GateState
from airdealer.services.dashboard import DashboardService, DashboardStats
from airdealer.services.order_lifecycle import (
    ORDER_TRANSITIONS,
    STATUS_BUCKETS,
    TERMINAL_STATUSES,
    OrderLifecycle,
    OrderStatus,
    available_transitions,
    count_by_bucket,
    count_by_status,
    is_valid_transition,
    total_revenue,
)

__all__ = [
    "AccessGate",
    "AdminListing",
    "DashboardService",
    "DashboardStats",
    "GateResult",
    "GateState",
    "ORDER_TRANSITIONS",
    "OrderLifecycle",
    "OrderStatus",
    "STATUS_BUCKETS",
    "TERMINAL_STATUSES",
    "available_transitions",
    "count_by_bucket",
    "count_by_status",
    "is_valid_transition",
    "total_revenue",
]
