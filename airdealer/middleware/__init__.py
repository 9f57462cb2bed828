"""Middleware modules for production-ready features"""
from airdealer.middleware.monitoring import (
    MonitoringMiddleware,
    record_auth_failure,
    record_gate_classification,
    record_order_transition,
)
from airdealer.middleware.rate_limit import limiter, get_rate_limit

__all__ = [
    "MonitoringMiddleware",
    "record_auth_failure",
    "record_gate_classification",
    "record_order_transition",
    "limiter",
    "get_rate_limit"
]
