"""Pydantic schemas for request/response validation"""
from airdealer.schemas.admin import AdminListItem, AdminListResponse, AdminResponse
from airdealer.schemas.auth import (
    GateStatusResponse,
    LoginRequest,
    LoginResponse,
    LogoutResponse,
    RegisterRequest,
    RegisterResponse,
)
from airdealer.schemas.dashboard import DashboardStatsResponse
from airdealer.schemas.order import (
    OrderDetailResponse,
    OrderItemResponse,
    OrderListResponse,
    OrderResponse,
    TransitionRequest,
    TransitionsResponse,
)

__all__ = [
    "AdminListItem",
    "AdminListResponse",
    "AdminResponse",
    "DashboardStatsResponse",
    "GateStatusResponse",
    "LoginRequest",
    "LoginResponse",
    "LogoutResponse",
    "OrderDetailResponse",
    "OrderItemResponse",
    "OrderListResponse",
    "OrderResponse",
    "RegisterRequest",
    "RegisterResponse",
    "TransitionRequest",
    "TransitionsResponse",
]
