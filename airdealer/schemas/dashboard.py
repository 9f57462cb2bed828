"""Dashboard schemas"""
from decimal import Decimal
from typing import Dict

from pydantic import BaseModel


class DashboardStatsResponse(BaseModel):
    total_products: int
    active_users: int
    pending_orders: int
    total_revenue: Decimal
    orders_by_bucket: Dict[str, int]
    pending_orders_need_attention: bool
