"""Order schemas"""
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class OrderItemResponse(BaseModel):
    id: int
    order_id: int
    product_id: int
    location_id: int
    quantity: int
    reserved_quantity: int
    price_at_order: Decimal

    class Config:
        from_attributes = True


class OrderResponse(BaseModel):
    """Schema for an order (without items)"""

    id: int
    user_id: int
    status: str
    payment_method: str
    total_amount: Decimal
    delivery_method: Optional[str] = None
    delivery_address: Optional[str] = None
    delivery_cost: Optional[Decimal] = None
    final_total_amount: Optional[Decimal] = None
    admin_notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class OrderDetailResponse(OrderResponse):
    items: List[OrderItemResponse]
    available_transitions: List[str]


class OrderListResponse(BaseModel):
    items: List[OrderResponse]
    total: int
    bucket_counts: Dict[str, int]


class TransitionRequest(BaseModel):
    """Status change request; ``current_status`` is what the admin saw when deciding"""

    current_status: str = Field(..., description="Status the order is expected to be in")
    target_status: str = Field(..., description="Status to move the order to")
    note: Optional[str] = Field(None, max_length=2000, description="Replaces the existing admin note when non-empty")


class TransitionsResponse(BaseModel):
    order_id: int
    status: str
    available_transitions: List[str]
    is_terminal: bool
