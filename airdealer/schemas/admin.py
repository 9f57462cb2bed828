"""Admin schemas"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class AdminResponse(BaseModel):
    """Schema for an admin record"""

    id: int
    identity_id: str
    email: str
    first_name: str
    last_name: str
    role: str
    is_approved: bool
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AdminListItem(AdminResponse):
    is_current_user: bool = False   # the caller's own record; approve/delete are refused on it


class AdminListResponse(BaseModel):
    """Schema for the admin list with approval counters"""

    items: List[AdminListItem]
    total: int
    approved_count: int
    pending_count: int
