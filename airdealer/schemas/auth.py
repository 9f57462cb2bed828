"""Registration, sign-in and gate status schemas"""
from typing import Optional

from pydantic import BaseModel, Field

from airdealer.config import settings
from airdealer.schemas.admin import AdminResponse


class RegisterRequest(BaseModel):
    """Schema for an admin sign-up"""

    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(..., min_length=settings.PASSWORD_MIN_LENGTH, max_length=128)
    first_name: str = Field(..., min_length=1, max_length=255)
    last_name: str = Field(..., min_length=1, max_length=255)


class RegisterResponse(BaseModel):
    message: str
    admin: AdminResponse


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1, max_length=128)


class GateStatusResponse(BaseModel):
    """Where the caller stands at the admin gate"""

    state: str          # unauthenticated | no_admin_record | pending_approval | approved
    message: str
    admin: Optional[AdminResponse] = None


class LoginResponse(GateStatusResponse):
    """Gate status after sign-in. A token is issued only in the approved state."""

    access_token: Optional[str] = None
    token_type: str = "bearer"
    expires_in: Optional[int] = None


class LogoutResponse(BaseModel):
    signed_out: bool
