"""Admin sign-up, sign-in, sign-out and gate status endpoints"""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status

from airdealer.api.deps import get_access_gate, get_identity_provider
from airdealer.config import settings
from airdealer.exceptions import InvalidCredentials
from airdealer.identity.local import LocalIdentityProvider
from airdealer.middleware.monitoring import record_auth_failure, record_gate_classification
from airdealer.middleware.rate_limit import get_rate_limit, limiter
from airdealer.schemas.admin import AdminResponse
from airdealer.schemas.auth import (
    GateStatusResponse,
    LoginRequest,
    LoginResponse,
    LogoutResponse,
    RegisterRequest,
    RegisterResponse,
)
from airdealer.services.access_gate import REGISTERED_MESSAGE, AccessGate

router = APIRouter(prefix="/auth", tags=["authentication"])


def _admin(record: Optional[Dict[str, Any]]) -> Optional[AdminResponse]:
    return AdminResponse.model_validate(record) if record else None


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(get_rate_limit("register"))
def register(
    request: Request,
    data: RegisterRequest,
    identities: LocalIdentityProvider = Depends(get_identity_provider),
    gate: AccessGate = Depends(get_access_gate),
):
    """
    Register as an administrator.

    The account starts in ``pending_approval`` and no session is issued; an
    approved administrator has to approve it first. Callers that are already
    signed in register their current identity instead of creating a new one.
    """
    identity = identities.get_current_identity()
    record = gate.register(data.email, data.password, data.first_name, data.last_name, identity=identity)
    return RegisterResponse(message=REGISTERED_MESSAGE, admin=AdminResponse.model_validate(record))


@router.post("/login", response_model=LoginResponse)
@limiter.limit(get_rate_limit("login"))
def login(
    request: Request,
    data: LoginRequest,
    identities: LocalIdentityProvider = Depends(get_identity_provider),
    gate: AccessGate = Depends(get_access_gate),
):
    """
    Sign in with email and password.

    Returns the gate state in every case. An ``access_token`` is only issued
    when the state is ``approved``; otherwise the session is closed again and
    ``message`` tells the caller why.
    """
    try:
        result = gate.sign_in(data.email, data.password)
    except InvalidCredentials:
        record_auth_failure("password")
        raise

    record_gate_classification(result.state.value)
    response = LoginResponse(state=result.state.value, message=result.message, admin=_admin(result.admin))
    if result.is_approved:
        response.access_token = identities.access_token
        response.expires_in = settings.JWT_SESSION_EXPIRE_SECONDS
    return response


@router.post("/logout", response_model=LogoutResponse)
def logout(identities: LocalIdentityProvider = Depends(get_identity_provider)):
    """Revoke the caller's session token. Later requests with it return 401."""
    if not identities.access_token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization: Bearer <token> header required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    identities.sign_out()
    return LogoutResponse(signed_out=True)


@router.get("/status", response_model=GateStatusResponse)
def gate_status(gate: AccessGate = Depends(get_access_gate)):
    """Where the caller stands: unauthenticated, no_admin_record, pending_approval or approved"""
    result = gate.current_state()
    record_gate_classification(result.state.value)
    return GateStatusResponse(state=result.state.value, message=result.message, admin=_admin(result.admin))
