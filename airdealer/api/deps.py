"""API dependencies: request-scoped store, identity provider and the admin gate.

FastAPI caches dependencies per request, so every dependency below shares one
database session, one :class:`SQLAlchemyRecordStore` and one
:class:`LocalIdentityProvider` bound to the caller's bearer token.
"""
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from airdealer.database import get_db
from airdealer.identity.local import LocalIdentityProvider
from airdealer.middleware.monitoring import record_auth_failure, record_gate_classification
from airdealer.services.access_gate import AccessGate, GateResult, GateState
from airdealer.services.dashboard import DashboardService
from airdealer.services.order_lifecycle import OrderLifecycle
from airdealer.store.base import RecordStore
from airdealer.store.sqlalchemy_store import SQLAlchemyRecordStore

_bearer_scheme = HTTPBearer(auto_error=False)


def get_store(db: Session = Depends(get_db)) -> RecordStore:
    return SQLAlchemyRecordStore(db)


def get_identity_provider(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    store: RecordStore = Depends(get_store),
) -> LocalIdentityProvider:
    """Identity provider bound to the caller's ``Authorization: Bearer`` token (if any)"""
    return LocalIdentityProvider(store, access_token=credentials.credentials if credentials else None)


def get_access_gate(
    store: RecordStore = Depends(get_store),
    identities: LocalIdentityProvider = Depends(get_identity_provider),
) -> AccessGate:
    return AccessGate(store, identities)


def get_order_lifecycle(store: RecordStore = Depends(get_store)) -> OrderLifecycle:
    return OrderLifecycle(store)


def get_dashboard_service(store: RecordStore = Depends(get_store)) -> DashboardService:
    return DashboardService(store)


def require_approved_admin(gate: AccessGate = Depends(get_access_gate)) -> GateResult:
    """Let only approved administrators through.

    - no session, or an invalid/revoked/expired token → 401
    - ``no_admin_record`` / ``pending_approval`` → 403 carrying the gate state
    - store failure → ``Unavailable`` propagates (503), never a 403
    """
    result = gate.current_state()
    record_gate_classification(result.state.value)

    if result.state is GateState.UNAUTHENTICATED:
        record_auth_failure("session")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required. Provide Authorization: Bearer <token>.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not result.is_approved:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"state": result.state.value, "message": result.message},
        )

    return result
