"""Administrator approval and removal endpoints"""
from fastapi import APIRouter, Depends, status

from airdealer.api.deps import get_access_gate, require_approved_admin
from airdealer.schemas.admin import AdminListItem, AdminListResponse, AdminResponse
from airdealer.services.access_gate import AccessGate, GateResult

router = APIRouter(prefix="/admins", tags=["admins"])


@router.get("", response_model=AdminListResponse)
def list_admins(
    gate: AccessGate = Depends(get_access_gate),
    ctx: GateResult = Depends(require_approved_admin),
):
    """
    List administrators, newest registration first.

    ``is_current_user`` marks the caller's own record, on which approve,
    revoke and delete are refused.
    """
    listing = gate.list_admins(ctx.identity.id)
    return AdminListResponse(
        items=[AdminListItem.model_validate(item) for item in listing.items],
        total=listing.total,
        approved_count=listing.approved_count,
        pending_count=listing.pending_count,
    )


@router.post("/{admin_id}/approve", response_model=AdminResponse)
def approve_admin(
    admin_id: int,
    gate: AccessGate = Depends(get_access_gate),
    ctx: GateResult = Depends(require_approved_admin),
):
    """Approve a pending administrator (not yourself)."""
    return AdminResponse.model_validate(gate.set_approval(ctx.identity.id, admin_id, True))


@router.post("/{admin_id}/revoke", response_model=AdminResponse)
def revoke_admin(
    admin_id: int,
    gate: AccessGate = Depends(get_access_gate),
    ctx: GateResult = Depends(require_approved_admin),
):
    """Withdraw an administrator's approval (not your own)."""
    return AdminResponse.model_validate(gate.set_approval(ctx.identity.id, admin_id, False))


@router.delete("/{admin_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_admin(
    admin_id: int,
    gate: AccessGate = Depends(get_access_gate),
    ctx: GateResult = Depends(require_approved_admin),
):
    """
    Delete an administrator (not yourself).

    The underlying login is removed on a best-effort basis; if that fails the
    person can still sign in but lands in ``no_admin_record``.
    """
    gate.delete_admin(ctx.identity.id, admin_id)
    return None
