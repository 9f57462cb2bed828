"""Order listing and status workflow endpoints"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from airdealer.api.deps import get_order_lifecycle, require_approved_admin
from airdealer.exceptions import ConcurrentModification, IllegalTransition
from airdealer.middleware.monitoring import record_order_transition
from airdealer.schemas.order import (
    OrderDetailResponse,
    OrderListResponse,
    OrderResponse,
    TransitionRequest,
    TransitionsResponse,
)
from airdealer.services.access_gate import GateResult
from airdealer.services.order_lifecycle import STATUS_BUCKETS, OrderLifecycle, is_terminal, parse_status

router = APIRouter(prefix="/orders", tags=["orders"])


@router.get("", response_model=OrderListResponse)
def list_orders(
    bucket: Optional[str] = Query(
        None, description="Filter by bucket: pending, processing, shipped, completed, cancelled"
    ),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    lifecycle: OrderLifecycle = Depends(get_order_lifecycle),
    _: GateResult = Depends(require_approved_admin),
):
    """List orders newest first, with per-bucket counts for the tab headers."""
    if bucket and bucket not in STATUS_BUCKETS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"bucket must be one of: {', '.join(STATUS_BUCKETS)}",
        )

    orders, total = lifecycle.list_orders(bucket, limit=limit, offset=offset)
    return OrderListResponse(
        items=[OrderResponse.model_validate(order) for order in orders],
        total=total,
        bucket_counts=lifecycle.count_orders_by_bucket(),
    )


@router.get("/{order_id}", response_model=OrderDetailResponse)
def get_order(
    order_id: int,
    lifecycle: OrderLifecycle = Depends(get_order_lifecycle),
    _: GateResult = Depends(require_approved_admin),
):
    """Get an order with its items and the statuses it can move to."""
    order = lifecycle.get_order(order_id)
    order["available_transitions"] = [s.value for s in order["available_transitions"]]
    return OrderDetailResponse.model_validate(order)


@router.get("/{order_id}/transitions", response_model=TransitionsResponse)
def get_transitions(
    order_id: int,
    lifecycle: OrderLifecycle = Depends(get_order_lifecycle),
    _: GateResult = Depends(require_approved_admin),
):
    """Statuses the order can move to from where it is now."""
    order = lifecycle.get_order(order_id)
    return TransitionsResponse(
        order_id=order_id,
        status=order["status"],
        available_transitions=[s.value for s in order["available_transitions"]],
        is_terminal=is_terminal(order["status"]),
    )


@router.post("/{order_id}/transition", response_model=OrderResponse)
def transition_order(
    order_id: int,
    data: TransitionRequest,
    lifecycle: OrderLifecycle = Depends(get_order_lifecycle),
    _: GateResult = Depends(require_approved_admin),
):
    """
    Move an order to a new status.

    ``current_status`` must be the status the order is in right now:
    - 422 ``illegal_transition`` if the change is not allowed from ``current_status``
    - 409 ``concurrent_modification`` if someone else changed the order first

    A non-empty ``note`` replaces the order's admin note.
    """
    # unknown target strings share one metric label
    to_status = data.target_status if parse_status(data.target_status) else "unknown"
    try:
        order = lifecycle.apply_transition(order_id, data.current_status, data.target_status, data.note)
    except IllegalTransition:
        record_order_transition(to_status, "illegal")
        raise
    except ConcurrentModification:
        record_order_transition(to_status, "conflict")
        raise

    record_order_transition(to_status, "applied")
    return OrderResponse.model_validate(order)
