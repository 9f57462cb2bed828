"""Order status workflow.

The transition table below is the only place that knows which status changes
are legal. Both the "what can this order move to" query and the write guard in
:meth:`OrderLifecycle.apply_transition` consult it.

    pending_admin_approval         -> admin_approved_pending_payment | rejected_by_admin
    admin_approved_pending_payment -> payment_received_processing | cancelled_by_user
    payment_received_processing    -> shipped | cancelled_by_user
    shipped                        -> delivered
    delivered                      -> completed
    completed / cancelled_by_user / rejected_by_admin  (terminal)
"""
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Tuple, Union

from airdealer.exceptions import ConcurrentModification, IllegalTransition
from airdealer.store.base import Record, RecordStore
from airdealer.utils.logger import logger

ORDERS_TABLE = "orders"
ORDER_ITEMS_TABLE = "order_items"


class OrderStatus(str, Enum):
    PENDING_ADMIN_APPROVAL = "pending_admin_approval"
    ADMIN_APPROVED_PENDING_PAYMENT = "admin_approved_pending_payment"
    PAYMENT_RECEIVED_PROCESSING = "payment_received_processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    COMPLETED = "completed"
    CANCELLED_BY_USER = "cancelled_by_user"
    REJECTED_BY_ADMIN = "rejected_by_admin"


ORDER_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING_ADMIN_APPROVAL: frozenset({
        OrderStatus.ADMIN_APPROVED_PENDING_PAYMENT,
        OrderStatus.REJECTED_BY_ADMIN,
    }),
    OrderStatus.ADMIN_APPROVED_PENDING_PAYMENT: frozenset({
        OrderStatus.PAYMENT_RECEIVED_PROCESSING,
        OrderStatus.CANCELLED_BY_USER,
    }),
    OrderStatus.PAYMENT_RECEIVED_PROCESSING: frozenset({
        OrderStatus.SHIPPED,
        OrderStatus.CANCELLED_BY_USER,
    }),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset({OrderStatus.COMPLETED}),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED_BY_USER: frozenset(),
    OrderStatus.REJECTED_BY_ADMIN: frozenset(),
}

TERMINAL_STATUSES: FrozenSet[OrderStatus] = frozenset(
    status for status, targets in ORDER_TRANSITIONS.items() if not targets
)

# Dashboard/tab groupings
STATUS_BUCKETS: Dict[str, FrozenSet[OrderStatus]] = {
    "pending": frozenset({OrderStatus.PENDING_ADMIN_APPROVAL}),
    "processing": frozenset({
        OrderStatus.ADMIN_APPROVED_PENDING_PAYMENT,
        OrderStatus.PAYMENT_RECEIVED_PROCESSING,
    }),
    "shipped": frozenset({OrderStatus.SHIPPED}),
    "completed": frozenset({OrderStatus.COMPLETED, OrderStatus.DELIVERED}),
    "cancelled": frozenset({OrderStatus.CANCELLED_BY_USER, OrderStatus.REJECTED_BY_ADMIN}),
}

REVENUE_STATUSES: FrozenSet[OrderStatus] = frozenset({OrderStatus.COMPLETED, OrderStatus.DELIVERED})

StatusLike = Union[OrderStatus, str, None]


def parse_status(value: StatusLike) -> Optional[OrderStatus]:
    """Return the OrderStatus for ``value`` or None if it is not one of the eight"""
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(value)
    except ValueError:
        return None


def _raw(value: StatusLike) -> str:
    return value.value if isinstance(value, OrderStatus) else str(value)


def ordered(statuses: Iterable[OrderStatus]) -> List[OrderStatus]:
    """Sort statuses in workflow order (enum declaration order)"""
    wanted = set(statuses)
    return [status for status in OrderStatus if status in wanted]


def available_transitions(current: StatusLike) -> FrozenSet[OrderStatus]:
    """Statuses reachable in one step from ``current``.

    Unknown statuses get the empty set, same as terminal ones.
    """
    status = parse_status(current)
    if status is None:
        return frozenset()
    return ORDER_TRANSITIONS[status]


def is_valid_transition(current: StatusLike, target: StatusLike) -> bool:
    target_status = parse_status(target)
    return target_status is not None and target_status in available_transitions(current)


def is_terminal(status: StatusLike) -> bool:
    return parse_status(status) in TERMINAL_STATUSES


# ---------------------------------------------------------------------------
# Aggregates over fetched order records
# ---------------------------------------------------------------------------

def to_decimal(value: Any) -> Decimal:
    """Convert a stored monetary value (Decimal, text or number) to Decimal"""
    if value is None or value == "":
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def revenue_amount(order: Record) -> Decimal:
    """The amount an order contributes to revenue: final total, else total"""
    final_total = order.get("final_total_amount")
    return to_decimal(final_total if final_total is not None else order.get("total_amount"))


def total_revenue(orders: Iterable[Record]) -> Decimal:
    """Sum of revenue amounts over completed and delivered orders"""
    return sum(
        (revenue_amount(order) for order in orders if parse_status(order.get("status")) in REVENUE_STATUSES),
        Decimal("0"),
    )


def count_by_status(orders: Iterable[Record]) -> Dict[str, int]:
    counts = {status.value: 0 for status in OrderStatus}
    for order in orders:
        key = _raw(order.get("status"))
        counts[key] = counts.get(key, 0) + 1
    return counts


def count_by_bucket(orders: Iterable[Record]) -> Dict[str, int]:
    orders = list(orders)
    counts = {"all": len(orders)}
    for bucket, statuses in STATUS_BUCKETS.items():
        counts[bucket] = sum(1 for order in orders if parse_status(order.get("status")) in statuses)
    return counts


# ---------------------------------------------------------------------------
# Store-backed workflow
# ---------------------------------------------------------------------------

class OrderLifecycle:
    """Reads orders and applies admin-initiated status changes"""

    def __init__(self, store: RecordStore):
        self.store = store

    def get_order(self, order_id: int) -> Record:
        """Order with its items and the transitions currently open to it"""
        order = self.store.find_one(ORDERS_TABLE, {"id": order_id})
        order["items"] = self.store.find(ORDER_ITEMS_TABLE, {"order_id": order_id}, order_by="id")
        order["available_transitions"] = ordered(available_transitions(order["status"]))
        return order

    def list_orders(
        self,
        bucket: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> Tuple[List[Record], int]:
        """Newest orders first, optionally limited to one status bucket.

        Returns (page, total matching).
        """
        if bucket is not None and bucket not in STATUS_BUCKETS:
            raise ValueError(f"Unknown bucket '{bucket}'; expected one of {', '.join(STATUS_BUCKETS)}")

        filter = {"status": STATUS_BUCKETS[bucket]} if bucket else None
        orders = self.store.find(
            ORDERS_TABLE, filter, order_by="created_at", descending=True, limit=limit, offset=offset
        )
        return orders, self.store.count(ORDERS_TABLE, filter)

    def count_orders_by_bucket(self) -> Dict[str, int]:
        counts = {"all": self.store.count(ORDERS_TABLE)}
        for bucket, statuses in STATUS_BUCKETS.items():
            counts[bucket] = self.store.count(ORDERS_TABLE, {"status": statuses})
        return counts

    def revenue(self) -> Decimal:
        return total_revenue(self.store.find(ORDERS_TABLE, {"status": REVENUE_STATUSES}))

    def apply_transition(
        self,
        order_id: int,
        current_status: StatusLike,
        target_status: StatusLike,
        note: Optional[str] = None,
    ) -> Record:
        """Move an order from ``current_status`` to ``target_status``.

        The write is conditional on the stored status still being
        ``current_status``. A non-empty ``note`` replaces the admin note.

        Raises:
            IllegalTransition: the pair is not in the transition table (nothing written).
            NotFound: no order with this id.
            ConcurrentModification: the stored status is no longer ``current_status``.
        """
        if not is_valid_transition(current_status, target_status):
            logger.info(
                f"Rejected illegal transition for order {order_id}",
                extra={"order_id": order_id, "from_status": _raw(current_status), "to_status": _raw(target_status)},
            )
            raise IllegalTransition(_raw(current_status), _raw(target_status))

        current = parse_status(current_status)
        target = parse_status(target_status)

        patch: Dict[str, Any] = {"status": target.value, "updated_at": datetime.utcnow()}
        if note:
            patch["admin_notes"] = note

        updated = self.store.update(ORDERS_TABLE, {"id": order_id, "status": current.value}, patch)
        if not updated:
            stored = self.store.find_one(ORDERS_TABLE, {"id": order_id})
            logger.warning(
                f"Order {order_id} changed concurrently",
                extra={"order_id": order_id, "from_status": current.value, "to_status": target.value},
            )
            raise ConcurrentModification(
                f"Order {order_id} is now '{stored['status']}', not '{current.value}'. Refresh and retry."
            )

        logger.info(
            f"Order {order_id} moved to {target.value}",
            extra={"order_id": order_id, "from_status": current.value, "to_status": target.value},
        )
        return self.store.find_one(ORDERS_TABLE, {"id": order_id})
