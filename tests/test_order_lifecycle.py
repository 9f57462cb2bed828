"""Tests for the order status workflow service"""
import threading
from decimal import Decimal

import pytest

from airdealer.exceptions import ConcurrentModification, IllegalTransition, NotFound
from airdealer.services.order_lifecycle import (
    ORDER_TRANSITIONS,
    TERMINAL_STATUSES,
    OrderLifecycle,
    OrderStatus,
    available_transitions,
    count_by_bucket,
    count_by_status,
    is_valid_transition,
    total_revenue,
)
from airdealer.store.sqlalchemy_store import SQLAlchemyRecordStore


@pytest.fixture
def lifecycle(store) -> OrderLifecycle:
    return OrderLifecycle(store)


def test_every_status_has_a_table_entry():
    assert set(ORDER_TRANSITIONS) == set(OrderStatus)


def test_terminal_statuses():
    assert TERMINAL_STATUSES == {
        OrderStatus.COMPLETED,
        OrderStatus.CANCELLED_BY_USER,
        OrderStatus.REJECTED_BY_ADMIN,
    }
    for status in TERMINAL_STATUSES:
        assert available_transitions(status) == frozenset()


def test_no_status_transitions_to_itself():
    for status in OrderStatus:
        assert not is_valid_transition(status, status)


def test_available_transitions_accepts_plain_strings():
    assert available_transitions("pending_admin_approval") == {
        OrderStatus.ADMIN_APPROVED_PENDING_PAYMENT,
        OrderStatus.REJECTED_BY_ADMIN,
    }
    assert available_transitions("shipped") == {OrderStatus.DELIVERED}


def test_unknown_status_has_no_transitions():
    assert available_transitions("lost_in_transit") == frozenset()
    assert available_transitions(None) == frozenset()
    assert not is_valid_transition("pending_admin_approval", "lost_in_transit")


def test_apply_transition_updates_status(lifecycle, make_order):
    order = make_order()

    updated = lifecycle.apply_transition(order["id"], "pending_admin_approval", "admin_approved_pending_payment")

    assert updated["status"] == "admin_approved_pending_payment"
    assert updated["updated_at"] != order["updated_at"]


def test_full_happy_path(lifecycle, make_order):
    order = make_order()
    path = [
        "pending_admin_approval",
        "admin_approved_pending_payment",
        "payment_received_processing",
        "shipped",
        "delivered",
        "completed",
    ]
    for current, target in zip(path, path[1:]):
        order = lifecycle.apply_transition(order["id"], current, target)
    assert order["status"] == "completed"


def test_illegal_transitions_leave_order_untouched(lifecycle, store, make_order):
    for current in OrderStatus:
        order = make_order(status=current.value)
        for target in OrderStatus:
            if target in ORDER_TRANSITIONS[current]:
                continue
            with pytest.raises(IllegalTransition) as exc_info:
                lifecycle.apply_transition(order["id"], current, target)
            assert exc_info.value.current_status == current.value
            assert exc_info.value.target_status == target.value

        assert store.find_one("orders", {"id": order["id"]})["status"] == current.value


def test_illegal_transition_checked_before_store_access(failing_store, make_order):
    order = make_order()
    broken = failing_store(("update", "orders"), ("find", "orders"))

    with pytest.raises(IllegalTransition):
        OrderLifecycle(broken).apply_transition(order["id"], "pending_admin_approval", "completed")
    assert broken.calls == []


def test_stale_current_status_is_a_conflict(lifecycle, store, make_order):
    order = make_order()
    lifecycle.apply_transition(order["id"], "pending_admin_approval", "admin_approved_pending_payment")

    # a second admin still looking at the old status
    with pytest.raises(ConcurrentModification):
        lifecycle.apply_transition(order["id"], "pending_admin_approval", "rejected_by_admin")

    assert store.find_one("orders", {"id": order["id"]})["status"] == "admin_approved_pending_payment"


def test_missing_order_is_not_found(lifecycle, catalog):
    with pytest.raises(NotFound):
        lifecycle.apply_transition(999, "pending_admin_approval", "rejected_by_admin")


def test_note_replaces_existing_note(lifecycle, make_order):
    order = make_order(admin_notes="call the customer first")

    updated = lifecycle.apply_transition(
        order["id"], "pending_admin_approval", "rejected_by_admin", note="out of stock"
    )

    assert updated["admin_notes"] == "out of stock"


def test_empty_note_keeps_existing_note(lifecycle, make_order):
    order = make_order(admin_notes="call the customer first")

    updated = lifecycle.apply_transition(order["id"], "pending_admin_approval", "admin_approved_pending_payment", note="")
    assert updated["admin_notes"] == "call the customer first"

    updated = lifecycle.apply_transition(order["id"], "admin_approved_pending_payment", "cancelled_by_user")
    assert updated["admin_notes"] == "call the customer first"


def test_get_order_includes_items_and_ordered_transitions(lifecycle, make_order, catalog):
    order = make_order(total="199.99")

    detail = lifecycle.get_order(order["id"])

    assert detail["available_transitions"] == [
        OrderStatus.ADMIN_APPROVED_PENDING_PAYMENT,
        OrderStatus.REJECTED_BY_ADMIN,
    ]
    assert len(detail["items"]) == 1
    assert detail["items"][0]["product_id"] == catalog["product"]["id"]
    assert detail["items"][0]["price_at_order"] == Decimal("199.99")


def test_get_order_missing(lifecycle, catalog):
    with pytest.raises(NotFound):
        lifecycle.get_order(12345)


def test_list_orders_newest_first_and_by_bucket(lifecycle, make_order):
    first = make_order()
    second = make_order(status="shipped")
    third = make_order(status="delivered")
    make_order(status="completed")

    orders, total = lifecycle.list_orders()
    assert total == 4
    assert [o["id"] for o in orders][-3:] == [third["id"], second["id"], first["id"]]

    completed, total = lifecycle.list_orders("completed")
    assert total == 2
    assert {o["status"] for o in completed} == {"completed", "delivered"}

    page, total = lifecycle.list_orders(limit=1, offset=1)
    assert total == 4
    assert [o["id"] for o in page] == [third["id"]]


def test_list_orders_unknown_bucket(lifecycle):
    with pytest.raises(ValueError):
        lifecycle.list_orders("archived")


def test_count_orders_by_bucket(lifecycle, make_order):
    make_order()
    make_order(status="admin_approved_pending_payment")
    make_order(status="payment_received_processing")
    make_order(status="cancelled_by_user")
    make_order(status="rejected_by_admin")

    counts = lifecycle.count_orders_by_bucket()

    assert counts == {
        "all": 5,
        "pending": 1,
        "processing": 2,
        "shipped": 0,
        "completed": 0,
        "cancelled": 2,
    }


def test_revenue_is_exact_decimal(lifecycle, make_order):
    make_order(status="completed", total="10.10")
    make_order(status="delivered", total="99.00", final_total="0.05")
    make_order(status="cancelled_by_user", total="500.00")
    make_order(status="shipped", total="42.00")

    assert lifecycle.revenue() == Decimal("10.15")


def test_total_revenue_over_plain_records():
    orders = [
        {"status": "completed", "total_amount": "10.10", "final_total_amount": None},
        {"status": "delivered", "total_amount": "7.00", "final_total_amount": "0.05"},
        {"status": "rejected_by_admin", "total_amount": "3.00"},
    ]
    assert total_revenue(orders) == Decimal("10.15")
    assert total_revenue([]) == Decimal("0")


def test_count_by_bucket_ignores_unknown_statuses():
    counts = count_by_bucket([{"status": "shipped"}, {"status": "mystery"}])
    assert counts["all"] == 2
    assert counts["shipped"] == 1
    assert sum(v for k, v in counts.items() if k != "all") == 1


def test_count_by_status_lists_every_status():
    counts = count_by_status([{"status": "shipped"}, {"status": "shipped"}, {"status": "completed"}])
    assert counts["shipped"] == 2
    assert counts["completed"] == 1
    assert counts["pending_admin_approval"] == 0
    assert len(counts) == len(OrderStatus)


def test_concurrent_transitions_from_separate_sessions(session_factory, store, make_order):
    order = make_order()
    targets = ["admin_approved_pending_payment", "rejected_by_admin"]
    lifecycles = [OrderLifecycle(SQLAlchemyRecordStore(session_factory())) for _ in targets]
    start = threading.Barrier(len(targets))
    outcomes = {}

    def decide(lifecycle, target):
        start.wait()
        try:
            lifecycle.apply_transition(order["id"], "pending_admin_approval", target)
            outcomes[target] = "ok"
        except ConcurrentModification:
            outcomes[target] = "conflict"

    threads = [threading.Thread(target=decide, args=pair) for pair in zip(lifecycles, targets)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    assert sorted(outcomes.values()) == ["conflict", "ok"]
    winner = next(target for target, outcome in outcomes.items() if outcome == "ok")
    assert store.find_one("orders", {"id": order["id"]})["status"] == winner
