"""
Unit tests for the order and trip status tables.
"""

import pytest
from datetime import datetime, timezone

from backend.app.core.exceptions import DomainValidationError, IllegalTransitionError
from backend.app.domain.dispatch.status_engine import (
    ORDER_FORWARD,
    TRIP_FORWARD,
    plan_order_advance,
    plan_order_cancel,
    plan_order_rollback,
    plan_trip_advance,
    plan_trip_rollback,
)
from backend.app.models.order_enums import OrderStatus
from backend.app.models.trip_enums import TripStatus

NOW = datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)


@pytest.mark.parametrize("status", list(OrderStatus))
def test_order_advance_succeeds_iff_forward_entry(status):
    if ORDER_FORWARD[status] is None:
        with pytest.raises(IllegalTransitionError):
            plan_order_advance(status, NOW)
    else:
        change = plan_order_advance(status, NOW)
        assert change.from_status == status
        assert change.to_status == ORDER_FORWARD[status]
        assert change.values["status"] == ORDER_FORWARD[status]


def test_advance_stamps_actual_dates():
    assert plan_order_advance(OrderStatus.ASSIGNED, NOW).values["actual_pickup_date"] == NOW
    assert plan_order_advance(OrderStatus.PICKED_UP, NOW).values["actual_delivery_date"] == NOW
    assert "actual_pickup_date" not in plan_order_advance(OrderStatus.DELIVERED, NOW).values


@pytest.mark.parametrize("status", [s for s in OrderStatus if ORDER_FORWARD[s] is not None])
def test_advance_then_rollback_round_trip(status):
    forward = plan_order_advance(status, NOW)
    backward = plan_order_rollback(forward.to_status)

    assert backward.to_status == status
    stamped = {k for k in forward.values if k.startswith("actual_")}
    cleared = {k for k, v in backward.values.items() if k.startswith("actual_") and v is None}
    assert stamped == cleared


def test_rollback_to_new_releases_trip():
    change = plan_order_rollback(OrderStatus.ASSIGNED)
    assert change.values == {"status": OrderStatus.NEW, "trip_id": None}


@pytest.mark.parametrize("status", [OrderStatus.NEW, OrderStatus.CANCELLED])
def test_rollback_without_entry_is_illegal(status):
    with pytest.raises(IllegalTransitionError):
        plan_order_rollback(status)


def test_stale_expected_status_is_illegal():
    # A retried advance sees the status its first attempt produced
    with pytest.raises(IllegalTransitionError) as exc_info:
        plan_order_advance(OrderStatus.PICKED_UP, NOW, expected=OrderStatus.ASSIGNED)
    assert exc_info.value.details["expected_status"] == "assigned"


@pytest.mark.parametrize("status", list(OrderStatus))
@pytest.mark.parametrize("reason", ["", "   ", None])
def test_cancel_with_empty_reason_always_fails(status, reason):
    with pytest.raises(DomainValidationError):
        plan_order_cancel(status, reason)


@pytest.mark.parametrize("status", [OrderStatus.DELIVERED, OrderStatus.INVOICED, OrderStatus.PAID, OrderStatus.CANCELLED])
def test_cancel_outside_cancellable_statuses_fails(status):
    with pytest.raises(DomainValidationError):
        plan_order_cancel(status, "customer withdrew")


def test_cancel_stores_reason_verbatim():
    change = plan_order_cancel(OrderStatus.ASSIGNED, "  vehicle not ready ")
    assert change.values["cancelled_reason"] == "  vehicle not ready "
    assert change.values["trip_id"] is None
    assert change.to_status == OrderStatus.CANCELLED


@pytest.mark.parametrize("status", list(TripStatus))
def test_trip_advance_table(status):
    if TRIP_FORWARD[status] is None:
        with pytest.raises(IllegalTransitionError):
            plan_trip_advance(status)
    else:
        assert plan_trip_advance(status).to_status == TRIP_FORWARD[status]


def test_completed_trip_can_only_roll_back():
    assert plan_trip_rollback(TripStatus.COMPLETED).to_status == TripStatus.AT_TERMINAL
    with pytest.raises(IllegalTransitionError):
        plan_trip_rollback(TripStatus.PLANNED)
