"""
Status Transition Engine.

Pure state-machine logic for the Order and Trip lifecycles. Nothing here
touches the database: each planner takes the current status and returns a
StatusChange describing the column values to write. Services apply the
change with a compare-and-swap on the status it was planned from.

Every table lists every status explicitly (None meaning "no transition"),
and the module refuses to import if a status is missing from a table.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Type

from backend.app.core.exceptions import DomainValidationError, IllegalTransitionError
from backend.app.models.order_enums import OrderStatus
from backend.app.models.trip_enums import TripStatus


ORDER_FORWARD: Dict[OrderStatus, Optional[OrderStatus]] = {
    OrderStatus.NEW: OrderStatus.ASSIGNED,
    OrderStatus.ASSIGNED: OrderStatus.PICKED_UP,
    OrderStatus.PICKED_UP: OrderStatus.DELIVERED,
    OrderStatus.DELIVERED: OrderStatus.INVOICED,
    OrderStatus.INVOICED: OrderStatus.PAID,
    OrderStatus.PAID: None,
    OrderStatus.CANCELLED: None,
}

ORDER_ROLLBACK: Dict[OrderStatus, Optional[OrderStatus]] = {
    OrderStatus.NEW: None,
    OrderStatus.ASSIGNED: OrderStatus.NEW,
    OrderStatus.PICKED_UP: OrderStatus.ASSIGNED,
    OrderStatus.DELIVERED: OrderStatus.PICKED_UP,
    OrderStatus.INVOICED: OrderStatus.DELIVERED,
    OrderStatus.PAID: OrderStatus.INVOICED,
    OrderStatus.CANCELLED: None,
}

ORDER_CANCELLABLE: Dict[OrderStatus, bool] = {
    OrderStatus.NEW: True,
    OrderStatus.ASSIGNED: True,
    OrderStatus.PICKED_UP: True,
    OrderStatus.DELIVERED: False,
    OrderStatus.INVOICED: False,
    OrderStatus.PAID: False,
    OrderStatus.CANCELLED: False,
}

# Statuses in which an order may not reference a trip
ORDER_STATUSES_WITHOUT_TRIP = frozenset({OrderStatus.NEW, OrderStatus.CANCELLED})

# Date column stamped on entering a status, cleared on rolling back out of it
ORDER_DATE_STAMPS: Dict[OrderStatus, Optional[str]] = {
    OrderStatus.NEW: None,
    OrderStatus.ASSIGNED: None,
    OrderStatus.PICKED_UP: "actual_pickup_date",
    OrderStatus.DELIVERED: "actual_delivery_date",
    OrderStatus.INVOICED: None,
    OrderStatus.PAID: None,
    OrderStatus.CANCELLED: None,
}

TRIP_FORWARD: Dict[TripStatus, Optional[TripStatus]] = {
    TripStatus.PLANNED: TripStatus.IN_PROGRESS,
    TripStatus.IN_PROGRESS: TripStatus.AT_TERMINAL,
    TripStatus.AT_TERMINAL: TripStatus.COMPLETED,
    TripStatus.COMPLETED: None,
}

TRIP_ROLLBACK: Dict[TripStatus, Optional[TripStatus]] = {
    TripStatus.PLANNED: None,
    TripStatus.IN_PROGRESS: TripStatus.PLANNED,
    TripStatus.AT_TERMINAL: TripStatus.IN_PROGRESS,
    TripStatus.COMPLETED: TripStatus.AT_TERMINAL,
}


def _require_exhaustive(table: Mapping, enum_cls: Type[Enum], name: str) -> None:
    missing = set(enum_cls) - set(table)
    if missing:
        raise RuntimeError(f"{name} has no entry for {sorted(m.value for m in missing)}")


for _table, _enum, _name in (
    (ORDER_FORWARD, OrderStatus, "ORDER_FORWARD"),
    (ORDER_ROLLBACK, OrderStatus, "ORDER_ROLLBACK"),
    (ORDER_CANCELLABLE, OrderStatus, "ORDER_CANCELLABLE"),
    (ORDER_DATE_STAMPS, OrderStatus, "ORDER_DATE_STAMPS"),
    (TRIP_FORWARD, TripStatus, "TRIP_FORWARD"),
    (TRIP_ROLLBACK, TripStatus, "TRIP_ROLLBACK"),
):
    _require_exhaustive(_table, _enum, _name)


@dataclass(frozen=True)
class StatusChange:
    """A planned status write: precondition status, target status, column values."""
    from_status: Enum
    to_status: Enum
    values: Dict[str, Any] = field(default_factory=dict)


def _check_expected(entity: str, current: Enum, expected: Optional[Enum], action: str) -> None:
    # A stale expectation means the caller's view is already out of date,
    # e.g. a retried request whose first attempt succeeded.
    if expected is not None and current != expected:
        raise IllegalTransitionError(
            entity, current.value, action, details={"expected_status": expected.value}
        )


def plan_order_advance(
    current: OrderStatus,
    now: datetime,
    expected: Optional[OrderStatus] = None,
) -> StatusChange:
    """Plan the forward step for an order, stamping the actual pickup/delivery date."""
    _check_expected("order", current, expected, "advance")
    target = ORDER_FORWARD[current]
    if target is None:
        raise IllegalTransitionError("order", current.value, "advance")

    values: Dict[str, Any] = {"status": target}
    stamp = ORDER_DATE_STAMPS[target]
    if stamp:
        values[stamp] = now
    return StatusChange(current, target, values)


def plan_order_rollback(current: OrderStatus, expected: Optional[OrderStatus] = None) -> StatusChange:
    """Plan the backward step for an order, clearing the date the forward step stamped."""
    _check_expected("order", current, expected, "roll back")
    target = ORDER_ROLLBACK[current]
    if target is None:
        raise IllegalTransitionError("order", current.value, "roll back")

    values: Dict[str, Any] = {"status": target}
    stamp = ORDER_DATE_STAMPS[current]
    if stamp:
        values[stamp] = None
    if target in ORDER_STATUSES_WITHOUT_TRIP:
        values["trip_id"] = None
    return StatusChange(current, target, values)


def plan_order_cancel(current: OrderStatus, reason: Optional[str]) -> StatusChange:
    """Plan a cancellation. The reason is stored exactly as given."""
    if reason is None or not reason.strip():
        raise DomainValidationError("A reason is required when cancelling an order", field="reason")
    if not ORDER_CANCELLABLE[current]:
        raise DomainValidationError(
            f"Orders with status '{current.value}' cannot be cancelled", field="status"
        )
    return StatusChange(
        current,
        OrderStatus.CANCELLED,
        {"status": OrderStatus.CANCELLED, "cancelled_reason": reason, "trip_id": None},
    )


def plan_trip_advance(current: TripStatus, expected: Optional[TripStatus] = None) -> StatusChange:
    _check_expected("trip", current, expected, "advance")
    target = TRIP_FORWARD[current]
    if target is None:
        raise IllegalTransitionError("trip", current.value, "advance")
    return StatusChange(current, target, {"status": target})


def plan_trip_rollback(current: TripStatus, expected: Optional[TripStatus] = None) -> StatusChange:
    _check_expected("trip", current, expected, "roll back")
    target = TRIP_ROLLBACK[current]
    if target is None:
        raise IllegalTransitionError("trip", current.value, "roll back")
    return StatusChange(current, target, {"status": target})
