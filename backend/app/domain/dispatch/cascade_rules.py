"""
Cascade rules.

What a trip transition does to the orders on the trip. Only two forward
transitions move orders; rollbacks leave orders as they are.
"""

from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from backend.app.core.exceptions import CascadeFailureError
from backend.app.models.order_enums import OrderStatus
from backend.app.models.trip_enums import TripStatus
from backend.app.domain.dispatch.status_engine import ORDER_DATE_STAMPS, StatusChange


@dataclass(frozen=True)
class OrderCascade:
    """Orders in `source` move to `target`; orders in `settled` are left alone."""
    source: OrderStatus
    target: OrderStatus
    settled: FrozenSet[OrderStatus]


# An order already manually moved to the target status counts as settled and
# is skipped; only orders outside source and settled block the transition.
ORDER_CASCADES: Dict[Tuple[TripStatus, TripStatus], OrderCascade] = {
    (TripStatus.PLANNED, TripStatus.IN_PROGRESS): OrderCascade(
        source=OrderStatus.ASSIGNED,
        target=OrderStatus.PICKED_UP,
        settled=frozenset({OrderStatus.PICKED_UP, OrderStatus.CANCELLED}),
    ),
    (TripStatus.AT_TERMINAL, TripStatus.COMPLETED): OrderCascade(
        source=OrderStatus.PICKED_UP,
        target=OrderStatus.DELIVERED,
        settled=frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED}),
    ),
}

LOCAL_DRIVE_TRANSITION = (TripStatus.IN_PROGRESS, TripStatus.AT_TERMINAL)


def cascade_for(change: StatusChange) -> Optional[OrderCascade]:
    return ORDER_CASCADES.get((change.from_status, change.to_status))


def plan_order_cascade(trip_id: int, change: StatusChange, orders: Sequence[Any]) -> List[Any]:
    """
    Orders the trip transition must move.

    Raises:
        CascadeFailureError: If any order is outside the source and settled
            statuses; nothing may be applied in that case
    """
    cascade = cascade_for(change)
    if cascade is None:
        return []

    to_move, blocking = [], []
    for order in orders:
        if order.status == cascade.source:
            to_move.append(order)
        elif order.status not in cascade.settled:
            blocking.append(order.id)

    if blocking:
        raise CascadeFailureError(trip_id, change.to_status.value, blocking)
    return to_move


def cascade_values(cascade: OrderCascade, now) -> Dict[str, Any]:
    values: Dict[str, Any] = {"status": cascade.target}
    stamp = ORDER_DATE_STAMPS[cascade.target]
    if stamp:
        values[stamp] = now
    return values


def needs_local_drive(order: Any, local_states: Iterable[str]) -> bool:
    """Brokered orders delivering into a local state get a terminal hand-off."""
    if not order.broker_fee or order.broker_fee <= 0:
        return False
    state = (order.delivery_state or "").upper()
    return state in {s.upper() for s in local_states}
