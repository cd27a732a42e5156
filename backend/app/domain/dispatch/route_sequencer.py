"""
Route Sequencer.

Builds, reorders and checks the pickup/delivery visiting order of a
trip's orders. Pure functions over plain lists; persistence lives in
services/route_service.py.

Orders are duck-typed: anything with id, pickup_date and delivery_date.
"""

from typing import Any, Iterable, List, Optional, Sequence

from backend.app.core.exceptions import DomainValidationError
from backend.app.models.trip_enums import RouteStopType
from backend.app.schemas.route import RouteStop


def _date_key(value) -> tuple:
    # Undated stops go last; the ISO string keeps the order lexicographic
    if value is None:
        return (1, "")
    return (0, value.isoformat())


def build_default_sequence(orders: Sequence[Any]) -> List[RouteStop]:
    """
    All pickups by scheduled pickup date, then all deliveries by scheduled
    delivery date. Ties keep the input order, so the same orders always
    give the same sequence.
    """
    pickups = sorted(orders, key=lambda o: _date_key(o.pickup_date))
    deliveries = sorted(orders, key=lambda o: _date_key(o.delivery_date))
    return (
        [RouteStop(order_id=o.id, stop_type=RouteStopType.PICKUP) for o in pickups]
        + [RouteStop(order_id=o.id, stop_type=RouteStopType.DELIVERY) for o in deliveries]
    )


def parse_sequence(raw: Optional[Iterable[dict]]) -> List[RouteStop]:
    """Load a persisted sequence. None and [] both mean "never saved"."""
    return [RouteStop.model_validate(item) for item in (raw or [])]


def serialize_sequence(stops: Sequence[RouteStop]) -> List[dict]:
    return [stop.model_dump(mode="json") for stop in stops]


def is_stale(stops: Sequence[RouteStop], order_ids: Iterable[int]) -> bool:
    """True when the sequence covers a different order set than order_ids."""
    return {stop.order_id for stop in stops} != set(order_ids)


def move_stop(stops: Sequence[RouteStop], from_index: int, to_index: int) -> List[RouteStop]:
    """Remove the stop at from_index and reinsert it at to_index."""
    size = len(stops)
    for name, index in (("from_index", from_index), ("to_index", to_index)):
        if not 0 <= index < size:
            raise DomainValidationError(f"{name} {index} is outside a sequence of {size} stops", field=name)

    moved = list(stops)
    stop = moved.pop(from_index)
    moved.insert(to_index, stop)
    return moved


def validate_sequence(stops: Sequence[RouteStop]) -> List[str]:
    """
    Warn for every delivery whose pickup has not appeared earlier.

    Warnings never block a save.
    """
    warnings = []
    seen_pickups = set()
    for stop in stops:
        if stop.stop_type == RouteStopType.PICKUP:
            seen_pickups.add(stop.order_id)
        elif stop.order_id not in seen_pickups:
            warnings.append(f"delivery before pickup for order {stop.order_id}")
    return warnings
