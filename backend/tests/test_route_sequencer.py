"""
Unit tests for the route sequencer.
"""

import pytest
from datetime import date
from types import SimpleNamespace

from backend.app.core.exceptions import DomainValidationError
from backend.app.domain.dispatch.route_sequencer import (
    build_default_sequence,
    is_stale,
    move_stop,
    parse_sequence,
    serialize_sequence,
    validate_sequence,
)
from backend.app.models.trip_enums import RouteStopType
from backend.app.schemas.route import RouteStop

P, D = RouteStopType.PICKUP, RouteStopType.DELIVERY


def order(id, pickup=None, delivery=None):
    return SimpleNamespace(id=id, pickup_date=pickup, delivery_date=delivery)


@pytest.fixture
def orders():
    return [
        order(1, date(2024, 5, 3), date(2024, 5, 6)),
        order(2, None, date(2024, 5, 4)),
        order(3, date(2024, 5, 1), None),
    ]


def test_default_sequence_pickups_then_deliveries(orders):
    stops = build_default_sequence(orders)

    assert [(s.order_id, s.stop_type) for s in stops] == [
        (3, P), (1, P), (2, P),
        (2, D), (1, D), (3, D),
    ]


def test_default_sequence_is_deterministic(orders):
    assert build_default_sequence(orders) == build_default_sequence(list(orders))


def test_undated_ties_keep_input_order():
    stops = build_default_sequence([order(5), order(4)])
    assert [s.order_id for s in stops] == [5, 4, 5, 4]


def test_move_stop_preserves_relative_order():
    stops = [RouteStop(order_id=i, stop_type=P) for i in range(1, 6)]

    moved = move_stop(stops, 0, 3)

    assert [s.order_id for s in moved] == [2, 3, 4, 1, 5]
    assert [s.order_id for s in stops] == [1, 2, 3, 4, 5]


def test_move_stop_out_of_range():
    stops = [RouteStop(order_id=1, stop_type=P)]
    with pytest.raises(DomainValidationError):
        move_stop(stops, 0, 1)


def test_validate_flags_delivery_before_pickup():
    stops = [
        RouteStop(order_id=1, stop_type=D),
        RouteStop(order_id=2, stop_type=P),
        RouteStop(order_id=1, stop_type=P),
        RouteStop(order_id=2, stop_type=D),
        RouteStop(order_id=3, stop_type=D),
    ]

    assert validate_sequence(stops) == [
        "delivery before pickup for order 1",
        "delivery before pickup for order 3",
    ]


def test_validate_default_sequence_is_clean(orders):
    assert validate_sequence(build_default_sequence(orders)) == []


def test_is_stale_compares_order_sets(orders):
    stops = build_default_sequence(orders)
    assert not is_stale(stops, [3, 2, 1])
    assert is_stale(stops, [1, 2])
    assert is_stale(stops, [1, 2, 3, 4])


def test_saved_sequence_loads_as_saved(orders):
    raw = serialize_sequence(build_default_sequence(orders))

    assert raw[0] == {"order_id": 3, "stop_type": "pickup"}
    assert parse_sequence(raw) == build_default_sequence(orders)
    assert parse_sequence(None) == []
