"""
Service tests for saved route sequences.
"""

from datetime import date

from backend.app.models.order_enums import OrderStatus
from backend.app.models.trip_enums import RouteStopType
from backend.app.schemas.route import RouteStop
from backend.app.services.assignment_service import AssignmentService
from backend.app.services.route_service import RouteService


async def test_unsaved_trip_gets_default_sequence(db_session, make_trip, make_order):
    trip = await make_trip()
    late = await make_order(status=OrderStatus.ASSIGNED, trip_id=trip.id, pickup_date=date(2024, 6, 2))
    early = await make_order(status=OrderStatus.ASSIGNED, trip_id=trip.id, pickup_date=date(2024, 6, 1))

    view = await RouteService.get_sequence(db_session, trip.id)

    assert view.is_saved is False
    assert view.is_stale is False
    assert [s.order_id for s in view.stops[:2]] == [early.id, late.id]
    assert len(view.stops) == 4


async def test_saved_sequence_goes_stale_when_orders_change(db_session, make_trip, make_order):
    trip = await make_trip()
    first = await make_order(status=OrderStatus.ASSIGNED, trip_id=trip.id)
    await RouteService.reset_sequence(db_session, trip.id)

    second = await make_order()
    await AssignmentService.assign(db_session, second.id, trip.id)
    view = await RouteService.get_sequence(db_session, trip.id)

    assert view.is_saved is True
    assert view.is_stale is True
    assert {s.order_id for s in view.stops} == {first.id}


async def test_save_with_warnings_still_saves(db_session, make_trip, make_order):
    trip = await make_trip()
    order = await make_order(status=OrderStatus.ASSIGNED, trip_id=trip.id)
    stops = [
        RouteStop(order_id=order.id, stop_type=RouteStopType.DELIVERY),
        RouteStop(order_id=order.id, stop_type=RouteStopType.PICKUP),
    ]

    saved = await RouteService.save_sequence(db_session, trip.id, stops)
    view = await RouteService.get_sequence(db_session, trip.id)

    assert saved.warnings == [f"delivery before pickup for order {order.id}"]
    assert view.is_saved is True
    assert view.stops == stops


async def test_move_does_not_save(db_session, make_trip, make_order):
    trip = await make_trip()
    order = await make_order(status=OrderStatus.ASSIGNED, trip_id=trip.id)
    default = (await RouteService.get_sequence(db_session, trip.id)).stops

    moved = await RouteService.move_stop(db_session, trip.id, default, 1, 0)

    assert moved.stops[0].stop_type == RouteStopType.DELIVERY
    assert moved.warnings == [f"delivery before pickup for order {order.id}"]
    assert (await RouteService.get_sequence(db_session, trip.id)).is_saved is False
