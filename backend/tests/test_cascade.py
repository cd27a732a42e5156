"""
Service tests for trip transitions and the order cascade.
"""

from decimal import Decimal

import pytest
from sqlalchemy import select

from backend.app.core.exceptions import CascadeFailureError, IllegalTransitionError
from backend.app.models.local_drive import LocalDrive
from backend.app.models.order import Order
from backend.app.models.order_enums import OrderStatus
from backend.app.models.trip import Trip
from backend.app.models.trip_enums import TripStatus
from backend.app.services.cascade_coordinator import CascadeCoordinator


async def _statuses(db_session, trip_id):
    result = await db_session.execute(
        select(Order.id, Order.status).where(Order.trip_id == trip_id).order_by(Order.id)
    )
    return {row.id: row.status for row in result}


async def test_start_trip_picks_up_assigned_orders(db_session, make_trip, make_order):
    trip = await make_trip()
    orders = [await make_order(status=OrderStatus.ASSIGNED, trip_id=trip.id) for _ in range(3)]
    already = await make_order(status=OrderStatus.PICKED_UP, trip_id=trip.id)

    result = await CascadeCoordinator.advance_trip(db_session, trip.id)

    assert result.trip.status == TripStatus.IN_PROGRESS
    assert sorted(result.cascaded_order_ids) == sorted(o.id for o in orders)
    statuses = await _statuses(db_session, trip.id)
    assert set(statuses.values()) == {OrderStatus.PICKED_UP}

    stamps = set()
    for order in orders:
        await db_session.refresh(order)
        stamps.add(order.actual_pickup_date)
    assert len(stamps) == 1 and None not in stamps
    assert already.id not in result.cascaded_order_ids


async def test_cascade_blocked_by_out_of_step_order(db_session, make_trip, make_order):
    trip = await make_trip()
    ok = await make_order(status=OrderStatus.ASSIGNED, trip_id=trip.id)
    ahead = await make_order(status=OrderStatus.DELIVERED, trip_id=trip.id)
    trip_id, ok_id, ahead_id = trip.id, ok.id, ahead.id

    with pytest.raises(CascadeFailureError) as exc_info:
        await CascadeCoordinator.advance_trip(db_session, trip_id)

    assert exc_info.value.blocking_order_ids == [ahead_id]
    assert exc_info.value.details["blocking_order_ids"] == [ahead_id]

    statuses = await _statuses(db_session, trip_id)
    assert statuses[ok_id] == OrderStatus.ASSIGNED
    trip_status = await db_session.execute(select(Trip.status).where(Trip.id == trip_id))
    assert trip_status.scalar_one() == TripStatus.PLANNED
    result = await db_session.execute(select(Order.status).where(Order.id == ahead_id))
    assert result.scalar_one() == OrderStatus.DELIVERED


async def test_complete_trip_delivers_orders(db_session, make_trip, make_order):
    trip = await make_trip(status=TripStatus.AT_TERMINAL)
    picked = await make_order(status=OrderStatus.PICKED_UP, trip_id=trip.id)
    delivered = await make_order(status=OrderStatus.DELIVERED, trip_id=trip.id)

    result = await CascadeCoordinator.advance_trip(db_session, trip.id)

    assert result.trip.status == TripStatus.COMPLETED
    assert result.cascaded_order_ids == [picked.id]
    await db_session.refresh(picked)
    assert picked.status == OrderStatus.DELIVERED
    assert picked.actual_delivery_date is not None
    assert delivered.id not in result.cascaded_order_ids


async def test_complete_trip_blocked_by_order_not_picked_up(db_session, make_trip, make_order):
    trip = await make_trip(status=TripStatus.AT_TERMINAL)
    lagging = await make_order(status=OrderStatus.ASSIGNED, trip_id=trip.id)
    lagging_id = lagging.id

    with pytest.raises(CascadeFailureError) as exc_info:
        await CascadeCoordinator.advance_trip(db_session, trip.id)

    assert exc_info.value.blocking_order_ids == [lagging_id]


async def test_rollback_leaves_orders_alone(db_session, make_trip, make_order):
    trip = await make_trip(status=TripStatus.IN_PROGRESS)
    order = await make_order(status=OrderStatus.PICKED_UP, trip_id=trip.id)

    result = await CascadeCoordinator.rollback_trip(db_session, trip.id)

    assert result.trip.status == TripStatus.PLANNED
    assert result.cascaded_order_ids == []
    statuses = await _statuses(db_session, trip.id)
    assert statuses[order.id] == OrderStatus.PICKED_UP


async def test_completed_trip_cannot_advance(db_session, make_trip):
    trip = await make_trip(status=TripStatus.COMPLETED)

    with pytest.raises(IllegalTransitionError):
        await CascadeCoordinator.advance_trip(db_session, trip.id)


async def test_terminal_arrival_creates_local_drives_once(db_session, make_trip, make_order, publisher, mock_redis):
    trip = await make_trip(status=TripStatus.IN_PROGRESS)
    local = await make_order(
        status=OrderStatus.PICKED_UP, trip_id=trip.id, broker_fee=Decimal("75"),
        delivery_state="NJ", delivery_city="Newark",
    )
    await make_order(status=OrderStatus.PICKED_UP, trip_id=trip.id, broker_fee=Decimal("75"), delivery_state="FL")
    await make_order(status=OrderStatus.PICKED_UP, trip_id=trip.id, delivery_state="PA")

    result = await CascadeCoordinator.advance_trip(db_session, trip.id, publisher=publisher)
    assert result.local_drives_created == 1
    assert [channel for channel, _ in mock_redis.published] == ["dispatch.trip_changed"]

    drives = (await db_session.execute(select(LocalDrive))).scalars().all()
    assert [d.order_id for d in drives] == [local.id]
    assert drives[0].revenue == Decimal("75")

    # Roll back and arrive again: no duplicate hand-off
    await CascadeCoordinator.rollback_trip(db_session, trip.id)
    result = await CascadeCoordinator.advance_trip(db_session, trip.id)
    assert result.local_drives_created == 0
