"""
Service tests for capacity assignment.
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from backend.app.core.exceptions import InvalidStateError, ResourceNotFoundError
from backend.app.models.fleet_enums import TruckType
from backend.app.models.order_enums import OrderStatus
from backend.app.services.assignment_service import AssignmentService


async def test_assign_new_order(db_session, make_truck, make_trip, make_order, publisher, mock_redis):
    truck = await make_truck(TruckType.SEVEN_CAR)
    trip = await make_trip(truck_id=truck.id)
    order = await make_order(revenue=Decimal("1000"), broker_fee=Decimal("100"))

    order, report = await AssignmentService.assign(db_session, order.id, trip.id, publisher)
    await db_session.refresh(trip)

    assert order.status == OrderStatus.ASSIGNED
    assert order.trip_id == trip.id
    assert (report.capacity, report.utilization, report.warning) == (7, 1, False)
    assert trip.total_revenue == Decimal("1000")
    assert trip.total_broker_fees == Decimal("100")
    assert trip.order_count == 1
    assert [channel for channel, _ in mock_redis.published] == [
        "dispatch.order_changed", "dispatch.trip_changed"
    ]


async def test_over_capacity_assignment_warns(db_session, make_truck, make_trip, make_order):
    truck = await make_truck(TruckType.FLATBED)
    trip = await make_trip(truck_id=truck.id)
    for _ in range(4):
        await make_order(status=OrderStatus.ASSIGNED, trip_id=trip.id)
    fifth = await make_order()

    _, report = await AssignmentService.assign(db_session, fifth.id, trip.id)

    assert report.utilization == 5
    assert report.capacity == 4
    assert report.warning is True


async def test_assign_already_assigned_order_fails(db_session, make_trip, make_order):
    first = await make_trip()
    second = await make_trip()
    order = await make_order()
    first_id, second_id, order_id = first.id, second.id, order.id
    await AssignmentService.assign(db_session, order_id, first_id)

    with pytest.raises(InvalidStateError):
        await AssignmentService.assign(db_session, order_id, second_id)

    trip = await AssignmentService.get_trip(db_session, first_id)
    assert trip.order_count == 1


async def test_assign_cancelled_order_fails(db_session, make_trip, make_order):
    trip = await make_trip()
    order = await make_order(status=OrderStatus.CANCELLED, cancelled_reason="dup")

    with pytest.raises(InvalidStateError):
        await AssignmentService.assign(db_session, order.id, trip.id)


async def test_assign_past_new_keeps_status(db_session, make_trip, make_order):
    trip = await make_trip()
    order = await make_order(status=OrderStatus.PICKED_UP)

    order, _ = await AssignmentService.assign(db_session, order.id, trip.id)

    assert order.status == OrderStatus.PICKED_UP
    assert order.trip_id == trip.id


async def test_assign_unknown_ids(db_session, make_trip, make_order):
    trip = await make_trip()
    order = await make_order()
    trip_id, order_id = trip.id, order.id

    with pytest.raises(ResourceNotFoundError):
        await AssignmentService.assign(db_session, 999, trip_id)
    with pytest.raises(ResourceNotFoundError):
        await AssignmentService.assign(db_session, order_id, 999)


async def test_unassign_resets_order_and_rollups(db_session, make_trip, make_order):
    trip = await make_trip()
    order = await make_order(revenue=Decimal("1000"), carrier_pay=Decimal("700"), broker_fee=Decimal("100"))
    await AssignmentService.assign(db_session, order.id, trip.id)

    order = await AssignmentService.unassign(db_session, order.id)
    await db_session.refresh(trip)

    assert order.status == OrderStatus.NEW
    assert order.trip_id is None
    assert order.actual_pickup_date is None
    assert trip.total_broker_fees == Decimal("0")
    assert trip.order_count == 0


async def test_unassign_clears_actual_dates(db_session, make_trip, make_order):
    trip = await make_trip()
    stamped = datetime(2024, 6, 1, 8, 30, tzinfo=timezone.utc)
    order = await make_order(
        status=OrderStatus.DELIVERED, trip_id=trip.id,
        actual_pickup_date=stamped, actual_delivery_date=stamped,
    )

    order = await AssignmentService.unassign(db_session, order.id)

    assert order.status == OrderStatus.NEW
    assert order.trip_id is None
    assert order.actual_pickup_date is None
    assert order.actual_delivery_date is None


async def test_unassign_order_without_trip_fails(db_session, make_order):
    order = await make_order()

    with pytest.raises(InvalidStateError):
        await AssignmentService.unassign(db_session, order.id)


async def test_capacity_without_truck(db_session, make_trip):
    trip = await make_trip()

    report = await AssignmentService.capacity_report(db_session, trip.id)

    assert report.capacity is None
    assert report.warning is False
