"""
Concurrency Tests.

Validates that a status changed between read and write is never
silently overwritten, and that failed units of work publish nothing.
"""

import pytest
from sqlalchemy import select, update

from backend.app.core.exceptions import ConcurrentModificationError
from backend.app.models.order import Order
from backend.app.models.order_enums import OrderStatus
from backend.app.models.trip import Trip
from backend.app.models.trip_enums import TripStatus
from backend.app.services import concurrency
from backend.app.services.cascade_coordinator import CascadeCoordinator
from backend.app.services.concurrency import compare_and_swap_status
from backend.app.services.order_service import OrderService
from backend.app.services.unit_of_work import UnitOfWork


async def test_compare_and_swap_rejects_stale_status(db_session, make_order):
    order = await make_order(status=OrderStatus.NEW)

    with pytest.raises(ConcurrentModificationError) as exc_info:
        await compare_and_swap_status(
            db_session, Order, order.id, OrderStatus.ASSIGNED, {"status": OrderStatus.PICKED_UP}
        )

    assert exc_info.value.message == "This record changed, please retry"
    assert exc_info.value.status_code == 409


async def test_compare_and_swap_writes_on_match(db_session, make_order):
    order = await make_order(status=OrderStatus.NEW)

    await compare_and_swap_status(db_session, Order, order.id, OrderStatus.NEW, {"status": OrderStatus.ASSIGNED})

    result = await db_session.execute(select(Order.status).where(Order.id == order.id))
    assert result.scalar_one() == OrderStatus.ASSIGNED


async def test_order_changed_during_advance(db_session, make_trip, make_order, mocker, publisher, mock_redis):
    """Another dispatcher cancels the order between our read and our write."""
    trip = await make_trip()
    order = await make_order(status=OrderStatus.ASSIGNED, trip_id=trip.id)
    order_id = order.id

    async def racing_cas(db, model, entity_id, expected_status, values, *criteria):
        await db.execute(
            update(Order).where(Order.id == entity_id).values(status=OrderStatus.CANCELLED)
        )
        return await concurrency.compare_and_swap_status(db, model, entity_id, expected_status, values, *criteria)

    mocker.patch("backend.app.services.order_service.compare_and_swap_status", side_effect=racing_cas)

    with pytest.raises(ConcurrentModificationError):
        await OrderService.advance_order(db_session, order_id, publisher=publisher)

    assert mock_redis.published == []
    result = await db_session.execute(select(Order.status).where(Order.id == order_id))
    assert result.scalar_one() == OrderStatus.ASSIGNED


async def test_trip_changed_during_cascade_rolls_back_orders(db_session, make_trip, make_order, mocker):
    trip = await make_trip()
    order = await make_order(status=OrderStatus.ASSIGNED, trip_id=trip.id)
    trip_id, order_id = trip.id, order.id

    async def racing_cas(db, model, entity_id, expected_status, values, *criteria):
        if model is Order:
            raise ConcurrentModificationError("order", entity_id, expected_status.value)
        return await concurrency.compare_and_swap_status(db, model, entity_id, expected_status, values, *criteria)

    mocker.patch("backend.app.services.cascade_coordinator.compare_and_swap_status", side_effect=racing_cas)

    with pytest.raises(ConcurrentModificationError):
        await CascadeCoordinator.advance_trip(db_session, trip_id)

    trip_status = await db_session.execute(select(Trip.status).where(Trip.id == trip_id))
    assert trip_status.scalar_one() == TripStatus.PLANNED
    order_status = await db_session.execute(select(Order.status).where(Order.id == order_id))
    assert order_status.scalar_one() == OrderStatus.ASSIGNED


async def test_events_deduplicated_and_sent_after_commit(db_session, publisher, mock_redis):
    async with UnitOfWork(db_session, publisher) as uow:
        uow.order_changed(1)
        uow.trip_changed(7)
        uow.order_changed(1)
        uow.trip_changed(None)
        assert mock_redis.published == []

    assert [channel for channel, _ in mock_redis.published] == [
        "dispatch.order_changed", "dispatch.trip_changed"
    ]


async def test_failed_unit_of_work_publishes_nothing(db_session, publisher, mock_redis):
    with pytest.raises(RuntimeError):
        async with UnitOfWork(db_session, publisher) as uow:
            uow.order_changed(1)
            raise RuntimeError("boom")

    assert mock_redis.published == []


async def test_publish_failure_is_not_raised(db_session, mock_redis, mocker):
    import redis.asyncio as redis
    from backend.app.services.events import EventPublisher

    mocker.patch.object(mock_redis, "publish", side_effect=redis.ConnectionError("down"))
    publisher = EventPublisher(mock_redis, enabled=True)

    async with UnitOfWork(db_session, publisher) as uow:
        uow.trip_changed(3)

    assert await publisher.publish("trip_changed", 3) is False
