"""
Capacity Assignment Service.

Attaches orders to trips and detaches them again. Capacity is a soft
ceiling: an over-capacity assignment succeeds and comes back with a
warning flag.
"""

import logging
from typing import Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.exceptions import InvalidStateError, ResourceNotFoundError
from backend.app.domain.dispatch.capacity import build_capacity_report
from backend.app.domain.dispatch.status_engine import ORDER_DATE_STAMPS
from backend.app.models.order import Order
from backend.app.models.order_enums import OrderStatus
from backend.app.models.trip import Trip
from backend.app.models.trip_enums import TripStatus
from backend.app.models.truck import Truck
from backend.app.schemas.trip import CapacityReport
from backend.app.services.audit import AuditAction, log_event
from backend.app.services.concurrency import compare_and_swap_status
from backend.app.services.events import EventPublisher
from backend.app.services.order_service import OrderService
from backend.app.services.trip_financials import recompute_trip_financials
from backend.app.services.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


def unassigned_values() -> dict:
    """Column values that detach an order and reset it to NEW."""
    values = {"trip_id": None, "status": OrderStatus.NEW}
    for stamp in ORDER_DATE_STAMPS.values():
        if stamp:
            values[stamp] = None
    return values


class AssignmentService:

    @staticmethod
    async def get_trip(db: AsyncSession, trip_id: int) -> Trip:
        trip = await db.get(Trip, trip_id, populate_existing=True)
        if trip is None:
            raise ResourceNotFoundError("Trip", trip_id)
        return trip

    @staticmethod
    async def current_utilization(db: AsyncSession, trip_id: int) -> int:
        result = await db.execute(select(func.count(Order.id)).where(Order.trip_id == trip_id))
        return result.scalar() or 0

    @staticmethod
    async def capacity_report(db: AsyncSession, trip_id: int) -> CapacityReport:
        """Capacity, utilization and over-capacity flag for a trip."""
        trip = await AssignmentService.get_trip(db, trip_id)
        truck = await db.get(Truck, trip.truck_id) if trip.truck_id else None
        utilization = await AssignmentService.current_utilization(db, trip_id)
        return build_capacity_report(trip_id, truck.truck_type if truck else None, utilization)

    @staticmethod
    async def assign(
        db: AsyncSession,
        order_id: int,
        trip_id: int,
        publisher: Optional[EventPublisher] = None,
        actor: Optional[str] = None
    ) -> Tuple[Order, CapacityReport]:
        """
        Assign an order to a trip.

        A NEW order becomes ASSIGNED. An order already past NEW keeps its
        status and only gains the trip reference.

        Raises:
            ResourceNotFoundError: Unknown order or trip
            InvalidStateError: Order already on a trip, or cancelled
        """
        async with UnitOfWork(db, publisher) as uow:
            order = await OrderService.get_order(db, order_id)
            trip = await AssignmentService.get_trip(db, trip_id)

            if order.trip_id is not None:
                raise InvalidStateError(
                    f"Order {order_id} is already assigned to trip {order.trip_id}",
                    details={"order_id": order_id, "trip_id": order.trip_id}
                )
            if order.status == OrderStatus.CANCELLED:
                raise InvalidStateError(
                    f"Order {order_id} is cancelled and cannot be assigned",
                    details={"order_id": order_id, "status": order.status.value}
                )
            if trip.status == TripStatus.COMPLETED:
                logger.warning("Assigning order %s to completed trip %s", order_id, trip_id)

            values = {"trip_id": trip_id}
            if order.status == OrderStatus.NEW:
                values["status"] = OrderStatus.ASSIGNED

            await compare_and_swap_status(
                db, Order, order_id, order.status, values, Order.trip_id.is_(None)
            )
            await recompute_trip_financials(db, trip_id)

            report = await AssignmentService.capacity_report(db, trip_id)
            if report.warning:
                logger.warning(
                    "Trip %s over capacity: %s/%s", trip_id, report.utilization, report.capacity
                )

            await log_event(
                db, AuditAction.ORDER_ASSIGNED, "order", order_id, actor=actor,
                metadata={"trip_id": trip_id, "utilization": report.utilization, "capacity": report.capacity}
            )
            uow.order_changed(order_id)
            uow.trip_changed(trip_id)

        await db.refresh(order)
        logger.info("Order %s assigned to trip %s", order_id, trip_id)
        return order, report

    @staticmethod
    async def unassign(
        db: AsyncSession,
        order_id: int,
        publisher: Optional[EventPublisher] = None,
        actor: Optional[str] = None
    ) -> Order:
        """
        Remove an order from its trip, resetting it to NEW and clearing
        its actual pickup and delivery dates.

        Raises:
            ResourceNotFoundError: Unknown order
            InvalidStateError: Order is not on a trip
        """
        async with UnitOfWork(db, publisher) as uow:
            order = await OrderService.get_order(db, order_id)
            trip_id = order.trip_id
            previous_status = order.status
            if trip_id is None:
                raise InvalidStateError(
                    f"Order {order_id} is not assigned to a trip",
                    details={"order_id": order_id}
                )

            await compare_and_swap_status(
                db, Order, order_id, previous_status, unassigned_values(), Order.trip_id == trip_id
            )
            await recompute_trip_financials(db, trip_id)

            await log_event(
                db, AuditAction.ORDER_UNASSIGNED, "order", order_id, actor=actor,
                metadata={"trip_id": trip_id, "previous_status": previous_status.value}
            )
            uow.order_changed(order_id)
            uow.trip_changed(trip_id)

        await db.refresh(order)
        logger.info("Order %s unassigned from trip %s", order_id, trip_id)
        return order
