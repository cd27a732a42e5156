"""
Order Service.

Creates orders and applies the order lifecycle: advance, rollback and
cancel. Each mutation is one unit of work with a compare-and-swap on the
status it was planned from.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.exceptions import ResourceNotFoundError
from backend.app.domain.dispatch.status_engine import (
    StatusChange,
    plan_order_advance,
    plan_order_cancel,
    plan_order_rollback,
)
from backend.app.models.driver import Driver
from backend.app.models.order import Order
from backend.app.models.order_enums import OrderStatus
from backend.app.schemas.order import OrderCreate
from backend.app.services.audit import AuditAction, log_event
from backend.app.services.concurrency import compare_and_swap_status, flush_unique
from backend.app.services.events import EventPublisher
from backend.app.services.trip_financials import recompute_trip_financials
from backend.app.services.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class OrderService:

    @staticmethod
    async def get_order(db: AsyncSession, order_id: int) -> Order:
        """Load an order, refreshed from the database."""
        order = await db.get(Order, order_id, populate_existing=True)
        if order is None:
            raise ResourceNotFoundError("Order", order_id)
        return order

    @staticmethod
    async def create_order(
        db: AsyncSession,
        data: OrderCreate,
        publisher: Optional[EventPublisher] = None,
        actor: Optional[str] = None
    ) -> Order:
        """Create a NEW order with no trip."""
        async with UnitOfWork(db, publisher) as uow:
            if data.driver_id is not None and await db.get(Driver, data.driver_id) is None:
                raise ResourceNotFoundError("Driver", data.driver_id)

            order = Order(**data.model_dump(), status=OrderStatus.NEW)
            db.add(order)
            await flush_unique(db, "order", "order_number", data.order_number)

            await log_event(db, AuditAction.ORDER_CREATED, "order", order.id, actor=actor)
            uow.order_changed(order.id)

        await db.refresh(order)
        logger.info("Order %s created", order.id)
        return order

    @staticmethod
    async def advance_order(
        db: AsyncSession,
        order_id: int,
        expected_status: Optional[OrderStatus] = None,
        publisher: Optional[EventPublisher] = None,
        actor: Optional[str] = None
    ) -> Order:
        """
        Move an order one step forward.

        Raises:
            ResourceNotFoundError: Unknown order
            IllegalTransitionError: No forward step, or expected_status is stale
            ConcurrentModificationError: Status changed during the request
        """
        async with UnitOfWork(db, publisher) as uow:
            order = await OrderService.get_order(db, order_id)
            change = plan_order_advance(order.status, datetime.now(timezone.utc), expected_status)
            await OrderService._apply(db, uow, order, change, AuditAction.ORDER_ADVANCED, actor)

        await db.refresh(order)
        return order

    @staticmethod
    async def rollback_order(
        db: AsyncSession,
        order_id: int,
        expected_status: Optional[OrderStatus] = None,
        publisher: Optional[EventPublisher] = None,
        actor: Optional[str] = None
    ) -> Order:
        """
        Move an order one step back, clearing the date the forward step stamped.

        Rolling back to NEW also releases the order from its trip.
        """
        async with UnitOfWork(db, publisher) as uow:
            order = await OrderService.get_order(db, order_id)
            change = plan_order_rollback(order.status, expected_status)
            await OrderService._apply(db, uow, order, change, AuditAction.ORDER_ROLLED_BACK, actor)

        await db.refresh(order)
        return order

    @staticmethod
    async def cancel_order(
        db: AsyncSession,
        order_id: int,
        reason: Optional[str],
        publisher: Optional[EventPublisher] = None,
        actor: Optional[str] = None
    ) -> Order:
        """
        Cancel an order and release it from its trip.

        Raises:
            DomainValidationError: Empty reason or non-cancellable status
        """
        async with UnitOfWork(db, publisher) as uow:
            order = await OrderService.get_order(db, order_id)
            change = plan_order_cancel(order.status, reason)
            await OrderService._apply(
                db, uow, order, change, AuditAction.ORDER_CANCELLED, actor, {"reason": reason}
            )

        await db.refresh(order)
        return order

    @staticmethod
    async def _apply(
        db: AsyncSession,
        uow: UnitOfWork,
        order: Order,
        change: StatusChange,
        action: str,
        actor: Optional[str],
        extra: Optional[dict] = None
    ) -> None:
        trip_id = order.trip_id
        await compare_and_swap_status(db, Order, order.id, change.from_status, change.values)

        # The order left its trip: the trip's rollups lose this order
        if trip_id is not None and "trip_id" in change.values:
            await recompute_trip_financials(db, trip_id)

        await log_event(
            db, action, "order", order.id, actor=actor,
            metadata={"from": change.from_status.value, "to": change.to_status.value, **(extra or {})}
        )
        uow.order_changed(order.id)
        uow.trip_changed(trip_id)
        logger.info("Order %s %s -> %s", order.id, change.from_status.value, change.to_status.value)
