"""
Unit of work.

Wraps one dispatch mutation: everything written through the session inside
the block commits together or not at all, and change events go out only
after the commit succeeds.

    async with UnitOfWork(db, publisher) as uow:
        ...
        uow.order_changed(order.id)
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.services.events import ChangeEvent, EventPublisher

logger = logging.getLogger(__name__)


class UnitOfWork:

    def __init__(self, db: AsyncSession, publisher: Optional[EventPublisher] = None):
        self.db = db
        self.publisher = publisher
        self._events: List[Tuple[str, int]] = []

    def record(self, event: str, entity_id: int) -> None:
        """Queue an event; duplicates within one unit of work collapse to one."""
        key = (event, entity_id)
        if key not in self._events:
            self._events.append(key)

    def order_changed(self, order_id: int) -> None:
        self.record(ChangeEvent.ORDER_CHANGED, order_id)

    def trip_changed(self, trip_id: Optional[int]) -> None:
        if trip_id is not None:
            self.record(ChangeEvent.TRIP_CHANGED, trip_id)

    async def __aenter__(self) -> "UnitOfWork":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        if exc_type is not None:
            await self.db.rollback()
            self._events.clear()
            return False

        try:
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            self._events.clear()
            raise

        events, self._events = self._events, []
        if self.publisher is not None:
            for event, entity_id in events:
                await self.publisher.publish(event, entity_id)
        return False
