"""
Outbound change events.

The UI and cache layers subscribe to "<prefix>.order_changed" and
"<prefix>.trip_changed" on Redis pub/sub to invalidate what they hold.
Delivery is best effort: a failed publish is logged and never undoes the
committed change.
"""

import json
import logging
from typing import Optional

import redis.asyncio as redis
from fastapi import Depends

from backend.app.core.config import settings
from backend.app.core.redis_client import get_redis

logger = logging.getLogger(__name__)


class ChangeEvent:
    """Event name constants."""
    ORDER_CHANGED = "order_changed"
    TRIP_CHANGED = "trip_changed"


class EventPublisher:
    """Publishes change events to Redis pub/sub channels."""

    def __init__(self, redis_client: Optional[redis.Redis], channel_prefix: str = None, enabled: bool = None):
        self.redis = redis_client
        self.channel_prefix = channel_prefix or settings.events_channel_prefix
        self.enabled = settings.events_enabled if enabled is None else enabled

    def channel(self, event: str) -> str:
        return f"{self.channel_prefix}.{event}"

    async def publish(self, event: str, entity_id: int) -> bool:
        """
        Publish one event.

        Returns:
            True if Redis accepted the message, False if publishing is
            disabled or failed
        """
        if not self.enabled or self.redis is None:
            return False

        payload = json.dumps({"event": event, "id": entity_id})
        try:
            await self.redis.publish(self.channel(event), payload)
        except redis.RedisError as exc:
            logger.warning("Failed to publish %s for id=%s: %s", event, entity_id, exc)
            return False
        return True


async def get_event_publisher(redis_client=Depends(get_redis)) -> EventPublisher:
    """FastAPI dependency building a publisher over the shared Redis client."""
    return EventPublisher(redis_client)
