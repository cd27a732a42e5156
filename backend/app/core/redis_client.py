"""
Redis client initialization and connection management.

Redis carries the outbound "order changed" / "trip changed" events that the
surrounding UI and cache layers subscribe to.
"""

import logging

import redis.asyncio as redis
from backend.app.core.config import settings

logger = logging.getLogger(__name__)


redis_client = redis.from_url(
    settings.redis_url,
    decode_responses=settings.redis_decode_responses,
)


async def get_redis():
    """
    Get Redis client instance.

    Used as a FastAPI dependency so tests can override it.
    """
    return redis_client


async def ping_redis() -> bool:
    """
    Check that the event bus is reachable.

    Returns:
        True if Redis answered, False if events are disabled or Redis is down
    """
    if not settings.events_enabled:
        return False
    try:
        return await redis_client.ping()
    except redis.RedisError:
        return False


async def close_redis() -> None:
    """Close the event connection pool on shutdown."""
    try:
        await redis_client.aclose()
    except redis.RedisError:
        logger.warning("Redis close failed during shutdown")
