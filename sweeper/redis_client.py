"""
Redis connection setup using redis-py async client.

Used only as a short-lived cache for wallet balance lookups.
When REDIS_URL is empty the cache is disabled and ``get_redis`` yields None.
"""

import redis.asyncio as aioredis

from sweeper.config import settings

redis: aioredis.Redis | None = (
    aioredis.from_url(
        settings.REDIS_URL,
        decode_responses=True,
        ssl=settings.REDIS_SSL,
    )
    if settings.REDIS_URL
    else None
)


async def get_redis() -> aioredis.Redis | None:
    """FastAPI dependency that provides the Redis client (or None)."""
    return redis
