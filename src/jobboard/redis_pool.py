"""Redis connection pool, used by the rate limiter.

Redis is optional: if it can't be reached at startup the pool stays unset
and rate limiting is skipped.
"""

from typing import Optional

import redis.asyncio as aioredis

from jobboard.config import settings

# Initialized in the app lifespan
_redis: Optional[aioredis.Redis] = None


async def init_redis() -> aioredis.Redis:
    """Initialize the Redis connection pool."""
    global _redis
    client = aioredis.from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
    )
    try:
        await client.ping()
    except Exception:
        await client.aclose()
        raise
    _redis = client
    return _redis


async def close_redis() -> None:
    global _redis
    if _redis:
        await _redis.aclose()
        _redis = None


def get_redis() -> Optional[aioredis.Redis]:
    """The shared connection, or None when Redis isn't available."""
    return _redis
