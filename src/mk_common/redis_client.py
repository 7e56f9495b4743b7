"""Shared Redis connection for RateLimitMiddleware's per-party counters.

Only opened when RATE_LIMIT_ENABLED is set. Items, counters and the ledger
balance are kept in PostgreSQL and the engine's memory, never in Redis.
"""

import redis.asyncio as aioredis

from config.settings import settings

_redis_pool: aioredis.Redis | None = None


async def get_redis() -> aioredis.Redis:
    """Return the shared client, connecting to REDIS_URL on first use."""
    global _redis_pool  # noqa: PLW0603
    if _redis_pool is None:
        _redis_pool = aioredis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
        )
    return _redis_pool


async def close_redis() -> None:
    # Called from the app lifespan on shutdown; safe when never opened
    global _redis_pool  # noqa: PLW0603
    if _redis_pool is not None:
        await _redis_pool.aclose()
        _redis_pool = None
