"""
Shared async Redis client (redis-py).

Backs the per-user fixed-window rate limiter on transaction creation.
"""

import redis.asyncio as aioredis

from novapay.config import settings

redis = aioredis.from_url(
    settings.REDIS_URL,
    decode_responses=True,
    ssl=settings.REDIS_SSL,
    health_check_interval=30,
)


async def get_redis() -> aioredis.Redis:
    """FastAPI dependency returning the shared client."""
    return redis
