"""
Fixed-window request rate limiting backed by Redis.

A counter key is incremented per request and given an expiry on its first
hit, so the window starts with the first request and resets when the key
expires.
"""

from novapay.config import settings


async def check_rate_limit(key: str, limit: int, window_seconds: int, redis) -> bool:
    """
    Count one request against *key*.

    Returns True if within limit, False if exceeded.
    """
    count = await redis.incr(key)
    if count == 1:
        await redis.expire(key, window_seconds)
    return count <= limit


async def check_transaction_rate_limit(user_id: str, redis) -> bool:
    """Enforce TRANSACTION_RATE_LIMIT creations per window per user."""
    return await check_rate_limit(
        f"rate_limit:transactions:{user_id}",
        settings.TRANSACTION_RATE_LIMIT,
        settings.TRANSACTION_RATE_WINDOW_SECONDS,
        redis,
    )
