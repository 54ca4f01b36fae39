# app/infrastructure/cache/redis_client.py

import redis.asyncio as redis

from app.core.config import settings

redis_client: redis.Redis | None = None


def get_redis_client() -> redis.Redis:
    """Process-wide client for REDIS_URL (string responses)."""
    global redis_client
    if redis_client is None:
        if not settings.REDIS_URL:
            raise RuntimeError("REDIS_URL is not set")
        redis_client = redis.from_url(settings.REDIS_URL, decode_responses=True)
    return redis_client


async def close_redis_client() -> None:
    global redis_client
    if redis_client is not None:
        await redis_client.aclose()
        redis_client = None
