"""Process-wide Redis client."""

from __future__ import annotations

import redis.asyncio as redis

from storefront.config import settings

_redis_client: redis.Redis | None = None


def get_redis_client() -> redis.Redis:
    """Return a singleton Redis client for the current process."""

    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(
            settings.REDIS_URL,
            encoding="utf-8",
            decode_responses=True,
        )
    return _redis_client
