"""Fixed-window request counter stored in Redis."""
from __future__ import annotations

import logging

import redis.asyncio as aioredis

logger = logging.getLogger(__name__)


class RedisRateLimiter:
    """Allow ``limit`` hits per key within each ``window_seconds`` window."""

    def __init__(
        self,
        redis: aioredis.Redis,
        *,
        limit: int,
        window_seconds: int,
        prefix: str = "ratelimit",
    ) -> None:
        self._redis = redis
        self._limit = limit
        self._window = window_seconds
        self._prefix = prefix

    async def hit(self, key: str) -> bool:
        """Count one request for ``key``. Returns False once the window is exhausted."""
        redis_key = f"{self._prefix}:{key}"
        count = await self._redis.incr(redis_key)
        if count == 1:
            await self._redis.expire(redis_key, self._window)
        if count > self._limit:
            logger.info("Rate limit exceeded for %s (%d/%d)", key, count, self._limit)
            return False
        return True
