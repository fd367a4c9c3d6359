"""
Redis Key-Value Store

CONFIG: chat.storage.type = "redis" (URL from chat.storage.redis.url or REDIS_URL)
PURPOSE: Shared persistence across processes; Redis enforces expiry itself
"""

from __future__ import annotations

import logging

import redis.asyncio as redis

from yumeoi.errors import PersistenceError

logger = logging.getLogger(__name__)


class RedisKeyValueStore:
    """Stores each value with SET ... EX so Redis drops it after the TTL."""

    def __init__(self, url: str | None = None, client: redis.Redis | None = None):
        if client is None:
            if not url:
                raise ValueError("A Redis URL is required when no client is given")
            client = redis.from_url(url, decode_responses=True)
        self._r = client

    async def set_value(self, key: str, value: str, ttl_seconds: int) -> None:
        confirmed = await self._r.set(key, value, ex=ttl_seconds)
        if not confirmed:
            raise PersistenceError(f"Redis did not confirm write for key '{key}'")

    async def get_value(self, key: str) -> str | None:
        value = await self._r.get(key)
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    async def close(self) -> None:
        await self._r.aclose()
