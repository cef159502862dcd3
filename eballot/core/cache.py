"""
Cache-aside store backed by Redis.

Every operation degrades to a miss or a no-op when Redis is not configured
or cannot be reached, so callers always fall back to the source of truth.
"""
import json
import logging
from typing import Any, Optional

from redis import asyncio as aioredis
from redis.exceptions import RedisError

from eballot.core.config import settings


logger = logging.getLogger(__name__)


LEADERBOARD_NAMESPACE = "leaderboard"
CANDIDATES_NAMESPACE = "candidates"
ELECTIONS_NAMESPACE = "elections"
OTP_NAMESPACE = "otp"


def create_redis_client() -> Optional[aioredis.Redis]:
    """Build a Redis client from settings, or None when no URL is set."""
    if not settings.REDIS_URL:
        logger.warning("REDIS_URL is not set; caching is disabled")
        return None

    return aioredis.from_url(
        settings.REDIS_URL,
        decode_responses=True,
        socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
        socket_connect_timeout=settings.REDIS_SOCKET_TIMEOUT,
    )


class CacheStore:
    """Namespaced JSON values with per-entry TTL."""

    def __init__(self, namespace: str, client: Optional[aioredis.Redis]):
        self.namespace = namespace
        self.client = client

    @property
    def enabled(self) -> bool:
        return self.client is not None

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    async def get(self, key: str) -> Optional[Any]:
        if self.client is None:
            return None
        try:
            raw = await self.client.get(self._key(key))
        except RedisError as e:
            logger.warning("Cache get failed for %s: %s", self._key(key), e)
            return None
        return json.loads(raw) if raw else None

    async def set(self, key: str, value: Any, ttl_seconds: int = 60) -> None:
        if self.client is None:
            return
        payload = json.dumps(value)
        try:
            if ttl_seconds > 0:
                await self.client.setex(self._key(key), ttl_seconds, payload)
            else:
                await self.client.set(self._key(key), payload)
        except RedisError as e:
            logger.warning("Cache set failed for %s: %s", self._key(key), e)

    async def delete(self, key: str) -> bool:
        """Remove a key; True only if this call removed an existing entry."""
        if self.client is None:
            return False
        try:
            removed = await self.client.delete(self._key(key))
        except RedisError as e:
            logger.warning("Cache delete failed for %s: %s", self._key(key), e)
            return False
        return bool(removed)
