"""
Redis cache shared by all API workers.

Holds the results of the two expensive reads in SkillSync: per-user match
suggestions and per-project hashtag counts. Values are stored as JSON with a
TTL under settings.CACHE_PREFIX.

Redis is optional. When it cannot be reached the service reports misses and
drops writes, and tries to reconnect after settings.CACHE_RETRY_SECONDS.
"""

import asyncio
import json
import logging
import time
from typing import Any, Awaitable, Callable, Dict, Optional

import redis.asyncio as redis

from app.core.config import settings
from app.core.metrics import cache_hits_total, cache_misses_total

logger = logging.getLogger(__name__)


class CacheService:
    def __init__(self):
        self._client: Optional[redis.Redis] = None
        self._offline_until: float = 0.0
        self._lock = asyncio.Lock()

    @property
    def available(self) -> bool:
        return time.monotonic() >= self._offline_until

    def _mark_offline(self, reason: Exception) -> None:
        if self.available:
            logger.warning(
                f"Redis unavailable ({reason}), caching paused for "
                f"{settings.CACHE_RETRY_SECONDS}s"
            )
        self._offline_until = time.monotonic() + settings.CACHE_RETRY_SECONDS
        self._client = None

    async def _connect(self) -> Optional[redis.Redis]:
        if not self.available:
            return None
        if self._client is not None:
            return self._client

        async with self._lock:
            if self._client is None:
                client = redis.Redis.from_url(
                    settings.REDIS_URL,
                    encoding="utf-8",
                    decode_responses=True,
                    max_connections=20,
                )
                try:
                    await client.ping()
                except (redis.ConnectionError, redis.TimeoutError, OSError) as e:
                    await client.aclose()
                    self._mark_offline(e)
                    return None
                logger.info("Connected to Redis cache")
                self._client = client
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @staticmethod
    def _key(key: str) -> str:
        return f"{settings.CACHE_PREFIX}{key}"

    async def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None on a miss or when Redis is down."""
        client = await self._connect()
        if client is None:
            return None
        try:
            raw = await client.get(self._key(key))
        except (redis.ConnectionError, redis.TimeoutError) as e:
            self._mark_offline(e)
            return None

        if raw is None:
            cache_misses_total.inc()
            return None
        try:
            value = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Discarding undecodable cache entry {key}")
            return None
        cache_hits_total.inc()
        return value

    async def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> bool:
        client = await self._connect()
        if client is None:
            return False
        ttl = ttl_seconds or settings.CACHE_DEFAULT_TTL_SECONDS
        try:
            await client.setex(self._key(key), ttl, json.dumps(value, default=str))
        except (TypeError, ValueError) as e:
            logger.warning(f"Value for {key} is not JSON serializable: {e}")
            return False
        except (redis.ConnectionError, redis.TimeoutError) as e:
            self._mark_offline(e)
            return False
        return True

    async def delete(self, *keys: str) -> bool:
        """Remove one or more keys. Returns False when nothing could be sent."""
        if not keys:
            return True
        client = await self._connect()
        if client is None:
            return False
        try:
            await client.delete(*(self._key(k) for k in keys))
        except (redis.ConnectionError, redis.TimeoutError) as e:
            self._mark_offline(e)
            return False
        return True

    async def get_or_fetch(
        self,
        key: str,
        fetch_fn: Callable[[], Awaitable[Any]],
        ttl_seconds: Optional[int] = None,
    ) -> Any:
        cached = await self.get(key)
        if cached is not None:
            return cached

        data = await fetch_fn()
        if data is not None:
            await self.set(key, data, ttl_seconds)
        return data

    async def health_check(self) -> Dict[str, Any]:
        client = await self._connect()
        if client is None:
            return {"status": "unhealthy", "available": False}
        try:
            return {
                "status": "healthy",
                "available": True,
                "total_keys": await client.dbsize(),
            }
        except (redis.ConnectionError, redis.TimeoutError) as e:
            self._mark_offline(e)
            return {"status": "unhealthy", "available": False, "error": str(e)}


cache_service = CacheService()


class CacheTTL:
    MATCH_SUGGESTIONS = settings.MATCH_CACHE_TTL_SECONDS
    PROJECT_HASHTAGS = 10 * 60
    TRENDING_TAGS = 5 * 60


class CacheKeys:
    @staticmethod
    def match_suggestions(user_id: str) -> str:
        return f"matches:{user_id}"

    @staticmethod
    def project_hashtags(project_id: str) -> str:
        return f"hashtags:{project_id}"

    @staticmethod
    def trending_tags() -> str:
        return "community:trending"
