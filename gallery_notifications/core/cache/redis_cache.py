"""Redis cache facade with graceful degradation.

Features:
- Async Redis client holding rendered public pages and comment listings.
- Pattern invalidation via SCAN + DELETE, used when new comments change page content.
- Every operation is a no-op when Redis is not configured or unreachable, so a cache
  outage never fails a request.
"""

import asyncio
import json
import logging
from typing import Any, Dict, Optional

import redis.asyncio as redis

from gallery_notifications.core.config import settings

logger = logging.getLogger(__name__)


class RedisCache:
    """Async Redis cache facade with graceful fallback when Redis is unavailable."""

    def __init__(self):
        self.redis: Optional[redis.Redis] = None
        self.enabled = False
        self.default_ttl = 300
        self.ttl_overrides: Dict[str, int] = {
            "comments:": 120,
        }
        self.failed_init = False

    async def init_cache(self):
        """Initialize Redis connection pool."""
        try:
            if not settings.redis_url:
                logger.warning("REDIS_URL not set. Caching disabled.")
                return

            self.redis = redis.from_url(
                settings.redis_url,
                encoding="utf-8",
                decode_responses=True,
                socket_timeout=5,
            )
            await self.redis.ping()
            self.enabled = True
            self.failed_init = False
            logger.info("Redis cache initialized successfully.")
        except Exception as e:
            logger.error(f"Failed to initialize Redis cache: {e}")
            self.enabled = False
            self.failed_init = True

    async def close(self):
        """Close Redis connection."""
        if not self.redis:
            self.failed_init = False
            return
        close_method = getattr(self.redis, "aclose", None) or getattr(
            self.redis, "close", None
        )
        if close_method:
            result = close_method()
            if asyncio.iscoroutine(result):
                await result
        self.redis = None
        self.enabled = False
        self.failed_init = False

    async def get(self, key: str) -> Any:
        if not self.enabled or not self.redis:
            return None
        try:
            data = await self.redis.get(key)
            if not data:
                return None
            return json.loads(data)
        except Exception as e:
            logger.error(f"Cache get error for key {key}: {e}")
            return None

    async def set(self, key: str, value: Any, ttl: int = None) -> None:
        if not self.enabled or not self.redis:
            return
        try:
            await self.redis.set(
                key, json.dumps(value, default=str), ex=self._resolve_ttl(key, ttl)
            )
        except Exception as e:
            logger.error(f"Cache set error for key {key}: {e}")

    async def delete(self, key: str) -> None:
        if not self.enabled or not self.redis:
            return
        try:
            await self.redis.delete(key)
        except Exception as e:
            logger.error(f"Cache delete error for key {key}: {e}")

    async def invalidate(self, pattern: str) -> None:
        """
        Invalidate all keys matching a pattern.
        Example: invalidate("profile:jane:*")
        """
        if not self.enabled or not self.redis:
            return
        try:
            # SCAN rather than KEYS so large keyspaces do not block Redis.
            cursor = 0
            while True:
                cursor, keys = await self.redis.scan(cursor, match=pattern, count=100)
                if keys:
                    await self.redis.delete(*keys)
                if cursor == 0:
                    break
            logger.info(f"Invalidated cache pattern: {pattern}")
        except Exception as e:
            logger.error(f"Cache invalidation error for pattern {pattern}: {e}")

    def _resolve_ttl(self, key: str, ttl: Optional[int]) -> int:
        if ttl is not None:
            return ttl
        for prefix, override in self.ttl_overrides.items():
            if key.startswith(prefix):
                return override
        return self.default_ttl


async def cached_query(cache_key: str, query_fn, ttl: int = None):
    """Return the cached value for `cache_key`, computing and storing it on a miss."""
    cached_data = await cache_manager.get(cache_key)
    if cached_data is not None:
        logger.debug(f"Cache hit: {cache_key}")
        return cached_data

    result = await query_fn() if asyncio.iscoroutinefunction(query_fn) else query_fn()
    await cache_manager.set(cache_key, result, ttl)
    return result


# Global cache instance
cache_manager = RedisCache()


__all__ = ["RedisCache", "cache_manager", "cached_query"]
