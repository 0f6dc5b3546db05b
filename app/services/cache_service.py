"""Caching service for query embeddings."""

import hashlib
import json
from collections import OrderedDict
from typing import Any, Optional

import redis.asyncio as redis
from loguru import logger
from redis.exceptions import RedisError


class CacheService:
    """Key/value cache backed by Redis when configured, in-memory LRU otherwise.

    Redis failures are logged and served from the in-memory cache instead.
    """

    def __init__(
        self,
        redis_url: Optional[str] = None,
        ttl: int = 3600,
        max_memory_items: int = 10000,
    ) -> None:
        """Initialize cache service."""
        self.ttl = ttl
        self.redis_client: Optional[redis.Redis] = None
        self.memory_cache: OrderedDict[str, Any] = OrderedDict()
        self.max_memory_items = max_memory_items
        self.cache_hits = 0
        self.cache_misses = 0

        if redis_url:
            self.redis_client = redis.from_url(
                redis_url,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=2,
            )
            logger.info(f"Using Redis cache at {redis_url}")
        else:
            logger.info("Using in-memory cache (Redis not configured)")

    async def get(self, key: str) -> Optional[Any]:
        """Get value from cache."""
        if self.redis_client:
            try:
                value = await self.redis_client.get(key)
                if value is not None:
                    self.cache_hits += 1
                    return json.loads(value)
            except RedisError as e:
                logger.warning(f"Redis get failed, using memory cache: {e}")

        if key in self.memory_cache:
            self.memory_cache.move_to_end(key)
            self.cache_hits += 1
            return self.memory_cache[key]

        self.cache_misses += 1
        return None

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        """Set value in cache."""
        ttl = ttl or self.ttl

        if self.redis_client:
            try:
                await self.redis_client.setex(key, ttl, json.dumps(value))
                return
            except RedisError as e:
                logger.warning(f"Redis set failed, using memory cache: {e}")

        self.memory_cache[key] = value
        self.memory_cache.move_to_end(key)
        while len(self.memory_cache) > self.max_memory_items:
            self.memory_cache.popitem(last=False)

    async def delete(self, key: str) -> None:
        """Evict a key from cache."""
        if self.redis_client:
            try:
                await self.redis_client.delete(key)
            except RedisError as e:
                logger.warning(f"Redis delete failed: {e}")

        self.memory_cache.pop(key, None)

    async def clear(self) -> None:
        """Clear all cache."""
        if self.redis_client:
            try:
                await self.redis_client.flushdb()
            except RedisError as e:
                logger.warning(f"Redis flush failed: {e}")

        self.memory_cache.clear()

    def get_stats(self) -> dict[str, Any]:
        """Get cache statistics."""
        total = self.cache_hits + self.cache_misses
        hit_rate = (self.cache_hits / total * 100) if total > 0 else 0

        return {
            "hits": self.cache_hits,
            "misses": self.cache_misses,
            "hit_rate_percent": round(hit_rate, 2),
            "backend": "redis" if self.redis_client else "memory",
            "memory_items": len(self.memory_cache),
        }

    @staticmethod
    def hash_key(*args: Any) -> str:
        """Generate cache key from arguments."""
        content = json.dumps(args, sort_keys=True)
        return hashlib.sha256(content.encode()).hexdigest()

    async def close(self) -> None:
        """Close connections."""
        if self.redis_client:
            await self.redis_client.aclose()


class EmbeddingCache:
    """Specialized cache for query embeddings, keyed by model and text."""

    def __init__(self, cache_service: CacheService, ttl: int = 86400) -> None:
        """Initialize embedding cache."""
        self.cache = cache_service
        self.ttl = ttl
        self.prefix = "emb:"

    def _key(self, model: str, text: str) -> str:
        return self.prefix + self.cache.hash_key(model, text)

    async def get_embedding(self, model: str, text: str) -> Optional[list[float]]:
        """Get cached embedding."""
        return await self.cache.get(self._key(model, text))

    async def set_embedding(self, model: str, text: str, embedding: list[float]) -> None:
        """Cache embedding."""
        await self.cache.set(self._key(model, text), embedding, ttl=self.ttl)

    async def evict_embedding(self, model: str, text: str) -> None:
        """Drop a cached embedding."""
        await self.cache.delete(self._key(model, text))
