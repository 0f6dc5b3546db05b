"""Tests for the cache service."""

import pytest
from unittest.mock import AsyncMock, MagicMock

from redis.exceptions import ConnectionError as RedisConnectionError

from app.services.cache_service import CacheService, EmbeddingCache


class TestCacheService:
    """Test caching functionality."""

    @pytest.mark.asyncio
    async def test_memory_cache_roundtrip(self):
        cache = CacheService(redis_url=None, ttl=300)

        await cache.set("test_key", {"value": 1})

        assert await cache.get("test_key") == {"value": 1}
        assert await cache.get("missing") is None

    @pytest.mark.asyncio
    async def test_lru_eviction(self):
        cache = CacheService(redis_url=None, max_memory_items=2)

        await cache.set("a", 1)
        await cache.set("b", 2)
        await cache.get("a")  # a becomes most recent
        await cache.set("c", 3)

        assert await cache.get("b") is None
        assert await cache.get("a") == 1
        assert await cache.get("c") == 3

    @pytest.mark.asyncio
    async def test_delete_and_clear(self):
        cache = CacheService(redis_url=None)
        await cache.set("a", 1)
        await cache.set("b", 2)

        await cache.delete("a")
        assert await cache.get("a") is None

        await cache.clear()
        assert await cache.get("b") is None

    @pytest.mark.asyncio
    async def test_cache_stats(self):
        """Test cache statistics tracking."""
        cache = CacheService(redis_url=None, ttl=300)

        await cache.set("key1", "value1")
        await cache.get("key1")  # Hit
        await cache.get("key2")  # Miss

        stats = cache.get_stats()
        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["hit_rate_percent"] == 50.0
        assert stats["backend"] == "memory"

    @pytest.mark.asyncio
    async def test_redis_failure_falls_back_to_memory(self):
        """Test that cache falls back to memory when Redis is unavailable."""
        cache = CacheService(redis_url="redis://localhost:6379/0", ttl=300)
        cache.redis_client = MagicMock()
        cache.redis_client.get = AsyncMock(side_effect=RedisConnectionError("refused"))
        cache.redis_client.setex = AsyncMock(side_effect=RedisConnectionError("refused"))

        await cache.set("test_key", "test_value")
        result = await cache.get("test_key")

        assert result == "test_value"

    @pytest.mark.asyncio
    async def test_redis_values_are_json(self):
        cache = CacheService(redis_url="redis://localhost:6379/0", ttl=300)
        cache.redis_client = MagicMock()
        cache.redis_client.get = AsyncMock(return_value="[0.5, 0.25]")
        cache.redis_client.setex = AsyncMock()

        await cache.set("k", [0.5, 0.25], ttl=60)

        cache.redis_client.setex.assert_awaited_once_with("k", 60, "[0.5, 0.25]")
        assert await cache.get("k") == [0.5, 0.25]

    def test_hash_key_is_stable(self):
        assert CacheService.hash_key("model", "text") == CacheService.hash_key("model", "text")
        assert CacheService.hash_key("model", "a") != CacheService.hash_key("model", "b")


class TestEmbeddingCache:
    """Test the embedding cache wrapper."""

    @pytest.mark.asyncio
    async def test_keyed_by_model_and_text(self):
        cache = EmbeddingCache(CacheService(redis_url=None))

        await cache.set_embedding("small", "hello", [0.1, 0.2])

        assert await cache.get_embedding("small", "hello") == [0.1, 0.2]
        assert await cache.get_embedding("large", "hello") is None

    @pytest.mark.asyncio
    async def test_evict(self):
        cache = EmbeddingCache(CacheService(redis_url=None))
        await cache.set_embedding("small", "hello", [0.1, 0.2])

        await cache.evict_embedding("small", "hello")

        assert await cache.get_embedding("small", "hello") is None
