"""
Tests for addressiq.core.cache.

Covers:
- InMemoryCache: get/set/delete/clear, LRU eviction, TTL expiry
- ResultCache: hit marking, advisory failure handling, flush errors
- build_result_cache / create_backend selection
"""

from unittest.mock import patch

import pytest

from addressiq.core.cache import (
    InMemoryCache,
    RedisCache,
    ResultCache,
    build_result_cache,
    create_backend,
)
from addressiq.core.errors import CacheError
from addressiq.core.settings import Settings
from addressiq.models.address import AddressKey
from addressiq.models.composite import CompositeRecord


class TestInMemoryCache:
    """Test InMemoryCache backend."""

    def test_basic_get_set(self):
        """Cache should store and retrieve values."""
        cache = InMemoryCache(max_size=100)
        cache.set("key1", {"data": [1, 2, 3]}, ttl_seconds=60)
        assert cache.get("key1") == {"data": [1, 2, 3]}

    def test_get_missing_key(self):
        assert InMemoryCache().get("missing") is None

    def test_delete(self):
        cache = InMemoryCache()
        cache.set("key1", "value1", ttl_seconds=60)
        cache.delete("key1")
        assert cache.get("key1") is None
        cache.delete("never-there")

    def test_clear(self):
        cache = InMemoryCache()
        for i in range(3):
            cache.set(f"k{i}", i, ttl_seconds=60)
        assert cache.size() == 3
        cache.clear()
        assert cache.size() == 0

    def test_ttl_expiry(self):
        """Entries past their TTL read as absent and are dropped."""
        cache = InMemoryCache()
        with patch("addressiq.core.cache.time.monotonic", return_value=1000.0):
            cache.set("temp", "value", ttl_seconds=10)
        with patch("addressiq.core.cache.time.monotonic", return_value=1009.0):
            assert cache.get("temp") == "value"
        with patch("addressiq.core.cache.time.monotonic", return_value=1010.0):
            assert cache.get("temp") is None
        assert cache.size() == 0

    def test_lru_eviction(self):
        """Least recently used key is evicted when max_size is reached."""
        cache = InMemoryCache(max_size=2)
        cache.set("a", 1, ttl_seconds=60)
        cache.set("b", 2, ttl_seconds=60)
        cache.get("a")
        cache.set("c", 3, ttl_seconds=60)
        assert cache.get("b") is None
        assert cache.get("a") == 1
        assert cache.get("c") == 3

    def test_overwrite_does_not_evict(self):
        cache = InMemoryCache(max_size=2)
        cache.set("a", 1, ttl_seconds=60)
        cache.set("b", 2, ttl_seconds=60)
        cache.set("a", 10, ttl_seconds=60)
        assert cache.get("a") == 10
        assert cache.get("b") == 2


class _BrokenBackend:
    name = "broken"

    def get(self, key):
        raise ConnectionError("connection refused")

    def set(self, key, value, *, ttl_seconds):
        raise ConnectionError("connection refused")

    def delete(self, key):
        raise ConnectionError("connection refused")

    def clear(self):
        raise ConnectionError("connection refused")


@pytest.fixture
def record(address):
    return CompositeRecord(address=address, sources=["address", "weather"], errors={"airQuality": "Timeout"})


class TestResultCache:
    """The advisory cache wrapped around a backend."""

    @pytest.mark.asyncio
    async def test_miss(self, key):
        assert await ResultCache(InMemoryCache()).get(key) is None

    @pytest.mark.asyncio
    async def test_put_then_get_marks_cached(self, key, record):
        cache = ResultCache(InMemoryCache(), ttl_seconds=60)
        await cache.put(key, record)
        hit = await cache.get(key)
        assert hit is not None
        assert hit.cached is True
        assert hit.sources == record.sources
        assert hit.errors == record.errors
        assert hit.address.bag_id == record.address.bag_id
        assert record.cached is False

    @pytest.mark.asyncio
    async def test_key_is_normalised(self, record):
        backend = InMemoryCache()
        cache = ResultCache(backend)
        await cache.put(AddressKey.of("3541 ed", " 53 "), record)
        assert backend.get("aggregated:3541ED:53") is not None
        assert await cache.get(AddressKey.of("3541ED", "53")) is not None

    @pytest.mark.asyncio
    async def test_ttl_is_passed_to_backend(self, key, record):
        backend = InMemoryCache()
        with patch.object(backend, "set", wraps=backend.set) as spy:
            await ResultCache(backend, ttl_seconds=123).put(key, record)
        assert spy.call_args.kwargs["ttl_seconds"] == 123

    @pytest.mark.asyncio
    async def test_read_failure_is_a_miss(self, key):
        assert await ResultCache(_BrokenBackend()).get(key) is None

    @pytest.mark.asyncio
    async def test_write_failure_is_swallowed(self, key, record):
        await ResultCache(_BrokenBackend()).put(key, record)

    @pytest.mark.asyncio
    async def test_invalid_entry_is_a_miss(self, key):
        backend = InMemoryCache()
        backend.set(key.cache_key(), {"address": "not an address"}, ttl_seconds=60)
        assert await ResultCache(backend).get(key) is None

    @pytest.mark.asyncio
    async def test_flush(self, key, record):
        cache = ResultCache(InMemoryCache())
        await cache.put(key, record)
        await cache.flush()
        assert await cache.get(key) is None

    @pytest.mark.asyncio
    async def test_flush_failure_raises(self):
        with pytest.raises(CacheError, match="cache flush failed"):
            await ResultCache(_BrokenBackend()).flush()


class TestFactories:
    def test_memory_without_redis_url(self):
        backend = create_backend("", max_size=5)
        assert isinstance(backend, InMemoryCache)
        assert backend.name == "memory"

    def test_redis_with_url(self):
        with patch("addressiq.core.cache.redis.from_url") as from_url:
            backend = create_backend("redis://localhost:6379/0")
        assert isinstance(backend, RedisCache)
        from_url.assert_called_once_with("redis://localhost:6379/0", decode_responses=False)

    def test_disabled(self):
        assert build_result_cache(Settings(_env_file=None, cache_enabled=False)) is None

    def test_enabled_uses_settings(self):
        cache = build_result_cache(Settings(_env_file=None, redis_url="", cache_ttl_seconds=42))
        assert isinstance(cache, ResultCache)
        assert cache.ttl_seconds == 42
        assert cache.backend.name == "memory"
