"""
Tests for the LRU response cache.
"""

import asyncio

import pytest

from mcp_senado.config.settings import CacheConfig
from mcp_senado.infrastructure.cache import LRUCache, NoOpCache, create_cache, generate_cache_key


class TestCacheKey:
    def test_keys_are_sorted(self):
        assert generate_cache_key("t", {"b": 1, "a": "x"}) == 't:a="x"&b=1'

    def test_argument_order_does_not_matter(self):
        assert generate_cache_key("t", {"a": 1, "b": 2}) == generate_cache_key("t", {"b": 2, "a": 1})

    def test_no_params(self):
        assert generate_cache_key("partidos_listar") == "partidos_listar:"


class TestLRUCache:
    """Get, set, expiry and eviction."""

    def test_set_and_get(self, clock):
        cache = LRUCache(max_size=10, ttl=1000, clock=clock)
        cache.set("a", {"x": 1})

        assert cache.get("a") == {"x": 1}
        assert cache.has("a") is True
        assert len(cache) == 1

    def test_miss(self, clock):
        cache = LRUCache(max_size=10, ttl=1000, clock=clock)

        assert cache.get("missing") is None
        assert cache.get_stats().misses == 1

    def test_entries_expire(self, clock):
        cache = LRUCache(max_size=10, ttl=1000, clock=clock)
        cache.set("a", 1)

        clock.advance(0.999)
        assert cache.get("a") == 1

        clock.advance(1)
        assert cache.get("a") is None
        assert len(cache) == 0

    def test_per_entry_ttl(self, clock):
        cache = LRUCache(max_size=10, ttl=1000, clock=clock)
        cache.set("short", 1, ttl=100)
        cache.set("long", 2)

        clock.advance(0.5)

        assert cache.has("short") is False
        assert cache.has("long") is True

    def test_least_recently_used_is_evicted(self, clock):
        cache = LRUCache(max_size=2, ttl=1000, clock=clock)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.get("a")
        cache.set("c", 3)

        assert cache.has("a") is True
        assert cache.has("b") is False
        assert cache.has("c") is True

    def test_updating_existing_key_does_not_evict(self, clock):
        cache = LRUCache(max_size=2, ttl=1000, clock=clock)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("a", 10)

        assert len(cache) == 2
        assert cache.get("a") == 10
        assert cache.get("b") == 2

    def test_delete_and_clear(self, clock):
        cache = LRUCache(max_size=10, ttl=1000, clock=clock)
        cache.set("a", 1)
        cache.get("a")

        assert cache.delete("a") is True
        assert cache.delete("a") is False

        cache.set("b", 2)
        cache.clear()
        stats = cache.get_stats()
        assert (stats.hits, stats.misses, stats.size) == (0, 0, 0)

    def test_cleanup_removes_expired_entries(self, clock):
        cache = LRUCache(max_size=10, ttl=1000, clock=clock)
        cache.set("a", 1)
        cache.set("b", 2, ttl=5000)

        clock.advance(2)

        assert cache.cleanup() == 1
        assert len(cache) == 1

    def test_hit_rate(self, clock):
        cache = LRUCache(max_size=10, ttl=1000, clock=clock)
        cache.set("a", 1)
        cache.get("a")
        cache.get("a")
        cache.get("a")
        cache.get("b")

        stats = cache.get_stats()
        assert stats.hits == 3
        assert stats.misses == 1
        assert stats.hit_rate == 0.75


class TestCleanupTask:
    @pytest.mark.asyncio
    async def test_periodic_cleanup(self, clock):
        cache = LRUCache(max_size=10, ttl=1000, clock=clock)
        cache.set("a", 1)
        clock.advance(5)

        cache.start_cleanup(10)
        await asyncio.sleep(0.05)
        await cache.stop_cleanup()

        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_stop_without_start(self):
        cache = LRUCache(max_size=10, ttl=1000)

        await cache.stop_cleanup()


class TestCreateCache:
    def test_enabled(self):
        cache = create_cache(CacheConfig(max_size=5, ttl=100))

        assert isinstance(cache, LRUCache)
        assert cache.max_size == 5
        assert cache.ttl == 100

    def test_disabled(self):
        cache = create_cache(CacheConfig(enabled=False))
        cache.set("a", 1)

        assert isinstance(cache, NoOpCache)
        assert cache.get("a") is None
        assert cache.get_stats().hit_rate == 0.0
