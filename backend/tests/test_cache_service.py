"""
Unit Tests for the in-process cache
"""

from goal_getter.infrastructure.cache import CacheService, get_cache_service


class TestCacheService:

    def test_set_and_get(self):
        cache = CacheService()
        cache.set_predictions("markov:A:B", {"home_win": 50})

        assert cache.get_predictions("markov:A:B") == {"home_win": 50}
        assert cache.get_historical("markov:A:B") is None
        assert cache.stats == {"entries": 1, "hits": 1, "misses": 1}

    def test_expired_entry_is_dropped(self):
        cache = CacheService()
        cache.set("key", "value", ttl_seconds=0)

        assert cache.get("key") is None
        assert cache.stats["entries"] == 0

    def test_invalidate_and_clear(self):
        cache = CacheService()
        cache.set_historical("weighted_frequency:EPL:A:B", [1])
        cache.set_predictions("poisson:A:B", [2])

        assert cache.invalidate("historical:weighted_frequency:EPL:A:B") is True
        assert cache.invalidate("historical:weighted_frequency:EPL:A:B") is False
        cache.clear()
        assert cache.stats["entries"] == 0

    def test_singleton(self):
        assert get_cache_service() is get_cache_service()

    def test_set_sweeps_expired_entries(self):
        cache = CacheService()
        for i in range(1000):
            cache.set(f"analysis:{i}", i, ttl_seconds=0)

        cache.set("fresh", "value", ttl_seconds=60)

        assert cache.stats["entries"] == 1
        assert cache.get("fresh") == "value"

    def test_oldest_entries_evicted_when_full(self):
        cache = CacheService(max_entries=3)
        for key in ("a", "b", "c", "d"):
            cache.set(key, key, ttl_seconds=60)

        assert cache.stats["entries"] == 3
        assert cache.get("a") is None
        assert cache.get("d") == "d"

    def test_reset_key_moves_to_newest(self):
        cache = CacheService(max_entries=2)
        cache.set("a", 1, ttl_seconds=60)
        cache.set("b", 2, ttl_seconds=60)
        cache.set("a", 3, ttl_seconds=60)
        cache.set("c", 4, ttl_seconds=60)

        assert cache.get("b") is None
        assert cache.get("a") == 3
