import pytest

from kinnect_cache.caches import RecommendationCaches, pair_key
from kinnect_cache.lru import LRUCache
from kinnect_core.config import EngineSettings


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_evicts_least_recently_used():
    cache = LRUCache(max_size=2)
    cache.put("a", 1)
    cache.put("b", 2)
    assert cache.get("a") == 1  # "b" is now the oldest
    cache.put("c", 3)

    assert "b" not in cache
    assert cache.get("a") == 1
    assert cache.get("c") == 3
    assert cache.evictions == 1
    assert len(cache) == 2


def test_ttl_expiry():
    clock = FakeClock()
    cache = LRUCache(max_size=10, ttl_seconds=300, clock=clock)
    cache.put("u1", "profile")

    clock.now = 299
    assert cache.get("u1") == "profile"
    clock.now = 301
    assert cache.get("u1") is None
    assert "u1" not in cache


def test_stats_and_clear():
    cache = LRUCache(max_size=5, name="t")
    cache.put("k", 1)
    cache.get("k")
    cache.get("missing")
    stats = cache.stats()
    assert stats["hits"] == 1 and stats["misses"] == 1
    assert stats["hit_rate"] == 0.5

    cache.clear()
    assert len(cache) == 0


def test_rejects_non_positive_size():
    with pytest.raises(ValueError):
        LRUCache(max_size=0)


def test_pair_key_is_order_independent():
    assert pair_key("b", "a") == pair_key("a", "b") == ("a", "b")


def test_caches_from_settings_are_bounded():
    settings = EngineSettings(profile_cache_max=3, similarity_cache_max_pairs=2)
    caches = RecommendationCaches.from_settings(settings)
    for i in range(5):
        caches.similarities.put(pair_key("u", f"v{i}"), 0.5)
    assert len(caches.similarities) == 2
    assert caches.similarities.ttl_seconds is None
    assert caches.profiles.ttl_seconds == settings.profile_ttl_sec
