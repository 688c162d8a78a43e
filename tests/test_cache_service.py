"""Tests for the in-process TTL cache."""

from casework.services.cache_service import TTLCache


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_get_or_compute_caches_until_ttl_expires():
    clock = FakeClock()
    cache = TTLCache(ttl_seconds=60, clock=clock)
    calls = []

    def compute():
        calls.append(1)
        return ["client"]

    assert cache.get_or_compute("clients", "all", compute) == ["client"]
    assert cache.get_or_compute("clients", "all", compute) == ["client"]
    assert len(calls) == 1

    clock.now += 61
    cache.get_or_compute("clients", "all", compute)
    assert len(calls) == 2


def test_invalidate_without_scope_drops_every_scope_of_entity():
    cache = TTLCache(ttl_seconds=60)
    cache.set("clients", "all", [1])
    cache.set("clients", "active", [2])
    cache.set("tasks", "all", [3])

    cache.invalidate("clients")

    assert cache.get("clients", "all") is None
    assert cache.get("clients", "active") is None
    assert cache.get("tasks", "all") == [3]


def test_invalidate_single_scope():
    cache = TTLCache(ttl_seconds=60)
    cache.set("clients", "all", [1])
    cache.set("clients", "active", [2])

    cache.invalidate("clients", "active")

    assert cache.get("clients", "all") == [1]
    assert cache.get("clients", "active") is None


def test_non_positive_ttl_disables_cache():
    cache = TTLCache(ttl_seconds=0)
    calls = []

    def compute():
        calls.append(1)
        return "value"

    cache.get_or_compute("clients", "all", compute)
    cache.get_or_compute("clients", "all", compute)

    assert len(calls) == 2
    assert not cache.enabled


def test_clear_empties_cache():
    cache = TTLCache(ttl_seconds=60)
    cache.set("clients", "all", [1])
    cache.clear()
    assert cache.get("clients", "all") is None
