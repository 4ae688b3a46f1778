# File: tests/test_cache.py
from access_scout.cache import ResultCache


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_hit_within_ttl_and_expiry():
    clock = FakeClock()
    cache = ResultCache(ttl=600, clock=clock)
    cache.set("https://example.gov/", "result")

    clock.now += 599
    assert cache.get("https://example.gov/") == "result"

    clock.now += 1
    assert cache.get("https://example.gov/") is None
    assert len(cache) == 0


def test_miss_and_invalidate():
    cache = ResultCache(ttl=600, clock=FakeClock())
    assert cache.get("https://example.gov/") is None
    cache.set("https://example.gov/", 1)
    cache.invalidate("https://example.gov/")
    cache.invalidate("https://missing.example/")
    assert cache.get("https://example.gov/") is None


def test_zero_ttl_disables_cache():
    cache = ResultCache(ttl=0, clock=FakeClock())
    cache.set("k", 1)
    assert cache.get("k") is None
