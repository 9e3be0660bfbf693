"""Tests for the explicitly scoped rate cache."""

from __future__ import annotations

from datetime import datetime, timedelta

from offset_calc.rates import DEFAULT_TTL, CachedRate, RateCache

NOW = datetime(2025, 1, 1, 12, 0, 0)


class _CountingFetch:
    def __init__(self, *values):
        self.values = list(values)
        self.calls = 0

    def __call__(self):
        value = self.values[min(self.calls, len(self.values) - 1)]
        self.calls += 1
        return value


class TestCachedRate:
    def test_fresh_entry(self):
        entry = CachedRate(0.065, NOW)
        assert not entry.is_expired(NOW + timedelta(minutes=59))

    def test_expires_at_ttl(self):
        entry = CachedRate(0.065, NOW)
        assert entry.is_expired(NOW + DEFAULT_TTL)
        assert entry.is_expired(NOW + timedelta(seconds=30), ttl=timedelta(seconds=30))


class TestRateCache:
    def test_first_get_fetches(self):
        cache = RateCache()
        fetch = _CountingFetch(0.065)
        entry = cache.get(fetch, NOW, source="fallback")
        assert entry.value == 0.065
        assert entry.fetched_at == NOW
        assert entry.source == "fallback"
        assert fetch.calls == 1
        assert cache.entry is entry

    def test_cached_within_ttl(self):
        cache = RateCache(ttl=timedelta(minutes=10))
        fetch = _CountingFetch(0.065, 0.07)
        cache.get(fetch, NOW)
        entry = cache.get(fetch, NOW + timedelta(minutes=9))
        assert entry.value == 0.065
        assert fetch.calls == 1

    def test_refetched_after_ttl(self):
        cache = RateCache(ttl=timedelta(minutes=10))
        fetch = _CountingFetch(0.065, 0.07)
        cache.get(fetch, NOW)
        later = NOW + timedelta(minutes=10)
        entry = cache.get(fetch, later)
        assert entry.value == 0.07
        assert entry.fetched_at == later
        assert fetch.calls == 2

    def test_caches_are_independent(self):
        first, second = RateCache(), RateCache()
        first.get(_CountingFetch(0.05), NOW)
        assert second.entry is None

    def test_clear(self):
        cache = RateCache()
        fetch = _CountingFetch(0.065)
        cache.get(fetch, NOW)
        cache.clear()
        assert cache.entry is None
        cache.get(fetch, NOW)
        assert fetch.calls == 2
