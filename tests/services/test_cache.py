"""
Tests for the read cache and its invalidation call-lists.
"""

from donation_tracker.services import cache as cache_keys
from donation_tracker.services.cache import ReadCache


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class TestReadCache:

    def test_get_or_set_fetches_once(self):
        cache = ReadCache()
        calls = []

        def fetch():
            calls.append(1)
            return "value"

        assert cache.get_or_set("k", fetch, 60) == "value"
        assert cache.get_or_set("k", fetch, 60) == "value"
        assert len(calls) == 1
        assert (cache.hits, cache.misses) == (1, 1)

    def test_entries_expire(self):
        clock = FakeClock()
        cache = ReadCache(clock=clock)
        cache.set("k", "value", ttl=10)

        clock.now += 9
        assert cache.get("k") == "value"
        clock.now += 1
        assert cache.get("k") is None

    def test_each_entry_keeps_its_own_ttl(self):
        clock = FakeClock()
        cache = ReadCache(clock=clock)
        cache.set("short", 1, ttl=60)
        cache.set("long", 2, ttl=3600)

        clock.now += 61

        assert cache.get("short") is None
        assert cache.get("long") == 2

    def test_expired_entries_are_purged_on_write(self):
        clock = FakeClock()
        cache = ReadCache(clock=clock)
        for days in range(50):
            cache.set(cache_keys.audit_stats_key(days), {}, ttl=10)

        clock.now += 11
        cache.set("stats:donations", 1, ttl=10)

        assert cache.keys() == ["stats:donations"]

    def test_size_is_bounded(self):
        cache = ReadCache(maxsize=3)
        for i in range(10):
            cache.set(f"k{i}", i, 60)

        assert len(cache.keys()) == 3

    def test_falsy_values_are_cached(self):
        cache = ReadCache()
        calls = []

        def fetch():
            calls.append(1)
            return []

        cache.get_or_set("empty", fetch, 60)
        cache.get_or_set("empty", fetch, 60)
        assert len(calls) == 1

    def test_invalidate_prefix(self):
        cache = ReadCache()
        cache.set("donations:recent:10", 1, 60)
        cache.set("donations:recent:20", 2, 60)
        cache.set("stats:donations", 3, 60)

        cache.invalidate_prefix("donations:recent:")

        assert cache.keys() == ["stats:donations"]


class TestInvalidation:

    def test_donation_clears_derived_data(self):
        cache = ReadCache()
        for key in (
            cache_keys.STATISTICS_KEY,
            cache_keys.ACTIVE_CAMPAIGNS_KEY,
            cache_keys.recent_donations_key(20),
            cache_keys.campaign_key(1),
            cache_keys.campaign_reports_key(1),
        ):
            cache.set(key, "x", 60)

        cache_keys.invalidate_on_donation(cache)

        assert cache.keys() == [cache_keys.campaign_reports_key(1)]

    def test_campaign_change_is_scoped(self):
        cache = ReadCache()
        cache.set(cache_keys.campaign_key(1), "x", 60)
        cache.set(cache_keys.campaign_key(2), "x", 60)
        cache.set(cache_keys.ACTIVE_CAMPAIGNS_KEY, "x", 60)

        cache_keys.invalidate_on_campaign(cache, 1)

        assert cache.keys() == [cache_keys.campaign_key(2)]
