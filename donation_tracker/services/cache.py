"""
In-process cache for derived read data (statistics, campaign lists).

The cache is a capability handed to services by the API layer
through the get_cache dependency; services never reach for a
module-level instance. Routers invalidate the keys a mutation
affects, after the commit, through the explicit call-lists at the
bottom of this module.
"""

import threading
import time
from functools import lru_cache
from typing import Any, Callable, NamedTuple

from cachetools import TLRUCache

# TTLs in seconds
TTL_STATISTICS = 300
TTL_RECENT_DONATIONS = 60
TTL_CAMPAIGNS = 900
TTL_CAMPAIGN_DETAIL = 3600
TTL_REPORTS = 1800
TTL_AUDIT_STATS = 300

MAX_ENTRIES = 1024

# Cache keys
STATISTICS_KEY = "stats:donations"
ACTIVE_CAMPAIGNS_KEY = "campaigns:active"
RECENT_DONATIONS_PREFIX = "donations:recent:"
CAMPAIGN_PREFIX = "campaign:"
CAMPAIGN_REPORTS_PREFIX = "reports:campaign:"
AUDIT_STATS_PREFIX = "audit:stats:"


def recent_donations_key(limit: int) -> str:
    return f"{RECENT_DONATIONS_PREFIX}{limit}"


def campaign_key(campaign_id: int) -> str:
    return f"{CAMPAIGN_PREFIX}{campaign_id}"


def campaign_reports_key(campaign_id: int) -> str:
    return f"{CAMPAIGN_REPORTS_PREFIX}{campaign_id}"


def audit_stats_key(days: int) -> str:
    return f"{AUDIT_STATS_PREFIX}{days}"


class _Entry(NamedTuple):
    value: Any
    ttl: float


def _time_to_use(key, entry: _Entry, now: float) -> float:
    return now + entry.ttl


class ReadCache:
    """
    Thread-safe wrapper around a cachetools TLRUCache.

    Each entry carries its own TTL. Expired entries are purged on
    every write and the cache never holds more than maxsize items.
    """

    def __init__(self, maxsize: int = MAX_ENTRIES, clock: Callable[[], float] = time.monotonic):
        self._data = TLRUCache(maxsize=maxsize, ttu=_time_to_use, timer=clock)
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            entry = self._data.get(key)
        return default if entry is None else entry.value

    def set(self, key: str, value: Any, ttl: float) -> None:
        with self._lock:
            self._data[key] = _Entry(value, ttl)

    def get_or_set(self, key: str, fetch: Callable[[], Any], ttl: float) -> Any:
        """
        Return the cached value, computing and storing it on a miss.

        fetch runs outside the lock; two concurrent misses may both
        compute the value, the last one wins.
        """
        sentinel = object()
        value = self.get(key, sentinel)
        if value is not sentinel:
            self.hits += 1
            return value

        self.misses += 1
        value = fetch()
        self.set(key, value, ttl)
        return value

    def invalidate(self, *keys: str) -> None:
        with self._lock:
            for key in keys:
                self._data.pop(key, None)

    def invalidate_prefix(self, prefix: str) -> None:
        with self._lock:
            for key in [k for k in self._data if k.startswith(prefix)]:
                self._data.pop(key, None)

    def flush(self) -> None:
        with self._lock:
            self._data.clear()

    def keys(self) -> list[str]:
        with self._lock:
            self._data.expire()
            return list(self._data)


# --- Invalidation call-lists ---

def invalidate_on_donation(cache: ReadCache) -> None:
    """A new donation changes totals, the live feed and campaign progress."""
    cache.invalidate(STATISTICS_KEY, ACTIVE_CAMPAIGNS_KEY)
    cache.invalidate_prefix(RECENT_DONATIONS_PREFIX)
    cache.invalidate_prefix(CAMPAIGN_PREFIX)


def invalidate_on_campaign(cache: ReadCache, campaign_id: int | None = None) -> None:
    cache.invalidate(ACTIVE_CAMPAIGNS_KEY)
    if campaign_id is not None:
        cache.invalidate(campaign_key(campaign_id), campaign_reports_key(campaign_id))


def invalidate_on_report(cache: ReadCache, campaign_id: int | None = None) -> None:
    if campaign_id is not None:
        cache.invalidate(campaign_reports_key(campaign_id))
    else:
        cache.invalidate_prefix(CAMPAIGN_REPORTS_PREFIX)


@lru_cache()
def get_cache() -> ReadCache:
    """FastAPI dependency returning the process-wide cache."""
    return ReadCache()
