"""
backend/app/services/ttl_cache.py

Purpose:
    Keyed in-memory memoizer for async upstream fetches. A live entry is
    served without calling the fetch; on a miss the fetch result is stored
    only when the fetch succeeds. Failures propagate untouched: no negative
    caching, no stale fallback.

Dependencies:
    - asyncio
    - threading
    - app.monitoring.football_metrics
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, TypeVar

from app.monitoring.football_metrics import METRIC_CACHE_EVENTS

logger = logging.getLogger("footdata.cache")

T = TypeVar("T")

DEFAULT_TTL_SECONDS = 5 * 60


class CacheDurations:
    """TTL presets (seconds) per kind of upstream data."""

    # Static data
    TEAM_DETAILS = 24 * 60 * 60
    PLAYER_INFO = 24 * 60 * 60
    ROUNDS = 24 * 60 * 60

    # Semi-static
    STANDINGS = 2 * 60 * 60
    TOP_SCORERS = 2 * 60 * 60

    # Dynamic
    TEAM_STATS = 60 * 60
    NEXT_MATCHES = 60 * 60
    LAST_RESULTS = 60 * 60

    # Near real time
    LIVE_MATCHES = 30
    MATCH_DETAILS = 60

    DEFAULT = DEFAULT_TTL_SECONDS


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    data: T
    timestamp: float
    ttl: float


@dataclass(frozen=True)
class CacheStats:
    size: int
    keys: list[str]


class TTLCache:
    """Async memoization cache with a fixed time-to-live per entry.

    Entries are replaced, never mutated. The entry map is guarded by a
    threading lock that is never held across a fetch. Concurrent misses on
    one key each call ``fetch`` and the last completed write wins, unless
    ``coalesce=True``, in which case callers missing the same key while a
    fetch is running await that fetch instead of starting their own.

    A fetch that was running when its key (or the whole cache) was
    invalidated still returns its result to the waiting callers, but the
    result is not stored.
    """

    def __init__(
        self,
        default_ttl: float = DEFAULT_TTL_SECONDS,
        *,
        name: str = "football",
        coalesce: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._default_ttl = float(default_ttl)
        self._name = name
        self._coalesce = coalesce
        self._clock = clock
        self._entries: dict[str, CacheEntry[Any]] = {}
        self._inflight: dict[str, asyncio.Future[Any]] = {}
        # Bumped by invalidate(); a fetch started under an older generation is not stored.
        self._epoch = 0
        self._generations: dict[str, int] = {}
        self._lock = threading.Lock()

    @property
    def default_ttl(self) -> float:
        return self._default_ttl

    def _live_entry(self, key: str) -> CacheEntry[Any] | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() - entry.timestamp < entry.ttl:
                return entry
            # Expired: drop it so stats() only reports live keys.
            del self._entries[key]
            return None

    def _generation(self, key: str) -> tuple[int, int]:
        with self._lock:
            return self._epoch, self._generations.get(key, 0)

    def _store(self, key: str, data: Any, ttl: float | None, generation: tuple[int, int]) -> None:
        entry = CacheEntry(
            data=data,
            timestamp=self._clock(),
            ttl=self._default_ttl if ttl is None else float(ttl),
        )
        with self._lock:
            if (self._epoch, self._generations.get(key, 0)) != generation:
                logger.debug("Cache %s: discarding result for invalidated key %s", self._name, key)
                return
            self._entries[key] = entry
        METRIC_CACHE_EVENTS.labels(cache=self._name, outcome="store").inc()

    def peek(self, key: str) -> Any | None:
        """Return the live value for ``key`` without fetching, or None."""
        entry = self._live_entry(key)
        return entry.data if entry is not None else None

    async def get(
        self,
        key: str,
        fetch: Callable[[], Awaitable[T]],
        ttl: float | None = None,
    ) -> T:
        entry = self._live_entry(key)
        if entry is not None:
            METRIC_CACHE_EVENTS.labels(cache=self._name, outcome="hit").inc()
            return entry.data

        METRIC_CACHE_EVENTS.labels(cache=self._name, outcome="miss").inc()
        if self._coalesce:
            return await self._coalesced_fetch(key, fetch, ttl)
        return await self._fetch_and_store(key, fetch, ttl)

    async def _fetch_and_store(
        self,
        key: str,
        fetch: Callable[[], Awaitable[T]],
        ttl: float | None,
    ) -> T:
        generation = self._generation(key)
        data = await fetch()
        self._store(key, data, ttl, generation)
        return data

    async def _coalesced_fetch(
        self,
        key: str,
        fetch: Callable[[], Awaitable[T]],
        ttl: float | None,
    ) -> T:
        pending = self._inflight.get(key)
        if pending is not None:
            METRIC_CACHE_EVENTS.labels(cache=self._name, outcome="coalesced").inc()
            return await asyncio.shield(pending)

        task = asyncio.ensure_future(self._fetch_and_store(key, fetch, ttl))
        self._inflight[key] = task
        try:
            return await asyncio.shield(task)
        finally:
            if self._inflight.get(key) is task:
                del self._inflight[key]

    def invalidate(self, key: str | None = None) -> None:
        """Drop one key, or every entry when ``key`` is None."""
        with self._lock:
            if key is None:
                count = len(self._entries)
                self._entries.clear()
                self._inflight.clear()
                self._generations.clear()
                self._epoch += 1
                logger.info("Cache %s cleared (%d entries)", self._name, count)
                return
            self._entries.pop(key, None)
            self._inflight.pop(key, None)
            self._generations[key] = self._generations.get(key, 0) + 1

    def stats(self) -> CacheStats:
        with self._lock:
            now = self._clock()
            keys = [k for k, e in self._entries.items() if now - e.timestamp < e.ttl]
        return CacheStats(size=len(keys), keys=keys)
