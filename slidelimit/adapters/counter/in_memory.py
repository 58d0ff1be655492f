"""In-memory counter cache with per-key expiry.

Notes:
- Per-process only: running multiple workers gives each worker its own counters.
- Thread-safe: uses a lock around shared state.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from slidelimit.adapters.counter.base import AbstractCounterCache
from slidelimit.utils.clock import Clock, SystemClock

logger = logging.getLogger(__name__)


@dataclass
class _CounterItem:
    value: float
    expires_at: float


class InMemoryCounterCache(AbstractCounterCache):
    """Float counters keyed by string, expiring after a per-write TTL.

    Expired entries are dropped lazily when touched and in bulk on every write,
    which keeps memory bounded by the number of live keys.
    """

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock or SystemClock()
        self._lock = threading.RLock()
        self._store: dict[str, _CounterItem] = {}
        self._expirations = 0

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return f"InMemoryCounterCache(size={len(self._store)}, expirations={self._expirations})"

    def increment(self, key: str, step: float, ttl_seconds: int) -> float:
        """Add ``step`` to the counter under ``key`` and refresh its expiry.

        Raises:
            ValueError: If key is empty or ttl_seconds is invalid.
        """
        if not key:
            raise ValueError("key must be a non-empty string")
        if ttl_seconds < 1:
            raise ValueError("ttl_seconds must be >= 1")

        now = self._clock.time()
        with self._lock:
            self._evict_expired_locked(now)
            item = self._store.get(key)
            if item is None:
                item = _CounterItem(value=0.0, expires_at=0.0)
                self._store[key] = item
            item.value += step
            item.expires_at = now + ttl_seconds
            return item.value

    def get(self, key: str) -> float | None:
        now = self._clock.time()
        with self._lock:
            item = self._store.get(key)
            if item is None:
                return None
            if item.expires_at <= now:
                self._evict_single(key)
                return None
            return item.value

    def clear(self) -> None:
        """Remove all counters."""

        with self._lock:
            self._store.clear()
            self._expirations = 0

    def stats(self) -> dict[str, int]:
        """Return lightweight cache metrics without exposing keys."""

        with self._lock:
            return {
                "entries": len(self._store),
                "expirations": self._expirations,
            }

    def _evict_single(self, key: str) -> None:
        if self._store.pop(key, None) is not None:
            self._expirations += 1

    def _evict_expired_locked(self, now: float) -> None:
        expired_keys = [k for k, item in self._store.items() if item.expires_at <= now]
        for key in expired_keys:
            self._evict_single(key)
        if expired_keys:
            logger.debug("counter.expired", extra={"expired": len(expired_keys)})
