"""Counter storage and counting-engine interfaces.

``AbstractCounterCache`` is the storage seam (key/value float counters with
expiry). ``AbstractWindowCounter`` is the narrow capability the rate limiter
consumes: increment a subject and read its recent activity.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class AbstractCounterCache(ABC):
    """Interface for counter storage backends."""

    @abstractmethod
    def increment(self, key: str, step: float, ttl_seconds: int) -> float:
        """Add ``step`` to the counter stored under ``key``.

        Missing or expired counters start at 0.0. The expiry is (re)armed to
        ``ttl_seconds`` from now on every increment.

        Args:
            key: Counter key.
            step: Amount to add (may be negative).
            ttl_seconds: Lifetime of the counter after this write.

        Returns:
            The counter value after the increment.
        """
        raise NotImplementedError

    @abstractmethod
    def get(self, key: str) -> float | None:
        """Return the counter value, or None when absent or expired."""
        raise NotImplementedError


class AbstractWindowCounter(ABC):
    """Interface for sliding-window counting engines."""

    @abstractmethod
    def increment(self, subject: str, step: float = 1) -> None:
        """Record ``step`` units of activity for ``subject`` at the current time."""
        raise NotImplementedError

    @abstractmethod
    def latest_value(self, subject: str) -> float:
        """Return the accumulated count of the most recent window."""
        raise NotImplementedError

    @abstractmethod
    def time_series(self, subject: str) -> list[float]:
        """Return per-window values across the observation period, oldest first."""
        raise NotImplementedError
