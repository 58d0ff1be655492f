"""Dual-threshold rate limiter facade.

``RateLimiter`` binds one subject to a sliding-window counting engine and
offers two symmetric checks:

- window limit: activity in the most recent window (burst control),
- period limit: activity summed over the whole observation period (quota).

Both checks return a ``LimitCheckResult`` whose count is deferred, so asking
for both and inspecting only one costs a single counter read. The period sum
aggregates every frame and is the more expensive of the two.

Example:
    >>> limiter = RateLimiter.create("user-123", "api_requests", 60, 3600, cache)
    >>> limiter.increment()
    >>> result = limiter.check_window_limit(100)
    >>> if result.is_limit_exceeded():
    ...     clock.sleep_ns(result.get_wait_time(jitter_factor=0.1))
"""

from __future__ import annotations

from slidelimit.adapters.counter.base import AbstractCounterCache, AbstractWindowCounter
from slidelimit.adapters.counter.sliding_window import SlidingWindowCounter
from slidelimit.services.limit_check_result import LimitCheckResult, LimitType
from slidelimit.utils.clock import Clock, SystemClock
from slidelimit.utils.deferred import later


class RateLimiter:
    """Rate limiter for a single subject.

    Holds no state of its own beyond its configuration; counts live in the
    counting engine. Engine failures propagate unchanged so callers can choose
    to fail open or closed.

    Args:
        subject: Identifier being rate limited (IP address, user id, API key).
        counter: Sliding-window counting engine.
        window_size: Window length in seconds.

    Raises:
        ValueError: If window_size is below 1.
    """

    def __init__(self, subject: str, counter: AbstractWindowCounter, window_size: int) -> None:
        if window_size < 1:
            raise ValueError("window_size must be >= 1")

        self._subject = subject
        self._counter = counter
        self._window_size = window_size

    @classmethod
    def create(
        cls,
        subject: str,
        cache_name: str,
        window_size: int,
        observation_period: int,
        counter_cache: AbstractCounterCache,
        clock: Clock | None = None,
    ) -> RateLimiter:
        """Build a limiter backed by a ``SlidingWindowCounter``.

        Args:
            subject: Identifier being rate limited.
            cache_name: Namespace for counter keys; limiters with different
                names keep separate counts for the same subject.
            window_size: Window length in seconds.
            observation_period: Period covered by the period limit, in seconds.
            counter_cache: Storage backend for the counters.
            clock: Optional time source; the wall clock when omitted.

        Returns:
            Configured RateLimiter.
        """

        counter = SlidingWindowCounter(
            cache_name,
            window_size,
            observation_period,
            counter_cache,
            clock or SystemClock(),
        )
        return cls(subject, counter, window_size)

    @property
    def subject(self) -> str:
        return self._subject

    @property
    def window_size(self) -> int:
        return self._window_size

    def increment(self, step: int = 1) -> None:
        """Record ``step`` units of activity for the subject."""
        self._counter.increment(self._subject, step)

    def get_latest_value(self) -> int:
        """Return the latest window count, truncated toward zero."""
        return int(self._counter.latest_value(self._subject))

    def get_total(self) -> int:
        """Return the count summed over the observation period, truncated toward zero."""
        return int(sum(self._counter.time_series(self._subject), 0.0))

    def check_window_limit(self, window_limit: int) -> LimitCheckResult:
        """Check the limit for the most recent window.

        The window count is only read when the result is first inspected.

        Args:
            window_limit: Maximum number of actions allowed in the window.

        Returns:
            LimitCheckResult for the window limit.

        Raises:
            ValueError: If window_limit is below 1.
        """

        return LimitCheckResult(
            self._subject,
            later(self.get_latest_value),
            window_limit,
            LimitType.WINDOW,
            self._window_size,
        )

    def check_period_limit(self, period_limit: int) -> LimitCheckResult:
        """Check the limit for the whole observation period.

        The period total is only read when the result is first inspected.

        Args:
            period_limit: Maximum number of actions allowed in the period.

        Returns:
            LimitCheckResult for the period limit.

        Raises:
            ValueError: If period_limit is below 1.
        """

        return LimitCheckResult(
            self._subject,
            later(self.get_total),
            period_limit,
            LimitType.PERIOD,
            self._window_size,
        )
