"""Sliding-window counting engine on top of a counter cache.

Time is cut into frames of ``window_size`` seconds aligned on the epoch. Each
frame has its own counter in the cache, living long enough to cover the whole
observation period. The latest value blends the current frame with the
not-yet-elapsed share of the previous one, so the window slides smoothly
instead of resetting at frame boundaries.
"""

from __future__ import annotations

import logging

from slidelimit.adapters.counter.base import AbstractCounterCache, AbstractWindowCounter
from slidelimit.utils.clock import Clock, SystemClock

logger = logging.getLogger(__name__)


class SlidingWindowCounter(AbstractWindowCounter):
    """Counts activity per subject over sliding windows.

    Args:
        cache_name: Namespace prefix for cache keys; limiters sharing a name
            share counters.
        window_size: Frame length in seconds.
        observation_period: Horizon covered by ``time_series`` in seconds.
            Expected to be a multiple of ``window_size``.
        counter_cache: Storage backend.
        clock: Time source (defaults to the wall clock).

    Raises:
        ValueError: If window_size or observation_period is below 1.
    """

    def __init__(
        self,
        cache_name: str,
        window_size: int,
        observation_period: int,
        counter_cache: AbstractCounterCache,
        clock: Clock | None = None,
    ) -> None:
        if window_size < 1:
            raise ValueError("window_size must be >= 1")
        if observation_period < 1:
            raise ValueError("observation_period must be >= 1")

        self._cache_name = cache_name
        self._window_size = window_size
        self._observation_period = observation_period
        self._cache = counter_cache
        self._clock = clock or SystemClock()

    @property
    def frame_count(self) -> int:
        """Number of frames in the observation period."""
        return max(1, self._observation_period // self._window_size)

    def _frame_start(self, now: float) -> int:
        return int(now // self._window_size) * self._window_size

    def _key(self, subject: str, frame_start: int) -> str:
        return f"{self._cache_name}:{subject}:{frame_start}"

    def _value_at(self, subject: str, frame_start: int) -> float:
        return self._cache.get(self._key(subject, frame_start)) or 0.0

    def increment(self, subject: str, step: float = 1) -> None:
        frame_start = self._frame_start(self._clock.time())
        value = self._cache.increment(
            self._key(subject, frame_start),
            step,
            self._observation_period + self._window_size,
        )
        logger.debug(
            "counter.increment",
            extra={
                "cache_name": self._cache_name,
                "frame_start": frame_start,
                "step": step,
                "value": value,
            },
        )

    def latest_value(self, subject: str) -> float:
        now = self._clock.time()
        frame_start = self._frame_start(now)
        current = self._value_at(subject, frame_start)
        previous = self._value_at(subject, frame_start - self._window_size)

        remaining_share = 1.0 - (now - frame_start) / self._window_size
        return current + previous * remaining_share

    def time_series(self, subject: str) -> list[float]:
        current_start = self._frame_start(self._clock.time())
        first_start = current_start - (self.frame_count - 1) * self._window_size
        return [
            self._value_at(subject, frame_start)
            for frame_start in range(first_start, current_start + 1, self._window_size)
        ]
