"""Outcome of a single rate limit check.

A ``LimitCheckResult`` answers three questions about one check: is the limit
exceeded, how to describe it, and how long to wait before retrying. The count
is a deferred value: it is read from the counter the first time any of those
questions needs it and then reused for the lifetime of the result.

Wait-time model:
    Requests are assumed to be spread uniformly across the window, so the
    share of the window that must elapse before the count falls back under the
    limit equals the share by which it is over: ``(count - limit) / count``.
    This is an estimate; true arrival times inside the window are unknown.
"""

from __future__ import annotations

import logging
import math
import random
from enum import Enum
from fractions import Fraction

from slidelimit.utils.clock import NANOSECONDS_PER_SECOND
from slidelimit.utils.deferred import Deferred

logger = logging.getLogger(__name__)

# Jitter is drawn in steps of 1/JITTER_PRECISION of the maximum extra delay
JITTER_PRECISION = 1000


class LimitType(str, Enum):
    """Kind of limit a result was produced for."""

    WINDOW = "window"
    PERIOD = "period"


class LimitCheckResult:
    """Result of checking one limit for one subject.

    Args:
        subject: Identifier being rate limited (IP address, user id, API key).
        count: Deferred current count for this limit type.
        limit: Threshold; reaching it counts as exceeded.
        limit_type: ``"window"`` or ``"period"``.
        window_size: Window length in seconds, used for wait-time estimates.

    Raises:
        ValueError: If limit or window_size is below 1, or limit_type is unknown.
    """

    def __init__(
        self,
        subject: str,
        count: Deferred[int],
        limit: int,
        limit_type: LimitType | str,
        window_size: int,
    ) -> None:
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_size < 1:
            raise ValueError("window_size must be >= 1")

        self._subject = subject
        self._count = count
        self._limit = limit
        self._limit_type = LimitType(limit_type)
        self._window_size = window_size

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return (
            f"LimitCheckResult(limit_type={self._limit_type.value!r}, limit={self._limit}, "
            f"window_size={self._window_size}, count={self._count!r})"
        )

    @property
    def subject(self) -> str:
        return self._subject

    @property
    def count(self) -> int:
        """Current count; reads the counter on first access only."""
        if not self._count.resolved:
            value = self._count.get()
            logger.debug(
                "limit_check.evaluated",
                extra={
                    "limit_type": self._limit_type.value,
                    "count": value,
                    "limit": self._limit,
                },
            )
            return value
        return self._count.get()

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def limit_type(self) -> str:
        return self._limit_type.value

    @property
    def window_size(self) -> int:
        return self._window_size

    def is_limit_exceeded(self) -> bool:
        """Return True when the count has reached or passed the limit."""
        return self.count >= self._limit

    def get_limit_exceeded_message(self) -> str | None:
        """Describe the exceeded limit.

        Returns:
            A human-readable sentence, or None if the limit is not exceeded.
        """

        if not self.is_limit_exceeded():
            return None

        return (
            f"Rate limit exceeded for {self._subject}: {self.count} actions "
            f"in the {self._limit_type.value} (limit: {self._limit})"
        )

    def _excess_ratio(self) -> Fraction:
        count = self.count
        return Fraction(count - self._limit, count)

    def get_wait_time(self, jitter_factor: float = 0.0) -> int:
        """Estimate how long to wait before the limit clears.

        Args:
            jitter_factor: Upper bound of the random extra delay, as a fraction
                of the base wait. ``0`` disables jitter and makes the result
                deterministic.

        Returns:
            Wait time in nanoseconds, rounded up; 0 when not exceeded or when
            the count sits exactly on the limit.

        Raises:
            ValueError: If jitter_factor is negative.
        """

        if jitter_factor < 0:
            raise ValueError("jitter_factor must be >= 0")

        if not self.is_limit_exceeded():
            return 0

        # Scale after taking the ratio so small excesses keep their precision
        wait = math.ceil(self._window_size * NANOSECONDS_PER_SECOND * self._excess_ratio())

        if jitter_factor > 0 and wait > 0:
            share = random.randint(0, JITTER_PRECISION) / JITTER_PRECISION
            wait += int(wait * jitter_factor * share)

        return wait

    def get_wait_time_seconds(self) -> int:
        """Estimate the wait in whole seconds, rounded up and without jitter."""

        if not self.is_limit_exceeded():
            return 0

        return math.ceil(self._window_size * self._excess_ratio())
