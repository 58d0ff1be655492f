"""Time source abstraction.

Components that depend on the current time take a ``Clock`` so tests can
inject a deterministic implementation instead of patching the ``time`` module.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod

NANOSECONDS_PER_SECOND = 1_000_000_000


class Clock(ABC):
    """Interface for a time source that can also pause execution."""

    @abstractmethod
    def time(self) -> float:
        """Return the current UNIX time in seconds."""
        raise NotImplementedError

    @abstractmethod
    def sleep(self, seconds: float) -> None:
        """Block the current thread for ``seconds``."""
        raise NotImplementedError

    def sleep_ns(self, nanoseconds: int) -> None:
        """Block for a duration expressed in nanoseconds.

        Convenient with ``LimitCheckResult.get_wait_time()``, which returns
        nanoseconds. Non-positive durations return immediately.
        """

        if nanoseconds <= 0:
            return
        self.sleep(nanoseconds / NANOSECONDS_PER_SECOND)


class SystemClock(Clock):
    """Wall clock backed by the ``time`` module."""

    def time(self) -> float:
        return time.time()

    def sleep(self, seconds: float) -> None:
        time.sleep(seconds)
