"""Dual-threshold sliding-window rate limiting."""

from __future__ import annotations

from slidelimit.adapters.counter.in_memory import InMemoryCounterCache
from slidelimit.adapters.counter.sliding_window import SlidingWindowCounter
from slidelimit.services.limit_check_result import LimitCheckResult, LimitType
from slidelimit.services.rate_limiter import RateLimiter
from slidelimit.utils.clock import Clock, SystemClock
from slidelimit.utils.deferred import Deferred, later, now

__all__ = [
    "Clock",
    "Deferred",
    "InMemoryCounterCache",
    "LimitCheckResult",
    "LimitType",
    "RateLimiter",
    "SlidingWindowCounter",
    "SystemClock",
    "later",
    "now",
]
