"""Rate limiting dependency for FastAPI routes.

This module wires the sliding-window rate limiter into the HTTP layer.

Strategy:
- One limiter per request, keyed by API key (hashed) or client IP.
- Every request is counted first, then the window limit (bursts) and the
  period limit (quota) are read back. A request that takes either count past
  its limit is rejected with 429; exactly ``limit`` requests get through.
- Rejected requests stay counted, so a client that keeps retrying while
  throttled keeps its wait growing instead of draining the window.
- Counter failures fail open by default: the request proceeds and the failure
  is logged.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Header, Request

from slidelimit.adapters.counter.base import AbstractCounterCache
from slidelimit.adapters.counter.in_memory import InMemoryCounterCache
from slidelimit.core.config import settings
from slidelimit.core.errors import RateLimitAppError, ValidationAppError
from slidelimit.core.logging import hash_identifier
from slidelimit.services.limit_check_result import LimitCheckResult
from slidelimit.services.rate_limiter import RateLimiter
from slidelimit.utils.clock import NANOSECONDS_PER_SECOND, Clock

logger = logging.getLogger(__name__)


_counter_cache: AbstractCounterCache | None = None
_clock: Clock | None = None


def get_counter_cache() -> AbstractCounterCache:
    """Return the process-wide counter cache, creating it on first use."""

    global _counter_cache

    if _counter_cache is None:
        _counter_cache = InMemoryCounterCache(clock=_clock)
    return _counter_cache


def configure_rate_limit_backend(
    cache: AbstractCounterCache | None = None,
    clock: Clock | None = None,
) -> None:
    """Replace the process-wide counter cache and time source.

    Passing no cache resets to a fresh in-memory cache on next use; passing
    no clock restores the wall clock.
    """

    global _counter_cache, _clock
    _counter_cache = cache
    _clock = clock


def build_rate_limit_subject(request: Request, x_api_key: str | None) -> str:
    """Build the limiter subject for the current request.

    Args:
        request: FastAPI request.
        x_api_key: API key value from the X-API-Key header.

    Returns:
        str: Namespaced subject; API keys are hashed so they never reach
            counter keys or messages.

    Raises:
        ValidationAppError: If the X-API-Key header is blank or too long.
    """

    if x_api_key is not None:
        max_length = settings.rate_limit.api_key_max_length
        if not x_api_key.strip():
            raise ValidationAppError(
                code="invalid_api_key",
                message="X-API-Key header must not be empty.",
                details={"hint": "Omit the header to be limited by client IP."},
            )
        if len(x_api_key) > max_length:
            raise ValidationAppError(
                code="invalid_api_key",
                message=f"X-API-Key header must be at most {max_length} characters.",
                details={"hint": "Send the key exactly as issued."},
            )
        return f"api_key:{hash_identifier(x_api_key)}"

    client_host = request.client.host if request.client else "unknown"
    return f"ip:{client_host}"


def build_rate_limiter(subject: str) -> RateLimiter:
    """Create a limiter for ``subject`` from the current settings."""

    cfg = settings.rate_limit
    return RateLimiter.create(
        subject,
        cfg.namespace,
        cfg.window_seconds,
        cfg.observation_period_seconds,
        get_counter_cache(),
        _clock,
    )


def retry_after_seconds(result: LimitCheckResult, jitter_factor: float = 0.0) -> int:
    """Whole seconds a throttled client should wait, rounded up.

    With a positive jitter factor the jittered nanosecond estimate is used so
    that clients throttled together do not all retry at the same second.
    """

    if jitter_factor <= 0:
        return result.get_wait_time_seconds()
    wait_ns = result.get_wait_time(jitter_factor)
    return -(-wait_ns // NANOSECONDS_PER_SECOND)


async def enforce_rate_limit(
    request: Request,
    x_api_key: Annotated[str | None, Header(alias="X-API-Key")] = None,
) -> None:
    """FastAPI dependency enforcing window and period limits.

    When enabled, counts the request for the requester and then reads both
    limits back; the request is rejected when either count has gone past its
    limit.

    Args:
        request: FastAPI request.
        x_api_key: API key from X-API-Key header.

    Raises:
        ValidationAppError: When the X-API-Key header is unusable.
        RateLimitAppError: When the window or period limit is exceeded.
    """

    cfg = settings.rate_limit
    if not cfg.enabled:
        return

    subject = build_rate_limit_subject(request, x_api_key)
    subject_hash = hash_identifier(subject)
    limiter = build_rate_limiter(subject)

    checks = (
        limiter.check_window_limit(cfg.window_limit),
        limiter.check_period_limit(cfg.period_limit),
    )

    try:
        limiter.increment()
        # The count includes this request, so reaching the limit still passes
        exceeded = next((check for check in checks if check.count > check.limit), None)
    except Exception as exc:
        if not cfg.fail_open:
            raise
        logger.error(
            "rate_limit.unavailable",
            extra={
                "subject_hash": subject_hash,
                "error_type": type(exc).__name__,
                "fail_open": True,
            },
        )
        return

    if exceeded is None:
        logger.info(
            "rate_limit.allowed",
            extra={
                "subject_hash": subject_hash,
                "window_count": checks[0].count,
                "period_count": checks[1].count,
                "remaining": min(check.limit - check.count for check in checks),
            },
        )
        return

    retry_after = retry_after_seconds(exceeded, cfg.jitter_factor)
    logger.warning(
        "rate_limit.exceeded",
        extra={
            "subject_hash": subject_hash,
            "limit_type": exceeded.limit_type,
            "count": exceeded.count,
            "limit": exceeded.limit,
            "window_s": exceeded.window_size,
            "retry_after_s": retry_after,
        },
    )

    raise RateLimitAppError(
        code="rate_limit_exceeded",
        message=exceeded.get_limit_exceeded_message() or "Rate limit exceeded.",
        details={
            "limit": exceeded.limit,
            "limit_type": exceeded.limit_type,
            "remaining": 0,
            "retry_after": retry_after,
        },
    )
