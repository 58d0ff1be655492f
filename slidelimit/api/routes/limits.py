from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Header, Request

from slidelimit.core.config import settings
from slidelimit.core.rate_limit import (
    build_rate_limit_subject,
    build_rate_limiter,
    enforce_rate_limit,
)
from slidelimit.schemas.limits import LimitStatus, PingResponse, RateLimitStatusResponse

router = APIRouter(tags=["Limits"])


@router.get("/limits/status", response_model=RateLimitStatusResponse)
async def limit_status(
    request: Request,
    x_api_key: Annotated[str | None, Header(alias="X-API-Key")] = None,
) -> RateLimitStatusResponse:
    """Report the caller's window and period usage without counting the request.

    Args:
        request: FastAPI request.
        x_api_key: API key from X-API-Key header.

    Returns:
        RateLimitStatusResponse: Count, limit and estimated wait per limit.
    """

    cfg = settings.rate_limit
    subject = build_rate_limit_subject(request, x_api_key)
    limiter = build_rate_limiter(subject)

    return RateLimitStatusResponse(
        subject=subject,
        window_seconds=cfg.window_seconds,
        observation_period_seconds=cfg.observation_period_seconds,
        limits=[
            LimitStatus.from_result(limiter.check_window_limit(cfg.window_limit)),
            LimitStatus.from_result(limiter.check_period_limit(cfg.period_limit)),
        ],
    )


@router.get(
    "/ping",
    response_model=PingResponse,
    dependencies=[Depends(enforce_rate_limit)],
)
async def ping() -> PingResponse:
    """Rate-limited endpoint for clients to probe their quota."""

    return PingResponse()
