from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from slidelimit.services.limit_check_result import LimitCheckResult


class LimitStatus(BaseModel):
    """State of one limit (window or period) for the caller."""

    limit_type: Literal["window", "period"] = Field(..., description="Which limit this entry describes")
    count: int = Field(..., description="Actions counted for this limit")
    limit: int = Field(..., ge=1, description="Configured threshold; reaching it counts as exceeded")
    exceeded: bool = Field(..., description="Whether count has reached the limit, so the next counted request is rejected")
    wait_seconds: int = Field(..., ge=0, description="Estimated seconds until the limit clears")
    message: str | None = Field(None, description="Human-readable description when exceeded")

    @classmethod
    def from_result(cls, result: LimitCheckResult) -> "LimitStatus":
        return cls(
            limit_type=result.limit_type,
            count=result.count,
            limit=result.limit,
            exceeded=result.is_limit_exceeded(),
            wait_seconds=result.get_wait_time_seconds(),
            message=result.get_limit_exceeded_message(),
        )


class RateLimitStatusResponse(BaseModel):
    """Response model for the rate limit status endpoint."""

    subject: str = Field(..., description="Identifier the caller is counted under")
    window_seconds: int = Field(..., description="Sliding window size in seconds")
    observation_period_seconds: int = Field(..., description="Period covered by the period limit")
    limits: list[LimitStatus] = Field(default_factory=list)


class PingResponse(BaseModel):
    status: str = "ok"
