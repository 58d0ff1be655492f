"""Tests for rate limit settings validation."""

import pytest
from pydantic import ValidationError

from slidelimit.core.config import LogSettings, RateLimitSettings


def test_rate_limit_settings_read_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RATE_LIMIT_WINDOW_LIMIT", "7")
    monkeypatch.setenv("RATE_LIMIT_NAMESPACE", "sensitive_api")
    monkeypatch.setenv("RATE_LIMIT_JITTER_FACTOR", "0.25")

    cfg = RateLimitSettings()

    assert cfg.window_limit == 7
    assert cfg.namespace == "sensitive_api"
    assert cfg.jitter_factor == 0.25


@pytest.mark.parametrize(
    "field",
    ["window_seconds", "observation_period_seconds", "window_limit", "period_limit"],
)
def test_rate_limit_settings_reject_values_below_one(monkeypatch: pytest.MonkeyPatch, field: str) -> None:
    monkeypatch.setenv(f"RATE_LIMIT_{field.upper()}", "0")

    with pytest.raises(ValidationError):
        RateLimitSettings()


def test_negative_jitter_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RATE_LIMIT_JITTER_FACTOR", "-0.1")

    with pytest.raises(ValidationError):
        RateLimitSettings()


def test_log_settings_defaults() -> None:
    cfg = LogSettings()

    assert cfg.format == "json"
    assert cfg.request_id_header == "X-Request-ID"
