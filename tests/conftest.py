"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
Environment defaults are set before anything imports the settings module.
"""

import os

import pytest

# CRITICAL: Set these before any imports that might load settings
os.environ["APP_ENV"] = "testing"
os.environ.setdefault("RATE_LIMIT_ENABLED", "true")
os.environ.setdefault("RATE_LIMIT_WINDOW_SECONDS", "60")
os.environ.setdefault("RATE_LIMIT_OBSERVATION_PERIOD_SECONDS", "3600")
os.environ.setdefault("RATE_LIMIT_WINDOW_LIMIT", "100")
os.environ.setdefault("RATE_LIMIT_PERIOD_LIMIT", "1000")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from slidelimit.utils.clock import Clock  # noqa: E402


class FakeClock(Clock):
    """Deterministic clock; sleeping advances time instead of blocking."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.current = start
        self.slept: list[float] = []

    def time(self) -> float:
        return self.current

    def sleep(self, seconds: float) -> None:
        self.slept.append(seconds)
        self.current += seconds

    def advance(self, seconds: float) -> None:
        self.current += seconds


@pytest.fixture
def fake_clock() -> FakeClock:
    """Clock frozen at the start of a 60-second frame."""
    return FakeClock(start=60_000.0)
