"""Tests for sensitive data filtering and JSON formatting in logs."""

from __future__ import annotations

import json
import logging
from io import StringIO

import pytest

from slidelimit.core.logging import (
    JsonFormatter,
    RequestIdFilter,
    SensitiveDataFilter,
    clear_request_id,
    hash_identifier,
    set_request_id,
)


@pytest.fixture
def capture():
    """Logger wired like configure_logging(), writing to a buffer."""

    logger = logging.getLogger("test_slidelimit_logging")
    logger.setLevel(logging.INFO)
    logger.handlers.clear()
    logger.propagate = False

    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.addFilter(RequestIdFilter())
    handler.addFilter(SensitiveDataFilter())
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)

    yield logger, stream

    logger.handlers.clear()
    clear_request_id()


def test_redacts_api_keys_and_hashes_subjects(capture):
    logger, stream = capture

    logger.info(
        "rate_limit.exceeded",
        extra={
            "api_key": "sk-secret-123",
            "subject": "ip:203.0.113.7",
            "limit_type": "window",
        },
    )

    output = stream.getvalue()
    record = json.loads(output)
    assert "sk-secret-123" not in output
    assert "203.0.113.7" not in output
    assert record["api_key"] == "[REDACTED]"
    assert record["subject"] == hash_identifier("ip:203.0.113.7")
    assert record["limit_type"] == "window"


def test_safe_fields_pass_through(capture):
    logger, stream = capture

    logger.info(
        "rate_limit.allowed",
        extra={
            "subject_hash": "abc123",
            "window_count": 4,
            "period_count": 40,
            "remaining": 5,
        },
    )

    record = json.loads(stream.getvalue())
    assert record["message"] == "rate_limit.allowed"
    assert record["level"] == "info"
    assert record["subject_hash"] == "abc123"
    assert record["window_count"] == 4
    assert record["remaining"] == 5
    assert "[REDACTED]" not in stream.getvalue()


def test_plain_format_sees_masked_values(capture):
    logger, stream = capture
    logger.handlers[0].setFormatter(logging.Formatter("%(message)s %(client_ip)s"))

    logger.warning("rate_limit.exceeded", extra={"client_ip": "198.51.100.4"})

    assert stream.getvalue().strip() == f"rate_limit.exceeded {hash_identifier('198.51.100.4')}"


def test_exception_type_is_recorded(capture):
    logger, stream = capture

    try:
        raise ConnectionError("store unreachable")
    except ConnectionError:
        logger.exception("rate_limit.unavailable")

    assert json.loads(stream.getvalue())["exc_type"] == "ConnectionError"


def test_request_id_from_context_is_attached(capture):
    logger, stream = capture
    set_request_id("req-42")

    logger.warning("rate_limit.exceeded")

    assert json.loads(stream.getvalue())["request_id"] == "req-42"


def test_hash_identifier_is_stable_and_short():
    assert hash_identifier("ip:1.2.3.4") == hash_identifier("ip:1.2.3.4")
    assert hash_identifier("ip:1.2.3.4") != hash_identifier("ip:1.2.3.5")
    assert len(hash_identifier("anything")) == 16
