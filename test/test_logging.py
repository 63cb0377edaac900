"""
Tests for structured JSON logging.
"""

import json
import logging

import pytest

from phonebridge.shared.logging import (
    StructuredFormatter,
    bind_correlation_id,
    correlation_id_var,
    get_logger,
    log_with_context,
)


class _Capture(logging.Handler):
    def __init__(self) -> None:
        super().__init__()
        self.setFormatter(StructuredFormatter())
        self.lines: list[dict] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.lines.append(json.loads(self.format(record)))


@pytest.fixture
def capture():
    logger = get_logger("phonebridge.test")
    handler = _Capture()
    logger.addHandler(handler)
    token = correlation_id_var.set(None)
    try:
        yield logger, handler
    finally:
        correlation_id_var.reset(token)
        logger.removeHandler(handler)


class TestStructuredFormatter:
    def test_extra_fields_are_included(self, capture) -> None:
        logger, handler = capture

        logger.info("Ringing software client", extra={"attempt": 3, "call_sid": "CA1"})

        line = handler.lines[-1]
        assert line["message"] == "Ringing software client"
        assert line["level"] == "INFO"
        assert line["logger"] == "phonebridge.test"
        assert line["attempt"] == 3
        assert line["call_sid"] == "CA1"
        assert "correlation_id" not in line

    def test_correlation_id(self, capture) -> None:
        logger, handler = capture

        bind_correlation_id("CA123")
        logger.info("hello")

        assert handler.lines[-1]["correlation_id"] == "CA123"

    def test_log_with_context(self, capture) -> None:
        logger, handler = capture

        log_with_context(logger, logging.WARNING, "Call status updated", classification="missed")

        line = handler.lines[-1]
        assert line["level"] == "WARNING"
        assert line["classification"] == "missed"

    def test_exception_is_rendered(self, capture) -> None:
        logger, handler = capture

        try:
            raise ValueError("boom")
        except ValueError:
            logger.exception("Failed")

        assert "ValueError: boom" in handler.lines[-1]["exception"]

    def test_get_logger_is_idempotent(self) -> None:
        first = get_logger("phonebridge.idempotent")
        second = get_logger("phonebridge.idempotent")

        assert first is second
        assert len(first.handlers) == 1
        assert first.propagate is False
