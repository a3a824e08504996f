"""Tests for structured logging configuration."""

from __future__ import annotations

import io
import json
import logging

import pytest
import structlog

from seqnum.core.logging import configure_logging


@pytest.fixture(autouse=True)
def reset_logging() -> None:
    """Reset logging configuration between tests."""
    structlog.reset_defaults()
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    root.setLevel(logging.WARNING)


def _capture() -> io.StringIO:
    captured = io.StringIO()
    logging.getLogger().handlers[0].setStream(captured)
    return captured


def test_configure_logging_console_output() -> None:
    configure_logging(json_output=False, level="INFO")

    assert logging.getLogger().level == logging.INFO
    assert len(logging.getLogger().handlers) == 1


def test_configure_logging_replaces_handlers() -> None:
    configure_logging(level="INFO")
    configure_logging(level="INFO")
    assert len(logging.getLogger().handlers) == 1


def test_configure_logging_json_output() -> None:
    """structlog events render as one JSON object per line."""
    configure_logging(json_output=True, level="INFO")
    captured = _capture()

    log = structlog.get_logger("test_json")
    log.info("test message", key="value")

    data = json.loads(captured.getvalue().strip())
    assert data["event"] == "test message"
    assert data["key"] == "value"
    assert data["level"] == "info"
    assert "timestamp" in data


def test_stdlib_records_render_as_json() -> None:
    """Library modules use stdlib loggers; their records get the same shape."""
    configure_logging(json_output=True, level="INFO")
    captured = _capture()

    logging.getLogger("seqnum.store.base").warning("Version conflict on %s", "invoice")

    data = json.loads(captured.getvalue().strip())
    assert data["event"] == "Version conflict on invoice"
    assert data["level"] == "warning"
    assert data["logger"] == "seqnum.store.base"


def test_level_filters_records() -> None:
    configure_logging(json_output=True, level="WARNING")
    captured = _capture()

    logging.getLogger("seqnum.core.generator").debug("Generated %s", "X-1")
    assert captured.getvalue() == ""


def test_configure_logging_level_debug() -> None:
    configure_logging(json_output=False, level="DEBUG")
    assert logging.getLogger().level == logging.DEBUG


def test_configure_logging_level_error() -> None:
    configure_logging(json_output=False, level="error")
    assert logging.getLogger().level == logging.ERROR
