"""Tests for structured logging and correlation IDs."""
import json
import sys
import logging

from sports_catalog.core.logging import (
    ColoredFormatter, JSONFormatter, correlation_scope, get_correlation_id,
)


def make_record(message: str = "sync started", **extra) -> logging.LogRecord:
    record = logging.LogRecord("sports_catalog.test", logging.INFO, __file__, 1, message, (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    """Tests for JSONFormatter."""

    def test_core_fields(self):
        """Should emit level, logger and message as one JSON object."""
        data = json.loads(JSONFormatter().format(make_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "sports_catalog.test"
        assert data["message"] == "sync started"
        assert data["correlation_id"] == ""

    def test_correlation_id_and_extra(self):
        """Should include the active correlation ID and extra fields."""
        with correlation_scope("run-42"):
            data = json.loads(JSONFormatter().format(make_record(sport_code="NFL")))

        assert data["correlation_id"] == "run-42"
        assert data["extra"] == {"sport_code": "NFL"}

    def test_exception_text(self):
        """Should include the formatted exception."""
        try:
            raise RuntimeError("feed down")
        except RuntimeError:
            record = logging.LogRecord("x", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())

        data = json.loads(JSONFormatter().format(record))

        assert "RuntimeError: feed down" in data["exception"]


class TestColoredFormatter:
    """Tests for ColoredFormatter."""

    def test_appends_correlation_id(self):
        with correlation_scope("run-7"):
            line = ColoredFormatter().format(make_record())

        assert "sync started" in line
        assert "correlation_id=run-7" in line


class TestCorrelationScope:
    """Tests for correlation_scope()."""

    def test_generates_and_restores(self):
        """Should generate an ID inside the block and restore the previous one after."""
        before = get_correlation_id()

        with correlation_scope() as run_id:
            assert run_id
            assert get_correlation_id() == run_id

        assert get_correlation_id() == before

    def test_reuses_enclosing_id(self):
        """Should keep the enclosing request's ID for nested runs."""
        with correlation_scope("request-1"):
            with correlation_scope() as inner:
                assert inner == "request-1"
