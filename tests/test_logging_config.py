"""Tests for logging configuration module."""

from __future__ import annotations

import json
import logging
import os
from unittest.mock import patch

from linerelay.logging_config import (
    JSONFormatter,
    TextFormatter,
    configure_logging,
    get_log_format,
    get_log_level,
    get_logger,
)


def make_record(
    name: str = "linerelay.model.agent",
    level: int = logging.INFO,
    msg: str = "Node %d received value %d from node %d",
    args: tuple = (2, 17, 1),
    **extra,
) -> logging.LogRecord:
    """Create a log record, optionally with extra attributes."""
    record = logging.LogRecord(
        name=name,
        level=level,
        pathname="/path/to/agent.py",
        lineno=42,
        msg=msg,
        args=args,
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestGetLogLevel:
    """Tests for get_log_level function."""

    def test_default_is_info(self) -> None:
        """Default log level should be INFO."""
        with patch.dict(os.environ, {}, clear=True):
            assert get_log_level() == logging.INFO

    def test_debug_level(self) -> None:
        """LOG_LEVEL=DEBUG should return logging.DEBUG."""
        with patch.dict(os.environ, {"LOG_LEVEL": "DEBUG"}):
            assert get_log_level() == logging.DEBUG

    def test_warn_alias(self) -> None:
        """LOG_LEVEL=WARN should work as alias for WARNING."""
        with patch.dict(os.environ, {"LOG_LEVEL": "WARN"}):
            assert get_log_level() == logging.WARNING

    def test_case_insensitive(self) -> None:
        """Log level should be case insensitive."""
        with patch.dict(os.environ, {"LOG_LEVEL": "error"}):
            assert get_log_level() == logging.ERROR

    def test_invalid_level_defaults_to_info(self) -> None:
        """Invalid log level should default to INFO."""
        with patch.dict(os.environ, {"LOG_LEVEL": "LOUD"}):
            assert get_log_level() == logging.INFO


class TestGetLogFormat:
    """Tests for get_log_format function."""

    def test_default_is_text(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            assert get_log_format() == "text"

    def test_json_format_case_insensitive(self) -> None:
        with patch.dict(os.environ, {"LOG_FORMAT": "JSON"}):
            assert get_log_format() == "json"

    def test_invalid_format_defaults_to_text(self) -> None:
        with patch.dict(os.environ, {"LOG_FORMAT": "yaml"}):
            assert get_log_format() == "text"


class TestJSONFormatter:
    """Tests for JSON log formatter."""

    def test_formats_receipt_line(self) -> None:
        """Receipt lines should render as valid JSON with the formatted message."""
        data = json.loads(JSONFormatter().format(make_record()))

        assert data["message"] == "Node 2 received value 17 from node 1"
        assert data["level"] == "INFO"
        assert data["logger"] == "linerelay.model.agent"
        assert "timestamp" in data
        assert "source" not in data

    def test_includes_sim_time(self) -> None:
        """sim_time extra should become a top-level field, not an extra."""
        data = json.loads(JSONFormatter().format(make_record(sim_time=2.5)))

        assert data["sim_time"] == 2.5
        assert "extra" not in data

    def test_includes_source_for_error(self) -> None:
        data = json.loads(JSONFormatter().format(make_record(level=logging.ERROR)))

        assert data["source"]["line"] == 42
        assert data["source"]["file"] == "/path/to/agent.py"

    def test_other_extras_are_kept(self) -> None:
        data = json.loads(JSONFormatter().format(make_record(frame_id="abc")))

        assert data["extra"] == {"frame_id": "abc"}


class TestTextFormatter:
    """Tests for text log formatter."""

    def test_shortens_logger_name(self) -> None:
        """Logger names under linerelay should be shortened."""
        output = TextFormatter(use_colors=False).format(make_record())

        assert "[model.agent]" in output
        assert "linerelay.model.agent" not in output
        assert "Node 2 received value 17 from node 1" in output

    def test_renders_sim_time(self) -> None:
        output = TextFormatter(use_colors=False).format(make_record(sim_time=1.5))

        assert "(t=1.50)" in output

    def test_no_sim_time_without_extra(self) -> None:
        output = TextFormatter(use_colors=False).format(make_record())

        assert "(t=" not in output

    def test_includes_source_for_debug(self) -> None:
        record = make_record(level=logging.DEBUG)
        record.filename = "agent.py"

        output = TextFormatter(use_colors=False).format(record)

        assert "agent.py:42" in output


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def test_configures_linerelay_logger(self) -> None:
        configure_logging(level=logging.DEBUG, format_type="text")
        logger = logging.getLogger("linerelay")

        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert logger.propagate is False

    def test_uses_json_formatter(self) -> None:
        configure_logging(level=logging.INFO, format_type="json")
        logger = logging.getLogger("linerelay")

        assert isinstance(logger.handlers[0].formatter, JSONFormatter)

    def test_repeated_calls_do_not_duplicate_handlers(self) -> None:
        configure_logging(level=logging.INFO, format_type="text")
        configure_logging(level=logging.INFO, format_type="text")

        assert len(logging.getLogger("linerelay").handlers) == 1


class TestGetLogger:
    """Tests for get_logger function."""

    def test_prefixes_foreign_names(self) -> None:
        assert get_logger("tools").name == "linerelay.tools"

    def test_keeps_namespaced_names(self) -> None:
        assert get_logger("linerelay.engine").name == "linerelay.engine"
