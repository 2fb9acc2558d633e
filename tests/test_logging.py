"""Tests for logging configuration."""

import json
import logging
import sys
from unittest.mock import patch

from sqlvec.config import DatabaseSettings, Environment, Settings
from sqlvec.logging_config import (
    DevFormatter,
    JSONFormatter,
    get_logger,
    setup_logging,
)


def _record(level: int = logging.INFO, msg: str = "Test message", **extra: object):
    record = logging.LogRecord(
        name="test",
        level=level,
        pathname="/app/module.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    """Tests for JSON log formatter."""

    def test_format_basic_message(self) -> None:
        """Basic log message is formatted as JSON."""
        data = json.loads(JSONFormatter().format(_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "test"
        assert data["message"] == "Test message"
        assert "timestamp" in data
        assert "extra" not in data

    def test_format_includes_file_info(self) -> None:
        """Log includes file and line information."""
        data = json.loads(JSONFormatter().format(_record(logging.ERROR)))

        assert data["file"] == "/app/module.py:42"

    def test_format_includes_extra(self) -> None:
        """Fields passed through ``extra`` are kept."""
        record = _record(table="vectors_docs", candidates=5)

        data = json.loads(JSONFormatter().format(record))

        assert data["extra"] == {"table": "vectors_docs", "candidates": 5}

    def test_format_with_exception(self) -> None:
        """Exception info is included in output."""
        try:
            raise ValueError("test error")
        except ValueError:
            exc_info = sys.exc_info()

        record = _record(logging.ERROR, "Error")
        record.exc_info = exc_info

        data = json.loads(JSONFormatter().format(record))

        assert "exception" in data
        assert "ValueError" in data["exception"]


class TestDevFormatter:
    """Tests for development formatter."""

    def test_format_includes_level(self) -> None:
        """Development format includes level."""
        record = logging.LogRecord(
            name="sqlvec.vectorstore",
            level=logging.WARNING,
            pathname="test.py",
            lineno=10,
            msg="Warning message",
            args=(),
            exc_info=None,
        )

        output = DevFormatter().format(record)

        assert "WARNING" in output
        assert "sqlvec.vectorstore" in output
        assert "Warning message" in output


class TestSetupLogging:
    """Tests for logging setup."""

    def test_returns_root_logger(self) -> None:
        """setup_logging returns root logger."""
        logger = setup_logging(level="INFO", json_output=False)
        assert logger is logging.getLogger()

    def test_uses_json_in_production(self) -> None:
        """JSON output is used in production environment."""
        mock_settings = Settings(environment=Environment.PRODUCTION)

        with patch("sqlvec.logging_config.get_settings", return_value=mock_settings):
            setup_logging()

        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JSONFormatter)

    def test_uses_dev_formatter_in_development(self) -> None:
        """Dev formatter is used in development environment."""
        mock_settings = Settings(environment=Environment.DEVELOPMENT)

        with patch("sqlvec.logging_config.get_settings", return_value=mock_settings):
            setup_logging()

        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, DevFormatter)

    def test_level_override(self) -> None:
        """Log level can be overridden."""
        setup_logging(level="DEBUG", json_output=False)
        assert logging.getLogger().level == logging.DEBUG

    def test_quiets_database_loggers(self) -> None:
        """SQL statement logging is raised to WARNING."""
        setup_logging(level="DEBUG", json_output=False)
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
        assert logging.getLogger("aiomysql").level == logging.WARNING

    def test_echo_keeps_sql_logging(self) -> None:
        """An echoing engine keeps SQL statements at the chosen level."""
        mock_settings = Settings(database=DatabaseSettings(echo=True))

        with patch("sqlvec.logging_config.get_settings", return_value=mock_settings):
            setup_logging(level="DEBUG", json_output=False)

        assert logging.getLogger("sqlalchemy.engine").level == logging.DEBUG
        assert logging.getLogger("httpx").level == logging.WARNING


class TestGetLogger:
    """Tests for named logger retrieval."""

    def test_returns_named_logger(self) -> None:
        """get_logger returns a logger with the given name."""
        logger = get_logger("sqlvec.module")
        assert logger.name == "sqlvec.module"

    def test_logger_hierarchy(self) -> None:
        """Child loggers inherit from root."""
        setup_logging(level="WARNING", json_output=False)
        child = get_logger("sqlvec.sub")

        assert child.getEffectiveLevel() == logging.WARNING
