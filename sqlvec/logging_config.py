"""Structured logging configuration.

The library only creates named loggers under ``sqlvec``; applications opt
in to output with ``setup_logging``. JSON lines outside development,
human-readable lines in development.
"""

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

from sqlvec.config import Environment, get_settings

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime"}

_THIRD_PARTY_LOGGERS = ("aiosqlite", "aiomysql", "asyncpg", "httpx", "httpcore")


class JSONFormatter(logging.Formatter):
    """One JSON object per record.

    Fields passed with ``extra=`` (table names, candidate counts, ...) are
    collected under ``"extra"``.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        extra = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS and not key.startswith("_")
        }
        if extra:
            log_data["extra"] = extra

        if record.funcName:
            log_data["function"] = record.funcName
        if record.pathname:
            log_data["file"] = f"{record.pathname}:{record.lineno}"

        return json.dumps(log_data, default=str, ensure_ascii=False)


class DevFormatter(logging.Formatter):
    """Human-readable formatter for development."""

    FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

    def __init__(self) -> None:
        super().__init__(fmt=self.FORMAT, datefmt=self.DATE_FORMAT)


def _quiet_third_party(sql_level: int) -> None:
    logging.getLogger("sqlalchemy.engine").setLevel(sql_level)
    for name in _THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def setup_logging(
    level: str | None = None,
    json_output: bool | None = None,
) -> logging.Logger:
    """Install a single stdout handler on the root logger.

    Args:
        level: Log level override (default from settings).
        json_output: Force JSON output (default: everywhere but development).

    Returns:
        Root logger instance.
    """
    settings = get_settings()

    numeric_level = getattr(logging, (level or settings.log_level).upper(), logging.INFO)
    if json_output is None:
        json_output = settings.environment != Environment.DEVELOPMENT

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)
    handler.setFormatter(JSONFormatter() if json_output else DevFormatter())

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    # SQL statements are only shown when the engine echoes them
    _quiet_third_party(numeric_level if settings.database.echo else logging.WARNING)

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Get a named logger (typically ``__name__``)."""
    return logging.getLogger(name)
