"""Async SQLAlchemy engine construction."""

from typing import Any

from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from sqlvec.config import DatabaseSettings, get_settings
from sqlvec.exceptions import ConfigurationError
from sqlvec.logging_config import get_logger

logger = get_logger(__name__)


def create_engine_from_settings(settings: DatabaseSettings | None = None) -> AsyncEngine:
    """Create the async engine for the relational store.

    Timeouts are handed to the pool and driver untouched; the library adds
    none of its own.

    Args:
        settings: Database configuration. Uses defaults if not provided.

    Returns:
        Configured AsyncEngine.

    Raises:
        ConfigurationError: If the URL is invalid or its driver is missing.
    """
    settings = settings or get_settings().database

    try:
        url = make_url(settings.url.get_secret_value())
    except ArgumentError as e:
        raise ConfigurationError(
            f"Invalid database URL: {e}",
            details={"error": str(e)},
        ) from e

    engine_config: dict[str, Any] = {
        "echo": settings.echo,
        "pool_pre_ping": settings.pool_pre_ping,
    }
    # SQLite pools are not configured with a checkout timeout.
    if url.get_backend_name() != "sqlite":
        engine_config["pool_timeout"] = settings.pool_timeout

    if settings.connect_timeout is not None:
        if url.get_backend_name() in ("sqlite", "postgresql"):
            timeout_key = "timeout"
        else:
            timeout_key = "connect_timeout"
        engine_config["connect_args"] = {timeout_key: settings.connect_timeout}

    try:
        engine = create_async_engine(url, **engine_config)
    except (ArgumentError, ImportError) as e:
        raise ConfigurationError(
            f"Failed to create database engine: {e}",
            details={"backend": url.get_backend_name(), "error": str(e)},
        ) from e

    logger.info(
        f"Created database engine for {url.get_backend_name()}",
        extra={"driver": url.get_driver_name()},
    )
    return engine
