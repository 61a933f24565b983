"""Centralized provider module for database engines.

Every SQLAlchemy engine the service uses is created here, so swapping the
pool or driver options only touches this module.

Default implementation:
- Engine: SQLAlchemy ``create_engine`` with connection liveness checks
"""

from typing import Any

import structlog
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import ArgumentError, NoSuchModuleError

from dbsync.errors import ConnectivityError

log = structlog.stdlib.get_logger()


def get_engine(url: str, echo: bool = False, **options: Any) -> Engine:
    """Get an engine for a database URL.

    Developers: Modify this function to change pooling or driver options.

    Example - Limit the pool for a small MySQL instance:
        return create_engine(url, pool_size=2, max_overflow=0)

    Args:
        url: SQLAlchemy database URL (e.g. "mysql+pymysql://user:pw@host/db")
        echo: If True, SQLAlchemy logs every statement
        **options: Extra keyword arguments passed to ``create_engine``

    Returns:
        Engine instance (connections are opened lazily)

    Raises:
        ValueError: If url is empty
        ConnectivityError: If the URL cannot be parsed or its driver is missing
    """
    if not url or not url.strip():
        error_msg = "url cannot be empty"
        log.error("get_engine_failed", error=error_msg)
        raise ValueError(error_msg)

    try:
        parsed = make_url(url)
        log.info(
            "initializing_engine",
            dialect=parsed.get_backend_name(),
            driver=parsed.get_driver_name(),
            host=parsed.host,
            database=parsed.database,
        )

        engine = create_engine(parsed, echo=echo, pool_pre_ping=True, **options)

        log.info("engine_initialized_successfully", dialect=engine.dialect.name)
        return engine

    except (ArgumentError, NoSuchModuleError, ImportError) as e:
        log.error(
            "get_engine_failed",
            error=str(e),
            error_type=type(e).__name__,
        )
        raise ConnectivityError(f"Failed to initialize engine: {e}") from e
