"""Registry resolving data source handles to database engines."""

from typing import Mapping

import structlog
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from dbsync.errors import ConnectivityError
from dbsync.models.config import AppConfig
from dbsync.providers import get_engine

log = structlog.stdlib.get_logger()


class DataSourceRegistry:
    """Maps the recognised handles to engines.

    The registry is passed explicitly to whoever needs a database, so no
    call ever depends on a process-wide "current" data source.
    """

    def __init__(self, engines: Mapping[str, Engine]):
        """
        Initialize the registry.

        Args:
            engines: Engine per handle
        """
        self._engines: dict[str, Engine] = dict(engines)
        log.info("data_source_registry_initialized", handles=self.handles)

    @classmethod
    def from_config(cls, config: AppConfig) -> "DataSourceRegistry":
        """Create engines for every configured data source."""
        engines = {
            handle: get_engine(source.url, echo=source.echo)
            for handle, source in config.data_sources.as_mapping().items()
        }
        return cls(engines)

    @property
    def handles(self) -> list[str]:
        return list(self._engines)

    def is_valid(self, handle: str | None) -> bool:
        """Check whether a handle names a configured data source."""
        return handle is not None and handle in self._engines

    def resolve(self, handle: str) -> Engine:
        """
        Resolve a handle to its engine.

        Args:
            handle: Data source handle

        Returns:
            Engine for the handle

        Raises:
            KeyError: If the handle is unknown
        """
        try:
            return self._engines[handle]
        except KeyError:
            raise KeyError(f"Unknown data source: {handle}") from None

    def check(self, handle: str) -> None:
        """
        Verify that a data source accepts connections.

        Raises:
            ConnectivityError: If the connection or probe query fails
        """
        engine = self.resolve(handle)
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            log.error("data_source_unreachable", handle=handle, error=str(e))
            raise ConnectivityError(f"Data source {handle} is unreachable: {e}") from e

        log.info("data_source_reachable", handle=handle)

    def dispose(self) -> None:
        """Close every pooled connection."""
        for handle, engine in self._engines.items():
            engine.dispose()
            log.debug("engine_disposed", handle=handle)
