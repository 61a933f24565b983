"""FastAPI application exposing comparison, migration and file transfer.

This module wires configuration, logging, the data source registry, the
sync coordinator and the file store into one ASGI app.
"""

import time
import uuid
from contextlib import asynccontextmanager
from typing import Callable

import structlog
from fastapi import FastAPI, Request

from dbsync.api.routes import download_router, files_router, sync_router
from dbsync.files.file_store import FileStore
from dbsync.models.config import AppConfig
from dbsync.storage.data_sources import DataSourceRegistry
from dbsync.sync.sync_coordinator import SyncCoordinator
from dbsync.utils.config_loader import ConfigLoader, ConfigurationError
from dbsync.utils.logging_config import configure_logging

log = structlog.stdlib.get_logger()

REQUEST_ID_HEADER = "x-request-id"


def initialize_components(
    config: AppConfig,
    data_sources: DataSourceRegistry | None = None,
) -> tuple[SyncCoordinator, FileStore, DataSourceRegistry]:
    """Build the services the routes depend on.

    Args:
        config: Application configuration
        data_sources: Optional registry (created from config if None)

    Returns:
        Tuple of (SyncCoordinator, FileStore, DataSourceRegistry)
    """
    registry = data_sources or DataSourceRegistry.from_config(config)
    coordinator = SyncCoordinator(registry, config.sync)
    file_store = FileStore(config.files.upload_dir)

    log.info(
        "app_components_initialized",
        handles=registry.handles,
        upload_dir=config.files.upload_dir,
    )
    return coordinator, file_store, registry


def create_app(
    config: AppConfig | None = None,
    data_sources: DataSourceRegistry | None = None,
) -> FastAPI:
    """Create the ASGI application.

    Args:
        config: Application configuration. If None it is loaded with
                ConfigLoader and logging is configured from it.
        data_sources: Optional registry, mainly for tests

    Returns:
        Configured FastAPI app

    Raises:
        ConfigurationError: If configuration cannot be loaded
    """
    if config is None:
        try:
            config = ConfigLoader().load_config()
        except ConfigurationError as e:
            log.error("app_initialization_failed", error=str(e))
            raise

        configure_logging(
            log_level=config.logging.log_level,
            json_logs=config.logging.json_logs,
            log_file=config.logging.log_file,
        )

    coordinator, file_store, registry = initialize_components(config, data_sources)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        log.info("app_started", api_prefix=config.server.api_prefix)
        yield
        registry.dispose()
        log.info("app_stopped")

    app = FastAPI(title="dbsync", lifespan=lifespan)
    app.state.config = config
    app.state.coordinator = coordinator
    app.state.file_store = file_store
    app.state.data_sources = registry

    @app.middleware("http")
    async def bind_request_context(request: Request, call_next: Callable):
        request_id = request.headers.get(REQUEST_ID_HEADER, uuid.uuid4().hex)
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        start = time.perf_counter()
        log.info("request_started", method=request.method, path=request.url.path)
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        log.info(
            "request_finished",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=int((time.perf_counter() - start) * 1000),
        )
        return response

    @app.get("/healthz", tags=["health"])
    def healthz():
        return {"status": "ok"}

    app.include_router(sync_router, prefix=config.server.api_prefix)
    app.include_router(files_router, prefix=config.server.api_prefix)
    app.include_router(download_router)

    return app
