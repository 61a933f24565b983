"""Data models for the database sync service."""

from dbsync.models.config import (
    BACKUP,
    DATA_SOURCE_HANDLES,
    MASTER,
    AppConfig,
    DataSourceConfig,
    DataSourcesConfig,
    FilesConfig,
    LoggingConfig,
    ServerConfig,
    SyncConfig,
    TableSettings,
)
from dbsync.models.rows import Row, ScalarValue, normalize_row, normalize_value
from dbsync.models.window import TimeWindow

__all__ = [
    "AppConfig",
    "BACKUP",
    "DATA_SOURCE_HANDLES",
    "DataSourceConfig",
    "DataSourcesConfig",
    "FilesConfig",
    "LoggingConfig",
    "MASTER",
    "Row",
    "ScalarValue",
    "ServerConfig",
    "SyncConfig",
    "TableSettings",
    "TimeWindow",
    "normalize_row",
    "normalize_value",
]
