"""Configuration models for the database sync service."""

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Handles a request may name in ``from`` / ``to``.
MASTER = "master"
BACKUP = "backup"
DATA_SOURCE_HANDLES: tuple[str, ...] = (MASTER, BACKUP)


class DataSourceConfig(BaseModel):
    """Connection settings for one database."""

    url: str = Field(default=..., min_length=1, description="SQLAlchemy database URL")
    echo: bool = Field(default=False, description="Log every statement SQLAlchemy emits")


class DataSourcesConfig(BaseModel):
    """The two databases the service moves data between."""

    master: DataSourceConfig
    backup: DataSourceConfig

    def as_mapping(self) -> dict[str, DataSourceConfig]:
        """Return the data sources keyed by handle."""
        return {MASTER: self.master, BACKUP: self.backup}


class TableSettings(BaseModel):
    """Per-table correlation and windowing columns.

    Omitted fields inherit the ``SyncConfig`` defaults; an explicit
    ``timestamp_column: null`` reads the whole table.
    """

    primary_key: str | None = Field(default=None, min_length=1, description="Column used to match rows")
    timestamp_column: str | None = Field(
        default=None,
        description="Column the time window is applied to. Explicit None reads the whole table.",
    )

    @property
    def disables_window(self) -> bool:
        """True when the table was configured with no timestamp column."""
        return "timestamp_column" in self.model_fields_set and self.timestamp_column is None


class SyncConfig(BaseModel):
    """Configuration for comparison and migration."""

    schema_name: str | None = Field(
        default=None, description="Database schema to sync. None uses the connection default."
    )
    window_days: int = Field(
        default=30, ge=1, le=3650, description="Length of the rolling window in days"
    )
    default_primary_key: str = Field(default="id", min_length=1)
    default_timestamp_column: str | None = Field(default="update_time")
    tables: dict[str, TableSettings] = Field(
        default_factory=dict, description="Overrides keyed by lower-cased table name"
    )

    @field_validator("tables")
    @classmethod
    def lower_case_table_names(cls, v: dict[str, TableSettings]) -> dict[str, TableSettings]:
        """Table lookups are case-insensitive."""
        return {name.lower(): settings for name, settings in v.items()}

    def settings_for(self, table_name: str) -> TableSettings:
        """Return the settings for a table with omitted overrides filled from the defaults."""
        settings = self.tables.get(table_name.lower()) or TableSettings()
        if settings.disables_window:
            timestamp_column = None
        else:
            timestamp_column = settings.timestamp_column or self.default_timestamp_column
        return TableSettings(
            primary_key=settings.primary_key or self.default_primary_key,
            timestamp_column=timestamp_column,
        )


class FilesConfig(BaseModel):
    """Configuration for the upload/download endpoints."""

    upload_dir: str = Field(default="file", min_length=1, description="Directory uploads are stored in")


class ServerConfig(BaseModel):
    """Configuration for the HTTP server."""

    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8080, ge=1, le=65535)
    api_prefix: str = Field(default="/api", description="Prefix for the sync and upload routes")


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    json_logs: bool = Field(
        default=True,
        description="If True, output JSON logs. If False, use console format.",
    )
    log_file: str | None = Field(
        default=None,
        description="Optional path to log file. If None, logs only to stdout.",
    )


class AppConfig(BaseSettings):
    """Main application configuration.

    This class uses pydantic-settings to load configuration from environment
    variables with the APP_ prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    data_sources: DataSourcesConfig
    sync: SyncConfig = Field(default_factory=SyncConfig)
    files: FilesConfig = Field(default_factory=FilesConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
