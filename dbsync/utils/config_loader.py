"""Configuration loader for the database sync service."""

import os
import re
from pathlib import Path
from typing import Any, Optional

import structlog
import yaml
from pydantic import ValidationError

from dbsync.models.config import AppConfig

log = structlog.stdlib.get_logger()

CONFIG_DIR = Path(__file__).parent.parent.parent / "config"


class ConfigurationError(Exception):
    """Raised when configuration is invalid or missing."""

    pass


class ConfigLoader:
    """Loads and validates application configuration from YAML files and environment variables."""

    # ${VAR} or ${VAR:-fallback}
    env_var_pattern = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-([^}]*))?\}")

    def __init__(self, config_dir: Path | str | None = None) -> None:
        """Initialize the ConfigLoader.

        Args:
            config_dir: Directory holding <env>.yaml files. Defaults to ./config.
        """
        self._config_dir = Path(config_dir) if config_dir is not None else CONFIG_DIR

    def load_config(self, config_path: Optional[str] = None) -> AppConfig:
        """Load configuration from a YAML file with environment variable substitution.

        Args:
            config_path: Path to the YAML file. If None, uses config/<APP_ENV>.yaml
                         and falls back to config/default.yaml

        Returns:
            AppConfig: Validated application configuration

        Raises:
            ConfigurationError: If the file is missing, unparsable or invalid
        """
        if config_path is None:
            config_path = self._get_default_config_path()

        log.info("loading_configuration", config_path=config_path)

        raw_config = self._load_yaml_file(config_path)
        resolved = self._substitute_env_vars(raw_config)

        try:
            app_config = AppConfig(**resolved)
        except ValidationError as e:
            log.error("configuration_validation_failed", error=str(e))
            raise ConfigurationError(f"Configuration validation failed: {e}") from e

        log.info(
            "configuration_loaded_successfully",
            window_days=app_config.sync.window_days,
            table_overrides=len(app_config.sync.tables),
        )
        return app_config

    def _get_default_config_path(self) -> str:
        env = os.getenv("APP_ENV", "default")
        config_file = self._config_dir / f"{env}.yaml"

        if not config_file.exists():
            config_file = self._config_dir / "default.yaml"

        if not config_file.exists():
            raise ConfigurationError(
                f"Configuration file not found: {config_file}. "
                f"Please create config/default.yaml or set APP_ENV to a valid environment."
            )

        return str(config_file)

    def _load_yaml_file(self, config_path: str) -> dict[str, Any]:
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config_dict = yaml.safe_load(f)
        except FileNotFoundError:
            raise ConfigurationError(f"Configuration file not found: {config_path}")
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to parse YAML file {config_path}: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Failed to read configuration file {config_path}: {e}") from e

        if not isinstance(config_dict, dict):
            raise ConfigurationError(f"Configuration file is empty or not a mapping: {config_path}")

        log.debug("yaml_file_loaded", config_path=config_path)
        return config_dict

    def _substitute_env_vars(self, config: Any) -> Any:
        """Recursively substitute ${VAR} and ${VAR:-default} in string values.

        Raises:
            ConfigurationError: If a variable without a default is not set
        """
        if isinstance(config, dict):
            return {key: self._substitute_env_vars(value) for key, value in config.items()}
        if isinstance(config, list):
            return [self._substitute_env_vars(item) for item in config]
        if isinstance(config, str):
            return self.env_var_pattern.sub(self._resolve_match, config)
        return config

    def _resolve_match(self, match: re.Match) -> str:
        var_name, fallback = match.group(1), match.group(2)
        env_value = os.getenv(var_name)
        if env_value is not None:
            return env_value
        if fallback is not None:
            return fallback
        raise ConfigurationError(
            f"Required environment variable not set: {var_name}. "
            f"Please set {var_name} in your environment or .env file."
        )

    def validate_config(self, config: AppConfig) -> list[str]:
        """Check the configuration for settings that load but are likely wrong.

        Args:
            config: Application configuration to validate

        Returns:
            List of warning messages (empty if no warnings)
        """
        warnings = []

        if config.data_sources.master.url == config.data_sources.backup.url:
            warnings.append("data_sources.master and data_sources.backup point at the same database")

        unwindowed = sorted(
            name for name in config.sync.tables if config.sync.settings_for(name).timestamp_column is None
        )
        if unwindowed:
            warnings.append(f"tables without a timestamp column are synced in full: {unwindowed}")

        if config.logging.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            warnings.append(f"logging.log_level '{config.logging.log_level}' is not a standard level")

        if warnings:
            log.warning("configuration_validation_warnings", warnings=warnings)

        return warnings
