"""Shared utilities for configuration and logging"""

from dbsync.utils.config_loader import ConfigLoader, ConfigurationError
from dbsync.utils.logging_config import configure_logging

__all__ = ["ConfigLoader", "ConfigurationError", "configure_logging"]
