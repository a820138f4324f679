"""Configuration module."""

from rootline.config.loader import get_default_config, load_config
from rootline.config.models import (
    ConfigError,
    DatabaseConfig,
    DuplicateConfig,
    GraphConfig,
    LoggingConfig,
    RootlineConfig,
    ServerConfig,
)
from rootline.config.paths import (
    get_config_path,
    get_database_path,
    get_logs_path,
    get_rootline_home,
)

__all__ = [
    "ConfigError",
    "DatabaseConfig",
    "DuplicateConfig",
    "GraphConfig",
    "LoggingConfig",
    "RootlineConfig",
    "ServerConfig",
    "get_config_path",
    "get_database_path",
    "get_default_config",
    "get_logs_path",
    "get_rootline_home",
    "load_config",
]
