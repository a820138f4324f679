"""Centralized path management for Rootline.

All state (config, database, logs) is stored under a single base directory.
The base directory can be overridden with the ROOTLINE_HOME environment
variable.

Default locations:
- Linux/macOS: ~/.rootline
- Windows: %USERPROFILE%\\.rootline
"""

import os
from functools import lru_cache
from pathlib import Path

ENV_VAR = "ROOTLINE_HOME"


@lru_cache(maxsize=1)
def get_rootline_home() -> Path:
    """Get the base directory for all Rootline data.

    Resolution order:
    1. ROOTLINE_HOME environment variable (if set)
    2. Platform default (~/.rootline)
    """
    if env_home := os.environ.get(ENV_VAR):
        return Path(env_home).expanduser().resolve()
    return Path.home() / ".rootline"


def get_config_path() -> Path:
    """Get the default config file path."""
    return get_rootline_home() / "config.toml"


def get_database_path() -> Path:
    """Get the default SQLite database path."""
    return get_rootline_home() / "data" / "rootline.db"


def get_logs_path() -> Path:
    """Get the default logs directory path."""
    return get_rootline_home() / "logs"
