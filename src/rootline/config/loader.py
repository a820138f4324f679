"""Configuration loading from TOML files and environment variables."""

import os
import tomllib
from pathlib import Path
from typing import Any

from rootline.config.models import ConfigError, RootlineConfig
from rootline.config.paths import get_config_path

DATABASE_URL_ENV = "ROOTLINE_DATABASE_URL"


def _get_default_config_paths() -> list[Path]:
    """Get ordered list of default config file locations."""
    return [
        Path("config.toml"),  # Current directory
        get_config_path(),  # ~/.rootline/config.toml (or ROOTLINE_HOME)
        Path("/etc/rootline/config.toml"),  # System-wide
    ]


def _resolve_env_overrides(config: dict[str, Any]) -> dict[str, Any]:
    """Apply environment variable overrides on top of file values."""
    if url := os.environ.get(DATABASE_URL_ENV):
        section = config.setdefault("database", {})
        if not isinstance(section, dict):
            raise ConfigError("[database] must be a table")
        section["database_url"] = url
    return config


def load_config(path: Path | None = None) -> RootlineConfig:
    """Load configuration from TOML file.

    Args:
        path: Explicit path to config file. If None, searches default locations.

    Returns:
        Validated RootlineConfig instance.

    Raises:
        FileNotFoundError: If no config file is found.
        ConfigError: If the file is not valid TOML.
        pydantic.ValidationError: If a value is out of range.
    """
    config_path: Path | None = None

    default_paths = _get_default_config_paths()

    if path is not None:
        config_path = Path(path).expanduser()
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
    else:
        for default_path in default_paths:
            expanded = default_path.expanduser()
            if expanded.exists():
                config_path = expanded
                break

    if config_path is None:
        raise FileNotFoundError(
            f"No config file found. Searched: {', '.join(str(p) for p in default_paths)}"
        )

    try:
        with config_path.open("rb") as f:
            raw_config = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {config_path}: {e}") from e

    raw_config = _resolve_env_overrides(raw_config)

    return RootlineConfig.model_validate(raw_config)


def get_default_config() -> RootlineConfig:
    """Get a default configuration for development/testing."""
    return RootlineConfig.model_validate(_resolve_env_overrides({}))
