"""Config and database helpers shared by CLI commands."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import pydantic
import typer

from rootline.cli.console import error
from rootline.config import ConfigError, RootlineConfig, get_default_config, load_config
from rootline.db import Database
from rootline.store import Store, create_store


def get_config(config_path: Path | None) -> RootlineConfig:
    """Load config, falling back to defaults when none is found.

    An explicit path that does not exist or an invalid file exits with 1.
    """
    try:
        return load_config(config_path)
    except FileNotFoundError as e:
        if config_path is not None:
            error(str(e))
            raise typer.Exit(1) from None
        return get_default_config()
    except (ConfigError, pydantic.ValidationError) as e:
        error(f"Invalid configuration: {e}")
        raise typer.Exit(1) from None


def make_database(config: RootlineConfig) -> Database:
    return Database(
        database_url=config.database.database_url,
        database_path=config.database.database_path,
    )


@asynccontextmanager
async def open_store(config: RootlineConfig) -> AsyncIterator[Store]:
    """Connect, make sure the schema exists, and yield a Store."""
    database = make_database(config)
    await database.connect()
    try:
        yield await create_store(database)
    finally:
        await database.disconnect()
