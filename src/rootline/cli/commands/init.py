"""Schema initialization command."""

import asyncio
from pathlib import Path
from typing import Annotated

import typer

from rootline.cli.console import success
from rootline.cli.context import get_config, make_database


def register(app: typer.Typer) -> None:
    """Register the init command."""

    @app.command()
    def init(
        config: Annotated[
            Path | None,
            typer.Option(
                "--config",
                "-c",
                help="Path to configuration file",
            ),
        ] = None,
    ) -> None:
        """Create the database tables."""
        cfg = get_config(config)
        database = make_database(cfg)
        asyncio.run(_init(database))
        success(f"Database ready at {database.url}")


async def _init(database) -> None:
    await database.connect()
    try:
        await database.create_schema()
    finally:
        await database.disconnect()
