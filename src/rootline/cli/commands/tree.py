"""Tree inspection commands."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer

from rootline.cli.console import console, create_table, dim, error
from rootline.cli.context import get_config, open_store
from rootline.family import dates

if TYPE_CHECKING:
    from rootline.config import RootlineConfig
    from rootline.store.types import PersonEntry, TreeEntry


def register(app: typer.Typer) -> None:
    """Register the people command."""

    @app.command()
    def people(
        code: Annotated[str, typer.Argument(help="Tree join code")],
        config: Annotated[
            Path | None,
            typer.Option(
                "--config",
                "-c",
                help="Path to configuration file",
            ),
        ] = None,
    ) -> None:
        """List the people in a tree."""
        cfg = get_config(config)
        tree, members = asyncio.run(_load_people(cfg, code))
        if tree is None:
            error(f"No tree with join code {code.upper()}")
            raise typer.Exit(1)
        if not members:
            dim("No people found.")
            return

        table = create_table(
            f"{tree.name} ({len(members)})",
            [
                ("Name", "bold"),
                ("Born", ""),
                ("Died", ""),
                ("Gender", "dim"),
                ("ID", {"style": "dim", "max_width": 12}),
            ],
        )
        for person in members:
            table.add_row(
                person.primary_name,
                person.dob or "-",
                person.dod or "-",
                person.gender or "-",
                person.id[:12],
            )
        console.print(table)


async def _load_people(
    config: RootlineConfig, code: str
) -> tuple[TreeEntry | None, list[PersonEntry]]:
    async with open_store(config) as store:
        tree = await store.get_tree_by_code(code)
        if tree is None:
            return None, []
        members = await store.list_people(tree.id)
    members.sort(key=lambda p: (dates.sort_key(p.dob), p.primary_name.casefold()))
    return tree, members
