"""Commands that apply operation batches and confirmations."""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Any

import typer

from rootline.cli.console import console, error
from rootline.cli.context import get_config, open_store
from rootline.family.processor import BatchProcessor

if TYPE_CHECKING:
    from rootline.config import RootlineConfig
    from rootline.family.processor import BatchResult


def _read_operations(source: str) -> list[dict[str, Any]]:
    """Read a JSON list of operations from a file, or stdin for ``-``."""
    try:
        raw = sys.stdin.read() if source == "-" else Path(source).read_text()
    except OSError as e:
        error(f"Cannot read {source}: {e}")
        raise typer.Exit(1) from None
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        error(f"Invalid JSON: {e}")
        raise typer.Exit(1) from None
    if isinstance(data, dict):
        data = data.get("operations", [])
    if not isinstance(data, list):
        error("Expected a JSON list of operations")
        raise typer.Exit(1)
    return data


def _print_result(result: BatchResult) -> None:
    # Replies use *bold* markers for chat channels; print them verbatim
    console.print(result.reply, markup=False, highlight=False)


def register(app: typer.Typer) -> None:
    """Register the apply and confirm commands."""

    @app.command()
    def apply(
        actor: Annotated[str, typer.Argument(help="Actor id, e.g. a phone number")],
        operations: Annotated[
            str, typer.Argument(help="JSON file with operations, or - for stdin")
        ],
        config: Annotated[
            Path | None,
            typer.Option(
                "--config",
                "-c",
                help="Path to configuration file",
            ),
        ] = None,
    ) -> None:
        """Apply a batch of parsed operations for an actor."""
        cfg = get_config(config)
        ops = _read_operations(operations)
        _print_result(asyncio.run(_apply(cfg, actor, ops)))

    @app.command()
    def confirm(
        actor: Annotated[str, typer.Argument(help="Actor id")],
        text: Annotated[str, typer.Argument(help="YES or NO")],
        config: Annotated[
            Path | None,
            typer.Option(
                "--config",
                "-c",
                help="Path to configuration file",
            ),
        ] = None,
    ) -> None:
        """Answer the actor's pending confirmation."""
        cfg = get_config(config)
        _print_result(asyncio.run(_confirm(cfg, actor, text)))


async def _apply(
    config: RootlineConfig, actor: str, operations: list[dict[str, Any]]
) -> BatchResult:
    async with open_store(config) as store:
        processor = BatchProcessor.from_config(store, config)
        return await processor.process(actor, operations)


async def _confirm(config: RootlineConfig, actor: str, text: str) -> BatchResult:
    async with open_store(config) as store:
        processor = BatchProcessor.from_config(store, config)
        return await processor.confirm(actor, text)
