"""CLI command modules."""

from rootline.cli.commands import batch, dates, init, serve, tree

__all__ = [
    "batch",
    "dates",
    "init",
    "serve",
    "tree",
]
