"""Date normalization preview."""

from typing import Annotated

import typer

from rootline.cli.console import console, warning
from rootline.family import dates


def register(app: typer.Typer) -> None:
    """Register the date command."""

    @app.command()
    def date(
        text: Annotated[str, typer.Argument(help="Free-text date, e.g. 'circa 1875'")],
    ) -> None:
        """Show how a date expression is normalized."""
        result = dates.normalize(text)
        if result.range is None:
            warning(f"Not recognized; stored as {result.display!r}")
            return
        console.print(f"display: {result.display}", markup=False)
        console.print(
            f"range: {result.range.start.isoformat()} .. {result.range.end.isoformat()}",
            markup=False,
        )
