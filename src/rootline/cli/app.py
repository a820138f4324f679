"""Main CLI application."""

import typer

from rootline.cli.commands import batch, dates, init, serve, tree

app = typer.Typer(
    name="rootline",
    help="Rootline - family tree intent resolution",
    no_args_is_help=True,
)

init.register(app)
batch.register(app)
tree.register(app)
dates.register(app)
serve.register(app)


if __name__ == "__main__":
    app()
