"""Server command for running the Rootline HTTP API."""

from pathlib import Path
from typing import Annotated

import typer

from rootline.cli.context import get_config, make_database


def register(app: typer.Typer) -> None:
    """Register the serve command."""

    @app.command()
    def serve(
        config: Annotated[
            Path | None,
            typer.Option(
                "--config",
                "-c",
                help="Path to configuration file",
            ),
        ] = None,
        host: Annotated[
            str | None,
            typer.Option(
                "--host",
                "-h",
                help="Host to bind to (default from config)",
            ),
        ] = None,
        port: Annotated[
            int | None,
            typer.Option(
                "--port",
                "-p",
                help="Port to bind to (default from config)",
            ),
        ] = None,
    ) -> None:
        """Start the Rootline HTTP server."""
        import uvicorn

        from rootline.logging import configure_logging
        from rootline.server.app import create_app

        cfg = get_config(config)
        configure_logging(
            level=cfg.logging.level,
            use_rich=True,
            log_to_file=cfg.logging.log_to_file,
            redact_actor_ids=cfg.logging.redact_actor_ids,
        )

        app_instance = create_app(make_database(cfg), cfg)
        try:
            uvicorn.run(
                app_instance,
                host=host or cfg.server.host,
                port=port or cfg.server.port,
                log_config=None,
            )
        except KeyboardInterrupt:
            print("\nServer stopped")
