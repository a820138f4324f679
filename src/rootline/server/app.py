"""FastAPI application for the Rootline server."""

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI

from rootline.family.processor import BatchProcessor
from rootline.server.routes import batches, health, trees
from rootline.store.store import Store

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from rootline.config import RootlineConfig
    from rootline.db import Database

logger = logging.getLogger(__name__)


class RootlineServer:
    """Main server application.

    Owns the FastAPI app and wires the store and batch processor onto
    ``app.state`` for the routes.
    """

    def __init__(
        self,
        database: "Database",
        config: "RootlineConfig | None" = None,
    ):
        self._database = database
        self._config = config
        self._store = Store(database)
        if config is not None:
            self._processor = BatchProcessor.from_config(self._store, config)
        else:
            self._processor = BatchProcessor(self._store)

        self._app = self._create_app()

    @property
    def app(self) -> FastAPI:
        """Get the FastAPI application."""
        return self._app

    def _create_app(self) -> FastAPI:
        """Create and configure the FastAPI app."""

        @asynccontextmanager
        async def lifespan(app: FastAPI) -> "AsyncIterator[None]":
            logger.info("Starting Rootline server")
            if not self._database.connected:
                await self._database.connect()
            await self._database.create_schema()

            yield

            logger.info("Shutting down Rootline server")
            await self._database.disconnect()

        app = FastAPI(
            title="Rootline",
            description="Family tree intent resolution API",
            version="0.1.0",
            lifespan=lifespan,
        )

        # Store references in app state
        app.state.server = self
        app.state.database = self._database
        app.state.store = self._store
        app.state.processor = self._processor

        app.include_router(health.router, tags=["health"])
        app.include_router(batches.router, tags=["batches"])
        app.include_router(trees.router, tags=["trees"])

        return app


def create_app(
    database: "Database",
    config: "RootlineConfig | None" = None,
) -> FastAPI:
    """Create a FastAPI application.

    Returns:
        Configured FastAPI application.
    """
    server = RootlineServer(database=database, config=config)
    return server.app
