"""Async SQLAlchemy database engine."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from sqlalchemy import event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from rootline.db.models import Base
from rootline.family.errors import PersistenceError

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Async database connection manager."""

    def __init__(
        self, database_url: str | None = None, database_path: Path | None = None
    ):
        """Initialize database.

        Args:
            database_url: Full database URL (takes precedence).
            database_path: Path to SQLite database file.
        """
        if database_url:
            self._url = database_url
        elif database_path:
            # Ensure parent directory exists
            database_path.parent.mkdir(parents=True, exist_ok=True)
            self._url = f"sqlite+aiosqlite:///{database_path}"
        else:
            raise ValueError("Either database_url or database_path must be provided")

        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def url(self) -> str:
        return self._url

    @property
    def connected(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> AsyncEngine:
        """Get the database engine."""
        if self._engine is None:
            raise RuntimeError("Database not initialized. Call connect() first.")
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        """Get the session factory."""
        if self._session_factory is None:
            raise RuntimeError("Database not initialized. Call connect() first.")
        return self._session_factory

    async def connect(self) -> None:
        """Initialize the database connection."""
        self._engine = create_async_engine(
            self._url,
            echo=False,
            pool_pre_ping=True,
        )
        if self._engine.dialect.name == "sqlite":
            event.listen(
                self._engine.sync_engine, "connect", _enable_sqlite_foreign_keys
            )
        self._session_factory = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def disconnect(self) -> None:
        """Close the database connection."""
        if self._engine:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None

    async def create_schema(self) -> None:
        """Create all tables that do not exist yet."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.debug("schema_created", extra={"db.url": self._url})

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get a database session.

        Commits on success and rolls back on any error. Driver failures are
        re-raised as ``PersistenceError``.

        Usage:
            async with db.session() as session:
                result = await session.execute(...)
        """
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise PersistenceError(str(e)) from e
            except Exception:
                await session.rollback()
                raise
