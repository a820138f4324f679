"""Shared test fixtures and factories."""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest

from rootline.config.models import DatabaseConfig, RootlineConfig
from rootline.db.engine import Database
from rootline.family.processor import BatchProcessor
from rootline.store.store import Store, create_store
from rootline.store.types import TreeEntry

ACTOR = "+15550001111"
OTHER_ACTOR = "+15550002222"

# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def config(tmp_path: Path) -> RootlineConfig:
    """Configuration pointing at a temporary database."""
    return RootlineConfig(database=DatabaseConfig(database_path=tmp_path / "family.db"))


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """Create a temporary config file."""
    config_path = tmp_path / "config.toml"
    config_path.write_text(f"""
[database]
database_path = "{(tmp_path / "cli.db").as_posix()}"

[duplicates]
min_similarity = 0.6
""")
    return config_path


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
async def database(tmp_path: Path) -> AsyncGenerator[Database, None]:
    """Create a temporary test database."""
    db = Database(database_path=tmp_path / "test.db")
    await db.connect()
    await db.create_schema()

    yield db

    await db.disconnect()


@pytest.fixture
async def store(database: Database) -> Store:
    return await create_store(database, create_schema=False)


@pytest.fixture
async def tree(store: Store) -> TreeEntry:
    return await store.create_tree("Smith Family")


@pytest.fixture
def processor(store: Store) -> BatchProcessor:
    return BatchProcessor(store)


@pytest.fixture
async def active_processor(processor: BatchProcessor) -> BatchProcessor:
    """A processor whose ACTOR already has an active tree."""
    await processor.process(ACTOR, [{"op": "new_tree", "name": "Smith Family"}])
    return processor


# =============================================================================
# CLI Fixtures
# =============================================================================


@pytest.fixture
def cli_runner():
    """Create a Typer CLI test runner with colors disabled."""
    from typer.testing import CliRunner

    return CliRunner(env={"NO_COLOR": "1"})
