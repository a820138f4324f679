"""Unified store facade backed by SQLite.

Implementation is split across focused mixin modules:
- trees: Tree creation, join codes, memberships
- people: Person CRUD and exact-name lookup
- edges: Typed edge insert/delete/list
- pending: Append-only pending actions
- state: Per-actor conversation state
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rootline.store.edges import EdgeOpsMixin
from rootline.store.pending import PendingOpsMixin
from rootline.store.people import PeopleOpsMixin
from rootline.store.state import StateOpsMixin
from rootline.store.trees import TreeOpsMixin

if TYPE_CHECKING:
    from rootline.db.engine import Database

logger = logging.getLogger(__name__)


class Store(
    TreeOpsMixin,
    PeopleOpsMixin,
    EdgeOpsMixin,
    PendingOpsMixin,
    StateOpsMixin,
):
    """Facade over the family database.

    Every call opens its own short session, so each write commits on return.
    """

    def __init__(self, db: Database) -> None:
        self._db = db

    @property
    def db(self) -> Database:
        return self._db


async def create_store(db: Database, *, create_schema: bool = True) -> Store:
    """Create a Store on a connected database, creating tables if needed."""
    if create_schema:
        await db.create_schema()
    logger.debug("store_ready", extra={"db.url": db.url})
    return Store(db)
