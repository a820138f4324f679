"""Tree and membership operations."""

from __future__ import annotations

import logging
import secrets
import string
import uuid
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from sqlalchemy import text

from rootline.store.mappers import row_to_member, row_to_tree
from rootline.store.types import TreeEntry, TreeMemberEntry, _parse_datetime

if TYPE_CHECKING:
    from rootline.store.store import Store

logger = logging.getLogger(__name__)

JOIN_CODE_ALPHABET = string.ascii_uppercase + string.digits
JOIN_CODE_LENGTH = 6


def generate_join_code() -> str:
    return "".join(secrets.choice(JOIN_CODE_ALPHABET) for _ in range(JOIN_CODE_LENGTH))


class TreeOpsMixin:
    """Tree creation, lookup and actor membership."""

    async def create_tree(self: Store, name: str) -> TreeEntry:
        """Create a tree with a fresh join code, regenerating on collision."""
        now = datetime.now(UTC)
        tree_id = str(uuid.uuid4())

        async with self._db.session() as session:
            code = generate_join_code()
            while (
                await session.execute(
                    text("SELECT 1 FROM trees WHERE join_code = :code"),
                    {"code": code},
                )
            ).fetchone():
                logger.debug("join_code_collision", extra={"tree.join_code": code})
                code = generate_join_code()

            await session.execute(
                text("""
                    INSERT INTO trees (id, name, join_code, created_at)
                    VALUES (:id, :name, :code, :created_at)
                """),
                {
                    "id": tree_id,
                    "name": name,
                    "code": code,
                    "created_at": now.isoformat(),
                },
            )

        logger.info("tree_created", extra={"tree.id": tree_id, "tree.join_code": code})
        return TreeEntry(id=tree_id, name=name, join_code=code, created_at=now)

    async def get_tree(self: Store, tree_id: str) -> TreeEntry | None:
        async with self._db.session() as session:
            result = await session.execute(
                text("SELECT * FROM trees WHERE id = :id"), {"id": tree_id}
            )
            row = result.fetchone()
            return row_to_tree(row) if row else None

    async def get_tree_by_code(self: Store, join_code: str) -> TreeEntry | None:
        """Look up a tree by join code (case-insensitive)."""
        async with self._db.session() as session:
            result = await session.execute(
                text("SELECT * FROM trees WHERE join_code = :code"),
                {"code": join_code.strip().upper()},
            )
            row = result.fetchone()
            return row_to_tree(row) if row else None

    async def activate_membership(
        self: Store, tree_id: str, actor_id: str
    ) -> TreeMemberEntry:
        """Add or refresh a membership so it is the actor's most recent one.

        The new ``activated_at`` is strictly later than every other
        membership of the actor, even when the clock has not advanced.
        """
        now = datetime.now(UTC)
        async with self._db.session() as session:
            result = await session.execute(
                text(
                    "SELECT MAX(activated_at) FROM tree_members WHERE actor_id = :actor_id"
                ),
                {"actor_id": actor_id},
            )
            latest = _parse_datetime(result.scalar())
            if latest is not None and latest >= now:
                now = latest + timedelta(microseconds=1)

            await session.execute(
                text("""
                    INSERT INTO tree_members (tree_id, actor_id, activated_at)
                    VALUES (:tree_id, :actor_id, :activated_at)
                    ON CONFLICT (tree_id, actor_id)
                    DO UPDATE SET activated_at = excluded.activated_at
                """),
                {
                    "tree_id": tree_id,
                    "actor_id": actor_id,
                    "activated_at": now.isoformat(),
                },
            )

        logger.debug(
            "membership_activated", extra={"tree.id": tree_id, "actor.id": actor_id}
        )
        return TreeMemberEntry(tree_id=tree_id, actor_id=actor_id, activated_at=now)

    async def remove_membership(self: Store, tree_id: str, actor_id: str) -> bool:
        async with self._db.session() as session:
            result = await session.execute(
                text(
                    "DELETE FROM tree_members WHERE tree_id = :tree_id AND actor_id = :actor_id"
                ),
                {"tree_id": tree_id, "actor_id": actor_id},
            )
            return (result.rowcount or 0) > 0

    async def list_memberships(self: Store, actor_id: str) -> list[TreeMemberEntry]:
        """Memberships of an actor, most recently activated first."""
        async with self._db.session() as session:
            result = await session.execute(
                text("""
                    SELECT * FROM tree_members WHERE actor_id = :actor_id
                    ORDER BY activated_at DESC
                """),
                {"actor_id": actor_id},
            )
            return [row_to_member(row) for row in result.fetchall()]

    async def is_member(self: Store, tree_id: str, actor_id: str) -> bool:
        async with self._db.session() as session:
            result = await session.execute(
                text(
                    "SELECT 1 FROM tree_members WHERE tree_id = :tree_id AND actor_id = :actor_id"
                ),
                {"tree_id": tree_id, "actor_id": actor_id},
            )
            return result.fetchone() is not None
