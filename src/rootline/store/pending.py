"""Pending action rows: append, pop, count."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import text

from rootline.store.mappers import row_to_pending
from rootline.store.types import PendingActionEntry

if TYPE_CHECKING:
    from rootline.store.store import Store

logger = logging.getLogger(__name__)


class PendingOpsMixin:
    """Append-only pending actions keyed by actor."""

    async def save_pending_action(
        self: Store, actor_id: str, tree_id: str, payload: dict[str, Any]
    ) -> PendingActionEntry:
        now = datetime.now(UTC)
        async with self._db.session() as session:
            result = await session.execute(
                text("""
                    INSERT INTO pending_actions (actor_id, tree_id, payload, created_at)
                    VALUES (:actor_id, :tree_id, :payload, :created_at)
                """),
                {
                    "actor_id": actor_id,
                    "tree_id": tree_id,
                    "payload": json.dumps(payload),
                    "created_at": now.isoformat(),
                },
            )
            action_id = result.lastrowid

        return PendingActionEntry(
            id=action_id,
            actor_id=actor_id,
            tree_id=tree_id,
            payload=payload,
            created_at=now,
        )

    async def pop_pending_action(self: Store, actor_id: str) -> PendingActionEntry | None:
        """Fetch and delete the actor's most recent pending action."""
        async with self._db.session() as session:
            result = await session.execute(
                text("""
                    SELECT * FROM pending_actions WHERE actor_id = :actor_id
                    ORDER BY created_at DESC, id DESC
                    LIMIT 1
                """),
                {"actor_id": actor_id},
            )
            row = result.fetchone()
            if not row:
                return None
            await session.execute(
                text("DELETE FROM pending_actions WHERE id = :id"), {"id": row.id}
            )
            return row_to_pending(row)

    async def count_pending_actions(self: Store, actor_id: str) -> int:
        async with self._db.session() as session:
            result = await session.execute(
                text("SELECT COUNT(*) FROM pending_actions WHERE actor_id = :actor_id"),
                {"actor_id": actor_id},
            )
            return int(result.scalar() or 0)
