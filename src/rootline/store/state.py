"""Conversation state rows, one per actor."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import text

from rootline.store.mappers import row_to_state
from rootline.store.types import ConversationStateEntry

if TYPE_CHECKING:
    from rootline.store.store import Store


class StateOpsMixin:
    """Get, overwrite and clear per-actor conversation state."""

    async def get_conversation_state(
        self: Store, actor_id: str
    ) -> ConversationStateEntry | None:
        async with self._db.session() as session:
            result = await session.execute(
                text("SELECT * FROM conversation_states WHERE actor_id = :actor_id"),
                {"actor_id": actor_id},
            )
            row = result.fetchone()
            return row_to_state(row) if row else None

    async def upsert_conversation_state(
        self: Store,
        actor_id: str,
        active_tree_id: str | None,
        last_person_id: str | None = None,
        last_person_name: str | None = None,
    ) -> ConversationStateEntry:
        """Overwrite the whole row for an actor."""
        now = datetime.now(UTC)
        async with self._db.session() as session:
            await session.execute(
                text("""
                    INSERT INTO conversation_states
                        (actor_id, active_tree_id, last_person_id, last_person_name, updated_at)
                    VALUES (:actor_id, :tree_id, :person_id, :person_name, :updated_at)
                    ON CONFLICT (actor_id) DO UPDATE SET
                        active_tree_id = excluded.active_tree_id,
                        last_person_id = excluded.last_person_id,
                        last_person_name = excluded.last_person_name,
                        updated_at = excluded.updated_at
                """),
                {
                    "actor_id": actor_id,
                    "tree_id": active_tree_id,
                    "person_id": last_person_id,
                    "person_name": last_person_name,
                    "updated_at": now.isoformat(),
                },
            )
        return ConversationStateEntry(
            actor_id=actor_id,
            active_tree_id=active_tree_id,
            last_person_id=last_person_id,
            last_person_name=last_person_name,
            updated_at=now,
        )

    async def clear_conversation_state(self: Store, actor_id: str) -> None:
        """Null out every field while keeping the row."""
        await self.upsert_conversation_state(actor_id, None)
