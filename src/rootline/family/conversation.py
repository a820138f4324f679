"""Per-actor conversation state: the active tree and the last person mentioned."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rootline.store.protocols import FamilyStore
    from rootline.store.types import ConversationStateEntry, PersonEntry

logger = logging.getLogger(__name__)


class ConversationState:
    def __init__(self, store: FamilyStore) -> None:
        self._store = store

    async def get(self, actor_id: str) -> ConversationStateEntry | None:
        return await self._store.get_conversation_state(actor_id)

    async def active_tree(self, actor_id: str) -> str | None:
        """The actor's active tree id.

        Falls back to the most recently activated membership when the actor
        has no state row yet.
        """
        state = await self._store.get_conversation_state(actor_id)
        if state is not None:
            return state.active_tree_id
        memberships = await self._store.list_memberships(actor_id)
        return memberships[0].tree_id if memberships else None

    async def activate_tree(self, actor_id: str, tree_id: str) -> ConversationStateEntry:
        """Make a tree active: bump its membership and forget the last person."""
        await self._store.activate_membership(tree_id, actor_id)
        state = await self._store.upsert_conversation_state(actor_id, tree_id)
        logger.debug("tree_activated", extra={"actor.id": actor_id, "tree.id": tree_id})
        return state

    async def remember_person(
        self, actor_id: str, tree_id: str, person: PersonEntry
    ) -> ConversationStateEntry:
        return await self._store.upsert_conversation_state(
            actor_id,
            tree_id,
            last_person_id=person.id,
            last_person_name=person.primary_name,
        )

    async def leave(self, actor_id: str, tree_id: str) -> bool:
        """Drop the membership and clear every state field."""
        removed = await self._store.remove_membership(tree_id, actor_id)
        await self._store.clear_conversation_state(actor_id)
        logger.debug(
            "tree_left",
            extra={"actor.id": actor_id, "tree.id": tree_id, "removed": removed},
        )
        return removed
