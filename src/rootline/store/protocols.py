"""Protocol definitions for the store subsystem.

The family core talks to persistence only through ``FamilyStore``; the
SQLite ``Store`` implements it and tests may substitute a mock.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from rootline.store.types import (
        ConversationStateEntry,
        EdgeEntry,
        PendingActionEntry,
        PersonEntry,
        TreeEntry,
        TreeMemberEntry,
    )


@runtime_checkable
class FamilyStore(Protocol):
    """Protocol for family graph persistence."""

    # Trees and membership

    async def create_tree(self, name: str) -> TreeEntry:
        """Create a tree with a unique join code."""
        ...

    async def get_tree(self, tree_id: str) -> TreeEntry | None: ...

    async def get_tree_by_code(self, join_code: str) -> TreeEntry | None: ...

    async def activate_membership(
        self, tree_id: str, actor_id: str
    ) -> TreeMemberEntry:
        """Add or refresh membership as the actor's most recent."""
        ...

    async def remove_membership(self, tree_id: str, actor_id: str) -> bool: ...

    async def list_memberships(self, actor_id: str) -> list[TreeMemberEntry]:
        """Memberships of an actor, most recently activated first."""
        ...

    async def is_member(self, tree_id: str, actor_id: str) -> bool: ...

    # People

    async def create_person(
        self,
        tree_id: str,
        name: str,
        dob: str | None = None,
        dod: str | None = None,
        gender: str | None = None,
    ) -> PersonEntry: ...

    async def get_person(self, person_id: str) -> PersonEntry | None: ...

    async def list_people(self, tree_id: str) -> list[PersonEntry]: ...

    async def find_people_by_normalized_name(
        self, tree_id: str, normalized_name: str
    ) -> list[PersonEntry]:
        """Exact match on the folded name."""
        ...

    async def get_person_names_batch(self, person_ids: list[str]) -> dict[str, str]: ...

    async def update_person(
        self,
        person_id: str,
        name: str | None = None,
        dob: str | None = None,
        dod: str | None = None,
        gender: str | None = None,
    ) -> PersonEntry | None: ...

    async def delete_person(self, person_id: str) -> bool:
        """Delete a person and all edges touching them."""
        ...

    # Edges

    async def upsert_edge(
        self,
        tree_id: str,
        kind: str,
        person_a_id: str,
        person_b_id: str,
        status: str | None = None,
    ) -> EdgeEntry:
        """Insert an edge; an existing identical edge is left in place."""
        ...

    async def delete_edges(
        self,
        tree_id: str,
        kinds: Iterable[str],
        person_a_id: str,
        person_b_id: str,
    ) -> int: ...

    async def get_edge(
        self, tree_id: str, kind: str, person_a_id: str, person_b_id: str
    ) -> EdgeEntry | None: ...

    async def list_edges(
        self,
        tree_id: str,
        person_id: str | None = None,
        kinds: Iterable[str] | None = None,
    ) -> list[EdgeEntry]: ...

    # Pending actions

    async def save_pending_action(
        self, actor_id: str, tree_id: str, payload: dict[str, Any]
    ) -> PendingActionEntry: ...

    async def pop_pending_action(self, actor_id: str) -> PendingActionEntry | None:
        """Fetch and delete the most recent pending action."""
        ...

    async def count_pending_actions(self, actor_id: str) -> int: ...

    # Conversation state

    async def get_conversation_state(
        self, actor_id: str
    ) -> ConversationStateEntry | None: ...

    async def upsert_conversation_state(
        self,
        actor_id: str,
        active_tree_id: str | None,
        last_person_id: str | None = None,
        last_person_name: str | None = None,
    ) -> ConversationStateEntry: ...

    async def clear_conversation_state(self, actor_id: str) -> None: ...
