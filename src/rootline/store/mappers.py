"""Row mappers for converting database rows to store types."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rootline.store.types import (
    ConversationStateEntry,
    EdgeEntry,
    PendingActionEntry,
    PersonEntry,
    TreeEntry,
    TreeMemberEntry,
    _parse_datetime,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Row


def row_to_tree(row: Row[Any]) -> TreeEntry:
    return TreeEntry(
        id=row.id,
        name=row.name,
        join_code=row.join_code,
        created_at=_parse_datetime(row.created_at),
    )


def row_to_member(row: Row[Any]) -> TreeMemberEntry:
    return TreeMemberEntry(
        tree_id=row.tree_id,
        actor_id=row.actor_id,
        activated_at=_parse_datetime(row.activated_at),
    )


def row_to_person(row: Row[Any]) -> PersonEntry:
    return PersonEntry(
        id=row.id,
        tree_id=row.tree_id,
        primary_name=row.primary_name,
        normalized_name=row.normalized_name,
        dob=row.dob,
        dod=row.dod,
        gender=row.gender,
        created_at=_parse_datetime(row.created_at),
        updated_at=_parse_datetime(row.updated_at),
    )


def row_to_edge(row: Row[Any]) -> EdgeEntry:
    return EdgeEntry(
        id=row.id,
        tree_id=row.tree_id,
        kind=row.kind,
        person_a_id=row.person_a_id,
        person_b_id=row.person_b_id,
        status=row.status,
        created_at=_parse_datetime(row.created_at),
    )


def row_to_pending(row: Row[Any]) -> PendingActionEntry:
    """Convert a pending_actions row; the payload column holds JSON text."""
    return PendingActionEntry(
        id=row.id,
        actor_id=row.actor_id,
        tree_id=row.tree_id,
        payload=json.loads(row.payload) if row.payload else {},
        created_at=_parse_datetime(row.created_at),
    )


def row_to_state(row: Row[Any]) -> ConversationStateEntry:
    return ConversationStateEntry(
        actor_id=row.actor_id,
        active_tree_id=row.active_tree_id,
        last_person_id=row.last_person_id,
        last_person_name=row.last_person_name,
        updated_at=_parse_datetime(row.updated_at),
    )
