"""Public types for the store subsystem."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any


def _parse_datetime(s: str | None) -> datetime | None:
    """Parse ISO datetime string, handling Z suffix and ensuring timezone awareness."""
    if not s:
        return None
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    dt = datetime.fromisoformat(s)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt


@dataclass
class TreeEntry:
    """A family tree shared by its members through a join code."""

    id: str
    name: str
    join_code: str
    created_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "join_code": self.join_code,
        }
        if self.created_at:
            d["created_at"] = self.created_at.isoformat()
        return d


@dataclass
class TreeMemberEntry:
    """An actor's membership in a tree.

    ``activated_at`` is bumped whenever the actor creates or joins the tree,
    so the most recent one identifies the actor's active tree.
    """

    tree_id: str
    actor_id: str
    activated_at: datetime | None = None


@dataclass
class PersonEntry:
    """A person node in a family tree."""

    id: str
    tree_id: str
    primary_name: str
    normalized_name: str
    dob: str | None = None
    dod: str | None = None
    gender: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "tree_id": self.tree_id,
            "name": self.primary_name,
        }
        if self.dob:
            d["dob"] = self.dob
        if self.dod:
            d["dod"] = self.dod
        if self.gender:
            d["gender"] = self.gender
        return d


@dataclass
class EdgeEntry:
    """A typed relationship between two people.

    For ``parent_of`` the parent is ``person_a_id``. Undirected kinds store
    their participants in canonical order.
    """

    id: str
    tree_id: str
    kind: str
    person_a_id: str
    person_b_id: str
    status: str | None = None
    created_at: datetime | None = None

    def other(self, person_id: str) -> str:
        return self.person_b_id if self.person_a_id == person_id else self.person_a_id

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "kind": self.kind,
            "person_a_id": self.person_a_id,
            "person_b_id": self.person_b_id,
        }
        if self.status:
            d["status"] = self.status
        return d


@dataclass
class PendingActionEntry:
    """A deferred mutation waiting for an explicit yes/no."""

    id: int
    actor_id: str
    tree_id: str
    payload: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None


@dataclass
class ConversationStateEntry:
    """Where an actor is working and who they last talked about."""

    actor_id: str
    active_tree_id: str | None = None
    last_person_id: str | None = None
    last_person_name: str | None = None
    updated_at: datetime | None = None
