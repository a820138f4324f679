"""SQLAlchemy ORM models.

The store reads and writes through ``sqlalchemy.text()`` queries; these
declarations own the schema that ``Database.create_schema`` emits.
Timestamps are ISO-8601 strings in UTC.
"""

from datetime import UTC, datetime

from sqlalchemy import ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Base class for all models."""


class Tree(Base):
    """A shared family tree."""

    __tablename__ = "trees"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    join_code: Mapped[str] = mapped_column(String(6), nullable=False, unique=True)
    created_at: Mapped[str] = mapped_column(String, nullable=False)


class TreeMember(Base):
    """Actor membership in a tree."""

    __tablename__ = "tree_members"

    tree_id: Mapped[str] = mapped_column(
        String, ForeignKey("trees.id", ondelete="CASCADE"), primary_key=True
    )
    actor_id: Mapped[str] = mapped_column(String, primary_key=True, index=True)
    activated_at: Mapped[str] = mapped_column(String, nullable=False)


class Person(Base):
    """A person in a tree."""

    __tablename__ = "persons"
    __table_args__ = (Index("ix_persons_tree_normalized", "tree_id", "normalized_name"),)

    id: Mapped[str] = mapped_column(String, primary_key=True)
    tree_id: Mapped[str] = mapped_column(
        String, ForeignKey("trees.id", ondelete="CASCADE"), nullable=False
    )
    primary_name: Mapped[str] = mapped_column(String, nullable=False)
    normalized_name: Mapped[str] = mapped_column(String, nullable=False)
    dob: Mapped[str | None] = mapped_column(String, nullable=True)
    dod: Mapped[str | None] = mapped_column(String, nullable=True)
    gender: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[str] = mapped_column(String, nullable=False)
    updated_at: Mapped[str] = mapped_column(String, nullable=False)


class Edge(Base):
    """Typed relationship between two persons."""

    __tablename__ = "edges"
    __table_args__ = (
        UniqueConstraint(
            "tree_id", "kind", "person_a_id", "person_b_id", name="uq_edges_pair"
        ),
    )

    id: Mapped[str] = mapped_column(String, primary_key=True)
    tree_id: Mapped[str] = mapped_column(
        String, ForeignKey("trees.id", ondelete="CASCADE"), nullable=False, index=True
    )
    kind: Mapped[str] = mapped_column(String, nullable=False)
    person_a_id: Mapped[str] = mapped_column(
        String, ForeignKey("persons.id", ondelete="CASCADE"), nullable=False
    )
    person_b_id: Mapped[str] = mapped_column(
        String, ForeignKey("persons.id", ondelete="CASCADE"), nullable=False
    )
    status: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[str] = mapped_column(String, nullable=False)


class PendingAction(Base):
    """A deferred mutation awaiting an actor's yes/no."""

    __tablename__ = "pending_actions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    actor_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    tree_id: Mapped[str] = mapped_column(String, nullable=False)
    payload: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[str] = mapped_column(String, nullable=False)


class ConversationState(Base):
    """Per-actor active tree and last-mentioned person."""

    __tablename__ = "conversation_states"

    actor_id: Mapped[str] = mapped_column(String, primary_key=True)
    active_tree_id: Mapped[str | None] = mapped_column(String, nullable=True)
    last_person_id: Mapped[str | None] = mapped_column(String, nullable=True)
    last_person_name: Mapped[str | None] = mapped_column(String, nullable=True)
    updated_at: Mapped[str] = mapped_column(String, nullable=False)
