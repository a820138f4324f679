"""Persistence for trees, people, edges, pending actions and conversation state.

All data lives in one SQLite database reached through async SQLAlchemy.

Public API:
- Store: Unified facade for all operations
- create_store: Factory to create a Store on a connected Database

Protocols:
- FamilyStore: Abstract interface consumed by the family core

Mappers:
- row_to_tree, row_to_person, row_to_edge, ...: Row conversion utilities

Types:
- TreeEntry, TreeMemberEntry, PersonEntry, EdgeEntry
- PendingActionEntry, ConversationStateEntry
"""

from rootline.store.mappers import (
    row_to_edge,
    row_to_member,
    row_to_pending,
    row_to_person,
    row_to_state,
    row_to_tree,
)
from rootline.store.protocols import FamilyStore
from rootline.store.store import Store, create_store
from rootline.store.trees import generate_join_code
from rootline.store.types import (
    ConversationStateEntry,
    EdgeEntry,
    PendingActionEntry,
    PersonEntry,
    TreeEntry,
    TreeMemberEntry,
)

__all__ = [
    # Store
    "Store",
    "create_store",
    "generate_join_code",
    # Protocols
    "FamilyStore",
    # Mappers
    "row_to_tree",
    "row_to_member",
    "row_to_person",
    "row_to_edge",
    "row_to_pending",
    "row_to_state",
    # Types
    "TreeEntry",
    "TreeMemberEntry",
    "PersonEntry",
    "EdgeEntry",
    "PendingActionEntry",
    "ConversationStateEntry",
]
