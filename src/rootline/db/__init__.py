"""Database layer."""

from rootline.db.engine import Database
from rootline.db.models import (
    Base,
    ConversationState,
    Edge,
    PendingAction,
    Person,
    Tree,
    TreeMember,
)

__all__ = [
    # Engine
    "Database",
    # Models
    "Base",
    "Tree",
    "TreeMember",
    "Person",
    "Edge",
    "PendingAction",
    "ConversationState",
]
