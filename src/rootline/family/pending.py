"""Single-slot confirm/cancel protocol for deferred mutations.

Risky operations are saved as a pending payload instead of being applied.
The actor's next YES applies the most recent one; NO discards it.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from rootline.store.protocols import FamilyStore
    from rootline.store.types import PendingActionEntry

logger = logging.getLogger(__name__)

YES_WORDS = frozenset({"yes", "y"})
NO_WORDS = frozenset({"no", "n", "cancel", "stop"})

# Payload "kind" values that a YES knows how to resume
RESUME_CREATE_PERSON = "create_person"
RESUME_CREATE_CHILD = "create_child"
RESUME_RENAME = "rename"
RESUME_DIVORCE = "divorce"

RESUMABLE_KINDS = frozenset(
    {RESUME_CREATE_PERSON, RESUME_CREATE_CHILD, RESUME_RENAME, RESUME_DIVORCE}
)


def parse_confirmation(text: str | None) -> bool | None:
    """True for yes, False for no, None when the text is neither."""
    if text is None:
        return None
    word = text.strip().casefold()
    if word in YES_WORDS:
        return True
    if word in NO_WORDS:
        return False
    return None


def is_confirmation(text: str | None) -> bool:
    return parse_confirmation(text) is not None


class PendingConfirmation:
    """Per-actor pending slot backed by append-only store rows.

    Only the most recent action is ever popped. Saving while an older one
    is outstanding leaves the older row unreachable; that is logged.
    """

    def __init__(self, store: FamilyStore) -> None:
        self._store = store

    async def save(
        self, actor_id: str, tree_id: str, payload: dict[str, Any]
    ) -> PendingActionEntry:
        outstanding = await self._store.count_pending_actions(actor_id)
        if outstanding:
            logger.warning(
                "pending_action_superseded",
                extra={"actor.id": actor_id, "outstanding": outstanding},
            )
        entry = await self._store.save_pending_action(actor_id, tree_id, payload)
        logger.debug(
            "pending_action_saved",
            extra={"actor.id": actor_id, "pending.kind": payload.get("kind")},
        )
        return entry

    async def pop(self, actor_id: str) -> PendingActionEntry | None:
        return await self._store.pop_pending_action(actor_id)
