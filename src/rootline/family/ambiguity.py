"""Exact-name ambiguity detection.

An edit that names a person must name exactly one of them. When several
people in a tree share the same folded name, the edit is refused and the
actor is shown enough about each one to tell them apart.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rootline.family.errors import AmbiguousReferenceError
from rootline.family.names import normalize_name
from rootline.family.summary import PersonSummary, summarize_person

if TYPE_CHECKING:
    from rootline.store.protocols import FamilyStore
    from rootline.store.types import PersonEntry

logger = logging.getLogger(__name__)

# One entry per person sharing the ambiguous name
CandidateSummary = PersonSummary


class AmbiguityResolver:
    def __init__(self, store: FamilyStore) -> None:
        self._store = store

    async def check_unambiguous(self, tree_id: str, name: str) -> PersonEntry | None:
        """Return the single person with this exact name, or None if there is none.

        Raises:
            AmbiguousReferenceError: More than one person has the name.
        """
        matches = await self._store.find_people_by_normalized_name(
            tree_id, normalize_name(name)
        )
        if len(matches) <= 1:
            return matches[0] if matches else None

        candidates = [await summarize_person(self._store, p) for p in matches]
        logger.info(
            "ambiguous_reference",
            extra={"tree.id": tree_id, "name": name, "count": len(matches)},
        )
        raise AmbiguousReferenceError(name.strip(), candidates)
