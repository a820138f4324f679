"""Fuzzy duplicate-person detection.

Before a person is created from a bare name, existing people in the tree
are scored against it. A likely match defers the creation until the actor
confirms they really mean a different person.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from rootline.family import dates
from rootline.family.names import NameMatcher, normalize_name

if TYPE_CHECKING:
    from rootline.config.models import DuplicateConfig
    from rootline.store.types import PersonEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DuplicateCandidate:
    """An existing person that resembles the one about to be created."""

    person: PersonEntry
    similarity: float
    surname_match: bool


@dataclass
class DuplicateResolver:
    min_similarity: float = 0.58
    strong_similarity: float = 0.8
    max_candidates: int = 5
    # Birth ranges are widened by this many years before the overlap test
    date_slack_years: int = 1
    matcher: NameMatcher = field(default_factory=NameMatcher)

    @classmethod
    def from_config(cls, config: DuplicateConfig) -> DuplicateResolver:
        return cls(
            min_similarity=config.min_similarity,
            strong_similarity=config.strong_similarity,
            max_candidates=config.max_candidates,
            date_slack_years=config.date_slack_years,
            matcher=NameMatcher(
                long_token_length=config.long_token_length,
                long_token_max_edits=config.long_token_max_edits,
            ),
        )

    def find_duplicates(
        self,
        existing: Iterable[PersonEntry],
        candidate_name: str,
        candidate_dob: str | None = None,
    ) -> list[DuplicateCandidate]:
        """Rank existing people that look like ``candidate_name``.

        People whose folded name equals the candidate's are skipped; exact
        collisions are the ambiguity check's concern. A person qualifies
        when the names are similar enough and either very similar or share
        a surname, and when both birth dates are known their ranges overlap
        (after widening by ``date_slack_years``, so "1950" and "1951" still
        meet). Results are ordered by descending similarity, capped at
        ``max_candidates``.
        """
        normalized = normalize_name(candidate_name)
        candidate_range = dates.normalize(candidate_dob).range
        if candidate_range is not None:
            candidate_range = candidate_range.widened(self.date_slack_years)

        found: list[DuplicateCandidate] = []
        for person in existing:
            if person.normalized_name == normalized:
                continue
            score = self.matcher.similarity(candidate_name, person.primary_name)
            if score < self.min_similarity:
                continue
            surname = self.matcher.surname_matches(candidate_name, person.primary_name)
            if score < self.strong_similarity and not surname:
                continue
            if not dates.overlaps(candidate_range, dates.normalize(person.dob).range):
                continue
            found.append(DuplicateCandidate(person, score, surname))

        found.sort(key=lambda c: c.similarity, reverse=True)
        if found:
            logger.debug(
                "duplicate_candidates_found",
                extra={"candidate.name": candidate_name, "count": len(found)},
            )
        return found[: self.max_candidates]
