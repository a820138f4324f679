"""Error taxonomy for family graph operations.

Every error carries enough context to render a user-facing message; the
batch processor turns them into reply text instead of letting them escape.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from rootline.family.duplicates import DuplicateCandidate
    from rootline.family.summary import PersonSummary


class RootlineError(Exception):
    """Base class for all rootline errors."""


class ValidationError(RootlineError):
    """A required field is missing or a value is not acceptable.

    No mutation is attempted. Processing continues with the next operation.
    """


class AmbiguousReferenceError(RootlineError):
    """More than one person in the tree has exactly this name."""

    def __init__(self, name: str, candidates: list[PersonSummary]) -> None:
        super().__init__(f"{len(candidates)} people are named {name!r}")
        self.name = name
        self.candidates = candidates


class ConfirmationRequiredError(RootlineError):
    """The operation must be confirmed before it is applied.

    ``payload`` is what gets saved as the pending action; the batch stops
    so the YES/NO question is the last thing the actor reads.
    """

    def __init__(self, message: str, payload: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.payload = payload or {}


class DuplicateCandidateError(ConfirmationRequiredError):
    """The person about to be created looks like someone already in the tree."""

    def __init__(
        self,
        name: str,
        candidates: list[DuplicateCandidate],
        payload: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            f"{name!r} resembles {len(candidates)} existing people", payload
        )
        self.name = name
        self.candidates = candidates


class PersistenceError(RootlineError):
    """A storage call failed."""
