"""Family graph core.

Resolves structured editing operations against a shared family tree:
date normalization, fuzzy duplicate detection, exact-name ambiguity
checks, edge mutation rules, pending confirmations and per-actor state.
"""

from rootline.family.ambiguity import AmbiguityResolver, CandidateSummary
from rootline.family.conversation import ConversationState
from rootline.family.dates import DateRange, NormalizedDate, normalize
from rootline.family.direction import ParentDirection, infer_parent_direction
from rootline.family.duplicates import DuplicateCandidate, DuplicateResolver
from rootline.family.errors import (
    AmbiguousReferenceError,
    ConfirmationRequiredError,
    DuplicateCandidateError,
    PersistenceError,
    RootlineError,
    ValidationError,
)
from rootline.family.mutator import (
    ChildAttachment,
    GraphMutator,
    ParentChildValidator,
    PersonUpsert,
    min_parent_age_gap,
)
from rootline.family.names import NameMatcher, normalize_gender, normalize_name
from rootline.family.operations import DUPLICATE_CHECK_POLICY, Operation
from rootline.family.pending import PendingConfirmation, is_confirmation
from rootline.family.processor import BatchProcessor, BatchResult, OperationOutcome
from rootline.family.summary import PersonSummary

__all__ = [
    # Processing
    "BatchProcessor",
    "BatchResult",
    "OperationOutcome",
    "Operation",
    "DUPLICATE_CHECK_POLICY",
    # Components
    "AmbiguityResolver",
    "CandidateSummary",
    "ConversationState",
    "DuplicateCandidate",
    "DuplicateResolver",
    "GraphMutator",
    "NameMatcher",
    "PendingConfirmation",
    "PersonSummary",
    "PersonUpsert",
    "ChildAttachment",
    "ParentChildValidator",
    "min_parent_age_gap",
    # Dates and names
    "DateRange",
    "NormalizedDate",
    "normalize",
    "normalize_name",
    "normalize_gender",
    "ParentDirection",
    "infer_parent_direction",
    "is_confirmation",
    # Errors
    "RootlineError",
    "ValidationError",
    "AmbiguousReferenceError",
    "ConfirmationRequiredError",
    "DuplicateCandidateError",
    "PersistenceError",
]
