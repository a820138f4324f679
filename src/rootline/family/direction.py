"""Guess which of two named people is the parent from the actor's wording."""

from __future__ import annotations

import re
from enum import Enum

PARENT_WORDS = ("mother", "father", "dad", "mom", "parent")

_PARENT_WORD = "(?:" + "|".join(PARENT_WORDS) + ")"
_APOSTROPHE = "['’]"
_GAP = r"[\s,:]*"


class ParentDirection(Enum):
    PARENT_IS_A = "parent_is_a"
    PARENT_IS_B = "parent_is_b"
    UNKNOWN = "unknown"


def _is_child(text: str, name: str) -> bool:
    """Whether ``<name>'s mother|father|...`` appears in the text."""
    pattern = rf"(?<!\w){re.escape(name)}{_APOSTROPHE}s\s+{_PARENT_WORD}\b"
    return re.search(pattern, text, re.IGNORECASE) is not None


def _is_parent(text: str, name: str) -> bool:
    """Whether a parent word sits right before or after the name."""
    escaped = re.escape(name)
    after = rf"(?<!\w){escaped}(?!{_APOSTROPHE}s\b){_GAP}\b{_PARENT_WORD}\b"
    before = rf"\b{_PARENT_WORD}{_GAP}{escaped}(?!\w)"
    return (
        re.search(after, text, re.IGNORECASE) is not None
        or re.search(before, text, re.IGNORECASE) is not None
    )


def infer_parent_direction(text: str | None, name_a: str, name_b: str) -> ParentDirection:
    """Classify which name is the parent, or UNKNOWN.

    A possessive ("Bob's father") marks the child. Failing that, a parent
    word adjacent to exactly one name marks the parent. Anything less
    decisive is UNKNOWN and the caller keeps its own order.
    """
    if not text or not name_a.strip() or not name_b.strip():
        return ParentDirection.UNKNOWN
    name_a = name_a.strip()
    name_b = name_b.strip()

    a_child = _is_child(text, name_a)
    b_child = _is_child(text, name_b)
    if a_child != b_child:
        return ParentDirection.PARENT_IS_B if a_child else ParentDirection.PARENT_IS_A

    a_parent = _is_parent(text, name_a)
    b_parent = _is_parent(text, name_b)
    if a_parent != b_parent:
        return ParentDirection.PARENT_IS_A if a_parent else ParentDirection.PARENT_IS_B

    return ParentDirection.UNKNOWN
