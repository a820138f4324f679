"""Name folding and fuzzy name comparison."""

from __future__ import annotations

import re
from dataclasses import dataclass

from rapidfuzz.distance import Levenshtein, Prefix

# Anything other than letters, digits, apostrophes and periods separates tokens.
_SEPARATORS = re.compile(r"[^\w'.]+|_+")
_WHITESPACE = re.compile(r"\s+")

GENDER_MALE = "Male"
GENDER_FEMALE = "Female"
GENDER_UNDEFINED = "Undefined"

_MALE_WORDS = {"m", "male", "man", "boy"}
_FEMALE_WORDS = {"f", "female", "woman", "girl"}


def normalize_name(name: str) -> str:
    """Deterministic fold used for exact collision checks.

    Trims, collapses internal whitespace and case-folds. Distinct from the
    fuzzy comparison below: two names collide only if their folds are equal.
    """
    return _WHITESPACE.sub(" ", name.strip()).casefold()


def normalize_gender(raw: str | None) -> str:
    if not raw:
        return GENDER_UNDEFINED
    value = raw.strip().casefold()
    if value in _MALE_WORDS:
        return GENDER_MALE
    if value in _FEMALE_WORDS:
        return GENDER_FEMALE
    return GENDER_UNDEFINED


def tokenize(name: str) -> list[str]:
    return _SEPARATORS.sub(" ", name.casefold()).split()


@dataclass(frozen=True)
class NameMatcher:
    """Token-level fuzzy name comparison.

    Two tokens match when they are equal, equal once trailing periods are
    removed, one is a single-letter initial of the other, or they are within
    one edit of each other (both longer than two characters). Tokens of at
    least ``long_token_length`` characters that share a stem may also differ
    in up to ``long_token_max_edits`` trailing characters, which lets "Alice"
    and "Alicia" pair up but keeps "Karen" and "Aaron" apart.
    """

    long_token_length: int = 5
    long_token_max_edits: int = 2

    def token_matches(self, a: str, b: str) -> bool:
        if a == b:
            return True
        a_bare = a.rstrip(".")
        b_bare = b.rstrip(".")
        if not a_bare or not b_bare:
            return False
        if a_bare == b_bare:
            return True
        if len(a_bare) == 1 and b_bare.startswith(a_bare):
            return True
        if len(b_bare) == 1 and a_bare.startswith(b_bare):
            return True
        shortest = min(len(a_bare), len(b_bare))
        if shortest <= 2:
            return False
        if Levenshtein.distance(a_bare, b_bare, score_cutoff=1) <= 1:
            return True
        if shortest < self.long_token_length or self.long_token_max_edits <= 1:
            return False
        # Past one edit only the endings may differ: "alice" and "alicia" share "alic"
        stem = Prefix.similarity(a_bare, b_bare)
        return max(len(a_bare), len(b_bare)) - stem <= self.long_token_max_edits

    def similarity(self, name_a: str, name_b: str) -> float:
        """Share of tokens that pair up one-to-one, in [0, 1]."""
        tokens_a = tokenize(name_a)
        tokens_b = tokenize(name_b)
        if not tokens_a or not tokens_b:
            return 0.0

        claimed = [False] * len(tokens_b)
        pairs = 0
        for token in tokens_a:
            for index, other in enumerate(tokens_b):
                if not claimed[index] and self.token_matches(token, other):
                    claimed[index] = True
                    pairs += 1
                    break
        return pairs / max(len(tokens_a), len(tokens_b))

    def surname_matches(self, name_a: str, name_b: str) -> bool:
        """Compare last tokens only; two names with no tokens count as equal."""
        tokens_a = tokenize(name_a)
        tokens_b = tokenize(name_b)
        if not tokens_a and not tokens_b:
            return True
        if not tokens_a or not tokens_b:
            return False
        return self.token_matches(tokens_a[-1], tokens_b[-1])


_default_matcher = NameMatcher()


def similarity(name_a: str, name_b: str) -> float:
    return _default_matcher.similarity(name_a, name_b)


def surname_matches(name_a: str, name_b: str) -> bool:
    return _default_matcher.surname_matches(name_a, name_b)
