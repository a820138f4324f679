"""Tests for fuzzy duplicate-person detection."""

from rootline.config.models import DuplicateConfig
from rootline.family.duplicates import DuplicateResolver
from rootline.family.names import normalize_name
from rootline.store.types import PersonEntry


def make_person(name: str, dob: str | None = None, person_id: str | None = None) -> PersonEntry:
    return PersonEntry(
        id=person_id or f"p-{normalize_name(name).replace(' ', '-')}",
        tree_id="t-1",
        primary_name=name,
        normalized_name=normalize_name(name),
        dob=dob,
    )


class TestFindDuplicates:
    def test_near_spelling_with_adjacent_birth_years(self):
        resolver = DuplicateResolver()
        existing = [make_person("Alice Smith", "1950")]

        found = resolver.find_duplicates(existing, "Alicia Smith", "1951")

        assert [c.person.primary_name for c in found] == ["Alice Smith"]
        assert found[0].similarity == 1.0
        assert found[0].surname_match

    def test_exact_name_is_not_a_duplicate(self):
        resolver = DuplicateResolver()
        existing = [make_person("Alice Smith")]
        assert resolver.find_duplicates(existing, "  alice   smith ") == []

    def test_distant_birth_dates_rule_out_a_match(self):
        resolver = DuplicateResolver()
        existing = [make_person("Alice Smith", "1890")]
        assert resolver.find_duplicates(existing, "Alicia Smith", "1950") == []

    def test_unknown_dates_do_not_rule_out_a_match(self):
        resolver = DuplicateResolver()
        existing = [make_person("Alice Smith")]
        assert len(resolver.find_duplicates(existing, "Alicia Smith", "1950")) == 1

    def test_no_slack_requires_overlapping_years(self):
        resolver = DuplicateResolver(date_slack_years=0)
        existing = [make_person("Alice Smith", "1950")]
        assert resolver.find_duplicates(existing, "Alicia Smith", "1951") == []

    def test_partial_match_needs_a_shared_surname(self):
        resolver = DuplicateResolver()
        existing = [make_person("John Smith"), make_person("John Jones")]

        found = resolver.find_duplicates(existing, "John Smyth Jr")

        # Two of three tokens pair with "John Smith", but "Jr" is not a surname match
        assert [c.person.primary_name for c in found] == []

    def test_partial_match_with_shared_surname(self):
        resolver = DuplicateResolver()
        existing = [make_person("Mary Ann Smith"), make_person("Mary Ann Jones")]

        found = resolver.find_duplicates(existing, "Mary Smith")

        assert [c.person.primary_name for c in found] == ["Mary Ann Smith"]
        assert found[0].similarity < resolver.strong_similarity

    def test_strong_similarity_ignores_surname(self):
        resolver = DuplicateResolver(strong_similarity=0.6)
        existing = [make_person("Mary Ann Jones")]

        found = resolver.find_duplicates(existing, "Mary Ann Smith")

        assert len(found) == 1
        assert not found[0].surname_match

    def test_sorted_by_similarity_and_capped(self):
        resolver = DuplicateResolver(max_candidates=2)
        existing = [
            make_person("Ann Lee Smith", person_id="p-1"),
            make_person("Anne Smith", person_id="p-2"),
            make_person("Annie Smith", person_id="p-3"),
        ]

        found = resolver.find_duplicates(existing, "Ann Smith")

        assert len(found) == 2
        assert found[0].similarity >= found[1].similarity
        assert found[0].similarity == 1.0

    def test_unrelated_names(self):
        resolver = DuplicateResolver()
        existing = [make_person("George Washington")]
        assert resolver.find_duplicates(existing, "Alice Smith") == []

    def test_shared_surname_alone_is_below_threshold(self):
        resolver = DuplicateResolver()
        existing = [make_person("Aaron Smith"), make_person("Mary Smith")]

        assert resolver.matcher.similarity("Karen Smith", "Aaron Smith") == 0.5
        assert resolver.find_duplicates(existing, "Karen Smith") == []


class TestFromConfig:
    def test_copies_thresholds(self):
        config = DuplicateConfig(
            min_similarity=0.5,
            strong_similarity=0.9,
            max_candidates=3,
            long_token_max_edits=1,
            date_slack_years=0,
        )
        resolver = DuplicateResolver.from_config(config)
        assert resolver.min_similarity == 0.5
        assert resolver.strong_similarity == 0.9
        assert resolver.max_candidates == 3
        assert resolver.date_slack_years == 0
        assert resolver.matcher.long_token_max_edits == 1
