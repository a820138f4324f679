"""Tests for exact-name ambiguity detection."""

import pytest

from rootline.family.ambiguity import AmbiguityResolver
from rootline.family.edges import PARENT_OF
from rootline.family.errors import AmbiguousReferenceError


class TestCheckUnambiguous:
    async def test_no_match(self, store, tree):
        resolver = AmbiguityResolver(store)
        assert await resolver.check_unambiguous(tree.id, "Nobody") is None

    async def test_single_match_ignores_case_and_spacing(self, store, tree):
        person = await store.create_person(tree.id, "John Smith")
        resolver = AmbiguityResolver(store)

        found = await resolver.check_unambiguous(tree.id, "  john   SMITH")

        assert found is not None
        assert found.id == person.id

    async def test_several_matches_raise_with_summaries(self, store, tree):
        elder = await store.create_person(tree.id, "John Smith", dob="1920")
        await store.create_person(tree.id, "John Smith", dob="1950")
        mary = await store.create_person(tree.id, "Mary Smith")
        await store.upsert_edge(tree.id, PARENT_OF, mary.id, elder.id)

        with pytest.raises(AmbiguousReferenceError) as exc_info:
            await AmbiguityResolver(store).check_unambiguous(tree.id, "John Smith")

        error = exc_info.value
        assert error.name == "John Smith"
        assert [c.birth_year for c in error.candidates] == [1920, 1950]
        assert error.candidates[0].parents == ["Mary Smith"]
        assert "born 1920" in error.candidates[0].describe()

    async def test_other_trees_are_ignored(self, store, tree):
        other = await store.create_tree("Jones Family")
        await store.create_person(tree.id, "John Smith")
        await store.create_person(other.id, "John Smith")

        found = await AmbiguityResolver(store).check_unambiguous(tree.id, "John Smith")

        assert found is not None
        assert found.tree_id == tree.id
