"""End-to-end tests for batch processing and confirmations."""

import pytest

from rootline.config.models import GraphConfig, RootlineConfig
from rootline.family import replies
from rootline.family.edges import DIVORCED_FROM, PARENT_OF, SEPARATED_FROM, SPOUSE_OF
from rootline.family.errors import PersistenceError
from rootline.family.mutator import min_parent_age_gap
from rootline.family.processor import BatchProcessor
from tests.conftest import ACTOR, OTHER_ACTOR


async def active_tree_id(processor: BatchProcessor, actor: str = ACTOR) -> str:
    tree_id = await processor.state.active_tree(actor)
    assert tree_id is not None
    return tree_id


async def people_named(store, tree_id: str) -> list[str]:
    return sorted(p.primary_name for p in await store.list_people(tree_id))


def statuses(result) -> list[str]:
    return [o.status for o in result.outcomes]


class TestBatchBasics:
    async def test_empty_batch(self, processor):
        result = await processor.process(ACTOR, [])
        assert result.reply == replies.NO_OPERATIONS
        assert result.outcomes == []

    async def test_edit_without_tree(self, processor):
        result = await processor.process(ACTOR, [{"op": "add_person", "name": "Bob"}])
        assert statuses(result) == ["invalid"]
        assert result.reply == replies.NO_ACTIVE_TREE

    async def test_help_without_tree(self, processor):
        result = await processor.process(ACTOR, [{"op": "help"}])
        assert "To create a new tree" in result.reply

    async def test_new_tree_activates_it(self, processor, store):
        result = await processor.process(ACTOR, [{"op": "new_tree", "name": "Smith Family"}])

        tree = await store.get_tree(await active_tree_id(processor))
        assert tree.name == "Smith Family"
        assert tree.join_code in result.reply

    async def test_join_tree_by_code(self, active_processor, store):
        tree = await store.get_tree(await active_tree_id(active_processor))

        result = await active_processor.process(
            OTHER_ACTOR, [{"op": "join_tree", "code": tree.join_code.lower()}]
        )

        assert statuses(result) == ["ok"]
        assert await active_tree_id(active_processor, OTHER_ACTOR) == tree.id

    async def test_join_unknown_code(self, processor):
        result = await processor.process(ACTOR, [{"op": "join_tree", "code": "ZZZZZ9"}])
        assert statuses(result) == ["invalid"]
        assert "ZZZZZ9" in result.reply

    async def test_validation_error_does_not_stop_batch(self, active_processor, store):
        result = await active_processor.process(
            ACTOR,
            [
                {"op": "add_person"},
                {"op": "teleport", "name": "Nobody"},
                {"op": "add_person", "name": "Bob", "dob": 1950},
            ],
        )

        assert statuses(result) == ["invalid", "invalid", "ok"]
        assert not result.stopped
        tree_id = await active_tree_id(active_processor)
        bob = (await store.list_people(tree_id))[0]
        assert bob.dob == "1950"

    async def test_add_existing_person_updates_details(self, active_processor):
        await active_processor.process(ACTOR, [{"op": "add_person", "name": "Bob"}])
        result = await active_processor.process(
            ACTOR, [{"op": "add_person", "name": "bob", "gender": "m"}]
        )
        assert "details updated" in result.reply

    async def test_storage_failure_stops_batch(self, active_processor, store, monkeypatch):
        async def broken(*args, **kwargs):
            raise PersistenceError("disk I/O error")

        monkeypatch.setattr(store, "create_person", broken)

        result = await active_processor.process(
            ACTOR,
            [{"op": "add_person", "name": "Bob"}, {"op": "add_person", "name": "Carl"}],
        )

        assert statuses(result) == ["failed"]
        assert result.stopped
        assert result.reply == replies.STORAGE_FAILURE


class TestDuplicateConfirmation:
    async def test_yes_creates_a_distinct_person(self, active_processor, store):
        tree_id = await active_tree_id(active_processor)
        await active_processor.process(
            ACTOR, [{"op": "add_person", "name": "Alicia", "dob": "1951"}]
        )

        result = await active_processor.process(
            ACTOR,
            [
                {"op": "add_person", "name": "Alice", "dob": "1950"},
                {"op": "add_person", "name": "Zed"},
            ],
        )

        assert statuses(result) == ["pending"]
        assert "Alicia" in result.reply
        assert "YES" in result.reply
        assert await people_named(store, tree_id) == ["Alicia"]

        confirmed = await active_processor.confirm(ACTOR, "YES")

        assert statuses(confirmed) == ["ok"]
        people = {p.primary_name: p for p in await store.list_people(tree_id)}
        assert sorted(people) == ["Alice", "Alicia"]
        assert people["Alice"].dob == "1950"

    async def test_no_discards_the_action(self, active_processor, store):
        tree_id = await active_tree_id(active_processor)
        await active_processor.process(ACTOR, [{"op": "add_person", "name": "Alicia"}])
        await active_processor.process(ACTOR, [{"op": "add_person", "name": "Alice"}])

        result = await active_processor.confirm(ACTOR, "no")

        assert result.reply == replies.CANCELLED
        assert await people_named(store, tree_id) == ["Alicia"]
        assert (await active_processor.confirm(ACTOR, "yes")).reply == replies.NOTHING_TO_CONFIRM

    async def test_nothing_to_confirm(self, active_processor):
        result = await active_processor.confirm(ACTOR, "y")
        assert result.reply == replies.NOTHING_TO_CONFIRM

    async def test_not_a_confirmation(self, active_processor):
        result = await active_processor.confirm(ACTOR, "perhaps")
        assert statuses(result) == ["invalid"]
        assert result.reply == replies.NOT_A_CONFIRMATION

    async def test_unknown_pending_kind_is_stale(self, active_processor):
        tree_id = await active_tree_id(active_processor)
        await active_processor.pending.save(ACTOR, tree_id, {"kind": "merge"})

        result = await active_processor.confirm(ACTOR, "yes")

        assert result.reply == replies.STALE_PENDING

    async def test_confirmed_child_with_ambiguous_parent(self, active_processor, store):
        tree_id = await active_tree_id(active_processor)
        await store.create_person(tree_id, "John Smith")
        await store.create_person(tree_id, "John Smith")
        await active_processor.pending.save(
            ACTOR,
            tree_id,
            {"kind": "create_child", "child": "Tom Smith", "parentA": "John Smith"},
        )

        result = await active_processor.confirm(ACTOR, "yes")

        assert statuses(result) == ["ambiguous"]
        assert await people_named(store, tree_id) == ["John Smith", "John Smith"]

    async def test_duplicate_child(self, active_processor, store):
        tree_id = await active_tree_id(active_processor)
        await active_processor.process(
            ACTOR, [{"op": "add_person", "name": "Alice", "dob": "1950"}]
        )

        result = await active_processor.process(
            ACTOR,
            [{"op": "add_child", "child": "Alicia", "parentA": "Mary", "dob": "1951"}],
        )
        assert statuses(result) == ["pending"]

        await active_processor.confirm(ACTOR, "YES")

        assert await people_named(store, tree_id) == ["Alice", "Alicia", "Mary"]
        edges = await store.list_edges(tree_id, kinds=[PARENT_OF])
        assert len(edges) == 1


class TestAmbiguity:
    async def test_rename_with_shared_name_is_refused(self, active_processor, store):
        tree_id = await active_tree_id(active_processor)
        await store.create_person(tree_id, "John Smith", dob="1920")
        await store.create_person(tree_id, "John Smith", dob="1950")

        result = await active_processor.process(
            ACTOR,
            [
                {"op": "rename", "from": "John Smith", "to": "Jon Smith"},
                {"op": "add_person", "name": "Zed"},
            ],
        )

        assert statuses(result) == ["ambiguous"]
        assert "several people called *John Smith*" in result.reply
        assert "born 1920" in result.reply
        assert await people_named(store, tree_id) == ["John Smith", "John Smith"]


class TestRename:
    async def test_rename(self, active_processor, store):
        tree_id = await active_tree_id(active_processor)
        await active_processor.process(ACTOR, [{"op": "add_person", "name": "Jon Smith"}])

        result = await active_processor.process(
            ACTOR, [{"op": "rename", "from": "jon smith", "to": "Jonathan Smith"}]
        )

        assert statuses(result) == ["ok"]
        assert await people_named(store, tree_id) == ["Jonathan Smith"]

    async def test_rename_onto_similar_name_needs_confirmation(self, active_processor, store):
        tree_id = await active_tree_id(active_processor)
        await active_processor.process(
            ACTOR,
            [{"op": "add_person", "name": "Alice Smith"}, {"op": "add_person", "name": "Bob Smith"}],
        )

        result = await active_processor.process(
            ACTOR, [{"op": "rename", "from": "Bob Smith", "to": "Alicia Smith"}]
        )
        assert statuses(result) == ["pending"]
        assert await people_named(store, tree_id) == ["Alice Smith", "Bob Smith"]

        await active_processor.confirm(ACTOR, "yes")
        assert await people_named(store, tree_id) == ["Alice Smith", "Alicia Smith"]

    async def test_rename_onto_taken_name_needs_confirmation(self, active_processor):
        await active_processor.process(
            ACTOR,
            [{"op": "add_person", "name": "Alice Smith"}, {"op": "add_person", "name": "Bob Smith"}],
        )
        result = await active_processor.process(
            ACTOR, [{"op": "rename", "from": "Bob Smith", "to": "alice smith"}]
        )
        assert statuses(result) == ["pending"]

    async def test_rename_unknown_person(self, active_processor):
        result = await active_processor.process(
            ACTOR, [{"op": "rename", "from": "Nobody", "to": "Somebody"}]
        )
        assert statuses(result) == ["invalid"]
        assert "couldn't find" in result.reply


class TestRelationships:
    async def test_spouse_then_separated(self, active_processor, store):
        tree_id = await active_tree_id(active_processor)

        await active_processor.process(
            ACTOR,
            [
                {"op": "link", "a": "Mike", "b": "Grace", "kind": "spouse"},
                {"op": "separate", "a": "Grace", "b": "Mike"},
            ],
        )

        edges = await store.list_edges(tree_id)
        assert [e.kind for e in edges] == [SEPARATED_FROM]

    async def test_link_uses_wording_for_parent_direction(self, active_processor, store):
        tree_id = await active_tree_id(active_processor)

        await active_processor.process(
            ACTOR,
            [
                {
                    "op": "link",
                    "a": "Bob",
                    "b": "Alice",
                    "kind": "parent",
                    "text": "Alice is Bob's mother",
                }
            ],
        )

        (edge,) = await store.list_edges(tree_id)
        names = await store.get_person_names_batch([edge.person_a_id, edge.person_b_id])
        assert names[edge.person_a_id] == "Alice"
        assert names[edge.person_b_id] == "Bob"

    async def test_child_of_swaps_the_pair(self, active_processor, store):
        tree_id = await active_tree_id(active_processor)
        await active_processor.process(
            ACTOR, [{"op": "link", "a": "Tom", "b": "Mary", "kind": "child_of"}]
        )
        (edge,) = await store.list_edges(tree_id)
        names = await store.get_person_names_batch([edge.person_a_id])
        assert names[edge.person_a_id] == "Mary"

    async def test_unknown_link_kind(self, active_processor):
        result = await active_processor.process(
            ACTOR, [{"op": "link", "a": "Tom", "b": "Mary", "kind": "cousin"}]
        )
        assert statuses(result) == ["invalid"]

    async def test_add_child_with_two_parents(self, active_processor, store):
        tree_id = await active_tree_id(active_processor)
        result = await active_processor.process(
            ACTOR,
            [{"op": "add_child", "child": "Tom", "parentA": "Mary", "parentB": "John"}],
        )
        assert "child of Mary and John" in result.reply
        assert len(await store.list_edges(tree_id, kinds=[PARENT_OF])) == 2

    async def test_divorce_of_married_couple(self, active_processor, store):
        tree_id = await active_tree_id(active_processor)
        result = await active_processor.process(
            ACTOR,
            [
                {"op": "link", "a": "Mike", "b": "Grace", "kind": "married"},
                {"op": "divorce", "a": "Mike", "b": "Grace"},
            ],
        )
        assert statuses(result) == ["ok", "ok"]
        assert [e.kind for e in await store.list_edges(tree_id)] == [DIVORCED_FROM]

    async def test_divorce_of_unmarried_pair_needs_confirmation(self, active_processor, store):
        tree_id = await active_tree_id(active_processor)

        result = await active_processor.process(
            ACTOR, [{"op": "divorce", "a": "Mike", "b": "Grace"}]
        )
        assert statuses(result) == ["pending"]
        assert "not recorded as married" in result.reply
        assert await store.list_edges(tree_id) == []

        await active_processor.confirm(ACTOR, "YES")
        assert [e.kind for e in await store.list_edges(tree_id)] == [DIVORCED_FROM]

    async def test_affair_keeps_marriage(self, active_processor, store):
        tree_id = await active_tree_id(active_processor)
        await active_processor.process(
            ACTOR,
            [
                {"op": "link", "a": "Mike", "b": "Grace", "kind": "spouse_of"},
                {"op": "affair", "a": "Mike", "b": "Ann"},
                {"op": "affair", "a": "Grace", "b": "Mike"},
            ],
        )
        kinds = sorted(e.kind for e in await store.list_edges(tree_id))
        assert kinds == ["affair_with", "affair_with", SPOUSE_OF]


class TestPeopleAndViews:
    async def test_set_fields(self, active_processor, store):
        tree_id = await active_tree_id(active_processor)
        await active_processor.process(
            ACTOR,
            [
                {"op": "add_person", "name": "Bob"},
                {"op": "set_dob", "name": "Bob", "dob": "circa 1875"},
                {"op": "set_dod", "name": "Bob", "dod": "1940s"},
                {"op": "set_gender", "name": "Bob", "gender": "male"},
            ],
        )
        (bob,) = await store.list_people(tree_id)
        assert (bob.dob, bob.dod, bob.gender) == ("circa 1875", "1940s", "Male")

    async def test_view_person(self, active_processor):
        await active_processor.process(
            ACTOR, [{"op": "add_child", "child": "Tom", "parentA": "Mary"}]
        )
        result = await active_processor.process(ACTOR, [{"op": "view_person", "name": "tom"}])
        assert "Parents: Mary" in result.reply

    async def test_view_tree_mentions_last_person(self, active_processor):
        await active_processor.process(
            ACTOR, [{"op": "add_person", "name": "Ann"}, {"op": "add_person", "name": "Bob"}]
        )
        result = await active_processor.process(ACTOR, [{"op": "view_tree"}])
        assert "has 2 people" in result.reply
        assert "Last person added/updated: Bob" in result.reply

    async def test_remove_person_forgets_last_person(self, active_processor, store):
        await active_processor.process(ACTOR, [{"op": "add_person", "name": "Bob"}])

        result = await active_processor.process(ACTOR, [{"op": "remove_person", "name": "Bob"}])

        assert statuses(result) == ["ok"]
        state = await active_processor.state.get(ACTOR)
        assert state.last_person_id is None
        assert state.active_tree_id is not None

    async def test_leave(self, active_processor):
        result = await active_processor.process(ACTOR, [{"op": "leave"}])
        assert "You have left" in result.reply
        assert await active_processor.state.active_tree(ACTOR) is None

    async def test_removed_membership_blocks_edits(self, active_processor, store):
        tree_id = await active_tree_id(active_processor)
        await store.remove_membership(tree_id, ACTOR)

        result = await active_processor.process(
            ACTOR, [{"op": "add_person", "name": "Bob"}, {"op": "help"}]
        )

        assert statuses(result) == ["invalid", "ok"]
        assert "no longer a member of the *Smith Family* tree" in result.reply
        assert "To create a new tree" in result.reply
        assert await active_processor.state.active_tree(ACTOR) is None
        assert await people_named(store, tree_id) == []

    async def test_menu_shows_join_code(self, active_processor, store):
        tree = await store.get_tree(await active_tree_id(active_processor))
        result = await active_processor.process(ACTOR, [{"op": "menu"}])
        assert tree.join_code in result.reply


class TestFromConfig:
    async def test_parent_age_gap(self, store):
        config = RootlineConfig(graph=GraphConfig(min_parent_age_gap=12))
        processor = BatchProcessor.from_config(store, config)
        await processor.process(ACTOR, [{"op": "new_tree", "name": "Gap"}])

        result = await processor.process(
            ACTOR,
            [
                {"op": "add_person", "name": "Mary", "dob": "1950"},
                {"op": "add_person", "name": "Tom", "dob": "1955"},
                {"op": "link", "a": "Mary", "b": "Tom", "kind": "parent_of"},
            ],
        )

        assert statuses(result) == ["ok", "ok", "invalid"]
        assert "too young" in result.reply

    async def test_refused_child_is_not_stored(self, store):
        processor = BatchProcessor(store, parent_child_validator=min_parent_age_gap(12))
        await processor.process(ACTOR, [{"op": "new_tree", "name": "Gap"}])
        tree_id = await active_tree_id(processor)

        result = await processor.process(
            ACTOR,
            [
                {"op": "add_person", "name": "Bob Young", "dob": "1990"},
                {"op": "add_child", "child": "Zed Old", "dob": "1950", "parentA": "Bob Young"},
            ],
        )

        assert statuses(result) == ["ok", "invalid"]
        assert await people_named(store, tree_id) == ["Bob Young"]


@pytest.mark.parametrize("op", ["new_tree", "join_tree", "help", "menu"])
async def test_treeless_ops_do_not_require_a_tree(processor, op):
    result = await processor.process(ACTOR, [{"op": op, "code": "ABCDEF"}])
    assert result.reply != replies.NO_ACTIVE_TREE
