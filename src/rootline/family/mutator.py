"""Person and relationship mutation rules.

GraphMutator owns how people and edges change:

- people are upserted by exact folded name;
- ``parent_of`` is directed and never implies its inverse;
- couple status (spouse, divorced, separated) is exclusive per unordered
  pair, so entering one state removes the other two;
- ``affair_with`` is tracked independently and never cleared by the above.

Duplicate detection is not done here; callers decide when a name must be
checked first.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from rootline.family import dates
from rootline.family.edges import (
    AFFAIR_WITH,
    COUPLE_STATUS_KINDS,
    DIVORCED_FROM,
    PARENT_OF,
    PARTNER_OF,
    RELATIONSHIP_KINDS,
    SEPARATED_FROM,
    SPOUSE_OF,
    STATUS_MARRIED,
    STATUS_PARTNER,
    canonical_pair,
)
from rootline.family.errors import AmbiguousReferenceError, ValidationError
from rootline.family.names import (
    GENDER_FEMALE,
    GENDER_MALE,
    normalize_gender,
    normalize_name,
)
from rootline.family.summary import PersonSummary, summarize_person

if TYPE_CHECKING:
    from rootline.store.protocols import FamilyStore
    from rootline.store.types import EdgeEntry, PersonEntry

logger = logging.getLogger(__name__)

# Called with (parent, child) before a parent_of edge is written; raises ValidationError to refuse
ParentChildValidator = Callable[["PersonEntry", "PersonEntry"], None]


def min_parent_age_gap(years: int) -> ParentChildValidator:
    """Refuse parent/child links where the parent is not ``years`` older.

    Only applies when both birth years are known.
    """

    def validate(parent: PersonEntry, child: PersonEntry) -> None:
        parent_year = dates.normalize(parent.dob).year
        child_year = dates.normalize(child.dob).year
        if parent_year is None or child_year is None:
            return
        if child_year - parent_year < years:
            raise ValidationError(
                f"{parent.primary_name} (born {parent_year}) is too young to be "
                f"the parent of {child.primary_name} (born {child_year})."
            )

    return validate


@dataclass
class PersonUpsert:
    person: PersonEntry
    created: bool


@dataclass
class ChildAttachment:
    child: PersonEntry
    child_created: bool
    parents: list[PersonEntry] = field(default_factory=list)
    edges: list[EdgeEntry] = field(default_factory=list)


def _prospective_child(
    tree_id: str, name: str, dob: str | None, existing: PersonEntry | None
) -> PersonEntry:
    """The child as it will look once written."""
    from rootline.store.types import PersonEntry

    dob_display = dates.display(dob)
    if existing is not None:
        return replace(existing, dob=dob_display or existing.dob)
    return PersonEntry(
        id="",
        tree_id=tree_id,
        primary_name=name,
        normalized_name=normalize_name(name),
        dob=dob_display,
    )


def _require(value: str | None, message: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(message)
    return str(value).strip()


class GraphMutator:
    def __init__(
        self,
        store: FamilyStore,
        parent_child_validator: ParentChildValidator | None = None,
    ) -> None:
        self._store = store
        self._validator = parent_child_validator

    async def _person_in_tree(self, tree_id: str, person_id: str) -> PersonEntry:
        person = await self._store.get_person(person_id)
        if person is None or person.tree_id != tree_id:
            raise ValidationError("That person is not in this tree.")
        return person

    async def _find_by_name(self, tree_id: str, name: str) -> PersonEntry | None:
        matches = await self._store.find_people_by_normalized_name(
            tree_id, normalize_name(name)
        )
        if len(matches) > 1:
            summaries = [await summarize_person(self._store, p) for p in matches]
            raise AmbiguousReferenceError(name, summaries)
        return matches[0] if matches else None

    # -- people ---------------------------------------------------------

    async def upsert_person_by_name(
        self,
        tree_id: str,
        name: str | None,
        dob: str | None = None,
        gender: str | None = None,
    ) -> PersonUpsert:
        """Find a person by exact folded name or create them.

        An existing person's ``dob`` is replaced when a different normalized
        value is supplied; ``gender`` likewise.

        Raises:
            ValidationError: The name is empty.
            AmbiguousReferenceError: Several people share the name.
        """
        name = _require(name, "Please give the person's name.")
        person = await self._find_by_name(tree_id, name)

        dob_display = dates.display(dob)
        gender_value = normalize_gender(gender) if gender else None

        if person is None:
            person = await self._store.create_person(
                tree_id, name, dob=dob_display, gender=gender_value
            )
            return PersonUpsert(person=person, created=True)

        changes: dict[str, Any] = {}
        if dob_display and dob_display != person.dob:
            changes["dob"] = dob_display
        if gender_value and gender_value != person.gender:
            changes["gender"] = gender_value
        if changes:
            updated = await self._store.update_person(person.id, **changes)
            if updated is not None:
                person = updated
        return PersonUpsert(person=person, created=False)

    async def create_person(
        self,
        tree_id: str,
        name: str | None,
        dob: str | None = None,
        gender: str | None = None,
    ) -> PersonEntry:
        """Create a new person even if the name is already taken."""
        name = _require(name, "Please give the person's name.")
        return await self._store.create_person(
            tree_id,
            name,
            dob=dates.display(dob),
            gender=normalize_gender(gender) if gender else None,
        )

    async def rename_person(
        self, tree_id: str, person_id: str, new_name: str | None
    ) -> PersonEntry:
        new_name = _require(new_name, "Please give the new name.")
        await self._person_in_tree(tree_id, person_id)
        person = await self._store.update_person(person_id, name=new_name)
        if person is None:
            raise ValidationError("That person is not in this tree.")
        logger.info("person_renamed", extra={"person.id": person_id})
        return person

    async def set_dob(self, tree_id: str, person_id: str, raw: str | None) -> PersonEntry:
        value = dates.display(_require(raw, "Please give a date of birth."))
        await self._person_in_tree(tree_id, person_id)
        person = await self._store.update_person(person_id, dob=value)
        if person is None:
            raise ValidationError("That person is not in this tree.")
        return person

    async def set_dod(self, tree_id: str, person_id: str, raw: str | None) -> PersonEntry:
        value = dates.display(_require(raw, "Please give a date of death."))
        await self._person_in_tree(tree_id, person_id)
        person = await self._store.update_person(person_id, dod=value)
        if person is None:
            raise ValidationError("That person is not in this tree.")
        return person

    async def set_gender(
        self, tree_id: str, person_id: str, raw: str | None
    ) -> PersonEntry:
        value = normalize_gender(_require(raw, "Please give a gender."))
        await self._person_in_tree(tree_id, person_id)
        person = await self._store.update_person(person_id, gender=value)
        if person is None:
            raise ValidationError("That person is not in this tree.")
        return person

    async def remove_person(self, tree_id: str, person_id: str) -> PersonEntry:
        """Delete a person together with every edge touching them."""
        person = await self._person_in_tree(tree_id, person_id)
        await self._store.delete_person(person_id)
        return person

    # -- relationships --------------------------------------------------

    async def add_relationship(
        self, tree_id: str, kind: str | None, a_id: str, b_id: str
    ) -> EdgeEntry:
        """Record a relationship between two people in the tree.

        For ``parent_of`` A is the parent. ``partner_of`` is stored as
        ``spouse_of`` with status ``partner``.

        Raises:
            ValidationError: Unknown kind, self-relationship, a person outside
                the tree, or a refusal from the parent/child validator.
        """
        kind = _require(kind, "Please say how they are related.").lower()
        if kind not in RELATIONSHIP_KINDS:
            raise ValidationError(f"I don't know the relationship {kind!r}.")
        if a_id == b_id:
            raise ValidationError("A person cannot be related to themselves.")

        a = await self._person_in_tree(tree_id, a_id)
        b = await self._person_in_tree(tree_id, b_id)

        if kind == PARENT_OF:
            if self._validator is not None:
                self._validator(a, b)
            edge = await self._store.upsert_edge(tree_id, PARENT_OF, a.id, b.id)
        elif kind in (SPOUSE_OF, PARTNER_OF):
            first, second = canonical_pair(a.id, b.id)
            status = STATUS_PARTNER if kind == PARTNER_OF else STATUS_MARRIED
            edge = await self._store.upsert_edge(
                tree_id, SPOUSE_OF, first, second, status=status
            )
            await self._store.delete_edges(
                tree_id, (DIVORCED_FROM, SEPARATED_FROM), first, second
            )
        elif kind in (DIVORCED_FROM, SEPARATED_FROM):
            first, second = canonical_pair(a.id, b.id)
            others = [k for k in COUPLE_STATUS_KINDS if k != kind]
            await self._store.delete_edges(tree_id, others, first, second)
            edge = await self._store.upsert_edge(tree_id, kind, first, second)
        else:
            first, second = canonical_pair(a.id, b.id)
            edge = await self._store.upsert_edge(tree_id, AFFAIR_WITH, first, second)

        logger.info(
            "relationship_added",
            extra={"tree.id": tree_id, "edge.kind": edge.kind, "edge.id": edge.id},
        )
        return edge

    async def couple_status(self, tree_id: str, a_id: str, b_id: str) -> str | None:
        """The couple-status kind recorded for a pair, if any."""
        first, second = canonical_pair(a_id, b_id)
        for kind in COUPLE_STATUS_KINDS:
            if await self._store.get_edge(tree_id, kind, first, second):
                return kind
        return None

    async def add_child_with_parents(
        self,
        tree_id: str,
        child_name: str | None,
        parent_a_name: str | None,
        parent_b_name: str | None = None,
        dob: str | None = None,
        *,
        new_child: bool = False,
    ) -> ChildAttachment:
        """Attach a child to one or two parents, upserting everyone by name.

        With ``new_child`` the child is always created, which is how a
        confirmed near-duplicate gets its own record.

        Every name is resolved and the parent/child validator consulted
        before anything is written, so a refusal leaves the tree unchanged.
        """
        child_name = _require(child_name, "Please give the child's name.")
        parent_names = [_require(parent_a_name, "Please give at least one parent.")]
        if parent_b_name and parent_b_name.strip():
            parent_names.append(parent_b_name.strip())

        folded = [normalize_name(n) for n in parent_names]
        if normalize_name(child_name) in folded:
            raise ValidationError("A person cannot be their own parent.")
        if len(set(folded)) != len(folded):
            raise ValidationError("The two parents must be different people.")

        known_child = None if new_child else await self._find_by_name(tree_id, child_name)
        known_parents = [await self._find_by_name(tree_id, n) for n in parent_names]
        if self._validator is not None:
            prospective = _prospective_child(tree_id, child_name, dob, known_child)
            for parent in known_parents:
                if parent is not None:
                    self._validator(parent, prospective)

        if new_child:
            child = await self.create_person(tree_id, child_name, dob=dob)
            child_created = True
        else:
            upsert = await self.upsert_person_by_name(tree_id, child_name, dob=dob)
            child, child_created = upsert.person, upsert.created

        attachment = ChildAttachment(child=child, child_created=child_created)
        for name in parent_names:
            parent = (await self.upsert_person_by_name(tree_id, name)).person
            attachment.parents.append(parent)
            attachment.edges.append(
                await self.add_relationship(tree_id, PARENT_OF, parent.id, child.id)
            )
        return attachment

    # -- reads ----------------------------------------------------------

    async def person_summary(self, tree_id: str, person_id: str) -> PersonSummary:
        person = await self._person_in_tree(tree_id, person_id)
        return await summarize_person(self._store, person)

    async def tree_chart(self, tree_id: str) -> list[dict[str, Any]]:
        """Export the tree as per-person records for chart renderers.

        Each record is ``{id, data, rels}`` with ``rels`` holding ``father``,
        ``mother``, ``spouses`` and ``children`` ids. A parent fills the
        father or mother slot only when their gender is known.
        """
        people = await self._store.list_people(tree_id)
        chart: dict[str, dict[str, Any]] = {}
        for person in people:
            chart[person.id] = {
                "id": person.id,
                "data": {
                    "name": person.primary_name,
                    "gender": (person.gender or "U")[0],
                    "birthday": person.dob or "",
                    "deathday": person.dod,
                },
                "rels": {"father": None, "mother": None, "spouses": [], "children": []},
            }
        genders = {p.id: p.gender for p in people}

        for edge in await self._store.list_edges(tree_id):
            a = chart.get(edge.person_a_id)
            b = chart.get(edge.person_b_id)
            if a is None or b is None:
                continue
            if edge.kind == PARENT_OF:
                a["rels"]["children"].append(edge.person_b_id)
                if genders[edge.person_a_id] == GENDER_MALE:
                    b["rels"]["father"] = edge.person_a_id
                elif genders[edge.person_a_id] == GENDER_FEMALE:
                    b["rels"]["mother"] = edge.person_a_id
            elif edge.kind == SPOUSE_OF:
                a["rels"]["spouses"].append(edge.person_b_id)
                b["rels"]["spouses"].append(edge.person_a_id)
        return list(chart.values())
