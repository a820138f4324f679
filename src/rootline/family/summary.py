"""Read-only person summaries used for disambiguation and lookups."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from rootline.family import dates
from rootline.family.edges import PARENT_OF, SPOUSE_OF

if TYPE_CHECKING:
    from rootline.store.protocols import FamilyStore
    from rootline.store.types import PersonEntry


@dataclass
class PersonSummary:
    """A person with their immediate family, by name."""

    person_id: str
    name: str
    birth_year: int | None = None
    parents: list[str] = field(default_factory=list)
    partners: list[str] = field(default_factory=list)
    children: list[str] = field(default_factory=list)

    def describe(self) -> str:
        parts: list[str] = []
        if self.birth_year is not None:
            parts.append(f"born {self.birth_year}")
        if self.parents:
            parts.append(f"child of {', '.join(self.parents)}")
        if self.partners:
            parts.append(f"partner of {', '.join(self.partners)}")
        if self.children:
            parts.append(f"parent of {', '.join(self.children)}")
        return "; ".join(parts) if parts else "no other details"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.person_id,
            "name": self.name,
            "birth_year": self.birth_year,
            "parents": self.parents,
            "partners": self.partners,
            "children": self.children,
        }


async def summarize_person(store: FamilyStore, person: PersonEntry) -> PersonSummary:
    edges = await store.list_edges(
        person.tree_id, person_id=person.id, kinds=(PARENT_OF, SPOUSE_OF)
    )
    names = await store.get_person_names_batch(
        sorted({edge.other(person.id) for edge in edges})
    )

    summary = PersonSummary(
        person_id=person.id,
        name=person.primary_name,
        birth_year=dates.normalize(person.dob).year,
    )
    for edge in edges:
        other = names.get(edge.other(person.id))
        if other is None:
            continue
        if edge.kind == SPOUSE_OF:
            summary.partners.append(other)
        elif edge.person_b_id == person.id:
            summary.parents.append(other)
        else:
            summary.children.append(other)
    return summary
