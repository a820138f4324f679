"""Person CRUD operations: create, read, update, delete."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import text

from rootline.family.names import normalize_name
from rootline.store.mappers import row_to_person
from rootline.store.types import PersonEntry

if TYPE_CHECKING:
    from rootline.store.store import Store

logger = logging.getLogger(__name__)


class PeopleOpsMixin:
    """Person create, read, update, delete operations."""

    async def create_person(
        self: Store,
        tree_id: str,
        name: str,
        dob: str | None = None,
        dod: str | None = None,
        gender: str | None = None,
    ) -> PersonEntry:
        now = datetime.now(UTC)
        entry = PersonEntry(
            id=str(uuid.uuid4()),
            tree_id=tree_id,
            primary_name=name.strip(),
            normalized_name=normalize_name(name),
            dob=dob,
            dod=dod,
            gender=gender,
            created_at=now,
            updated_at=now,
        )

        async with self._db.session() as session:
            await session.execute(
                text("""
                    INSERT INTO persons (id, tree_id, primary_name, normalized_name,
                                         dob, dod, gender, created_at, updated_at)
                    VALUES (:id, :tree_id, :primary_name, :normalized_name,
                            :dob, :dod, :gender, :created_at, :updated_at)
                """),
                {
                    "id": entry.id,
                    "tree_id": tree_id,
                    "primary_name": entry.primary_name,
                    "normalized_name": entry.normalized_name,
                    "dob": dob,
                    "dod": dod,
                    "gender": gender,
                    "created_at": now.isoformat(),
                    "updated_at": now.isoformat(),
                },
            )

        logger.debug(
            "person_created",
            extra={"person.id": entry.id, "person.name": entry.primary_name},
        )
        return entry

    async def get_person(self: Store, person_id: str) -> PersonEntry | None:
        async with self._db.session() as session:
            result = await session.execute(
                text("SELECT * FROM persons WHERE id = :id"), {"id": person_id}
            )
            row = result.fetchone()
            return row_to_person(row) if row else None

    async def list_people(self: Store, tree_id: str) -> list[PersonEntry]:
        async with self._db.session() as session:
            result = await session.execute(
                text("""
                    SELECT * FROM persons WHERE tree_id = :tree_id
                    ORDER BY created_at, id
                """),
                {"tree_id": tree_id},
            )
            return [row_to_person(row) for row in result.fetchall()]

    async def find_people_by_normalized_name(
        self: Store, tree_id: str, normalized_name: str
    ) -> list[PersonEntry]:
        """Exact match on the folded name, oldest first."""
        async with self._db.session() as session:
            result = await session.execute(
                text("""
                    SELECT * FROM persons
                    WHERE tree_id = :tree_id AND normalized_name = :normalized
                    ORDER BY created_at, id
                """),
                {"tree_id": tree_id, "normalized": normalized_name},
            )
            return [row_to_person(row) for row in result.fetchall()]

    async def get_person_names_batch(
        self: Store, person_ids: list[str]
    ) -> dict[str, str]:
        """Get names for multiple person IDs in a single query.

        Returns a dict mapping person_id -> name for found persons.
        Missing IDs are not included in the result.
        """
        if not person_ids:
            return {}

        async with self._db.session() as session:
            # SQLite doesn't support array parameters, so build the query
            placeholders = ", ".join(f":id{i}" for i in range(len(person_ids)))
            params = {f"id{i}": pid for i, pid in enumerate(person_ids)}
            result = await session.execute(
                text(
                    f"SELECT id, primary_name FROM persons WHERE id IN ({placeholders})"
                ),
                params,
            )
            return {row[0]: row[1] for row in result.fetchall()}

    async def update_person(
        self: Store,
        person_id: str,
        name: str | None = None,
        dob: str | None = None,
        dod: str | None = None,
        gender: str | None = None,
    ) -> PersonEntry | None:
        """Update the given fields; None leaves a field unchanged."""
        now = datetime.now(UTC)
        async with self._db.session() as session:
            result = await session.execute(
                text("SELECT id FROM persons WHERE id = :id"),
                {"id": person_id},
            )
            if not result.fetchone():
                return None

            updates = ["updated_at = :updated_at"]
            params: dict[str, Any] = {
                "id": person_id,
                "updated_at": now.isoformat(),
            }
            if name is not None:
                updates.append("primary_name = :name")
                updates.append("normalized_name = :normalized")
                params["name"] = name.strip()
                params["normalized"] = normalize_name(name)
            for column, value in (("dob", dob), ("dod", dod), ("gender", gender)):
                if value is not None:
                    updates.append(f"{column} = :{column}")
                    params[column] = value

            await session.execute(
                text(f"UPDATE persons SET {', '.join(updates)} WHERE id = :id"),
                params,
            )
            result = await session.execute(
                text("SELECT * FROM persons WHERE id = :id"), {"id": person_id}
            )
            person = row_to_person(result.fetchone())

        logger.debug(
            "person_updated",
            extra={"person.id": person_id, "fields": sorted(params.keys() - {"id"})},
        )
        return person

    async def delete_person(self: Store, person_id: str) -> bool:
        """Delete a person and every edge touching them."""
        async with self._db.session() as session:
            edges = await session.execute(
                text("""
                    DELETE FROM edges
                    WHERE person_a_id = :id OR person_b_id = :id
                """),
                {"id": person_id},
            )
            result = await session.execute(
                text("DELETE FROM persons WHERE id = :id"), {"id": person_id}
            )
            deleted = (result.rowcount or 0) > 0

        if deleted:
            logger.info(
                "person_deleted",
                extra={"person.id": person_id, "edges.removed": edges.rowcount or 0},
            )
        return deleted
