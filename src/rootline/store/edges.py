"""Typed edge operations."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import text

from rootline.store.mappers import row_to_edge
from rootline.store.types import EdgeEntry

if TYPE_CHECKING:
    from rootline.store.store import Store

logger = logging.getLogger(__name__)


def _in_clause(prefix: str, values: list[str]) -> tuple[str, dict[str, Any]]:
    placeholders = ", ".join(f":{prefix}{i}" for i in range(len(values)))
    return placeholders, {f"{prefix}{i}": v for i, v in enumerate(values)}


class EdgeOpsMixin:
    """Insert, delete and list edges.

    Participants are stored exactly as given; callers canonicalize
    undirected pairs before calling in.
    """

    async def upsert_edge(
        self: Store,
        tree_id: str,
        kind: str,
        person_a_id: str,
        person_b_id: str,
        status: str | None = None,
    ) -> EdgeEntry:
        """Insert an edge, or refresh the status of the existing one.

        Inserting an edge that already exists is a no-op apart from the
        status update.
        """
        params = {
            "id": f"e-{uuid.uuid4().hex}",
            "tree_id": tree_id,
            "kind": kind,
            "a": person_a_id,
            "b": person_b_id,
            "status": status,
            "created_at": datetime.now(UTC).isoformat(),
        }
        async with self._db.session() as session:
            result = await session.execute(
                text("""
                    INSERT OR IGNORE INTO edges
                        (id, tree_id, kind, person_a_id, person_b_id, status, created_at)
                    VALUES (:id, :tree_id, :kind, :a, :b, :status, :created_at)
                """),
                params,
            )
            inserted = (result.rowcount or 0) > 0
            if not inserted and status is not None:
                await session.execute(
                    text("""
                        UPDATE edges SET status = :status
                        WHERE tree_id = :tree_id AND kind = :kind
                          AND person_a_id = :a AND person_b_id = :b
                    """),
                    params,
                )
            result = await session.execute(
                text("""
                    SELECT * FROM edges
                    WHERE tree_id = :tree_id AND kind = :kind
                      AND person_a_id = :a AND person_b_id = :b
                """),
                params,
            )
            edge = row_to_edge(result.fetchone())

        logger.debug(
            "edge_upserted",
            extra={
                "edge.id": edge.id,
                "edge.kind": kind,
                "edge.inserted": inserted,
            },
        )
        return edge

    async def delete_edges(
        self: Store,
        tree_id: str,
        kinds: Iterable[str],
        person_a_id: str,
        person_b_id: str,
    ) -> int:
        """Delete edges of the given kinds for one exact (A, B) pair."""
        kind_list = list(kinds)
        if not kind_list:
            return 0
        placeholders, params = _in_clause("k", kind_list)
        params.update({"tree_id": tree_id, "a": person_a_id, "b": person_b_id})
        async with self._db.session() as session:
            result = await session.execute(
                text(f"""
                    DELETE FROM edges
                    WHERE tree_id = :tree_id AND kind IN ({placeholders})
                      AND person_a_id = :a AND person_b_id = :b
                """),
                params,
            )
            removed = result.rowcount or 0

        if removed:
            logger.debug(
                "edges_removed", extra={"edge.kinds": kind_list, "count": removed}
            )
        return removed

    async def get_edge(
        self: Store, tree_id: str, kind: str, person_a_id: str, person_b_id: str
    ) -> EdgeEntry | None:
        async with self._db.session() as session:
            result = await session.execute(
                text("""
                    SELECT * FROM edges
                    WHERE tree_id = :tree_id AND kind = :kind
                      AND person_a_id = :a AND person_b_id = :b
                """),
                {"tree_id": tree_id, "kind": kind, "a": person_a_id, "b": person_b_id},
            )
            row = result.fetchone()
            return row_to_edge(row) if row else None

    async def list_edges(
        self: Store,
        tree_id: str,
        person_id: str | None = None,
        kinds: Iterable[str] | None = None,
    ) -> list[EdgeEntry]:
        """List a tree's edges, optionally only those touching one person."""
        query = "SELECT * FROM edges WHERE tree_id = :tree_id"
        params: dict[str, Any] = {"tree_id": tree_id}
        if person_id is not None:
            query += " AND (person_a_id = :pid OR person_b_id = :pid)"
            params["pid"] = person_id
        if kinds is not None:
            kind_list = list(kinds)
            if not kind_list:
                return []
            placeholders, kind_params = _in_clause("k", kind_list)
            query += f" AND kind IN ({placeholders})"
            params.update(kind_params)
        query += " ORDER BY created_at, id"

        async with self._db.session() as session:
            result = await session.execute(text(query), params)
            return [row_to_edge(row) for row in result.fetchall()]
