"""Read-only tree export for renderers."""

import re
from typing import Any

from fastapi import APIRouter, HTTPException, Request

router = APIRouter()

_JOIN_CODE = re.compile(r"^[A-Z0-9]{6}$")


@router.get("/trees/{join_code}")
async def get_tree(join_code: str, request: Request) -> dict[str, Any]:
    """Return a tree with its people, edges and chart records."""
    code = join_code.strip().upper()
    if not _JOIN_CODE.match(code):
        raise HTTPException(status_code=400, detail="Bad join code")

    store = request.app.state.store
    tree = await store.get_tree_by_code(code)
    if tree is None:
        raise HTTPException(status_code=404, detail="Tree not found")

    people = await store.list_people(tree.id)
    edges = await store.list_edges(tree.id)
    chart = await request.app.state.processor.mutator.tree_chart(tree.id)
    return {
        "tree": tree.to_dict(),
        "persons": [p.to_dict() for p in people],
        "edges": [e.to_dict() for e in edges],
        "chart": chart,
    }
