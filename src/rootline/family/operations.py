"""Structured operations produced by the intent parser."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

OpName = Literal[
    "new_tree",
    "join_tree",
    "add_person",
    "link",
    "add_child",
    "rename",
    "set_dob",
    "set_dod",
    "set_gender",
    "divorce",
    "separate",
    "affair",
    "view_person",
    "view_tree",
    "leave",
    "help",
    "menu",
    "remove_person",
]

# Operations that run duplicate detection before creating someone. Parent
# names in add_child and every relationship op upsert directly.
DUPLICATE_CHECK_POLICY: dict[str, bool] = {
    "new_tree": False,
    "join_tree": False,
    "add_person": True,
    "link": False,
    "add_child": True,  # the child only
    "rename": True,  # the new name
    "set_dob": False,
    "set_dod": False,
    "set_gender": False,
    "divorce": False,
    "separate": False,
    "affair": False,
    "view_person": False,
    "view_tree": False,
    "leave": False,
    "help": False,
    "menu": False,
    "remove_person": False,
}

# Operations that work without an active tree
TREELESS_OPS = frozenset({"new_tree", "join_tree", "help", "menu"})


def requires_duplicate_check(op: str) -> bool:
    return DUPLICATE_CHECK_POLICY.get(op, False)


class Operation(BaseModel):
    """One ``{op, ...fields}`` item; fields are passed through as given.

    The parser's camelCase ``parentA``/``parentB`` and the reserved word
    ``from`` are accepted as aliases.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    op: OpName
    name: str | None = None
    dob: str | None = None
    dod: str | None = None
    gender: str | None = None
    a: str | None = None
    b: str | None = None
    kind: str | None = None
    parent_a: str | None = Field(default=None, alias="parentA")
    parent_b: str | None = Field(default=None, alias="parentB")
    child: str | None = None
    from_: str | None = Field(default=None, alias="from")
    to: str | None = None
    code: str | None = None
    text: str | None = None

    @field_validator("op", mode="before")
    @classmethod
    def _fold_op(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator(
        "name", "dob", "dod", "gender", "a", "b", "kind", "parent_a",
        "parent_b", "child", "from_", "to", "code", "text",
        mode="before",
    )
    @classmethod
    def _coerce_scalar(cls, value: Any) -> Any:
        # Parsers emit years as numbers
        if isinstance(value, bool):
            return value
        if isinstance(value, int | float):
            return str(value)
        return value
