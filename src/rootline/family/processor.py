"""Run one inbound batch of structured operations against a tree.

Each operation passes through the same stages: exact-name ambiguity check,
duplicate detection when the policy table asks for it, the mutation itself
and finally the conversation state update. Validation problems skip just
that operation; ambiguity, a pending confirmation or a storage failure stop
the rest of the batch while keeping what already succeeded.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal

import pydantic

from rootline.family import dates, replies
from rootline.family.ambiguity import AmbiguityResolver
from rootline.family.conversation import ConversationState
from rootline.family.direction import ParentDirection, infer_parent_direction
from rootline.family.duplicates import DuplicateCandidate, DuplicateResolver
from rootline.family.edges import (
    AFFAIR_WITH,
    DIVORCED_FROM,
    PARENT_OF,
    PARTNER_OF,
    SEPARATED_FROM,
    SPOUSE_OF,
)
from rootline.family.errors import (
    AmbiguousReferenceError,
    ConfirmationRequiredError,
    DuplicateCandidateError,
    PersistenceError,
    ValidationError,
)
from rootline.family.mutator import GraphMutator, ParentChildValidator, min_parent_age_gap
from rootline.family.names import normalize_name
from rootline.family.operations import TREELESS_OPS, Operation, requires_duplicate_check
from rootline.family.pending import (
    RESUME_CREATE_CHILD,
    RESUME_CREATE_PERSON,
    RESUME_DIVORCE,
    RESUME_RENAME,
    RESUMABLE_KINDS,
    PendingConfirmation,
    parse_confirmation,
)

if TYPE_CHECKING:
    from rootline.config.models import RootlineConfig
    from rootline.store.protocols import FamilyStore
    from rootline.store.types import PersonEntry, TreeEntry

logger = logging.getLogger(__name__)

OutcomeStatus = Literal["ok", "invalid", "ambiguous", "pending", "failed"]

# Relationship words the parser may send in ``kind``; child_of is flipped
KIND_ALIASES: dict[str, str] = {
    "parent": PARENT_OF,
    "parent_of": PARENT_OF,
    "father": PARENT_OF,
    "mother": PARENT_OF,
    "child": "child_of",
    "child_of": "child_of",
    "spouse": SPOUSE_OF,
    "spouse_of": SPOUSE_OF,
    "married": SPOUSE_OF,
    "partner": PARTNER_OF,
    "partner_of": PARTNER_OF,
    "divorced": DIVORCED_FROM,
    "divorced_from": DIVORCED_FROM,
    "separated": SEPARATED_FROM,
    "separated_from": SEPARATED_FROM,
    "affair": AFFAIR_WITH,
    "affair_with": AFFAIR_WITH,
}

_KIND_PHRASES = {
    PARENT_OF: "is a parent of",
    SPOUSE_OF: "is married to",
    PARTNER_OF: "is the partner of",
    DIVORCED_FROM: "is divorced from",
    SEPARATED_FROM: "is separated from",
    AFFAIR_WITH: "had an affair with",
}


@dataclass
class OperationOutcome:
    op: str
    status: OutcomeStatus
    message: str


@dataclass
class BatchResult:
    """Reply text for the channel plus what happened to each operation."""

    reply: str
    outcomes: list[OperationOutcome] = field(default_factory=list)

    @property
    def stopped(self) -> bool:
        return any(o.status in ("ambiguous", "pending", "failed") for o in self.outcomes)


@dataclass
class _Step:
    actor_id: str
    op: Operation
    tree_id: str | None


class BatchProcessor:
    def __init__(
        self,
        store: FamilyStore,
        duplicate_resolver: DuplicateResolver | None = None,
        parent_child_validator: ParentChildValidator | None = None,
    ) -> None:
        self._store = store
        self.duplicates = duplicate_resolver or DuplicateResolver()
        self.ambiguity = AmbiguityResolver(store)
        self.mutator = GraphMutator(store, parent_child_validator)
        self.pending = PendingConfirmation(store)
        self.state = ConversationState(store)
        self._handlers: dict[str, Callable[[_Step], Awaitable[str]]] = {
            "new_tree": self._new_tree,
            "join_tree": self._join_tree,
            "leave": self._leave,
            "help": self._help,
            "menu": self._menu,
            "view_tree": self._view_tree,
            "add_person": self._add_person,
            "add_child": self._add_child,
            "link": self._link,
            "divorce": self._divorce,
            "separate": self._separate,
            "affair": self._affair,
            "rename": self._rename,
            "set_dob": self._set_dob,
            "set_dod": self._set_dod,
            "set_gender": self._set_gender,
            "view_person": self._view_person,
            "remove_person": self._remove_person,
        }

    @classmethod
    def from_config(cls, store: FamilyStore, config: RootlineConfig) -> BatchProcessor:
        validator = None
        if config.graph.min_parent_age_gap is not None:
            validator = min_parent_age_gap(config.graph.min_parent_age_gap)
        return cls(
            store,
            duplicate_resolver=DuplicateResolver.from_config(config.duplicates),
            parent_child_validator=validator,
        )

    # -- entry points ---------------------------------------------------

    async def process(
        self,
        actor_id: str,
        operations: Sequence[Mapping[str, Any] | Operation],
    ) -> BatchResult:
        """Apply a batch in order and build the combined reply."""
        outcomes: list[OperationOutcome] = []
        for index, raw in enumerate(operations):
            try:
                op = raw if isinstance(raw, Operation) else Operation.model_validate(raw)
            except pydantic.ValidationError as e:
                op_name = str(raw.get("op", "unknown")) if isinstance(raw, Mapping) else "unknown"
                logger.info(
                    "operation_rejected",
                    extra={"op": op_name, "batch.index": index, "error.count": e.error_count()},
                )
                outcomes.append(
                    OperationOutcome(op_name, "invalid", replies.UNREADABLE_OPERATION)
                )
                continue

            outcome = await self._guarded(actor_id, op.op, self._run(actor_id, op), index)
            outcomes.append(outcome)
            if outcome.status in ("ambiguous", "pending", "failed"):
                break

        if not outcomes:
            return BatchResult(replies.NO_OPERATIONS)
        return BatchResult("\n".join(o.message for o in outcomes), outcomes)

    async def confirm(self, actor_id: str, text: str | None) -> BatchResult:
        """Resolve the actor's pending action with a YES or NO."""
        answer = parse_confirmation(text)
        if answer is None:
            return BatchResult(
                replies.NOT_A_CONFIRMATION,
                [OperationOutcome("confirm", "invalid", replies.NOT_A_CONFIRMATION)],
            )

        action = await self.pending.pop(actor_id)
        if action is None:
            return BatchResult(
                replies.NOTHING_TO_CONFIRM,
                [OperationOutcome("confirm", "ok", replies.NOTHING_TO_CONFIRM)],
            )
        if not answer:
            logger.debug("pending_action_cancelled", extra={"actor.id": actor_id})
            return BatchResult(
                replies.CANCELLED, [OperationOutcome("confirm", "ok", replies.CANCELLED)]
            )

        outcome = await self._guarded(
            actor_id, "confirm", self._resume(actor_id, action.tree_id, action.payload), 0
        )
        return BatchResult(outcome.message, [outcome])

    # -- dispatch -------------------------------------------------------

    async def _guarded(
        self, actor_id: str, op_name: str, step: Awaitable[str], index: int
    ) -> OperationOutcome:
        try:
            return OperationOutcome(op_name, "ok", await step)
        except ValidationError as e:
            return OperationOutcome(op_name, "invalid", str(e))
        except AmbiguousReferenceError as e:
            return OperationOutcome(op_name, "ambiguous", replies.ambiguous(e))
        except DuplicateCandidateError as e:
            return OperationOutcome(op_name, "pending", replies.duplicate_prompt(e))
        except ConfirmationRequiredError as e:
            return OperationOutcome(op_name, "pending", str(e))
        except PersistenceError:
            logger.exception(
                "batch_step_failed",
                extra={"actor.id": actor_id, "op": op_name, "batch.index": index},
            )
            return OperationOutcome(op_name, "failed", replies.STORAGE_FAILURE)

    async def _run(self, actor_id: str, op: Operation) -> str:
        tree_id = await self.state.active_tree(actor_id)
        if tree_id is not None and not await self._store.is_member(tree_id, actor_id):
            # Membership was dropped behind the actor's back
            tree = await self._store.get_tree(tree_id)
            await self._store.clear_conversation_state(actor_id)
            logger.info(
                "active_tree_membership_missing",
                extra={"actor.id": actor_id, "tree.id": tree_id},
            )
            if op.op not in TREELESS_OPS:
                raise ValidationError(replies.no_longer_member(tree))
            tree_id = None
        if tree_id is None and op.op not in TREELESS_OPS:
            raise ValidationError(replies.NO_ACTIVE_TREE)
        return await self._handlers[op.op](_Step(actor_id, op, tree_id))

    async def _defer(self, step: _Step, error: ConfirmationRequiredError) -> None:
        """Save the pending payload and re-raise to stop the batch."""
        assert step.tree_id is not None
        await self.pending.save(step.actor_id, step.tree_id, error.payload)
        raise error

    async def _tree(self, tree_id: str | None) -> TreeEntry:
        tree = await self._store.get_tree(tree_id) if tree_id else None
        if tree is None:
            raise ValidationError(replies.NO_ACTIVE_TREE)
        return tree

    async def _existing(self, tree_id: str, name: str | None, label: str) -> PersonEntry:
        """Resolve a name that must already be in the tree."""
        if not name or not name.strip():
            raise ValidationError(f"Please give the {label}'s name.")
        person = await self.ambiguity.check_unambiguous(tree_id, name)
        if person is None:
            raise ValidationError(replies.person_not_found(name.strip()))
        return person

    async def _check_duplicates(
        self,
        step: _Step,
        name: str,
        dob: str | None,
        payload: dict[str, Any],
        exclude_id: str | None = None,
    ) -> None:
        assert step.tree_id is not None
        if not requires_duplicate_check(step.op.op):
            return
        people = [
            p for p in await self._store.list_people(step.tree_id) if p.id != exclude_id
        ]
        candidates = self.duplicates.find_duplicates(people, name, dob)
        if candidates:
            await self._defer(step, DuplicateCandidateError(name, candidates, payload))

    # -- tree and navigation --------------------------------------------

    async def _new_tree(self, step: _Step) -> str:
        name = (step.op.name or "").strip() or "Family Tree"
        tree = await self._store.create_tree(name)
        await self.state.activate_tree(step.actor_id, tree.id)
        return replies.tree_created(tree)

    async def _join_tree(self, step: _Step) -> str:
        code = (step.op.code or "").strip()
        if not code:
            raise ValidationError("Please send the 6-character join code.")
        tree = await self._store.get_tree_by_code(code)
        if tree is None:
            raise ValidationError(f"No family tree uses the join code {code.upper()}.")
        await self.state.activate_tree(step.actor_id, tree.id)
        return replies.tree_joined(tree)

    async def _leave(self, step: _Step) -> str:
        tree = await self._tree(step.tree_id)
        await self.state.leave(step.actor_id, tree.id)
        return replies.tree_left(tree)

    async def _help(self, step: _Step) -> str:
        tree = await self._store.get_tree(step.tree_id) if step.tree_id else None
        return replies.help_text(tree)

    async def _menu(self, step: _Step) -> str:
        tree = await self._store.get_tree(step.tree_id) if step.tree_id else None
        return replies.menu_text(tree)

    async def _view_tree(self, step: _Step) -> str:
        tree = await self._tree(step.tree_id)
        people = await self._store.list_people(tree.id)
        people.sort(key=lambda p: (dates.sort_key(p.dob), p.primary_name.casefold()))
        state = await self.state.get(step.actor_id)
        return replies.tree_overview(tree, people, state.last_person_name if state else None)

    # -- people ---------------------------------------------------------

    async def _add_person(self, step: _Step) -> str:
        assert step.tree_id is not None
        op = step.op
        if not op.name or not op.name.strip():
            raise ValidationError("Please give the person's name.")
        existing = await self.ambiguity.check_unambiguous(step.tree_id, op.name)
        if existing is None:
            await self._check_duplicates(
                step,
                op.name,
                op.dob,
                {
                    "kind": RESUME_CREATE_PERSON,
                    "name": op.name,
                    "dob": op.dob,
                    "gender": op.gender,
                },
            )
        upsert = await self.mutator.upsert_person_by_name(
            step.tree_id, op.name, dob=op.dob, gender=op.gender
        )
        await self.state.remember_person(step.actor_id, step.tree_id, upsert.person)
        if upsert.created:
            return replies.person_added(upsert.person)
        return replies.person_exists(upsert.person, updated=upsert.person != existing)

    async def _add_child(self, step: _Step) -> str:
        assert step.tree_id is not None
        op = step.op
        child_name = op.child or op.name
        if not child_name or not child_name.strip():
            raise ValidationError("Please give the child's name.")
        if not op.parent_a or not op.parent_a.strip():
            raise ValidationError("Please give at least one parent.")

        existing = await self.ambiguity.check_unambiguous(step.tree_id, child_name)
        for parent in (op.parent_a, op.parent_b):
            if parent:
                await self.ambiguity.check_unambiguous(step.tree_id, parent)
        if existing is None:
            await self._check_duplicates(
                step,
                child_name,
                op.dob,
                {
                    "kind": RESUME_CREATE_CHILD,
                    "child": child_name,
                    "parentA": op.parent_a,
                    "parentB": op.parent_b,
                    "dob": op.dob,
                },
            )
        attachment = await self.mutator.add_child_with_parents(
            step.tree_id, child_name, op.parent_a, op.parent_b, dob=op.dob
        )
        await self.state.remember_person(step.actor_id, step.tree_id, attachment.child)
        return replies.child_added(attachment.child, attachment.parents)

    async def _rename(self, step: _Step) -> str:
        assert step.tree_id is not None
        op = step.op
        person = await self._existing(step.tree_id, op.from_, "person")
        if not op.to or not op.to.strip():
            raise ValidationError("Please give the new name.")

        payload = {
            "kind": RESUME_RENAME,
            "person_id": person.id,
            "from": person.primary_name,
            "to": op.to,
        }
        taken = [
            p
            for p in await self._store.find_people_by_normalized_name(
                step.tree_id, normalize_name(op.to)
            )
            if p.id != person.id
        ]
        if taken:
            candidates = [DuplicateCandidate(p, 1.0, True) for p in taken]
            await self._defer(step, DuplicateCandidateError(op.to.strip(), candidates, payload))
        await self._check_duplicates(step, op.to, person.dob, payload, exclude_id=person.id)

        old_name = person.primary_name
        renamed = await self.mutator.rename_person(step.tree_id, person.id, op.to)
        await self.state.remember_person(step.actor_id, step.tree_id, renamed)
        return replies.person_renamed(old_name, renamed)

    async def _set_dob(self, step: _Step) -> str:
        assert step.tree_id is not None
        person = await self._existing(step.tree_id, step.op.name, "person")
        person = await self.mutator.set_dob(step.tree_id, person.id, step.op.dob)
        await self.state.remember_person(step.actor_id, step.tree_id, person)
        return replies.field_updated(person, "date of birth", person.dob)

    async def _set_dod(self, step: _Step) -> str:
        assert step.tree_id is not None
        person = await self._existing(step.tree_id, step.op.name, "person")
        person = await self.mutator.set_dod(step.tree_id, person.id, step.op.dod)
        await self.state.remember_person(step.actor_id, step.tree_id, person)
        return replies.field_updated(person, "date of death", person.dod)

    async def _set_gender(self, step: _Step) -> str:
        assert step.tree_id is not None
        person = await self._existing(step.tree_id, step.op.name, "person")
        person = await self.mutator.set_gender(step.tree_id, person.id, step.op.gender)
        await self.state.remember_person(step.actor_id, step.tree_id, person)
        return replies.field_updated(person, "gender", person.gender)

    async def _view_person(self, step: _Step) -> str:
        assert step.tree_id is not None
        person = await self._existing(step.tree_id, step.op.name, "person")
        summary = await self.mutator.person_summary(step.tree_id, person.id)
        await self.state.remember_person(step.actor_id, step.tree_id, person)
        return replies.person_details(person, summary)

    async def _remove_person(self, step: _Step) -> str:
        assert step.tree_id is not None
        person = await self._existing(step.tree_id, step.op.name, "person")
        removed = await self.mutator.remove_person(step.tree_id, person.id)
        state = await self.state.get(step.actor_id)
        if state is not None and state.last_person_id == removed.id:
            await self._store.upsert_conversation_state(step.actor_id, step.tree_id)
        return replies.person_removed(removed)

    # -- relationships --------------------------------------------------

    def _pair_names(self, op: Operation) -> tuple[str, str]:
        a = (op.a or "").strip()
        b = (op.b or "").strip()
        if not a or not b:
            raise ValidationError("Please name both people.")
        if normalize_name(a) == normalize_name(b):
            raise ValidationError("A person cannot be related to themselves.")
        return a, b

    async def _upsert_pair(
        self, tree_id: str, a: str, b: str
    ) -> tuple[PersonEntry, PersonEntry]:
        await self.ambiguity.check_unambiguous(tree_id, a)
        await self.ambiguity.check_unambiguous(tree_id, b)
        person_a = (await self.mutator.upsert_person_by_name(tree_id, a)).person
        person_b = (await self.mutator.upsert_person_by_name(tree_id, b)).person
        return person_a, person_b

    async def _relate(self, step: _Step, kind: str) -> str:
        assert step.tree_id is not None
        a, b = self._pair_names(step.op)
        person_a, person_b = await self._upsert_pair(step.tree_id, a, b)
        await self.mutator.add_relationship(step.tree_id, kind, person_a.id, person_b.id)
        return replies.relationship_added(person_a, person_b, _KIND_PHRASES[kind])

    async def _link(self, step: _Step) -> str:
        assert step.tree_id is not None
        op = step.op
        raw_kind = (op.kind or "").strip().lower().replace(" ", "_")
        if not raw_kind:
            raise ValidationError("Please say how they are related.")
        kind = KIND_ALIASES.get(raw_kind)
        if kind is None:
            raise ValidationError(f"I don't know the relationship {op.kind!r}.")
        a, b = self._pair_names(op)

        if kind == "child_of":
            kind, a, b = PARENT_OF, b, a
        if kind == PARENT_OF and op.text:
            direction = infer_parent_direction(op.text, a, b)
            if direction is ParentDirection.PARENT_IS_B:
                a, b = b, a

        person_a, person_b = await self._upsert_pair(step.tree_id, a, b)
        await self.mutator.add_relationship(step.tree_id, kind, person_a.id, person_b.id)
        return replies.relationship_added(person_a, person_b, _KIND_PHRASES[kind])

    async def _divorce(self, step: _Step) -> str:
        assert step.tree_id is not None
        a, b = self._pair_names(step.op)
        person_a = await self.ambiguity.check_unambiguous(step.tree_id, a)
        person_b = await self.ambiguity.check_unambiguous(step.tree_id, b)

        married = False
        if person_a is not None and person_b is not None:
            status = await self.mutator.couple_status(step.tree_id, person_a.id, person_b.id)
            married = status == SPOUSE_OF
        if not married:
            await self._defer(
                step,
                ConfirmationRequiredError(
                    replies.divorce_prompt(a, b),
                    {"kind": RESUME_DIVORCE, "a": a, "b": b},
                ),
            )
        return await self._relate(step, DIVORCED_FROM)

    async def _separate(self, step: _Step) -> str:
        return await self._relate(step, SEPARATED_FROM)

    async def _affair(self, step: _Step) -> str:
        return await self._relate(step, AFFAIR_WITH)

    # -- confirmation ---------------------------------------------------

    async def _resume(self, actor_id: str, tree_id: str, payload: dict[str, Any]) -> str:
        """Apply a confirmed pending payload without re-running the checks that deferred it."""
        kind = payload.get("kind")
        if kind not in RESUMABLE_KINDS:
            logger.warning("pending_action_unknown_kind", extra={"pending.kind": kind})
            return replies.STALE_PENDING
        await self._tree(tree_id)

        if kind == RESUME_CREATE_PERSON:
            person = await self.mutator.create_person(
                tree_id, payload.get("name"), payload.get("dob"), payload.get("gender")
            )
            await self.state.remember_person(actor_id, tree_id, person)
            return replies.person_added(person)

        if kind == RESUME_CREATE_CHILD:
            attachment = await self.mutator.add_child_with_parents(
                tree_id,
                payload.get("child"),
                payload.get("parentA"),
                payload.get("parentB"),
                dob=payload.get("dob"),
                new_child=True,
            )
            await self.state.remember_person(actor_id, tree_id, attachment.child)
            return replies.child_added(attachment.child, attachment.parents)

        if kind == RESUME_RENAME:
            person_id = payload.get("person_id") or ""
            renamed = await self.mutator.rename_person(tree_id, person_id, payload.get("to"))
            await self.state.remember_person(actor_id, tree_id, renamed)
            return replies.person_renamed(payload.get("from") or "", renamed)

        # RESUME_DIVORCE
        person_a, person_b = await self._upsert_pair(
            tree_id, payload.get("a") or "", payload.get("b") or ""
        )
        await self.mutator.add_relationship(tree_id, DIVORCED_FROM, person_a.id, person_b.id)
        return replies.relationship_added(person_a, person_b, _KIND_PHRASES[DIVORCED_FROM])
