"""Reply text sent back to the actor."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rootline.family.errors import AmbiguousReferenceError, DuplicateCandidateError
    from rootline.family.summary import PersonSummary
    from rootline.store.types import PersonEntry, TreeEntry

NOTHING_TO_CONFIRM = "There is nothing to confirm right now."
NOT_A_CONFIRMATION = "Please reply YES to go ahead or NO to cancel."
CANCELLED = "Okay, cancelled. Nothing was changed."
NO_OPERATIONS = "I didn't find anything to change in that message."
UNREADABLE_OPERATION = "I couldn't understand one of those requests."
STORAGE_FAILURE = "Something went wrong while saving. Please try again in a moment."
STALE_PENDING = "That request can no longer be completed."
NO_ACTIVE_TREE = (
    "You are not working on a family tree yet. Create one with *Create [name]* "
    "or send a 6-character join code."
)


def tree_created(tree: TreeEntry) -> str:
    return (
        f"Family tree *{tree.name}* has been created!\n"
        f"Join code: {tree.join_code}\n"
        "Send this code to family members so they can join and contribute."
    )


def tree_joined(tree: TreeEntry) -> str:
    return f"Joined family tree *{tree.name}*. You can now add people and relationships."


def tree_left(tree: TreeEntry) -> str:
    return f"You have left *{tree.name}*."


def no_longer_member(tree: TreeEntry | None) -> str:
    if tree is None:
        return NO_ACTIVE_TREE
    return (
        f"It looks like you are no longer a member of the *{tree.name}* tree. "
        "Type *MENU* to see options."
    )


def tree_overview(
    tree: TreeEntry, people: list[PersonEntry], last_person_name: str | None
) -> str:
    lines = [f"*{tree.name}* ({tree.join_code}) has {len(people)} people."]
    for person in people:
        lines.append(f"- {person_label(person)}")
    if last_person_name:
        lines.append(f"Last person added/updated: {last_person_name}")
    return "\n".join(lines)


def person_label(person: PersonEntry) -> str:
    if person.dob:
        return f"{person.primary_name} ({person.dob})"
    return person.primary_name


def person_added(person: PersonEntry) -> str:
    return f"Added *{person_label(person)}*."


def person_exists(person: PersonEntry, updated: bool) -> str:
    if updated:
        return f"*{person.primary_name}* was already in the tree; details updated."
    return f"*{person.primary_name}* is already in the tree."


def child_added(child: PersonEntry, parents: list[PersonEntry]) -> str:
    names = " and ".join(p.primary_name for p in parents)
    return f"Added *{child.primary_name}* as a child of {names}."


def relationship_added(a: PersonEntry, b: PersonEntry, phrase: str) -> str:
    return f"Recorded: {a.primary_name} {phrase} {b.primary_name}."


def person_renamed(old_name: str, person: PersonEntry) -> str:
    return f"Renamed *{old_name}* to *{person.primary_name}*."


def field_updated(person: PersonEntry, field: str, value: str | None) -> str:
    return f"Updated *{person.primary_name}*: {field} is now {value}."


def person_removed(person: PersonEntry) -> str:
    return f"Removed *{person.primary_name}* and all of their relationships."


def person_not_found(name: str) -> str:
    return f"I couldn't find anyone called *{name}* in this tree."


def person_details(person: PersonEntry, summary: PersonSummary) -> str:
    lines = [f"*{person.primary_name}* ({person.gender or 'Undefined'})"]
    lines.append(f"Born: {person.dob or 'unknown'}")
    if person.dod:
        lines.append(f"Died: {person.dod}")
    if summary.parents:
        lines.append(f"Parents: {', '.join(summary.parents)}")
    if summary.partners:
        lines.append(f"Partners: {', '.join(summary.partners)}")
    if summary.children:
        lines.append(f"Children: {', '.join(summary.children)}")
    return "\n".join(lines)


def ambiguous(error: AmbiguousReferenceError) -> str:
    lines = [f"I found several people called *{error.name}*:"]
    for index, candidate in enumerate(error.candidates, start=1):
        lines.append(f"{index}. {candidate.name} ({candidate.describe()})")
    lines.append("Nothing was changed. Please be more specific, for example by birth year.")
    return "\n".join(lines)


def duplicate_prompt(error: DuplicateCandidateError) -> str:
    lines = [f"I found people similar to *{error.name}* in your tree:"]
    for index, candidate in enumerate(error.candidates, start=1):
        lines.append(f"{index}. {person_label(candidate.person)}")
    lines.append(
        "If one of these is who you meant, please correct the spelling. "
        "To go ahead anyway reply *YES*, or *NO* to cancel."
    )
    return "\n".join(lines)


def divorce_prompt(a_name: str, b_name: str) -> str:
    return (
        f"{a_name} and {b_name} are not recorded as married. "
        "Reply *YES* to record the divorce anyway, or *NO* to cancel."
    )


def help_text(tree: TreeEntry | None) -> str:
    if tree is None:
        return (
            "*Family Tree Help*\n"
            "To create a new tree: *Create [name]*\n"
            "To join an existing tree, send its 6-character join code."
        )
    return (
        "*Family Tree Help*\n"
        f"You are working on *{tree.name}*.\n"
        "1. Add a person: *Add John Doe 1990 Male*\n"
        "2. Add a relationship: *John is Mary's father*, *Mike and Grace are spouses*\n"
        "3. Update a person: *Change John's gender to Male*\n"
        "4. Find a person: *John*\n"
        "5. *Menu* for the join code and sharing options."
    )


def menu_text(tree: TreeEntry | None) -> str:
    lines = ["*Family Tree Menu*"]
    if tree is not None:
        lines.append(f"Current tree: *{tree.name}* (join code {tree.join_code})")
        lines.append("1. *List Tree* - a quick summary")
        lines.append("2. *Help* - commands for adding people and relationships")
        lines.append("3. *Leave* - stop working on this tree")
    lines.append("*Create [name]* - start a new tree")
    lines.append("*[code]* - join an existing tree")
    return "\n".join(lines)
