"""Change log lines embedded in membership proposal descriptions.

Membership changes are described to voters with one line per account:

    - add "dave.near" to ["Requestor"]
    - remove "bob.near" from ["Financial"]
    - edit "carol.near": removed from ["Financial"], added to ["Governance"]

Encoding is structural: lines are built from the same requests that produce
the new policy. Decoding is best-effort pattern matching over the free-text
description of a pending proposal; anything that does not match one of the
three shapes is ignored.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

from membership.domain.value_objects import PendingChange

ADD_PATTERN = re.compile(r'add "([^"]+)" to \[([^\]]+)\]', re.IGNORECASE)
REMOVE_PATTERN = re.compile(r'remove "([^"]+)" from \[([^\]]+)\]', re.IGNORECASE)
EDIT_PATTERN = re.compile(
    r'edit "([^"]+)":\s*'
    r"(?:removed from \[([^\]]+)\])?\s*,?\s*"
    r"(?:added to \[([^\]]+)\])?",
    re.IGNORECASE,
)
QUOTED_ROLE_PATTERN = re.compile(r'"([^"]+)"')


def format_role_list(roles: Iterable[str]) -> str:
    """Render role names as a bracketed, quoted list: ``["A", "B"]``."""
    return "[" + ", ".join(f'"{role}"' for role in roles) + "]"


def encode_add(account_id: str, roles: Iterable[str]) -> str:
    return f'- add "{account_id}" to {format_role_list(roles)}'


def encode_remove(account_id: str, roles: Iterable[str]) -> str:
    return f'- remove "{account_id}" from {format_role_list(roles)}'


def encode_edit(
    account_id: str, removed: Iterable[str], added: Iterable[str]
) -> str | None:
    """Build an edit line, omitting whichever clause is empty.

    Returns:
        The line, or None when neither roles were removed nor added
    """
    removed = list(removed)
    added = list(added)

    parts = []
    if removed:
        parts.append(f"removed from {format_role_list(removed)}")
    if added:
        parts.append(f"added to {format_role_list(added)}")

    if not parts:
        return None
    return f'- edit "{account_id}": {", ".join(parts)}'


def encode_edit_roles(account_id: str, roles: Iterable[str]) -> str:
    """Edit line for an account whose previous roles are unknown."""
    return f'- edit "{account_id}" to {format_role_list(roles)}'


def parse_role_list(text: str | None) -> list[str]:
    if not text:
        return []
    return QUOTED_ROLE_PATTERN.findall(text)


@dataclass
class _Accumulator:
    added: list[str]
    removed: list[str]

    def add(self, roles: Iterable[str]) -> None:
        for role in roles:
            if role not in self.added:
                self.added.append(role)

    def remove(self, roles: Iterable[str]) -> None:
        for role in roles:
            if role not in self.removed:
                self.removed.append(role)


def decode(description: str | None) -> list[PendingChange]:
    """Recover per-account role changes from a proposal description.

    Lines for the same account accumulate: a later line appends to the
    roles recovered from an earlier one. Accounts appear in the order their
    first line appears in the text; accounts with no recovered roles are
    dropped.

    Args:
        description: Free-text proposal description

    Returns:
        One PendingChange per account mentioned by a recognised line
    """
    if not description:
        return []

    matches: list[tuple[int, str, re.Match[str]]] = []
    for kind, pattern in (
        ("add", ADD_PATTERN),
        ("remove", REMOVE_PATTERN),
        ("edit", EDIT_PATTERN),
    ):
        matches.extend((m.start(), kind, m) for m in pattern.finditer(description))
    matches.sort(key=lambda entry: entry[0])

    changes: dict[str, _Accumulator] = {}
    for _, kind, match in matches:
        account_id = match.group(1)
        entry = changes.setdefault(account_id, _Accumulator(added=[], removed=[]))
        if kind == "add":
            entry.add(parse_role_list(match.group(2)))
        elif kind == "remove":
            entry.remove(parse_role_list(match.group(2)))
        else:
            entry.remove(parse_role_list(match.group(2)))
            entry.add(parse_role_list(match.group(3)))

    return [
        PendingChange(
            account_id=account_id,
            added_roles=tuple(entry.added),
            removed_roles=tuple(entry.removed),
        )
        for account_id, entry in changes.items()
        if entry.added or entry.removed
    ]


def render_description(title: str, summary: str) -> str:
    """Render the proposal description stored alongside the new policy.

    Fields are rendered as ``* Title: ...`` bullets joined by ``<br>``; the
    summary keeps its line breaks so each change log line stays intact.
    """
    fields = [("Title", title), ("Summary", summary)]
    return " <br>".join(f"* {name}: {value}" for name, value in fields if value)
