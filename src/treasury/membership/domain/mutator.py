"""Policy mutations for membership changes.

Both operations deep-copy the policy before touching it, rewrite only the
group arrays, and return the new policy together with the change log that
describes it. The caller's policy is never modified.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from membership.domain.changelog import (
    encode_add,
    encode_edit,
    encode_edit_roles,
    encode_remove,
)
from membership.domain.observability import DefaultMembershipProbe, MembershipProbe
from membership.domain.policy import GroupKind, Policy
from membership.domain.policy_view import derive_members
from membership.domain.value_objects import AddMember, EditMember, RemoveMember


@dataclass(frozen=True)
class MutationOutcome:
    """A new policy and the change log describing how it was produced.

    Attributes:
        updated_policy: Independent copy of the policy with the change applied
        summary: Change log lines joined by newlines
        lines: The individual change log lines
    """

    updated_policy: Policy
    summary: str
    lines: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.lines


def _target_roles(change: AddMember | EditMember) -> tuple[str, ...]:
    if isinstance(change, EditMember):
        return change.new_roles
    return change.roles


def apply_role_changes(
    policy: Policy,
    changes: Sequence[AddMember | EditMember],
    is_edit: bool = False,
    probe: MembershipProbe | None = None,
) -> MutationOutcome:
    """Give each referenced account exactly the requested set of group roles.

    Every group role's member array is recomputed in a single pass over the
    requests: an account is appended when the role is requested and it is
    absent, and dropped when the role is not requested and it is present.
    Accounts not referenced by any request keep their position.

    In add mode every request produces an ``add`` line. In edit mode the
    requested roles are compared with the roles the account holds in
    ``policy``; accounts whose roles do not change produce no line.

    Args:
        policy: Current policy snapshot (left untouched)
        changes: Requests naming the complete role set per account
        is_edit: Describe the changes as edits instead of additions
        probe: Optional domain probe for observability

    Returns:
        MutationOutcome with the new policy and its change log
    """
    probe = probe or DefaultMembershipProbe()
    current_roles = {m.account_id: m.roles for m in derive_members(policy)}

    lines: list[str] = []
    for change in changes:
        roles = _target_roles(change)
        if not is_edit:
            lines.append(encode_add(change.account_id, roles))
            continue

        held = current_roles.get(change.account_id)
        if held is None:
            lines.append(encode_edit_roles(change.account_id, roles))
            continue

        requested = set(roles)
        removed = [r for r in held if r not in requested]
        added = [r for r in roles if r not in held]
        line = encode_edit(change.account_id, removed, added)
        if line is not None:
            lines.append(line)

    updated = policy.copy()
    for role in updated.roles:
        if not isinstance(role.kind, GroupKind):
            continue
        group = list(role.kind.members)
        for change in changes:
            should_have_role = role.name in _target_roles(change)
            is_in_role = change.account_id in group
            if should_have_role and not is_in_role:
                group.append(change.account_id)
            elif not should_have_role and is_in_role:
                group = [a for a in group if a != change.account_id]
        role.kind = GroupKind(members=tuple(group))

    probe.policy_roles_changed(
        mode="edit" if is_edit else "add",
        account_ids=[c.account_id for c in changes],
        summary_lines=len(lines),
    )
    return MutationOutcome(
        updated_policy=updated,
        summary="\n".join(lines),
        lines=tuple(lines),
    )


def remove_members(
    policy: Policy,
    removals: Sequence[RemoveMember],
    probe: MembershipProbe | None = None,
) -> MutationOutcome:
    """Strip accounts from every group role of the policy.

    Removal is total: the roles carried by each request only feed the change
    log, they do not limit which groups the account is removed from.

    Args:
        policy: Current policy snapshot (left untouched)
        removals: Accounts to remove, with the roles they held
        probe: Optional domain probe for observability

    Returns:
        MutationOutcome with the new policy and its change log
    """
    probe = probe or DefaultMembershipProbe()
    lines = [encode_remove(r.account_id, r.roles) for r in removals]
    removing = {r.account_id for r in removals}

    updated = policy.copy()
    emptied: list[str] = []
    for role in updated.roles:
        if not isinstance(role.kind, GroupKind):
            continue
        remaining = tuple(a for a in role.kind.members if a not in removing)
        if role.kind.members and not remaining:
            emptied.append(role.name)
        role.kind = GroupKind(members=remaining)

    probe.policy_members_removed(
        account_ids=[r.account_id for r in removals],
        roles_emptied=emptied,
    )
    return MutationOutcome(
        updated_policy=updated,
        summary="\n".join(lines),
        lines=tuple(lines),
    )
