"""Member-level comparison of two policies.

Used to show what a policy change proposal does to membership, independent
of the description text it was submitted with.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from membership.domain.policy import Policy
from membership.domain.policy_view import derive_members


@dataclass(frozen=True)
class MemberRoleChange:
    """Roles of one account before and after a policy change (sorted)."""

    account_id: str
    old_roles: tuple[str, ...] = ()
    new_roles: tuple[str, ...] = ()


@dataclass(frozen=True)
class MemberRoleChanges:
    added: list[MemberRoleChange] = field(default_factory=list)
    removed: list[MemberRoleChange] = field(default_factory=list)
    updated: list[MemberRoleChange] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.added or self.removed or self.updated)


def compute_member_role_changes(current: Policy, proposed: Policy) -> MemberRoleChanges:
    """Compare the group memberships of two policies.

    Args:
        current: Policy in force
        proposed: Policy carried by a change proposal

    Returns:
        Accounts that gain their first role, lose their last role, or whose
        role set differs, each ordered by account id (case-insensitive)
    """
    old_roles = {m.account_id: tuple(sorted(m.roles)) for m in derive_members(current)}
    new_roles = {m.account_id: tuple(sorted(m.roles)) for m in derive_members(proposed)}

    changes = MemberRoleChanges()
    for account_id in sorted(old_roles.keys() | new_roles.keys(), key=str.lower):
        before = old_roles.get(account_id, ())
        after = new_roles.get(account_id, ())
        if not before and after:
            changes.added.append(MemberRoleChange(account_id, new_roles=after))
        elif before and not after:
            changes.removed.append(MemberRoleChange(account_id, old_roles=before))
        elif before != after:
            changes.updated.append(
                MemberRoleChange(account_id, old_roles=before, new_roles=after)
            )
    return changes
