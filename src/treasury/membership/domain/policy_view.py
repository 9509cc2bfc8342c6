"""Read-only views over a treasury policy.

Derives the member list and the role membership index from the group roles
of a policy. Both are recomputed from the live policy on every call and are
never cached across mutations.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from membership.domain.policy import GroupKind, Policy
from membership.domain.value_objects import Member


def derive_members(policy: Policy) -> list[Member]:
    """Build one Member per distinct account id found in any group role.

    A member's roles are the union of the group roles containing the
    account, in policy order. Members are sorted by account id, ignoring case.

    Args:
        policy: The policy to read

    Returns:
        Sorted list of members
    """
    roles_by_account: dict[str, list[str]] = {}

    for role in policy.roles:
        if not isinstance(role.kind, GroupKind):
            continue
        for account_id in role.kind.members:
            held = roles_by_account.setdefault(account_id, [])
            if role.name not in held:
                held.append(role.name)

    members = [
        Member(account_id=account_id, roles=tuple(roles))
        for account_id, roles in roles_by_account.items()
    ]
    return sorted(members, key=lambda m: m.account_id.lower())


def build_role_index(members: Iterable[Member]) -> dict[str, set[str]]:
    """Map each role name to the set of account ids holding it.

    Roles appear in the order they are first seen, so messages built from
    the index are stable for a given member list.
    """
    index: dict[str, set[str]] = {}
    for member in members:
        for role in member.roles:
            index.setdefault(role, set()).add(member.account_id)
    return index


def find_member(members: Sequence[Member], account_id: str) -> Member | None:
    for member in members:
        if member.account_id == account_id:
            return member
    return None


def assignable_roles(
    policy: Policy, excluded: Iterable[str] = ("all",)
) -> list[str]:
    """Names of the group roles that can be assigned to members.

    Args:
        policy: The policy to read
        excluded: Role names never offered for assignment (case-insensitive)
    """
    skip = {name.lower() for name in excluded}
    return [
        role.name
        for role in policy.roles
        if isinstance(role.kind, GroupKind) and role.name.lower() not in skip
    ]
