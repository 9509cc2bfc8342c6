"""Actor permission checks against the treasury policy.

Role permissions are strings of the form ``"<proposal kind>:<action>"``,
where either side may be the ``*`` wildcard (``"*:*"``, ``"policy:*"``,
``"*:AddProposal"``). A role applies to an account when it is the
``Everyone`` role or a group containing the account.
"""

from __future__ import annotations

from membership.domain.policy import GroupKind, OtherKind, Policy, Role

WILDCARD = "*"
POLICY_PROPOSAL_KIND = "policy"
ADD_PROPOSAL_ACTION = "AddProposal"


def role_applies_to(role: Role, account_id: str) -> bool:
    if isinstance(role.kind, GroupKind):
        return account_id in role.kind.members
    if isinstance(role.kind, OtherKind):
        return role.kind.is_everyone
    return False


def permission_matches(permission: str, kind: str, action: str) -> bool:
    """Whether a single permission string grants ``kind:action``."""
    granted_kind, _, granted_action = permission.partition(":")
    if not granted_action:
        return False
    kind_ok = granted_kind in (WILDCARD, kind)
    action_ok = granted_action in (WILDCARD, action)
    return kind_ok and action_ok


def has_permission(
    policy: Policy,
    account_id: str | None,
    kind: str = POLICY_PROPOSAL_KIND,
    action: str = ADD_PROPOSAL_ACTION,
) -> bool:
    """Check whether an account may perform ``action`` on ``kind`` proposals.

    Args:
        policy: The treasury policy
        account_id: The acting account; None means nobody is connected
        kind: Proposal kind, "policy" for membership changes
        action: Proposal action, "AddProposal" to draft a proposal

    Returns:
        True if any role applying to the account grants the permission
    """
    if not account_id:
        return False

    for role in policy.roles:
        if not role_applies_to(role, account_id):
            continue
        if any(permission_matches(p, kind, action) for p in role.permissions):
            return True
    return False
