"""Membership invariant validation.

The core business rule: every group role of the policy keeps at least one
holder after any accepted change. The validator answers, for a candidate
change, whether that rule still holds and, if not, which roles would be left
empty.

Every check is preceded by a permission gate (connected account, permission
to create policy proposals, no membership request already pending) whose
reason wins over any invariant violation.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from membership.domain.account_ids import (
    DEFAULT_ACCOUNT_SUFFIXES,
    DEFAULT_MAX_ACCOUNT_ID_LENGTH,
    validate_account_id_format,
)
from membership.domain.policy import Policy
from membership.domain.policy_view import build_role_index, derive_members
from membership.domain.value_objects import (
    ActorContext,
    AddMember,
    EditMember,
    Member,
    ValidationResult,
)

DEFAULT_CRITICAL_ROLE_KEYWORDS: tuple[str, ...] = ("governance", "admin")

CONNECT_WALLET_REASON = "Connect your wallet"
NO_PERMISSION_REASON = "You don't have permission to manage members"
PENDING_REQUEST_REASON = "You can't manage members while there is an active request"
NOT_A_MEMBER_REASON = "{account_id} is not a member of this treasury"

GOVERNANCE_CLAUSE = "required to manage team members and configure voting"


def format_roles_list(roles: Sequence[str]) -> str:
    """Join role names for a message: "A", "A and B", "A, B, and C"."""
    if not roles:
        return ""
    if len(roles) == 1:
        return roles[0]
    if len(roles) == 2:
        return f"{roles[0]} and {roles[1]}"
    return f"{', '.join(roles[:-1])}, and {roles[-1]}"


def is_governance_role(
    roles: Iterable[str],
    keywords: Sequence[str] = DEFAULT_CRITICAL_ROLE_KEYWORDS,
) -> bool:
    """Whether any role name contains a governance keyword (case-insensitive)."""
    return any(
        keyword.lower() in role.lower() for role in roles for keyword in keywords
    )


class MembershipValidator:
    """Validates membership changes against the current member set.

    Built once per candidate operation from the live member list; the role
    membership index is computed in the constructor and never reused across
    policy changes.
    """

    def __init__(
        self,
        members: Sequence[Member],
        actor: ActorContext,
        critical_role_keywords: Sequence[str] = DEFAULT_CRITICAL_ROLE_KEYWORDS,
        account_suffixes: Sequence[str] = DEFAULT_ACCOUNT_SUFFIXES,
        max_account_id_length: int = DEFAULT_MAX_ACCOUNT_ID_LENGTH,
    ) -> None:
        """Initialize the validator.

        Args:
            members: Current members, as derived from the policy
            actor: The account requesting the change
            critical_role_keywords: Substrings marking a role as required to
                manage members and configure voting
            account_suffixes: Allowed named-account suffixes for additions
            max_account_id_length: Longest accepted account id for additions
        """
        self._members = list(members)
        self._actor = actor
        self._critical_role_keywords = tuple(critical_role_keywords)
        self._account_suffixes = tuple(account_suffixes)
        self._max_account_id_length = max_account_id_length
        self._role_index = build_role_index(self._members)

    @classmethod
    def from_policy(
        cls, policy: Policy, actor: ActorContext, **options: Any
    ) -> MembershipValidator:
        """Create a validator for the members of a policy."""
        return cls(derive_members(policy), actor, **options)

    @property
    def members(self) -> list[Member]:
        return list(self._members)

    def permission_error(self) -> str | None:
        """Reason the actor may not manage members at all, if any."""
        if not self._actor.account_id:
            return CONNECT_WALLET_REASON
        if not self._actor.can_manage_members:
            return NO_PERMISSION_REASON
        if self._actor.has_pending_request:
            return PENDING_REQUEST_REASON
        return None

    def role_member_count(self, role: str) -> int:
        return len(self._role_index.get(role, ()))

    def can_modify_member(self, member: Member) -> ValidationResult:
        """Check whether a single member can be removed.

        Denies when the member is the sole holder of any role, listing all
        such roles.
        """
        gate = self.permission_error()
        if gate:
            return ValidationResult.denied(gate)

        critical = [role for role in member.roles if self.role_member_count(role) == 1]
        if not critical:
            return ValidationResult.allowed()

        return ValidationResult.denied(
            self._critical_reason(
                "Cannot remove this member. They are the only person "
                "assigned to the",
                critical,
            )
        )

    def can_delete_bulk(self, members: Sequence[Member]) -> ValidationResult:
        """Check whether a batch of members can be removed together.

        For every role held by someone in the batch, the surviving holders
        are the current holders minus the batch. Denies when any role would
        have no survivor.
        """
        gate = self.permission_error()
        if gate:
            return ValidationResult.denied(gate)

        removing = {m.account_id for m in members}
        touched: list[str] = []
        for member in members:
            for role in member.roles:
                if role not in touched:
                    touched.append(role)

        critical = []
        for role in touched:
            holders = self._role_index.get(role)
            if not holders:
                continue
            if not holders - removing:
                critical.append(role)

        if not critical:
            return ValidationResult.allowed()

        return ValidationResult.denied(
            self._critical_reason(
                "Cannot remove these members. This would leave the",
                critical,
                empty=True,
            )
        )

    def can_confirm_edit(self, edits: Sequence[EditMember]) -> ValidationResult:
        """Check whether a batch of role edits keeps every role staffed.

        A member not in the batch keeps their current roles; an edited
        member holds a role afterwards only if it is in their new roles.
        Every edited account must already be a member; new accounts go
        through can_add_members.
        """
        gate = self.permission_error()
        if gate:
            return ValidationResult.denied(gate)

        members = {m.account_id for m in self._members}
        for edit in edits:
            if edit.account_id not in members:
                return ValidationResult.denied(
                    NOT_A_MEMBER_REASON.format(account_id=edit.account_id)
                )

        new_roles_by_account = {e.account_id: set(e.new_roles) for e in edits}

        critical = []
        for role, holders in self._role_index.items():
            untouched = sum(1 for a in holders if a not in new_roles_by_account)
            kept = sum(1 for roles in new_roles_by_account.values() if role in roles)
            if untouched + kept == 0:
                critical.append(role)

        if not critical:
            return ValidationResult.allowed()

        return ValidationResult.denied(
            self._critical_reason(
                "Cannot save these changes. This would leave the",
                critical,
                empty=True,
            )
        )

    def can_remove_role_from_member(
        self, account_id: str, role: str
    ) -> ValidationResult:
        """Inline check for unticking a single role while editing a member."""
        gate = self.permission_error()
        if gate:
            return ValidationResult.denied(gate)

        holders = self._role_index.get(role)
        if not holders or holders != {account_id}:
            return ValidationResult.allowed()

        if is_governance_role([role], self._critical_role_keywords):
            return ValidationResult.denied(
                f"You can't remove the {role} role from this member. They are "
                f"the only {role} member, and without this role you won't be "
                f"able to manage team members or configure voting."
            )
        return ValidationResult.denied(
            f"You can't remove the {role} role from this member. They are the "
            f"only person assigned to this role."
        )

    def can_add_members(self, additions: Sequence[AddMember]) -> ValidationResult:
        """Check a batch of new members before they are added.

        Each entry needs a well-formed account id and at least one role, and
        must be neither a duplicate within the batch nor an existing member.
        Account ids are compared case-insensitively.
        """
        gate = self.permission_error()
        if gate:
            return ValidationResult.denied(gate)

        if not additions:
            return ValidationResult.denied("At least one member is required")

        existing = {m.account_id.lower() for m in self._members}
        seen: set[str] = set()

        for addition in additions:
            if not addition.account_id:
                return ValidationResult.denied("Account ID is required")

            format_error = validate_account_id_format(
                addition.account_id,
                self._account_suffixes,
                self._max_account_id_length,
            )
            if format_error:
                return ValidationResult.denied(format_error)

            if not addition.roles:
                return ValidationResult.denied("At least one role must be selected")

            normalized = addition.account_id.lower()
            if normalized in seen:
                return ValidationResult.denied(
                    "This member has already been added above"
                )
            seen.add(normalized)

            if normalized in existing:
                return ValidationResult.denied(
                    "This member already exists in the treasury"
                )

        return ValidationResult.allowed()

    def _critical_reason(
        self, prefix: str, critical: Sequence[str], empty: bool = False
    ) -> str:
        noun = "role" if len(critical) == 1 else "roles"
        verb = "is" if len(critical) == 1 else "are"
        subject = f"{prefix} {format_roles_list(critical)} {noun}"
        if empty:
            subject = f"{subject} empty"

        if is_governance_role(critical, self._critical_role_keywords):
            return f"{subject}, which {verb} {GOVERNANCE_CLAUSE}."
        return f"{subject}."
