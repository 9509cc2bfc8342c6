"""Value objects for the membership domain.

Value objects are immutable descriptors for members, membership change
requests and validation outcomes. None of them is persisted: members are
derived from the live policy and requests live only until they are applied
or rejected.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Member:
    """A treasury member derived from the policy.

    Attributes:
        account_id: The member's account id
        roles: Names of every group role holding the account, in policy order
    """

    account_id: str
    roles: tuple[str, ...]

    def has_role(self, role: str) -> bool:
        return role in self.roles


@dataclass(frozen=True)
class AddMember:
    """Request to add an account that is not yet a member."""

    account_id: str
    roles: tuple[str, ...]


@dataclass(frozen=True)
class EditMember:
    """Request to change the role set of an existing member.

    Attributes:
        account_id: The member being edited
        old_roles: Roles the member held when the edit was composed
        new_roles: Complete role set the member should end up with
    """

    account_id: str
    old_roles: tuple[str, ...]
    new_roles: tuple[str, ...]


@dataclass(frozen=True)
class RemoveMember:
    """Request to drop an existing member from every role.

    Attributes:
        account_id: The member being removed
        roles: Roles held at the time of removal, used for the change log
    """

    account_id: str
    roles: tuple[str, ...]


MutationRequest = AddMember | EditMember | RemoveMember


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a membership validation check.

    A denial is a value, not an exception: callers show ``reason`` next to
    the disabled action and the user has to change the request.
    """

    can_modify: bool
    reason: str | None = None

    @classmethod
    def allowed(cls) -> ValidationResult:
        return cls(can_modify=True)

    @classmethod
    def denied(cls, reason: str) -> ValidationResult:
        return cls(can_modify=False, reason=reason)


@dataclass(frozen=True)
class ActorContext:
    """Who is asking to change membership, and in what situation.

    Attributes:
        account_id: Connected account, or None when no wallet is connected
        can_manage_members: Whether the account may create policy proposals
        has_pending_request: Whether a membership proposal is already pending
    """

    account_id: str | None = None
    can_manage_members: bool = False
    has_pending_request: bool = False


@dataclass(frozen=True)
class PendingChange:
    """Per-account role change recovered from a proposal description."""

    account_id: str
    added_roles: tuple[str, ...] = ()
    removed_roles: tuple[str, ...] = ()
