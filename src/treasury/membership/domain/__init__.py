"""Membership domain: policy model, member views, validation and mutations.

The domain layer is pure: it holds no I/O and depends only on structlog for
its observability probes.
"""

from membership.domain.mutator import MutationOutcome, apply_role_changes, remove_members
from membership.domain.policy import GroupKind, OtherKind, Policy, Role, RoleKind
from membership.domain.policy_view import build_role_index, derive_members
from membership.domain.validator import MembershipValidator, format_roles_list
from membership.domain.value_objects import (
    ActorContext,
    AddMember,
    EditMember,
    Member,
    MutationRequest,
    PendingChange,
    RemoveMember,
    ValidationResult,
)

__all__ = [
    "ActorContext",
    "AddMember",
    "EditMember",
    "GroupKind",
    "Member",
    "MembershipValidator",
    "MutationOutcome",
    "MutationRequest",
    "OtherKind",
    "PendingChange",
    "Policy",
    "RemoveMember",
    "Role",
    "RoleKind",
    "ValidationResult",
    "apply_role_changes",
    "build_role_index",
    "derive_members",
    "format_roles_list",
    "remove_members",
]
