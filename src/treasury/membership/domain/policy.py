"""Policy model for the membership domain.

A treasury policy is an ordered list of roles. Each role has a kind: either a
group of account ids, or some other variant (``"Everyone"``, token-weighted
membership, ...) that does not participate in membership management.

The policy document is owned by the treasury contract. Everything this
domain does not understand is carried in ``extra`` mappings so that a parsed
policy renders back to the same document, apart from the group arrays the
engine rewrites.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from membership.domain.exceptions import InvalidPolicyDocumentError

GROUP_KIND_KEY = "Group"
EVERYONE_KIND = "Everyone"


@dataclass(frozen=True)
class GroupKind:
    """Role kind holding an explicit set of account ids."""

    members: tuple[str, ...] = ()

    def to_document(self) -> dict[str, list[str]]:
        return {GROUP_KIND_KEY: list(self.members)}


@dataclass(frozen=True)
class OtherKind:
    """Any non-group role kind, kept verbatim."""

    raw: Any

    @property
    def is_everyone(self) -> bool:
        return self.raw == EVERYONE_KIND

    def to_document(self) -> Any:
        return copy.deepcopy(self.raw)


RoleKind = GroupKind | OtherKind


@dataclass
class Role:
    """A named role of the treasury policy.

    Attributes:
        name: Role name as shown to members (e.g. "Governance")
        kind: Group of account ids, or another kind passed through untouched
        extra: Remaining role fields (permissions, vote_policy, ...)
    """

    name: str
    kind: RoleKind
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def is_group(self) -> bool:
        return isinstance(self.kind, GroupKind)

    @property
    def permissions(self) -> list[str]:
        return list(self.extra.get("permissions") or [])

    def has_member(self, account_id: str) -> bool:
        return isinstance(self.kind, GroupKind) and account_id in self.kind.members

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> Role:
        """Parse a single role entry of a policy document.

        Raises:
            InvalidPolicyDocumentError: If the name or kind is missing, or a
                group holds something other than account id strings
        """
        if not isinstance(document, Mapping):
            raise InvalidPolicyDocumentError("Role entry must be an object")

        name = document.get("name")
        if not isinstance(name, str) or not name:
            raise InvalidPolicyDocumentError("Role entry is missing a name")
        if "kind" not in document:
            raise InvalidPolicyDocumentError(f"Role '{name}' is missing a kind")

        raw_kind = document["kind"]
        kind: RoleKind
        if isinstance(raw_kind, Mapping) and GROUP_KIND_KEY in raw_kind:
            accounts = raw_kind[GROUP_KIND_KEY] or []
            if not isinstance(accounts, list) or not all(
                isinstance(a, str) for a in accounts
            ):
                raise InvalidPolicyDocumentError(
                    f"Role '{name}' group must be a list of account ids"
                )
            kind = GroupKind(members=tuple(accounts))
        else:
            kind = OtherKind(raw=copy.deepcopy(raw_kind))

        extra = {
            key: copy.deepcopy(value)
            for key, value in document.items()
            if key not in ("name", "kind")
        }
        return cls(name=name, kind=kind, extra=extra)

    def to_document(self) -> dict[str, Any]:
        document: dict[str, Any] = {"name": self.name, "kind": self.kind.to_document()}
        document.update(copy.deepcopy(self.extra))
        return document


@dataclass
class Policy:
    """Group-based access-control policy of a treasury.

    Instances handed to the engine are treated as snapshots: mutation
    functions work on ``copy()`` and never touch the original.
    """

    roles: list[Role] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> Policy:
        """Parse the policy document returned by the treasury contract.

        Args:
            document: Raw policy, e.g. ``{"roles": [...], "proposal_bond": "0"}``

        Returns:
            Policy with typed role kinds

        Raises:
            InvalidPolicyDocumentError: If the document has no roles list or
                a role entry is malformed
        """
        if not isinstance(document, Mapping):
            raise InvalidPolicyDocumentError("Policy document must be an object")

        raw_roles = document.get("roles")
        if not isinstance(raw_roles, list):
            raise InvalidPolicyDocumentError("Policy document has no roles list")

        roles = [Role.from_document(entry) for entry in raw_roles]
        extra = {
            key: copy.deepcopy(value)
            for key, value in document.items()
            if key != "roles"
        }
        return cls(roles=roles, extra=extra)

    def to_document(self) -> dict[str, Any]:
        document: dict[str, Any] = {"roles": [r.to_document() for r in self.roles]}
        document.update(copy.deepcopy(self.extra))
        return document

    def copy(self) -> Policy:
        """Return a deep, independent copy of this policy."""
        return copy.deepcopy(self)

    def group_roles(self) -> list[Role]:
        return [role for role in self.roles if role.is_group]

    def get_role(self, name: str) -> Role | None:
        for role in self.roles:
            if role.name == name:
                return role
        return None

    @property
    def proposal_bond(self) -> str:
        """Bond attached to new proposals, "0" when the policy sets none."""
        return str(self.extra.get("proposal_bond") or "0")
