"""Observation context for domain-oriented observability.

Carries the metadata that membership probes attach to every event so that
the steps of one membership change (validation, submission, later listing
of the pending proposal) can be correlated in the logs.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

_LOGGED_FIELDS = ("request_id", "account_id", "treasury_id", "proposal_id")


@dataclass(frozen=True)
class ObservationContext:
    """Immutable metadata bound to a probe.

    Attributes:
        request_id: Identifier of the current operation.
        account_id: Connected account performing the operation (if any).
        treasury_id: Treasury whose policy is being changed (if applicable).
        proposal_id: Proposal being submitted or inspected (if known).
        extra: Additional contextual metadata.

    Example:
        context = ObservationContext(
            request_id="req-123",
            account_id="alice.near",
            treasury_id="team.sputnik-dao.near",
        )
        probe = DefaultMembershipServiceProbe().with_context(context)
    """

    request_id: str | None = None
    account_id: str | None = None
    treasury_id: str | None = None
    proposal_id: int | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        """Convert context to logging kwargs, leaving out unset fields."""
        result: dict[str, Any] = {}
        for name in _LOGGED_FIELDS:
            value = getattr(self, name)
            if value is not None:
                result[name] = value
        result.update(self.extra)
        return result

    def with_treasury(self, treasury_id: str) -> ObservationContext:
        return replace(self, treasury_id=treasury_id)

    def with_proposal(self, proposal_id: int) -> ObservationContext:
        return replace(self, proposal_id=proposal_id)

    def with_extra(self, **kwargs: Any) -> ObservationContext:
        """Create a new context with additional metadata."""
        return replace(self, extra={**self.extra, **kwargs})
