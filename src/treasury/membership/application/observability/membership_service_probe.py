"""Protocol for membership application service observability.

Defines the interface for domain probes that capture application-level
domain events for membership change proposals.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from infrastructure.observability import ObservationContext


class MembershipServiceProbe(Protocol):
    """Domain probe for membership application service operations."""

    def membership_change_rejected(
        self,
        operation: str,
        account_ids: list[str],
        reason: str,
    ) -> None:
        """Record that a membership change failed validation."""
        ...

    def membership_proposal_submitted(
        self,
        title: str,
        account_ids: list[str],
        summary_lines: int,
    ) -> None:
        """Record that a membership proposal was handed to the collaborator."""
        ...

    def proposal_submission_failed(
        self,
        title: str,
        error: str,
    ) -> None:
        """Record that the proposal collaborator failed."""
        ...

    def pending_proposals_loaded(
        self,
        treasury_id: str,
        proposal_count: int,
        change_count: int,
    ) -> None:
        """Record that pending membership proposals were decoded."""
        ...

    def pending_proposals_load_failed(
        self,
        treasury_id: str,
        error: str,
    ) -> None:
        """Record that pending membership proposals could not be fetched."""
        ...

    def with_context(self, context: ObservationContext) -> MembershipServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultMembershipServiceProbe:
    """Default implementation of MembershipServiceProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(
        self, context: ObservationContext
    ) -> DefaultMembershipServiceProbe:
        """Create a new probe with observation context bound."""
        return DefaultMembershipServiceProbe(logger=self._logger, context=context)

    def membership_change_rejected(
        self,
        operation: str,
        account_ids: list[str],
        reason: str,
    ) -> None:
        """Record that a membership change failed validation."""
        self._logger.info(
            "membership_change_rejected",
            operation=operation,
            account_ids=account_ids,
            reason=reason,
            **self._get_context_kwargs(),
        )

    def membership_proposal_submitted(
        self,
        title: str,
        account_ids: list[str],
        summary_lines: int,
    ) -> None:
        """Record that a membership proposal was handed to the collaborator."""
        self._logger.info(
            "membership_proposal_submitted",
            title=title,
            account_ids=account_ids,
            summary_lines=summary_lines,
            **self._get_context_kwargs(),
        )

    def proposal_submission_failed(
        self,
        title: str,
        error: str,
    ) -> None:
        """Record that the proposal collaborator failed."""
        self._logger.error(
            "proposal_submission_failed",
            title=title,
            error=error,
            **self._get_context_kwargs(),
        )

    def pending_proposals_loaded(
        self,
        treasury_id: str,
        proposal_count: int,
        change_count: int,
    ) -> None:
        """Record that pending membership proposals were decoded."""
        self._logger.debug(
            "pending_proposals_loaded",
            treasury_id=treasury_id,
            proposal_count=proposal_count,
            change_count=change_count,
            **self._get_context_kwargs(),
        )

    def pending_proposals_load_failed(
        self,
        treasury_id: str,
        error: str,
    ) -> None:
        """Record that pending membership proposals could not be fetched."""
        self._logger.error(
            "pending_proposals_load_failed",
            treasury_id=treasury_id,
            error=error,
            **self._get_context_kwargs(),
        )
