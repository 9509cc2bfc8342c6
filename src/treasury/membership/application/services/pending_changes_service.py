"""Pending membership changes service.

Lists membership proposals awaiting votes and decodes the change log in
their descriptions for display.
"""

from __future__ import annotations

from membership.application.observability import (
    DefaultMembershipServiceProbe,
    MembershipServiceProbe,
)
from membership.application.value_objects import PendingProposal
from membership.domain.changelog import decode
from membership.ports.exceptions import PendingProposalsUnavailableError
from membership.ports.proposals import PendingProposalSource, ProposalRecord


def decode_pending_proposal(record: ProposalRecord) -> PendingProposal:
    """Decode the change log of one pending proposal."""
    return PendingProposal(
        proposal_id=record.id,
        proposer=record.proposer,
        submission_time=record.submission_time,
        changes=tuple(decode(record.description)),
    )


class PendingChangesService:
    """Application service for pending membership proposals."""

    def __init__(
        self,
        source: PendingProposalSource,
        probe: MembershipServiceProbe | None = None,
    ):
        self._source = source
        self._probe = probe or DefaultMembershipServiceProbe()

    async def list_pending(self, treasury_id: str) -> list[PendingProposal]:
        """Fetch and decode pending membership proposals.

        Args:
            treasury_id: The treasury account

        Returns:
            Pending proposals in the order returned by the source

        Raises:
            PendingProposalsUnavailableError: If the source cannot be reached
        """
        records = await self._fetch(treasury_id)
        proposals = [decode_pending_proposal(record) for record in records]
        self._probe.pending_proposals_loaded(
            treasury_id=treasury_id,
            proposal_count=len(proposals),
            change_count=sum(len(p.changes) for p in proposals),
        )
        return proposals

    async def has_pending_request(self, treasury_id: str) -> bool:
        """Whether any membership proposal is awaiting votes.

        Raises:
            PendingProposalsUnavailableError: If the source cannot be reached
        """
        records = await self._fetch(treasury_id)
        return len(records) > 0

    async def _fetch(self, treasury_id: str) -> list[ProposalRecord]:
        try:
            return await self._source.list_pending_membership_proposals(treasury_id)
        except PendingProposalsUnavailableError as e:
            self._probe.pending_proposals_load_failed(
                treasury_id=treasury_id, error=str(e)
            )
            raise
