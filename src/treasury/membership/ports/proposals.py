"""Proposal collaborator protocols (ports) for the membership context.

The membership engine prepares a new policy and its description; persisting
it as a governance proposal, and listing proposals still awaiting votes, is
done by external collaborators implementing these protocols.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from membership.domain.changelog import render_description


@dataclass(frozen=True)
class ProposalDescription:
    """Title and change log summary of a membership proposal."""

    title: str
    summary: str

    def render(self) -> str:
        """Render the description text stored on the proposal."""
        return render_description(self.title, self.summary)


@dataclass(frozen=True)
class ProposalRecord:
    """A pending proposal as returned by the proposal store.

    Attributes:
        id: Proposal id assigned by the treasury contract
        proposer: Account that submitted the proposal
        description: Free-text description, holding the change log
        submission_time: Submission timestamp as reported by the store
    """

    id: int
    proposer: str
    description: str
    submission_time: str | None = None


@runtime_checkable
class ProposalSubmitter(Protocol):
    """Persists a policy change as a governance proposal."""

    async def submit_policy_change(
        self,
        updated_policy: dict[str, Any],
        description: str,
        proposal_bond: str,
    ) -> None:
        """Submit a change-policy proposal.

        Args:
            updated_policy: The complete new policy document
            description: Rendered proposal description (title and summary)
            proposal_bond: Bond required by the policy to create a proposal

        Raises:
            Exception: Any failure of the underlying transport or chain
        """
        ...


@runtime_checkable
class PendingProposalSource(Protocol):
    """Lists membership proposals that are still awaiting votes."""

    async def list_pending_membership_proposals(
        self, treasury_id: str
    ) -> list[ProposalRecord]:
        """Return pending change-policy proposals touching members.

        Args:
            treasury_id: The treasury account

        Returns:
            Proposals, newest first

        Raises:
            PendingProposalsUnavailableError: If the store cannot be reached
        """
        ...
