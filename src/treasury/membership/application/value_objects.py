"""Application-layer value objects for the membership bounded context.

Read-only view objects handed to callers rendering membership pages.
"""

from __future__ import annotations

from dataclasses import dataclass

from membership.domain.value_objects import PendingChange


@dataclass(frozen=True)
class PendingProposal:
    """Membership changes carried by one proposal awaiting votes.

    Attributes:
        proposal_id: Proposal id assigned by the treasury contract
        proposer: Account that submitted the proposal
        submission_time: Submission timestamp as reported by the store
        changes: Per-account role changes decoded from the description
    """

    proposal_id: int
    proposer: str
    submission_time: str | None
    changes: tuple[PendingChange, ...]

    @property
    def account_ids(self) -> list[str]:
        return [change.account_id for change in self.changes]
