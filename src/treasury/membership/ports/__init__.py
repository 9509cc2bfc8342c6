"""Ports (interfaces) for the membership bounded context.

Ports define the contracts for the external proposal collaborators without
specifying implementation details.
"""

from membership.ports.exceptions import (
    MutationRejectedError,
    PendingProposalsUnavailableError,
    ProposalSubmissionError,
    SubmissionInProgressError,
)
from membership.ports.proposals import (
    PendingProposalSource,
    ProposalDescription,
    ProposalRecord,
    ProposalSubmitter,
)

__all__ = [
    "MutationRejectedError",
    "PendingProposalSource",
    "PendingProposalsUnavailableError",
    "ProposalDescription",
    "ProposalRecord",
    "ProposalSubmissionError",
    "ProposalSubmitter",
    "SubmissionInProgressError",
]
