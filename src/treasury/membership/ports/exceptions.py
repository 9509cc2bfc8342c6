"""Exceptions raised across the membership ports.

Validation denials are values (ValidationResult), not exceptions; the
exceptions below cover a caller that submits anyway, and failures of the
external proposal collaborators.
"""


class MutationRejectedError(Exception):
    """Raised when a change that failed validation is prepared for submission.

    Carries the human-readable reason produced by the validator so the
    caller can show it unchanged.
    """

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class ProposalSubmissionError(Exception):
    """Raised when the proposal collaborator fails to persist a policy change.

    The original collaborator error is chained as ``__cause__``. Submissions
    are never retried automatically; the prepared change is kept so that
    the user can resubmit it.
    """

    pass


class SubmissionInProgressError(Exception):
    """Raised when a submission is started while another one is in flight."""

    pass


class PendingProposalsUnavailableError(Exception):
    """Raised when pending membership proposals cannot be fetched."""

    pass
