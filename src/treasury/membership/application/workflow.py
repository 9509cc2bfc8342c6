"""State machine for drafting a membership change proposal.

A membership change moves through a fixed sequence: the request is composed,
validated, previewed as a new policy plus change log, then submitted. Valid
transitions are defined here, independent of any view layer.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import StrEnum

from membership.domain.mutator import MutationOutcome
from membership.domain.value_objects import MutationRequest, ValidationResult
from membership.ports.exceptions import SubmissionInProgressError


class WorkflowState(StrEnum):
    """States of a membership change draft."""

    IDLE = "idle"
    COMPOSING = "composing"
    VALIDATING = "validating"
    PREVIEWING = "previewing"
    SUBMITTING = "submitting"
    DONE = "done"
    ERROR = "error"


# Valid transitions: from_state -> allowed target states
_TRANSITIONS: dict[WorkflowState, frozenset[WorkflowState]] = {
    WorkflowState.IDLE: frozenset({WorkflowState.COMPOSING}),
    WorkflowState.COMPOSING: frozenset(
        {WorkflowState.COMPOSING, WorkflowState.VALIDATING, WorkflowState.IDLE}
    ),
    WorkflowState.VALIDATING: frozenset(
        {WorkflowState.PREVIEWING, WorkflowState.COMPOSING}
    ),
    WorkflowState.PREVIEWING: frozenset(
        {WorkflowState.SUBMITTING, WorkflowState.COMPOSING, WorkflowState.IDLE}
    ),
    WorkflowState.SUBMITTING: frozenset({WorkflowState.DONE, WorkflowState.ERROR}),
    WorkflowState.DONE: frozenset({WorkflowState.IDLE, WorkflowState.COMPOSING}),
    # A failed submission keeps the draft so it can be resubmitted or edited
    WorkflowState.ERROR: frozenset(
        {WorkflowState.SUBMITTING, WorkflowState.COMPOSING, WorkflowState.IDLE}
    ),
}


class InvalidTransitionError(Exception):
    """Raised when a workflow transition is not allowed from the current state."""

    def __init__(self, from_state: WorkflowState, to_state: WorkflowState) -> None:
        super().__init__(f"Invalid transition: {from_state} -> {to_state}")
        self.from_state = from_state
        self.to_state = to_state


def can_transition(from_state: WorkflowState, to_state: WorkflowState) -> bool:
    return to_state in _TRANSITIONS.get(from_state, frozenset())


def valid_transitions(from_state: WorkflowState) -> list[WorkflowState]:
    """Return the states reachable from ``from_state``, sorted by name."""
    return sorted(_TRANSITIONS.get(from_state, frozenset()))


class MembershipWorkflow:
    """Tracks one membership change draft from composition to submission.

    One workflow belongs to one control that submits proposals. At most one
    submission is in flight at a time; there is no cancellation and no
    automatic retry.
    """

    def __init__(self) -> None:
        self._state = WorkflowState.IDLE
        self._requests: tuple[MutationRequest, ...] = ()
        self._rejection: str | None = None
        self._draft: MutationOutcome | None = None
        self._error: Exception | None = None

    @property
    def state(self) -> WorkflowState:
        return self._state

    @property
    def requests(self) -> tuple[MutationRequest, ...]:
        return self._requests

    @property
    def rejection(self) -> str | None:
        """Reason the last validation failed, if it did."""
        return self._rejection

    @property
    def draft(self) -> MutationOutcome | None:
        return self._draft

    @property
    def error(self) -> Exception | None:
        return self._error

    @property
    def is_submitting(self) -> bool:
        return self._state == WorkflowState.SUBMITTING

    def compose(self, requests: Sequence[MutationRequest]) -> None:
        """Start (or restart) a draft with the given requests."""
        self._transition(WorkflowState.COMPOSING)
        self._requests = tuple(requests)
        self._rejection = None
        self._draft = None
        self._error = None

    def start_validation(self) -> None:
        self._transition(WorkflowState.VALIDATING)

    def record_validation(self, result: ValidationResult) -> bool:
        """Record the validator's answer.

        A denial sends the draft back to composing with the reason kept;
        an approval waits in VALIDATING for the preview.

        Returns:
            Whether the requests were accepted
        """
        if self._state != WorkflowState.VALIDATING:
            raise InvalidTransitionError(self._state, WorkflowState.PREVIEWING)
        if not result.can_modify:
            self._rejection = result.reason
            self._transition(WorkflowState.COMPOSING)
            return False
        self._rejection = None
        return True

    def preview(self, outcome: MutationOutcome) -> None:
        self._transition(WorkflowState.PREVIEWING)
        self._draft = outcome

    def begin_submission(self) -> MutationOutcome:
        """Enter SUBMITTING and return the draft being submitted.

        Raises:
            SubmissionInProgressError: If a submission is already in flight
            InvalidTransitionError: If there is no previewed draft
        """
        if self._state == WorkflowState.SUBMITTING:
            raise SubmissionInProgressError("A submission is already in progress")
        if self._draft is None:
            raise InvalidTransitionError(self._state, WorkflowState.SUBMITTING)
        self._transition(WorkflowState.SUBMITTING)
        self._error = None
        return self._draft

    def complete(self) -> None:
        self._transition(WorkflowState.DONE)

    def fail(self, error: Exception) -> None:
        self._transition(WorkflowState.ERROR)
        self._error = error

    def reset(self) -> None:
        """Discard the draft and return to IDLE."""
        if self._state != WorkflowState.IDLE:
            self._transition(WorkflowState.IDLE)
        self._requests = ()
        self._rejection = None
        self._draft = None
        self._error = None

    def _transition(self, to_state: WorkflowState) -> None:
        if not can_transition(self._state, to_state):
            raise InvalidTransitionError(self._state, to_state)
        self._state = to_state
