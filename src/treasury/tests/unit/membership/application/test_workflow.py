"""Unit tests for the membership change workflow state machine."""

import pytest

from membership.application.workflow import (
    InvalidTransitionError,
    MembershipWorkflow,
    WorkflowState,
    can_transition,
    valid_transitions,
)
from membership.domain.mutator import MutationOutcome
from membership.domain.policy import Policy
from membership.domain.value_objects import AddMember, ValidationResult
from membership.ports.exceptions import SubmissionInProgressError

REQUESTS = [AddMember("dave.near", ("Requestor",))]


@pytest.fixture
def outcome() -> MutationOutcome:
    return MutationOutcome(
        updated_policy=Policy.from_document({"roles": []}),
        summary='- add "dave.near" to ["Requestor"]',
        lines=('- add "dave.near" to ["Requestor"]',),
    )


@pytest.fixture
def previewing(outcome) -> MembershipWorkflow:
    """Workflow holding a validated, previewed draft."""
    workflow = MembershipWorkflow()
    workflow.compose(REQUESTS)
    workflow.start_validation()
    workflow.record_validation(ValidationResult.allowed())
    workflow.preview(outcome)
    return workflow


class TestTransitionTable:
    def test_happy_path_transitions_allowed(self):
        path = [
            WorkflowState.IDLE,
            WorkflowState.COMPOSING,
            WorkflowState.VALIDATING,
            WorkflowState.PREVIEWING,
            WorkflowState.SUBMITTING,
            WorkflowState.DONE,
        ]

        for from_state, to_state in zip(path, path[1:]):
            assert can_transition(from_state, to_state)

    def test_cannot_skip_validation(self):
        assert not can_transition(WorkflowState.COMPOSING, WorkflowState.PREVIEWING)
        assert not can_transition(WorkflowState.COMPOSING, WorkflowState.SUBMITTING)

    def test_submission_ends_in_done_or_error(self):
        assert valid_transitions(WorkflowState.SUBMITTING) == [
            WorkflowState.DONE,
            WorkflowState.ERROR,
        ]

    def test_error_allows_resubmission(self):
        assert can_transition(WorkflowState.ERROR, WorkflowState.SUBMITTING)


class TestMembershipWorkflow:
    """Tests for driving a draft through the workflow."""

    def test_starts_idle(self):
        workflow = MembershipWorkflow()

        assert workflow.state == WorkflowState.IDLE
        assert workflow.draft is None
        assert workflow.requests == ()

    def test_compose_stores_requests(self):
        workflow = MembershipWorkflow()

        workflow.compose(REQUESTS)

        assert workflow.state == WorkflowState.COMPOSING
        assert workflow.requests == tuple(REQUESTS)

    def test_denied_validation_returns_to_composing(self):
        workflow = MembershipWorkflow()
        workflow.compose(REQUESTS)
        workflow.start_validation()

        accepted = workflow.record_validation(
            ValidationResult.denied("At least one role must be selected")
        )

        assert accepted is False
        assert workflow.state == WorkflowState.COMPOSING
        assert workflow.rejection == "At least one role must be selected"

    def test_accepted_validation_waits_for_preview(self, outcome):
        workflow = MembershipWorkflow()
        workflow.compose(REQUESTS)
        workflow.start_validation()

        assert workflow.record_validation(ValidationResult.allowed()) is True
        assert workflow.state == WorkflowState.VALIDATING

        workflow.preview(outcome)

        assert workflow.state == WorkflowState.PREVIEWING
        assert workflow.draft is outcome

    def test_record_validation_outside_validating(self):
        workflow = MembershipWorkflow()

        with pytest.raises(InvalidTransitionError):
            workflow.record_validation(ValidationResult.allowed())

    def test_begin_submission_returns_draft(self, previewing, outcome):
        draft = previewing.begin_submission()

        assert draft is outcome
        assert previewing.is_submitting

    def test_second_submission_rejected_while_in_flight(self, previewing):
        previewing.begin_submission()

        with pytest.raises(SubmissionInProgressError):
            previewing.begin_submission()

    def test_cannot_submit_without_draft(self):
        workflow = MembershipWorkflow()
        workflow.compose(REQUESTS)

        with pytest.raises(InvalidTransitionError) as exc_info:
            workflow.begin_submission()

        assert exc_info.value.from_state == WorkflowState.COMPOSING
        assert exc_info.value.to_state == WorkflowState.SUBMITTING
        assert workflow.state == WorkflowState.COMPOSING

    def test_complete(self, previewing):
        previewing.begin_submission()

        previewing.complete()

        assert previewing.state == WorkflowState.DONE

    def test_failure_keeps_draft_for_resubmission(self, previewing, outcome):
        previewing.begin_submission()
        error = RuntimeError("rpc timeout")

        previewing.fail(error)

        assert previewing.state == WorkflowState.ERROR
        assert previewing.error is error
        assert previewing.begin_submission() is outcome
        assert previewing.error is None

    def test_recompose_discards_draft(self, previewing):
        previewing.compose([AddMember("erin.near", ("Financial",))])

        assert previewing.state == WorkflowState.COMPOSING
        assert previewing.draft is None

    def test_reset(self, previewing):
        previewing.reset()

        assert previewing.state == WorkflowState.IDLE
        assert previewing.draft is None
        assert previewing.requests == ()

    def test_reset_from_idle_is_allowed(self):
        workflow = MembershipWorkflow()

        workflow.reset()

        assert workflow.state == WorkflowState.IDLE

    def test_cannot_reset_while_submitting(self, previewing):
        previewing.begin_submission()

        with pytest.raises(InvalidTransitionError):
            previewing.reset()

    def test_invalid_transition_message(self):
        error = InvalidTransitionError(WorkflowState.IDLE, WorkflowState.DONE)

        assert str(error) == "Invalid transition: idle -> done"
