"""Membership application service.

Orchestrates validation, policy mutation and proposal submission for
membership changes of one treasury, following the draft workflow.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from infrastructure.settings import MembershipSettings, get_settings
from membership.application.observability import (
    DefaultMembershipServiceProbe,
    MembershipServiceProbe,
)
from membership.application.workflow import MembershipWorkflow
from membership.domain.mutator import MutationOutcome, apply_role_changes, remove_members
from membership.domain.observability import MembershipProbe
from membership.domain.permissions import has_permission
from membership.domain.policy import Policy
from membership.domain.policy_view import assignable_roles, derive_members, find_member
from membership.domain.validator import NOT_A_MEMBER_REASON, MembershipValidator
from membership.domain.value_objects import (
    ActorContext,
    AddMember,
    EditMember,
    Member,
    MutationRequest,
    RemoveMember,
    ValidationResult,
)
from membership.ports.exceptions import MutationRejectedError, ProposalSubmissionError
from membership.ports.proposals import ProposalDescription, ProposalSubmitter

ADD_MEMBERS_TITLE = "Update Policy - Add New Members"
EDIT_MEMBER_TITLE = "Update Policy - Edit Member Permissions"
EDIT_MEMBERS_TITLE = "Update Policy - Edit Multiple Members"
REMOVE_MEMBER_TITLE = "Update Policy - Remove Member"


def proposal_title(requests: Sequence[MutationRequest]) -> str:
    """Default proposal title for a batch of requests of one kind."""
    if not requests or isinstance(requests[0], AddMember):
        return ADD_MEMBERS_TITLE
    if isinstance(requests[0], EditMember):
        return EDIT_MEMBER_TITLE if len(requests) == 1 else EDIT_MEMBERS_TITLE
    return REMOVE_MEMBER_TITLE + ("s" if len(requests) > 1 else "")


class MembershipService:
    """Application service for membership change proposals.

    Works on one policy snapshot on behalf of one actor. The snapshot is
    never modified: every prepared change carries its own copy of the new
    policy. One service instance owns one draft workflow, so at most one
    submission is in flight per instance.
    """

    def __init__(
        self,
        policy: Policy,
        actor_account_id: str | None,
        submitter: ProposalSubmitter,
        has_pending_request: bool = False,
        settings: MembershipSettings | None = None,
        probe: MembershipServiceProbe | None = None,
        membership_probe: MembershipProbe | None = None,
        workflow: MembershipWorkflow | None = None,
    ):
        """Initialize MembershipService with dependencies.

        Args:
            policy: Current policy of the treasury
            actor_account_id: Connected account, or None without a wallet
            submitter: Collaborator persisting policy change proposals
            has_pending_request: Whether a membership proposal is already pending
            settings: Membership settings (defaults to environment settings)
            probe: Optional application probe for observability
            membership_probe: Optional domain probe passed to policy mutations
            workflow: Draft workflow (a fresh one by default)
        """
        self._policy = policy
        self._submitter = submitter
        self._settings = settings or get_settings()
        self._probe = probe or DefaultMembershipServiceProbe()
        self._membership_probe = membership_probe
        self._workflow = workflow or MembershipWorkflow()
        self._actor = ActorContext(
            account_id=actor_account_id,
            can_manage_members=has_permission(policy, actor_account_id),
            has_pending_request=has_pending_request,
        )
        self._title: str | None = None

    @property
    def actor(self) -> ActorContext:
        return self._actor

    @property
    def workflow(self) -> MembershipWorkflow:
        return self._workflow

    def members(self) -> list[Member]:
        """Current members, recomputed from the policy snapshot."""
        return derive_members(self._policy)

    def assignable_roles(self) -> list[str]:
        return assignable_roles(self._policy, self._settings.excluded_role_names)

    def validator(self) -> MembershipValidator:
        return MembershipValidator(
            self.members(),
            self._actor,
            critical_role_keywords=self._settings.critical_role_keywords,
            account_suffixes=self._settings.account_suffixes,
            max_account_id_length=self._settings.max_account_id_length,
        )

    def prepare(self, requests: Sequence[MutationRequest]) -> MutationOutcome:
        """Validate and apply a batch of requests of one kind.

        A single change is a batch of one.

        Raises:
            ValueError: If the batch is empty or mixes request kinds
            MutationRejectedError: If the batch fails validation
        """
        if not requests:
            raise ValueError("At least one membership change is required")
        kinds = {type(request) for request in requests}
        if len(kinds) > 1:
            raise ValueError("A membership proposal cannot mix request kinds")

        first = requests[0]
        if isinstance(first, AddMember):
            return self.prepare_additions(requests)  # type: ignore[arg-type]
        if isinstance(first, EditMember):
            return self.prepare_edits(requests)  # type: ignore[arg-type]
        return self.prepare_removals([r.account_id for r in requests])

    def prepare_additions(self, additions: Sequence[AddMember]) -> MutationOutcome:
        """Validate and apply new members.

        Raises:
            MutationRejectedError: If the additions fail validation
        """
        return self._prepare(
            "add",
            additions,
            self.validator().can_add_members(additions),
            lambda: apply_role_changes(
                self._policy, additions, is_edit=False, probe=self._membership_probe
            ),
        )

    def prepare_edits(self, edits: Sequence[EditMember]) -> MutationOutcome:
        """Validate and apply role edits for existing members.

        Raises:
            MutationRejectedError: If an edited account is not a member, or
                an edit would leave a role empty
        """
        return self._prepare(
            "edit",
            edits,
            self.validator().can_confirm_edit(edits),
            lambda: apply_role_changes(
                self._policy, edits, is_edit=True, probe=self._membership_probe
            ),
        )

    def prepare_removals(self, account_ids: Sequence[str]) -> MutationOutcome:
        """Validate and apply the removal of existing members.

        A single account is checked with the single-member rule, several
        accounts with the bulk rule; both reject removals that would leave a
        role without holders.

        Raises:
            MutationRejectedError: If an account is not a member, or the
                removal would leave a role empty
        """
        validator = self.validator()
        members = validator.members
        targets: list[Member] = []
        unknown: list[str] = []
        for account_id in account_ids:
            member = find_member(members, account_id)
            if member is None:
                unknown.append(account_id)
                member = Member(account_id=account_id, roles=())
            targets.append(member)

        removals = [RemoveMember(account_id=m.account_id, roles=m.roles) for m in targets]
        gate = validator.permission_error()
        if gate:
            result = ValidationResult.denied(gate)
        elif unknown:
            result = ValidationResult.denied(
                NOT_A_MEMBER_REASON.format(account_id=unknown[0])
            )
        elif len(targets) == 1:
            result = validator.can_modify_member(targets[0])
        else:
            result = validator.can_delete_bulk(targets)

        return self._prepare(
            "remove",
            removals,
            result,
            lambda: remove_members(self._policy, removals, probe=self._membership_probe),
        )

    async def submit(self, title: str | None = None) -> MutationOutcome:
        """Submit the previewed change as a policy change proposal.

        Args:
            title: Proposal title; defaults to a title matching the requests

        Returns:
            The submitted outcome

        Raises:
            SubmissionInProgressError: If a submission is already in flight
            InvalidTransitionError: If no change has been prepared
            ProposalSubmissionError: If the collaborator fails; the draft is
                kept so it can be resubmitted
        """
        outcome = self._workflow.begin_submission()
        title = title or self._title or proposal_title(self._workflow.requests)
        description = ProposalDescription(title=title, summary=outcome.summary)

        try:
            await self._submitter.submit_policy_change(
                updated_policy=outcome.updated_policy.to_document(),
                description=description.render(),
                proposal_bond=self._policy.proposal_bond,
            )
        except Exception as e:
            self._workflow.fail(e)
            self._probe.proposal_submission_failed(title=title, error=str(e))
            raise ProposalSubmissionError(f"Failed to create proposal: {e}") from e

        self._workflow.complete()
        self._probe.membership_proposal_submitted(
            title=title,
            account_ids=[r.account_id for r in self._workflow.requests],
            summary_lines=len(outcome.lines),
        )
        return outcome

    def _prepare(
        self,
        operation: str,
        requests: Sequence[MutationRequest],
        result: ValidationResult,
        build: Callable[[], MutationOutcome],
    ) -> MutationOutcome:
        self._workflow.compose(requests)
        self._workflow.start_validation()
        if not self._workflow.record_validation(result):
            reason = result.reason or "Membership change rejected"
            self._probe.membership_change_rejected(
                operation=operation,
                account_ids=[r.account_id for r in requests],
                reason=reason,
            )
            raise MutationRejectedError(reason)

        outcome = build()
        self._workflow.preview(outcome)
        self._title = proposal_title(requests)
        return outcome
