"""Unit tests for MembershipValidator.

Every accepted change must leave each group role with at least one holder.
"""

import pytest

from membership.domain.policy import Policy
from membership.domain.validator import (
    CONNECT_WALLET_REASON,
    NO_PERMISSION_REASON,
    PENDING_REQUEST_REASON,
    MembershipValidator,
    format_roles_list,
    is_governance_role,
)
from membership.domain.value_objects import (
    ActorContext,
    AddMember,
    EditMember,
    Member,
)


@pytest.fixture
def validator(policy, governor) -> MembershipValidator:
    return MembershipValidator.from_policy(policy, governor)


def member(account_id: str, *roles: str) -> Member:
    return Member(account_id=account_id, roles=roles)


class TestFormatRolesList:
    """Tests for role list formatting in messages."""

    def test_single_role(self):
        assert format_roles_list(["Governance"]) == "Governance"

    def test_two_roles(self):
        assert format_roles_list(["Governance", "Financial"]) == "Governance and Financial"

    def test_three_roles_use_oxford_comma(self):
        assert (
            format_roles_list(["Governance", "Financial", "Requestor"])
            == "Governance, Financial, and Requestor"
        )

    def test_empty(self):
        assert format_roles_list([]) == ""


class TestIsGovernanceRole:
    def test_matches_keywords_ignoring_case(self):
        assert is_governance_role(["Governance"])
        assert is_governance_role(["Requestor", "Super Admin"])

    def test_other_roles(self):
        assert not is_governance_role(["Financial", "Requestor"])

    def test_custom_keywords(self):
        assert is_governance_role(["Council"], keywords=("council",))


class TestPermissionGate:
    """The gate is evaluated before any membership rule."""

    def test_no_connected_account(self, policy):
        validator = MembershipValidator.from_policy(policy, ActorContext())

        result = validator.can_modify_member(member("bob.near", "Financial"))

        assert not result.can_modify
        assert result.reason == CONNECT_WALLET_REASON

    def test_actor_without_permission(self, policy):
        actor = ActorContext(account_id="carol.near", can_manage_members=False)
        validator = MembershipValidator.from_policy(policy, actor)

        result = validator.can_delete_bulk([member("bob.near", "Financial")])

        assert result.reason == NO_PERMISSION_REASON

    def test_pending_request(self, policy):
        actor = ActorContext(
            account_id="alice.near", can_manage_members=True, has_pending_request=True
        )
        validator = MembershipValidator.from_policy(policy, actor)

        result = validator.can_add_members([AddMember("dave.near", ("Requestor",))])

        assert result.reason == PENDING_REQUEST_REASON

    def test_gate_wins_over_invariant_violation(self, policy):
        """A sole-holder removal by an unconnected actor reports the wallet first."""
        validator = MembershipValidator.from_policy(policy, ActorContext())

        result = validator.can_modify_member(member("alice.near", "Governance"))

        assert result.reason == CONNECT_WALLET_REASON

    @pytest.mark.parametrize(
        "check",
        [
            lambda v: v.can_modify_member(member("bob.near", "Financial")),
            lambda v: v.can_delete_bulk([member("bob.near", "Financial")]),
            lambda v: v.can_confirm_edit([EditMember("bob.near", ("Financial",), ())]),
            lambda v: v.can_remove_role_from_member("bob.near", "Financial"),
            lambda v: v.can_add_members([AddMember("dave.near", ("Requestor",))]),
        ],
    )
    def test_gate_applies_to_every_check(self, policy, check):
        validator = MembershipValidator.from_policy(policy, ActorContext())

        assert check(validator).reason == CONNECT_WALLET_REASON

    def test_permission_error_none_for_allowed_actor(self, validator):
        assert validator.permission_error() is None


class TestCanModifyMember:
    """Tests for removing a single member."""

    def test_sole_governance_holder_blocked(self, validator):
        """Deleting the only Governance holder should be denied."""
        result = validator.can_modify_member(member("alice.near", "Governance", "Requestor"))

        assert not result.can_modify
        assert result.reason == (
            "Cannot remove this member. They are the only person assigned to the "
            "Governance role, which is required to manage team members and "
            "configure voting."
        )

    def test_member_sharing_all_roles_allowed(self, validator):
        result = validator.can_modify_member(member("bob.near", "Financial"))

        assert result.can_modify
        assert result.reason is None

    def test_non_governance_sole_role(self):
        members = [member("bob.near", "Financial"), member("carol.near", "Requestor")]
        validator = MembershipValidator(
            members, ActorContext(account_id="bob.near", can_manage_members=True)
        )

        result = validator.can_modify_member(members[0])

        assert result.reason == (
            "Cannot remove this member. They are the only person assigned to the "
            "Financial role."
        )

    def test_lists_every_sole_role(self):
        members = [
            member("alice.near", "Governance", "Financial", "Requestor"),
            member("bob.near", "Requestor"),
        ]
        validator = MembershipValidator(
            members, ActorContext(account_id="bob.near", can_manage_members=True)
        )

        result = validator.can_modify_member(members[0])

        assert result.reason == (
            "Cannot remove this member. They are the only person assigned to the "
            "Governance and Financial roles, which are required to manage team "
            "members and configure voting."
        )


class TestCanDeleteBulk:
    """Tests for removing several members at once."""

    def test_bulk_delete_keeping_a_holder_allowed(self, validator):
        """Financial keeps carol.near when only bob.near is removed."""
        result = validator.can_delete_bulk([member("bob.near", "Financial")])

        assert result.can_modify

    def test_bulk_delete_emptying_role_blocked(self, validator):
        """Removing both Financial holders should be denied naming Financial."""
        result = validator.can_delete_bulk(
            [
                member("bob.near", "Financial"),
                member("carol.near", "Financial", "Requestor"),
            ]
        )

        assert not result.can_modify
        assert result.reason == (
            "Cannot remove these members. This would leave the Financial role empty."
        )

    def test_lists_all_emptied_roles(self, validator):
        """Every emptied role is named, not only the first."""
        result = validator.can_delete_bulk(
            [
                member("alice.near", "Governance", "Requestor"),
                member("bob.near", "Financial"),
                member("carol.near", "Financial", "Requestor"),
            ]
        )

        assert result.reason == (
            "Cannot remove these members. This would leave the Governance, "
            "Requestor, and Financial roles empty, which are required to manage "
            "team members and configure voting."
        )

    def test_unknown_role_ignored(self, validator):
        result = validator.can_delete_bulk([member("bob.near", "Financial", "Council")])

        assert result.can_modify


class TestCanConfirmEdit:
    """Tests for confirming role edits."""

    def test_swap_keeps_every_role_staffed(self, validator):
        result = validator.can_confirm_edit(
            [EditMember("bob.near", ("Financial",), ("Requestor",))]
        )

        assert result.can_modify

    def test_dropping_sole_governance_blocked(self, validator):
        result = validator.can_confirm_edit(
            [EditMember("alice.near", ("Governance", "Requestor"), ("Requestor",))]
        )

        assert result.reason == (
            "Cannot save these changes. This would leave the Governance role empty, "
            "which is required to manage team members and configure voting."
        )

    def test_batch_counts_edited_members_together(self, validator):
        """Two edits that each look safe alone can empty a role together."""
        result = validator.can_confirm_edit(
            [
                EditMember("bob.near", ("Financial",), ("Requestor",)),
                EditMember("carol.near", ("Financial", "Requestor"), ("Requestor",)),
            ]
        )

        assert result.reason == (
            "Cannot save these changes. This would leave the Financial role empty."
        )

    def test_edit_moving_role_to_another_member_allowed(self, validator):
        result = validator.can_confirm_edit(
            [
                EditMember("alice.near", ("Governance", "Requestor"), ("Requestor",)),
                EditMember("bob.near", ("Financial",), ("Financial", "Governance")),
            ]
        )

        assert result.can_modify

    def test_edit_of_non_member_denied(self, validator):
        result = validator.can_confirm_edit(
            [EditMember("mallory.near", (), ("Governance",))]
        )

        assert not result.can_modify
        assert result.reason == "mallory.near is not a member of this treasury"

    def test_non_member_in_otherwise_valid_batch_denied(self, validator):
        result = validator.can_confirm_edit(
            [
                EditMember("bob.near", ("Financial",), ("Requestor",)),
                EditMember("mallory.near", (), ("Financial",)),
            ]
        )

        assert result.reason == "mallory.near is not a member of this treasury"

    def test_gate_checked_before_membership(self, policy):
        validator = MembershipValidator.from_policy(policy, ActorContext())

        result = validator.can_confirm_edit(
            [EditMember("mallory.near", (), ("Governance",))]
        )

        assert result.reason == CONNECT_WALLET_REASON


class TestCanRemoveRoleFromMember:
    """Tests for the inline single-role check."""

    def test_sole_governance_holder(self, validator):
        result = validator.can_remove_role_from_member("alice.near", "Governance")

        assert result.reason == (
            "You can't remove the Governance role from this member. They are the "
            "only Governance member, and without this role you won't be able to "
            "manage team members or configure voting."
        )

    def test_sole_holder_of_other_role(self):
        members = [member("bob.near", "Financial")]
        validator = MembershipValidator(
            members, ActorContext(account_id="bob.near", can_manage_members=True)
        )

        result = validator.can_remove_role_from_member("bob.near", "Financial")

        assert result.reason == (
            "You can't remove the Financial role from this member. They are the "
            "only person assigned to this role."
        )

    def test_shared_role(self, validator):
        assert validator.can_remove_role_from_member("bob.near", "Financial").can_modify

    def test_role_not_held(self, validator):
        assert validator.can_remove_role_from_member("bob.near", "Governance").can_modify


class TestCanAddMembers:
    """Tests for validating new members."""

    def test_valid_batch(self, validator):
        result = validator.can_add_members(
            [
                AddMember("dave.near", ("Requestor",)),
                AddMember("erin.tg", ("Financial", "Requestor")),
            ]
        )

        assert result.can_modify

    def test_empty_batch(self, validator):
        assert validator.can_add_members([]).reason == "At least one member is required"

    def test_missing_account_id(self, validator):
        result = validator.can_add_members([AddMember("", ("Requestor",))])

        assert result.reason == "Account ID is required"

    def test_malformed_account_id(self, validator):
        result = validator.can_add_members([AddMember("dave.eth", ("Requestor",))])

        assert result.reason == (
            "Address must end with .near, .aurora, or .tg, "
            "or be a 64-character hex address"
        )

    def test_no_roles(self, validator):
        result = validator.can_add_members([AddMember("dave.near", ())])

        assert result.reason == "At least one role must be selected"

    def test_duplicate_within_batch_ignoring_case(self, validator):
        result = validator.can_add_members(
            [
                AddMember("dave.near", ("Requestor",)),
                AddMember("Dave.near", ("Financial",)),
            ]
        )

        assert result.reason == "This member has already been added above"

    def test_existing_member(self, validator):
        result = validator.can_add_members([AddMember("Bob.near", ("Requestor",))])

        assert result.reason == "This member already exists in the treasury"

    def test_configured_suffixes(self, policy, governor):
        validator = MembershipValidator.from_policy(
            policy, governor, account_suffixes=(".testnet",)
        )

        assert validator.can_add_members([AddMember("dave.testnet", ("Requestor",))]).can_modify
        assert not validator.can_add_members([AddMember("dave.near", ("Requestor",))]).can_modify


class TestValidatorConstruction:
    def test_members_is_a_copy(self, validator):
        validator.members.clear()

        assert len(validator.members) == 3

    def test_role_member_count(self, validator):
        assert validator.role_member_count("Requestor") == 2
        assert validator.role_member_count("Council") == 0

    def test_custom_critical_keywords(self):
        policy = Policy.from_document(
            {"roles": [{"name": "Council", "kind": {"Group": ["alice.near"]}}]}
        )
        validator = MembershipValidator.from_policy(
            policy,
            ActorContext(account_id="alice.near", can_manage_members=True),
            critical_role_keywords=("council",),
        )

        result = validator.can_modify_member(member("alice.near", "Council"))

        assert result.reason.endswith(
            "which is required to manage team members and configure voting."
        )
