"""Unit test fixtures: policy documents and parsed policies."""

from unittest.mock import MagicMock

import pytest

from infrastructure.settings import MembershipSettings
from membership.domain.policy import Policy
from membership.domain.value_objects import ActorContext


@pytest.fixture
def policy_document() -> dict:
    """Provide a treasury policy document as returned by the contract."""
    return {
        "roles": [
            {
                "name": "Governance",
                "kind": {"Group": ["alice.near"]},
                "permissions": ["*:*"],
                "vote_policy": {},
            },
            {
                "name": "Financial",
                "kind": {"Group": ["bob.near", "carol.near"]},
                "permissions": ["transfer:*", "call:*"],
                "vote_policy": {
                    "transfer": {
                        "weight_kind": "RoleWeight",
                        "quorum": "0",
                        "threshold": [1, 2],
                    }
                },
            },
            {
                "name": "Requestor",
                "kind": {"Group": ["carol.near", "alice.near"]},
                "permissions": ["call:AddProposal", "transfer:AddProposal"],
                "vote_policy": {},
            },
            {
                "name": "all",
                "kind": "Everyone",
                "permissions": ["*:Finalize"],
                "vote_policy": {},
            },
        ],
        "default_vote_policy": {
            "weight_kind": "RoleWeight",
            "quorum": "0",
            "threshold": [1, 2],
        },
        "proposal_bond": "100000000000000000000000",
        "proposal_period": "604800000000000",
    }


@pytest.fixture
def policy(policy_document) -> Policy:
    """Provide the parsed treasury policy."""
    return Policy.from_document(policy_document)


@pytest.fixture
def governor() -> ActorContext:
    """Provide an actor allowed to manage members."""
    return ActorContext(account_id="alice.near", can_manage_members=True)


@pytest.fixture
def settings() -> MembershipSettings:
    """Provide default membership settings, isolated from the environment."""
    return MembershipSettings(_env_file=None)


@pytest.fixture
def mock_logger():
    """Provide a mocked structlog logger."""
    return MagicMock()
