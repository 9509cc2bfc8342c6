"""HTTP client for pending membership proposals.

Queries the treasury proposals API for change-policy proposals that are
still in progress and mention members.
"""

from __future__ import annotations

from typing import Any

import httpx

from infrastructure.settings import MembershipSettings, get_settings
from membership.ports.exceptions import PendingProposalsUnavailableError
from membership.ports.proposals import ProposalRecord

PENDING_MEMBERSHIP_QUERY: dict[str, str] = {
    "statuses": "InProgress",
    "proposal_types": "Change Policy",
    "search": "members",
    "sort_by": "CreationTime",
    "sort_direction": "desc",
}


def _parse_proposal(entry: dict[str, Any]) -> ProposalRecord:
    submission_time = entry.get("submission_time")
    return ProposalRecord(
        id=int(entry["id"]),
        proposer=str(entry.get("proposer") or ""),
        description=str(entry.get("description") or ""),
        submission_time=str(submission_time) if submission_time is not None else None,
    )


class HttpPendingProposalSource:
    """PendingProposalSource backed by the proposals HTTP API."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the proposal source.

        Args:
            base_url: Base URL of the proposals API (e.g. "https://host/api")
            timeout: Request timeout in seconds
            transport: Optional httpx transport, used to stub the API
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(
        cls, settings: MembershipSettings | None = None
    ) -> HttpPendingProposalSource:
        settings = settings or get_settings()
        return cls(
            base_url=settings.proposals_api_url,
            timeout=settings.proposals_api_timeout_seconds,
        )

    async def list_pending_membership_proposals(
        self, treasury_id: str
    ) -> list[ProposalRecord]:
        """Fetch pending change-policy proposals mentioning members.

        Args:
            treasury_id: The treasury account

        Returns:
            Proposals, newest first

        Raises:
            PendingProposalsUnavailableError: If the API cannot be reached,
                answers with an error status, or returns an unexpected body
        """
        url = f"{self._base_url}/proposals/{treasury_id}"
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.get(url, params=PENDING_MEMBERSHIP_QUERY)
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPError as e:
            raise PendingProposalsUnavailableError(
                f"Failed to fetch pending proposals for {treasury_id}: {e}"
            ) from e
        except ValueError as e:
            raise PendingProposalsUnavailableError(
                f"Invalid response from proposals API: {e}"
            ) from e

        entries = payload.get("proposals") if isinstance(payload, dict) else None
        if not isinstance(entries, list):
            raise PendingProposalsUnavailableError(
                "Invalid response from proposals API: missing proposals list"
            )

        try:
            return [_parse_proposal(entry) for entry in entries]
        except (KeyError, TypeError, ValueError) as e:
            raise PendingProposalsUnavailableError(
                f"Invalid proposal in API response: {e}"
            ) from e
