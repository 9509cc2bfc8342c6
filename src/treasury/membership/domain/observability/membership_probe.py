"""Observability probes for policy mutations.

Domain probes following the Domain Oriented Observability pattern. Probes
emit structured logs with domain-specific context whenever a new policy is
computed from membership change requests.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from typing import Protocol

import structlog


class MembershipProbe(Protocol):
    """Protocol for policy mutation observability probes."""

    def policy_roles_changed(
        self,
        mode: str,
        account_ids: list[str],
        summary_lines: int,
    ) -> None:
        """Probe emitted when members are added or their roles edited.

        Args:
            mode: "add" or "edit"
            account_ids: Accounts referenced by the requests
            summary_lines: Number of change log lines produced
        """
        ...

    def policy_members_removed(
        self,
        account_ids: list[str],
        roles_emptied: list[str],
    ) -> None:
        """Probe emitted when members are stripped from the policy.

        Args:
            account_ids: Accounts removed
            roles_emptied: Group roles left without a holder, if any
        """
        ...


class DefaultMembershipProbe:
    """Default implementation of MembershipProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._logger = logger or structlog.get_logger()

    def policy_roles_changed(
        self,
        mode: str,
        account_ids: list[str],
        summary_lines: int,
    ) -> None:
        """Log role changes with structured context."""
        self._logger.info(
            "policy_roles_changed",
            mode=mode,
            account_ids=account_ids,
            summary_lines=summary_lines,
        )

    def policy_members_removed(
        self,
        account_ids: list[str],
        roles_emptied: list[str],
    ) -> None:
        """Log member removal; emptied roles are logged as a warning."""
        if roles_emptied:
            self._logger.warning(
                "policy_members_removed",
                account_ids=account_ids,
                roles_emptied=roles_emptied,
            )
            return
        self._logger.info(
            "policy_members_removed",
            account_ids=account_ids,
            roles_emptied=roles_emptied,
        )
