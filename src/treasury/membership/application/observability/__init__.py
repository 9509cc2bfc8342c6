"""Domain-Oriented Observability for the membership application layer.

Probes for application service operations following Domain-Oriented Observability patterns.
"""

from membership.application.observability.membership_service_probe import (
    DefaultMembershipServiceProbe,
    MembershipServiceProbe,
)

__all__ = [
    "DefaultMembershipServiceProbe",
    "MembershipServiceProbe",
]
