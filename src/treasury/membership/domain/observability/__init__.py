"""Domain-Oriented Observability for the membership domain layer.

Probes for policy mutations following Domain-Oriented Observability patterns.
"""

from membership.domain.observability.membership_probe import (
    DefaultMembershipProbe,
    MembershipProbe,
)

__all__ = [
    "DefaultMembershipProbe",
    "MembershipProbe",
]
