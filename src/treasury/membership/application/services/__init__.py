"""Application services for the membership bounded context.

Application services orchestrate the membership domain and the proposal
collaborators to fulfill use cases. They are the "front door" to the
membership context.
"""

from membership.application.services.membership_service import MembershipService
from membership.application.services.pending_changes_service import (
    PendingChangesService,
)

__all__ = [
    "MembershipService",
    "PendingChangesService",
]
