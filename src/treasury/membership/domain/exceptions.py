"""Domain exceptions for the membership bounded context."""


class InvalidPolicyDocumentError(ValueError):
    """Raised when a raw policy document cannot be parsed.

    The policy is owned by the treasury contract. A document without a
    ``roles`` list, or with a role lacking a name or kind, cannot be turned
    into a member graph and is rejected before any validation runs.
    """

    pass
