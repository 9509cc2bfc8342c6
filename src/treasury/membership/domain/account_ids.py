"""Account id format checks.

Only the format is checked here; whether the account exists on chain is a
question for an external collaborator.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

IMPLICIT_ACCOUNT_PATTERN = re.compile(r"^[0-9a-fA-F]{64}$")

DEFAULT_ACCOUNT_SUFFIXES: tuple[str, ...] = (".near", ".aurora", ".tg")
DEFAULT_MAX_ACCOUNT_ID_LENGTH = 64


def is_implicit_account(account_id: str) -> bool:
    """Whether the id is a 64-character hex implicit account."""
    return IMPLICIT_ACCOUNT_PATTERN.match(account_id) is not None


def validate_account_id_format(
    account_id: str,
    suffixes: Sequence[str] = DEFAULT_ACCOUNT_SUFFIXES,
    max_length: int = DEFAULT_MAX_ACCOUNT_ID_LENGTH,
) -> str | None:
    """Check the format of an account id.

    Valid ids are either implicit accounts or named accounts ending with one
    of the allowed suffixes.

    Args:
        account_id: The id to check
        suffixes: Allowed named-account suffixes
        max_length: Longest accepted id

    Returns:
        None if the id is well formed, otherwise an error message
    """
    if not account_id:
        return "Address is required"

    if len(account_id) > max_length:
        return f"Address must be less than {max_length} characters"

    if is_implicit_account(account_id):
        return None

    if any(account_id.endswith(suffix) for suffix in suffixes):
        return None

    if not suffixes:
        return "Address must be a 64-character hex address"

    if len(suffixes) == 1:
        allowed = suffixes[0]
    else:
        allowed = f"{', '.join(suffixes[:-1])}, or {suffixes[-1]}"
    return f"Address must end with {allowed}, or be a 64-character hex address"


def is_valid_account_id_format(
    account_id: str,
    suffixes: Sequence[str] = DEFAULT_ACCOUNT_SUFFIXES,
    max_length: int = DEFAULT_MAX_ACCOUNT_ID_LENGTH,
) -> bool:
    return validate_account_id_format(account_id, suffixes, max_length) is None
