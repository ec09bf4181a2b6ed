"""
GroupRemover Input Validation

Rejects malformed invocation parameters before any network call.
"""

from __future__ import annotations

from typing import Any, Mapping, Tuple

from groupremover.core.exceptions import ValidationError
from groupremover.core.types import RemovalRequest

# Checked in this order; the first offending field is reported.
REQUIRED_FIELDS: Tuple[str, ...] = ("groupId", "userId", "authMethodId")


def is_valid_identifier(value: Any) -> bool:
    """True for a string that is not empty after trimming."""
    return isinstance(value, str) and value.strip() != ""


def validate_inputs(params: Mapping[str, Any]) -> RemovalRequest:
    """
    Validate job parameters and build a RemovalRequest.

    Args:
        params: Raw job parameters

    Returns:
        RemovalRequest with the identifiers as supplied (not trimmed)

    Raises:
        ValidationError: naming the first missing, non-string or blank field
    """
    for name in REQUIRED_FIELDS:
        if not is_valid_identifier(params.get(name)):
            raise ValidationError(name)

    return RemovalRequest(
        group_id=params["groupId"],
        user_id=params["userId"],
        auth_method_id=params["authMethodId"],
    )
