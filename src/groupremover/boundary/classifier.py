"""
GroupRemover Error Classifier

Maps failed Boundary API responses to the error taxonomy. Each error is
either retryable (rate limiting, 5xx) or fatal (everything else).

Per-operation mapping:

| Status | authenticate        | read group          | remove member          |
|--------|---------------------|---------------------|------------------------|
| 429    | RateLimitError      | RateLimitError      | RateLimitError         |
| 401    | AuthenticationError | AuthenticationError | AuthenticationError    |
| 403    | AuthenticationError | ResponseError       | ResponseError          |
| 404    | ResponseError       | NotFoundError       | NotFoundError          |
| 409    | ResponseError       | ResponseError       | ConflictError          |
| >=500  | ServerError         | ServerError         | ServerError            |
| other  | ResponseError       | ResponseError       | ResponseError          |
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

import httpx

from groupremover.core.exceptions import (
    AuthenticationError,
    ConflictError,
    GroupRemoverError,
    NotFoundError,
    RateLimitError,
    ResponseError,
    ServerError,
    UnexpectedError,
)
from groupremover.transport.http import truncate_body


class Operation(Enum):
    """Remote calls made during a removal, valued by their log description."""

    AUTHENTICATE = "authenticate"
    READ_GROUP = "get group"
    REMOVE_MEMBER = "remove user from group"


INVALID_CREDENTIALS = "Invalid username or password"
INVALID_TOKEN = "Invalid or expired authentication token"


def classify_failure(
    operation: Operation,
    status_code: int,
    reason: str = "",
    body: str = "",
    *,
    group_id: Optional[str] = None,
    user_id: Optional[str] = None,
) -> GroupRemoverError:
    """
    Build the error for a non-2xx response.

    Args:
        operation: Which call failed
        status_code: HTTP status
        reason: HTTP reason phrase
        body: Response body text (truncated in messages)
        group_id: Group identifier for not-found messages
        user_id: User identifier for not-found messages

    Returns:
        Error instance tagged retryable or fatal; the caller raises it
    """
    op = operation.value

    if status_code == 429:
        return RateLimitError(operation=op)

    if status_code >= 500:
        return ServerError(status_code, operation=op)

    if operation is Operation.AUTHENTICATE:
        if status_code in (401, 403):
            return AuthenticationError(INVALID_CREDENTIALS, status_code, op)
    else:
        if status_code == 401:
            return AuthenticationError(INVALID_TOKEN, status_code, op)
        if status_code == 404:
            if operation is Operation.READ_GROUP:
                message = f"Group not found: {group_id}"
            else:
                message = f"Group or user not found: {group_id} / {user_id}"
            return NotFoundError(message, status_code, op)

    if operation is Operation.REMOVE_MEMBER and status_code == 409:
        return ConflictError(
            "Conflict (user may not be in group or version mismatch): "
            f"{truncate_body(body)}",
            status_code,
            op,
        )

    return ResponseError(
        f"Failed to {op}: {status_code} {reason} - {truncate_body(body)}",
        status_code,
        op,
    )


def raise_for_status(
    operation: Operation,
    response: httpx.Response,
    *,
    group_id: Optional[str] = None,
    user_id: Optional[str] = None,
) -> None:
    """Raise the classified error if the response is not 2xx."""
    if response.is_success:
        return
    raise classify_failure(
        operation,
        response.status_code,
        response.reason_phrase,
        response.text,
        group_id=group_id,
        user_id=user_id,
    )


def wrap_unexpected(error: BaseException) -> GroupRemoverError:
    """
    Tag an arbitrary exception for the job framework.

    Already-classified errors pass through unchanged; anything else becomes
    a fatal UnexpectedError.
    """
    if isinstance(error, GroupRemoverError):
        return error
    detail = str(error) or type(error).__name__
    return UnexpectedError(f"Unexpected error: {detail}")
