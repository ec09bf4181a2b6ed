"""
GroupRemover Exception Types

Every error that leaves the remover carries a kind: RETRYABLE errors are
transient and may be re-attempted by the invoking job framework, FATAL
errors are not.
"""

from typing import Optional

from groupremover.core.types import ErrorKind


class GroupRemoverError(Exception):
    """Base exception for all GroupRemover errors."""

    kind: ErrorKind = ErrorKind.FATAL

    def __init__(
        self,
        message: str,
        code: Optional[int] = None,
        operation: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.operation = operation

    @property
    def retryable(self) -> bool:
        """True if the framework may re-run the whole invocation."""
        return self.kind is ErrorKind.RETRYABLE


class RetryableError(GroupRemoverError):
    """
    Transient failure.

    Re-running the full sequence later may succeed.
    """

    kind = ErrorKind.RETRYABLE


class FatalError(GroupRemoverError):
    """
    Permanent failure.

    Re-running the sequence with the same input will fail the same way.
    """

    kind = ErrorKind.FATAL


# =============================================================================
# FATAL ERRORS
# =============================================================================


class ValidationError(FatalError):
    """Invocation parameters are missing or malformed."""

    def __init__(self, field_name: str) -> None:
        super().__init__(f"Invalid or missing {field_name} parameter")
        self.field_name = field_name


class ConfigurationError(FatalError):
    """Required secret or environment configuration is absent."""

    pass


class AuthenticationError(FatalError):
    """
    Credentials or token were rejected.

    Raised for 401/403 on authenticate and 401 on group calls.
    """

    pass


class NotFoundError(FatalError):
    """Group or user does not exist."""

    pass


class ConflictError(FatalError):
    """
    Removal conflicted with the current group state.

    Either the user is not a member or the group version changed between
    the read and the removal.
    """

    pass


class ResponseError(FatalError):
    """
    Unexpected HTTP status or malformed success payload.
    """

    pass


class UnexpectedError(FatalError):
    """Untagged failure (network error, bug) wrapped at the invoke boundary."""

    pass


class StateError(FatalError):
    """
    Invalid state transition.

    An event arrived that is not valid in the current orchestration state.
    """

    pass


class InvariantViolation(FatalError):
    """
    Orchestration invariant was violated.

    Indicates a bug: the state machine refused to commit a transition.
    """

    pass


# =============================================================================
# RETRYABLE ERRORS
# =============================================================================


class RateLimitError(RetryableError):
    """Remote service answered 429."""

    def __init__(
        self,
        message: str = "Boundary API rate limit exceeded",
        code: Optional[int] = 429,
        operation: Optional[str] = None,
    ) -> None:
        super().__init__(message, code, operation)


class ServerError(RetryableError):
    """Remote service answered with a 5xx status."""

    def __init__(self, code: int, operation: Optional[str] = None) -> None:
        super().__init__(f"Boundary API server error: {code}", code, operation)
