"""
GroupRemover Core Module

Provides foundational types and abstractions used by the Boundary client
and the job orchestration.

Components:
- types: Request, credential and result types
- state_machine: Base state machine with invariant checking
- validation: Input parameter validation
- exceptions: Error taxonomy tagged retryable or fatal
"""

from groupremover.core.types import (
    UNKNOWN,
    Credentials,
    ErrorKind,
    HaltResult,
    RemovalRequest,
    RemovalResult,
)
from groupremover.core.state_machine import StateMachineBase, Transition
from groupremover.core.validation import validate_inputs
from groupremover.core.exceptions import (
    AuthenticationError,
    ConfigurationError,
    ConflictError,
    FatalError,
    GroupRemoverError,
    NotFoundError,
    RateLimitError,
    ResponseError,
    RetryableError,
    ServerError,
    UnexpectedError,
    ValidationError,
)

__all__ = [
    # Types
    "UNKNOWN",
    "Credentials",
    "ErrorKind",
    "HaltResult",
    "RemovalRequest",
    "RemovalResult",
    # State Machine
    "StateMachineBase",
    "Transition",
    # Validation
    "validate_inputs",
    # Exceptions
    "GroupRemoverError",
    "RetryableError",
    "FatalError",
    "ValidationError",
    "ConfigurationError",
    "AuthenticationError",
    "NotFoundError",
    "ConflictError",
    "ResponseError",
    "UnexpectedError",
    "RateLimitError",
    "ServerError",
]
