"""
GroupRemover - Boundary Group Membership Removal

Removes a user from a HashiCorp Boundary group as a job action:

1. Validate groupId / userId / authMethodId
2. Authenticate with the password auth method to obtain a bearer token
3. Read the group to obtain its current version
4. Remove the member at that version

Errors are tagged retryable (rate limits, 5xx) or fatal (everything
else) so the invoking job framework can decide whether to re-run.

Example Usage:
    from groupremover import JobContext, invoke

    context = JobContext(
        secrets={"BASIC_USERNAME": "admin", "BASIC_PASSWORD": "secret"},
        environment={"ADDRESS": "https://boundary.example.com"},
    )
    result = invoke(
        {"groupId": "g_1234567890", "userId": "u_1234567890",
         "authMethodId": "ampw_1234567890"},
        context,
    )
    print(result.to_dict())
"""

from groupremover.core.types import ErrorKind, HaltResult, RemovalRequest, RemovalResult
from groupremover.core.exceptions import FatalError, GroupRemoverError, RetryableError
from groupremover.job.context import JobContext, RemoverConfig
from groupremover.job.remover import GroupMembershipRemover, error, halt, invoke

__version__ = "0.1.0"

__all__ = [
    # Main API
    "invoke",
    "error",
    "halt",
    "GroupMembershipRemover",
    "JobContext",
    "RemoverConfig",
    # Types
    "ErrorKind",
    "RemovalRequest",
    "RemovalResult",
    "HaltResult",
    # Errors
    "GroupRemoverError",
    "RetryableError",
    "FatalError",
    # Metadata
    "__version__",
]
