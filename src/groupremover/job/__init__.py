"""
GroupRemover Job Module

Job-framework entry points and orchestration.

Components:
- remover: GroupMembershipRemover state machine and invoke/error/halt handlers
- context: JobContext capability object and configuration resolution
"""

from groupremover.job.context import (
    JobContext,
    RemoverConfig,
    resolve_base_url,
    resolve_credentials,
)
from groupremover.job.remover import (
    GroupMembershipRemover,
    RemovalState,
    create_remover,
    error,
    halt,
    invoke,
)

__all__ = [
    "GroupMembershipRemover",
    "JobContext",
    "RemovalState",
    "RemoverConfig",
    "create_remover",
    "error",
    "halt",
    "invoke",
    "resolve_base_url",
    "resolve_credentials",
]
