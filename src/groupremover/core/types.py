"""
GroupRemover Core Types

Data model for a single group membership removal.

Design Principles:
- Immutable: request and result types use frozen attrs
- Validated: identifier constraints enforced at construction
- Secret-safe: credentials never appear in repr
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

import attrs
from attrs import field, validators

UNKNOWN = "unknown"


# =============================================================================
# ENUMS
# =============================================================================


class ErrorKind(Enum):
    """Two-valued error classification consumed by the job framework."""

    RETRYABLE = "retryable"
    FATAL = "fatal"


# =============================================================================
# TIMESTAMPS
# =============================================================================


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """
    Render a datetime as ISO-8601 with millisecond precision.

    Aware datetimes are converted to UTC and suffixed with "Z"
    (e.g. "2024-05-01T12:00:00.000Z").
    """
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.isoformat(timespec="milliseconds") + "Z"


def _non_blank(instance: Any, attribute: attrs.Attribute, value: str) -> None:
    if not value.strip():
        raise ValueError(f"{attribute.name} must not be blank")


_identifier = [validators.instance_of(str), _non_blank]


# =============================================================================
# REQUEST TYPES
# =============================================================================


@attrs.define(frozen=True, slots=True)
class RemovalRequest:
    """
    Validated invocation parameters.

    INVARIANT: all identifiers are non-blank strings
    """

    group_id: str = field(validator=_identifier)
    user_id: str = field(validator=_identifier)
    auth_method_id: str = field(validator=_identifier)

    def identifiers(self) -> Dict[str, str]:
        """Identifiers keyed the way the job framework names them."""
        return {
            "groupId": self.group_id,
            "userId": self.user_id,
            "authMethodId": self.auth_method_id,
        }


@attrs.define(frozen=True, slots=True)
class Credentials:
    """
    Login credentials for the password auth method.

    Neither field is included in repr; used once per invocation.
    """

    username: str = field(repr=False)
    password: str = field(repr=False)


# =============================================================================
# RESULT TYPES
# =============================================================================


@attrs.define(frozen=True, slots=True)
class RemovalResult:
    """
    Outcome of a completed removal.

    Attributes:
        group_id: Group the user was removed from
        user_id: Removed user
        auth_method_id: Auth method used to obtain the token
        user_removed: Whether the removal call succeeded
        removed_at: When the removal completed (UTC)
    """

    group_id: str
    user_id: str
    auth_method_id: str
    user_removed: bool = True
    removed_at: datetime = field(factory=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "groupId": self.group_id,
            "userId": self.user_id,
            "authMethodId": self.auth_method_id,
            "userRemoved": self.user_removed,
            "removedAt": format_timestamp(self.removed_at),
        }


@attrs.define(frozen=True, slots=True)
class HaltResult:
    """
    Best-effort result produced when a job is halted.

    The removal may or may not have happened; identifiers that were not
    available at halt time are reported as "unknown".
    """

    group_id: str = UNKNOWN
    user_id: str = UNKNOWN
    auth_method_id: str = UNKNOWN
    reason: str = UNKNOWN
    halted_at: datetime = field(factory=utc_now)
    cleanup_completed: bool = True

    @classmethod
    def from_params(
        cls,
        params: Dict[str, Any],
        reason: Optional[str] = None,
    ) -> HaltResult:
        """
        Build a halt result from raw job parameters.

        Empty or missing values fall back to "unknown". An explicit reason
        overrides params["reason"].
        """

        def pick(key: str) -> str:
            value = params.get(key)
            return str(value) if value else UNKNOWN

        return cls(
            group_id=pick("groupId"),
            user_id=pick("userId"),
            auth_method_id=pick("authMethodId"),
            reason=reason or pick("reason"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "groupId": self.group_id,
            "userId": self.user_id,
            "authMethodId": self.auth_method_id,
            "reason": self.reason,
            "haltedAt": format_timestamp(self.halted_at),
            "cleanupCompleted": self.cleanup_completed,
        }
