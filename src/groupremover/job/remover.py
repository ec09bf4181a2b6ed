"""
GroupRemover Orchestration

Removes a user from a Boundary group as a strictly sequential job:

    VALIDATING -> AUTHENTICATING -> READING_GROUP -> REMOVING_MEMBER -> DONE

Any non-terminal state may move to FAILED (a step raised) or HALTED (the
framework signalled a halt). Nothing is retried here; a retryable error is
surfaced with its kind intact and the framework re-runs the whole
sequence from VALIDATING.

Job handlers exposed to the framework:
- invoke: run the removal
- error: error-recovery hook, re-raises so the framework's retry policy applies
- halt: graceful shutdown, returns a best-effort HaltResult
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum, auto
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import attrs
import httpx
import structlog
from attrs import field
from returns.result import Failure

from groupremover.boundary.classifier import wrap_unexpected
from groupremover.boundary.client import BoundaryClient
from groupremover.core.exceptions import (
    GroupRemoverError,
    StateError,
    UnexpectedError,
)
from groupremover.core.state_machine import (
    SECRET,
    StateMachineBase,
    Transition,
    TransitionEntry,
)
from groupremover.core.types import (
    UNKNOWN,
    ErrorKind,
    HaltResult,
    RemovalRequest,
    RemovalResult,
    utc_now,
)
from groupremover.core.validation import validate_inputs
from groupremover.job.context import (
    JobContext,
    RemoverConfig,
    resolve_base_url,
    resolve_credentials,
)
from groupremover.transport.http import build_http_client

logger = structlog.get_logger()


# =============================================================================
# STATES, CONTEXT AND EVENTS
# =============================================================================


class RemovalState(Enum):
    """Orchestration states for one removal."""

    VALIDATING = auto()
    AUTHENTICATING = auto()
    READING_GROUP = auto()
    REMOVING_MEMBER = auto()
    DONE = auto()
    FAILED = auto()
    HALTED = auto()

    @property
    def is_terminal(self) -> bool:
        return self in (RemovalState.DONE, RemovalState.FAILED, RemovalState.HALTED)


@attrs.define
class RemovalContext:
    """
    Values accumulated while the removal runs.

    The token is tagged secret and never appears in traces.
    """

    request: Optional[RemovalRequest] = None
    token: Optional[str] = field(default=None, repr=False, metadata={SECRET: True})
    version: Optional[int] = None
    removed_at: Optional[datetime] = None
    error_kind: Optional[ErrorKind] = None
    error_message: str = ""
    halt_reason: Optional[str] = None


@attrs.define(frozen=True, slots=True)
class InputsValidated:
    """Event: parameters passed validation."""

    request: RemovalRequest


@attrs.define(frozen=True, slots=True)
class Authenticated:
    """Event: bearer token obtained."""

    token: str = field(repr=False, metadata={SECRET: True})


@attrs.define(frozen=True, slots=True)
class GroupRead:
    """Event: current group version obtained."""

    version: int


@attrs.define(frozen=True, slots=True)
class MemberRemoved:
    """Event: removal call succeeded."""

    removed_at: datetime = field(factory=utc_now)


@attrs.define(frozen=True, slots=True)
class StepFailed:
    """Event: the current step raised."""

    error_kind: ErrorKind
    error_message: str


@attrs.define(frozen=True, slots=True)
class HaltObserved:
    """Event: the framework requested a halt."""

    reason: str


# =============================================================================
# INVARIANTS
# =============================================================================

_ACTIVE = (
    RemovalState.AUTHENTICATING,
    RemovalState.READING_GROUP,
    RemovalState.REMOVING_MEMBER,
    RemovalState.DONE,
)


def request_after_validation(state: RemovalState, ctx: RemovalContext) -> bool:
    """Every state past VALIDATING (other than FAILED/HALTED) has a request."""
    if state in _ACTIVE:
        return ctx.request is not None
    return True


def token_before_group_read(state: RemovalState, ctx: RemovalContext) -> bool:
    """Group calls are only made with a token."""
    if state in (RemovalState.READING_GROUP, RemovalState.REMOVING_MEMBER, RemovalState.DONE):
        return bool(ctx.token)
    return True


def version_before_removal(state: RemovalState, ctx: RemovalContext) -> bool:
    """The removal call always carries a positive group version."""
    if state in (RemovalState.REMOVING_MEMBER, RemovalState.DONE):
        return ctx.version is not None and ctx.version >= 1
    return True


def done_has_timestamp(state: RemovalState, ctx: RemovalContext) -> bool:
    if state == RemovalState.DONE:
        return ctx.removed_at is not None
    return True


# =============================================================================
# STATE MACHINE
# =============================================================================


@attrs.define
class RemovalStateMachine(StateMachineBase[RemovalState, Any, RemovalContext]):
    """
    Removal orchestration state machine.

    States:
    - VALIDATING: Checking job parameters
    - AUTHENTICATING: Resolving configuration and exchanging credentials
    - READING_GROUP: Fetching the group version
    - REMOVING_MEMBER: Issuing the versioned removal
    - DONE: User removed
    - FAILED: A step raised
    - HALTED: The framework stopped the job
    """

    def initial_state(self) -> RemovalState:
        return RemovalState.VALIDATING

    def transition_table(
        self,
    ) -> Dict[Tuple[RemovalState, type], TransitionEntry]:
        table: Dict[Tuple[RemovalState, type], TransitionEntry] = {
            (RemovalState.VALIDATING, InputsValidated): (
                RemovalState.AUTHENTICATING,
                self._handle_inputs_validated,
            ),
            (RemovalState.AUTHENTICATING, Authenticated): (
                RemovalState.READING_GROUP,
                self._handle_authenticated,
            ),
            (RemovalState.READING_GROUP, GroupRead): (
                RemovalState.REMOVING_MEMBER,
                self._handle_group_read,
            ),
            (RemovalState.REMOVING_MEMBER, MemberRemoved): (
                RemovalState.DONE,
                self._handle_member_removed,
            ),
        }
        for state in RemovalState:
            if state.is_terminal:
                continue
            table[(state, StepFailed)] = (RemovalState.FAILED, self._handle_failure)
            table[(state, HaltObserved)] = (RemovalState.HALTED, self._handle_halt)
        return table

    @staticmethod
    def _handle_inputs_validated(
        event: InputsValidated, ctx: RemovalContext
    ) -> RemovalContext:
        return attrs.evolve(ctx, request=event.request)

    @staticmethod
    def _handle_authenticated(
        event: Authenticated, ctx: RemovalContext
    ) -> RemovalContext:
        return attrs.evolve(ctx, token=event.token)

    @staticmethod
    def _handle_group_read(event: GroupRead, ctx: RemovalContext) -> RemovalContext:
        return attrs.evolve(ctx, version=event.version)

    @staticmethod
    def _handle_member_removed(
        event: MemberRemoved, ctx: RemovalContext
    ) -> RemovalContext:
        return attrs.evolve(ctx, removed_at=event.removed_at)

    @staticmethod
    def _handle_failure(event: StepFailed, ctx: RemovalContext) -> RemovalContext:
        return attrs.evolve(
            ctx,
            error_kind=event.error_kind,
            error_message=event.error_message,
        )

    @staticmethod
    def _handle_halt(event: HaltObserved, ctx: RemovalContext) -> RemovalContext:
        return attrs.evolve(ctx, halt_reason=event.reason)


def _new_state_machine() -> RemovalStateMachine:
    machine = RemovalStateMachine(
        _state=RemovalState.VALIDATING,
        _context=RemovalContext(),
    )
    machine.add_invariant("request_after_validation", request_after_validation)
    machine.add_invariant("token_before_group_read", token_before_group_read)
    machine.add_invariant("version_before_removal", version_before_removal)
    machine.add_invariant("done_has_timestamp", done_has_timestamp)
    return machine


# =============================================================================
# REMOVER
# =============================================================================


@attrs.define
class GroupMembershipRemover:
    """
    Single-use orchestrator for one removal.

    A fresh instance is created per invocation; nothing carries over
    between invocations.

    Example:
        remover = GroupMembershipRemover()
        result = remover.invoke(
            {"groupId": "g_123", "userId": "u_123", "authMethodId": "ampw_123"},
            JobContext.from_environ(),
        )
        print(result.to_dict())
    """

    config: RemoverConfig = attrs.Factory(RemoverConfig)
    transport: Optional[httpx.BaseTransport] = attrs.field(default=None, repr=False)
    _state_machine: RemovalStateMachine = attrs.Factory(_new_state_machine)
    _logger: Any = attrs.Factory(lambda: structlog.get_logger())

    @property
    def state(self) -> RemovalState:
        """Current orchestration state."""
        return self._state_machine.state

    @property
    def context(self) -> RemovalContext:
        """Current orchestration context (read-only)."""
        return self._state_machine.context

    def get_trace(self) -> List[Transition]:
        """Transitions taken so far, oldest first."""
        return self._state_machine.get_trace()

    def export_trace_json(self) -> str:
        """Transition history as JSON, without secret fields."""
        return self._state_machine.export_trace_json()

    def invoke(
        self,
        params: Mapping[str, Any],
        context: JobContext,
    ) -> Union[RemovalResult, HaltResult]:
        """
        Run validate -> authenticate -> read group -> remove member.

        Args:
            params: Job parameters (groupId, userId, authMethodId, optional address)
            context: Secrets, environment and halt signal

        Returns:
            RemovalResult on success, HaltResult if a halt was observed

        Raises:
            GroupRemoverError: tagged retryable or fatal; untagged failures
                are wrapped as UnexpectedError
        """
        if self.state != RemovalState.VALIDATING:
            raise StateError(
                f"Remover already used (state {self.state.name}); create a new one per invocation"
            )

        self._logger.info("remove_member_start")

        try:
            if context.halt_requested:
                return self._halt(params, context)

            request = validate_inputs(params)
            self._advance(InputsValidated(request=request))
            self._logger.info(
                "remove_member_processing",
                group_id=request.group_id,
                user_id=request.user_id,
            )

            credentials = resolve_credentials(context)
            base_url = resolve_base_url(params, context)

            with build_http_client(
                base_url,
                timeout=self.config.timeout,
                user_agent=self.config.user_agent,
                transport=self.transport,
            ) as http:
                api = BoundaryClient(http)

                token = api.authenticate(request.auth_method_id, credentials)
                self._advance(Authenticated(token=token))
                if context.wait(self.config.step_delay):
                    return self._halt(params, context)

                version = api.get_group_version(request.group_id, token)
                self._advance(GroupRead(version=version))
                if context.wait(self.config.step_delay):
                    return self._halt(params, context)

                api.remove_member(request.group_id, request.user_id, version, token)
                self._advance(MemberRemoved())

        except Exception as e:
            error = wrap_unexpected(e)
            if context.halt_requested and not self.state.is_terminal:
                # halt wins over a step that failed while it was in flight
                self._logger.warning(
                    "remove_member_failed_during_halt",
                    error=error.message,
                    kind=error.kind.value,
                    status=error.code,
                    operation=error.operation,
                    state=self.state.name,
                )
                return self._halt(params, context)
            self._logger.error(
                "remove_member_failed",
                error=error.message,
                kind=error.kind.value,
                status=error.code,
                operation=error.operation,
                state=self.state.name,
            )
            self._record_failure(error)
            if error is e:
                raise
            raise error from e

        result = RemovalResult(
            group_id=request.group_id,
            user_id=request.user_id,
            auth_method_id=request.auth_method_id,
            user_removed=True,
            removed_at=self.context.removed_at or utc_now(),
        )
        self._logger.info(
            "remove_member_success",
            group_id=request.group_id,
            user_id=request.user_id,
        )
        return result

    def _advance(self, event: Any) -> None:
        """Apply an event; a rejected transition is a fatal StateError."""
        result = self._state_machine.process_event(event)
        if isinstance(result, Failure):
            raise StateError(result.failure())

    def _record_failure(self, error: GroupRemoverError) -> None:
        if self.state.is_terminal:
            return
        result = self._state_machine.process_event(
            StepFailed(error_kind=error.kind, error_message=error.message)
        )
        if isinstance(result, Failure):
            self._logger.warning("failure_not_recorded", reason=result.failure())

    def _halt(self, params: Mapping[str, Any], context: JobContext) -> HaltResult:
        reason = context.halt_reason or UNKNOWN
        self._logger.info("remove_member_halted", reason=reason, state=self.state.name)
        self._advance(HaltObserved(reason=reason))
        return HaltResult.from_params(dict(params), reason=reason)


# =============================================================================
# JOB HANDLERS
# =============================================================================


def create_remover(
    step_delay: float = 0.1,
    timeout: float = 30.0,
    transport: Optional[httpx.BaseTransport] = None,
) -> GroupMembershipRemover:
    """
    Create a remover for one invocation.

    Args:
        step_delay: Pause between remote calls in seconds
        timeout: HTTP timeout in seconds
        transport: Optional httpx transport override
    """
    return GroupMembershipRemover(
        config=RemoverConfig(step_delay=step_delay, timeout=timeout),
        transport=transport,
    )


def invoke(
    params: Mapping[str, Any],
    context: JobContext,
    *,
    config: Optional[RemoverConfig] = None,
    transport: Optional[httpx.BaseTransport] = None,
) -> Union[RemovalResult, HaltResult]:
    """Job entry point: remove params["userId"] from params["groupId"]."""
    remover = GroupMembershipRemover(
        config=config or RemoverConfig(),
        transport=transport,
    )
    return remover.invoke(params, context)


def error(params: Mapping[str, Any], context: Optional[JobContext] = None) -> None:
    """
    Error-recovery hook.

    Re-raises params["error"] unchanged so the framework decides on retry.
    A non-exception payload (e.g. {"message": ...}) is raised as an
    UnexpectedError carrying its text.
    """
    err = params.get("error")
    logger.error("error_handler_invoked", error=str(err) if err is not None else None)
    if isinstance(err, BaseException):
        raise err
    if err is None:
        detail = "error handler invoked without an error"
    elif isinstance(err, Mapping) and err.get("message"):
        detail = str(err["message"])
    else:
        detail = str(err)
    raise UnexpectedError(f"Unexpected error: {detail}")


def halt(params: Mapping[str, Any], context: Optional[JobContext] = None) -> HaltResult:
    """
    Graceful shutdown hook.

    Echoes whichever identifiers are present; missing ones become "unknown".
    """
    result = HaltResult.from_params(dict(params))
    logger.info("job_halted", reason=result.reason)
    return result
