"""
GroupRemover State Machine Base

Transition-table state machine shared by the orchestration code. Each
event is looked up by (current state, event type); the handler computes
the next context, registered invariants are checked against the proposed
state, and only then is the transition committed and recorded.

The recorded history can be exported as JSON. Fields tagged with SECRET
metadata (bearer tokens) never enter the history.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Generic, List, Optional, Tuple, TypeVar

import attrs
import structlog
from returns.result import Failure, Result, Success

from groupremover.core.exceptions import InvariantViolation
from groupremover.core.types import format_timestamp, utc_now

# Field metadata key marking values that must never be traced.
SECRET = "secret"


S = TypeVar("S", bound=Enum)  # State type
E = TypeVar("E")  # Event type
C = TypeVar("C")  # Context type


@attrs.define(frozen=True, slots=True)
class Transition(Generic[S, E]):
    """
    Immutable record of a state transition.

    Used for audit logging and debugging failed invocations.
    """

    from_state: S
    event_type: str
    to_state: S
    timestamp: datetime
    context_snapshot: Dict[str, Any] = attrs.Factory(dict)
    event_data: Dict[str, Any] = attrs.Factory(dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "from_state": self.from_state.name,
            "event_type": self.event_type,
            "to_state": self.to_state.name,
            "timestamp": format_timestamp(self.timestamp),
            "context_snapshot": self.context_snapshot,
            "event_data": self.event_data,
        }


# Type alias for invariant functions
InvariantFn = Callable[[S, Any], bool]

# Type alias for transition table entry
TransitionEntry = Tuple[S, Callable[[Any, Any], Any]]


@attrs.define
class StateMachineBase(ABC, Generic[S, E, C]):
    """
    Base for table-driven state machines.

    Subclasses supply initial_state() and transition_table(); handlers are
    pure (event, context) -> context functions, usually staticmethods
    returning attrs.evolve(ctx, ...). See RemovalStateMachine.
    """

    _state: S = attrs.field(alias="_state")
    _context: C = attrs.field(alias="_context")
    _history: List[Transition[S, E]] = attrs.field(factory=list, alias="_history")
    _invariants: List[Tuple[str, InvariantFn]] = attrs.field(factory=list, alias="_invariants")
    _logger: Any = attrs.field(factory=lambda: structlog.get_logger(), alias="_logger")

    @abstractmethod
    def initial_state(self) -> S:
        """Return the initial state for this state machine."""
        ...

    @abstractmethod
    def transition_table(
        self,
    ) -> Dict[Tuple[S, type], TransitionEntry]:
        """
        Return the transition table.

        Maps (current_state, event_type) to (next_state, context_updater).

        The context_updater is a pure function that computes new context
        from the event and current context.
        """
        ...

    @property
    def state(self) -> S:
        """Current state (read-only)."""
        return self._state

    @property
    def context(self) -> C:
        """Current context (read-only)."""
        return self._context

    def process_event(self, event: E) -> Result[S, str]:
        """
        Apply an event.

        Returns:
            Success(new_state) once the transition is committed
            Failure(reason) if no transition exists or the handler failed

        Raises:
            InvariantViolation: the proposed state/context breaks an invariant
        """
        event_name = type(event).__name__
        entry = self.transition_table().get((self._state, type(event)))
        if entry is None:
            self._logger.warning(
                "invalid_transition",
                current_state=self._state.name,
                event_type=event_name,
            )
            return Failure(f"No transition for state {self._state.name} with event {event_name}")

        next_state, update = entry
        try:
            new_context = update(event, self._context)
        except Exception as e:
            self._logger.error(
                "context_update_failed",
                error=str(e),
                current_state=self._state.name,
                event_type=event_name,
            )
            return Failure(f"Context update failed: {e}")

        failed_check = self._check_invariants(next_state, new_context)
        if failed_check is not None:
            return Failure(failed_check)

        self._commit(event, next_state, new_context)
        return Success(next_state)

    def _check_invariants(self, next_state: S, new_context: C) -> Optional[str]:
        """Run every invariant against the proposed state; nothing is committed yet."""
        for name, invariant in self._invariants:
            try:
                holds = invariant(next_state, new_context)
            except Exception as e:
                self._logger.error("invariant_check_failed", invariant=name, error=str(e))
                return f"Invariant check '{name}' failed: {e}"
            if not holds:
                self._logger.error(
                    "invariant_violated",
                    invariant=name,
                    from_state=self._state.name,
                    to_state=next_state.name,
                )
                raise InvariantViolation(f"Invariant '{name}' violated")
        return None

    def _commit(self, event: E, next_state: S, new_context: C) -> None:
        self._history.append(
            Transition(
                from_state=self._state,
                event_type=type(event).__name__,
                to_state=next_state,
                timestamp=utc_now(),
                context_snapshot=self._snapshot(new_context),
                event_data=self._snapshot(event),
            )
        )
        self._logger.info(
            "state_transition",
            from_state=self._state.name,
            to_state=next_state.name,
            event_type=type(event).__name__,
        )
        self._state = next_state
        self._context = new_context

    def add_invariant(self, name: str, invariant: InvariantFn) -> None:
        """Register a (state, context) -> bool check run before every commit."""
        self._invariants.append((name, invariant))

    def get_trace(self) -> List[Transition[S, E]]:
        """Return a copy of the transition history."""
        return list(self._history)

    def export_trace_json(self) -> str:
        return json.dumps(
            {
                "initial_state": self.initial_state().name,
                "final_state": self._state.name,
                "transitions": [t.to_dict() for t in self._history],
            },
            indent=2,
        )

    @staticmethod
    def _snapshot(obj: Any) -> Dict[str, Any]:
        """
        Serializable view of an attrs context or event.

        Private fields and fields tagged with SECRET metadata are dropped.
        """
        return attrs.asdict(
            obj,
            filter=lambda attr, value: not (
                attr.name.startswith("_") or attr.metadata.get(SECRET)
            ),
            value_serializer=_trace_value,
        )


def _trace_value(inst: type, field: attrs.Attribute, value: Any) -> Any:
    if isinstance(value, datetime):
        return format_timestamp(value)
    if isinstance(value, Enum):
        return value.name
    return value
