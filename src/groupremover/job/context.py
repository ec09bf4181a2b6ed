"""
GroupRemover Job Context

Capability object handed to each invocation by the job framework, plus
the configuration resolved from it.

The context carries:
- secrets: BASIC_USERNAME / BASIC_PASSWORD for the Boundary auth method
- environment: ADDRESS, the default controller address
- a halt signal the framework can raise at any time
"""

from __future__ import annotations

import os
import threading
from typing import Any, Mapping, Optional

import attrs
import structlog

from groupremover.core.exceptions import ConfigurationError
from groupremover.core.types import Credentials
from groupremover.transport.http import DEFAULT_TIMEOUT, DEFAULT_USER_AGENT

logger = structlog.get_logger()

USERNAME_SECRET = "BASIC_USERNAME"
PASSWORD_SECRET = "BASIC_PASSWORD"
ADDRESS_VARIABLE = "ADDRESS"


# =============================================================================
# CONFIGURATION
# =============================================================================


@attrs.define(frozen=True)
class RemoverConfig:
    """
    Remover tuning.

    Attributes:
        step_delay: Pause between remote calls, in seconds, to stay clear
            of the controller's rate limiter
        timeout: Per-request HTTP timeout in seconds
        user_agent: User-Agent sent to the controller
    """

    step_delay: float = attrs.field(default=0.1, validator=attrs.validators.ge(0))
    timeout: float = attrs.field(default=DEFAULT_TIMEOUT, validator=attrs.validators.gt(0))
    user_agent: str = DEFAULT_USER_AGENT


# =============================================================================
# JOB CONTEXT
# =============================================================================


@attrs.define
class JobContext:
    """
    Per-invocation context supplied by the job framework.

    Example:
        context = JobContext(
            secrets={"BASIC_USERNAME": "admin", "BASIC_PASSWORD": "..."},
            environment={"ADDRESS": "https://boundary.example.com"},
        )
        # From another thread:
        context.request_halt("timeout")
    """

    secrets: Mapping[str, str] = attrs.field(factory=dict, repr=False)
    environment: Mapping[str, str] = attrs.field(factory=dict)
    _halt_event: threading.Event = attrs.field(factory=threading.Event, repr=False)
    _halt_reason: Optional[str] = None

    @classmethod
    def from_environ(cls, environ: Optional[Mapping[str, str]] = None) -> JobContext:
        """
        Build a context from process environment variables.

        Secrets are read from BASIC_USERNAME / BASIC_PASSWORD and the
        controller address from ADDRESS.
        """
        environ = os.environ if environ is None else environ
        secrets = {
            name: environ[name]
            for name in (USERNAME_SECRET, PASSWORD_SECRET)
            if name in environ
        }
        environment = {}
        if ADDRESS_VARIABLE in environ:
            environment[ADDRESS_VARIABLE] = environ[ADDRESS_VARIABLE]
        return cls(secrets=secrets, environment=environment)

    @property
    def halt_requested(self) -> bool:
        return self._halt_event.is_set()

    @property
    def halt_reason(self) -> Optional[str]:
        return self._halt_reason

    def request_halt(self, reason: str = "halted") -> None:
        """Signal the running invocation to stop at the next step boundary."""
        if not self._halt_event.is_set():
            self._halt_reason = reason
            self._halt_event.set()
            logger.info("halt_requested", reason=reason)

    def wait(self, seconds: float) -> bool:
        """
        Sleep up to `seconds`, waking early on halt.

        Returns:
            True if a halt was requested
        """
        if seconds <= 0:
            return self.halt_requested
        return self._halt_event.wait(seconds)


# =============================================================================
# RESOLUTION
# =============================================================================


def resolve_credentials(context: JobContext) -> Credentials:
    """
    Read the Boundary login from the context secrets.

    Raises:
        ConfigurationError: if either secret is missing or empty
    """
    username = context.secrets.get(USERNAME_SECRET)
    password = context.secrets.get(PASSWORD_SECRET)
    if not username or not password:
        raise ConfigurationError(
            f"Missing required secrets: {USERNAME_SECRET} and {PASSWORD_SECRET}"
        )
    return Credentials(username=username, password=password)


def resolve_base_url(params: Mapping[str, Any], context: JobContext) -> str:
    """
    Controller address from params["address"], else the ADDRESS variable.

    A single trailing slash is removed.

    Raises:
        ConfigurationError: if neither source provides an address
    """
    address = params.get("address") or context.environment.get(ADDRESS_VARIABLE)
    if not address:
        raise ConfigurationError(
            "No URL specified. Provide address parameter or "
            f"{ADDRESS_VARIABLE} environment variable"
        )
    return address[:-1] if address.endswith("/") else address
