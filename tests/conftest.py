"""
Pytest configuration and shared fixtures for GroupRemover tests.
"""

import json
from typing import Any, Dict, List, Optional

import attrs
import httpx
import pytest

from groupremover.boundary.client import BoundaryClient
from groupremover.job.context import JobContext, RemoverConfig
from groupremover.job.remover import GroupMembershipRemover
from groupremover.transport.http import build_http_client

BASE_URL = "https://boundary.example.com"
GROUP_ID = "g_1234567890"
USER_ID = "u_1234567890"
AUTH_METHOD_ID = "ampw_1234567890"
USERNAME = "testuser"
PASSWORD = "testpass-Sup3rS3cret"
TOKEN = "at_T0k3n"


# =============================================================================
# FAKE BOUNDARY CONTROLLER
# =============================================================================


@attrs.define
class FakeBoundary:
    """
    In-memory Boundary controller served through httpx.MockTransport.

    Each endpoint replies with the configured status and JSON payload;
    every request is recorded for assertions.
    """

    token: Optional[str] = TOKEN
    version: Any = 5
    auth_status: int = 200
    group_status: int = 200
    remove_status: int = 200
    error_body: str = '{"kind": "Error", "message": "boom"}'
    raise_on: Optional[str] = None
    success_text: Optional[str] = None
    requests: List[httpx.Request] = attrs.Factory(list)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path.endswith(":authenticate"):
            step = "authenticate"
            status = self.auth_status
            payload: Dict[str, Any] = {"attributes": {}}
            if self.token is not None:
                payload["attributes"]["token"] = self.token
        elif path.endswith(":remove-members"):
            step = "remove"
            status = self.remove_status
            payload = {"id": GROUP_ID, "version": 6}
        else:
            step = "group"
            status = self.group_status
            payload = {"id": GROUP_ID, "name": "engineers"}
            if self.version is not None:
                payload["version"] = self.version

        if self.raise_on == step:
            raise httpx.ConnectError("connection refused", request=request)
        if status >= 300:
            return httpx.Response(status, text=self.error_body)
        if self.success_text is not None:
            return httpx.Response(status, text=self.success_text)
        return httpx.Response(status, json=payload)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def body(self, index: int) -> Dict[str, Any]:
        return json.loads(self.requests[index].content)


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def valid_params() -> Dict[str, str]:
    """Well-formed job parameters."""
    return {
        "groupId": GROUP_ID,
        "userId": USER_ID,
        "authMethodId": AUTH_METHOD_ID,
    }


@pytest.fixture
def job_context() -> JobContext:
    """Context with credentials and a default controller address."""
    return JobContext(
        secrets={"BASIC_USERNAME": USERNAME, "BASIC_PASSWORD": PASSWORD},
        environment={"ADDRESS": BASE_URL},
    )


@pytest.fixture
def boundary() -> FakeBoundary:
    """Fake controller that accepts every call."""
    return FakeBoundary()


@pytest.fixture
def fast_config() -> RemoverConfig:
    """Config without inter-step pauses."""
    return RemoverConfig(step_delay=0)


@pytest.fixture
def remover(boundary: FakeBoundary, fast_config: RemoverConfig) -> GroupMembershipRemover:
    """Remover wired to the fake controller."""
    return GroupMembershipRemover(config=fast_config, transport=boundary.transport)


@pytest.fixture
def boundary_client(boundary: FakeBoundary):
    """BoundaryClient wired to the fake controller."""
    with build_http_client(BASE_URL, transport=boundary.transport) as http:
        yield BoundaryClient(http)


# =============================================================================
# PYTEST MARKERS
# =============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
