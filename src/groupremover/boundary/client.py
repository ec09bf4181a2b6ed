"""
GroupRemover Boundary Client

Thin client for the three Boundary controller calls used to remove a
group member:

1. POST /v1/auth-methods/{id}:authenticate   -> bearer token
2. GET  /v1/groups/{id}                      -> group version
3. POST /v1/groups/{id}:remove-members       -> versioned removal

The version returned by (2) must accompany (3); Boundary rejects the
removal with 409 if the group changed in between.
"""

from __future__ import annotations

from typing import Any, Dict
from urllib.parse import quote

import attrs
import httpx
import structlog

from groupremover.boundary.classifier import Operation, raise_for_status
from groupremover.core.exceptions import ResponseError
from groupremover.core.types import Credentials


def _segment(value: str) -> str:
    """Percent-encode an identifier for use as a single path segment."""
    return quote(value, safe="")


def _bearer(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def _json_body(response: httpx.Response, operation: Operation) -> Dict[str, Any]:
    try:
        data = response.json()
    except ValueError as e:
        raise ResponseError(
            f"Failed to {operation.value}: response is not valid JSON",
            response.status_code,
            operation.value,
        ) from e
    if not isinstance(data, dict):
        raise ResponseError(
            f"Failed to {operation.value}: expected a JSON object",
            response.status_code,
            operation.value,
        )
    return data


@attrs.define
class BoundaryClient:
    """
    Boundary controller API client.

    The underlying httpx client must be bound to the controller address
    (see groupremover.transport.build_http_client).

    Example:
        with build_http_client("https://boundary.example.com") as http:
            api = BoundaryClient(http)
            token = api.authenticate("ampw_123", Credentials("admin", "pw"))
            version = api.get_group_version("g_123", token)
            api.remove_member("g_123", "u_123", version, token)
    """

    http: httpx.Client
    _logger: Any = attrs.Factory(lambda: structlog.get_logger())

    def authenticate(self, auth_method_id: str, credentials: Credentials) -> str:
        """
        Exchange credentials for a bearer token.

        Args:
            auth_method_id: Password auth method ID (e.g. "ampw_1234567890")
            credentials: Login name and password

        Returns:
            Bearer token from attributes.token

        Raises:
            AuthenticationError: 401/403
            RateLimitError, ServerError: 429, 5xx
            ResponseError: other status or no token in the reply
        """
        self._logger.info("authenticate_start", auth_method_id=auth_method_id)

        response = self.http.post(
            f"/v1/auth-methods/{_segment(auth_method_id)}:authenticate",
            json={
                "attributes": {
                    "login_name": credentials.username,
                    "password": credentials.password,
                }
            },
        )
        raise_for_status(Operation.AUTHENTICATE, response)

        attributes = _json_body(response, Operation.AUTHENTICATE).get("attributes")
        token = attributes.get("token") if isinstance(attributes, dict) else None
        if not isinstance(token, str) or not token:
            raise ResponseError(
                "No token returned from authentication",
                response.status_code,
                Operation.AUTHENTICATE.value,
            )

        self._logger.info("authenticate_success", auth_method_id=auth_method_id)
        return token

    def get_group_version(self, group_id: str, token: str) -> int:
        """
        Read a group and return its optimistic-concurrency version.

        Raises:
            AuthenticationError: 401
            NotFoundError: 404
            RateLimitError, ServerError: 429, 5xx
            ResponseError: other status or no usable version
        """
        self._logger.info("get_group_start", group_id=group_id)

        response = self.http.get(
            f"/v1/groups/{_segment(group_id)}",
            headers=_bearer(token),
        )
        raise_for_status(Operation.READ_GROUP, response, group_id=group_id)

        version = _json_body(response, Operation.READ_GROUP).get("version")
        # bool is an int subclass; a JSON true is not a version
        if isinstance(version, bool) or not isinstance(version, int) or version < 1:
            raise ResponseError(
                "No version returned from group",
                response.status_code,
                Operation.READ_GROUP.value,
            )

        self._logger.info("get_group_success", group_id=group_id, version=version)
        return version

    def remove_member(
        self,
        group_id: str,
        user_id: str,
        version: int,
        token: str,
    ) -> bool:
        """
        Remove a single member from a group at the given version.

        Returns:
            True on any 2xx; the reply body is not inspected

        Raises:
            AuthenticationError: 401
            NotFoundError: 404
            ConflictError: 409 (not a member, or stale version)
            RateLimitError, ServerError: 429, 5xx
            ResponseError: other status
        """
        self._logger.info(
            "remove_member_request",
            group_id=group_id,
            user_id=user_id,
            version=version,
        )

        response = self.http.post(
            f"/v1/groups/{_segment(group_id)}:remove-members",
            headers=_bearer(token),
            json={"version": version, "member_ids": [user_id]},
        )
        raise_for_status(
            Operation.REMOVE_MEMBER,
            response,
            group_id=group_id,
            user_id=user_id,
        )
        return True
