"""
Unit tests for groupremover.boundary.classifier module.
"""

import httpx
import pytest

from groupremover.boundary.classifier import (
    Operation,
    classify_failure,
    raise_for_status,
    wrap_unexpected,
)
from groupremover.core.exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    RateLimitError,
    ResponseError,
    ServerError,
    UnexpectedError,
)


class TestAuthenticateMapping:
    """Status mapping for the authenticate call."""

    def test_rate_limit(self):
        error = classify_failure(Operation.AUTHENTICATE, 429)
        assert isinstance(error, RateLimitError)
        assert error.retryable
        assert error.message == "Boundary API rate limit exceeded"

    @pytest.mark.parametrize("status", [401, 403])
    def test_bad_credentials(self, status):
        error = classify_failure(Operation.AUTHENTICATE, status)
        assert isinstance(error, AuthenticationError)
        assert error.message == "Invalid username or password"
        assert not error.retryable

    @pytest.mark.parametrize("status", [500, 502, 503, 599])
    def test_server_error(self, status):
        error = classify_failure(Operation.AUTHENTICATE, status)
        assert isinstance(error, ServerError)
        assert error.message == f"Boundary API server error: {status}"

    def test_other_status_includes_detail(self):
        error = classify_failure(
            Operation.AUTHENTICATE, 400, "Bad Request", '{"message": "bad attributes"}'
        )
        assert isinstance(error, ResponseError)
        assert error.message == (
            'Failed to authenticate: 400 Bad Request - {"message": "bad attributes"}'
        )
        assert error.code == 400
        assert error.operation == "authenticate"


class TestReadGroupMapping:
    """Status mapping for the group read."""

    def test_expired_token(self):
        error = classify_failure(Operation.READ_GROUP, 401)
        assert isinstance(error, AuthenticationError)
        assert error.message == "Invalid or expired authentication token"

    def test_not_found_names_group(self):
        error = classify_failure(Operation.READ_GROUP, 404, group_id="g_missing")
        assert isinstance(error, NotFoundError)
        assert error.message == "Group not found: g_missing"

    def test_forbidden_is_generic_fatal(self):
        error = classify_failure(Operation.READ_GROUP, 403, "Forbidden", "denied")
        assert isinstance(error, ResponseError)
        assert error.message.startswith("Failed to get group: 403 Forbidden")


class TestRemoveMemberMapping:
    """Status mapping for the removal."""

    def test_not_found_names_group_and_user(self):
        error = classify_failure(
            Operation.REMOVE_MEMBER, 404, group_id="g_1", user_id="u_1"
        )
        assert isinstance(error, NotFoundError)
        assert error.message == "Group or user not found: g_1 / u_1"

    def test_conflict_is_fatal(self):
        error = classify_failure(Operation.REMOVE_MEMBER, 409, "Conflict", "version mismatch")
        assert isinstance(error, ConflictError)
        assert not error.retryable
        assert "version mismatch" in error.message

    def test_other_status_prefix(self):
        error = classify_failure(Operation.REMOVE_MEMBER, 422, "Unprocessable Entity", "")
        assert error.message.startswith("Failed to remove user from group: 422")

    def test_long_body_truncated(self):
        error = classify_failure(Operation.REMOVE_MEMBER, 400, "Bad Request", "x" * 5000)
        assert len(error.message) < 700
        assert error.message.endswith("...(truncated)")


class TestRaiseForStatus:

    def test_success_passes(self):
        raise_for_status(Operation.READ_GROUP, httpx.Response(200, json={}))

    def test_failure_raises(self):
        with pytest.raises(NotFoundError):
            raise_for_status(
                Operation.READ_GROUP, httpx.Response(404, text="nope"), group_id="g_1"
            )


class TestWrapUnexpected:

    def test_tagged_error_passes_through(self):
        error = RateLimitError()
        assert wrap_unexpected(error) is error

    def test_untagged_error_wrapped_fatal(self):
        wrapped = wrap_unexpected(ConnectionError("connection reset"))
        assert isinstance(wrapped, UnexpectedError)
        assert wrapped.message == "Unexpected error: connection reset"
        assert not wrapped.retryable

    def test_empty_message_uses_type_name(self):
        wrapped = wrap_unexpected(KeyError())
        assert wrapped.message == "Unexpected error: KeyError"
