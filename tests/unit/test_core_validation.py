"""
Unit tests for groupremover.core.validation module.
"""

import pytest

from groupremover.core.exceptions import ValidationError
from groupremover.core.validation import is_valid_identifier, validate_inputs


class TestValidateInputs:
    """Tests for validate_inputs."""

    def test_valid_params(self, valid_params):
        request = validate_inputs(valid_params)
        assert request.group_id == valid_params["groupId"]
        assert request.user_id == valid_params["userId"]
        assert request.auth_method_id == valid_params["authMethodId"]

    def test_extra_params_ignored(self, valid_params):
        params = {**valid_params, "address": "https://other.example.com"}
        assert validate_inputs(params).group_id == valid_params["groupId"]

    @pytest.mark.parametrize("field", ["groupId", "userId", "authMethodId"])
    def test_missing_field(self, valid_params, field):
        del valid_params[field]
        with pytest.raises(ValidationError, match=f"Invalid or missing {field} parameter"):
            validate_inputs(valid_params)

    @pytest.mark.parametrize("field", ["groupId", "userId", "authMethodId"])
    def test_whitespace_field(self, valid_params, field):
        valid_params[field] = "   "
        with pytest.raises(ValidationError, match=field):
            validate_inputs(valid_params)

    @pytest.mark.parametrize("value", [None, 123, ["g_1"], {"id": "g_1"}, ""])
    def test_non_string_group_id(self, valid_params, value):
        valid_params["groupId"] = value
        with pytest.raises(ValidationError) as exc_info:
            validate_inputs(valid_params)
        assert exc_info.value.field_name == "groupId"

    def test_first_offending_field_reported(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_inputs({})
        assert exc_info.value.field_name == "groupId"

    def test_user_id_checked_before_auth_method(self, valid_params):
        valid_params["userId"] = ""
        valid_params["authMethodId"] = ""
        with pytest.raises(ValidationError) as exc_info:
            validate_inputs(valid_params)
        assert exc_info.value.field_name == "userId"

    def test_values_not_trimmed(self, valid_params):
        valid_params["groupId"] = " g_1 "
        assert validate_inputs(valid_params).group_id == " g_1 "

    def test_validation_error_is_fatal(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_inputs({})
        assert not exc_info.value.retryable


class TestIsValidIdentifier:

    def test_accepts_identifier(self):
        assert is_valid_identifier("g_1")

    @pytest.mark.parametrize("value", ["", " ", "\t\n", None, 0])
    def test_rejects(self, value):
        assert not is_valid_identifier(value)
