"""Tests for error mapping of server responses."""

import pytest

from parse_rest.core.dto.result_dto import ErrorKind, ErrorOrigin
from parse_rest.core.errors.error_mapper import PROTOCOL_CODE_KINDS, kind_for_status, map_error


class TestProtocolCodes:
    """Protocol code takes precedence over HTTP status."""

    @pytest.mark.parametrize(
        "code,kind",
        [
            (100, ErrorKind.CONNECTION_FAILED),
            (101, ErrorKind.OBJECT_NOT_FOUND),
            (102, ErrorKind.INVALID_QUERY),
            (111, ErrorKind.INVALID_FIELD_TYPE),
            (119, ErrorKind.OPERATION_FORBIDDEN),
            (137, ErrorKind.DUPLICATE_VALUE),
            (202, ErrorKind.USERNAME_TAKEN),
            (203, ErrorKind.EMAIL_TAKEN),
            (209, ErrorKind.INVALID_SESSION_TOKEN),
        ],
    )
    def test_known_codes(self, code, kind):
        detail = map_error(400, {"code": code, "error": "boom"})
        assert detail.kind == kind
        assert detail.code == code
        assert detail.message == "boom"
        assert detail.http_status == 400

    def test_table_is_complete(self):
        assert set(PROTOCOL_CODE_KINDS) == {100, 101, 102, 111, 119, 137, 202, 203, 209}

    def test_object_not_found_on_404(self):
        detail = map_error(404, {"code": 101, "error": "Object not found."})
        assert detail.kind == ErrorKind.OBJECT_NOT_FOUND
        assert detail.origin == ErrorOrigin.SERVER

    def test_code_wins_over_5xx_status(self):
        detail = map_error(500, {"code": 137, "error": "dup"})
        assert detail.kind == ErrorKind.DUPLICATE_VALUE


class TestStatusFallback:
    """Unknown or missing codes fall back to the HTTP status."""

    def test_unknown_code_with_5xx(self):
        detail = map_error(503, {"code": 9999, "error": "overloaded"})
        assert detail.kind == ErrorKind.INTERNAL_SERVER_ERROR
        assert detail.code == 9999
        assert detail.retryable

    @pytest.mark.parametrize("status", [401, 403])
    def test_auth_statuses(self, status):
        detail = map_error(status, {"error": "unauthorized"})
        assert detail.kind == ErrorKind.AUTHENTICATION_ERROR
        assert detail.code is None

    def test_404_without_code(self):
        assert map_error(404, {}).kind == ErrorKind.OBJECT_NOT_FOUND

    def test_other_status_is_api_error_with_raw_values(self):
        detail = map_error(400, {"code": 141, "error": "Cloud function failed"})
        assert detail.kind == ErrorKind.API_ERROR
        assert detail.code == 141
        assert detail.message == "Cloud function failed"
        assert not detail.retryable

    def test_kind_for_status(self):
        assert kind_for_status(500) == ErrorKind.INTERNAL_SERVER_ERROR
        assert kind_for_status(599) == ErrorKind.INTERNAL_SERVER_ERROR
        assert kind_for_status(401) == ErrorKind.AUTHENTICATION_ERROR
        assert kind_for_status(404) == ErrorKind.OBJECT_NOT_FOUND
        assert kind_for_status(418) == ErrorKind.API_ERROR


class TestTotality:
    """Any body shape yields exactly one ErrorDetail."""

    @pytest.mark.parametrize("body", [None, [], "plain text", 42, {"code": "101"}, {"code": True}])
    def test_odd_bodies(self, body):
        detail = map_error(400, body)
        assert detail.kind == ErrorKind.API_ERROR
        assert detail.code is None
        assert detail.message

    def test_string_body_becomes_message(self):
        assert map_error(400, "bad things").message == "bad things"

    def test_missing_message_uses_status(self):
        assert map_error(418, {"code": 1}).message == "HTTP 418 error"

    def test_non_string_message_is_stringified(self):
        assert map_error(400, {"error": {"nested": 1}}).message == "{'nested': 1}"

    def test_body_snippet_is_kept_in_context(self):
        detail = map_error(502, {"code": 502, "error": "HTTP 502 with non-JSON body", "body_snippet": "<html>"})
        assert detail.kind == ErrorKind.INTERNAL_SERVER_ERROR
        assert detail.context == {"body_snippet": "<html>"}
