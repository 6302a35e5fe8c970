"""Tests for file uploads, cloud functions and schema management."""

import pytest

from parse_rest.core.auth.context import AuthContext
from parse_rest.core.dto.result_dto import ErrorKind
from parse_rest.core.endpoints.files import FilesEndpoint
from parse_rest.core.endpoints.functions import FunctionsEndpoint
from parse_rest.core.endpoints.schemas import SchemasEndpoint
from parse_rest.core.errors.exceptions import QueryValidationError
from parse_rest.core.types import ParseFile
from tests.utils import APP_ID, MASTER_KEY, body_of, json_response


class TestFiles:
    @pytest.mark.asyncio
    async def test_upload(self, dispatcher, handler, auth):
        handler.queue(json_response(201, {"name": "abc_hello.txt", "url": "http://files/abc_hello.txt"}))

        result = await FilesEndpoint(dispatcher).upload_file(auth, "hello.txt", b"hello", "text/plain")

        assert result.is_ok()
        assert result.file == ParseFile("abc_hello.txt", "http://files/abc_hello.txt")
        request = handler.last
        assert request.url.path == "/parse/files/hello.txt"
        assert request.content == b"hello"
        assert request.headers["Content-Type"] == "text/plain"
        assert request.headers["X-Parse-Master-Key"] == MASTER_KEY

    @pytest.mark.asyncio
    async def test_upload_prefers_session(self, dispatcher, handler, auth):
        handler.queue(json_response(201, {"name": "n", "url": "u"}))

        await FilesEndpoint(dispatcher).upload_file(auth.with_session_token("r:tok"), "a.bin", b"\x00", "application/octet-stream")

        assert handler.last.headers["X-Parse-Session-Token"] == "r:tok"
        assert "X-Parse-Master-Key" not in handler.last.headers

    @pytest.mark.asyncio
    async def test_upload_bad_response(self, dispatcher, handler, auth):
        handler.queue(json_response(201, {"name": "n"}))

        result = await FilesEndpoint(dispatcher).upload_file(auth, "a.txt", b"a", "text/plain")

        assert result.detail.kind == ErrorKind.RESPONSE_DECODE_FAILED

    @pytest.mark.asyncio
    async def test_invalid_name(self, dispatcher, auth):
        with pytest.raises(QueryValidationError):
            await FilesEndpoint(dispatcher).upload_file(auth, "a/b.txt", b"a", "text/plain")


class TestFunctions:
    @pytest.mark.asyncio
    async def test_run(self, dispatcher, handler, auth):
        handler.queue(json_response(200, {"result": {"sum": 3}}))

        result = await FunctionsEndpoint(dispatcher).run_function(auth, "add", {"a": 1, "b": 2})

        assert result.is_ok()
        assert result.name == "add"
        assert result.result == {"sum": 3}
        assert handler.last.url.path == "/parse/functions/add"
        assert body_of(handler.last) == {"a": 1, "b": 2}

    @pytest.mark.asyncio
    async def test_null_result_is_valid(self, dispatcher, handler, auth):
        handler.queue(json_response(200, {"result": None}))

        result = await FunctionsEndpoint(dispatcher).run_function(auth, "noop")

        assert result.is_ok()
        assert result.result is None
        assert body_of(handler.last) == {}

    @pytest.mark.asyncio
    async def test_missing_result(self, dispatcher, handler, auth):
        handler.queue(json_response(200, {}))

        result = await FunctionsEndpoint(dispatcher).run_function(auth, "noop")

        assert result.detail.kind == ErrorKind.RESPONSE_DECODE_FAILED

    @pytest.mark.asyncio
    async def test_cloud_error(self, dispatcher, handler, auth):
        handler.queue(json_response(400, {"code": 141, "error": "boom"}))

        result = await FunctionsEndpoint(dispatcher).run_function(auth, "fails")

        assert result.detail.kind == ErrorKind.API_ERROR
        assert result.detail.code == 141


class TestSchemas:
    @pytest.mark.asyncio
    async def test_all_schemas(self, dispatcher, handler, auth):
        handler.queue(json_response(200, {"results": [{"className": "GameScore"}]}))

        result = await SchemasEndpoint(dispatcher).get_all_schemas(auth)

        assert result.results == [{"className": "GameScore"}]
        assert handler.last.url.path == "/parse/schemas"
        assert handler.last.headers["X-Parse-Master-Key"] == MASTER_KEY

    @pytest.mark.asyncio
    async def test_create_schema(self, dispatcher, handler, auth):
        handler.queue(json_response(200, {"className": "GameScore", "fields": {"score": {"type": "Number"}}}))

        result = await SchemasEndpoint(dispatcher).create_schema(
            auth,
            "GameScore",
            {"score": {"type": "Number"}},
            class_level_permissions={"find": {"*": True}},
        )

        assert result.is_ok()
        assert result.data["className"] == "GameScore"
        assert handler.last.method == "POST"
        assert handler.last.url.path == "/parse/schemas/GameScore"
        assert body_of(handler.last) == {
            "className": "GameScore",
            "fields": {"score": {"type": "Number"}},
            "classLevelPermissions": {"find": {"*": True}},
        }

    @pytest.mark.asyncio
    async def test_update_and_delete_schema(self, dispatcher, handler, auth):
        schemas = SchemasEndpoint(dispatcher)
        handler.queue(json_response(200, {"className": "GameScore"}), json_response(200, {}))

        updated = await schemas.update_schema(auth, "GameScore", {"fields": {"old": {"__op": "Delete"}}})
        deleted = await schemas.delete_schema(auth, "GameScore")

        assert updated.is_ok() and deleted.is_ok()
        assert body_of(handler.requests[0]) == {"className": "GameScore", "fields": {"old": {"__op": "Delete"}}}
        assert handler.requests[0].method == "PUT"
        assert handler.requests[1].method == "DELETE"

    @pytest.mark.asyncio
    async def test_schemas_need_master_key(self, dispatcher, handler):
        result = await SchemasEndpoint(dispatcher).get_schema(AuthContext(application_id=APP_ID), "GameScore")

        assert result.detail.kind == ErrorKind.MASTER_KEY_REQUIRED
        assert handler.requests == []
