"""Tests for the ParseClient facade."""

import pytest

from parse_rest.core.client import ParseClient
from parse_rest.core.dto.result_dto import ErrorKind
from parse_rest.core.errors.exceptions import ConfigurationError, ParseApiError
from parse_rest.core.query.query import Query
from tests.utils import APP_ID, MASTER_KEY, json_response, params_of


class TestConstruction:
    def test_direct(self, client):
        assert client.auth.application_id == APP_ID
        assert client.session_token is None
        assert client.dispatcher.api_url == "http://localhost:1337/parse"

    @pytest.mark.asyncio
    async def test_create_from_config(self, clean_env, http_client):
        client = await ParseClient.create(
            config={"parse": {"server_url": "example.com/parse", "application_id": "cfg-app", "timeout": 5}},
            http_client=http_client,
        )

        assert client.auth.application_id == "cfg-app"
        assert client.auth.master_key is None
        assert client.dispatcher.server_url == "http://example.com"
        assert client.settings.timeout == 5.0

    @pytest.mark.asyncio
    async def test_create_from_env(self, clean_env, http_client):
        clean_env.setenv("PARSE_SERVER_URL", "http://env-host:1337/parse")
        clean_env.setenv("PARSE_APP_ID", "env-app")
        clean_env.setenv("PARSE_MASTER_KEY", "env-master")

        client = await ParseClient.create(http_client=http_client)

        assert client.auth.application_id == "env-app"
        assert client.auth.has_master_key
        assert client.dispatcher.server_url == "http://env-host:1337"

    @pytest.mark.asyncio
    async def test_create_missing_settings(self, clean_env):
        with pytest.raises(ConfigurationError, match="server_url"):
            await ParseClient.create(config={"parse": {"application_id": "x"}})


class TestQueries:
    def test_query_factory(self, client):
        query = client.query("GameScore", use_master_key=True)
        assert isinstance(query, Query)
        assert query.uses_master_key

    @pytest.mark.asyncio
    async def test_find_and_raise_for_error(self, client, handler):
        handler.queue(
            json_response(200, {"results": [{"objectId": "a"}]}),
            json_response(400, {"code": 102, "error": "bad"}),
        )

        ok = await client.find(client.query("GameScore").limit(1))
        failed = await client.find(client.query("GameScore"))

        assert ok.raise_for_error().results == [{"objectId": "a"}]
        with pytest.raises(ParseApiError, match="invalid_query"):
            failed.raise_for_error()

    @pytest.mark.asyncio
    async def test_count_and_distinct(self, client, handler):
        handler.queue(
            json_response(200, {"results": [], "count": 7}),
            json_response(200, {"results": [{"objectId": "x"}]}),
        )

        count = await client.count(client.query("GameScore"))
        distinct = await client.distinct(client.query("GameScore"), "playerName")

        assert count.count == 7
        assert distinct.values == ["x"]
        assert handler.requests[1].headers["X-Parse-Master-Key"] == MASTER_KEY

    @pytest.mark.asyncio
    async def test_raw_request(self, client, handler):
        handler.queue(json_response(200, {"results": []}))

        result = await client.request("GET", "classes/_Role", params=[("limit", "5")], use_master_key=True)

        assert result.is_ok()
        assert params_of(handler.last) == [("limit", "5")]
        assert handler.last.headers["X-Parse-Master-Key"] == MASTER_KEY


class TestSessionAdoption:
    @pytest.mark.asyncio
    async def test_login_then_requests_use_session(self, client, handler):
        handler.queue(json_response(200, {"objectId": "u1", "sessionToken": "r:tok"}))

        result = await client.login("alice", "secret")
        await client.find(client.query("GameScore"))

        assert result.is_ok()
        assert client.session_token == "r:tok"
        assert handler.last.headers["X-Parse-Session-Token"] == "r:tok"

    @pytest.mark.asyncio
    async def test_failed_login_keeps_context(self, client, handler):
        before = client.auth
        handler.queue(json_response(404, {"code": 101, "error": "Invalid username/password."}))

        result = await client.login("alice", "wrong")

        assert result.detail.kind == ErrorKind.OBJECT_NOT_FOUND
        assert client.auth is before

    @pytest.mark.asyncio
    async def test_logout_clears_session(self, client, handler):
        handler.queue(json_response(201, {"objectId": "u1", "sessionToken": "r:new"}))
        await client.signup("bob", "pw")
        assert client.session_token == "r:new"

        result = await client.logout()

        assert result.is_ok()
        assert client.session_token is None

    @pytest.mark.asyncio
    async def test_become(self, client, handler):
        handler.queue(json_response(200, {"objectId": "u9", "username": "carol"}))

        await client.become("r:carol")
        me = await client.me()

        assert client.session_token == "r:carol"
        assert me.is_ok()
        assert handler.last.headers["X-Parse-Session-Token"] == "r:carol"


class TestResourceShortcuts:
    @pytest.mark.asyncio
    async def test_object_lifecycle(self, client, handler):
        handler.queue(
            json_response(201, {"objectId": "abc", "createdAt": "t1"}),
            json_response(200, {"objectId": "abc", "score": 1}),
            json_response(200, {"updatedAt": "t2"}),
        )

        created = await client.create_object("GameScore", {"score": 1})
        fetched = await client.retrieve_object("GameScore", created.object_id)
        updated = await client.update_object("GameScore", "abc", {"score": 2})
        deleted = await client.delete_object("GameScore", "abc", use_master_key=True)

        assert fetched.data["score"] == 1
        assert updated.data == {"updatedAt": "t2"}
        assert deleted.is_ok()
        assert [r.method for r in handler.requests] == ["POST", "GET", "PUT", "DELETE"]

    @pytest.mark.asyncio
    async def test_function_and_file(self, client, handler):
        handler.queue(
            json_response(200, {"result": "pong"}),
            json_response(201, {"name": "f.txt", "url": "http://files/f.txt"}),
        )

        pong = await client.run_function("ping")
        uploaded = await client.upload_file("f.txt", b"data", "text/plain")

        assert pong.result == "pong"
        assert uploaded.file.url == "http://files/f.txt"

    @pytest.mark.asyncio
    async def test_context_manager_leaves_injected_client_open(self, http_client):
        async with ParseClient("http://localhost:1337", APP_ID, http_client=http_client) as client:
            assert client.auth.application_id == APP_ID
        assert not http_client.is_closed
