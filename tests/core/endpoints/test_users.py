"""Tests for user session flows."""

import pytest

from parse_rest.core.dto.result_dto import ErrorKind, ErrorOrigin
from parse_rest.core.endpoints.users import UsersEndpoint
from tests.utils import body_of, json_response


@pytest.fixture
def users(dispatcher):
    return UsersEndpoint(dispatcher)


class TestSignupAndLogin:
    @pytest.mark.asyncio
    async def test_signup(self, users, handler, auth):
        handler.queue(json_response(201, {"objectId": "u1", "sessionToken": "r:new", "createdAt": "t"}))

        result = await users.signup(auth, "alice", "secret", email="a@example.com", fields={"age": 30})

        assert result.is_ok()
        assert result.session_token == "r:new"
        assert result.auth.rest_api_key == auth.rest_api_key
        assert result.user == {
            "age": 30,
            "username": "alice",
            "email": "a@example.com",
            "objectId": "u1",
            "sessionToken": "r:new",
            "createdAt": "t",
        }
        assert auth.session_token is None
        assert handler.last.url.path == "/parse/users"
        assert body_of(handler.last) == {
            "age": 30,
            "username": "alice",
            "password": "secret",
            "email": "a@example.com",
        }

    @pytest.mark.asyncio
    async def test_signup_username_taken(self, users, handler, auth):
        handler.queue(json_response(400, {"code": 202, "error": "Account already exists for this username."}))

        result = await users.signup(auth, "alice", "secret")

        assert result.detail.kind == ErrorKind.USERNAME_TAKEN
        assert result.auth is None

    @pytest.mark.asyncio
    async def test_login(self, users, handler, auth):
        handler.queue(json_response(200, {"objectId": "u1", "username": "alice", "sessionToken": "r:tok"}))

        result = await users.login(auth, "alice", "secret")

        assert result.session_token == "r:tok"
        assert result.user["username"] == "alice"
        assert handler.last.method == "POST"
        assert handler.last.url.path == "/parse/login"
        assert body_of(handler.last) == {"username": "alice", "password": "secret"}

    @pytest.mark.asyncio
    async def test_login_invalid_credentials(self, users, handler, auth):
        handler.queue(json_response(404, {"code": 101, "error": "Invalid username/password."}))

        result = await users.login(auth, "alice", "wrong")

        assert result.detail.kind == ErrorKind.OBJECT_NOT_FOUND

    @pytest.mark.asyncio
    async def test_login_without_token_in_response(self, users, handler, auth):
        handler.queue(json_response(200, {"objectId": "u1"}))

        result = await users.login(auth, "alice", "secret")

        assert result.detail.kind == ErrorKind.RESPONSE_DECODE_FAILED


class TestSessions:
    @pytest.mark.asyncio
    async def test_logout_without_session(self, users, handler, auth):
        result = await users.logout(auth)

        assert result.detail.kind == ErrorKind.SESSION_TOKEN_MISSING
        assert result.detail.origin == ErrorOrigin.LOCAL
        assert handler.requests == []

    @pytest.mark.asyncio
    async def test_logout(self, users, handler, auth):
        session = auth.with_session_token("r:tok")

        result = await users.logout(session)

        assert result.is_ok()
        assert result.auth.session_token is None
        assert handler.last.headers["X-Parse-Session-Token"] == "r:tok"
        assert handler.last.url.path == "/parse/logout"

    @pytest.mark.asyncio
    async def test_me(self, users, handler, auth):
        handler.queue(json_response(200, {"objectId": "u1", "username": "alice"}))
        session = auth.with_session_token("r:tok")

        result = await users.me(session)

        assert result.user["username"] == "alice"
        assert result.auth == session
        assert handler.last.url.path == "/parse/users/me"

    @pytest.mark.asyncio
    async def test_me_without_session(self, users, handler, auth):
        result = await users.me(auth)
        assert result.detail.kind == ErrorKind.SESSION_TOKEN_MISSING
        assert handler.requests == []

    @pytest.mark.asyncio
    async def test_become(self, users, handler, auth):
        handler.queue(json_response(200, {"objectId": "u2", "username": "bob"}))

        result = await users.become(auth, "r:other")

        assert result.session_token == "r:other"
        assert handler.last.headers["X-Parse-Session-Token"] == "r:other"
        assert "X-Parse-REST-API-Key" not in handler.last.headers

    @pytest.mark.asyncio
    async def test_become_invalid_token(self, users, handler, auth):
        handler.queue(json_response(400, {"code": 209, "error": "Invalid session token"}))

        result = await users.become(auth, "r:bad")

        assert result.detail.kind == ErrorKind.INVALID_SESSION_TOKEN
        assert result.auth is None

    @pytest.mark.asyncio
    async def test_request_password_reset(self, users, handler, auth):
        result = await users.request_password_reset(auth, "a@example.com")

        assert result.is_ok()
        assert handler.last.url.path == "/parse/requestPasswordReset"
        assert body_of(handler.last) == {"email": "a@example.com"}
