"""User session flows.

Flows never change the AuthContext they are given. A successful signup,
login, logout or become returns the context to use from then on in
SessionResult.auth; the caller (normally ParseClient) decides to adopt it.
"""

import logging
from typing import Any

from parse_rest.core.auth.context import AuthContext, RequestOptions
from parse_rest.core.dispatcher.dispatcher import RequestDispatcher
from parse_rest.core.dto.auth_dto import SessionResult
from parse_rest.core.dto.request_dto import ResponseResult
from parse_rest.core.dto.result_dto import ErrorDetail, ErrorKind
from parse_rest.core.errors.exceptions import QueryValidationError

logger = logging.getLogger(__name__)


def _session_missing(operation: str) -> ErrorDetail:
    return ErrorDetail(
        kind=ErrorKind.SESSION_TOKEN_MISSING,
        message=f"{operation} requires a session token, but none is set.",
    )


def _token_missing(http_status: int | None) -> ErrorDetail:
    return ErrorDetail(
        kind=ErrorKind.RESPONSE_DECODE_FAILED,
        message="Response has no 'sessionToken'",
        http_status=http_status,
    )


def _require_text(name: str, value: Any) -> None:
    if not isinstance(value, str) or not value:
        raise QueryValidationError(f"{name} must be a non-empty string", field=name)


class UsersEndpoint:
    """Signup, login, logout, current user, become and password reset."""

    def __init__(self, dispatcher: RequestDispatcher):
        self._dispatcher = dispatcher

    async def signup(
        self,
        context: AuthContext,
        username: str,
        password: str,
        *,
        email: str | None = None,
        fields: dict[str, Any] | None = None,
    ) -> SessionResult:
        """Create a user and start a session for it.

        Args:
            context: Current credentials.
            username: New username.
            password: New password.
            email: Optional email address.
            fields: Extra user fields.

        Returns:
            SessionResult whose auth carries the new session token.
        """
        _require_text("username", username)
        _require_text("password", password)
        body: dict[str, Any] = dict(fields or {})
        body.update({"username": username, "password": password})
        if email is not None:
            body["email"] = email

        response = await self._dispatcher.send("POST", "users", context, body=body)
        if response.is_error():
            return SessionResult.fail(response.detail)

        token = response.data.get("sessionToken") if isinstance(response.data, dict) else None
        if not isinstance(token, str):
            return SessionResult.fail(_token_missing(response.http_status))

        user = {key: value for key, value in body.items() if key != "password"}
        user.update(response.data)
        logger.info("Signed up user %s", username)
        return SessionResult.success(user=user, auth=context.with_session_token(token))

    async def login(self, context: AuthContext, username: str, password: str) -> SessionResult:
        """Log in with username and password.

        Invalid credentials come back from the server as OBJECT_NOT_FOUND.
        """
        _require_text("username", username)
        _require_text("password", password)
        response = await self._dispatcher.send(
            "POST", "login", context, body={"username": username, "password": password}
        )
        if response.is_error():
            logger.info("Login failed for %s: %s", username, response.detail.kind)
            return SessionResult.fail(response.detail)

        token = response.data.get("sessionToken") if isinstance(response.data, dict) else None
        if not isinstance(token, str):
            return SessionResult.fail(_token_missing(response.http_status))

        logger.info("Logged in user %s", username)
        return SessionResult.success(user=response.data, auth=context.with_session_token(token))

    async def logout(self, context: AuthContext) -> SessionResult:
        """Invalidate the current session on the server.

        Fails locally with SESSION_TOKEN_MISSING when no session is stored.
        """
        if context.session_token is None:
            return SessionResult.fail(_session_missing("Logout"))

        response = await self._dispatcher.send("POST", "logout", context)
        if response.is_error():
            return SessionResult.fail(response.detail)

        logger.info("Logged out")
        return SessionResult.success(user={}, auth=context.without_session())

    async def me(self, context: AuthContext) -> SessionResult:
        """Fetch the user that owns the current session."""
        if context.session_token is None:
            return SessionResult.fail(_session_missing("Fetching the current user"))

        response = await self._dispatcher.send("GET", "users/me", context)
        if response.is_error():
            return SessionResult.fail(response.detail)
        if not isinstance(response.data, dict):
            return SessionResult.fail(_token_missing(response.http_status))
        return SessionResult.success(user=response.data, auth=context)

    async def become(self, context: AuthContext, session_token: str) -> SessionResult:
        """Validate a session token and switch to it.

        The token is only adopted if the server accepts it.
        """
        _require_text("session_token", session_token)
        response = await self._dispatcher.send(
            "GET",
            "users/me",
            context,
            options=RequestOptions(session_token_override=session_token),
        )
        if response.is_error():
            return SessionResult.fail(response.detail)
        if not isinstance(response.data, dict):
            return SessionResult.fail(_token_missing(response.http_status))

        logger.info("Switched to session of user %s", response.data.get("username"))
        return SessionResult.success(user=response.data, auth=context.with_session_token(session_token))

    async def request_password_reset(self, context: AuthContext, email: str) -> ResponseResult:
        """Ask the server to email a password reset link."""
        _require_text("email", email)
        return await self._dispatcher.send("POST", "requestPasswordReset", context, body={"email": email})


__all__ = ["UsersEndpoint"]
