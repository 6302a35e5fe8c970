"""Authentication result DTOs.

Defines typed result classes for credential resolution and for the user
session flows (signup, login, logout, become).
"""

from typing import Any

from pydantic import Field

from parse_rest.core.dto.result_dto import BaseResult


class AuthResult(BaseResult):
    """Result of resolving authentication headers.

    [Result Pattern] Check result.is_ok() before using result.headers.

    Attributes:
        headers: Header name → value, always including the application id.
        credential: Name of the primary credential header, None if anonymous.

    Status codes:
        - success: Headers resolved
        - error + detail(MASTER_KEY_REQUIRED): Master key requested but not configured
    """

    headers: dict[str, str] = Field(default_factory=dict, description="Resolved headers")
    credential: str | None = Field(default=None, description="Primary credential header")


class SessionResult(BaseResult):
    """Result of a session-changing user flow.

    [Result Pattern] Check result.is_ok() before using result.user / result.auth.

    Attributes:
        user: User payload returned by the server (empty for logout).
        auth: The AuthContext to use from now on. On failure this is None and
            the caller's existing context stays valid.

    Status codes:
        - success: Flow completed, auth carries the new session (or none after logout)
        - error + detail(SESSION_TOKEN_MISSING): logout/me without a session
        - error + detail(OBJECT_NOT_FOUND): invalid login credentials
        - error + detail(USERNAME_TAKEN / EMAIL_TAKEN): signup conflicts
    """

    user: dict[str, Any] = Field(default_factory=dict, description="User payload")
    auth: Any = Field(default=None, description="Updated AuthContext")

    @property
    def session_token(self) -> str | None:
        """Session token of the updated context, if any."""
        if self.auth is None:
            return None
        return self.auth.session_token


__all__ = ["AuthResult", "SessionResult"]
