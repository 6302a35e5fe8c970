"""Authentication context values.

AuthContext is an immutable value: session changes (login, signup, logout,
become) produce a new AuthContext rather than mutating a shared object, so
whoever owns the value decides when a new session takes effect.
"""

from dataclasses import dataclass, replace

from parse_rest.core.errors.exceptions import ConfigurationError


@dataclass(frozen=True, slots=True)
class AuthContext:
    """Credentials available to a client.

    Attributes:
        application_id: Tenant key sent with every request.
        master_key: Elevated credential bypassing ACLs and class-level permissions.
        javascript_key: Optional JavaScript key.
        rest_api_key: Optional REST API key.
        session_token: Current end-user session, set by login/signup/become.
    """

    application_id: str
    master_key: str | None = None
    javascript_key: str | None = None
    rest_api_key: str | None = None
    session_token: str | None = None

    def __post_init__(self) -> None:
        """Reject an empty application identifier."""
        if not isinstance(self.application_id, str) or not self.application_id.strip():
            raise ConfigurationError(
                f"Invalid application id: {self.application_id!r}", key="application_id"
            )

    @property
    def is_authenticated(self) -> bool:
        """True if a user session token is stored."""
        return self.session_token is not None

    @property
    def has_master_key(self) -> bool:
        """True if a master key is configured."""
        return self.master_key is not None

    def with_session_token(self, session_token: str) -> "AuthContext":
        """Return a copy carrying the given session token."""
        return replace(self, session_token=session_token)

    def without_session(self) -> "AuthContext":
        """Return a copy with the session token cleared."""
        return replace(self, session_token=None)

    def __repr__(self) -> str:
        """Represent the context without leaking secrets."""
        return (
            f"AuthContext(application_id={self.application_id!r}, "
            f"master_key={mask_secret(self.master_key)!r}, "
            f"javascript_key={mask_secret(self.javascript_key)!r}, "
            f"rest_api_key={mask_secret(self.rest_api_key)!r}, "
            f"session_token={mask_secret(self.session_token)!r})"
        )


@dataclass(frozen=True, slots=True)
class RequestOptions:
    """Per-call authentication options.

    Attributes:
        use_master_key: Require the master key for this call.
        session_token_override: Session token to use for this call only,
            outranking every other credential.
    """

    use_master_key: bool = False
    session_token_override: str | None = None


#: Options for a call that relies on the ambient credentials.
DEFAULT_OPTIONS = RequestOptions()

#: Options for a call that requires the master key.
MASTER_KEY_OPTIONS = RequestOptions(use_master_key=True)


def mask_secret(secret: str | None) -> str | None:
    """Mask a credential for logging, keeping its first four characters."""
    if secret is None:
        return None
    if len(secret) <= 4:
        return "****"
    return f"{secret[:4]}****"


__all__ = [
    "AuthContext",
    "RequestOptions",
    "DEFAULT_OPTIONS",
    "MASTER_KEY_OPTIONS",
    "mask_secret",
]
