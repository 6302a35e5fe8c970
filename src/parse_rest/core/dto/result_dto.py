"""Base result types for parse-rest operations.

Provides a consistent pattern for returning operation results across the
client. Every failure a caller can reasonably expect (missing credentials,
network trouble, a server-reported error, an undecodable body) is returned
as a Result with status="error" and a typed ErrorDetail, while programming
errors (invalid builder input, bad configuration) raise exceptions.

This design:
- Keeps expected failures cheap and inspectable (no stack trace creation)
- Lets callers tell "fix the call" apart from "retry later" via ErrorDetail.origin
- Maintains consistency across the dispatcher, query executor and endpoints
"""

from enum import StrEnum
from typing import Any, Literal, Self

from pydantic import BaseModel, ConfigDict, Field

from parse_rest.core.errors.exceptions import ParseApiError


class ErrorKind(StrEnum):
    """Closed set of failure kinds surfaced by the client."""

    # Server-reported protocol codes
    CONNECTION_FAILED = "connection_failed"
    OBJECT_NOT_FOUND = "object_not_found"
    INVALID_QUERY = "invalid_query"
    INVALID_FIELD_TYPE = "invalid_field_type"
    OPERATION_FORBIDDEN = "operation_forbidden"
    DUPLICATE_VALUE = "duplicate_value"
    USERNAME_TAKEN = "username_taken"
    EMAIL_TAKEN = "email_taken"
    INVALID_SESSION_TOKEN = "invalid_session_token"

    # HTTP status fallbacks
    INTERNAL_SERVER_ERROR = "internal_server_error"
    AUTHENTICATION_ERROR = "authentication_error"
    API_ERROR = "api_error"

    # Raised before any bytes are sent
    MASTER_KEY_REQUIRED = "master_key_required"
    SESSION_TOKEN_MISSING = "session_token_missing"

    # Transport and decoding
    TRANSPORT_ERROR = "transport_error"
    RESPONSE_DECODE_FAILED = "response_decode_failed"


class ErrorOrigin(StrEnum):
    """Where a failure originated."""

    LOCAL = "local"
    TRANSPORT = "transport"
    SERVER = "server"
    DECODE = "decode"


_LOCAL_KINDS = frozenset({ErrorKind.MASTER_KEY_REQUIRED, ErrorKind.SESSION_TOKEN_MISSING})


class ErrorDetail(BaseModel):
    """Structured, immutable description of a failed operation.

    Attributes:
        kind: Machine-readable failure kind.
        code: Numeric protocol code reported by the server, if any.
        message: Human-readable description.
        http_status: HTTP status of the terminal response, if one was received.
        context: Additional diagnostic data (safe to log/serialize).
    """

    model_config = ConfigDict(frozen=True)

    kind: ErrorKind = Field(description="Failure kind")
    code: int | None = Field(default=None, description="Protocol error code")
    message: str = Field(description="Human-readable failure description")
    http_status: int | None = Field(default=None, description="HTTP status code")
    context: dict[str, Any] = Field(default_factory=dict, description="Diagnostic context")

    @property
    def origin(self) -> ErrorOrigin:
        """Classify the failure as local, transport, server or decode."""
        if self.kind in _LOCAL_KINDS:
            return ErrorOrigin.LOCAL
        if self.kind == ErrorKind.TRANSPORT_ERROR:
            return ErrorOrigin.TRANSPORT
        if self.kind == ErrorKind.RESPONSE_DECODE_FAILED:
            return ErrorOrigin.DECODE
        return ErrorOrigin.SERVER

    @property
    def retryable(self) -> bool:
        """Hint whether repeating the identical call later may succeed."""
        if self.origin == ErrorOrigin.TRANSPORT:
            return True
        return self.kind in (ErrorKind.CONNECTION_FAILED, ErrorKind.INTERNAL_SERVER_ERROR)


class BaseResult(BaseModel):
    """Base class for all parse-rest operation results.

    Pattern:
    - status="success" → operation succeeded, specific fields populated
    - status="error" → expected failure, detail field contains the ErrorDetail

    Use is_ok()/is_error() for clear status checks.
    Subclasses add operation-specific fields (results, count, user, etc.).

    Example:
        >>> result = await client.find(query)
        >>> if result.is_ok():
        ...     print(len(result.results))
        >>> else:
        ...     print(f"Error [{result.detail.kind}]: {result.detail.message}")
    """

    status: Literal["success", "error"] = Field(default="success", description="Operation status")
    detail: ErrorDetail | None = Field(default=None, description="Failure details (error only)")

    model_config = ConfigDict(extra="forbid")

    def is_ok(self) -> bool:
        """Check if operation succeeded."""
        return self.status == "success"

    def is_error(self) -> bool:
        """Check if operation failed with an expected error."""
        return self.status == "error"

    def raise_for_error(self) -> Self:
        """Return self on success, raise ParseApiError on failure.

        Raises:
            ParseApiError: If the result carries an error detail.
        """
        if self.is_error():
            raise ParseApiError(self.detail)
        return self

    @classmethod
    def success(cls, **kwargs: Any) -> Self:
        """Factory method for successful result.

        Args:
            **kwargs: Subclass-specific fields.

        Returns:
            Result instance with status="success".
        """
        return cls(status="success", detail=None, **kwargs)

    @classmethod
    def fail(cls, detail: ErrorDetail, **kwargs: Any) -> Self:
        """Factory method for expected failure result.

        Args:
            detail: Required error details describing the failure.
            **kwargs: Subclass-specific fields (use defaults).

        Returns:
            Result instance with status="error".

        Example:
            >>> CountResult.fail(ErrorDetail(
            ...     kind=ErrorKind.MASTER_KEY_REQUIRED,
            ...     message="Master key is required but not configured",
            ... ))
        """
        return cls(status="error", detail=detail, **kwargs)


__all__ = ["BaseResult", "ErrorDetail", "ErrorKind", "ErrorOrigin"]
