"""Error mapping for Parse Server responses.

Turns a terminal HTTP response (status + decoded body) into an ErrorDetail.
The numeric protocol code takes precedence over the HTTP status; when the
code is unknown the HTTP status decides. The mapping is total: any input,
including bodies that are not objects at all, yields exactly one ErrorDetail.
"""

import logging
from typing import Any, Final

from parse_rest.core.dto.result_dto import ErrorDetail, ErrorKind

logger = logging.getLogger(__name__)

# =============================================================================
# PROTOCOL CODES
# =============================================================================

CONNECTION_FAILED: Final = 100
OBJECT_NOT_FOUND: Final = 101  # also returned for invalid login credentials
INVALID_QUERY: Final = 102
INVALID_FIELD_TYPE: Final = 111
OPERATION_FORBIDDEN: Final = 119
DUPLICATE_VALUE: Final = 137
USERNAME_TAKEN: Final = 202
EMAIL_TAKEN: Final = 203
INVALID_SESSION_TOKEN: Final = 209

PROTOCOL_CODE_KINDS: Final[dict[int, ErrorKind]] = {
    CONNECTION_FAILED: ErrorKind.CONNECTION_FAILED,
    OBJECT_NOT_FOUND: ErrorKind.OBJECT_NOT_FOUND,
    INVALID_QUERY: ErrorKind.INVALID_QUERY,
    INVALID_FIELD_TYPE: ErrorKind.INVALID_FIELD_TYPE,
    OPERATION_FORBIDDEN: ErrorKind.OPERATION_FORBIDDEN,
    DUPLICATE_VALUE: ErrorKind.DUPLICATE_VALUE,
    USERNAME_TAKEN: ErrorKind.USERNAME_TAKEN,
    EMAIL_TAKEN: ErrorKind.EMAIL_TAKEN,
    INVALID_SESSION_TOKEN: ErrorKind.INVALID_SESSION_TOKEN,
}


def kind_for_status(http_status: int) -> ErrorKind:
    """Fallback kind derived from the HTTP status alone."""
    if http_status >= 500:
        return ErrorKind.INTERNAL_SERVER_ERROR
    if http_status in (401, 403):
        return ErrorKind.AUTHENTICATION_ERROR
    if http_status == 404:
        return ErrorKind.OBJECT_NOT_FOUND
    return ErrorKind.API_ERROR


def _extract_code(body: Any) -> int | None:
    if not isinstance(body, dict):
        return None
    code = body.get("code")
    # bool is an int subclass but never a protocol code
    if isinstance(code, bool) or not isinstance(code, int):
        return None
    return code


def _extract_message(http_status: int, body: Any) -> str:
    if isinstance(body, dict):
        message = body.get("error")
        if isinstance(message, str) and message:
            return message
        if message is not None:
            return str(message)
    elif isinstance(body, str) and body:
        return body
    return f"HTTP {http_status} error"


def map_error(http_status: int, body: Any) -> ErrorDetail:
    """Map an HTTP status and decoded error body to an ErrorDetail.

    Args:
        http_status: HTTP status code of the terminal response.
        body: Decoded JSON body, ideally {"code": int, "error": str}. Any
            other shape is accepted and mapped by HTTP status.

    Returns:
        ErrorDetail with kind, protocol code (when present), message and
        the HTTP status.

    Example:
        >>> map_error(404, {"code": 101, "error": "Object not found."}).kind
        <ErrorKind.OBJECT_NOT_FOUND: 'object_not_found'>
        >>> map_error(503, {"code": 9999, "error": "boom"}).kind
        <ErrorKind.INTERNAL_SERVER_ERROR: 'internal_server_error'>
    """
    code = _extract_code(body)
    message = _extract_message(http_status, body)

    kind = PROTOCOL_CODE_KINDS.get(code) if code is not None else None
    if kind is None:
        kind = kind_for_status(http_status)

    context: dict[str, Any] = {}
    if isinstance(body, dict) and "body_snippet" in body:
        context["body_snippet"] = body["body_snippet"]

    logger.debug(
        "Mapped error status=%s code=%s to kind=%s", http_status, code, kind.value
    )
    return ErrorDetail(
        kind=kind,
        code=code,
        message=message,
        http_status=http_status,
        context=context,
    )


__all__ = ["map_error", "kind_for_status", "PROTOCOL_CODE_KINDS"]
