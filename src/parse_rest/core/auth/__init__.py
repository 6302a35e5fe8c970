"""Credential handling: AuthContext values and per-request header resolution."""

from parse_rest.core.auth.context import (
    DEFAULT_OPTIONS,
    MASTER_KEY_OPTIONS,
    AuthContext,
    RequestOptions,
    mask_secret,
)
from parse_rest.core.auth.resolver import (
    APPLICATION_ID_HEADER,
    JAVASCRIPT_KEY_HEADER,
    MASTER_KEY_HEADER,
    REST_API_KEY_HEADER,
    SESSION_TOKEN_HEADER,
    resolve_auth_headers,
)

__all__ = [
    "AuthContext",
    "RequestOptions",
    "DEFAULT_OPTIONS",
    "MASTER_KEY_OPTIONS",
    "mask_secret",
    "resolve_auth_headers",
    "APPLICATION_ID_HEADER",
    "SESSION_TOKEN_HEADER",
    "MASTER_KEY_HEADER",
    "JAVASCRIPT_KEY_HEADER",
    "REST_API_KEY_HEADER",
]
