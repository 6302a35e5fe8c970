"""Per-request credential resolution.

resolve_auth_headers() picks exactly one primary credential for a request,
first match wins:

1. session token override supplied with the call
2. master key, when the call asks for it (fails if none is configured)
3. the stored session token
4. the JavaScript key
5. the REST API key
6. nothing (anonymous call)

The application id header is attached in every case. The function is pure:
it never touches the network and never changes the AuthContext.
"""

import logging
from typing import Final

from parse_rest.core.auth.context import AuthContext, RequestOptions, mask_secret
from parse_rest.core.dto.auth_dto import AuthResult
from parse_rest.core.dto.result_dto import ErrorDetail, ErrorKind

logger = logging.getLogger(__name__)

APPLICATION_ID_HEADER: Final = "X-Parse-Application-Id"
SESSION_TOKEN_HEADER: Final = "X-Parse-Session-Token"
MASTER_KEY_HEADER: Final = "X-Parse-Master-Key"
JAVASCRIPT_KEY_HEADER: Final = "X-Parse-Javascript-Key"
REST_API_KEY_HEADER: Final = "X-Parse-REST-API-Key"

CREDENTIAL_HEADERS: Final = (
    SESSION_TOKEN_HEADER,
    MASTER_KEY_HEADER,
    JAVASCRIPT_KEY_HEADER,
    REST_API_KEY_HEADER,
)


def resolve_auth_headers(context: AuthContext, options: RequestOptions) -> AuthResult:
    """Resolve the authentication headers for one request.

    Args:
        context: Configured credentials and stored session.
        options: Per-call options (master key flag, session override).

    Returns:
        AuthResult with the headers, or a failed result with
        ErrorKind.MASTER_KEY_REQUIRED when the master key is requested but
        not configured.

    Example:
        >>> ctx = AuthContext(application_id="app", master_key="mk")
        >>> opts = RequestOptions(use_master_key=True, session_token_override="r:abc")
        >>> resolve_auth_headers(ctx, opts).credential
        'X-Parse-Session-Token'
    """
    headers = {APPLICATION_ID_HEADER: context.application_id}

    if options.session_token_override is not None:
        credential, secret = SESSION_TOKEN_HEADER, options.session_token_override
    elif options.use_master_key:
        if context.master_key is None:
            logger.warning("Master key requested for operation but not configured.")
            return AuthResult.fail(
                ErrorDetail(
                    kind=ErrorKind.MASTER_KEY_REQUIRED,
                    message="Master key is required for this operation but not configured.",
                )
            )
        credential, secret = MASTER_KEY_HEADER, context.master_key
    elif context.session_token is not None:
        credential, secret = SESSION_TOKEN_HEADER, context.session_token
    elif context.javascript_key is not None:
        credential, secret = JAVASCRIPT_KEY_HEADER, context.javascript_key
    elif context.rest_api_key is not None:
        credential, secret = REST_API_KEY_HEADER, context.rest_api_key
    else:
        logger.debug("No credential configured; sending anonymous request.")
        return AuthResult.success(headers=headers, credential=None)

    headers[credential] = secret
    logger.debug("Resolved credential %s=%s", credential, mask_secret(secret))
    return AuthResult.success(headers=headers, credential=credential)


__all__ = [
    "resolve_auth_headers",
    "APPLICATION_ID_HEADER",
    "SESSION_TOKEN_HEADER",
    "MASTER_KEY_HEADER",
    "JAVASCRIPT_KEY_HEADER",
    "REST_API_KEY_HEADER",
    "CREDENTIAL_HEADERS",
]
