"""RequestDispatcher - the single place where HTTP happens.

Every call goes through the same steps:

1. Resolve authentication headers (resolve_auth_headers). A failure here
   returns immediately and nothing is sent.
2. Build the URL under the API root and encode the JSON body for methods
   that carry one.
3. Perform exactly one HTTP exchange with httpx. There are no retries.
4. Turn the response into a ResponseResult: decoded JSON on 2xx, an
   ErrorDetail from map_error otherwise.

The dispatcher holds no credentials. The AuthContext is passed with every
call, so one dispatcher can serve any number of sessions.
"""

import json
import logging
from typing import Any

import httpx

from parse_rest.core.auth.context import DEFAULT_OPTIONS, AuthContext, RequestOptions
from parse_rest.core.auth.resolver import resolve_auth_headers
from parse_rest.core.dto.request_dto import CompiledRequest, ResponseResult
from parse_rest.core.dto.result_dto import ErrorDetail, ErrorKind
from parse_rest.core.errors.error_mapper import map_error
from parse_rest.core.errors.exceptions import ConfigurationError
from parse_rest.core.types import encode_value

logger = logging.getLogger(__name__)

API_ROOT = "parse"
DEFAULT_TIMEOUT = 30.0
BODY_SNIPPET_LENGTH = 100
BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})
JSON_CONTENT_TYPE = "application/json"


def normalize_server_url(server_url: str) -> str:
    """Normalise a configured server URL to scheme://host[:port][/prefix].

    A missing scheme becomes "http://", trailing slashes are dropped and a
    trailing "/parse" segment is stripped (the API root is added per call).

    Raises:
        ConfigurationError: If the URL is empty or has no host.

    Example:
        >>> normalize_server_url("localhost:1337/parse/")
        'http://localhost:1337'
    """
    if not isinstance(server_url, str) or not server_url.strip():
        raise ConfigurationError("Server URL must be a non-empty string", key="server_url")

    url = server_url.strip()
    if "://" not in url:
        url = f"http://{url}"
    url = url.rstrip("/")
    if url.endswith(f"/{API_ROOT}"):
        url = url[: -len(API_ROOT) - 1]

    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL as e:
        raise ConfigurationError(f"Invalid server URL {server_url!r}: {e}", key="server_url") from e
    if parsed.scheme not in ("http", "https") or not parsed.host:
        raise ConfigurationError(f"Invalid server URL {server_url!r}", key="server_url")
    return url


class RequestDispatcher:
    """Sends requests to a Parse Server and normalises the outcome.

    The dispatcher owns its httpx.AsyncClient unless one is injected; an
    injected client is never closed by the dispatcher.

    Example:
        >>> async with RequestDispatcher("http://localhost:1337/parse") as dispatcher:
        ...     result = await dispatcher.send("GET", "classes/GameScore", context)
    """

    def __init__(
        self,
        server_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Create a dispatcher.

        Args:
            server_url: Server base URL, with or without the "/parse" root.
            timeout: Per-request timeout in seconds (ignored when http_client is given).
            http_client: Optional preconfigured client, e.g. with a mock transport.
        """
        self._server_url = normalize_server_url(server_url)
        self._owns_client = http_client is None
        self._client = http_client if http_client is not None else httpx.AsyncClient(timeout=timeout)
        logger.debug(
            "RequestDispatcher created for %s (owns_client=%s)", self._server_url, self._owns_client
        )

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def server_url(self) -> str:
        """Normalised server URL (without the API root)."""
        return self._server_url

    @property
    def api_url(self) -> str:
        """Base URL every request path is appended to."""
        return f"{self._server_url}/{API_ROOT}"

    def build_url(self, path: str) -> str:
        """Absolute URL for a path relative to the API root."""
        return f"{self.api_url}/{path.lstrip('/')}"

    # =========================================================================
    # SENDING
    # =========================================================================

    async def send(
        self,
        method: str,
        path: str,
        context: AuthContext,
        *,
        params: tuple[tuple[str, str], ...] | list[tuple[str, str]] = (),
        body: Any = None,
        options: RequestOptions = DEFAULT_OPTIONS,
    ) -> ResponseResult:
        """Send one JSON request.

        Args:
            method: HTTP method.
            path: Path relative to the API root (e.g. "classes/GameScore").
            context: Credentials and stored session for this call.
            params: Ordered query parameters.
            body: JSON body, only sent for POST/PUT/PATCH.
            options: Per-call authentication options.

        Returns:
            ResponseResult with the decoded body or a typed failure.
        """
        method = method.upper()
        auth = resolve_auth_headers(context, options)
        if auth.is_error():
            return ResponseResult.fail(auth.detail)

        headers = dict(auth.headers)
        content = None
        if method in BODY_METHODS:
            headers["Content-Type"] = JSON_CONTENT_TYPE
            content = json.dumps(encode_value({} if body is None else body, path="body"))
        elif body is not None:
            logger.warning("Ignoring body for %s %s: method does not carry a body", method, path)

        return await self._exchange(method, path, headers, params, content)

    async def execute(self, request: CompiledRequest, context: AuthContext) -> ResponseResult:
        """Send a CompiledRequest."""
        return await self.send(
            request.method,
            request.path,
            context,
            params=request.params,
            body=request.body,
            options=request.options,
        )

    async def send_bytes(
        self,
        path: str,
        data: bytes,
        mime_type: str,
        context: AuthContext,
        *,
        options: RequestOptions = DEFAULT_OPTIONS,
    ) -> ResponseResult:
        """POST raw bytes with the given Content-Type (file uploads)."""
        auth = resolve_auth_headers(context, options)
        if auth.is_error():
            return ResponseResult.fail(auth.detail)

        headers = dict(auth.headers)
        headers["Content-Type"] = mime_type
        return await self._exchange("POST", path, headers, (), data)

    async def _exchange(
        self,
        method: str,
        path: str,
        headers: dict[str, str],
        params: tuple[tuple[str, str], ...] | list[tuple[str, str]],
        content: str | bytes | None,
    ) -> ResponseResult:
        url = self.build_url(path)
        logger.debug("%s %s params=%s", method, url, [name for name, _ in params])
        try:
            response = await self._client.request(
                method,
                url,
                params=list(params) or None,
                headers=headers,
                content=content,
            )
        except httpx.TimeoutException as e:
            logger.warning("Timeout on %s %s: %s", method, url, e)
            return ResponseResult.fail(
                ErrorDetail(
                    kind=ErrorKind.TRANSPORT_ERROR,
                    message=f"Request timed out: {e}",
                    context={"method": method, "path": path, "timeout": True},
                )
            )
        except httpx.RequestError as e:
            logger.warning("Transport error on %s %s: %s", method, url, e)
            return ResponseResult.fail(
                ErrorDetail(
                    kind=ErrorKind.TRANSPORT_ERROR,
                    message=f"Transport error: {e}",
                    context={"method": method, "path": path},
                )
            )

        logger.debug("%s %s -> %s", method, url, response.status_code)
        return self._process_response(response)

    # =========================================================================
    # RESPONSE HANDLING
    # =========================================================================

    def _process_response(self, response: httpx.Response) -> ResponseResult:
        status = response.status_code

        if response.is_success:
            if status == 204 or not response.content.strip():
                return ResponseResult.success(data={}, http_status=status)
            try:
                data = response.json()
            except ValueError as e:
                logger.error("Failed to decode %s response body: %s", status, e)
                return ResponseResult.fail(
                    ErrorDetail(
                        kind=ErrorKind.RESPONSE_DECODE_FAILED,
                        message=f"Response body is not valid JSON: {e}",
                        http_status=status,
                        context={"raw_body": response.text},
                    ),
                    http_status=status,
                )
            return ResponseResult.success(data=data, http_status=status)

        try:
            body = response.json()
        except ValueError:
            text = response.text
            body = {
                "code": status,
                "error": f"HTTP {status} with non-JSON body",
                "body_snippet": text[:BODY_SNIPPET_LENGTH],
            }

        detail = map_error(status, body)
        logger.warning("Request failed with HTTP %s: [%s] %s", status, detail.kind, detail.message)
        return ResponseResult.fail(detail, http_status=status)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def aclose(self) -> None:
        """Close the underlying client if the dispatcher created it."""
        if self._owns_client:
            await self._client.aclose()
            logger.debug("RequestDispatcher closed its HTTP client")

    async def __aenter__(self) -> "RequestDispatcher":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


__all__ = [
    "API_ROOT",
    "DEFAULT_TIMEOUT",
    "RequestDispatcher",
    "normalize_server_url",
]
