"""Request DTOs.

CompiledRequest describes one HTTP exchange before it is sent; ResponseResult
is what the dispatcher hands back after it.
"""

from dataclasses import dataclass, field
from typing import Any

from pydantic import Field

from parse_rest.core.auth.context import DEFAULT_OPTIONS, RequestOptions
from parse_rest.core.dto.result_dto import BaseResult


@dataclass(frozen=True, slots=True)
class CompiledRequest:
    """A fully compiled request, ready for the dispatcher.

    Attributes:
        method: HTTP method ("GET", "POST", ...).
        path: Path relative to the API root (e.g. "classes/GameScore").
        params: Ordered query parameters.
        body: Optional JSON body.
        options: Authentication options for this call.
    """

    method: str
    path: str
    params: tuple[tuple[str, str], ...] = ()
    body: Any = None
    options: RequestOptions = field(default=DEFAULT_OPTIONS)


class ResponseResult(BaseResult):
    """Result of a single HTTP exchange.

    [Result Pattern] Check result.is_ok() before using result.data.

    Attributes:
        data: Decoded JSON body ({} for 204 / empty bodies).
        http_status: HTTP status of the response, None if nothing was received.

    Status codes:
        - success: 2xx response decoded
        - error + detail(MASTER_KEY_REQUIRED): rejected before sending
        - error + detail(TRANSPORT_ERROR): no response received
        - error + detail(RESPONSE_DECODE_FAILED): 2xx body was not JSON
        - error + detail(<server kind>): non-2xx response mapped by map_error
    """

    data: Any = Field(default=None, description="Decoded JSON body")
    http_status: int | None = Field(default=None, description="HTTP status code")


__all__ = ["CompiledRequest", "ResponseResult"]
