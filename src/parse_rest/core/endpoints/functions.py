"""Cloud function calls on functions/<name>."""

from typing import Any

from parse_rest.core.auth.context import DEFAULT_OPTIONS, AuthContext, RequestOptions
from parse_rest.core.dispatcher.dispatcher import RequestDispatcher
from parse_rest.core.dto.endpoint_dto import FunctionResult
from parse_rest.core.dto.result_dto import ErrorDetail, ErrorKind
from parse_rest.core.errors.exceptions import QueryValidationError


class FunctionsEndpoint:
    def __init__(self, dispatcher: RequestDispatcher):
        self._dispatcher = dispatcher

    async def run_function(
        self,
        context: AuthContext,
        name: str,
        params: dict[str, Any] | None = None,
        *,
        options: RequestOptions = DEFAULT_OPTIONS,
    ) -> FunctionResult:
        """Call a cloud function and return the value of its "result" key."""
        if not isinstance(name, str) or not name:
            raise QueryValidationError("Function name must be a non-empty string", field="name")

        response = await self._dispatcher.send(
            "POST", f"functions/{name}", context, body=params or {}, options=options
        )
        if response.is_error():
            return FunctionResult.fail(response.detail, name=name)
        if not isinstance(response.data, dict) or "result" not in response.data:
            return FunctionResult.fail(
                ErrorDetail(
                    kind=ErrorKind.RESPONSE_DECODE_FAILED,
                    message="Function response has no 'result'",
                    http_status=response.http_status,
                ),
                name=name,
            )
        return FunctionResult.success(name=name, result=response.data["result"])


__all__ = ["FunctionsEndpoint"]
