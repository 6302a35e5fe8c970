"""Schema management on schemas[/<Class>]. Every call uses the master key."""

import logging
from typing import Any

from parse_rest.core.auth.context import MASTER_KEY_OPTIONS, AuthContext
from parse_rest.core.dispatcher.dispatcher import RequestDispatcher
from parse_rest.core.dto.endpoint_dto import ObjectResult
from parse_rest.core.dto.query_dto import FindResult
from parse_rest.core.dto.request_dto import ResponseResult
from parse_rest.core.dto.result_dto import ErrorDetail, ErrorKind
from parse_rest.core.errors.exceptions import QueryValidationError

logger = logging.getLogger(__name__)


def _check_class(class_name: Any) -> None:
    if not isinstance(class_name, str) or not class_name:
        raise QueryValidationError("Class name must be a non-empty string", field="class_name")


def _schema_result(response: ResponseResult, class_name: str) -> ObjectResult:
    if response.is_error():
        return ObjectResult.fail(response.detail, class_name=class_name)
    if not isinstance(response.data, dict):
        return ObjectResult.fail(
            ErrorDetail(
                kind=ErrorKind.RESPONSE_DECODE_FAILED,
                message="Schema response is not a JSON object",
                http_status=response.http_status,
            ),
            class_name=class_name,
        )
    return ObjectResult.success(class_name=class_name, data=response.data)


class SchemasEndpoint:
    """Read and change class schemas."""

    def __init__(self, dispatcher: RequestDispatcher):
        self._dispatcher = dispatcher

    async def get_all_schemas(self, context: AuthContext) -> FindResult:
        """List every class schema."""
        response = await self._dispatcher.send("GET", "schemas", context, options=MASTER_KEY_OPTIONS)
        if response.is_error():
            return FindResult.fail(response.detail)
        data = response.data
        if not isinstance(data, dict) or not isinstance(data.get("results"), list):
            return FindResult.fail(
                ErrorDetail(
                    kind=ErrorKind.RESPONSE_DECODE_FAILED,
                    message="Schemas response has no 'results' list",
                    http_status=response.http_status,
                )
            )
        return FindResult.success(results=data["results"])

    async def get_schema(self, context: AuthContext, class_name: str) -> ObjectResult:
        """Fetch the schema of one class."""
        _check_class(class_name)
        response = await self._dispatcher.send(
            "GET", f"schemas/{class_name}", context, options=MASTER_KEY_OPTIONS
        )
        return _schema_result(response, class_name)

    async def create_schema(
        self,
        context: AuthContext,
        class_name: str,
        fields: dict[str, Any],
        *,
        class_level_permissions: dict[str, Any] | None = None,
    ) -> ObjectResult:
        """Create a class with the given fields, e.g. {"score": {"type": "Number"}}."""
        _check_class(class_name)
        body: dict[str, Any] = {"className": class_name, "fields": fields}
        if class_level_permissions is not None:
            body["classLevelPermissions"] = class_level_permissions
        response = await self._dispatcher.send(
            "POST", f"schemas/{class_name}", context, body=body, options=MASTER_KEY_OPTIONS
        )
        if response.is_ok():
            logger.info("Created schema %s", class_name)
        return _schema_result(response, class_name)

    async def update_schema(
        self, context: AuthContext, class_name: str, changes: dict[str, Any]
    ) -> ObjectResult:
        """Change a class schema (add fields, delete fields with {"__op": "Delete"}, set permissions)."""
        _check_class(class_name)
        body = {"className": class_name, **changes}
        response = await self._dispatcher.send(
            "PUT", f"schemas/{class_name}", context, body=body, options=MASTER_KEY_OPTIONS
        )
        return _schema_result(response, class_name)

    async def delete_schema(self, context: AuthContext, class_name: str) -> ObjectResult:
        """Delete an empty class."""
        _check_class(class_name)
        response = await self._dispatcher.send(
            "DELETE", f"schemas/{class_name}", context, options=MASTER_KEY_OPTIONS
        )
        if response.is_ok():
            logger.info("Deleted schema %s", class_name)
        return _schema_result(response, class_name)


__all__ = ["SchemasEndpoint"]
