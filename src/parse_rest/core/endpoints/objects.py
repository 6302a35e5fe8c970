"""Object CRUD on classes/<Class>[/<objectId>], plus field operation helpers.

The helpers build the "__op" payloads the server understands for atomic
updates, e.g.:

    >>> await objects.update_object(ctx, "GameScore", object_id, {"score": increment(5)})
"""

import logging
from typing import Any

from parse_rest.core.auth.context import DEFAULT_OPTIONS, AuthContext, RequestOptions
from parse_rest.core.dispatcher.dispatcher import RequestDispatcher
from parse_rest.core.dto.endpoint_dto import ObjectResult
from parse_rest.core.dto.result_dto import ErrorDetail, ErrorKind
from parse_rest.core.errors.exceptions import QueryValidationError
from parse_rest.core.query.compiler import class_path
from parse_rest.core.types import Pointer, decode_value

logger = logging.getLogger(__name__)


# =============================================================================
# FIELD OPERATIONS
# =============================================================================


def increment(amount: int | float = 1) -> dict[str, Any]:
    """Atomically add amount to a numeric field."""
    return {"__op": "Increment", "amount": amount}


def add_to_array(*items: Any) -> dict[str, Any]:
    """Append items to an array field."""
    return {"__op": "Add", "objects": list(items)}


def add_unique(*items: Any) -> dict[str, Any]:
    """Append items not already present in an array field."""
    return {"__op": "AddUnique", "objects": list(items)}


def remove_from_array(*items: Any) -> dict[str, Any]:
    """Remove every occurrence of items from an array field."""
    return {"__op": "Remove", "objects": list(items)}


def delete_field() -> dict[str, Any]:
    """Remove a field from the object."""
    return {"__op": "Delete"}


def add_relation(*targets: Pointer) -> dict[str, Any]:
    """Add pointers to a relation field."""
    return {"__op": "AddRelation", "objects": list(targets)}


def remove_relation(*targets: Pointer) -> dict[str, Any]:
    """Remove pointers from a relation field."""
    return {"__op": "RemoveRelation", "objects": list(targets)}


# =============================================================================
# ENDPOINT
# =============================================================================


def _check_id(name: str, value: Any) -> None:
    if not isinstance(value, str) or not value:
        raise QueryValidationError(f"{name} must be a non-empty string", field=name, value=value)


class ObjectsEndpoint:
    """Create, retrieve, update and delete single objects."""

    def __init__(self, dispatcher: RequestDispatcher):
        self._dispatcher = dispatcher

    async def create_object(
        self,
        context: AuthContext,
        class_name: str,
        data: dict[str, Any],
        *,
        options: RequestOptions = DEFAULT_OPTIONS,
    ) -> ObjectResult:
        """Create an object. The result carries objectId and createdAt."""
        _check_id("class_name", class_name)
        response = await self._dispatcher.send(
            "POST", class_path(class_name), context, body=data, options=options
        )
        if response.is_error():
            return ObjectResult.fail(response.detail, class_name=class_name)

        payload = response.data
        if not isinstance(payload, dict) or not isinstance(payload.get("objectId"), str):
            return ObjectResult.fail(
                ErrorDetail(
                    kind=ErrorKind.RESPONSE_DECODE_FAILED,
                    message="Create response has no 'objectId'",
                    http_status=response.http_status,
                ),
                class_name=class_name,
            )
        logger.debug("Created %s/%s", class_name, payload["objectId"])
        return ObjectResult.success(class_name=class_name, object_id=payload["objectId"], data=payload)

    async def retrieve_object(
        self,
        context: AuthContext,
        class_name: str,
        object_id: str,
        *,
        include: list[str] | None = None,
        decode: bool = False,
        options: RequestOptions = DEFAULT_OPTIONS,
    ) -> ObjectResult:
        """Fetch one object by id."""
        _check_id("class_name", class_name)
        _check_id("object_id", object_id)
        params = (("include", ",".join(sorted(set(include)))),) if include else ()
        response = await self._dispatcher.send(
            "GET", class_path(class_name, object_id), context, params=params, options=options
        )
        return self._object_result(response, class_name, object_id, decode=decode)

    async def update_object(
        self,
        context: AuthContext,
        class_name: str,
        object_id: str,
        data: dict[str, Any],
        *,
        options: RequestOptions = DEFAULT_OPTIONS,
    ) -> ObjectResult:
        """Update fields of an object. The result carries updatedAt."""
        _check_id("class_name", class_name)
        _check_id("object_id", object_id)
        response = await self._dispatcher.send(
            "PUT", class_path(class_name, object_id), context, body=data, options=options
        )
        return self._object_result(response, class_name, object_id)

    async def delete_object(
        self,
        context: AuthContext,
        class_name: str,
        object_id: str,
        *,
        options: RequestOptions = DEFAULT_OPTIONS,
    ) -> ObjectResult:
        """Delete an object."""
        _check_id("class_name", class_name)
        _check_id("object_id", object_id)
        response = await self._dispatcher.send(
            "DELETE", class_path(class_name, object_id), context, options=options
        )
        if response.is_ok():
            logger.debug("Deleted %s/%s", class_name, object_id)
        return self._object_result(response, class_name, object_id)

    @staticmethod
    def _object_result(response, class_name: str, object_id: str, *, decode: bool = False) -> ObjectResult:
        if response.is_error():
            return ObjectResult.fail(response.detail, class_name=class_name, object_id=object_id)
        if not isinstance(response.data, dict):
            return ObjectResult.fail(
                ErrorDetail(
                    kind=ErrorKind.RESPONSE_DECODE_FAILED,
                    message="Object response is not a JSON object",
                    http_status=response.http_status,
                ),
                class_name=class_name,
                object_id=object_id,
            )
        data = decode_value(response.data) if decode else response.data
        return ObjectResult.success(class_name=class_name, object_id=object_id, data=data)


__all__ = [
    "ObjectsEndpoint",
    "increment",
    "add_to_array",
    "add_unique",
    "remove_from_array",
    "delete_field",
    "add_relation",
    "remove_relation",
]
