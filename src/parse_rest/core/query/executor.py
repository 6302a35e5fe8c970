"""QueryExecutor - runs compiled queries and decodes their envelopes.

Each operation compiles the query, sends it through the RequestDispatcher
and checks the shape of the response:

- find / aggregate: {"results": [...]}
- first: find with limit 1, first row or None
- get: a single object
- count: {"results": [], "count": n}
- distinct: aggregate rows, the value read from each row's "objectId"

Transport and server failures pass through unchanged; a 2xx body with the
wrong shape fails with RESPONSE_DECODE_FAILED.
"""

import logging
from typing import Any

from parse_rest.core.auth.context import AuthContext
from parse_rest.core.dispatcher.dispatcher import RequestDispatcher
from parse_rest.core.dto.endpoint_dto import ObjectResult
from parse_rest.core.dto.query_dto import CountResult, DistinctResult, FindResult, FirstResult
from parse_rest.core.dto.result_dto import ErrorDetail, ErrorKind
from parse_rest.core.query import compiler
from parse_rest.core.query.query import Query
from parse_rest.core.types import decode_value

logger = logging.getLogger(__name__)


def _shape_error(message: str, data: Any, http_status: int | None) -> ErrorDetail:
    logger.error("Unexpected response shape: %s", message)
    return ErrorDetail(
        kind=ErrorKind.RESPONSE_DECODE_FAILED,
        message=message,
        http_status=http_status,
        context={"payload_type": type(data).__name__},
    )


def _results_list(data: Any) -> list[Any] | None:
    if isinstance(data, dict) and isinstance(data.get("results"), list):
        return data["results"]
    return None


class QueryExecutor:
    """Executes queries against a RequestDispatcher.

    Rows are returned as raw JSON dicts unless decode=True, in which case
    tagged values (Pointer, Date, File, GeoPoint, Relation) are
    materialised with decode_value().
    """

    def __init__(self, dispatcher: RequestDispatcher):
        self._dispatcher = dispatcher

    async def find(self, query: Query, context: AuthContext, *, decode: bool = False) -> FindResult:
        """Run the query and return all matching rows."""
        response = await self._dispatcher.execute(compiler.compile_find(query), context)
        if response.is_error():
            return FindResult.fail(response.detail, class_name=query.class_name)

        rows = _results_list(response.data)
        if rows is None:
            return FindResult.fail(
                _shape_error("Find response has no 'results' list", response.data, response.http_status),
                class_name=query.class_name,
            )
        if decode:
            rows = decode_value(rows)
        logger.debug("find %s returned %d rows", query.class_name, len(rows))
        return FindResult.success(class_name=query.class_name, results=rows)

    async def first(self, query: Query, context: AuthContext, *, decode: bool = False) -> FirstResult:
        """Return the first matching row, or item=None when nothing matches.

        The query itself is not modified.
        """
        response = await self._dispatcher.execute(compiler.compile_first(query), context)
        if response.is_error():
            return FirstResult.fail(response.detail)

        rows = _results_list(response.data)
        if rows is None:
            return FirstResult.fail(
                _shape_error("Find response has no 'results' list", response.data, response.http_status)
            )
        if not rows:
            return FirstResult.success(item=None)
        item = rows[0]
        return FirstResult.success(item=decode_value(item) if decode else item)

    async def get(
        self, query: Query, object_id: str, context: AuthContext, *, decode: bool = False
    ) -> ObjectResult:
        """Fetch one object of the query's class by id."""
        response = await self._dispatcher.execute(compiler.compile_get(query, object_id), context)
        if response.is_error():
            return ObjectResult.fail(response.detail, class_name=query.class_name, object_id=object_id)

        if not isinstance(response.data, dict):
            return ObjectResult.fail(
                _shape_error("Get response is not an object", response.data, response.http_status),
                class_name=query.class_name,
                object_id=object_id,
            )
        data = decode_value(response.data) if decode else response.data
        return ObjectResult.success(class_name=query.class_name, object_id=object_id, data=data)

    async def count(self, query: Query, context: AuthContext) -> CountResult:
        """Count the objects matching the query."""
        response = await self._dispatcher.execute(compiler.compile_count(query), context)
        if response.is_error():
            return CountResult.fail(response.detail)

        data = response.data
        count = data.get("count") if isinstance(data, dict) else None
        if isinstance(count, bool) or not isinstance(count, int):
            return CountResult.fail(
                _shape_error("Count response has no integer 'count'", data, response.http_status)
            )
        return CountResult.success(count=count)

    async def distinct(self, query: Query, field: str, context: AuthContext) -> DistinctResult:
        """Distinct values of field among the matching objects.

        Always uses the master key. A row whose value is null yields None.
        """
        response = await self._dispatcher.execute(compiler.compile_distinct(query, field), context)
        if response.is_error():
            return DistinctResult.fail(response.detail, field=field)

        rows = _results_list(response.data)
        if rows is None:
            return DistinctResult.fail(
                _shape_error("Distinct response has no 'results' list", response.data, response.http_status),
                field=field,
            )
        values = []
        for row in rows:
            if not isinstance(row, dict) or "objectId" not in row:
                return DistinctResult.fail(
                    _shape_error("Distinct row has no 'objectId'", row, response.http_status),
                    field=field,
                )
            values.append(row["objectId"])
        return DistinctResult.success(field=field, values=values)

    async def aggregate(
        self,
        query: Query | str,
        pipeline: list[dict[str, Any]],
        context: AuthContext,
        *,
        decode: bool = False,
    ) -> FindResult:
        """Run an aggregation pipeline on a class. Always uses the master key.

        Args:
            query: A Query (only its class is used) or a class name.
            pipeline: Aggregation stages.
            context: Credentials for this call.
            decode: Materialise tagged values in the rows.
        """
        class_name = query.class_name if isinstance(query, Query) else query
        response = await self._dispatcher.execute(compiler.compile_aggregate(class_name, pipeline), context)
        if response.is_error():
            return FindResult.fail(response.detail, class_name=class_name)

        rows = _results_list(response.data)
        if rows is None:
            return FindResult.fail(
                _shape_error("Aggregate response has no 'results' list", response.data, response.http_status),
                class_name=class_name,
            )
        return FindResult.success(class_name=class_name, results=decode_value(rows) if decode else rows)


__all__ = ["QueryExecutor"]
