"""Query compilation.

Pure functions that turn a Query (or its QuerySpec snapshot) into ordered
URL parameters and CompiledRequest values. Nothing here performs I/O, and
equal queries always compile to byte-identical output.

Parameter order is fixed: where, limit, skip, order, include, keys, then
count for count queries. JSON is encoded compactly.
"""

import json
from typing import Any, TypeAlias

from parse_rest.core.auth.context import DEFAULT_OPTIONS, MASTER_KEY_OPTIONS, RequestOptions
from parse_rest.core.dto.request_dto import CompiledRequest
from parse_rest.core.errors.exceptions import QueryValidationError
from parse_rest.core.query.query import Query, QuerySpec
from parse_rest.core.types import encode_value

Params: TypeAlias = tuple[tuple[str, str], ...]

JSON_SEPARATORS = (",", ":")


def encode_json(value: Any) -> str:
    """Compact, deterministic JSON text for URL parameters and bodies."""
    return json.dumps(value, separators=JSON_SEPARATORS, ensure_ascii=False)


def _as_spec(query: Query | QuerySpec) -> QuerySpec:
    if isinstance(query, QuerySpec):
        return query
    if isinstance(query, Query):
        return query.to_spec()
    raise TypeError(f"Expected Query or QuerySpec, got {type(query).__name__}")


def _options(spec: QuerySpec) -> RequestOptions:
    return MASTER_KEY_OPTIONS if spec.use_master_key else DEFAULT_OPTIONS


def class_path(class_name: str, object_id: str | None = None) -> str:
    """Relative path of a class or of one object in it."""
    if object_id is None:
        return f"classes/{class_name}"
    return f"classes/{class_name}/{object_id}"


# =============================================================================
# PARAMETERS
# =============================================================================


def compile_find_params(query: Query | QuerySpec) -> Params:
    """Ordered URL parameters for a find query.

    Example:
        >>> compile_find_params(Query("GameScore").equal_to("score", 100).limit(10))
        (('where', '{"score":100}'), ('limit', '10'))
    """
    spec = _as_spec(query)
    params: list[tuple[str, str]] = []
    if spec.where:
        params.append(("where", encode_json(spec.where)))
    if spec.limit is not None:
        params.append(("limit", str(spec.limit)))
    if spec.skip is not None:
        params.append(("skip", str(spec.skip)))
    if spec.order:
        params.append(("order", spec.order))
    if spec.include:
        params.append(("include", ",".join(spec.include)))
    if spec.keys:
        params.append(("keys", ",".join(spec.keys)))
    return tuple(params)


def compile_count_params(query: Query | QuerySpec) -> Params:
    """Parameters for a count query: limit forced to 0, count=1 appended."""
    spec = _as_spec(query)
    params: list[tuple[str, str]] = []
    if spec.where:
        params.append(("where", encode_json(spec.where)))
    params.append(("limit", "0"))
    params.append(("count", "1"))
    return tuple(params)


def compile_distinct_pipeline(query: Query | QuerySpec, field: str) -> list[dict[str, Any]]:
    """Aggregation pipeline returning the distinct values of field.

    The server puts each distinct value in the "objectId" key of a result row.
    """
    if not isinstance(field, str) or not field:
        raise QueryValidationError("Distinct field must be a non-empty string", field=str(field))
    spec = _as_spec(query)
    pipeline: list[dict[str, Any]] = []
    if spec.where:
        pipeline.append({"$match": spec.where})
    pipeline.append({"$group": {"_id": f"${field}"}})
    return pipeline


def compile_aggregate_params(pipeline: list[dict[str, Any]]) -> Params:
    """Single "pipeline" parameter holding the encoded stages.

    Raises:
        QueryValidationError: If the pipeline is not a list of stage objects.
    """
    if not isinstance(pipeline, (list, tuple)):
        raise QueryValidationError(
            f"Pipeline must be a list of stages, got {type(pipeline).__name__}",
            field="pipeline",
        )
    for index, stage in enumerate(pipeline):
        if not isinstance(stage, dict) or not stage:
            raise QueryValidationError(
                "Pipeline stages must be non-empty objects",
                field=f"pipeline[{index}]",
                value=stage,
            )
    return (("pipeline", encode_json(encode_value(list(pipeline), path="pipeline"))),)


# =============================================================================
# REQUESTS
# =============================================================================


def compile_find(query: Query | QuerySpec) -> CompiledRequest:
    """GET classes/<Class> with the find parameters."""
    spec = _as_spec(query)
    return CompiledRequest(
        method="GET",
        path=class_path(spec.class_name),
        params=compile_find_params(spec),
        options=_options(spec),
    )


def compile_first(query: Query | QuerySpec) -> CompiledRequest:
    """Find request limited to one row. The query itself is not modified."""
    if isinstance(query, Query):
        return compile_find(query.copy().limit(1))
    spec = _as_spec(query)
    return compile_find(QuerySpec.from_dict({**spec.to_dict(), "limit": 1}))


def compile_get(query: Query | QuerySpec, object_id: str) -> CompiledRequest:
    """GET classes/<Class>/<id>, keeping include and keys."""
    if not isinstance(object_id, str) or not object_id:
        raise QueryValidationError("Object id must be a non-empty string", field="object_id")
    spec = _as_spec(query)
    params: list[tuple[str, str]] = []
    if spec.include:
        params.append(("include", ",".join(spec.include)))
    if spec.keys:
        params.append(("keys", ",".join(spec.keys)))
    return CompiledRequest(
        method="GET",
        path=class_path(spec.class_name, object_id),
        params=tuple(params),
        options=_options(spec),
    )


def compile_count(query: Query | QuerySpec) -> CompiledRequest:
    """GET classes/<Class> with the count parameters."""
    spec = _as_spec(query)
    return CompiledRequest(
        method="GET",
        path=class_path(spec.class_name),
        params=compile_count_params(spec),
        options=_options(spec),
    )


def compile_distinct(query: Query | QuerySpec, field: str) -> CompiledRequest:
    """GET aggregate/<Class> with the distinct pipeline. Always master key."""
    spec = _as_spec(query)
    return CompiledRequest(
        method="GET",
        path=f"aggregate/{spec.class_name}",
        params=compile_aggregate_params(compile_distinct_pipeline(spec, field)),
        options=MASTER_KEY_OPTIONS,
    )


def compile_aggregate(class_name: str, pipeline: list[dict[str, Any]]) -> CompiledRequest:
    """GET aggregate/<Class> with a caller-supplied pipeline. Always master key."""
    return CompiledRequest(
        method="GET",
        path=f"aggregate/{class_name}",
        params=compile_aggregate_params(pipeline),
        options=MASTER_KEY_OPTIONS,
    )


__all__ = [
    "JSON_SEPARATORS",
    "encode_json",
    "class_path",
    "compile_find_params",
    "compile_count_params",
    "compile_distinct_pipeline",
    "compile_aggregate_params",
    "compile_find",
    "compile_first",
    "compile_get",
    "compile_count",
    "compile_distinct",
    "compile_aggregate",
]
