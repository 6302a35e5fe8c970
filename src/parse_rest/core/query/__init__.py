"""Query building, compilation and execution."""

from parse_rest.core.query.query import Query, QuerySpec
from parse_rest.core.query.executor import QueryExecutor

__all__ = ["Query", "QuerySpec", "QueryExecutor"]
