"""Query result DTOs.

Defines typed result classes for QueryExecutor operations. Which envelope is
decoded depends on the operation: {"results": [...]} for find/aggregate,
{"count": n} for count, and a single object for get.
"""

from typing import Any

from pydantic import Field

from parse_rest.core.dto.result_dto import BaseResult


class FindResult(BaseResult):
    """Result of find() and aggregate().

    [Result Pattern] Check result.is_ok() before using result.results.

    Attributes:
        class_name: Class the query targeted.
        results: Returned rows.
    """

    class_name: str = Field(default="", description="Queried class")
    results: list[Any] = Field(default_factory=list, description="Returned rows")

    def __len__(self) -> int:
        """Number of returned rows."""
        return len(self.results)


class FirstResult(BaseResult):
    """Result of first().

    Attributes:
        item: First matching row, None when nothing matched.
    """

    item: Any = Field(default=None, description="First matching row")

    @property
    def found(self) -> bool:
        """True if a row matched."""
        return self.item is not None


class CountResult(BaseResult):
    """Result of count().

    Attributes:
        count: Number of matching objects.
    """

    count: int = Field(default=0, description="Number of matching objects")


class DistinctResult(BaseResult):
    """Result of distinct().

    Attributes:
        field: Field the values were grouped on.
        values: Distinct values, read from each row's "objectId" key.
    """

    field: str = Field(default="", description="Grouped field")
    values: list[Any] = Field(default_factory=list, description="Distinct values")


__all__ = ["FindResult", "FirstResult", "CountResult", "DistinctResult"]
