"""Query - fluent constraint builder and its immutable QuerySpec snapshot.

A Query accumulates constraints for one class. Builder methods mutate the
query in place and return it so calls can be chained; copy() gives an
independent query. Compilation works on a QuerySpec snapshot taken with
to_spec(), so compiling never changes the Query.

Example:
    >>> query = (
    ...     Query("GameScore")
    ...     .equal_to("playerName", "Sean Plott")
    ...     .greater_than("score", 1000)
    ...     .order_by_descending("score")
    ...     .limit(10)
    ... )
"""

import copy
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any, Self

from parse_rest.core.errors.exceptions import QueryValidationError
from parse_rest.core.types import Pointer, encode_value

RELATED_TO_KEY = "$relatedTo"


# =============================================================================
# QUERY SPEC - IMMUTABLE SNAPSHOT
# =============================================================================


@dataclass(frozen=True, slots=True)
class QuerySpec:
    """Immutable snapshot of a Query, consumed by the compiler.

    Attributes:
        class_name: Target class.
        where: Where-map (field → value or operator object). Owned by the
            snapshot; never shared with the Query it came from.
        limit: Optional maximum number of results.
        skip: Optional number of results to skip.
        order: Optional comma-joined sort keys ("-" prefix = descending).
        include: Pointer paths to include, sorted.
        keys: Selected keys, sorted.
        use_master_key: Whether the query runs with the master key.
    """

    class_name: str
    where: dict[str, Any]
    limit: int | None = None
    skip: int | None = None
    order: str | None = None
    include: tuple[str, ...] = ()
    keys: tuple[str, ...] = ()
    use_master_key: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation.

        Returns:
            Dict with non-empty values only (class_name and where always included).
        """
        result: dict[str, Any] = {"class_name": self.class_name, "where": copy.deepcopy(self.where)}
        if self.limit is not None:
            result["limit"] = self.limit
        if self.skip is not None:
            result["skip"] = self.skip
        if self.order is not None:
            result["order"] = self.order
        if self.include:
            result["include"] = list(self.include)
        if self.keys:
            result["keys"] = list(self.keys)
        if self.use_master_key:
            result["use_master_key"] = True
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "QuerySpec":
        """Create QuerySpec from dictionary.

        Args:
            data: Dictionary with query specification fields.

        Returns:
            QuerySpec instance.
        """
        return cls(
            class_name=data["class_name"],
            where=copy.deepcopy(data.get("where") or {}),
            limit=data.get("limit"),
            skip=data.get("skip"),
            order=data.get("order"),
            include=tuple(sorted(set(data.get("include") or ()))),
            keys=tuple(sorted(set(data.get("keys") or ()))),
            use_master_key=bool(data.get("use_master_key", False)),
        )


# =============================================================================
# QUERY BUILDER
# =============================================================================


def _check_field(field: str) -> None:
    if not isinstance(field, str) or not field:
        raise QueryValidationError(
            f"Field name must be a non-empty string, got {field!r}",
            field=str(field),
        )


def _check_values_list(field: str, values: Any) -> list[Any]:
    # Sets and generators have no stable order; compiled output must be deterministic.
    if not isinstance(values, (list, tuple)):
        raise QueryValidationError(
            f"Values must be a list, got {type(values).__name__}",
            field=field,
            value=values,
        )
    return list(values)


def _check_count(name: str, value: Any, *, minimum: int = 0) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise QueryValidationError(
            f"{name.capitalize()} must be an integer, got {type(value).__name__}",
            field=name,
            value=value,
        )
    if value < minimum:
        raise QueryValidationError(
            f"{name.capitalize()} must be >= {minimum}", field=name, value=value
        )
    return value


def _check_keys(name: str, keys: Iterable[str]) -> list[str]:
    checked = []
    for key in keys:
        if not isinstance(key, str) or not key:
            raise QueryValidationError(
                f"{name.capitalize()} keys must be non-empty strings", field=name, value=key
            )
        checked.append(key)
    return checked


class Query:
    """Fluent query builder for one Parse class.

    Every field constraint overwrites any previous constraint on the same
    field (last write wins). related_to() is exclusive: it replaces the
    whole where-map, and field constraints cannot be added afterwards.

    Attributes:
        class_name: Target class of the query.
    """

    def __init__(self, class_name: str, *, use_master_key: bool = False):
        """Create an empty query.

        Args:
            class_name: Target class name.
            use_master_key: Execute the query with the master key.
        """
        if not isinstance(class_name, str) or not class_name.strip():
            raise QueryValidationError(f"Invalid class name: {class_name!r}", field="class_name")
        self.class_name = class_name
        self._constraints: dict[str, Any] = {}
        self._limit: int | None = None
        self._skip: int | None = None
        self._order: str | None = None
        self._include: set[str] = set()
        self._keys: set[str] = set()
        self._use_master_key = use_master_key

    # =========================================================================
    # STATE
    # =========================================================================

    @property
    def uses_master_key(self) -> bool:
        """Whether the query runs with the master key."""
        return self._use_master_key

    @property
    def where(self) -> dict[str, Any]:
        """Copy of the current where-map."""
        return copy.deepcopy(self._constraints)

    def set_master_key(self, use_master_key: bool = True) -> Self:
        """Run this query with (or without) the master key."""
        self._use_master_key = use_master_key
        return self

    def to_spec(self) -> QuerySpec:
        """Take an immutable snapshot for compilation."""
        return QuerySpec(
            class_name=self.class_name,
            where=copy.deepcopy(self._constraints),
            limit=self._limit,
            skip=self._skip,
            order=self._order,
            include=tuple(sorted(self._include)),
            keys=tuple(sorted(self._keys)),
            use_master_key=self._use_master_key,
        )

    def copy(self) -> "Query":
        """Return an independent copy of this query."""
        clone = Query(self.class_name, use_master_key=self._use_master_key)
        clone._constraints = copy.deepcopy(self._constraints)
        clone._limit = self._limit
        clone._skip = self._skip
        clone._order = self._order
        clone._include = set(self._include)
        clone._keys = set(self._keys)
        return clone

    def __eq__(self, other: object) -> bool:
        """Queries are equal when their snapshots are equal."""
        if not isinstance(other, Query):
            return NotImplemented
        return self.to_spec() == other.to_spec()

    __hash__ = None  # mutable

    def __repr__(self) -> str:
        """Compact representation for logs."""
        return f"Query({self.class_name!r}, where={self._constraints!r})"

    # =========================================================================
    # CONSTRAINT HELPERS
    # =========================================================================

    def _set_constraint(self, field: str, value: Any) -> Self:
        _check_field(field)
        if RELATED_TO_KEY in self._constraints:
            raise QueryValidationError(
                "Field constraints cannot be combined with related_to()",
                field=field,
            )
        self._constraints[field] = value
        return self

    def _set_operator(self, field: str, operator: str, value: Any) -> Self:
        return self._set_constraint(field, {operator: encode_value(value, path=field)})

    # =========================================================================
    # EQUALITY & COMPARISON
    # =========================================================================

    def equal_to(self, field: str, value: Any) -> Self:
        """Match objects whose field equals value."""
        return self._set_constraint(field, encode_value(value, path=field))

    def not_equal_to(self, field: str, value: Any) -> Self:
        """Match objects whose field differs from value ($ne)."""
        return self._set_operator(field, "$ne", value)

    def greater_than(self, field: str, value: Any) -> Self:
        """Match objects whose field is greater than value ($gt)."""
        return self._set_operator(field, "$gt", value)

    def greater_than_or_equal_to(self, field: str, value: Any) -> Self:
        """Match objects whose field is at least value ($gte)."""
        return self._set_operator(field, "$gte", value)

    def less_than(self, field: str, value: Any) -> Self:
        """Match objects whose field is less than value ($lt)."""
        return self._set_operator(field, "$lt", value)

    def less_than_or_equal_to(self, field: str, value: Any) -> Self:
        """Match objects whose field is at most value ($lte)."""
        return self._set_operator(field, "$lte", value)

    # =========================================================================
    # ARRAYS & EXISTENCE
    # =========================================================================

    def contained_in(self, field: str, values: Sequence[Any]) -> Self:
        """Match objects whose field is one of values ($in)."""
        return self._set_operator(field, "$in", _check_values_list(field, values))

    def not_contained_in(self, field: str, values: Sequence[Any]) -> Self:
        """Match objects whose field is none of values ($nin)."""
        return self._set_operator(field, "$nin", _check_values_list(field, values))

    def contains_all(self, field: str, values: Sequence[Any]) -> Self:
        """Match objects whose array field contains every one of values ($all).

        An empty values list is sent as {"$all": []} unchanged; whether that
        matches objects with an empty array is decided by the server.
        """
        return self._set_operator(field, "$all", _check_values_list(field, values))

    def exists(self, field: str) -> Self:
        """Match objects that have a value for field."""
        return self._set_operator(field, "$exists", True)

    def does_not_exist(self, field: str) -> Self:
        """Match objects that have no value for field."""
        return self._set_operator(field, "$exists", False)

    # =========================================================================
    # STRINGS
    # =========================================================================

    def matches_regex(self, field: str, pattern: str, modifiers: str | None = None) -> Self:
        """Match field against a raw regular expression.

        Args:
            field: Field to match.
            pattern: Regular expression, sent as-is.
            modifiers: Optional regex options (e.g. "i", "im").
        """
        regex: dict[str, Any] = {"$regex": pattern}
        if modifiers:
            regex["$options"] = modifiers
        return self._set_constraint(field, regex)

    def starts_with(self, field: str, prefix: str) -> Self:
        """Match string fields starting with the literal prefix."""
        return self._set_operator(field, "$regex", f"^{re.escape(prefix)}")

    def ends_with(self, field: str, suffix: str) -> Self:
        """Match string fields ending with the literal suffix."""
        return self._set_operator(field, "$regex", f"{re.escape(suffix)}$")

    def contains(self, field: str, substring: str) -> Self:
        """Match string fields containing the literal substring."""
        return self._set_operator(field, "$regex", f".*{re.escape(substring)}.*")

    def search(
        self,
        field: str,
        term: str,
        *,
        language: str | None = None,
        case_sensitive: bool | None = None,
        diacritic_sensitive: bool | None = None,
    ) -> Self:
        """Full-text search on field ($text/$search).

        Optional arguments are only sent when supplied.
        """
        search: dict[str, Any] = {"$term": term}
        if language is not None:
            search["$language"] = language
        if case_sensitive is not None:
            search["$caseSensitive"] = case_sensitive
        if diacritic_sensitive is not None:
            search["$diacriticSensitive"] = diacritic_sensitive
        return self._set_constraint(field, {"$text": {"$search": search}})

    # =========================================================================
    # RELATIONS
    # =========================================================================

    def related_to(self, parent: Pointer, key: str) -> Self:
        """Match objects in the relation `key` of the parent object.

        Replaces every other constraint: the where-map becomes exactly
        {"$relatedTo": {"object": <pointer>, "key": key}}.
        """
        if not isinstance(parent, Pointer):
            raise QueryValidationError(
                f"related_to() needs a Pointer, got {type(parent).__name__}",
                field=key,
                value=parent,
            )
        _check_field(key)
        self._constraints = {RELATED_TO_KEY: {"object": parent.to_json(), "key": key}}
        return self

    # =========================================================================
    # PAGINATION, SORTING, PROJECTION
    # =========================================================================

    def limit(self, count: int) -> Self:
        """Return at most count objects (-1 lets the server decide)."""
        self._limit = _check_count("limit", count, minimum=-1)
        return self

    def skip(self, count: int) -> Self:
        """Skip the first count objects."""
        self._skip = _check_count("skip", count)
        return self

    def order(self, order: str) -> Self:
        """Set the raw, comma-joined order string."""
        self._order = order
        return self

    def order_by_ascending(self, field: str) -> Self:
        """Sort by field ascending, replacing any previous order."""
        _check_field(field)
        self._order = field
        return self

    def order_by_descending(self, field: str) -> Self:
        """Sort by field descending, replacing any previous order."""
        _check_field(field)
        self._order = f"-{field}"
        return self

    def add_ascending_order(self, field: str) -> Self:
        """Append field ascending to the current order."""
        return self._append_order(field, descending=False)

    def add_descending_order(self, field: str) -> Self:
        """Append field descending to the current order."""
        return self._append_order(field, descending=True)

    def _append_order(self, field: str, *, descending: bool) -> Self:
        _check_field(field)
        key = f"-{field}" if descending else field
        self._order = f"{self._order},{key}" if self._order else key
        return self

    def include(self, *keys: str) -> Self:
        """Include the objects referenced by the given pointer paths."""
        self._include.update(_check_keys("include", keys))
        return self

    def select(self, *keys: str) -> Self:
        """Restrict returned fields to the given keys."""
        self._keys.update(_check_keys("keys", keys))
        return self


__all__ = ["Query", "QuerySpec", "RELATED_TO_KEY"]
