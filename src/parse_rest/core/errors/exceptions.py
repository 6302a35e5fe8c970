"""parse-rest exceptions.

These exceptions are for programming and configuration errors only (invalid
builder input, unusable settings). Failures a caller should expect at runtime
(server errors, network trouble, missing credentials) are returned as results
carrying an ErrorDetail - see dto/result_dto.py.
"""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from parse_rest.core.dto.result_dto import ErrorDetail


class ParseClientError(Exception):
    """Base exception for all parse-rest errors."""

    pass


class ConfigurationError(ParseClientError):
    """Raised when the client configuration is unusable.

    Attributes:
        key: Optional configuration key that is invalid.
    """

    def __init__(self, message: str, *, key: str | None = None):
        """Initialize ConfigurationError.

        Args:
            message: Description of the configuration problem.
            key: Optional name of the offending configuration key.
        """
        self.key = key
        key_info = f" (key={key!r})" if key else ""
        super().__init__(f"Configuration error{key_info}: {message}")


class QueryValidationError(ParseClientError):
    """Raised when a query builder receives invalid input.

    This exception is raised when:
    - A value cannot be encoded as JSON for the wire.
    - limit/skip are not integers or are out of range.
    - A field constraint is combined with an exclusive $relatedTo constraint.

    Attributes:
        details: Description of what validation failed.
        field: Optional name of the field that failed validation.
        value: Optional value that failed validation.
    """

    def __init__(
        self,
        details: str,
        field: str | None = None,
        value: Any = None,
    ):
        """Initialize QueryValidationError.

        Args:
            details: Human-readable description of the validation failure.
            field: Optional field name associated with the error.
            value: Optional invalid value.
        """
        self.details = details
        self.field = field
        self.value = value

        field_info = f" (field={field!r})" if field else ""
        value_info = f" [value={value!r}]" if value is not None else ""
        super().__init__(f"Query validation error{field_info}: {details}{value_info}")


class ParseApiError(ParseClientError):
    """Raised by BaseResult.raise_for_error() for callers preferring exceptions.

    Attributes:
        detail: The ErrorDetail carried by the failed result.
    """

    def __init__(self, detail: "ErrorDetail"):
        """Initialize ParseApiError.

        Args:
            detail: ErrorDetail of the failed operation.
        """
        self.detail = detail
        code_info = f" code={detail.code}" if detail.code is not None else ""
        super().__init__(f"[{detail.kind}{code_info}] {detail.message}")


__all__ = [
    "ParseClientError",
    "ConfigurationError",
    "QueryValidationError",
    "ParseApiError",
]
