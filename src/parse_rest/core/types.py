"""Types for values exchanged with Parse Server.

Defines the JSON value alias and the protocol's special object shapes:
- Pointer: typed reference to another object ({"__type": "Pointer", ...}).
- Relation: many-to-many relation field descriptor.
- ParseDate: ISO-8601 timestamp wrapper ({"__type": "Date", "iso": ...}).
- ParseFile: reference to an uploaded file.
- GeoPoint: latitude/longitude pair.

encode_value() turns Python values into wire JSON and decode_value() turns
"__type"-tagged JSON back into these dataclasses, so constraint values and
pipeline stages stay typed instead of stringly-typed.
"""

import math
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Final, TypeAlias

from parse_rest.core.errors.exceptions import QueryValidationError

# =============================================================================
# BASE TYPE ALIASES
# =============================================================================

#: JSON value as produced by json.loads.
JSONValue: TypeAlias = None | bool | int | float | str | list["JSONValue"] | dict[str, "JSONValue"]

#: Object payload: dict with JSON-like values keyed by field name.
JSONObject: TypeAlias = dict[str, Any]

TYPE_KEY: Final = "__type"


# =============================================================================
# PROTOCOL VALUE SHAPES
# =============================================================================


@dataclass(frozen=True, slots=True)
class Pointer:
    """Typed reference to an object of another class.

    Attributes:
        class_name: Target class name (e.g. "_User", "GameScore").
        object_id: Target object identifier.
    """

    class_name: str
    object_id: str

    def to_json(self) -> dict[str, Any]:
        """Convert to the wire representation."""
        return {TYPE_KEY: "Pointer", "className": self.class_name, "objectId": self.object_id}

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "Pointer":
        """Create a Pointer from its wire representation."""
        return cls(class_name=data["className"], object_id=data["objectId"])


@dataclass(frozen=True, slots=True)
class Relation:
    """Relation field descriptor pointing at a target class."""

    class_name: str

    def to_json(self) -> dict[str, Any]:
        """Convert to the wire representation."""
        return {TYPE_KEY: "Relation", "className": self.class_name}

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "Relation":
        """Create a Relation from its wire representation."""
        return cls(class_name=data["className"])


@dataclass(frozen=True, slots=True)
class ParseDate:
    """ISO-8601 timestamp as stored by the server (millisecond precision, UTC)."""

    iso: str

    @classmethod
    def from_datetime(cls, value: datetime) -> "ParseDate":
        """Create a ParseDate from a datetime; naive datetimes are taken as UTC."""
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        value = value.astimezone(UTC)
        return cls(iso=value.isoformat(timespec="milliseconds").replace("+00:00", "Z"))

    @classmethod
    def now(cls) -> "ParseDate":
        """Current time as a ParseDate."""
        return cls.from_datetime(datetime.now(UTC))

    def to_datetime(self) -> datetime:
        """Parse the ISO string into an aware datetime."""
        return datetime.fromisoformat(self.iso.replace("Z", "+00:00"))

    def to_json(self) -> dict[str, Any]:
        """Convert to the wire representation."""
        return {TYPE_KEY: "Date", "iso": self.iso}

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "ParseDate":
        """Create a ParseDate from its wire representation."""
        return cls(iso=data["iso"])


@dataclass(frozen=True, slots=True)
class ParseFile:
    """Reference to a file stored on the server."""

    name: str
    url: str | None = None

    def to_json(self) -> dict[str, Any]:
        """Convert to the wire representation."""
        result: dict[str, Any] = {TYPE_KEY: "File", "name": self.name}
        if self.url is not None:
            result["url"] = self.url
        return result

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "ParseFile":
        """Create a ParseFile from its wire representation."""
        return cls(name=data["name"], url=data.get("url"))


@dataclass(frozen=True, slots=True)
class GeoPoint:
    """Latitude/longitude pair.

    Raises:
        QueryValidationError: If latitude is outside [-90, 90] or longitude
            outside [-180, 180].
    """

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        """Validate coordinate ranges."""
        if not -90.0 <= self.latitude <= 90.0:
            raise QueryValidationError(
                "Latitude must be between -90 and 90 degrees",
                field="latitude",
                value=self.latitude,
            )
        if not -180.0 <= self.longitude <= 180.0:
            raise QueryValidationError(
                "Longitude must be between -180 and 180 degrees",
                field="longitude",
                value=self.longitude,
            )

    def to_json(self) -> dict[str, Any]:
        """Convert to the wire representation."""
        return {TYPE_KEY: "GeoPoint", "latitude": self.latitude, "longitude": self.longitude}

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "GeoPoint":
        """Create a GeoPoint from its wire representation."""
        return cls(latitude=float(data["latitude"]), longitude=float(data["longitude"]))


ProtocolValue: TypeAlias = Pointer | Relation | ParseDate | ParseFile | GeoPoint

_DECODERS: Final = {
    "Pointer": Pointer.from_json,
    "Relation": Relation.from_json,
    "Date": ParseDate.from_json,
    "File": ParseFile.from_json,
    "GeoPoint": GeoPoint.from_json,
}


# =============================================================================
# ENCODE / DECODE
# =============================================================================


def encode_value(value: Any, *, path: str = "value") -> JSONValue:
    """Convert a Python value into its JSON wire form.

    Handles plain JSON types, tuples (as lists), datetimes (as Date objects)
    and the protocol dataclasses. Dict keys must be strings.

    Args:
        value: Value to encode.
        path: Location used in error messages.

    Returns:
        JSON-ready value.

    Raises:
        QueryValidationError: If the value (or a nested value) cannot be
            represented as JSON.
    """
    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise QueryValidationError("Non-finite floats cannot be encoded", field=path, value=value)
        return value
    if isinstance(value, (Pointer, Relation, ParseDate, ParseFile, GeoPoint)):
        return value.to_json()
    if isinstance(value, datetime):
        return ParseDate.from_datetime(value).to_json()
    if isinstance(value, (list, tuple)):
        return [encode_value(item, path=f"{path}[{i}]") for i, item in enumerate(value)]
    if isinstance(value, dict):
        encoded: dict[str, JSONValue] = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise QueryValidationError(
                    f"Object keys must be strings, got {type(key).__name__}",
                    field=path,
                    value=key,
                )
            encoded[key] = encode_value(item, path=f"{path}.{key}")
        return encoded
    raise QueryValidationError(
        f"Cannot encode value of type {type(value).__name__}",
        field=path,
        value=value,
    )


def decode_value(value: Any) -> Any:
    """Convert wire JSON into Python values, materialising tagged objects.

    Unknown "__type" tags (e.g. "Bytes", "Polygon") are returned unchanged
    as dicts with their members decoded.
    """
    if isinstance(value, list):
        return [decode_value(item) for item in value]
    if isinstance(value, dict):
        decoder = _DECODERS.get(value.get(TYPE_KEY))
        if decoder is not None:
            try:
                return decoder(value)
            except (KeyError, TypeError, ValueError, QueryValidationError):
                # Malformed tagged object: keep the raw shape
                pass
        return {key: decode_value(item) for key, item in value.items()}
    return value


__all__ = [
    "JSONValue",
    "JSONObject",
    "ProtocolValue",
    "Pointer",
    "Relation",
    "ParseDate",
    "ParseFile",
    "GeoPoint",
    "encode_value",
    "decode_value",
]
