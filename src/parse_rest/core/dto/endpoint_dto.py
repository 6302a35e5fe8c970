"""Endpoint result DTOs.

Results for the thin resource wrappers (objects, files, cloud functions,
schemas).
"""

from typing import Any

from pydantic import Field

from parse_rest.core.dto.result_dto import BaseResult


class ObjectResult(BaseResult):
    """Result of an object create/retrieve/update/delete or schema call.

    Attributes:
        class_name: Class of the object.
        object_id: Identifier of the object, when known.
        data: Server payload (created fields, full object, or {}).
    """

    class_name: str = Field(default="", description="Object class")
    object_id: str | None = Field(default=None, description="Object identifier")
    data: dict[str, Any] = Field(default_factory=dict, description="Server payload")


class FileResult(BaseResult):
    """Result of a file upload.

    Attributes:
        file: ParseFile with the server-assigned name and URL.
    """

    file: Any = Field(default=None, description="Uploaded ParseFile")


class FunctionResult(BaseResult):
    """Result of a cloud function call.

    Attributes:
        name: Function name.
        result: Value of the "result" key in the response.
    """

    name: str = Field(default="", description="Function name")
    result: Any = Field(default=None, description="Function return value")


__all__ = ["ObjectResult", "FileResult", "FunctionResult"]
