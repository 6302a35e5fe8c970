"""DTO package for parse-rest core.

Provides the BaseResult pattern for consistent result handling across modules.
"""

from .result_dto import BaseResult, ErrorDetail, ErrorKind, ErrorOrigin
from .auth_dto import AuthResult, SessionResult
from .query_dto import CountResult, DistinctResult, FindResult, FirstResult
from .endpoint_dto import FileResult, FunctionResult, ObjectResult
from .request_dto import CompiledRequest, ResponseResult

__all__ = [
    "BaseResult",
    "ErrorDetail",
    "ErrorKind",
    "ErrorOrigin",
    "AuthResult",
    "SessionResult",
    "FindResult",
    "FirstResult",
    "CountResult",
    "DistinctResult",
    "ObjectResult",
    "FileResult",
    "FunctionResult",
    "CompiledRequest",
    "ResponseResult",
]
