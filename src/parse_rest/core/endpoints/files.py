"""File uploads on files/<name>."""

import logging

from parse_rest.core.auth.context import DEFAULT_OPTIONS, MASTER_KEY_OPTIONS, AuthContext
from parse_rest.core.dispatcher.dispatcher import RequestDispatcher
from parse_rest.core.dto.endpoint_dto import FileResult
from parse_rest.core.dto.result_dto import ErrorDetail, ErrorKind
from parse_rest.core.errors.exceptions import QueryValidationError
from parse_rest.core.types import ParseFile

logger = logging.getLogger(__name__)


class FilesEndpoint:
    """Uploads raw file content."""

    def __init__(self, dispatcher: RequestDispatcher):
        self._dispatcher = dispatcher

    async def upload_file(
        self, context: AuthContext, name: str, data: bytes, mime_type: str
    ) -> FileResult:
        """Upload data under name.

        Uses the session token when one is stored, otherwise the master key
        if configured, otherwise the ambient key.

        Returns:
            FileResult with a ParseFile carrying the server-assigned name and URL.
        """
        if not isinstance(name, str) or not name or "/" in name:
            raise QueryValidationError(f"Invalid file name: {name!r}", field="name")
        if not isinstance(data, (bytes, bytearray)):
            raise QueryValidationError("File data must be bytes", field="data")

        if context.session_token is None and context.has_master_key:
            options = MASTER_KEY_OPTIONS
        else:
            options = DEFAULT_OPTIONS
        response = await self._dispatcher.send_bytes(
            f"files/{name}", bytes(data), mime_type, context, options=options
        )
        if response.is_error():
            return FileResult.fail(response.detail)

        payload = response.data
        if (
            not isinstance(payload, dict)
            or not isinstance(payload.get("name"), str)
            or not isinstance(payload.get("url"), str)
        ):
            return FileResult.fail(
                ErrorDetail(
                    kind=ErrorKind.RESPONSE_DECODE_FAILED,
                    message="Upload response needs 'name' and 'url'",
                    http_status=response.http_status,
                )
            )
        logger.debug("Uploaded file %s (%d bytes)", payload["name"], len(data))
        return FileResult.success(file=ParseFile(name=payload["name"], url=payload["url"]))


__all__ = ["FilesEndpoint"]
