"""Response envelope shared by the public API routes."""

from enum import IntEnum
from typing import Any, Optional

from fastapi.responses import ORJSONResponse


class ResponseCode(IntEnum):
    REQUEST_SUCCESS = 0
    INVALID_SERVICE = 1
    INVALID_CASE = 2
    VERSION_NOT_FOUND = 3
    STORE_UNAVAILABLE = 4
    REMOTE_FETCH_FAILED = 5
    CACHE_WRITE_FAILED = 6


def api_response(code: ResponseCode, message: str, parameters: Optional[Any] = None,
                 status_code: int = 200) -> ORJSONResponse:
    return ORJSONResponse(
        status_code=status_code,
        content={
            "error": int(code),
            "message": message,
            "parameters": parameters if parameters is not None else {},
        },
    )


def strip_json_suffix(query: str) -> str:
    """``"123.json"`` -> ``"123"``; anything else is returned as is."""
    return query[:-5] if query.endswith(".json") else query
