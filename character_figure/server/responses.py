"""
Response envelope helpers.

Every JSON API route answers with ``{"code", "message", "data"}``:
``code`` is 0 on success, -1 on error and -2 when authentication is missing.
"""

from typing import Any, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from character_figure.core.errors import ERROR_CODE, NO_AUTH_CODE


def resp_json(code: int, message: str, data: Optional[Any] = None, status: int = 200) -> JSONResponse:
    """Build an envelope response; ``data`` is omitted when None."""
    content: dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        content["data"] = jsonable_encoder(data)
    return JSONResponse(status_code=status, content=content)


def resp_data(data: Any) -> JSONResponse:
    return resp_json(0, "ok", data)


def resp_ok() -> JSONResponse:
    return resp_json(0, "ok")


def resp_err(message: str, status: int = 400, extra: Optional[dict] = None) -> JSONResponse:
    """Build an error envelope. ``error`` repeats the message for older clients."""
    content: dict[str, Any] = {"code": ERROR_CODE, "message": message, "error": message}
    if extra:
        content.update(jsonable_encoder(extra))
    return JSONResponse(status_code=status, content=content)


def resp_no_auth() -> JSONResponse:
    return resp_json(NO_AUTH_CODE, "no auth", status=401)
