"""
Exception Handlers for the FastAPI Application.

This module maps typed ``ApiError`` exceptions and request validation
failures onto the error envelope, and provides a global handler that catches
all unhandled exceptions and logs them with an error ID and request context.
"""

import traceback
import uuid

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from character_figure.core.errors import ERROR_CODE, ApiError
from character_figure.core.logging_config import get_logger
from character_figure.core.monitoring import log_error
from character_figure.server.responses import resp_err, resp_json

logger = get_logger(__name__)


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    """Render an ``ApiError`` as an envelope with the error's status and code."""
    logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    extra = exc.details if isinstance(exc.details, dict) else None
    if exc.code != ERROR_CODE:
        return resp_json(exc.code, exc.message, status=exc.status_code)
    return resp_err(exc.message, status=exc.status_code, extra=extra)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render the first request validation problem as a 400 envelope."""
    errors = exc.errors()
    message = "invalid params"
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query"))
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    logger.debug(f"Validation failed for {request.method} {request.url.path}: {errors}")
    return resp_err(message, status=400)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Global exception handler to log detailed error information.

    This handler is called for any unhandled exception in the application.
    It logs the full error context and returns an error envelope with an error ID
    that clients can use to reference the error when reporting issues.

    Args:
        request: The HTTP request that caused the exception
        exc: The exception that was raised

    Returns:
        JSONResponse with error details and error ID
    """
    error_id = uuid.uuid4().hex[:12]

    logger.error(
        f"Unhandled exception [{error_id}] in {request.method} {request.url.path}: {str(exc)}",
        exc_info=True,
        extra={
            "error_id": error_id,
            "method": request.method,
            "path": request.url.path,
            "query_params": dict(request.query_params),
            "client": request.client.host if request.client else "unknown",
            "error_type": type(exc).__name__,
            "traceback": traceback.format_exc(),
        },
    )
    log_error(type(exc).__name__, str(exc), {"error_id": error_id, "path": request.url.path})

    return JSONResponse(
        status_code=500,
        content={
            "code": ERROR_CODE,
            "message": "Internal server error",
            "error_id": error_id,
            "error_type": type(exc).__name__,
        },
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(ApiError, api_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, global_exception_handler)
    logger.debug("Exception handlers registered successfully")
