"""Centralized exception handlers for the FastAPI app.

Maps DealRoomException error codes and framework exceptions to JSON
responses. Register with register_exception_handlers(app).
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from dealroom.core.config import get_settings
from dealroom.domain.exceptions import DealRoomException

logger = logging.getLogger(__name__)

_ERROR_CODE_STATUS: dict[str, int] = {
    "VALIDATION_ERROR": 400,
    "ACCESS_DENIED": 403,
    "RESOURCE_NOT_FOUND": 404,
    "DOCUMENT_NOT_FOUND": 404,
    "STORAGE_NOT_FOUND": 404,
    "CAPACITY_EXCEEDED": 409,
    "STORAGE_EXISTS_ERROR": 409,
    "STORAGE_PERMISSION_ERROR": 400,
    "STORAGE_UPLOAD_ERROR": 502,
    "STORAGE_DOWNLOAD_ERROR": 502,
    "STORAGE_DELETE_ERROR": 502,
    "STORAGE_LIST_ERROR": 502,
    "STORAGE_CHECKSUM_ERROR": 502,
    "METADATA_WRITE_ERROR": 502,
    "METADATA_READ_ERROR": 502,
    "DOWNLOAD_FAILED": 502,
}


def _dealroom_exception_handler(request: Request, exc: DealRoomException) -> JSONResponse:
    """Return JSON from DealRoomException.to_dict() with the mapped status code."""
    status = _ERROR_CODE_STATUS.get(exc.error_code, 400)
    if status >= 500:
        logger.warning("%s on %s: %s", exc.error_code, request.url.path, exc.message)
    return JSONResponse(status_code=status, content=exc.to_dict())


def _validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={
            "error": "VALIDATION_ERROR",
            "message": "Request validation failed",
            "details": jsonable_errors(exc),
        },
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    """Validation errors without non-serializable ctx values."""
    return [{k: v for k, v in err.items() if k != "ctx"} for err in exc.errors()]


def _http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": "HTTP_ERROR", "message": exc.detail},
    )


def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return 500; include detail only when debug is True."""
    logger.exception("Unhandled exception: %s", exc)
    detail: Any = str(exc) if get_settings().debug else "Internal server error"
    return JSONResponse(
        status_code=500,
        content={"error": "INTERNAL_ERROR", "message": detail},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the app. Call once after creating it."""
    app.add_exception_handler(DealRoomException, _dealroom_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
