"""
Error taxonomy and the handlers that render it.

Services raise subclasses of ``FineServiceError``; the handlers
registered by ``register_exception_handlers`` turn those (and FastAPI's
own ``HTTPException`` / ``RequestValidationError``) into the JSON
envelope ``{"error": "<message>"}``.
"""

import logging
from typing import Any, Dict, List, Tuple

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class FineServiceError(Exception):
    """Base class for expected, client-facing failures."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(FineServiceError):
    """Missing or invalid input detected before any mutation."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(FineServiceError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, message: str = "Not found") -> None:
        super().__init__(message)


class ConflictError(FineServiceError):
    """The requested state transition is not allowed."""

    status_code = status.HTTP_409_CONFLICT


def describe_validation_errors(errors: List[Dict[str, Any]]) -> Tuple[int, str]:
    """Map pydantic error records to a status code and a single message.

    An unparsable path parameter is reported as not found, since no
    record can match it.  Otherwise the first error wins: a missing (or
    ``null``) body field becomes ``Missing field: <name>``, any other
    problem with a named field ``Invalid field: <name>``.
    """
    for err in errors:
        loc = err.get("loc") or ()
        if loc and loc[0] == "path":
            return status.HTTP_404_NOT_FOUND, "Not found"

    if not errors:
        return status.HTTP_400_BAD_REQUEST, "Invalid request"

    err = errors[0]
    loc = err.get("loc") or ()
    if err.get("type") == "json_invalid":
        return status.HTTP_400_BAD_REQUEST, "Invalid JSON body"
    field = loc[-1] if len(loc) > 1 and isinstance(loc[-1], str) else None
    if field is None:
        return status.HTTP_400_BAD_REQUEST, "Invalid request body"
    if loc[0] == "body" and (err.get("type") == "missing" or err.get("input", "") is None):
        return status.HTTP_400_BAD_REQUEST, f"Missing field: {field}"
    return status.HTTP_400_BAD_REQUEST, f"Invalid field: {field}"


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(FineServiceError)
    async def fine_service_error_handler(request: Request, exc: FineServiceError):
        logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
        return JSONResponse({"error": exc.message}, status_code=exc.status_code)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        logger.info("%s %s -> %s", request.method, request.url.path, exc.status_code)
        return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        status_code, message = describe_validation_errors(list(exc.errors()))
        logger.info("%s %s -> %s: %s", request.method, request.url.path, status_code, message)
        return JSONResponse({"error": message}, status_code=status_code)

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return JSONResponse({"error": "Internal server error"}, status_code=500)
