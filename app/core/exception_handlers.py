"""Centralized exception handlers for the FastAPI app.

Register with register_exception_handlers(app). Every failure is rendered as
the API envelope ``{"success": false, "error": "<message>"}``.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import get_settings
from app.core.constants import GENERIC_ERROR

logger = logging.getLogger(__name__)

_LOCATION_PREFIXES = {"body", "query", "path", "header", "cookie"}


def error_response(status_code: int, error: str, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": error},
        headers=headers,
    )


def format_validation_error(exc: RequestValidationError) -> str:
    """First failing field as ``Invalid <field>: <reason>``."""
    errors = exc.errors()
    if not errors:
        return "Invalid request body"
    first = errors[0]
    parts = [str(p) for p in first.get("loc", ()) if p not in _LOCATION_PREFIXES]
    field = ".".join(parts) or "request body"
    message = str(first.get("msg", "invalid value"))
    # pydantic prefixes messages raised from validators
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    return f"Invalid {field}: {message}"


def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 400 naming the first invalid field."""
    return error_response(400, format_validation_error(exc))


def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Return the envelope for HTTP exceptions, keeping their headers (e.g. rate limit)."""
    return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return 500; include detail only when debug is True."""
    logger.exception("Unhandled exception on %s %s: %s", request.method, request.url.path, exc)
    settings = get_settings()
    detail: Any = str(exc) if settings.debug else GENERIC_ERROR
    return error_response(500, detail)


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI app.

    Call once after creating the app. Handlers: RequestValidationError,
    StarletteHTTPException, generic Exception.
    """
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
