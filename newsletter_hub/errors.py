"""
Error taxonomy and the FastAPI handlers that turn errors into JSON bodies.

Every error leaves the service as ``{"message": ...}`` with the status code
carried by the exception class.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class HubError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code = 500
    default_message = "Server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(HubError):
    status_code = 400
    default_message = "Invalid request."


class AuthenticationError(HubError):
    status_code = 401
    default_message = "Unauthorized"


class AuthorizationError(HubError):
    status_code = 403
    default_message = "Forbidden"


class NotFoundError(HubError):
    status_code = 404
    default_message = "Not found"


class ConflictError(HubError):
    status_code = 409
    default_message = "Conflict"


class StorageError(HubError):
    status_code = 500
    default_message = "Storage error"


def _message_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


async def _handle_hub_error(request: Request, exc: HubError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return _message_response(exc.status_code, exc.message)


async def _handle_request_validation(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    if errors and errors[0].get("type") == "json_invalid":
        return _message_response(400, "Request body must be valid JSON.")
    fields = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        if loc:
            fields.append(".".join(loc))
    if fields:
        return _message_response(400, f"Invalid fields: {', '.join(fields)}.")
    return _message_response(400, ValidationError.default_message)


async def _handle_http_exception(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    if exc.status_code == 404:
        message = "Not found"
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": message},
        headers=getattr(exc, "headers", None),
    )


async def _handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _message_response(500, "Server error")


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(HubError, _handle_hub_error)
    app.add_exception_handler(RequestValidationError, _handle_request_validation)
    app.add_exception_handler(StarletteHTTPException, _handle_http_exception)
    app.add_exception_handler(Exception, _handle_unexpected)
