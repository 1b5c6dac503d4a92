from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

FUNCTIONS_PREFIX = "/functions"


class FunctionError(Exception):
    """An error rendered as ``{"error": ..., "success": false}``."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationFailed(FunctionError):
    status_code = 400


class Unauthorized(FunctionError):
    status_code = 401


class PermissionDenied(FunctionError):
    status_code = 403


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": message, "success": False},
    )


def _first_error_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    err = errors[0]
    loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
    msg = err.get("msg", "invalid value")
    return f"Invalid request: {loc} {msg}".strip() if loc else f"Invalid request: {msg}"


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(FunctionError)
    async def handle_function_error(request: Request, exc: FunctionError):
        logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
        return error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        if request.url.path.startswith(FUNCTIONS_PREFIX):
            return error_response(400, _first_error_message(exc))
        return await request_validation_exception_handler(request, exc)
