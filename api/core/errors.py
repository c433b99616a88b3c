"""
Error taxonomy and JSON error rendering.

Services raise these like plain `HTTPException`s. Every error body leaves the
API as `{"message": ..., "error": ...}` with `error` omitted when empty.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ApiError(HTTPException):
    status_code_default = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, *, error: Any = None, status_code: int | None = None) -> None:
        super().__init__(status_code=status_code or self.status_code_default, detail=message)
        self.message = message
        self.error = error


class Unauthenticated(ApiError):
    status_code_default = status.HTTP_401_UNAUTHORIZED


class Forbidden(ApiError):
    status_code_default = status.HTTP_403_FORBIDDEN


class NotFound(ApiError):
    status_code_default = status.HTTP_404_NOT_FOUND


class Conflict(ApiError):
    # Duplicate team names surface as 400 alongside other payload problems.
    status_code_default = status.HTTP_400_BAD_REQUEST


class ValidationError(ApiError):
    status_code_default = status.HTTP_400_BAD_REQUEST


class Internal(ApiError):
    status_code_default = status.HTTP_500_INTERNAL_SERVER_ERROR


def error_body(message: str, error: Any = None) -> dict[str, Any]:
    body: dict[str, Any] = {"message": message}
    if error is not None:
        body["error"] = error
    return body


async def _http_exception_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    if isinstance(exc, ApiError):
        body = error_body(exc.message, exc.error)
    else:
        body = error_body(str(exc.detail))
    return JSONResponse(status_code=exc.status_code, content=body, headers=exc.headers)


async def _request_validation_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("Invalid request payload", jsonable_encoder(exc.errors())),
    )


async def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("An error occurred", str(exc) or type(exc).__name__),
    )


def install_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)
