"""
Application errors and the FastAPI handlers that turn them into the
`{"success": false, "error": ...}` response envelope.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from jiji.core.validation import build_validation_response

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Internal server error"


class AppError(Exception):
    """Error with an HTTP status. `expose` marks the message as safe to return in production."""

    def __init__(self, message: str, status_code: int = 500, expose: Optional[bool] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.expose = status_code < 500 if expose is None else expose


class UnauthorizedError(AppError):
    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, status_code=status.HTTP_401_UNAUTHORIZED)


class RateLimitedError(AppError):
    def __init__(self, limit: str):
        super().__init__(f"Rate limit exceeded: {limit}", status_code=status.HTTP_429_TOO_MANY_REQUESTS)


class AuthServiceUnavailableError(AppError):
    def __init__(self, message: str = "Authentication service unavailable"):
        super().__init__(message, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, expose=True)


def error_response(status_code: int, message: str, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message},
        headers=headers,
    )


def register_exception_handlers(app: FastAPI, is_production: bool) -> None:
    """Attach the error envelope handlers; `is_production` hides unexposed 500 messages."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        else:
            logger.warning("%s %s rejected (%d): %s", request.method, request.url.path, exc.status_code, exc.message)
        message = exc.message
        if is_production and exc.status_code >= 500 and not exc.expose:
            message = GENERIC_ERROR_MESSAGE
        return error_response(exc.status_code, message)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
            return error_response(exc.status_code, f"Route {request.method} {request.url.path} not found")
        return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return build_validation_response(exc.errors())

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception: %s", exc)
        if is_production:
            return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, GENERIC_ERROR_MESSAGE)
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))
