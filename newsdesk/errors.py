"""
Application error taxonomy and the FastAPI handlers that render it.

Services raise these exceptions; the handlers map each one to a fixed HTTP
status with a ``{"error": "<message>"}`` body.  Storage failures are logged
in full but answered with a generic message.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

GENERIC_STORAGE_MESSAGE = "Internal server error"


class AppError(Exception):
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    status_code = 400


class UsernameTakenError(AppError):
    status_code = 400

    def __init__(self, message: str = "Username already exists") -> None:
        super().__init__(message)


class UnauthorizedError(AppError):
    status_code = 401


class InvalidCredentialsError(UnauthorizedError):
    def __init__(self, message: str = "Invalid username or password") -> None:
        super().__init__(message)


class InvalidTokenError(UnauthorizedError):
    def __init__(self, message: str = "Invalid or expired token") -> None:
        super().__init__(message)


class ForbiddenError(AppError):
    status_code = 403


class NotFoundError(AppError):
    status_code = 404


class StorageError(AppError):
    status_code = 500


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    headers = None
    if isinstance(exc, UnauthorizedError) and not isinstance(exc, InvalidCredentialsError):
        headers = {"WWW-Authenticate": "Bearer"}
    if isinstance(exc, StorageError):
        logger.error(
            "Storage failure on %s %s: %s",
            request.method, request.url.path, exc.message, exc_info=exc,
        )
        return JSONResponse({"error": GENERIC_STORAGE_MESSAGE}, status_code=exc.status_code)
    return JSONResponse({"error": exc.message}, status_code=exc.status_code, headers=headers)


async def sqlalchemy_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error(
        "Unhandled database error on %s %s", request.method, request.url.path, exc_info=exc
    )
    return JSONResponse({"error": GENERIC_STORAGE_MESSAGE}, status_code=500)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    # Report the first problem in the same shape as service-level validation.
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    if location:
        message = f"{location}: {message}"
    return JSONResponse({"error": message}, status_code=400)


def install_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
