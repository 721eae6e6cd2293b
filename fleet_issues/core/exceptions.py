import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base for every error a handler may surface to a client."""

    status_code = 500
    code = "internal_error"
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthorized(AppError):
    status_code = 401
    code = "unauthorized"
    default_message = "Unauthorized"


class Forbidden(AppError):
    status_code = 403
    code = "forbidden"
    default_message = "Forbidden"


class NotFound(AppError):
    status_code = 404
    code = "not_found"
    default_message = "Not found"


class ValidationFailed(AppError):
    status_code = 400
    code = "validation_failed"
    default_message = "Validation failed"


class Conflict(AppError):
    status_code = 409
    code = "conflict"
    default_message = "Resource already exists"


class QuotaExceeded(AppError):
    status_code = 400
    code = "quota_exceeded"
    default_message = "Quota exceeded"


def _error_response(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, "code": code})


def _first_validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return ValidationFailed.default_message
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    msg = first.get("msg", ValidationFailed.default_message)
    # Pydantic prefixes custom ValueError messages
    msg = msg.removeprefix("Value error, ")
    return f"{field}: {msg}" if field else msg


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        return _error_response(exc.status_code, exc.code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return _error_response(
            ValidationFailed.status_code, ValidationFailed.code, _first_validation_message(exc)
        )

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError):
        # Store details stay in the log
        logger.warning("⚠️ Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
        return _error_response(Conflict.status_code, Conflict.code, Conflict.default_message)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        # The server logs the traceback once the error propagates past this handler
        logger.error(f"❌ Unhandled error on {request.method} {request.url.path}: {exc!r}")
        return _error_response(500, AppError.code, AppError.default_message)
