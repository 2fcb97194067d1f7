"""
Application error taxonomy.

Every error carries the pieces of the response envelope (message, error and
an optional field-level errors map) plus its HTTP status code. Services raise
these; the handlers registered in ``register_exception_handlers`` are the only
place they are turned into responses.
"""

import logging
from typing import Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Server error"
    error = "An unexpected error occurred. Please try again later."

    def __init__(
        self,
        message: Optional[str] = None,
        error: Optional[str] = None,
        errors: Optional[Dict[str, List[str]]] = None,
    ):
        self.message = message or self.message
        self.error = error or self.error
        self.errors = errors
        super().__init__(self.message)


class BadRequestError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Bad request"
    error = "The request could not be processed."


class UnauthenticatedError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Unauthenticated"
    error = "Authentication required. Please provide a valid token."


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Unauthorized"
    error = "You do not have permission to perform this action."


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"
    error = "The requested resource does not exist."


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    message = "Conflict"
    error = "The request conflicts with the current state of the resource."


class PayloadTooLargeError(AppError):
    status_code = 413
    message = "File too large"
    error = "The uploaded file is too large."


class ValidationFailedError(AppError):
    status_code = 422
    message = "Validation failed"
    error = "The provided data is invalid."

    def __init__(self, errors: Dict[str, List[str]], message: Optional[str] = None):
        super().__init__(message=message, errors=errors)


class InternalError(AppError):
    """Unexpected failure; ``detail`` only reaches the client in debug mode"""

    def __init__(self, message: Optional[str] = None, detail: Optional[str] = None):
        super().__init__(message=message)
        self.detail = detail


def register_exception_handlers(app: FastAPI) -> None:
    # Imported here: core.validation and core.database import this module
    from storefront.core.config import settings
    from storefront.core.responses import error_response
    from storefront.core.validation import format_validation_errors

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        error = exc.error
        if isinstance(exc, InternalError) and settings.DEBUG and exc.detail:
            error = exc.detail
        return error_response(exc.status_code, exc.message, error, exc.errors)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return error_response(
            ValidationFailedError.status_code,
            ValidationFailedError.message,
            ValidationFailedError.error,
            format_validation_errors(exc.errors()),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        # Keeps headers such as Allow on 405 responses
        return error_response(
            exc.status_code, str(exc.detail), str(exc.detail), headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {str(exc)}")
        error = str(exc) if settings.DEBUG else AppError.error
        return error_response(AppError.status_code, AppError.message, error)
