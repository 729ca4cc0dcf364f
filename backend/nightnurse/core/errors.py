"""Intake error taxonomy and the FastAPI handlers that render it."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse

logger = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = "Sorry, something went wrong. Please try again or email us directly."


class IntakeError(Exception):
    """Base exception for intake and admin errors."""


class SubmissionValidationError(IntakeError):
    """User input failed validation. Carries every field error; the first one wins for display."""

    def __init__(self, errors: list[dict]):
        if not errors:
            raise ValueError("SubmissionValidationError requires at least one error")
        self.errors = errors
        self.message = errors[0]["message"]
        super().__init__(self.message)

    @classmethod
    def single(cls, field: str, message: str) -> "SubmissionValidationError":
        return cls([{"field": field, "message": message}])


class AuthError(IntakeError):
    """Missing or wrong admin credentials."""


class RateLimitError(IntakeError):
    def __init__(self, message: str, retry_after: int):
        self.message = message
        self.retry_after = retry_after
        super().__init__(message)


class DuplicateConstraintError(IntakeError):
    """Newsletter email already subscribed."""


class StorageError(IntakeError):
    """Unexpected persistence failure."""


class NotificationError(IntakeError):
    """Outbound email could not be sent."""


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(SubmissionValidationError)
    async def handle_validation_error(request: Request, exc: SubmissionValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"ok": False, "message": exc.message, "errors": exc.errors},
        )

    @app.exception_handler(RateLimitError)
    async def handle_rate_limit_error(request: Request, exc: RateLimitError):
        return JSONResponse(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            content={"ok": False, "message": exc.message},
            headers={"Retry-After": str(exc.retry_after)},
        )

    @app.exception_handler(AuthError)
    async def handle_auth_error(request: Request, exc: AuthError):
        return PlainTextResponse(
            "Access denied",
            status_code=status.HTTP_401_UNAUTHORIZED,
            headers={"WWW-Authenticate": 'Basic realm="Admin Area"'},
        )

    @app.exception_handler(StorageError)
    async def handle_storage_error(request: Request, exc: StorageError):
        logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc, exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"ok": False, "message": GENERIC_FAILURE_MESSAGE},
        )
