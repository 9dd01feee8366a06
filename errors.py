"""
Application error hierarchy and FastAPI exception handlers.

AppError is the base for all typed errors. The global exception handler
converts AppError subclasses to consistent JSON responses.

Verification transport failures are deliberately absent: the hCaptcha
client recovers from them locally and reports ``verified=False``.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from shared.logging import get_logger

log = get_logger(__name__)


class AppError(Exception):
    """Base application error. All typed errors inherit from this."""

    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.field = field
        self.details = details

    def to_dict(self) -> dict:
        payload: dict = {"error": self.message, "code": self.error_code}
        if self.field is not None:
            payload["field"] = self.field
        if self.details is not None:
            payload["details"] = self.details
        return payload


class ValidationError(AppError):
    status_code = 400
    error_code = "validation_error"


class NotFoundError(AppError):
    status_code = 404
    error_code = "not_found"


class MissingSessionIdError(ValidationError):
    error_code = "missing_session_id"

    def __init__(self, message: str = "session_id is required") -> None:
        super().__init__(message, field="session_id")


class ChallengeNotFoundError(NotFoundError):
    error_code = "challenge_not_found"

    def __init__(self, challenge_id: str) -> None:
        super().__init__("Challenge not found", details={"challenge_id": challenge_id})
        self.challenge_id = challenge_id


class ChallengeAlreadySolvedError(ValidationError):
    error_code = "challenge_already_solved"

    def __init__(self, challenge_id: str) -> None:
        super().__init__(
            "Challenge already solved", details={"challenge_id": challenge_id}
        )
        self.challenge_id = challenge_id


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the FastAPI app."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = exc.errors()
        field = None
        if errors:
            loc = [str(part) for part in errors[0].get("loc", ()) if part != "body"]
            field = ".".join(loc) or None
        error = ValidationError(
            "Invalid request",
            field=field,
            details=[e.get("msg") for e in errors],
        )
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        # Sentry integration: if sentry_sdk is initialized it will auto-capture
        # unhandled exceptions before this handler fires.
        log.error(
            "unhandled_exception",
            path=request.url.path,
            error=str(exc),
            error_type=type(exc).__name__,
        )
        return JSONResponse(
            status_code=500,
            content={"error": "An internal server error occurred.", "code": "internal_error"},
        )
