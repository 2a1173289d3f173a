from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response schema."""

    error: str
    detail: str | None = None
    status_code: int
    extra: dict[str, Any] | None = None


class AppError(Exception):
    """Base application exception."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        extra: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.extra = extra
        super().__init__(self.message)


class ValidationError(AppError):
    """Malformed input detected before any mutation is attempted."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=status.HTTP_422_UNPROCESSABLE_ENTITY)


class InsufficientBalanceError(AppError):
    """Requested hours exceed the employee's available balance."""

    def __init__(self, requested_hours: float, available_hours: float) -> None:
        self.requested_hours = requested_hours
        self.available_hours = available_hours
        self.shortfall_hours = requested_hours - available_hours
        super().__init__(
            f"Insufficient balance: requested {requested_hours:g}h, available {available_hours:g}h",
            status_code=status.HTTP_400_BAD_REQUEST,
            extra={
                "requested_hours": requested_hours,
                "available_hours": available_hours,
                "shortfall_hours": self.shortfall_hours,
            },
        )


class InvalidTransitionError(AppError):
    """A request was reviewed, edited or deleted outside its allowed state."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=status.HTTP_400_BAD_REQUEST)


class CollaboratorUnavailableError(AppError):
    """An upstream directory failed, so the balance cannot be computed."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)


async def _app_exception_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=type(exc).__name__,
            detail=exc.message,
            status_code=exc.status_code,
            extra=exc.extra,
        ).model_dump(),
    )


async def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=ErrorResponse(
            error="ValidationError",
            detail=str(exc.errors()),
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        ).model_dump(),
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers on the application."""
    app.add_exception_handler(AppError, _app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)  # type: ignore[arg-type]
