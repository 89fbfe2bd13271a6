"""FastAPI application setup."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from academia.api.dependencies import close_store, init_store
from academia.api.models import APIResponse
from academia.api.routes import enrollments, offerings, students
from academia.config import Settings, load_settings
from academia.exceptions import (
    AcademiaError,
    CapacityExceededError,
    DuplicateEnrollmentError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator


def _error_response(status_code: int, exc: AcademiaError, message: str | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=APIResponse[None](
            data=None, error=message or str(exc), details=exc.details()
        ).model_dump(),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Map the Academia error hierarchy to HTTP responses."""

    @app.exception_handler(NotFoundError)
    async def not_found_handler(_request: Request, exc: NotFoundError) -> JSONResponse:
        return _error_response(status.HTTP_404_NOT_FOUND, exc)

    @app.exception_handler(ValidationError)
    async def validation_handler(_request: Request, exc: ValidationError) -> JSONResponse:
        return _error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, exc)

    @app.exception_handler(CapacityExceededError)
    async def capacity_handler(_request: Request, exc: CapacityExceededError) -> JSONResponse:
        return _error_response(status.HTTP_409_CONFLICT, exc)

    @app.exception_handler(DuplicateEnrollmentError)
    async def duplicate_handler(_request: Request, exc: DuplicateEnrollmentError) -> JSONResponse:
        return _error_response(status.HTTP_409_CONFLICT, exc)

    @app.exception_handler(InvalidTransitionError)
    async def transition_handler(_request: Request, exc: InvalidTransitionError) -> JSONResponse:
        return _error_response(status.HTTP_409_CONFLICT, exc)

    @app.exception_handler(AcademiaError)
    async def academia_error_handler(_request: Request, exc: AcademiaError) -> JSONResponse:
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, exc, message="Internal server error"
        )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings: Settings = app.state.settings
    init_store(settings.db_path, busy_timeout=settings.busy_timeout)
    yield
    close_store()


def create_app(db_path: str | None = None, settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        db_path: Database path; overrides the one in settings.
        settings: Service settings. Loaded from file/environment when omitted.
    """
    if settings is None:
        settings = load_settings()
    if db_path is not None:
        settings.db_path = db_path

    app = FastAPI(
        title="Academia API",
        description="REST API for course offerings, enrollments and grades",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Store config for lifespan manager
    app.state.settings = settings

    register_exception_handlers(app)

    app.include_router(offerings.router, prefix=settings.api_prefix)
    app.include_router(enrollments.router, prefix=settings.api_prefix)
    app.include_router(students.router, prefix=settings.api_prefix)

    return app
