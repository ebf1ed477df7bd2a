"""FastAPI application setup."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from coursereg.api.dependencies import (
    close_notification_center,
    close_registry_store,
    close_workflow_manager,
    init_notification_center,
    init_registry_store,
    init_workflow_manager,
)
from coursereg.api.models import APIResponse
from coursereg.api.routes import courses, events, registrations, workflows
from coursereg.config import Settings
from coursereg.documents import ConfirmationRenderer, EmailDelivery
from coursereg.registry import (
    CourseExistsError,
    CourseNotFoundError,
    InvalidCourseDatesError,
    RegistrationNotFoundError,
    RegistryError,
    seed_demo_data,
)
from coursereg.workflow import CourseNotOpenError, WorkflowManager, WorkflowNotFoundError

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=APIResponse[None](data=None, error=message).model_dump(),
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    # Startup
    settings = app.state.settings
    if settings is None:
        settings = Settings.from_env()
    store = init_registry_store(settings.db_path)
    if settings.seed_demo:
        seed_demo_data(store)
    center = init_notification_center()

    delivery = None
    if settings.email_enabled:
        delivery = EmailDelivery(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_username,
            password=settings.smtp_password,
            sender=settings.smtp_from,
        )
    manager = WorkflowManager(
        store=store,
        notification_center=center,
        renderer=ConfirmationRenderer(),
        delivery=delivery,
        max_image_bytes=settings.max_image_bytes,
        auto_close_seconds=settings.auto_close_seconds,
        idle_timeout_seconds=settings.idle_timeout_seconds,
    )
    init_workflow_manager(manager)

    yield
    # Shutdown
    close_workflow_manager()
    close_notification_center()
    close_registry_store()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Application settings. Read from the environment at startup
                  when omitted.
    """
    app = FastAPI(
        title="Course Registration API",
        description="REST API for course catalog and multi-step registration",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Store config for lifespan manager
    app.state.settings = settings

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(CourseNotFoundError)
    async def course_not_found_handler(
        _request: Request, _exc: CourseNotFoundError
    ) -> JSONResponse:
        return _error(status.HTTP_404_NOT_FOUND, "Course not found")

    @app.exception_handler(RegistrationNotFoundError)
    async def registration_not_found_handler(
        _request: Request, _exc: RegistrationNotFoundError
    ) -> JSONResponse:
        return _error(status.HTTP_404_NOT_FOUND, "Registration not found")

    @app.exception_handler(WorkflowNotFoundError)
    async def workflow_not_found_handler(
        _request: Request, _exc: WorkflowNotFoundError
    ) -> JSONResponse:
        return _error(status.HTTP_404_NOT_FOUND, "Workflow not found")

    @app.exception_handler(CourseExistsError)
    async def course_exists_handler(_request: Request, _exc: CourseExistsError) -> JSONResponse:
        return _error(status.HTTP_409_CONFLICT, "Course with this id already exists")

    @app.exception_handler(CourseNotOpenError)
    async def course_not_open_handler(_request: Request, _exc: CourseNotOpenError) -> JSONResponse:
        return _error(status.HTTP_409_CONFLICT, "Course is not open for registration")

    @app.exception_handler(InvalidCourseDatesError)
    async def invalid_course_dates_handler(
        _request: Request, _exc: InvalidCourseDatesError
    ) -> JSONResponse:
        return _error(status.HTTP_422_UNPROCESSABLE_ENTITY, "Date range ends before it starts")

    @app.exception_handler(RegistryError)
    async def registry_error_handler(_request: Request, _exc: RegistryError) -> JSONResponse:
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")

    # Include routers
    app.include_router(courses.router, prefix="/api/v1")
    app.include_router(registrations.router, prefix="/api/v1")
    app.include_router(workflows.router, prefix="/api/v1")
    app.include_router(events.router, prefix="/api/v1")

    return app


def run() -> None:
    """Serve the API with uvicorn."""
    import uvicorn  # noqa: PLC0415

    from coursereg.logging import setup_logging  # noqa: PLC0415

    setup_logging()
    settings = Settings.from_env()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


# Default app instance
app = create_app()
