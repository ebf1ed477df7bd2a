"""REST API for course registration."""

from coursereg.api.app import app, create_app
from coursereg.api.models import (
    APIResponse,
    CourseCreate,
    CourseResponse,
    CourseUpdate,
    WorkflowResponse,
)

__all__ = [
    "APIResponse",
    "CourseCreate",
    "CourseResponse",
    "CourseUpdate",
    "WorkflowResponse",
    "app",
    "create_app",
]
