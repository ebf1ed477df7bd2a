"""Pydantic models for REST API."""

from datetime import date, datetime
from typing import Any, Generic, Self, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

from coursereg.catalog import resolve_course_status
from coursereg.registry import RegistrationStatus
from coursereg.workflow import WorkflowStep

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    """Standard API response wrapper."""

    data: T | None = None
    error: str | None = None


def _check_range(start: date | None, end: date | None, label: str) -> None:
    if start is not None and end is not None and start > end:
        raise ValueError(f"{label} start must not be after its end")


# Course models


class CourseCreate(BaseModel):
    """Request model for creating a course."""

    id: str | None = Field(default=None, min_length=1, max_length=36)
    name: str = Field(..., min_length=1, max_length=255)
    generation: str = Field(default="", max_length=100)
    description: str = ""
    location: str = Field(default="", max_length=255)
    instructor: str = Field(default="", max_length=255)
    start_date: date
    end_date: date
    registration_start: date
    registration_end: date
    max_participants: int = Field(..., ge=0)
    current_participants: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def check_ranges(self) -> Self:
        _check_range(self.registration_start, self.registration_end, "Registration")
        _check_range(self.start_date, self.end_date, "Course")
        return self


class CourseUpdate(BaseModel):
    """Request model for updating a course (partial update)."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    generation: str | None = Field(default=None, max_length=100)
    description: str | None = None
    location: str | None = Field(default=None, max_length=255)
    instructor: str | None = Field(default=None, max_length=255)
    start_date: date | None = None
    end_date: date | None = None
    registration_start: date | None = None
    registration_end: date | None = None
    max_participants: int | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def check_ranges(self) -> Self:
        _check_range(self.registration_start, self.registration_end, "Registration")
        _check_range(self.start_date, self.end_date, "Course")
        return self


class CourseResponse(BaseModel):
    """Response model for a course, including its derived status."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    generation: str
    description: str
    location: str
    instructor: str
    start_date: date
    end_date: date
    registration_start: date
    registration_end: date
    max_participants: int
    current_participants: int
    seats_remaining: int
    status: str
    can_register: bool
    created_at: datetime
    updated_at: datetime


def course_to_response(course: Any, now: date | datetime | None = None) -> CourseResponse:
    """Convert a Course model to CourseResponse, deriving its status at ``now``."""
    derived = resolve_course_status(course, now)
    return CourseResponse(
        id=course.id,
        name=course.name,
        generation=course.generation,
        description=course.description,
        location=course.location,
        instructor=course.instructor,
        start_date=course.start_date,
        end_date=course.end_date,
        registration_start=course.registration_start,
        registration_end=course.registration_end,
        max_participants=course.max_participants,
        current_participants=course.current_participants,
        seats_remaining=course.seats_remaining,
        status=derived.status.value,
        can_register=derived.can_register,
        created_at=course.created_at,
        updated_at=course.updated_at,
    )


# Registration models


class DocumentResponse(BaseModel):
    """Response model for a stored registration document (metadata only)."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    filename: str
    mime_type: str
    size: int


class RegistrationResponse(BaseModel):
    """Response model for a registration."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    course_id: str
    course_name: str = ""
    first_name: str
    last_name: str
    id_card: str
    birth_date: str
    student_id: str
    phone: str
    email: str
    organization: str
    position: str
    address: str
    registration_date: date
    status: str
    created_at: datetime
    documents: list[DocumentResponse] = []


def registration_to_response(registration: Any, course_name: str = "") -> RegistrationResponse:
    """Convert a Registration model to RegistrationResponse."""
    response = RegistrationResponse.model_validate(registration)
    return response.model_copy(update={"course_name": course_name})


class RegistrationUpdate(BaseModel):
    """Request model for updating a registration (partial update)."""

    model_config = ConfigDict(extra="forbid")

    first_name: str | None = None
    last_name: str | None = None
    id_card: str | None = None
    birth_date: str | None = None
    student_id: str | None = None
    phone: str | None = None
    email: str | None = None
    organization: str | None = None
    position: str | None = None
    address: str | None = None
    status: RegistrationStatus | None = None


# Workflow models


class WorkflowOpen(BaseModel):
    """Request model for opening a registration workflow."""

    course_id: str = Field(..., min_length=1)


class DraftUpdate(BaseModel):
    """Request model for editing draft fields. Omitted fields are left as-is."""

    model_config = ConfigDict(extra="forbid")

    first_name: str | None = None
    last_name: str | None = None
    id_card: str | None = None
    birth_date: str | None = None
    student_id: str | None = None
    phone: str | None = None
    email: str | None = None
    organization: str | None = None
    position: str | None = None
    address: str | None = None


class AttachmentResponse(BaseModel):
    """Response model for an accepted attachment."""

    filename: str
    mime_type: str
    size: int
    preview: str | None


class WorkflowResponse(BaseModel):
    """Response model for a workflow's visible state."""

    model_config = ConfigDict(from_attributes=True)

    workflow_id: str
    course_id: str
    step: WorkflowStep
    step_number: int | None
    error: str | None
    submitting: bool
    fields: dict[str, str]
    attachments: list[AttachmentResponse]
    registration_id: str | None
    failure: str | None = None


def workflow_to_response(workflow: Any) -> WorkflowResponse:
    """Convert a RegistrationWorkflow to WorkflowResponse."""
    snapshot = workflow.snapshot()
    return WorkflowResponse(
        workflow_id=snapshot.workflow_id,
        course_id=snapshot.course_id,
        step=snapshot.step,
        step_number=snapshot.step.number,
        error=snapshot.error,
        submitting=snapshot.submitting,
        fields=snapshot.fields,
        attachments=[AttachmentResponse(**a) for a in snapshot.attachments],
        registration_id=snapshot.registration_id,
        failure=snapshot.failure,
    )


class ActionResponse(BaseModel):
    """Response model for a workflow action."""

    accepted: bool
    workflow: WorkflowResponse


class AttachmentsResponse(BaseModel):
    """Response model for an attachment upload."""

    accepted: list[str]
    rejected: list[str]
    workflow: WorkflowResponse
