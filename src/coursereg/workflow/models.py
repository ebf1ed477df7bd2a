"""Data models for the registration workflow."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from coursereg.registry.payloads import DocumentPayload, RegistrationFields

if TYPE_CHECKING:
    from coursereg.workflow.exceptions import AttachmentRejectedError


class WorkflowStep(StrEnum):
    """Workflow state enum."""

    PERSONAL = "personal"
    CONTACT = "contact"
    DOCUMENTS = "documents"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    CANCELLED = "cancelled"
    CLOSED = "closed"

    @property
    def number(self) -> int | None:
        """1-based position among the editing steps, None for the others."""
        try:
            return EDITING_STEPS.index(self) + 1
        except ValueError:
            return None


class NotificationKind(StrEnum):
    """Severity of a user-facing notification."""

    SUCCESS = "success"
    ERROR = "error"


EDITING_STEPS = (WorkflowStep.PERSONAL, WorkflowStep.CONTACT, WorkflowStep.DOCUMENTS)
TERMINAL_STEPS = (WorkflowStep.CANCELLED, WorkflowStep.CLOSED)

PERSONAL_FIELDS = ("first_name", "last_name", "id_card", "birth_date", "student_id")
CONTACT_FIELDS = ("phone", "email", "organization", "position", "address")
DRAFT_FIELDS = PERSONAL_FIELDS + CONTACT_FIELDS


@dataclass(frozen=True)
class IncomingFile:
    """A file selected by the applicant, before ingestion."""

    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def is_image(self) -> bool:
        return self.content_type.lower().startswith("image/")


@dataclass(frozen=True)
class Attachment:
    """An accepted file.

    Attributes:
        filename: Original file name.
        mime_type: Declared content type.
        payload: Raw file content.
        preview: Inline ``data:`` URI for images, None for other files.
    """

    filename: str
    mime_type: str
    payload: bytes
    preview: str | None = None

    @property
    def size(self) -> int:
        return len(self.payload)


@dataclass
class RegistrationDraft:
    """Applicant data held by a workflow until it is submitted."""

    first_name: str = ""
    last_name: str = ""
    id_card: str = ""
    birth_date: str = ""
    student_id: str = ""
    phone: str = ""
    email: str = ""
    organization: str = ""
    position: str = ""
    address: str = ""
    attachments: list[Attachment] = field(default_factory=list)

    def to_fields(self) -> RegistrationFields:
        """Return the text fields as a registry payload."""
        return RegistrationFields(**{name: getattr(self, name) for name in DRAFT_FIELDS})

    def to_documents(self) -> tuple[DocumentPayload, ...]:
        """Return the accepted attachments as registry document payloads."""
        return tuple(
            DocumentPayload(filename=a.filename, mime_type=a.mime_type, data=a.payload)
            for a in self.attachments
        )

    def values(self) -> dict[str, str]:
        """Return the text fields as a dictionary."""
        return {f.name: getattr(self, f.name) for f in fields(self) if f.name in DRAFT_FIELDS}


@dataclass
class IngestionResult:
    """Outcome of one file selection.

    Attributes:
        accepted: Files that passed the size policy, in selection order.
        rejected: One error per refused file.
    """

    accepted: list[Attachment] = field(default_factory=list)
    rejected: list[AttachmentRejectedError] = field(default_factory=list)


@dataclass
class WorkflowSnapshot:
    """Host-visible state of a workflow."""

    workflow_id: str
    course_id: str
    step: WorkflowStep
    error: str | None
    submitting: bool
    fields: dict[str, str]
    attachments: list[dict[str, Any]]
    registration_id: str | None
    failure: str | None = None
