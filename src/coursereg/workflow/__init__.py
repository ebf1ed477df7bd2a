"""Workflow - Multi-step registration state machine."""

from coursereg.workflow.exceptions import (
    AttachmentRejectedError,
    CourseNotOpenError,
    DownstreamNotificationFailedError,
    DraftValidationError,
    SubmissionFailedError,
    WorkflowError,
    WorkflowNotFoundError,
)
from coursereg.workflow.manager import WorkflowManager
from coursereg.workflow.models import (
    Attachment,
    IncomingFile,
    IngestionResult,
    NotificationKind,
    RegistrationDraft,
    WorkflowSnapshot,
    WorkflowStep,
)
from coursereg.workflow.workflow import RegistrationWorkflow

__all__ = [
    "Attachment",
    "AttachmentRejectedError",
    "CourseNotOpenError",
    "DownstreamNotificationFailedError",
    "DraftValidationError",
    "IncomingFile",
    "IngestionResult",
    "NotificationKind",
    "RegistrationDraft",
    "RegistrationWorkflow",
    "SubmissionFailedError",
    "WorkflowError",
    "WorkflowManager",
    "WorkflowNotFoundError",
    "WorkflowSnapshot",
    "WorkflowStep",
]
