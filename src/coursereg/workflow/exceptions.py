"""Exceptions for the registration workflow.

Every failure a workflow can meet maps onto one of these. None of them is
fatal: each resolves to a user-visible message and a state that allows a
retry or a cancellation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from coursereg.workflow.models import WorkflowStep


class WorkflowError(Exception):
    """Base exception for workflow errors."""


class DraftValidationError(WorkflowError):
    """A step's input is incomplete or malformed. Blocks advancing only."""

    def __init__(self, step: WorkflowStep, message: str) -> None:
        super().__init__(message)
        self.step = step
        self.message = message


class AttachmentRejectedError(WorkflowError):
    """A single selected file was refused. The rest of the batch goes on."""

    def __init__(self, filename: str, reason: str) -> None:
        super().__init__(f"{filename}: {reason}")
        self.filename = filename
        self.reason = reason


class SubmissionFailedError(WorkflowError):
    """The registration store refused the submission. The draft is kept."""


class DownstreamNotificationFailedError(WorkflowError):
    """Confirmation rendering or delivery failed after the registration committed."""


class CourseNotOpenError(WorkflowError):
    """A workflow was requested for a course that is not open for registration."""


class WorkflowNotFoundError(WorkflowError):
    """No open workflow has the given ID."""
