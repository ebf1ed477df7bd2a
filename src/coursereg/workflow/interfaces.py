"""Collaborator interfaces used by the registration workflow."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from coursereg.registry import Course, Registration, RegistrationPayload
    from coursereg.workflow.models import NotificationKind


class RegistrationStore(Protocol):
    """Interface for persisting registrations."""

    def save_registration(self, payload: RegistrationPayload) -> Registration:
        """Create or update a registration."""
        ...


class Notifier(Protocol):
    """Fire-and-forget sink for user-facing notifications."""

    def notify(
        self,
        message: str,
        kind: NotificationKind = ...,
        workflow_id: str | None = None,
    ) -> None:
        """Publish a notification."""
        ...


class DocumentRenderer(Protocol):
    """Interface for rendering a confirmation document."""

    def render(self, registration: Registration, course: Course) -> bytes:
        """Render the document for a committed registration."""
        ...


class DocumentDelivery(Protocol):
    """Interface for delivering a document to the applicant."""

    def deliver(
        self,
        recipient: str,
        document: bytes,
        subject: str = ...,
        body: str = ...,
        filename: str = ...,
    ) -> bool:
        """Deliver a document. Returns True on success."""
        ...
