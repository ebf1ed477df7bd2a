"""RegistrationWorkflow - Multi-step registration state machine."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING

from coursereg.config import DEFAULT_AUTO_CLOSE_SECONDS, DEFAULT_MAX_IMAGE_BYTES
from coursereg.logging import sanitize_for_log
from coursereg.registry.models import generate_uuid
from coursereg.registry.payloads import NewRegistration
from coursereg.workflow.attachments import ingest_files
from coursereg.workflow.deferred import DeferredAction
from coursereg.workflow.exceptions import (
    DownstreamNotificationFailedError,
    DraftValidationError,
    SubmissionFailedError,
    WorkflowError,
)
from coursereg.workflow.models import (
    DRAFT_FIELDS,
    EDITING_STEPS,
    TERMINAL_STEPS,
    IncomingFile,
    IngestionResult,
    NotificationKind,
    RegistrationDraft,
    WorkflowSnapshot,
    WorkflowStep,
)
from coursereg.workflow.validation import validate_draft, validate_step

if TYPE_CHECKING:
    from coursereg.registry import Course, Registration
    from coursereg.workflow.interfaces import (
        DocumentDelivery,
        DocumentRenderer,
        Notifier,
        RegistrationStore,
    )

logger = logging.getLogger(__name__)

NO_ATTACHMENTS_SELECTED = "No attachments selected"
ALL_ATTACHMENTS_REJECTED = "All selected attachments were rejected"
SUBMISSION_FAILED = "Registration failed, please try again"
CONFIRMATION_FAILED = "The confirmation document could not be sent"

_NEXT_STEP = {
    WorkflowStep.PERSONAL: WorkflowStep.CONTACT,
    WorkflowStep.CONTACT: WorkflowStep.DOCUMENTS,
}
_PREVIOUS_STEP = {
    WorkflowStep.CONTACT: WorkflowStep.PERSONAL,
    WorkflowStep.DOCUMENTS: WorkflowStep.CONTACT,
}


class RegistrationWorkflow:
    """Collects, validates and submits one applicant's registration for a course.

    The workflow walks PERSONAL -> CONTACT -> DOCUMENTS, then SUBMITTING and
    SUCCEEDED. It can be cancelled from any editing step and closes itself a
    fixed delay after succeeding. Collaborator failures never escape: each one
    is logged and turned into an inline error and/or a notification.
    """

    def __init__(
        self,
        course: Course,
        store: RegistrationStore,
        notifier: Notifier,
        renderer: DocumentRenderer | None = None,
        delivery: DocumentDelivery | None = None,
        workflow_id: str | None = None,
        max_image_bytes: int = DEFAULT_MAX_IMAGE_BYTES,
        auto_close_seconds: float = DEFAULT_AUTO_CLOSE_SECONDS,
        on_close: Callable[[RegistrationWorkflow, str], None] | None = None,
    ) -> None:
        """Open a workflow with an empty draft.

        Args:
            course: The course being registered for.
            store: Registration store used on submission.
            notifier: Sink for user-facing notifications.
            renderer: Renders the confirmation document (optional).
            delivery: Delivers the confirmation document (optional).
            workflow_id: Explicit ID (generated when omitted).
            max_image_bytes: Largest accepted image attachment.
            auto_close_seconds: Delay between success and automatic close.
            on_close: Called once with the workflow and a reason when it
                      reaches a terminal state.
        """
        self.id = workflow_id if workflow_id is not None else generate_uuid()
        self.course = course
        self.store = store
        self.notifier = notifier
        self.renderer = renderer
        self.delivery = delivery
        self.max_image_bytes = max_image_bytes
        self.auto_close_seconds = auto_close_seconds
        self.on_close = on_close

        self.step = WorkflowStep.PERSONAL
        self.draft: RegistrationDraft | None = RegistrationDraft()
        self.error: str | None = None
        self.failure: WorkflowError | None = None
        self.submitting = False
        self.registration: Registration | None = None
        self._auto_close: DeferredAction | None = None

        logger.info("Opened workflow %s for course %s", self.id, course.id)

    # --- State ---

    @property
    def is_editable(self) -> bool:
        """Whether the draft can still be changed."""
        return self.step in EDITING_STEPS and not self.submitting

    @property
    def is_open(self) -> bool:
        """Whether the workflow has not reached a terminal state."""
        return self.step not in TERMINAL_STEPS

    @property
    def auto_close_pending(self) -> bool:
        """Whether an automatic close is scheduled."""
        return self._auto_close is not None and self._auto_close.pending

    def snapshot(self) -> WorkflowSnapshot:
        """Return the host-visible state."""
        draft = self.draft
        return WorkflowSnapshot(
            workflow_id=self.id,
            course_id=self.course.id,
            step=self.step,
            error=self.error,
            submitting=self.submitting,
            fields=draft.values() if draft is not None else {},
            attachments=[
                {
                    "filename": a.filename,
                    "mime_type": a.mime_type,
                    "size": a.size,
                    "preview": a.preview,
                }
                for a in (draft.attachments if draft is not None else [])
            ],
            registration_id=self.registration.id if self.registration is not None else None,
            failure=type(self.failure).__name__ if self.failure is not None else None,
        )

    # --- Draft editing ---

    def update_field(self, name: str, value: str) -> bool:
        """Set one draft text field.

        Returns:
            False if the draft can no longer be edited.

        Raises:
            ValueError: If ``name`` is not a draft field.
        """
        if name not in DRAFT_FIELDS:
            raise ValueError(f"Unknown draft field: {name}")
        if not self.is_editable or self.draft is None:
            logger.debug("Ignored edit of %s on workflow %s in %s", name, self.id, self.step)
            return False
        setattr(self.draft, name, value)
        return True

    def update_fields(self, **values: str) -> bool:
        """Set several draft text fields at once."""
        unknown = sorted(set(values) - set(DRAFT_FIELDS))
        if unknown:
            raise ValueError(f"Unknown draft field(s): {', '.join(unknown)}")
        if not self.is_editable:
            return False
        for name, value in values.items():
            self.update_field(name, value)
        return True

    def validate(self, step: WorkflowStep | None = None) -> None:
        """Validate the draft for an editing step (the current one by default).

        Raises:
            DraftValidationError: If the step's rule is not met.
            ValueError: If the step has no input, or the draft is gone.
        """
        if self.draft is None:
            raise ValueError(f"Workflow {self.id} has no draft")
        validate_step(step if step is not None else self.step, self.draft)

    # --- Transitions ---

    def advance(self) -> bool:
        """Move to the next editing step if the current one validates.

        Returns:
            True if the step changed.
        """
        next_step = _NEXT_STEP.get(self.step)
        if next_step is None or self.submitting:
            return False

        try:
            self.validate(self.step)
        except DraftValidationError as e:
            self._record(e, e.message)
            logger.info("Workflow %s blocked at %s: %s", self.id, self.step, e.message)
            return False

        self._record(None, None)
        self._transition(next_step)
        return True

    def retreat(self) -> bool:
        """Move back one editing step. Never revalidates.

        Returns:
            True if the step changed.
        """
        previous_step = _PREVIOUS_STEP.get(self.step)
        if previous_step is None or self.submitting:
            return False
        self._record(None, None)
        self._transition(previous_step)
        return True

    async def attach(self, files: Iterable[IncomingFile]) -> IngestionResult:
        """Replace the draft's attachments with a new file selection.

        Oversized images are rejected one by one, each with its own error
        notification; the remaining files are still accepted.

        Returns:
            The ingestion outcome.
        """
        selected = list(files)
        if not self.is_editable:
            logger.debug("Ignored attachments on workflow %s in %s", self.id, self.step)
            return IngestionResult()

        result = await ingest_files(selected, self.max_image_bytes)

        # The workflow may have been cancelled while files were converting
        if not self.is_editable or self.draft is None:
            return result

        for rejection in result.rejected:
            self._notify(f"Attachment rejected: {rejection}", NotificationKind.ERROR)

        self.draft.attachments = list(result.accepted)
        if result.accepted:
            self._record(None, None)
        elif result.rejected:
            self._record(result.rejected[0], ALL_ATTACHMENTS_REJECTED)
        else:
            failure = DraftValidationError(WorkflowStep.DOCUMENTS, NO_ATTACHMENTS_SELECTED)
            self._record(failure, NO_ATTACHMENTS_SELECTED)
        return result

    async def submit(self) -> bool:
        """Submit the draft to the registration store.

        The whole draft is revalidated first; if an earlier step no longer
        passes, the workflow goes back to that step with its message. Only one
        submission can be in flight; repeated calls while one is outstanding
        return False without contacting the store. If the calling task is
        cancelled mid-submission the workflow returns to the documents step
        before the cancellation propagates.

        Returns:
            True if the registration was committed.
        """
        if self.submitting or self.step != WorkflowStep.DOCUMENTS or self.draft is None:
            return False

        try:
            validate_draft(self.draft)
        except DraftValidationError as e:
            if e.step != self.step:
                self._transition(e.step)
            self._record(e, e.message)
            logger.info("Workflow %s sent back to %s: %s", self.id, e.step, e.message)
            return False

        self.submitting = True
        self._record(None, None)
        self._transition(WorkflowStep.SUBMITTING)

        draft = self.draft
        payload = NewRegistration(
            course_id=self.course.id,
            fields=draft.to_fields(),
            documents=draft.to_documents(),
        )
        logger.info(
            "Submitting workflow %s for %s",
            self.id,
            sanitize_for_log(f"{draft.email} {draft.id_card}"),
        )

        try:
            registration = await asyncio.to_thread(self.store.save_registration, payload)
        except asyncio.CancelledError:
            logger.warning("Submission of workflow %s was interrupted", self.id)
            self._reopen_documents(SubmissionFailedError(SUBMISSION_FAILED))
            raise
        except Exception as e:
            logger.warning("Submission of workflow %s failed: %s", self.id, e)
            failure = SubmissionFailedError(SUBMISSION_FAILED)
            failure.__cause__ = e
            self._reopen_documents(failure)
            self._notify(SUBMISSION_FAILED, NotificationKind.ERROR)
            return False

        self.submitting = False
        self.registration = registration
        self.draft = None
        self._transition(WorkflowStep.SUCCEEDED)
        self._notify(
            f'Registration for "{self.course.name}" succeeded', NotificationKind.SUCCESS
        )
        self._auto_close = DeferredAction.schedule(self.auto_close_seconds, self._auto_close_due)

        await self._send_confirmation(registration)
        return True

    def cancel(self) -> bool:
        """Discard the draft and end the workflow from an editing step.

        Ignored while a submission is in flight.

        Returns:
            True if the workflow was cancelled.
        """
        if self.submitting:
            logger.info("Ignored cancel of workflow %s during submission", self.id)
            return False
        if self.step not in EDITING_STEPS:
            return False
        self.draft = None
        self.error = None
        self._finish(WorkflowStep.CANCELLED, "cancelled")
        return True

    def expire(self) -> bool:
        """End an abandoned workflow, discarding any draft.

        Ignored while a submission is in flight.

        Returns:
            True if the workflow was ended by this call.
        """
        if self.submitting or not self.is_open:
            return False
        ended = WorkflowStep.CANCELLED if self.step in EDITING_STEPS else WorkflowStep.CLOSED
        self.draft = None
        self.error = None
        self._finish(ended, "expired")
        return True

    def close(self) -> bool:
        """Close the workflow as its host view goes away.

        Closing an editing workflow cancels it. Closing a succeeded workflow
        suppresses the pending automatic close.

        Returns:
            True if the workflow was closed by this call.
        """
        if self.submitting or not self.is_open:
            return False
        if self.step in EDITING_STEPS:
            return self.cancel()
        self._finish(WorkflowStep.CLOSED, "closed")
        return True

    # --- Internals ---

    def _transition(self, step: WorkflowStep) -> None:
        logger.debug("Workflow %s transitioned from %s to %s", self.id, self.step, step)
        self.step = step

    def _record(self, failure: WorkflowError | None, message: str | None) -> None:
        self.failure = failure
        self.error = message

    def _reopen_documents(self, failure: SubmissionFailedError) -> None:
        self.submitting = False
        self._transition(WorkflowStep.DOCUMENTS)
        self._record(failure, SUBMISSION_FAILED)

    def _finish(self, step: WorkflowStep, reason: str) -> None:
        if self._auto_close is not None:
            self._auto_close.cancel()
        self._transition(step)
        logger.info("Workflow %s finished (%s)", self.id, reason)
        if self.on_close is not None:
            try:
                self.on_close(self, reason)
            except Exception:
                logger.exception("on_close callback failed for workflow %s", self.id)

    def _auto_close_due(self) -> None:
        if self.step == WorkflowStep.SUCCEEDED:
            self._finish(WorkflowStep.CLOSED, "auto_closed")

    def _notify(self, message: str, kind: NotificationKind) -> None:
        try:
            self.notifier.notify(message, kind, workflow_id=self.id)
        except Exception:
            logger.exception("Notification sink failed for workflow %s", self.id)

    async def _send_confirmation(self, registration: Registration) -> bool:
        """Render and deliver the confirmation document.

        Failures are reported as notifications and never undo the committed
        registration.
        """
        if self.renderer is None or self.delivery is None:
            return False

        renderer = self.renderer
        delivery = self.delivery
        try:
            document = await asyncio.to_thread(renderer.render, registration, self.course)
            delivered = await asyncio.to_thread(
                delivery.deliver,
                registration.email,
                document,
                subject=f"Registration confirmation: {self.course.name}",
                body=(
                    f'You are registered for "{self.course.name}" '
                    f"(registration ID {registration.id}). "
                    "Your confirmation document is attached."
                ),
                filename=f"registration_{registration.id}.html",
            )
        except Exception as e:
            logger.warning("Workflow %s: %s: %s", self.id, CONFIRMATION_FAILED, e)
            failure = DownstreamNotificationFailedError(CONFIRMATION_FAILED)
            failure.__cause__ = e
            self.failure = failure
            self._notify(CONFIRMATION_FAILED, NotificationKind.ERROR)
            return False

        if not delivered:
            logger.warning(
                "Workflow %s: confirmation for %s not delivered", self.id, registration.id
            )
            self.failure = DownstreamNotificationFailedError(CONFIRMATION_FAILED)
            self._notify(CONFIRMATION_FAILED, NotificationKind.ERROR)
            return False

        logger.info("Workflow %s: confirmation for %s delivered", self.id, registration.id)
        return True
