"""WorkflowManager - Registry of open registration workflows."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import date, datetime
from typing import TYPE_CHECKING

from coursereg.catalog import resolve_course_status
from coursereg.config import (
    DEFAULT_AUTO_CLOSE_SECONDS,
    DEFAULT_IDLE_TIMEOUT_SECONDS,
    DEFAULT_MAX_IMAGE_BYTES,
)
from coursereg.workflow.exceptions import CourseNotOpenError, WorkflowNotFoundError
from coursereg.workflow.workflow import RegistrationWorkflow

if TYPE_CHECKING:
    from coursereg.api.events import NotificationCenter
    from coursereg.registry import Course
    from coursereg.workflow.interfaces import (
        DocumentDelivery,
        DocumentRenderer,
        RegistrationStore,
    )

logger = logging.getLogger(__name__)


class WorkflowManager:
    """Opens workflows for open courses and tracks them until they close.

    A workflow is forgotten as soon as it is cancelled, closed or auto-closed,
    and a ``workflow_closed`` event is published for it. Workflows nobody has
    looked up for ``idle_timeout_seconds`` are closed the next time the
    manager opens or looks up any workflow.
    """

    def __init__(
        self,
        store: RegistrationStore,
        notification_center: NotificationCenter,
        renderer: DocumentRenderer | None = None,
        delivery: DocumentDelivery | None = None,
        max_image_bytes: int = DEFAULT_MAX_IMAGE_BYTES,
        auto_close_seconds: float = DEFAULT_AUTO_CLOSE_SECONDS,
        idle_timeout_seconds: float = DEFAULT_IDLE_TIMEOUT_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.store = store
        self.notification_center = notification_center
        self.renderer = renderer
        self.delivery = delivery
        self.max_image_bytes = max_image_bytes
        self.auto_close_seconds = auto_close_seconds
        self.idle_timeout_seconds = idle_timeout_seconds
        self._clock = clock
        self._workflows: dict[str, RegistrationWorkflow] = {}
        self._last_seen: dict[str, float] = {}

    def open(self, course: Course, now: date | datetime | None = None) -> RegistrationWorkflow:
        """Open a workflow for a course.

        Raises:
            CourseNotOpenError: If the course is not accepting registrations today.
        """
        self.expire_idle()
        derived = resolve_course_status(course, now)
        if not derived.can_register:
            raise CourseNotOpenError(
                f"Course '{course.id}' is not open for registration ({derived.status})"
            )

        workflow = RegistrationWorkflow(
            course=course,
            store=self.store,
            notifier=self.notification_center,
            renderer=self.renderer,
            delivery=self.delivery,
            max_image_bytes=self.max_image_bytes,
            auto_close_seconds=self.auto_close_seconds,
            on_close=self._on_closed,
        )
        self._workflows[workflow.id] = workflow
        self._last_seen[workflow.id] = self._clock()
        return workflow

    def get(self, workflow_id: str) -> RegistrationWorkflow:
        """Get an open workflow by ID.

        Raises:
            WorkflowNotFoundError: If no open workflow has this ID, or it expired.
        """
        self.expire_idle()
        workflow = self._workflows.get(workflow_id)
        if workflow is None:
            raise WorkflowNotFoundError(f"Workflow with id '{workflow_id}' not found")
        self._last_seen[workflow_id] = self._clock()
        return workflow

    def close(self, workflow_id: str) -> bool:
        """Close a workflow as its host view goes away.

        Raises:
            WorkflowNotFoundError: If no open workflow has this ID.
        """
        return self.get(workflow_id).close()

    def close_all(self) -> None:
        """Close every workflow that is not mid-submission."""
        for workflow in list(self._workflows.values()):
            workflow.close()

    def expire_idle(self) -> int:
        """Close workflows that have been idle longer than the timeout.

        Workflows with a submission in flight are left alone.

        Returns:
            Number of workflows closed.
        """
        if self.idle_timeout_seconds <= 0:
            return 0
        deadline = self._clock() - self.idle_timeout_seconds
        stale = [
            workflow
            for workflow_id, workflow in list(self._workflows.items())
            if self._last_seen.get(workflow_id, deadline) < deadline
        ]
        expired = 0
        for workflow in stale:
            logger.info("Workflow %s idle for over %ss", workflow.id, self.idle_timeout_seconds)
            if workflow.expire():
                expired += 1
        return expired

    @property
    def active_count(self) -> int:
        """Number of open workflows."""
        return len(self._workflows)

    def _on_closed(self, workflow: RegistrationWorkflow, reason: str) -> None:
        self._workflows.pop(workflow.id, None)
        self._last_seen.pop(workflow.id, None)
        self.notification_center.emit_workflow_closed(workflow.id, reason)
        logger.info("Workflow %s released (%s)", workflow.id, reason)
