"""User-facing notifications, fanned out to Server-Sent Events subscribers."""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from coursereg.workflow.models import NotificationKind

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)

DEFAULT_HEARTBEAT_SECONDS = 30


class EventType(str, Enum):
    """SSE event names."""

    NOTIFICATION = "notification"
    WORKFLOW_CLOSED = "workflow_closed"
    HEARTBEAT = "heartbeat"


def _utc_stamp() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


@dataclass
class Event:
    """One message on the stream. ``workflow_id`` None reaches every subscriber."""

    event_type: EventType
    data: dict[str, Any]
    workflow_id: str | None = None

    def to_sse(self) -> str:
        return f"event: {self.event_type.value}\ndata: {json.dumps(self.data)}\n\n"


@dataclass
class Subscriber:
    """A stream client, optionally narrowed to one workflow."""

    id: str
    queue: asyncio.Queue[Event] = field(default_factory=asyncio.Queue)
    workflow_id: str | None = None

    @classmethod
    def create(cls, workflow_id: str | None = None) -> Subscriber:
        return cls(id=uuid4().hex, workflow_id=workflow_id)

    def accepts(self, event: Event) -> bool:
        if self.workflow_id is None or event.workflow_id is None:
            return True
        return self.workflow_id == event.workflow_id


class NotificationCenter:
    """Fire-and-forget notification sink shared by workflows and the SSE endpoint."""

    def __init__(self, heartbeat_interval: float = DEFAULT_HEARTBEAT_SECONDS) -> None:
        self.heartbeat_interval = heartbeat_interval
        self._subscribers: dict[str, Subscriber] = {}

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, workflow_id: str | None = None) -> Subscriber:
        """Register a stream client.

        Args:
            workflow_id: Only deliver events for this workflow. None means all.
        """
        subscriber = Subscriber.create(workflow_id)
        self._subscribers[subscriber.id] = subscriber
        logger.debug("Subscriber %s joined (workflow=%s)", subscriber.id, workflow_id)
        return subscriber

    def unsubscribe(self, subscriber_id: str) -> None:
        if self._subscribers.pop(subscriber_id, None) is not None:
            logger.debug("Subscriber %s left", subscriber_id)

    def _recipients(self, event: Event) -> list[Subscriber]:
        return [s for s in self._subscribers.values() if s.accepts(event)]

    async def emit(self, event: Event) -> None:
        for subscriber in self._recipients(event):
            await subscriber.queue.put(event)

    def emit_sync(self, event: Event) -> None:
        """Queue ``event`` without awaiting. Usable from synchronous callbacks."""
        for subscriber in self._recipients(event):
            try:
                subscriber.queue.put_nowait(event)
            except asyncio.QueueFull:
                logger.warning("Dropped %s event for subscriber %s", event.event_type.value, subscriber.id)

    def notify(
        self,
        message: str,
        kind: NotificationKind = NotificationKind.SUCCESS,
        workflow_id: str | None = None,
    ) -> None:
        """Publish a success or error message. Never raises."""
        if kind == NotificationKind.SUCCESS:
            logger.info("Notification for %s: %s", workflow_id, message)
        else:
            logger.warning("Error notification for %s: %s", workflow_id, message)
        payload = {
            "workflow_id": workflow_id,
            "kind": kind.value,
            "message": message,
            "timestamp": _utc_stamp(),
        }
        self.emit_sync(Event(EventType.NOTIFICATION, payload, workflow_id=workflow_id))

    def emit_workflow_closed(self, workflow_id: str, reason: str) -> None:
        payload = {"workflow_id": workflow_id, "reason": reason}
        self.emit_sync(Event(EventType.WORKFLOW_CLOSED, payload, workflow_id=workflow_id))

    def create_heartbeat_event(self) -> Event:
        return Event(EventType.HEARTBEAT, {"timestamp": _utc_stamp()})

    async def stream(self, subscriber: Subscriber) -> AsyncIterator[str]:
        """Yield SSE frames for ``subscriber`` until the client goes away.

        A heartbeat frame is produced whenever nothing arrives for
        ``heartbeat_interval`` seconds. The subscriber is always removed on exit.
        """
        try:
            while True:
                try:
                    event = await asyncio.wait_for(
                        subscriber.queue.get(), timeout=self.heartbeat_interval
                    )
                except TimeoutError:
                    event = self.create_heartbeat_event()
                yield event.to_sse()
        finally:
            self.unsubscribe(subscriber.id)
