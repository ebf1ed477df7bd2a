"""Notification stream endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Query
from fastapi.responses import StreamingResponse

from coursereg.api.dependencies import NotificationCenterDep

router = APIRouter(prefix="/events", tags=["events"])

_SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


@router.get("/stream")
async def event_stream(
    center: NotificationCenterDep,
    workflow_id: str | None = Query(default=None, description="Only events for this workflow"),
) -> StreamingResponse:
    """Stream notifications and workflow_closed events as Server-Sent Events.

    Heartbeats keep idle connections open.
    """
    subscriber = center.subscribe(workflow_id)
    return StreamingResponse(
        center.stream(subscriber), media_type="text/event-stream", headers=_SSE_HEADERS
    )
