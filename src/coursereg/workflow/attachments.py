"""File ingestion for the documents step.

Images are held to a size limit and get an inline preview; any other file is
accepted as-is. Each selected file is converted concurrently and one refusal
never holds up its siblings.
"""

from __future__ import annotations

import asyncio
import base64
import logging
from collections.abc import Iterable

from coursereg.workflow.exceptions import AttachmentRejectedError
from coursereg.workflow.models import Attachment, IncomingFile, IngestionResult

logger = logging.getLogger(__name__)


def build_preview(data: bytes, mime_type: str) -> str:
    """Encode an image as a ``data:`` URI for inline display."""
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


async def convert_file(file: IncomingFile, max_image_bytes: int) -> Attachment:
    """Apply the size policy to one file and build its attachment.

    Raises:
        AttachmentRejectedError: If an image is larger than ``max_image_bytes``.
    """
    if not file.is_image:
        return Attachment(filename=file.filename, mime_type=file.content_type, payload=file.data)

    if file.size > max_image_bytes:
        raise AttachmentRejectedError(
            file.filename,
            f"image is {file.size // 1024} KB, the limit is {max_image_bytes // 1024} KB",
        )

    preview = await asyncio.to_thread(build_preview, file.data, file.content_type)
    return Attachment(
        filename=file.filename,
        mime_type=file.content_type,
        payload=file.data,
        preview=preview,
    )


async def ingest_files(files: Iterable[IncomingFile], max_image_bytes: int) -> IngestionResult:
    """Convert every selected file and split them into accepted and rejected.

    Completes once every conversion has settled.
    """
    selected = list(files)
    outcomes = await asyncio.gather(
        *(convert_file(file, max_image_bytes) for file in selected),
        return_exceptions=True,
    )

    result = IngestionResult()
    for file, outcome in zip(selected, outcomes, strict=True):
        if isinstance(outcome, AttachmentRejectedError):
            result.rejected.append(outcome)
        elif isinstance(outcome, Exception):
            logger.warning("Could not read %s: %s", file.filename, outcome)
            result.rejected.append(AttachmentRejectedError(file.filename, "file could not be read"))
        elif isinstance(outcome, Attachment):
            result.accepted.append(outcome)
        else:
            # CancelledError and other BaseExceptions are not ours to absorb
            raise outcome

    logger.info(
        "Ingested %d file(s): %d accepted, %d rejected",
        len(selected),
        len(result.accepted),
        len(result.rejected),
    )
    return result
