"""Confirmation document rendering."""

from __future__ import annotations

import html
import logging
from typing import TYPE_CHECKING

from coursereg.documents.exceptions import RenderError

if TYPE_CHECKING:
    from coursereg.registry import Course, Registration

logger = logging.getLogger(__name__)

CONTENT_TYPE = "text/html; charset=utf-8"


class ConfirmationRenderer:
    """Renders a registration confirmation letter as an HTML document.

    The document lists the applicant's details next to the course schedule so
    it can be printed or attached to the confirmation e-mail.
    """

    def __init__(self, organization_name: str = "Course Registration Office") -> None:
        self.organization_name = organization_name

    def build_rows(self, registration: Registration, course: Course) -> list[tuple[str, str]]:
        """Collect the label/value pairs shown in the document."""
        return [
            ("Registration ID", registration.id),
            ("Registration date", registration.registration_date.isoformat()),
            ("Status", registration.status),
            ("Course", f"{course.name} ({course.generation})" if course.generation else course.name),
            ("Course dates", f"{course.start_date.isoformat()} - {course.end_date.isoformat()}"),
            ("Location", course.location),
            ("Instructor", course.instructor),
            ("Name", registration.full_name),
            ("Student ID", registration.student_id),
            ("Birth date", registration.birth_date),
            ("Phone", registration.phone),
            ("Email", registration.email),
            ("Organization", registration.organization),
            ("Position", registration.position),
            ("Address", registration.address),
        ]

    def render(self, registration: Registration, course: Course) -> bytes:
        """Render the confirmation document.

        Args:
            registration: The committed registration.
            course: The course it belongs to.

        Returns:
            UTF-8 encoded HTML document.

        Raises:
            RenderError: If the registration does not belong to the course.
        """
        if registration.course_id != course.id:
            raise RenderError(
                f"Registration {registration.id} does not belong to course {course.id}"
            )

        rows = "\n".join(
            f"      <tr><th>{html.escape(label)}</th><td>{html.escape(str(value))}</td></tr>"
            for label, value in self.build_rows(registration, course)
        )
        title = html.escape(f"Registration confirmation - {course.name}")
        parts = [
            "<!DOCTYPE html>",
            '<html lang="en">',
            "  <head>",
            '    <meta charset="utf-8">',
            f"    <title>{title}</title>",
            "  </head>",
            "  <body>",
            f"    <h1>{html.escape(self.organization_name)}</h1>",
            f"    <h2>{title}</h2>",
            "    <table>",
            rows,
            "    </table>",
            "  </body>",
            "</html>",
        ]
        document = "\n".join(parts).encode("utf-8")
        logger.debug("Rendered confirmation for %s (%d bytes)", registration.id, len(document))
        return document
