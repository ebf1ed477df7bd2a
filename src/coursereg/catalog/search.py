"""Catalog search over courses."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime
from typing import Any, TypeVar

from coursereg.catalog.models import CourseStatus
from coursereg.catalog.status import DatedCourse, resolve_course_status

C = TypeVar("C", bound=DatedCourse)

_SEARCHABLE_FIELDS = ("name", "description", "location", "instructor", "generation")


def matches_term(course: Any, search_term: str) -> bool:
    """Case-insensitive substring match against the course's text fields."""
    needle = search_term.strip().lower()
    if not needle:
        return True
    for field_name in _SEARCHABLE_FIELDS:
        value = getattr(course, field_name, None) or ""
        if needle in value.lower():
            return True
    return False


def filter_courses(
    courses: Iterable[C],
    search_term: str = "",
    status: CourseStatus | None = None,
    now: date | datetime | None = None,
) -> list[C]:
    """Filter courses by free text and derived status, preserving order.

    Args:
        courses: Courses to filter.
        search_term: Text matched against name, description, location,
            instructor and generation. Empty matches everything.
        status: Only keep courses whose derived status equals this.
        now: Reference moment for status derivation.

    Returns:
        The matching courses.
    """
    result = []
    for course in courses:
        if not matches_term(course, search_term):
            continue
        if status is not None and resolve_course_status(course, now).status != status:
            continue
        result.append(course)
    return result
