"""Catalog - Course status derivation and search."""

from coursereg.catalog.models import CourseStatus, DerivedCourseStatus
from coursereg.catalog.search import filter_courses
from coursereg.catalog.status import resolve_course_status, resolve_status

__all__ = [
    "CourseStatus",
    "DerivedCourseStatus",
    "filter_courses",
    "resolve_course_status",
    "resolve_status",
]
