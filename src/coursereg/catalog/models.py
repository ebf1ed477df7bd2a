"""Data models for the catalog module."""

from dataclasses import dataclass
from enum import StrEnum


class CourseStatus(StrEnum):
    """Registration state of a course, derived from its date boundaries."""

    OPEN_FOR_REGISTRATION = "open_for_registration"
    UPCOMING_REGISTRATION = "upcoming_registration"
    REGISTRATION_CLOSED = "registration_closed"
    COURSE_ONGOING = "course_ongoing"
    COURSE_ENDED = "course_ended"


@dataclass(frozen=True)
class DerivedCourseStatus:
    """Status of a course as of a given day.

    Attributes:
        status: The derived registration state.
        can_register: Whether applicants may register right now.
    """

    status: CourseStatus
    can_register: bool
