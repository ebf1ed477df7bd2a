"""Course status resolution from registration and course date windows."""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Protocol

from coursereg.catalog.models import CourseStatus, DerivedCourseStatus


class DatedCourse(Protocol):
    """Anything carrying the four date boundaries of a course."""

    registration_start: date
    registration_end: date
    start_date: date
    end_date: date


END_OF_DAY = time(23, 59, 59, 999000)

OPEN = DerivedCourseStatus(CourseStatus.OPEN_FOR_REGISTRATION, can_register=True)
UPCOMING = DerivedCourseStatus(CourseStatus.UPCOMING_REGISTRATION, can_register=False)
CLOSED = DerivedCourseStatus(CourseStatus.REGISTRATION_CLOSED, can_register=False)
ONGOING = DerivedCourseStatus(CourseStatus.COURSE_ONGOING, can_register=False)
ENDED = DerivedCourseStatus(CourseStatus.COURSE_ENDED, can_register=False)


def _day(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def start_of_day(value: date | datetime) -> datetime:
    """Truncate a date or datetime to 00:00:00.000 of its day."""
    return datetime.combine(_day(value), time.min)


def end_of_day(value: date | datetime) -> datetime:
    """Extend a date or datetime to 23:59:59.999 of its day."""
    return datetime.combine(_day(value), END_OF_DAY)


def resolve_status(
    now: date | datetime,
    registration_start: date | datetime,
    registration_end: date | datetime,
    course_start: date | datetime,
    course_end: date | datetime,
) -> DerivedCourseStatus:
    """Derive a course's registration state on the day of ``now``.

    Start boundaries are truncated to start-of-day and end boundaries are
    extended to end-of-day, so every boundary day is fully inclusive no
    matter what time of day the check runs. Rules are checked in order and
    the first match wins. Inconsistent ranges never raise; they fall through
    to ``registration_closed``.
    """
    today = start_of_day(now)
    reg_start = start_of_day(registration_start)
    reg_end = end_of_day(registration_end)
    starts = start_of_day(course_start)
    ends = end_of_day(course_end)

    if reg_start <= today <= reg_end:
        return OPEN
    if today < reg_start:
        return UPCOMING
    if today > ends:
        return ENDED
    if today > reg_end and starts <= today <= ends:
        return ONGOING
    if today > reg_end and today < starts:
        return CLOSED
    return CLOSED


def resolve_course_status(
    course: DatedCourse, now: date | datetime | None = None
) -> DerivedCourseStatus:
    """Resolve the status of a course object.

    Args:
        course: Anything carrying the four date boundaries.
        now: Reference moment. Defaults to the current local time.
    """
    return resolve_status(
        now if now is not None else datetime.now(),
        course.registration_start,
        course.registration_end,
        course.start_date,
        course.end_date,
    )
