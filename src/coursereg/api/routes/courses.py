"""Course catalog endpoints."""

from fastapi import APIRouter, Query, status

from coursereg.api.dependencies import RegistryStoreDep
from coursereg.api.models import (
    APIResponse,
    CourseCreate,
    CourseResponse,
    CourseUpdate,
    course_to_response,
)
from coursereg.catalog import CourseStatus, filter_courses

router = APIRouter(prefix="/courses", tags=["courses"])


@router.get("", response_model=APIResponse[list[CourseResponse]])
def list_courses(
    store: RegistryStoreDep,
    search: str = Query(default="", description="Free-text search term"),
    course_status: CourseStatus | None = Query(
        default=None, alias="status", description="Filter by derived status"
    ),
) -> APIResponse[list[CourseResponse]]:
    """List courses with their derived status."""
    courses = filter_courses(store.list_courses(), search_term=search, status=course_status)
    return APIResponse(data=[course_to_response(c) for c in courses])


@router.post(
    "",
    response_model=APIResponse[CourseResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_course(course: CourseCreate, store: RegistryStoreDep) -> APIResponse[CourseResponse]:
    """Create a new course."""
    created = store.create_course(
        course_id=course.id,
        name=course.name,
        generation=course.generation,
        description=course.description,
        location=course.location,
        instructor=course.instructor,
        start_date=course.start_date,
        end_date=course.end_date,
        registration_start=course.registration_start,
        registration_end=course.registration_end,
        max_participants=course.max_participants,
        current_participants=course.current_participants,
    )
    return APIResponse(data=course_to_response(created))


@router.get("/{course_id}", response_model=APIResponse[CourseResponse])
def get_course(course_id: str, store: RegistryStoreDep) -> APIResponse[CourseResponse]:
    """Get a course by ID."""
    course = store.get_course(course_id)
    return APIResponse(data=course_to_response(course))


@router.patch("/{course_id}", response_model=APIResponse[CourseResponse])
def update_course(
    course_id: str, course: CourseUpdate, store: RegistryStoreDep
) -> APIResponse[CourseResponse]:
    """Update a course (partial update)."""
    updated = store.update_course(course_id, **course.model_dump(exclude_unset=True))
    return APIResponse(data=course_to_response(updated))


@router.delete("/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_course(course_id: str, store: RegistryStoreDep) -> None:
    """Delete a course and its registrations."""
    store.delete_course(course_id)
