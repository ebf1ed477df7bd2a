"""Registration query and maintenance endpoints."""

from fastapi import APIRouter, Query, status

from coursereg.api.dependencies import RegistryStoreDep
from coursereg.api.models import (
    APIResponse,
    RegistrationResponse,
    RegistrationUpdate,
    registration_to_response,
)
from coursereg.registry import ExistingRegistration, RegistrationFields, RegistryStore

router = APIRouter(prefix="/registrations", tags=["registrations"])


def _course_name(store: RegistryStore, course_id: str) -> str:
    return store.get_course(course_id).name


@router.get("", response_model=APIResponse[list[RegistrationResponse]])
def list_registrations(
    store: RegistryStoreDep,
    course_id: str | None = Query(default=None, description="Filter by course ID"),
) -> APIResponse[list[RegistrationResponse]]:
    """List registrations with an optional course filter."""
    registrations = store.list_registrations(course_id=course_id)
    names = {course.id: course.name for course in store.list_courses()}
    return APIResponse(
        data=[registration_to_response(r, names.get(r.course_id, "")) for r in registrations]
    )


@router.get("/{registration_id}", response_model=APIResponse[RegistrationResponse])
def get_registration(
    registration_id: str, store: RegistryStoreDep
) -> APIResponse[RegistrationResponse]:
    """Get a registration by ID."""
    registration = store.get_registration(registration_id)
    course_name = _course_name(store, registration.course_id)
    return APIResponse(data=registration_to_response(registration, course_name))


@router.patch("/{registration_id}", response_model=APIResponse[RegistrationResponse])
def update_registration(
    registration_id: str, update: RegistrationUpdate, store: RegistryStoreDep
) -> APIResponse[RegistrationResponse]:
    """Update a registration's applicant data or status (partial update).

    The course's participant counter is not affected.
    """
    current = store.get_registration(registration_id)
    changes = update.model_dump(exclude_unset=True, exclude={"status"})
    fields = RegistrationFields(
        **{
            name: changes.get(name) if changes.get(name) is not None else getattr(current, name)
            for name in RegistrationFields.__dataclass_fields__
        }
    )
    updated = store.save_registration(
        ExistingRegistration(registration_id=registration_id, fields=fields, status=update.status)
    )
    course_name = _course_name(store, updated.course_id)
    return APIResponse(data=registration_to_response(updated, course_name))


@router.delete("/{registration_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_registration(registration_id: str, store: RegistryStoreDep) -> None:
    """Delete a registration."""
    store.delete_registration(registration_id)
