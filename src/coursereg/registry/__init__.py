"""Registry - Persistent storage for courses and registrations."""

from coursereg.registry.exceptions import (
    CourseExistsError,
    CourseNotFoundError,
    InvalidCourseDatesError,
    RegistrationNotFoundError,
    RegistryError,
)
from coursereg.registry.models import (
    Course,
    Registration,
    RegistrationDocument,
    RegistrationStatus,
)
from coursereg.registry.payloads import (
    DocumentPayload,
    ExistingRegistration,
    NewRegistration,
    RegistrationFields,
    RegistrationPayload,
)
from coursereg.registry.seed import seed_demo_data
from coursereg.registry.store import RegistryStore

__all__ = [
    "Course",
    "CourseExistsError",
    "CourseNotFoundError",
    "DocumentPayload",
    "ExistingRegistration",
    "InvalidCourseDatesError",
    "NewRegistration",
    "Registration",
    "RegistrationDocument",
    "RegistrationFields",
    "RegistrationNotFoundError",
    "RegistrationPayload",
    "RegistrationStatus",
    "RegistryError",
    "RegistryStore",
    "seed_demo_data",
]
