"""Write payloads accepted by the Registry.

Callers pick the variant explicitly: ``NewRegistration`` creates a record and
takes a seat, ``ExistingRegistration`` rewrites an existing record in place.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field

from coursereg.registry.models import RegistrationStatus


@dataclass(frozen=True)
class RegistrationFields:
    """Applicant data collected by the registration form."""

    first_name: str = ""
    last_name: str = ""
    id_card: str = ""
    birth_date: str = ""
    student_id: str = ""
    phone: str = ""
    email: str = ""
    organization: str = ""
    position: str = ""
    address: str = ""

    def as_dict(self) -> dict[str, str]:
        """Return the fields as a plain dictionary."""
        return asdict(self)


@dataclass(frozen=True)
class DocumentPayload:
    """A document to store alongside a registration."""

    filename: str
    mime_type: str
    data: bytes


@dataclass(frozen=True)
class NewRegistration:
    """Create a registration for a course."""

    course_id: str
    fields: RegistrationFields
    documents: tuple[DocumentPayload, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ExistingRegistration:
    """Replace the applicant data (and optionally status) of a registration."""

    registration_id: str
    fields: RegistrationFields
    status: RegistrationStatus | None = None


RegistrationPayload = NewRegistration | ExistingRegistration
