"""SQLAlchemy models for the Registry."""

from __future__ import annotations

import uuid
from datetime import date, datetime  # noqa: TC003 - used at runtime for SQLAlchemy
from enum import StrEnum
from typing import Any

from sqlalchemy import (
    Date,
    DateTime,
    ForeignKey,
    Integer,
    LargeBinary,
    String,
    Text,
    func,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
    relationship,
)


class RegistrationStatus(StrEnum):
    """Registration status enum."""

    CONFIRMED = "confirmed"
    PENDING = "pending"
    CANCELLED = "cancelled"


def generate_uuid() -> str:
    """Generate a new UUID string."""
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class Course(Base):
    """Course model - a course offering with its date windows and capacity."""

    __tablename__ = "courses"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    generation: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    instructor: Mapped[str] = mapped_column(String(255), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    registration_start: Mapped[date] = mapped_column(Date, nullable=False)
    registration_end: Mapped[date] = mapped_column(Date, nullable=False)
    max_participants: Mapped[int] = mapped_column(Integer, nullable=False)
    current_participants: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    registrations: Mapped[list[Registration]] = relationship(
        "Registration", back_populates="course", cascade="all, delete-orphan"
    )

    def __init__(
        self,
        name: str,
        start_date: date,
        end_date: date,
        registration_start: date,
        registration_end: date,
        max_participants: int,
        id: str | None = None,
        generation: str = "",
        description: str = "",
        location: str = "",
        instructor: str = "",
        current_participants: int = 0,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.name = name
        self.generation = generation
        self.description = description
        self.location = location
        self.instructor = instructor
        self.start_date = start_date
        self.end_date = end_date
        self.registration_start = registration_start
        self.registration_end = registration_end
        self.max_participants = max_participants
        self.current_participants = current_participants

    @property
    def seats_remaining(self) -> int:
        """Number of seats still available."""
        return max(0, self.max_participants - self.current_participants)

    @property
    def is_full(self) -> bool:
        """Whether the course has reached its capacity."""
        return self.current_participants >= self.max_participants

    def __repr__(self) -> str:
        return f"<Course(id={self.id!r}, name={self.name!r})>"


class Registration(Base):
    """Registration model - an applicant enrolled in a course."""

    __tablename__ = "registrations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    course_id: Mapped[str] = mapped_column(String(36), ForeignKey("courses.id"), nullable=False)
    first_name: Mapped[str] = mapped_column(String(255), nullable=False)
    last_name: Mapped[str] = mapped_column(String(255), nullable=False)
    id_card: Mapped[str] = mapped_column(String(50), nullable=False)
    birth_date: Mapped[str] = mapped_column(String(20), nullable=False)
    student_id: Mapped[str] = mapped_column(String(50), nullable=False)
    phone: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    organization: Mapped[str] = mapped_column(String(255), nullable=False)
    position: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[str] = mapped_column(Text, nullable=False)
    registration_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )

    # Relationships
    course: Mapped[Course] = relationship("Course", back_populates="registrations")
    documents: Mapped[list[RegistrationDocument]] = relationship(
        "RegistrationDocument",
        back_populates="registration",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def __init__(
        self,
        course_id: str,
        first_name: str,
        last_name: str,
        registration_date: date,
        id: str | None = None,
        id_card: str = "",
        birth_date: str = "",
        student_id: str = "",
        phone: str = "",
        email: str = "",
        organization: str = "",
        position: str = "",
        address: str = "",
        status: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.course_id = course_id
        self.first_name = first_name
        self.last_name = last_name
        self.id_card = id_card
        self.birth_date = birth_date
        self.student_id = student_id
        self.phone = phone
        self.email = email
        self.organization = organization
        self.position = position
        self.address = address
        self.registration_date = registration_date
        self.status = status if status is not None else RegistrationStatus.CONFIRMED.value

    @property
    def registration_status(self) -> RegistrationStatus:
        """Get status as RegistrationStatus enum."""
        return RegistrationStatus(self.status)

    @property
    def full_name(self) -> str:
        """Applicant's first and last name."""
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self) -> str:
        return (
            f"<Registration(id={self.id!r}, course_id={self.course_id!r}, "
            f"status={self.status!r})>"
        )


class RegistrationDocument(Base):
    """A supporting document attached to a registration."""

    __tablename__ = "registration_documents"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    registration_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("registrations.id"), nullable=False
    )
    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    mime_type: Mapped[str] = mapped_column(String(255), nullable=False)
    size: Mapped[int] = mapped_column(Integer, nullable=False)
    data: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)

    registration: Mapped[Registration] = relationship(
        "Registration", back_populates="documents"
    )

    def __init__(
        self,
        filename: str,
        mime_type: str,
        data: bytes,
        id: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.filename = filename
        self.mime_type = mime_type
        self.data = data
        self.size = len(data)

    def __repr__(self) -> str:
        return f"<RegistrationDocument(id={self.id!r}, filename={self.filename!r})>"
