"""RegistryStore - Main API for Registry operations."""

from __future__ import annotations

import logging
from datetime import date

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from coursereg.registry.database import Database
from coursereg.registry.exceptions import (
    CourseExistsError,
    CourseNotFoundError,
    InvalidCourseDatesError,
    RegistrationNotFoundError,
)
from coursereg.registry.models import (
    Course,
    Registration,
    RegistrationDocument,
)
from coursereg.registry.payloads import (
    ExistingRegistration,
    NewRegistration,
    RegistrationPayload,
)

logger = logging.getLogger(__name__)


class RegistryStore:
    """Main API for Registry operations.

    Provides CRUD operations for Courses and Registrations.
    """

    def __init__(self, db_path: str = "coursereg.db") -> None:
        """Initialize the Registry with a SQLite database.

        Creates database and tables if they don't exist.

        Args:
            db_path: Path to SQLite database file
        """
        self._db = Database(db_path)
        self._db.create_tables()

    def close(self) -> None:
        """Close the database connection."""
        self._db.close()

    # --- Course Operations ---

    def create_course(
        self,
        name: str,
        start_date: date,
        end_date: date,
        registration_start: date,
        registration_end: date,
        max_participants: int,
        course_id: str | None = None,
        generation: str = "",
        description: str = "",
        location: str = "",
        instructor: str = "",
        current_participants: int = 0,
    ) -> Course:
        """Create a new course.

        Args:
            name: Course name
            start_date: First day of the course
            end_date: Last day of the course
            registration_start: First day applicants may register
            registration_end: Last day applicants may register
            max_participants: Seat capacity
            course_id: Explicit ID (generated when omitted)
            generation: Cohort label, e.g. "Batch 15"
            description: Free-text description
            location: Venue
            instructor: Instructor name
            current_participants: Seats already taken, clamped to capacity

        Returns:
            Created Course object

        Raises:
            CourseExistsError: If a course with the same ID already exists
        """
        session = self._db.get_session()
        try:
            course = Course(
                id=course_id,
                name=name,
                generation=generation,
                description=description,
                location=location,
                instructor=instructor,
                start_date=start_date,
                end_date=end_date,
                registration_start=registration_start,
                registration_end=registration_end,
                max_participants=max_participants,
                current_participants=min(current_participants, max_participants),
            )
            session.add(course)
            session.commit()
            session.refresh(course)
            logger.info("Created course %s (%s)", course.id, course.name)
            return course
        except IntegrityError as e:
            session.rollback()
            raise CourseExistsError(f"Course with id '{course_id}' already exists") from e
        finally:
            session.close()

    def get_course(self, course_id: str) -> Course:
        """Get course by ID.

        Raises:
            CourseNotFoundError: If course doesn't exist
        """
        session = self._db.get_session()
        try:
            course = session.get(Course, course_id)
            if course is None:
                raise CourseNotFoundError(f"Course with id '{course_id}' not found")
            return course
        finally:
            session.close()

    def list_courses(self) -> list[Course]:
        """List all courses.

        Returns:
            List of courses, ordered by registration_start then name
        """
        session = self._db.get_session()
        try:
            stmt = select(Course).order_by(Course.registration_start, Course.name)
            result = session.execute(stmt)
            return list(result.scalars().all())
        finally:
            session.close()

    def update_course(
        self,
        course_id: str,
        name: str | None = None,
        generation: str | None = None,
        description: str | None = None,
        location: str | None = None,
        instructor: str | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        registration_start: date | None = None,
        registration_end: date | None = None,
        max_participants: int | None = None,
    ) -> Course:
        """Update course fields. Only provided fields are updated.

        The participant counter is not writable here; lowering the capacity
        below it clamps the counter.

        Returns:
            The updated Course object

        Raises:
            CourseNotFoundError: If course doesn't exist
            InvalidCourseDatesError: If the merged registration or course dates
                                     would end before they start
        """
        session = self._db.get_session()
        try:
            course = session.get(Course, course_id)
            if course is None:
                raise CourseNotFoundError(f"Course with id '{course_id}' not found")

            if name is not None:
                course.name = name
            if generation is not None:
                course.generation = generation
            if description is not None:
                course.description = description
            if location is not None:
                course.location = location
            if instructor is not None:
                course.instructor = instructor
            if start_date is not None:
                course.start_date = start_date
            if end_date is not None:
                course.end_date = end_date
            if registration_start is not None:
                course.registration_start = registration_start
            if registration_end is not None:
                course.registration_end = registration_end
            if max_participants is not None:
                course.max_participants = max_participants
                course.current_participants = min(course.current_participants, max_participants)

            if (
                course.registration_start > course.registration_end
                or course.start_date > course.end_date
            ):
                session.rollback()
                raise InvalidCourseDatesError(
                    f"Course '{course_id}' would end a date range before it starts"
                )

            session.commit()
            session.refresh(course)
            return course
        finally:
            session.close()

    def delete_course(self, course_id: str) -> None:
        """Delete a course together with its registrations.

        Raises:
            CourseNotFoundError: If course doesn't exist
        """
        session = self._db.get_session()
        try:
            course = session.get(Course, course_id)
            if course is None:
                raise CourseNotFoundError(f"Course with id '{course_id}' not found")

            session.delete(course)
            session.commit()
            logger.info("Deleted course %s", course_id)
        finally:
            session.close()

    # --- Registration Operations ---

    def save_registration(self, payload: RegistrationPayload) -> Registration:
        """Create or update a registration.

        Args:
            payload: NewRegistration to create (takes one seat on the course),
                or ExistingRegistration to rewrite an existing record.

        Returns:
            The created or updated Registration

        Raises:
            CourseNotFoundError: If a new registration targets an unknown course
            RegistrationNotFoundError: If an existing registration doesn't exist
        """
        match payload:
            case NewRegistration():
                return self._create_registration(payload)
            case ExistingRegistration():
                return self._update_registration(payload)
            case _:
                raise TypeError(f"Unsupported registration payload: {type(payload).__name__}")

    def _create_registration(self, payload: NewRegistration) -> Registration:
        session = self._db.get_session()
        try:
            course = session.get(Course, payload.course_id)
            if course is None:
                raise CourseNotFoundError(f"Course with id '{payload.course_id}' not found")

            registration = Registration(
                course_id=course.id,
                registration_date=date.today(),
                **payload.fields.as_dict(),
            )
            for document in payload.documents:
                registration.documents.append(
                    RegistrationDocument(
                        filename=document.filename,
                        mime_type=document.mime_type,
                        data=document.data,
                    )
                )

            # Capacity clamp: never exceed max_participants
            course.current_participants = min(
                course.max_participants, course.current_participants + 1
            )

            session.add(registration)
            session.commit()
            session.refresh(registration)
            logger.info(
                "Created registration %s for course %s (%d/%d)",
                registration.id,
                course.id,
                course.current_participants,
                course.max_participants,
            )
            return registration
        finally:
            session.close()

    def _update_registration(self, payload: ExistingRegistration) -> Registration:
        session = self._db.get_session()
        try:
            registration = session.get(Registration, payload.registration_id)
            if registration is None:
                raise RegistrationNotFoundError(
                    f"Registration with id '{payload.registration_id}' not found"
                )

            for name, value in payload.fields.as_dict().items():
                setattr(registration, name, value)
            if payload.status is not None:
                registration.status = payload.status.value

            session.commit()
            session.refresh(registration)
            return registration
        finally:
            session.close()

    def get_registration(self, registration_id: str) -> Registration:
        """Get registration by ID.

        Raises:
            RegistrationNotFoundError: If registration doesn't exist
        """
        session = self._db.get_session()
        try:
            registration = session.get(Registration, registration_id)
            if registration is None:
                raise RegistrationNotFoundError(
                    f"Registration with id '{registration_id}' not found"
                )
            return registration
        finally:
            session.close()

    def list_registrations(self, course_id: str | None = None) -> list[Registration]:
        """List registrations with an optional course filter.

        Returns:
            List of registrations, ordered by registration_date then created_at
        """
        session = self._db.get_session()
        try:
            stmt = select(Registration)
            if course_id is not None:
                stmt = stmt.where(Registration.course_id == course_id)
            stmt = stmt.order_by(Registration.registration_date, Registration.created_at)
            result = session.execute(stmt)
            return list(result.scalars().all())
        finally:
            session.close()

    def delete_registration(self, registration_id: str) -> None:
        """Delete a registration.

        The course's participant counter is left untouched.

        Raises:
            RegistrationNotFoundError: If registration doesn't exist
        """
        session = self._db.get_session()
        try:
            registration = session.get(Registration, registration_id)
            if registration is None:
                raise RegistrationNotFoundError(
                    f"Registration with id '{registration_id}' not found"
                )

            session.delete(registration)
            session.commit()
        finally:
            session.close()
