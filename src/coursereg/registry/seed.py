"""Demo catalog used by local installs and the demo server."""

from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING

from coursereg.registry.exceptions import CourseExistsError

if TYPE_CHECKING:
    from coursereg.registry.store import RegistryStore

logger = logging.getLogger(__name__)

DEMO_COURSES = [
    {
        "course_id": "C001",
        "name": "Hospital Management",
        "generation": "Batch 15",
        "description": "Management skills for middle-level hospital executives",
        "start_date": date(2025, 3, 15),
        "end_date": date(2026, 3, 20),
        "registration_start": date(2025, 1, 1),
        "registration_end": date(2026, 8, 28),
        "max_participants": 50,
        "current_participants": 35,
        "location": "Siam Hotel, Bangkok",
        "instructor": "Dr. Somchai Jaidee",
    },
    {
        "course_id": "C002",
        "name": "National Public Health Policy",
        "generation": "Batch 8",
        "description": "Public health policy analysis and strategic planning",
        "start_date": date(2025, 4, 10),
        "end_date": date(2025, 4, 15),
        "registration_start": date(2025, 2, 1),
        "registration_end": date(2025, 9, 30),
        "max_participants": 40,
        "current_participants": 28,
        "location": "Ministry of Public Health Training Center",
        "instructor": "Supaporn Saengthong",
    },
    {
        "course_id": "C003",
        "name": "Human Resource Management in Public Health Agencies",
        "generation": "Batch 12",
        "description": "Human resource management for public sector organizations",
        "start_date": date(2025, 11, 5),
        "end_date": date(2026, 11, 10),
        "registration_start": date(2025, 10, 1),
        "registration_end": date(2026, 10, 30),
        "max_participants": 35,
        "current_participants": 15,
        "location": "Centara Grand, Bangkok",
        "instructor": "Asst. Prof. Dr. Wichai Thongkham",
    },
    {
        "course_id": "C004",
        "name": "Finance for Executives",
        "generation": "Batch 5",
        "description": "Finance and treasury fundamentals for hospitals",
        "start_date": date(2024, 11, 10),
        "end_date": date(2024, 11, 15),
        "registration_start": date(2024, 9, 1),
        "registration_end": date(2024, 10, 15),
        "max_participants": 30,
        "current_participants": 30,
        "location": "Online via Zoom",
        "instructor": "Assoc. Prof. Dr. Suda Karnngern",
    },
]


def seed_demo_data(store: RegistryStore) -> int:
    """Load the demo catalog, skipping courses that already exist.

    Returns:
        Number of courses created.
    """
    created = 0
    for course in DEMO_COURSES:
        try:
            store.create_course(**course)  # type: ignore[arg-type]
        except CourseExistsError:
            logger.debug("Demo course %s already present", course["course_id"])
            continue
        created += 1
    logger.info("Seeded %d demo courses", created)
    return created
