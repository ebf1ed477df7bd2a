"""Shared pytest fixtures and configuration."""

from datetime import date, timedelta

import pytest

from coursereg.registry import Course, RegistryStore


# Register custom markers
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: fast tests with no external dependencies")
    config.addinivalue_line("markers", "integration: component interaction tests")


# Shared fixtures


@pytest.fixture
def registry() -> RegistryStore:
    """Create an in-memory RegistryStore."""
    store = RegistryStore(":memory:")
    yield store
    store.close()


@pytest.fixture
def open_course(registry: RegistryStore) -> Course:
    """A course whose registration window contains today, 35 of 50 seats taken."""
    today = date.today()
    return registry.create_course(
        course_id="C001",
        name="Hospital Accounting",
        generation="Batch 15",
        description="Accounting for public hospitals",
        location="Conference Room A",
        instructor="Dr. Somchai",
        start_date=today + timedelta(days=30),
        end_date=today + timedelta(days=32),
        registration_start=today - timedelta(days=10),
        registration_end=today + timedelta(days=10),
        max_participants=50,
        current_participants=35,
    )
