"""Unit tests for course routes."""

from datetime import date, timedelta

import pytest
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.testclient import TestClient

from coursereg.api.dependencies import get_registry_store
from coursereg.api.models import APIResponse
from coursereg.api.routes import courses
from coursereg.registry import (
    CourseExistsError,
    CourseNotFoundError,
    InvalidCourseDatesError,
    RegistryStore,
)


@pytest.fixture
def store():
    """Create an in-memory RegistryStore."""
    s = RegistryStore(":memory:")
    yield s
    s.close()


@pytest.fixture
def app(store: RegistryStore):
    """Create a test FastAPI app with overridden dependencies."""
    app = FastAPI()

    def override_get_registry_store():
        yield store

    app.dependency_overrides[get_registry_store] = override_get_registry_store

    @app.exception_handler(CourseNotFoundError)
    async def course_not_found_handler(request: Request, exc: CourseNotFoundError):
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=APIResponse[None](data=None, error="Course not found").model_dump(),
        )

    @app.exception_handler(CourseExistsError)
    async def course_exists_handler(request: Request, exc: CourseExistsError):
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=APIResponse[None](
                data=None, error="Course with this id already exists"
            ).model_dump(),
        )

    @app.exception_handler(InvalidCourseDatesError)
    async def invalid_dates_handler(request: Request, exc: InvalidCourseDatesError):
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=APIResponse[None](
                data=None, error="Date range ends before it starts"
            ).model_dump(),
        )

    app.include_router(courses.router, prefix="/api/v1")
    return app


@pytest.fixture
def client(app: FastAPI):
    """Create a test client."""
    with TestClient(app, raise_server_exceptions=False) as client:
        yield client


def course_payload(**overrides) -> dict:
    today = date.today()
    payload = {
        "id": "C001",
        "name": "Hospital Management",
        "generation": "Batch 15",
        "location": "Bangkok",
        "start_date": (today + timedelta(days=30)).isoformat(),
        "end_date": (today + timedelta(days=35)).isoformat(),
        "registration_start": (today - timedelta(days=5)).isoformat(),
        "registration_end": (today + timedelta(days=5)).isoformat(),
        "max_participants": 50,
        "current_participants": 35,
    }
    payload.update(overrides)
    return payload


@pytest.mark.unit
class TestListCourses:
    """Tests for GET /courses."""

    def test_list_courses_empty(self, client: TestClient) -> None:
        response = client.get("/api/v1/courses")

        assert response.status_code == 200
        assert response.json() == {"data": [], "error": None}

    def test_list_includes_derived_status(self, client: TestClient) -> None:
        client.post("/api/v1/courses", json=course_payload())

        data = client.get("/api/v1/courses").json()["data"]

        assert len(data) == 1
        assert data[0]["status"] == "open_for_registration"
        assert data[0]["can_register"] is True
        assert data[0]["seats_remaining"] == 15

    def test_search_and_status_filters(self, client: TestClient) -> None:
        today = date.today()
        client.post("/api/v1/courses", json=course_payload())
        client.post(
            "/api/v1/courses",
            json=course_payload(
                id="C002",
                name="Finance",
                location="Online",
                registration_start=(today - timedelta(days=60)).isoformat(),
                registration_end=(today - timedelta(days=50)).isoformat(),
                start_date=(today - timedelta(days=40)).isoformat(),
                end_date=(today - timedelta(days=39)).isoformat(),
            ),
        )

        by_text = client.get("/api/v1/courses", params={"search": "online"}).json()["data"]
        by_status = client.get("/api/v1/courses", params={"status": "course_ended"}).json()["data"]

        assert [c["id"] for c in by_text] == ["C002"]
        assert [c["id"] for c in by_status] == ["C002"]

    def test_unknown_status_rejected(self, client: TestClient) -> None:
        response = client.get("/api/v1/courses", params={"status": "bogus"})

        assert response.status_code == 422


@pytest.mark.unit
class TestCreateCourse:
    """Tests for POST /courses."""

    def test_create_course(self, client: TestClient) -> None:
        response = client.post("/api/v1/courses", json=course_payload())

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["id"] == "C001"
        assert data["current_participants"] == 35

    def test_duplicate_id(self, client: TestClient) -> None:
        client.post("/api/v1/courses", json=course_payload())

        response = client.post("/api/v1/courses", json=course_payload())

        assert response.status_code == 409
        assert response.json()["error"] == "Course with this id already exists"

    def test_reversed_registration_window(self, client: TestClient) -> None:
        today = date.today()
        response = client.post(
            "/api/v1/courses",
            json=course_payload(
                registration_start=today.isoformat(),
                registration_end=(today - timedelta(days=1)).isoformat(),
            ),
        )

        assert response.status_code == 422

    def test_zero_capacity_accepted(self, client: TestClient) -> None:
        response = client.post("/api/v1/courses", json=course_payload(max_participants=0))

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["max_participants"] == 0
        assert data["current_participants"] == 0
        assert data["seats_remaining"] == 0

    def test_negative_capacity_rejected(self, client: TestClient) -> None:
        response = client.post("/api/v1/courses", json=course_payload(max_participants=-1))

        assert response.status_code == 422


@pytest.mark.unit
class TestCourseItem:
    """Tests for GET/PATCH/DELETE /courses/{id}."""

    def test_get_course(self, client: TestClient) -> None:
        client.post("/api/v1/courses", json=course_payload())

        response = client.get("/api/v1/courses/C001")

        assert response.status_code == 200
        assert response.json()["data"]["name"] == "Hospital Management"

    def test_get_course_not_found(self, client: TestClient) -> None:
        response = client.get("/api/v1/courses/missing")

        assert response.status_code == 404
        assert response.json()["error"] == "Course not found"

    def test_update_course(self, client: TestClient) -> None:
        client.post("/api/v1/courses", json=course_payload())

        response = client.patch(
            "/api/v1/courses/C001", json={"location": "Online", "max_participants": 30}
        )

        data = response.json()["data"]
        assert data["location"] == "Online"
        assert data["name"] == "Hospital Management"
        assert data["current_participants"] == 30

    def test_update_end_before_stored_start_rejected(self, client: TestClient) -> None:
        client.post("/api/v1/courses", json=course_payload())
        stored_start = date.today() - timedelta(days=5)

        response = client.patch(
            "/api/v1/courses/C001",
            json={"registration_end": (stored_start - timedelta(days=1)).isoformat()},
        )

        assert response.status_code == 422
        assert response.json()["error"] == "Date range ends before it starts"
        course = client.get("/api/v1/courses/C001").json()["data"]
        assert course["registration_end"] == (date.today() + timedelta(days=5)).isoformat()

    def test_delete_course(self, client: TestClient) -> None:
        client.post("/api/v1/courses", json=course_payload())

        assert client.delete("/api/v1/courses/C001").status_code == 204
        assert client.get("/api/v1/courses/C001").status_code == 404
