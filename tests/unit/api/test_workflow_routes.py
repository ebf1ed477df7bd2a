"""Unit tests for workflow routes."""

from datetime import date, timedelta

import pytest
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.testclient import TestClient

from coursereg.api.dependencies import get_registry_store, get_workflow_manager
from coursereg.api.events import NotificationCenter
from coursereg.api.models import APIResponse
from coursereg.api.routes import workflows
from coursereg.registry import CourseNotFoundError, RegistryStore
from coursereg.workflow import CourseNotOpenError, WorkflowManager, WorkflowNotFoundError

PERSONAL = {
    "first_name": "Somchai",
    "last_name": "Jaidee",
    "id_card": "1-2345-67890-12-3",
    "birth_date": "1985-04-12",
    "student_id": "S-001",
}
CONTACT = {
    "phone": "081-234-5678",
    "email": "somchai@hospital.go.th",
    "organization": "Siriraj Hospital",
    "position": "Accountant",
    "address": "2 Wang Lang Rd, Bangkok",
}


@pytest.fixture
def store():
    """Create an in-memory RegistryStore with an open and a closed course."""
    s = RegistryStore(":memory:")
    today = date.today()
    s.create_course(
        course_id="OPEN",
        name="Hospital Management",
        start_date=today + timedelta(days=30),
        end_date=today + timedelta(days=31),
        registration_start=today - timedelta(days=1),
        registration_end=today + timedelta(days=1),
        max_participants=50,
        current_participants=35,
    )
    s.create_course(
        course_id="ENDED",
        name="Finance",
        start_date=today - timedelta(days=30),
        end_date=today - timedelta(days=29),
        registration_start=today - timedelta(days=60),
        registration_end=today - timedelta(days=50),
        max_participants=30,
    )
    yield s
    s.close()


@pytest.fixture
def manager(store: RegistryStore) -> WorkflowManager:
    return WorkflowManager(store, NotificationCenter(), max_image_bytes=300 * 1024)


@pytest.fixture
def app(store: RegistryStore, manager: WorkflowManager):
    """Create a test FastAPI app with overridden dependencies."""
    app = FastAPI()

    def override_get_registry_store():
        yield store

    def override_get_workflow_manager():
        yield manager

    app.dependency_overrides[get_registry_store] = override_get_registry_store
    app.dependency_overrides[get_workflow_manager] = override_get_workflow_manager

    @app.exception_handler(CourseNotFoundError)
    async def course_not_found_handler(request: Request, exc: CourseNotFoundError):
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=APIResponse[None](data=None, error="Course not found").model_dump(),
        )

    @app.exception_handler(WorkflowNotFoundError)
    async def workflow_not_found_handler(request: Request, exc: WorkflowNotFoundError):
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=APIResponse[None](data=None, error="Workflow not found").model_dump(),
        )

    @app.exception_handler(CourseNotOpenError)
    async def course_not_open_handler(request: Request, exc: CourseNotOpenError):
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=APIResponse[None](
                data=None, error="Course is not open for registration"
            ).model_dump(),
        )

    app.include_router(workflows.router, prefix="/api/v1")
    return app


@pytest.fixture
def client(app: FastAPI):
    """Create a test client."""
    with TestClient(app, raise_server_exceptions=False) as client:
        yield client


def open_workflow(client: TestClient) -> str:
    response = client.post("/api/v1/workflows", json={"course_id": "OPEN"})
    assert response.status_code == 201
    return response.json()["data"]["workflow_id"]


@pytest.mark.unit
class TestOpenWorkflow:
    """Tests for POST /workflows."""

    def test_open(self, client: TestClient) -> None:
        response = client.post("/api/v1/workflows", json={"course_id": "OPEN"})

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["step"] == "personal"
        assert data["step_number"] == 1
        assert data["course_id"] == "OPEN"
        assert data["error"] is None

    def test_course_not_open(self, client: TestClient) -> None:
        response = client.post("/api/v1/workflows", json={"course_id": "ENDED"})

        assert response.status_code == 409
        assert response.json()["error"] == "Course is not open for registration"

    def test_unknown_course(self, client: TestClient) -> None:
        response = client.post("/api/v1/workflows", json={"course_id": "missing"})

        assert response.status_code == 404

    def test_get_unknown_workflow(self, client: TestClient) -> None:
        response = client.get("/api/v1/workflows/missing")

        assert response.status_code == 404
        assert response.json()["error"] == "Workflow not found"


@pytest.mark.unit
class TestDraftAndNavigation:
    """Tests for draft editing, advance and retreat."""

    def test_advance_blocked_by_validation(self, client: TestClient) -> None:
        workflow_id = open_workflow(client)

        response = client.post(f"/api/v1/workflows/{workflow_id}/advance")

        data = response.json()["data"]
        assert data["accepted"] is False
        assert data["workflow"]["step"] == "personal"
        assert data["workflow"]["error"] == "Please fill in all personal information"

    def test_fill_and_advance(self, client: TestClient) -> None:
        workflow_id = open_workflow(client)

        draft = client.patch(f"/api/v1/workflows/{workflow_id}/draft", json=PERSONAL)
        advance = client.post(f"/api/v1/workflows/{workflow_id}/advance")

        assert draft.json()["data"]["workflow"]["fields"]["first_name"] == "Somchai"
        assert advance.json()["data"]["accepted"] is True
        assert advance.json()["data"]["workflow"]["step"] == "contact"

    def test_retreat(self, client: TestClient) -> None:
        workflow_id = open_workflow(client)
        client.patch(f"/api/v1/workflows/{workflow_id}/draft", json=PERSONAL)
        client.post(f"/api/v1/workflows/{workflow_id}/advance")

        response = client.post(f"/api/v1/workflows/{workflow_id}/retreat")

        assert response.json()["data"]["workflow"]["step"] == "personal"

    def test_unknown_draft_field_rejected(self, client: TestClient) -> None:
        workflow_id = open_workflow(client)

        response = client.patch(f"/api/v1/workflows/{workflow_id}/draft", json={"nickname": "x"})

        assert response.status_code == 422


@pytest.mark.unit
class TestAttachmentsAndSubmit:
    """Tests for attachment upload and submission."""

    def test_upload_mixed_files(self, client: TestClient) -> None:
        workflow_id = open_workflow(client)

        response = client.post(
            f"/api/v1/workflows/{workflow_id}/attachments",
            files=[
                ("files", ("large.jpg", b"\xff" * (400 * 1024), "image/jpeg")),
                ("files", ("small.jpg", b"\xff" * (50 * 1024), "image/jpeg")),
            ],
        )

        data = response.json()["data"]
        assert data["accepted"] == ["small.jpg"]
        assert len(data["rejected"]) == 1
        assert data["rejected"][0].startswith("large.jpg: ")
        attachments = data["workflow"]["attachments"]
        assert attachments[0]["filename"] == "small.jpg"
        assert attachments[0]["preview"].startswith("data:image/jpeg;base64,")

    def test_submit_success(
        self, client: TestClient, store: RegistryStore, manager: WorkflowManager
    ) -> None:
        workflow_id = open_workflow(client)
        client.patch(f"/api/v1/workflows/{workflow_id}/draft", json={**PERSONAL, **CONTACT})
        client.post(f"/api/v1/workflows/{workflow_id}/advance")
        client.post(f"/api/v1/workflows/{workflow_id}/advance")
        client.post(
            f"/api/v1/workflows/{workflow_id}/attachments",
            files=[("files", ("cert.pdf", b"%PDF-1.4", "application/pdf"))],
        )

        response = client.post(f"/api/v1/workflows/{workflow_id}/submit")

        data = response.json()["data"]
        assert data["accepted"] is True
        assert data["workflow"]["step"] == "succeeded"
        assert data["workflow"]["registration_id"] is not None
        assert data["workflow"]["fields"] == {}
        assert store.get_course("OPEN").current_participants == 36
        client.post(f"/api/v1/workflows/{workflow_id}/close")
        assert manager.active_count == 0

    def test_submit_after_blanking_personal_field(
        self, client: TestClient, store: RegistryStore
    ) -> None:
        workflow_id = open_workflow(client)
        client.patch(f"/api/v1/workflows/{workflow_id}/draft", json={**PERSONAL, **CONTACT})
        client.post(f"/api/v1/workflows/{workflow_id}/advance")
        client.post(f"/api/v1/workflows/{workflow_id}/advance")
        client.post(
            f"/api/v1/workflows/{workflow_id}/attachments",
            files=[("files", ("cert.pdf", b"%PDF-1.4", "application/pdf"))],
        )
        client.patch(f"/api/v1/workflows/{workflow_id}/draft", json={"first_name": ""})

        response = client.post(f"/api/v1/workflows/{workflow_id}/submit")

        data = response.json()["data"]
        assert data["accepted"] is False
        assert data["workflow"]["step"] == "personal"
        assert data["workflow"]["error"] == "Please fill in all personal information"
        assert data["workflow"]["failure"] == "DraftValidationError"
        assert store.list_registrations() == []

    def test_submit_before_documents_step(self, client: TestClient) -> None:
        workflow_id = open_workflow(client)

        response = client.post(f"/api/v1/workflows/{workflow_id}/submit")

        assert response.json()["data"]["accepted"] is False


@pytest.mark.unit
class TestCancelAndClose:
    """Tests for cancel and close."""

    def test_cancel_releases_workflow(self, client: TestClient) -> None:
        workflow_id = open_workflow(client)

        response = client.post(f"/api/v1/workflows/{workflow_id}/cancel")

        data = response.json()["data"]
        assert data["accepted"] is True
        assert data["workflow"]["step"] == "cancelled"
        assert client.get(f"/api/v1/workflows/{workflow_id}").status_code == 404

    def test_close_releases_workflow(self, client: TestClient) -> None:
        workflow_id = open_workflow(client)

        assert client.post(f"/api/v1/workflows/{workflow_id}/close").json()["data"]["accepted"]
        assert client.post(f"/api/v1/workflows/{workflow_id}/close").status_code == 404
