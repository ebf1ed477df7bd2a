"""Registration workflow endpoints.

Workflow routes are async so every workflow is driven from the event loop
that owns its auto-close timer.
"""

from fastapi import APIRouter, File, UploadFile, status

from coursereg.api.dependencies import RegistryStoreDep, WorkflowManagerDep
from coursereg.api.models import (
    ActionResponse,
    APIResponse,
    AttachmentsResponse,
    DraftUpdate,
    WorkflowOpen,
    WorkflowResponse,
    workflow_to_response,
)
from coursereg.workflow import IncomingFile, RegistrationWorkflow

router = APIRouter(prefix="/workflows", tags=["workflows"])


def _action(accepted: bool, workflow: RegistrationWorkflow) -> APIResponse[ActionResponse]:
    return APIResponse(
        data=ActionResponse(accepted=accepted, workflow=workflow_to_response(workflow))
    )


@router.post(
    "",
    response_model=APIResponse[WorkflowResponse],
    status_code=status.HTTP_201_CREATED,
)
async def open_workflow(
    request: WorkflowOpen, store: RegistryStoreDep, manager: WorkflowManagerDep
) -> APIResponse[WorkflowResponse]:
    """Open a registration workflow for a course that is open for registration."""
    course = store.get_course(request.course_id)
    workflow = manager.open(course)
    return APIResponse(data=workflow_to_response(workflow))


@router.get("/{workflow_id}", response_model=APIResponse[WorkflowResponse])
async def get_workflow(
    workflow_id: str, manager: WorkflowManagerDep
) -> APIResponse[WorkflowResponse]:
    """Get the visible state of an open workflow."""
    workflow = manager.get(workflow_id)
    return APIResponse(data=workflow_to_response(workflow))


@router.patch("/{workflow_id}/draft", response_model=APIResponse[ActionResponse])
async def update_draft(
    workflow_id: str, update: DraftUpdate, manager: WorkflowManagerDep
) -> APIResponse[ActionResponse]:
    """Edit draft fields. Only provided fields are changed."""
    workflow = manager.get(workflow_id)
    values = {k: v for k, v in update.model_dump(exclude_unset=True).items() if v is not None}
    accepted = workflow.update_fields(**values)
    return _action(accepted, workflow)


@router.post("/{workflow_id}/advance", response_model=APIResponse[ActionResponse])
async def advance_workflow(
    workflow_id: str, manager: WorkflowManagerDep
) -> APIResponse[ActionResponse]:
    """Validate the current step and move to the next one."""
    workflow = manager.get(workflow_id)
    return _action(workflow.advance(), workflow)


@router.post("/{workflow_id}/retreat", response_model=APIResponse[ActionResponse])
async def retreat_workflow(
    workflow_id: str, manager: WorkflowManagerDep
) -> APIResponse[ActionResponse]:
    """Move back one step without revalidating."""
    workflow = manager.get(workflow_id)
    return _action(workflow.retreat(), workflow)


@router.post("/{workflow_id}/attachments", response_model=APIResponse[AttachmentsResponse])
async def upload_attachments(
    workflow_id: str,
    manager: WorkflowManagerDep,
    files: list[UploadFile] | None = File(default=None),
) -> APIResponse[AttachmentsResponse]:
    """Replace the draft's attachments with the uploaded files."""
    workflow = manager.get(workflow_id)
    incoming = [
        IncomingFile(
            filename=upload.filename or "upload",
            content_type=upload.content_type or "application/octet-stream",
            data=await upload.read(),
        )
        for upload in files or []
    ]
    result = await workflow.attach(incoming)
    return APIResponse(
        data=AttachmentsResponse(
            accepted=[a.filename for a in result.accepted],
            rejected=[str(r) for r in result.rejected],
            workflow=workflow_to_response(workflow),
        )
    )


@router.post("/{workflow_id}/submit", response_model=APIResponse[ActionResponse])
async def submit_workflow(
    workflow_id: str, manager: WorkflowManagerDep
) -> APIResponse[ActionResponse]:
    """Submit the draft."""
    workflow = manager.get(workflow_id)
    return _action(await workflow.submit(), workflow)


@router.post("/{workflow_id}/cancel", response_model=APIResponse[ActionResponse])
async def cancel_workflow(
    workflow_id: str, manager: WorkflowManagerDep
) -> APIResponse[ActionResponse]:
    """Discard the draft and end the workflow."""
    workflow = manager.get(workflow_id)
    return _action(workflow.cancel(), workflow)


@router.post("/{workflow_id}/close", response_model=APIResponse[ActionResponse])
async def close_workflow(
    workflow_id: str, manager: WorkflowManagerDep
) -> APIResponse[ActionResponse]:
    """Close the workflow as its view goes away."""
    workflow = manager.get(workflow_id)
    return _action(workflow.close(), workflow)
