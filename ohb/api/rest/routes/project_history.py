"""
Project history endpoints.

Provides:
- POST /api/v1/project-history - Submit a history import (202, asynchronous)
- GET  /api/v1/project-history/{operation_id} - Operation state and history
- GET  /api/v1/project-history/{operation_id}/events - Lifecycle events
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from ohb.api.rest.models import (
    CreateProjectHistoryRequestModel,
    ProjectHistoryAcceptedResponse,
    OperationStatusResponse,
    OperationEventsResponse,
    StateChangeSchema,
    PipelineStateEnum,
    ErrorResponse,
)
from ohb.api.rest.dependencies import get_command_handler, get_event_bus
from ohb.application.services import ProjectHistoryCommandHandler
from ohb.domain.models import (
    CreateProjectHistoryRequest,
    OperationId,
    ProjectId,
    RelativeFilePath,
    RepositoryCoordinates,
    RequestId,
    UserId,
)
from ohb.infrastructure.events import OHBEventBus

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/project-history", tags=["Project History"])


@router.post(
    "",
    response_model=ProjectHistoryAcceptedResponse,
    status_code=202,
    responses={422: {"model": ErrorResponse}},
)
async def create_project_history(
    request: CreateProjectHistoryRequestModel,
    handler: ProjectHistoryCommandHandler = Depends(get_command_handler),
) -> ProjectHistoryAcceptedResponse:
    """
    Submit a project history import.

    Returns as soon as the request is scheduled. Poll the status URL or the
    events endpoint for the outcome.
    """
    command = CreateProjectHistoryRequest(
        project_id=ProjectId(request.project_id),
        repository_coordinates=RepositoryCoordinates(request.repository_url, request.branch),
        target_file_path=RelativeFilePath(request.target_file_path),
        request_id=RequestId(request.request_id) if request.request_id else RequestId.generate(),
    )
    response = handler.handle_request(command, UserId(request.user_id))

    return ProjectHistoryAcceptedResponse(
        operation_id=str(response.operation_id),
        request_id=str(command.request_id),
        project_id=str(response.project_id),
        repository_url=response.repository_coordinates.repository_url,
        branch=response.repository_coordinates.branch,
        status_url=f"{router.prefix}/{response.operation_id}",
    )


@router.get(
    "/{operation_id}",
    response_model=OperationStatusResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_operation_status(
    operation_id: str,
    handler: ProjectHistoryCommandHandler = Depends(get_command_handler),
) -> OperationStatusResponse:
    """Current state and full state history of an operation."""
    op_id = OperationId(operation_id)
    state = handler.get_state(op_id)
    if state is None:
        raise HTTPException(status_code=404, detail=f"Operation {operation_id} not found")

    return OperationStatusResponse(
        operation_id=operation_id,
        state=PipelineStateEnum(state.value),
        is_terminal=state.is_terminal,
        state_history=[
            StateChangeSchema(state=PipelineStateEnum(change.state.value), changed_at=change.changed_at)
            for change in handler.get_state_history(op_id)
        ],
    )


@router.get(
    "/{operation_id}/events",
    response_model=OperationEventsResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_operation_events(
    operation_id: str,
    handler: ProjectHistoryCommandHandler = Depends(get_command_handler),
    event_bus: OHBEventBus = Depends(get_event_bus),
) -> OperationEventsResponse:
    """Lifecycle events of an operation still held in the event history."""
    op_id = OperationId(operation_id)
    if handler.get_state(op_id) is None:
        raise HTTPException(status_code=404, detail=f"Operation {operation_id} not found")

    events = [event.to_dict() for event in event_bus.get_operation_events(op_id)]
    return OperationEventsResponse(operation_id=operation_id, events=events, total=len(events))
