from typing import Annotated

from fastapi import APIRouter, Body, Depends, Query, Response, status

from oneuptime.core.config import Settings, get_settings
from oneuptime.models.schemas.incoming_request import (
    IncomingRequestDataResponse,
    IncomingRequestListResponse,
    IncomingRequestTriggerPayload,
    IncomingRequestTriggerResponse,
    IncomingRequestWriteRequest,
)
from oneuptime.repositories.incoming_request_repository import (
    IncomingRequestFilter,
    IncomingRequestRepository,
)
from oneuptime.repositories.monitor_repository import MonitorRepository
from oneuptime.services.builders import build_incident_service
from oneuptime.services.incoming_request_service import IncomingRequestService

router = APIRouter(prefix="/projects/{project_id}/incoming-requests")
public_router = APIRouter()


def get_incoming_request_service(
    settings: Annotated[Settings, Depends(get_settings)],
) -> IncomingRequestService:
    return IncomingRequestService(
        incoming_request_repository=IncomingRequestRepository(),
        monitor_repository=MonitorRepository(),
        incident_service=build_incident_service(settings),
        settings=settings,
    )


@router.get("", response_model=IncomingRequestListResponse)
def list_incoming_requests(
    project_id: int,
    service: Annotated[IncomingRequestService, Depends(get_incoming_request_service)],
    skip: Annotated[int, Query(ge=0)] = 0,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
) -> IncomingRequestListResponse:
    return service.list_requests(project_id, limit=limit, skip=skip)


@router.post("", response_model=IncomingRequestDataResponse, status_code=status.HTTP_201_CREATED)
def create_incoming_request(
    project_id: int,
    payload: IncomingRequestWriteRequest,
    service: Annotated[IncomingRequestService, Depends(get_incoming_request_service)],
) -> IncomingRequestDataResponse:
    return IncomingRequestDataResponse(data=service.create(project_id, payload))


@router.get("/{request_id}", response_model=IncomingRequestDataResponse)
def get_incoming_request(
    project_id: int,
    request_id: int,
    service: Annotated[IncomingRequestService, Depends(get_incoming_request_service)],
) -> IncomingRequestDataResponse:
    return IncomingRequestDataResponse(data=service.get_request(project_id, request_id))


@router.put("/{request_id}", response_model=IncomingRequestDataResponse)
def update_incoming_request(
    project_id: int,
    request_id: int,
    payload: IncomingRequestWriteRequest,
    service: Annotated[IncomingRequestService, Depends(get_incoming_request_service)],
) -> IncomingRequestDataResponse:
    return IncomingRequestDataResponse(data=service.update_request(project_id, request_id, payload))


@router.delete("/{request_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_incoming_request(
    project_id: int,
    request_id: int,
    service: Annotated[IncomingRequestService, Depends(get_incoming_request_service)],
) -> Response:
    service.delete_by(IncomingRequestFilter(id=request_id, project_id=project_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@public_router.api_route(
    "/incoming-request/{project_id}/request/{request_id}",
    methods=["GET", "POST"],
    response_model=IncomingRequestTriggerResponse,
)
def trigger_incoming_request(
    project_id: int,
    request_id: int,
    service: Annotated[IncomingRequestService, Depends(get_incoming_request_service)],
    filter_text: Annotated[str | None, Query(alias="filter")] = None,
    payload: Annotated[IncomingRequestTriggerPayload | None, Body()] = None,
) -> IncomingRequestTriggerResponse:
    if payload is not None and payload.filter:
        filter_text = payload.filter
    incidents = service.handle_incoming_request_action(project_id, request_id, filter_text)
    return IncomingRequestTriggerResponse(incident_ids=[incident.id for incident in incidents])
