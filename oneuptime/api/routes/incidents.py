from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status

from oneuptime.core.config import Settings, get_settings
from oneuptime.models.schemas.incident import (
    IncidentActionRequest,
    IncidentCloseRequest,
    IncidentCollectionResponse,
    IncidentCreateRequest,
    IncidentDataResponse,
    IncidentListResponse,
    SubProjectIncidentsResponse,
)
from oneuptime.repositories.incident_repository import IncidentFilter
from oneuptime.services.builders import build_incident_service
from oneuptime.services.incident_service import IncidentService

router = APIRouter(prefix="/projects/{project_id}/incidents")


def get_incident_service(
    settings: Annotated[Settings, Depends(get_settings)],
) -> IncidentService:
    return build_incident_service(settings)


@router.get("", response_model=IncidentListResponse)
def list_incidents(
    project_id: int,
    incident_service: Annotated[IncidentService, Depends(get_incident_service)],
    monitor_id: Annotated[int | None, Query()] = None,
    resolved: Annotated[bool | None, Query()] = None,
    skip: Annotated[int, Query(ge=0)] = 0,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
) -> IncidentListResponse:
    return incident_service.list_incidents(
        project_id,
        limit=limit,
        skip=skip,
        monitor_id=monitor_id,
        resolved=resolved,
    )


@router.post("", response_model=IncidentDataResponse, status_code=status.HTTP_201_CREATED)
def create_incident(
    project_id: int,
    payload: IncidentCreateRequest,
    incident_service: Annotated[IncidentService, Depends(get_incident_service)],
) -> IncidentDataResponse:
    incident = incident_service.create(
        project_id=project_id,
        monitor_id=payload.monitor_id,
        created_by_id=payload.created_by_id,
        incident_type=payload.incident_type,
        manually_created=payload.manually_created,
    )
    return IncidentDataResponse(data=incident)


@router.get("/unresolved", response_model=IncidentCollectionResponse)
def list_unresolved_incidents(
    project_id: int,
    user_id: Annotated[int, Query()],
    incident_service: Annotated[IncidentService, Depends(get_incident_service)],
    project_ids: Annotated[list[int] | None, Query()] = None,
) -> IncidentCollectionResponse:
    incidents = incident_service.get_unresolved_incidents(project_ids or [project_id], user_id)
    return IncidentCollectionResponse(data=incidents)


@router.get("/sub-projects", response_model=SubProjectIncidentsResponse)
def list_sub_project_incidents(
    project_id: int,
    incident_service: Annotated[IncidentService, Depends(get_incident_service)],
    project_ids: Annotated[list[int] | None, Query()] = None,
) -> SubProjectIncidentsResponse:
    return SubProjectIncidentsResponse(
        data=incident_service.get_sub_project_incidents(project_ids or [project_id])
    )


@router.get("/{incident_id}", response_model=IncidentDataResponse)
def get_incident(
    project_id: int,
    incident_id: int,
    incident_service: Annotated[IncidentService, Depends(get_incident_service)],
) -> IncidentDataResponse:
    return IncidentDataResponse(data=incident_service.get_incident(project_id, incident_id))


@router.delete("/{incident_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_incident(
    project_id: int,
    incident_id: int,
    incident_service: Annotated[IncidentService, Depends(get_incident_service)],
    user_id: Annotated[int | None, Query()] = None,
) -> Response:
    incident_service.delete_by(IncidentFilter(id=incident_id, project_ids=[project_id]), user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{incident_id}/acknowledge", response_model=IncidentDataResponse)
def acknowledge_incident(
    project_id: int,
    incident_id: int,
    payload: IncidentActionRequest,
    incident_service: Annotated[IncidentService, Depends(get_incident_service)],
) -> IncidentDataResponse:
    incident_service.get_incident(project_id, incident_id)
    incident = incident_service.acknowledge(
        incident_id,
        payload.user_id,
        payload.name,
        zapier=payload.zapier,
    )
    return IncidentDataResponse(data=incident)


@router.post("/{incident_id}/resolve", response_model=IncidentDataResponse)
def resolve_incident(
    project_id: int,
    incident_id: int,
    payload: IncidentActionRequest,
    incident_service: Annotated[IncidentService, Depends(get_incident_service)],
) -> IncidentDataResponse:
    incident_service.get_incident(project_id, incident_id)
    incident = incident_service.resolve(
        incident_id,
        payload.user_id,
        payload.name,
        zapier=payload.zapier,
    )
    return IncidentDataResponse(data=incident)


@router.post("/{incident_id}/close", response_model=IncidentDataResponse)
def close_incident(
    project_id: int,
    incident_id: int,
    payload: IncidentCloseRequest,
    incident_service: Annotated[IncidentService, Depends(get_incident_service)],
) -> IncidentDataResponse:
    incident_service.get_incident(project_id, incident_id)
    return IncidentDataResponse(data=incident_service.close(incident_id, payload.user_id))
