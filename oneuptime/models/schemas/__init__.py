"""Pydantic schema definitions."""

from oneuptime.models.schemas.domain import (
    DomainCreateRequest,
    DomainDataResponse,
    DomainListResponse,
    DomainRead,
)
from oneuptime.models.schemas.health import DatabaseHealth, HealthResponse
from oneuptime.models.schemas.incident import (
    IncidentActionRequest,
    IncidentCloseRequest,
    IncidentCollectionResponse,
    IncidentCreateRequest,
    IncidentDataResponse,
    IncidentListMeta,
    IncidentListResponse,
    IncidentRead,
    SubProjectIncidents,
    SubProjectIncidentsResponse,
)
from oneuptime.models.schemas.incoming_request import (
    IncomingRequestDataResponse,
    IncomingRequestListResponse,
    IncomingRequestRead,
    IncomingRequestTriggerPayload,
    IncomingRequestTriggerResponse,
    IncomingRequestWriteRequest,
)

__all__ = [
    "DatabaseHealth",
    "DomainCreateRequest",
    "DomainDataResponse",
    "DomainListResponse",
    "DomainRead",
    "HealthResponse",
    "IncidentActionRequest",
    "IncidentCloseRequest",
    "IncidentCollectionResponse",
    "IncidentCreateRequest",
    "IncidentDataResponse",
    "IncidentListMeta",
    "IncidentListResponse",
    "IncidentRead",
    "IncomingRequestDataResponse",
    "IncomingRequestListResponse",
    "IncomingRequestRead",
    "IncomingRequestTriggerPayload",
    "IncomingRequestTriggerResponse",
    "IncomingRequestWriteRequest",
    "SubProjectIncidents",
    "SubProjectIncidentsResponse",
]
