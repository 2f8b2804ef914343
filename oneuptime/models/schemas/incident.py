from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

IncidentTypeValue = Literal["online", "offline", "degraded"]


class IncidentCreateRequest(BaseModel):
    monitor_id: int
    created_by_id: int | None = None
    incident_type: IncidentTypeValue = "offline"
    manually_created: bool = True


class IncidentActionRequest(BaseModel):
    user_id: int
    name: str = Field(min_length=1)
    zapier: bool = False


class IncidentCloseRequest(BaseModel):
    user_id: int


class IncidentRead(BaseModel):
    id: int
    project_id: int
    monitor_id: int
    monitor_name: str | None = None
    created_by_id: int | None = None
    created_by_name: str | None = None
    incident_type: IncidentTypeValue
    manually_created: bool
    acknowledged: bool
    acknowledged_by: int | None = None
    acknowledged_at: datetime | None = None
    acknowledged_by_zapier: bool
    resolved: bool
    resolved_by: int | None = None
    resolved_at: datetime | None = None
    resolved_by_zapier: bool
    created_by_zapier: bool
    internal_note: str | None = None
    investigation_note: str | None = None
    not_closed_by: list[int]
    created_at: datetime
    updated_at: datetime


class IncidentDataResponse(BaseModel):
    data: IncidentRead


class IncidentListMeta(BaseModel):
    skip: int
    limit: int
    total: int


class IncidentListResponse(BaseModel):
    data: list[IncidentRead]
    meta: IncidentListMeta


class SubProjectIncidents(BaseModel):
    project_id: int
    incidents: list[IncidentRead]
    count: int
    skip: int = 0
    limit: int = 10


class IncidentCollectionResponse(BaseModel):
    data: list[IncidentRead]


class SubProjectIncidentsResponse(BaseModel):
    data: list[SubProjectIncidents]
