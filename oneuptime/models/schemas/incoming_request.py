from datetime import datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field

FilterConditionValue = Literal["equalTo", "notEqualTo"]
MonitorIdList = Annotated[list[int], Field(default_factory=list)]


class IncomingRequestWriteRequest(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    is_default: bool = False
    create_incident: bool = True
    filter_criteria: str | None = None
    filter_condition: FilterConditionValue | None = None
    filter_text: str | None = None
    monitors: MonitorIdList


class IncomingRequestRead(BaseModel):
    id: int
    project_id: int
    name: str
    url: str | None = None
    is_default: bool
    create_incident: bool
    filter_criteria: str | None = None
    filter_condition: FilterConditionValue | None = None
    filter_text: str | None = None
    monitors: list[int]
    created_at: datetime
    updated_at: datetime


class IncomingRequestDataResponse(BaseModel):
    data: IncomingRequestRead


class IncomingRequestListResponse(BaseModel):
    data: list[IncomingRequestRead]
    count: int


class IncomingRequestTriggerPayload(BaseModel):
    filter: str | None = None
    payload: dict[str, Any] = Field(default_factory=dict)


class IncomingRequestTriggerResponse(BaseModel):
    incident_ids: list[int]
