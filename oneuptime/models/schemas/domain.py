from datetime import datetime

from pydantic import BaseModel, Field


class DomainCreateRequest(BaseModel):
    domain: str = Field(min_length=1, max_length=253)


class DomainRead(BaseModel):
    id: int
    project_id: int
    domain: str
    domain_verification_text: str | None = None
    is_verified: bool
    created_at: datetime
    updated_at: datetime


class DomainDataResponse(BaseModel):
    data: DomainRead


class DomainListResponse(BaseModel):
    data: list[DomainRead]
