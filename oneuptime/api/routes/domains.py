from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from oneuptime.core.config import Settings, get_settings
from oneuptime.models.schemas.domain import (
    DomainCreateRequest,
    DomainDataResponse,
    DomainListResponse,
)
from oneuptime.repositories.domain_repository import DomainRepository
from oneuptime.services.dns_verifier import TxtRecordVerifier
from oneuptime.services.domain_service import DomainService

router = APIRouter(prefix="/projects/{project_id}/domains")


def get_domain_service(
    settings: Annotated[Settings, Depends(get_settings)],
) -> DomainService:
    return DomainService(
        domain_repository=DomainRepository(),
        txt_verifier=TxtRecordVerifier(timeout=settings.dns_timeout_seconds),
    )


@router.get("", response_model=DomainListResponse)
def list_domains(
    project_id: int,
    domain_service: Annotated[DomainService, Depends(get_domain_service)],
) -> DomainListResponse:
    return DomainListResponse(data=domain_service.list_domains(project_id))


@router.post("", response_model=DomainDataResponse, status_code=status.HTTP_201_CREATED)
def create_domain(
    project_id: int,
    payload: DomainCreateRequest,
    domain_service: Annotated[DomainService, Depends(get_domain_service)],
) -> DomainDataResponse:
    return DomainDataResponse(data=domain_service.create_domain(project_id, payload))


@router.get("/{domain_id}", response_model=DomainDataResponse)
def get_domain(
    project_id: int,
    domain_id: int,
    domain_service: Annotated[DomainService, Depends(get_domain_service)],
) -> DomainDataResponse:
    return DomainDataResponse(data=domain_service.get_domain(project_id, domain_id))


@router.put("/{domain_id}/verify", response_model=DomainDataResponse)
def verify_domain(
    project_id: int,
    domain_id: int,
    domain_service: Annotated[DomainService, Depends(get_domain_service)],
) -> DomainDataResponse:
    domain = domain_service.update_domain(project_id, domain_id, is_verified=True)
    return DomainDataResponse(data=domain)


@router.delete("/{domain_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_domain(
    project_id: int,
    domain_id: int,
    domain_service: Annotated[DomainService, Depends(get_domain_service)],
) -> Response:
    domain_service.delete_domain(project_id, domain_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
