from typing import Annotated

from fastapi import APIRouter, Depends

from oneuptime.core.config import Settings, get_settings
from oneuptime.models.schemas.health import HealthResponse
from oneuptime.notifications.realtime import realtime_service
from oneuptime.repositories.health_repository import HealthRepository
from oneuptime.services.health_service import HealthService

router = APIRouter()


def get_health_service(
    settings: Annotated[Settings, Depends(get_settings)],
) -> HealthService:
    return HealthService(
        repository=HealthRepository(),
        settings=settings,
        realtime=realtime_service,
    )


@router.get("/health", response_model=HealthResponse)
def health(
    health_service: Annotated[HealthService, Depends(get_health_service)],
) -> HealthResponse:
    return health_service.get_health()
