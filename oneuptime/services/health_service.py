from oneuptime.core.config import Settings
from oneuptime.models.schemas.health import HealthResponse
from oneuptime.notifications.realtime import RealtimeService
from oneuptime.repositories.health_repository import HealthRepository


class HealthService:
    def __init__(
        self,
        repository: HealthRepository,
        settings: Settings,
        realtime: RealtimeService,
    ) -> None:
        self.repository = repository
        self.settings = settings
        self.realtime = realtime

    def get_health(self) -> HealthResponse:
        database_health = self.repository.check_connection(self.settings.database_url)
        return HealthResponse(
            status="ok" if database_health.connected else "degraded",
            environment=self.settings.app_env,
            database=database_health,
            realtime_listeners=self.realtime.total_listeners(),
        )
