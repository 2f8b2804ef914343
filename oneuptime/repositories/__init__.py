"""Database repositories."""

from oneuptime.repositories.domain_repository import DomainRepository
from oneuptime.repositories.health_repository import HealthRepository
from oneuptime.repositories.incident_repository import IncidentFilter, IncidentRepository
from oneuptime.repositories.incoming_request_repository import (
    IncomingRequestFilter,
    IncomingRequestRepository,
)
from oneuptime.repositories.monitor_repository import MonitorRepository
from oneuptime.repositories.notification_repository import (
    IntegrationRepository,
    NotificationRepository,
    UserNotificationSettingRepository,
)
from oneuptime.repositories.project_repository import ProjectRepository
from oneuptime.repositories.scheduled_maintenance_repository import (
    ScheduledMaintenanceRepository,
)
from oneuptime.repositories.status_page_owner_repository import StatusPageOwnerRepository
from oneuptime.repositories.status_page_repository import StatusPageRepository
from oneuptime.repositories.team_member_repository import TeamMemberRepository
from oneuptime.repositories.user_repository import UserRepository

__all__ = [
    "DomainRepository",
    "HealthRepository",
    "IncidentFilter",
    "IncidentRepository",
    "IncomingRequestFilter",
    "IncomingRequestRepository",
    "IntegrationRepository",
    "MonitorRepository",
    "NotificationRepository",
    "ProjectRepository",
    "ScheduledMaintenanceRepository",
    "StatusPageOwnerRepository",
    "StatusPageRepository",
    "TeamMemberRepository",
    "UserNotificationSettingRepository",
    "UserRepository",
]
