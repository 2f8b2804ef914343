"""Business services."""

from oneuptime.services.domain_service import DomainService
from oneuptime.services.health_service import HealthService
from oneuptime.services.incident_notifier import IncidentNotifier
from oneuptime.services.incident_service import IncidentChanges, IncidentService
from oneuptime.services.incoming_request_service import IncomingRequestService
from oneuptime.services.notification_service import NotificationService
from oneuptime.services.status_page_service import (
    StatusPageService,
    StatusPageSubscriberService,
)
from oneuptime.services.subscriber_alert_service import SubscriberAlertService
from oneuptime.services.team_member_service import TeamMemberService
from oneuptime.services.user_notification_setting_service import (
    UserNotificationSettingService,
)

__all__ = [
    "DomainService",
    "HealthService",
    "IncidentChanges",
    "IncidentNotifier",
    "IncidentService",
    "IncomingRequestService",
    "NotificationService",
    "StatusPageService",
    "StatusPageSubscriberService",
    "SubscriberAlertService",
    "TeamMemberService",
    "UserNotificationSettingService",
]
