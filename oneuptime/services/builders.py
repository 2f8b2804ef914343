"""Wiring of services to their repositories and delivery channels."""

from oneuptime.core.config import Settings, get_settings
from oneuptime.notifications.integrations import IntegrationClient
from oneuptime.notifications.mail_service import MailService
from oneuptime.notifications.realtime import realtime_service
from oneuptime.notifications.twilio import CallService, SmsService
from oneuptime.repositories.incident_repository import IncidentRepository
from oneuptime.repositories.monitor_repository import MonitorRepository
from oneuptime.repositories.notification_repository import (
    IntegrationRepository,
    NotificationRepository,
    UserNotificationSettingRepository,
)
from oneuptime.repositories.project_repository import ProjectRepository
from oneuptime.repositories.status_page_repository import StatusPageRepository
from oneuptime.repositories.user_repository import UserRepository
from oneuptime.services.incident_notifier import IncidentNotifier
from oneuptime.services.incident_service import IncidentService
from oneuptime.services.notification_service import NotificationService
from oneuptime.services.status_page_service import (
    StatusPageService,
    StatusPageSubscriberService,
)
from oneuptime.services.subscriber_alert_service import SubscriberAlertService
from oneuptime.services.user_notification_setting_service import (
    UserNotificationSettingService,
)


def build_user_notification_setting_service(
    settings: Settings | None = None,
) -> UserNotificationSettingService:
    settings = settings or get_settings()
    return UserNotificationSettingService(
        user_repository=UserRepository(),
        setting_repository=UserNotificationSettingRepository(),
        mail_service=MailService(settings=settings),
        sms_service=SmsService(settings=settings),
        call_service=CallService(settings=settings),
    )


def build_subscriber_alert_service(settings: Settings | None = None) -> SubscriberAlertService:
    settings = settings or get_settings()
    status_page_repository = StatusPageRepository()
    return SubscriberAlertService(
        status_page_repository=status_page_repository,
        status_page_service=StatusPageService(status_page_repository, settings=settings),
        subscriber_service=StatusPageSubscriberService(status_page_repository),
        mail_service=MailService(settings=settings),
        sms_service=SmsService(settings=settings),
    )


def build_incident_service(settings: Settings | None = None) -> IncidentService:
    settings = settings or get_settings()
    project_repository = ProjectRepository()
    notifier = IncidentNotifier(
        project_repository=project_repository,
        integration_repository=IntegrationRepository(),
        notification_service=NotificationService(NotificationRepository()),
        user_notification_setting_service=build_user_notification_setting_service(settings),
        subscriber_alert_service=build_subscriber_alert_service(settings),
        integration_client=IntegrationClient(settings=settings),
        realtime=realtime_service,
        settings=settings,
    )
    return IncidentService(
        incident_repository=IncidentRepository(),
        monitor_repository=MonitorRepository(),
        project_repository=project_repository,
        notifier=notifier,
    )
