import logging
from collections.abc import Callable
from datetime import UTC, datetime

from oneuptime.core.config import Settings, get_settings
from oneuptime.core.time_format import format_date_in_timezones_html
from oneuptime.models.entities import ScheduledMaintenanceEntity
from oneuptime.notifications.mail_service import MailService
from oneuptime.notifications.markdown_render import MarkdownContentType, convert_to_html
from oneuptime.notifications.messages import EmailEnvelope, EmailTemplateType, SmsMessage
from oneuptime.notifications.twilio import SmsService
from oneuptime.repositories.scheduled_maintenance_repository import (
    ScheduledMaintenanceRepository,
)
from oneuptime.repositories.status_page_repository import StatusPageRepository
from oneuptime.services.status_page_service import (
    StatusPageService,
    StatusPageSubscriberService,
)
from oneuptime.services.subscriber_alert_service import (
    SubscriberAlertService,
    describe_resources,
    group_resources_by_status_page,
)

logger = logging.getLogger(__name__)

JOB_NAME = "ScheduledMaintenance:SendNotificationToSubscribers"


class ScheduledMaintenanceSubscriberNotifier:
    """Tells status page subscribers about newly scheduled maintenance events.

    The event is flagged as notified before anything is sent, so a failing
    send never causes a second round of messages on the next run.
    """

    def __init__(
        self,
        scheduled_maintenance_repository: ScheduledMaintenanceRepository,
        status_page_repository: StatusPageRepository,
        status_page_service: StatusPageService,
        subscriber_service: StatusPageSubscriberService,
        subscriber_alert_service: SubscriberAlertService,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.scheduled_maintenance_repository = scheduled_maintenance_repository
        self.status_page_repository = status_page_repository
        self.status_page_service = status_page_service
        self.subscriber_service = subscriber_service
        self.subscriber_alert_service = subscriber_alert_service
        self.clock = clock or (lambda: datetime.now(UTC))

    def run(self) -> int:
        events = self.scheduled_maintenance_repository.list_pending_subscriber_notifications(
            created_before=self.clock()
        )
        for event in events:
            self.scheduled_maintenance_repository.mark_subscribers_notified(event.id)
            try:
                self.notify_event(event)
            except Exception:
                logger.exception("Failed to notify subscribers of scheduled maintenance %s", event.id)

        if events:
            logger.info("Processed %s scheduled maintenance events", len(events))
        return len(events)

    def notify_event(self, event: ScheduledMaintenanceEntity) -> int:
        resources = self.status_page_repository.list_resources_by_monitor_ids(event.monitor_ids)
        resources_by_page = group_resources_by_status_page(resources)
        event_description = convert_to_html(event.description or "", MarkdownContentType.EMAIL)

        notified = 0
        status_pages = self.subscriber_service.get_status_pages_to_send_notification(
            event.status_page_ids
        )
        for status_page in status_pages:
            page_resources = resources_by_page.get(status_page.id, [])
            status_page_url = self.status_page_service.get_status_page_url(status_page)
            status_page_name = self.status_page_service.get_display_name(status_page)
            resources_affected = describe_resources(page_resources)
            scheduled_at = format_date_in_timezones_html(
                event.starts_at,
                status_page.subscriber_timezones,
            )

            for subscriber in self.subscriber_service.get_subscribers_by_status_page(status_page.id):
                if not self.subscriber_service.should_send_notification(
                    subscriber=subscriber,
                    status_page_resources=page_resources,
                    status_page=status_page,
                ):
                    continue

                unsubscribe_url = self.subscriber_service.get_unsubscribe_link(
                    status_page_url,
                    subscriber.id,
                )

                sms_lines = [f"Scheduled Maintenance - {status_page_name}", event.title]
                if resources_affected:
                    sms_lines.append(f"Resources Affected: {resources_affected}")
                sms_lines.append(f"To view this event, visit {status_page_url}")
                sms_lines.append(
                    f"To update notification preferences or unsubscribe, visit {unsubscribe_url}"
                )

                self.subscriber_alert_service.notify_subscriber(
                    subscriber=subscriber,
                    status_page=status_page,
                    sms_message=SmsMessage(message="\n".join(sms_lines)),
                    email_envelope=EmailEnvelope(
                        template_type=EmailTemplateType.SUBSCRIBER_SCHEDULED_MAINTENANCE_EVENT_CREATED,
                        subject=f"[Scheduled Maintenance] {status_page_name}",
                        vars={
                            "statusPageName": status_page_name,
                            "statusPageUrl": status_page_url,
                            "logoUrl": self.status_page_service.get_logo_url(status_page),
                            "isPublicStatusPage": (
                                "true" if status_page.is_public_status_page else "false"
                            ),
                            "resourcesAffected": resources_affected,
                            "scheduledAt": scheduled_at,
                            "eventTitle": event.title,
                            "eventDescription": event_description,
                            "unsubscribeUrl": unsubscribe_url,
                        },
                    ),
                )
                notified += 1

        return notified


def build_scheduled_maintenance_job(
    settings: Settings | None = None,
) -> ScheduledMaintenanceSubscriberNotifier:
    settings = settings or get_settings()
    status_page_repository = StatusPageRepository()
    status_page_service = StatusPageService(status_page_repository, settings=settings)
    subscriber_service = StatusPageSubscriberService(status_page_repository)
    return ScheduledMaintenanceSubscriberNotifier(
        scheduled_maintenance_repository=ScheduledMaintenanceRepository(),
        status_page_repository=status_page_repository,
        status_page_service=status_page_service,
        subscriber_service=subscriber_service,
        subscriber_alert_service=SubscriberAlertService(
            status_page_repository=status_page_repository,
            status_page_service=status_page_service,
            subscriber_service=subscriber_service,
            mail_service=MailService(settings=settings),
            sms_service=SmsService(settings=settings),
        ),
    )
