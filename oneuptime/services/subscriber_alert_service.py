import logging
from collections import defaultdict

from oneuptime.core.errors import DeliveryError
from oneuptime.models.entities import (
    IncidentEntity,
    StatusPageEntity,
    StatusPageResourceEntity,
    StatusPageSubscriberEntity,
)
from oneuptime.notifications.mail_service import MailService
from oneuptime.notifications.messages import (
    EmailEnvelope,
    EmailTemplateType,
    MailServer,
    SmsMessage,
    TwilioConfig,
)
from oneuptime.notifications.twilio import SmsService
from oneuptime.repositories.status_page_repository import StatusPageRepository
from oneuptime.services.status_page_service import (
    StatusPageService,
    StatusPageSubscriberService,
)

logger = logging.getLogger(__name__)


def group_resources_by_status_page(
    resources: list[StatusPageResourceEntity],
) -> dict[int, list[StatusPageResourceEntity]]:
    grouped: dict[int, list[StatusPageResourceEntity]] = defaultdict(list)
    for resource in resources:
        grouped[resource.status_page_id].append(resource)
    return dict(grouped)


def describe_resources(resources: list[StatusPageResourceEntity]) -> str:
    return ", ".join(resource.display_name for resource in resources)


class SubscriberAlertService:
    """Sends status page subscriber alerts over SMS and email.

    Each send is best-effort: a failed delivery is logged and the next
    subscriber is still notified.
    """

    def __init__(
        self,
        status_page_repository: StatusPageRepository,
        status_page_service: StatusPageService,
        subscriber_service: StatusPageSubscriberService,
        mail_service: MailService,
        sms_service: SmsService,
    ) -> None:
        self.status_page_repository = status_page_repository
        self.status_page_service = status_page_service
        self.subscriber_service = subscriber_service
        self.mail_service = mail_service
        self.sms_service = sms_service

    def notify_subscriber(
        self,
        *,
        subscriber: StatusPageSubscriberEntity,
        status_page: StatusPageEntity,
        email_envelope: EmailEnvelope,
        sms_message: SmsMessage,
    ) -> None:
        if subscriber.subscriber_phone:
            sms_message.to = subscriber.subscriber_phone
            try:
                self.sms_service.send_sms(
                    sms_message,
                    TwilioConfig.from_config(status_page.call_sms_config),
                )
            except DeliveryError as exc:
                logger.error("SMS to subscriber %s failed: %s", subscriber.id, exc)
            except Exception:
                logger.exception("Unexpected error sending SMS to subscriber %s", subscriber.id)

        if subscriber.subscriber_email:
            email_envelope.to_email = subscriber.subscriber_email
            try:
                self.mail_service.send_mail(
                    email_envelope,
                    MailServer.from_config(status_page.smtp_config),
                )
            except DeliveryError as exc:
                logger.error("Email to subscriber %s failed: %s", subscriber.id, exc)
            except Exception:
                logger.exception("Unexpected error sending email to subscriber %s", subscriber.id)

    def send_incident_created_to_subscribers(self, incident: IncidentEntity) -> int:
        resources = self.status_page_repository.list_resources_by_monitor_ids(
            [incident.monitor_id]
        )
        resources_by_page = group_resources_by_status_page(resources)
        status_pages = self.subscriber_service.get_status_pages_to_send_notification(
            list(resources_by_page)
        )

        notified = 0
        for status_page in status_pages:
            page_resources = resources_by_page.get(status_page.id, [])
            status_page_url = self.status_page_service.get_status_page_url(status_page)
            status_page_name = self.status_page_service.get_display_name(status_page)
            resources_affected = describe_resources(page_resources)
            incident_title = f"{incident.monitor_name or 'Monitor'} is {incident.incident_type}"

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
                sms_lines = [f"Incident - {status_page_name}", incident_title]
                if resources_affected:
                    sms_lines.append(f"Resources Affected: {resources_affected}")
                sms_lines.append(f"To view this incident, visit {status_page_url}")
                sms_lines.append(
                    f"To update notification preferences or unsubscribe, visit {unsubscribe_url}"
                )

                self.notify_subscriber(
                    subscriber=subscriber,
                    status_page=status_page,
                    sms_message=SmsMessage(message="\n".join(sms_lines)),
                    email_envelope=EmailEnvelope(
                        template_type=EmailTemplateType.SUBSCRIBER_INCIDENT_CREATED,
                        subject=f"[Incident] {status_page_name}",
                        vars={
                            "statusPageName": status_page_name,
                            "statusPageUrl": status_page_url,
                            "logoUrl": self.status_page_service.get_logo_url(status_page),
                            "isPublicStatusPage": (
                                "true" if status_page.is_public_status_page else "false"
                            ),
                            "resourcesAffected": resources_affected,
                            "incidentTitle": incident_title,
                            "unsubscribeUrl": unsubscribe_url,
                        },
                    ),
                )
                notified += 1

        return notified
