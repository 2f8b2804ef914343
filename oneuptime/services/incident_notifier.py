"""Fan-out of incident lifecycle events.

Every step runs in order; a failing step is logged with its name and the
error is re-raised to the caller.
"""

import logging
from collections.abc import Callable
from dataclasses import asdict
from typing import Any

from oneuptime.core.config import Settings, get_settings
from oneuptime.core.time_format import format_downtime
from oneuptime.models.entities import IncidentEntity
from oneuptime.models.schemas.incident import IncidentRead
from oneuptime.notifications.integrations import IntegrationClient
from oneuptime.notifications.messages import (
    CallRequestMessage,
    EmailEnvelope,
    EmailTemplateType,
    NotificationSettingEventType,
    SmsMessage,
)
from oneuptime.notifications.realtime import RealtimeService
from oneuptime.repositories.notification_repository import IntegrationRepository
from oneuptime.repositories.project_repository import ProjectRepository
from oneuptime.services.notification_service import NotificationService
from oneuptime.services.subscriber_alert_service import SubscriberAlertService
from oneuptime.services.user_notification_setting_service import (
    UserNotificationSettingService,
)

logger = logging.getLogger(__name__)

DEFAULT_ACTOR = "OneUptime"


def serialize_incident(incident: IncidentEntity) -> dict[str, Any]:
    return IncidentRead.model_validate(asdict(incident)).model_dump(mode="json")


class IncidentNotifier:
    def __init__(
        self,
        *,
        project_repository: ProjectRepository,
        integration_repository: IntegrationRepository,
        notification_service: NotificationService,
        user_notification_setting_service: UserNotificationSettingService,
        subscriber_alert_service: SubscriberAlertService,
        integration_client: IntegrationClient,
        realtime: RealtimeService,
        settings: Settings | None = None,
    ) -> None:
        self.project_repository = project_repository
        self.integration_repository = integration_repository
        self.notification_service = notification_service
        self.user_notification_setting_service = user_notification_setting_service
        self.subscriber_alert_service = subscriber_alert_service
        self.integration_client = integration_client
        self.realtime = realtime
        self.settings = settings or get_settings()

    def send_incident_created(self, incident: IncidentEntity) -> None:
        monitor = incident.monitor_name or ""
        creator = incident.created_by_name or DEFAULT_ACTOR
        message = f"A New Incident was created for {monitor} by {creator}"
        slack_message = f"A New Incident was created for *{monitor}* by *{creator}*"

        self._step("alert project members", self.alert_project_members, incident)
        self._step(
            "alert status page subscribers",
            self.subscriber_alert_service.send_incident_created_to_subscribers,
            incident,
        )
        self._step("push to zapier", self.push_to_zapier, "incident_created", incident)
        self._step("publish realtime", self.publish_realtime, "incident_created", incident)
        self._step(
            "create in-app notification",
            self.notification_service.create,
            incident.project_id,
            message,
            creator,
            "warning",
        )
        self._step("send slack", self.send_slack, incident, slack_message)
        self._step("send webhook", self.send_webhook, incident, message)

    def send_incident_acknowledged(self, incident: IncidentEntity, name: str) -> None:
        monitor = incident.monitor_name or ""
        downtime = format_downtime(incident.created_at)
        message = f"{monitor} monitor was acknowledged by {name}"
        slack_message = (
            f"*{monitor}* monitor was acknowledged by *{name}* "
            f"after being down for _{downtime}_"
        )

        self._step(
            "create in-app notification",
            self.notification_service.create,
            incident.project_id,
            f"An Incident was acknowledged by {name}",
            str(incident.acknowledged_by) if incident.acknowledged_by is not None else DEFAULT_ACTOR,
            "acknowledge",
        )
        self._step("send slack", self.send_slack, incident, slack_message)
        self._step("send webhook", self.send_webhook, incident, message)
        self._step("publish realtime", self.publish_realtime, "incident_acknowledged", incident)
        self._step("push to zapier", self.push_to_zapier, "incident_acknowledge", incident)

    def send_incident_resolved(self, incident: IncidentEntity, name: str | None) -> None:
        monitor = incident.monitor_name or ""
        downtime = format_downtime(incident.created_at, incident.resolved_at)
        resolver = name or incident.resolved_by_name or DEFAULT_ACTOR
        message = f"{monitor} monitor was down for {downtime} and is now resolved by {resolver}"
        slack_message = (
            f"*{monitor}* monitor was down for _{downtime}_ "
            f"and is now resolved by *{resolver}*"
        )

        self._step(
            "create in-app notification",
            self.notification_service.create,
            incident.project_id,
            message,
            incident.resolved_by_name or DEFAULT_ACTOR,
            "success",
        )
        self._step("send slack", self.send_slack, incident, slack_message)
        self._step("send webhook", self.send_webhook, incident, message)
        self._step("publish realtime", self.publish_realtime, "incident_resolved", incident)
        self._step("push to zapier", self.push_to_zapier, "incident_resolve", incident)

    def alert_project_members(self, incident: IncidentEntity) -> None:
        monitor = incident.monitor_name or ""
        message = (
            f"A New Incident was created for {monitor} "
            f"by {incident.created_by_name or DEFAULT_ACTOR}"
        )
        incident_link = (
            f"{self.settings.dashboard_url.rstrip('/')}/{incident.project_id}"
            f"/incidents/{incident.id}"
        )

        for user_id in self.project_repository.list_user_ids(incident.project_id):
            self.user_notification_setting_service.send_user_notification(
                user_id=user_id,
                project_id=incident.project_id,
                email_envelope=EmailEnvelope(
                    template_type=EmailTemplateType.INCIDENT_CREATED,
                    subject=f"[Incident] {monitor} is {incident.incident_type}",
                    vars={
                        "monitorName": monitor,
                        "message": message,
                        "incidentViewLink": incident_link,
                    },
                ),
                sms_message=SmsMessage(message=f"{message}. View: {incident_link}"),
                call_request_message=CallRequestMessage(
                    say_messages=[
                        "This is a call from OneUptime.",
                        f"A new incident was created for monitor {monitor}.",
                        "Please check the OneUptime dashboard for details.",
                    ]
                ),
                event_type=NotificationSettingEventType.SEND_INCIDENT_CREATED_NOTIFICATION,
            )

    def send_slack(self, incident: IncidentEntity, text: str) -> int:
        sent = 0
        for integration in self.integration_repository.list_by_project(incident.project_id, "slack"):
            if integration.monitor_ids and incident.monitor_id not in integration.monitor_ids:
                continue
            self.integration_client.post_json("slack", integration.endpoint_url, {"text": text})
            sent += 1
        return sent

    def send_webhook(self, incident: IncidentEntity, message: str) -> int:
        payload = {
            "message": message,
            "projectId": incident.project_id,
            "incidentId": incident.id,
            "monitor": {"id": incident.monitor_id, "name": incident.monitor_name},
        }
        sent = 0
        for integration in self.integration_repository.list_by_project(incident.project_id, "webhook"):
            if integration.monitor_ids and incident.monitor_id not in integration.monitor_ids:
                continue
            self.integration_client.post_json("webhook", integration.endpoint_url, payload)
            sent += 1
        return sent

    def push_to_zapier(self, event: str, incident: IncidentEntity) -> int:
        payload = {"event": event, "incident": serialize_incident(incident)}
        sent = 0
        for integration in self.integration_repository.list_by_project(incident.project_id, "zapier"):
            if event not in integration.events:
                continue
            if integration.monitor_ids and incident.monitor_id not in integration.monitor_ids:
                continue
            self.integration_client.post_json("zapier", integration.endpoint_url, payload)
            sent += 1
        return sent

    def publish_realtime(self, event: str, incident: IncidentEntity) -> int:
        return self.realtime.publish(incident.project_id, event, serialize_incident(incident))

    def _step(self, label: str, func: Callable[..., Any], *args: Any) -> Any:
        try:
            return func(*args)
        except Exception:
            logger.exception("Incident notification step failed: %s", label)
            raise
