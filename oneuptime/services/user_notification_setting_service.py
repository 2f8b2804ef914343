import logging
from collections.abc import Callable
from dataclasses import replace
from typing import Any

from oneuptime.core.errors import DeliveryError
from oneuptime.models.entities import UserNotificationSettingEntity
from oneuptime.notifications.mail_service import MailService
from oneuptime.notifications.messages import (
    CallRequestMessage,
    EmailEnvelope,
    NotificationSettingEventType,
    SmsMessage,
)
from oneuptime.notifications.twilio import CallService, SmsService
from oneuptime.repositories.notification_repository import UserNotificationSettingRepository
from oneuptime.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


class UserNotificationSettingService:
    def __init__(
        self,
        user_repository: UserRepository,
        setting_repository: UserNotificationSettingRepository,
        mail_service: MailService,
        sms_service: SmsService,
        call_service: CallService,
    ) -> None:
        self.user_repository = user_repository
        self.setting_repository = setting_repository
        self.mail_service = mail_service
        self.sms_service = sms_service
        self.call_service = call_service

    def get_setting(
        self,
        user_id: int,
        event_type: NotificationSettingEventType,
    ) -> UserNotificationSettingEntity:
        setting = self.setting_repository.get(user_id=user_id, event_type=event_type)
        if setting is None:
            # users who never opened their settings get email only
            return UserNotificationSettingEntity(
                user_id=user_id,
                event_type=event_type,
                alert_by_email=True,
                alert_by_sms=False,
                alert_by_call=False,
            )
        return setting

    def send_user_notification(
        self,
        *,
        user_id: int,
        project_id: int,
        email_envelope: EmailEnvelope | None,
        sms_message: SmsMessage | None,
        call_request_message: CallRequestMessage | None,
        event_type: NotificationSettingEventType,
    ) -> list[str]:
        """Send every channel the user enabled for ``event_type``.

        A failed channel is logged and does not stop the remaining ones.
        Returns the channels that were delivered.
        """
        user = self.user_repository.get_by_id(user_id)
        if user is None:
            logger.warning("Skipping %s for missing user %s", event_type, user_id)
            return []

        setting = self.get_setting(user_id, event_type)
        delivered: list[str] = []

        if setting.alert_by_email and email_envelope is not None and user.email:
            if self._deliver(
                "email",
                project_id,
                self.mail_service.send_mail,
                replace(email_envelope, to_email=user.email),
            ):
                delivered.append("email")

        if setting.alert_by_sms and sms_message is not None and user.phone:
            if self._deliver(
                "sms",
                project_id,
                self.sms_service.send_sms,
                replace(sms_message, to=user.phone),
            ):
                delivered.append("sms")

        if setting.alert_by_call and call_request_message is not None and user.phone:
            if self._deliver(
                "call",
                project_id,
                self.call_service.make_call,
                replace(call_request_message, to=user.phone),
            ):
                delivered.append("call")

        return delivered

    def _deliver(
        self,
        channel: str,
        project_id: int,
        send: Callable[[Any], Any],
        message: Any,
    ) -> bool:
        try:
            send(message)
        except DeliveryError as exc:
            logger.error("Failed to send %s for project %s: %s", channel, project_id, exc)
            return False
        except Exception:
            logger.exception("Unexpected error sending %s for project %s", channel, project_id)
            return False
        return True
