"""Outbound notification channels."""

from oneuptime.notifications.integrations import IntegrationClient
from oneuptime.notifications.mail_service import MailService
from oneuptime.notifications.messages import (
    CallRequestMessage,
    EmailEnvelope,
    EmailTemplateType,
    MailServer,
    NotificationSettingEventType,
    SmsMessage,
    TwilioConfig,
)
from oneuptime.notifications.realtime import RealtimeService, realtime_service
from oneuptime.notifications.twilio import CallService, SmsService

__all__ = [
    "CallRequestMessage",
    "CallService",
    "EmailEnvelope",
    "EmailTemplateType",
    "IntegrationClient",
    "MailServer",
    "MailService",
    "NotificationSettingEventType",
    "RealtimeService",
    "SmsMessage",
    "SmsService",
    "TwilioConfig",
    "realtime_service",
]
