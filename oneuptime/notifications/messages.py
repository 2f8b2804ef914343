from dataclasses import dataclass, field
from enum import StrEnum

from oneuptime.core.config import Settings
from oneuptime.models.entities import CallSmsConfigEntity, SmtpConfigEntity


class EmailTemplateType(StrEnum):
    SUBSCRIBER_SCHEDULED_MAINTENANCE_EVENT_CREATED = "SubscriberScheduledMaintenanceEventCreated"
    SUBSCRIBER_INCIDENT_CREATED = "SubscriberIncidentCreated"
    STATUS_PAGE_OWNER_ADDED = "StatusPageOwnerAdded"
    INCIDENT_CREATED = "IncidentCreated"


class NotificationSettingEventType(StrEnum):
    SEND_STATUS_PAGE_OWNER_ADDED_NOTIFICATION = "Send status page owner added notification"
    SEND_INCIDENT_CREATED_NOTIFICATION = "Send incident created notification"


@dataclass(slots=True)
class EmailEnvelope:
    template_type: EmailTemplateType
    subject: str
    vars: dict[str, str] = field(default_factory=dict)
    to_email: str | None = None


@dataclass(slots=True)
class SmsMessage:
    message: str
    to: str | None = None


@dataclass(slots=True)
class CallRequestMessage:
    say_messages: list[str]
    to: str | None = None


@dataclass(slots=True)
class MailServer:
    hostname: str
    port: int
    username: str | None
    password: str | None
    from_email: str
    from_name: str | None
    secure: bool

    @classmethod
    def from_settings(cls, settings: Settings) -> "MailServer":
        return cls(
            hostname=settings.smtp_hostname,
            port=settings.smtp_port,
            username=settings.smtp_username,
            password=settings.smtp_password,
            from_email=settings.smtp_from_email,
            from_name=settings.smtp_from_name,
            secure=settings.smtp_secure,
        )

    @classmethod
    def from_config(cls, config: SmtpConfigEntity | None) -> "MailServer | None":
        if config is None:
            return None
        return cls(
            hostname=config.hostname,
            port=config.port,
            username=config.username,
            password=config.password,
            from_email=config.from_email,
            from_name=config.from_name,
            secure=config.secure,
        )


@dataclass(slots=True)
class TwilioConfig:
    account_sid: str
    auth_token: str
    phone_number: str

    @classmethod
    def from_settings(cls, settings: Settings) -> "TwilioConfig | None":
        if not (
            settings.twilio_account_sid
            and settings.twilio_auth_token
            and settings.twilio_phone_number
        ):
            return None
        return cls(
            account_sid=settings.twilio_account_sid,
            auth_token=settings.twilio_auth_token,
            phone_number=settings.twilio_phone_number,
        )

    @classmethod
    def from_config(cls, config: CallSmsConfigEntity | None) -> "TwilioConfig | None":
        if config is None:
            return None
        return cls(
            account_sid=config.twilio_account_sid,
            auth_token=config.twilio_auth_token,
            phone_number=config.twilio_phone_number,
        )
