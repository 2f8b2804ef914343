from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

IncidentType = Literal["online", "offline", "degraded"]
FilterCondition = Literal["equalTo", "notEqualTo"]
NotificationIcon = Literal["warning", "acknowledge", "success"]
IntegrationType = Literal["slack", "webhook", "zapier"]


@dataclass(slots=True)
class ProjectEntity:
    id: int
    name: str
    parent_project_id: int | None
    created_at: datetime


@dataclass(slots=True)
class UserEntity:
    id: int
    name: str
    email: str | None
    phone: str | None


@dataclass(slots=True)
class MonitorEntity:
    id: int
    project_id: int
    name: str
    third_party_variables: list[str] = field(default_factory=list)


@dataclass(slots=True)
class IncidentEntity:
    id: int
    project_id: int
    monitor_id: int
    monitor_name: str | None
    created_by_id: int | None
    created_by_name: str | None
    incident_type: IncidentType
    manually_created: bool
    acknowledged: bool
    acknowledged_by: int | None
    acknowledged_by_name: str | None
    acknowledged_at: datetime | None
    acknowledged_by_zapier: bool
    resolved: bool
    resolved_by: int | None
    resolved_by_name: str | None
    resolved_at: datetime | None
    resolved_by_zapier: bool
    created_by_zapier: bool
    internal_note: str | None
    investigation_note: str | None
    not_closed_by: list[int]
    created_at: datetime
    updated_at: datetime


@dataclass(slots=True)
class IncomingRequestEntity:
    id: int
    project_id: int
    name: str
    url: str | None
    is_default: bool
    create_incident: bool
    filter_criteria: str | None
    filter_condition: FilterCondition | None
    filter_text: str | None
    monitor_ids: list[int]
    deleted: bool
    deleted_at: datetime | None
    created_at: datetime
    updated_at: datetime


@dataclass(slots=True)
class DomainEntity:
    id: int
    project_id: int
    domain: str
    domain_verification_text: str | None
    is_verified: bool
    created_at: datetime
    updated_at: datetime


@dataclass(slots=True)
class SmtpConfigEntity:
    id: int
    hostname: str
    port: int
    username: str | None
    password: str | None
    from_email: str
    from_name: str | None
    secure: bool


@dataclass(slots=True)
class CallSmsConfigEntity:
    id: int
    twilio_account_sid: str
    twilio_auth_token: str
    twilio_phone_number: str


@dataclass(slots=True)
class StatusPageEntity:
    id: int
    project_id: int
    name: str
    page_title: str | None
    description: str | None
    logo_file_id: str | None
    is_public_status_page: bool
    subscriber_timezones: list[str]
    allow_subscribers_to_choose_resources: bool
    full_domain: str | None
    project_name: str | None = None
    smtp_config: SmtpConfigEntity | None = None
    call_sms_config: CallSmsConfigEntity | None = None


@dataclass(slots=True)
class StatusPageResourceEntity:
    id: int
    status_page_id: int
    monitor_id: int | None
    display_name: str


@dataclass(slots=True)
class StatusPageSubscriberEntity:
    id: int
    status_page_id: int
    subscriber_email: str | None
    subscriber_phone: str | None
    is_unsubscribed: bool
    is_subscribed_to_all_resources: bool
    status_page_resource_ids: list[int]


@dataclass(slots=True)
class ScheduledMaintenanceEntity:
    id: int
    project_id: int
    title: str
    description: str | None
    starts_at: datetime
    ends_at: datetime | None
    monitor_ids: list[int]
    status_page_ids: list[int]
    created_at: datetime


@dataclass(slots=True)
class StatusPageOwnerTeamEntity:
    id: int
    status_page_id: int
    team_id: int
    is_owner_notified: bool


@dataclass(slots=True)
class StatusPageOwnerUserEntity:
    id: int
    status_page_id: int
    user: UserEntity
    is_owner_notified: bool


@dataclass(slots=True)
class UserNotificationSettingEntity:
    user_id: int
    event_type: str
    alert_by_email: bool
    alert_by_sms: bool
    alert_by_call: bool


@dataclass(slots=True)
class NotificationEntity:
    id: int
    project_id: int
    message: str
    created_by: str
    icon: NotificationIcon
    created_at: datetime


@dataclass(slots=True)
class ProjectIntegrationEntity:
    id: int
    project_id: int
    integration_type: IntegrationType
    endpoint_url: str
    events: list[str]
    monitor_ids: list[int]
