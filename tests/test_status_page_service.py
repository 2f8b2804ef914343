import logging

import pytest
from fastapi import status

from oneuptime.core.config import Settings
from oneuptime.core.errors import AppError
from oneuptime.models.entities import CallSmsConfigEntity
from oneuptime.notifications.messages import EmailTemplateType
from oneuptime.services.status_page_service import StatusPageService, StatusPageSubscriberService
from oneuptime.services.subscriber_alert_service import SubscriberAlertService, describe_resources
from oneuptime.services.team_member_service import TeamMemberService
from tests.helpers.fakes import (
    FakeStatusPageRepository,
    RecordingMailService,
    RecordingSmsService,
    make_incident,
    make_resource,
    make_status_page,
    make_subscriber,
    make_user,
)

SETTINGS = Settings(host="oneuptime.test", http_protocol="https", dashboard_url="https://oneuptime.test/dashboard/")


def test_status_page_url_prefers_custom_domain() -> None:
    repository = FakeStatusPageRepository([make_status_page(id=1), make_status_page(id=2, full_domain="status.acme.test")])
    service = StatusPageService(repository, settings=SETTINGS)

    assert service.get_status_page_url(1) == "https://oneuptime.test/status-page/1"
    assert service.get_status_page_url(repository.status_pages[2]) == "https://status.acme.test"
    assert service.get_status_page_link_in_dashboard(1, 2) == "https://oneuptime.test/dashboard/1/status-pages/2"


def test_missing_status_page_raises_not_found() -> None:
    service = StatusPageService(FakeStatusPageRepository([]), settings=SETTINGS)

    with pytest.raises(AppError) as exc_info:
        service.get_status_page_url(9)

    assert exc_info.value.status_code == status.HTTP_404_NOT_FOUND
    assert exc_info.value.code == "STATUS_PAGE_NOT_FOUND"


def test_logo_url_and_display_name() -> None:
    service = StatusPageService(FakeStatusPageRepository([]), settings=SETTINGS)

    assert service.get_logo_url(make_status_page()) == ""
    assert service.get_logo_url(make_status_page(logo_file_id="abc")) == "https://oneuptime.test/file/image/abc"
    assert StatusPageService.get_display_name(make_status_page(page_title="Acme Uptime")) == "Acme Uptime"
    assert StatusPageService.get_display_name(make_status_page(name="")) == "Status Page"


def test_status_pages_to_notify_are_deduplicated() -> None:
    repository = FakeStatusPageRepository([make_status_page(id=1), make_status_page(id=2)])
    service = StatusPageSubscriberService(repository)

    pages = service.get_status_pages_to_send_notification([2, 1, 2])

    assert [page.id for page in pages] == [2, 1]
    assert repository.requested_ids == [[2, 1]]


def test_should_send_notification_rules() -> None:
    choosing_page = make_status_page(allow_subscribers_to_choose_resources=True)
    resources = [make_resource(5)]

    assert StatusPageSubscriberService.should_send_notification(
        subscriber=make_subscriber(), status_page_resources=resources, status_page=choosing_page
    )
    assert not StatusPageSubscriberService.should_send_notification(
        subscriber=make_subscriber(is_unsubscribed=True),
        status_page_resources=resources,
        status_page=make_status_page(),
    )
    assert StatusPageSubscriberService.should_send_notification(
        subscriber=make_subscriber(is_subscribed_to_all_resources=False, status_page_resource_ids=[5]),
        status_page_resources=resources,
        status_page=choosing_page,
    )
    assert not StatusPageSubscriberService.should_send_notification(
        subscriber=make_subscriber(is_subscribed_to_all_resources=False, status_page_resource_ids=[6]),
        status_page_resources=resources,
        status_page=choosing_page,
    )
    assert StatusPageSubscriberService.should_send_notification(
        subscriber=make_subscriber(is_subscribed_to_all_resources=False, status_page_resource_ids=[6]),
        status_page_resources=resources,
        status_page=make_status_page(),
    )


def test_unsubscribe_link() -> None:
    assert (
        StatusPageSubscriberService.get_unsubscribe_link("https://status.acme.test/", 42)
        == "https://status.acme.test/update-subscription/42"
    )


def _alert_service(repository: FakeStatusPageRepository, fail_for=None):
    mail = RecordingMailService(fail_for=fail_for)
    sms = RecordingSmsService()
    service = SubscriberAlertService(
        status_page_repository=repository,
        status_page_service=StatusPageService(repository, settings=SETTINGS),
        subscriber_service=StatusPageSubscriberService(repository),
        mail_service=mail,
        sms_service=sms,
    )
    return service, mail, sms


def test_incident_created_alerts_matching_subscribers() -> None:
    call_sms_config = CallSmsConfigEntity(
        id=1,
        twilio_account_sid="AC1",
        twilio_auth_token="token",
        twilio_phone_number="+15550000000",
    )
    repository = FakeStatusPageRepository(
        [make_status_page(id=1, call_sms_config=call_sms_config)],
        resources=[make_resource(5, name="Public API"), make_resource(6, monitor_id=11, name="Web")],
        subscribers=[
            make_subscriber(id=100, subscriber_phone="+15551234567"),
            make_subscriber(id=101, subscriber_email="gone@example.com", is_unsubscribed=True),
            make_subscriber(id=102, subscriber_email=None, subscriber_phone=None),
        ],
    )
    service, mail, sms = _alert_service(repository)

    notified = service.send_incident_created_to_subscribers(make_incident(id=1))

    assert notified == 2
    assert len(mail.sent) == 1
    envelope = mail.sent[0]
    assert envelope.template_type == EmailTemplateType.SUBSCRIBER_INCIDENT_CREATED
    assert envelope.subject == "[Incident] Acme Status"
    assert envelope.vars["resourcesAffected"] == "Public API"
    assert envelope.vars["unsubscribeUrl"] == "https://oneuptime.test/status-page/1/update-subscription/100"
    assert sms.sent[0].to == "+15551234567"
    assert sms.sent[0].message.splitlines()[:2] == ["Incident - Acme Status", "api.acme.test is offline"]


def test_failed_subscriber_email_does_not_stop_others(caplog: pytest.LogCaptureFixture) -> None:
    repository = FakeStatusPageRepository(
        [make_status_page(id=1)],
        resources=[make_resource(5)],
        subscribers=[
            make_subscriber(id=100, subscriber_email="broken@example.com"),
            make_subscriber(id=101, subscriber_email="ok@example.com"),
        ],
    )
    service, mail, _ = _alert_service(repository, fail_for={"broken@example.com"})

    with caplog.at_level(logging.ERROR):
        service.send_incident_created_to_subscribers(make_incident(id=1))

    assert [envelope.to_email for envelope in mail.sent] == ["ok@example.com"]
    assert "subscriber 100" in caplog.text


def test_incident_without_status_page_resources_alerts_nobody() -> None:
    repository = FakeStatusPageRepository([make_status_page(id=1)], subscribers=[make_subscriber()])
    service, mail, _ = _alert_service(repository)

    assert service.send_incident_created_to_subscribers(make_incident(id=1)) == 0
    assert mail.sent == []


def test_describe_resources_joins_names() -> None:
    assert describe_resources([make_resource(1, name="API"), make_resource(2, name="Web")]) == "API, Web"


def test_team_member_service_deduplicates_team_ids() -> None:
    class _TeamMemberRepository:
        def __init__(self) -> None:
            self.requested: list[list[int]] = []

        def list_users_in_teams(self, team_ids, connection=None):
            self.requested.append(team_ids)
            return [make_user(7), make_user(8)]

    repository = _TeamMemberRepository()
    users = TeamMemberService(repository).get_users_in_teams([2, 1, 2])

    assert [user.id for user in users] == [7, 8]
    assert repository.requested == [[2, 1]]
