import logging
import threading
from datetime import UTC, datetime

import pytest

from oneuptime.core.config import Settings
from oneuptime.jobs import runner as runner_module
from oneuptime.jobs.runner import CronJob, JobRunner, main
from oneuptime.jobs.scheduled_maintenance_notifications import ScheduledMaintenanceSubscriberNotifier
from oneuptime.jobs.status_page_owner_notifications import (
    OWNER_ADDED_SUBJECT,
    StatusPageOwnerAddedNotifier,
)
from oneuptime.models.entities import (
    ScheduledMaintenanceEntity,
    StatusPageOwnerTeamEntity,
    StatusPageOwnerUserEntity,
)
from oneuptime.notifications.mail_service import MailService
from oneuptime.notifications.messages import EmailTemplateType
from oneuptime.services.status_page_service import StatusPageService, StatusPageSubscriberService
from oneuptime.services.subscriber_alert_service import SubscriberAlertService
from tests.helpers.fakes import (
    FakeStatusPageRepository,
    RecordingMailService,
    RecordingSmsService,
    make_resource,
    make_status_page,
    make_subscriber,
    make_user,
)

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)
SETTINGS = Settings(host="oneuptime.test", http_protocol="https", dashboard_url="https://oneuptime.test/dashboard")


class _FakeScheduledMaintenanceRepository:
    def __init__(self, events: list[ScheduledMaintenanceEntity]) -> None:
        self.events = events
        self.notified: list[int] = []
        self.created_before: list[datetime] = []

    def list_pending_subscriber_notifications(self, *, created_before: datetime, limit: int = 1000, connection=None):
        self.created_before.append(created_before)
        return [event for event in self.events if event.id not in self.notified]

    def mark_subscribers_notified(self, event_id: int, connection=None) -> bool:
        self.notified.append(event_id)
        return True


def _event(**overrides) -> ScheduledMaintenanceEntity:
    values = {
        "id": 1,
        "project_id": 1,
        "title": "Database upgrade",
        "description": "**Expect** short downtime",
        "starts_at": datetime(2026, 10, 20, 8, 0, tzinfo=UTC),
        "ends_at": None,
        "monitor_ids": [10],
        "status_page_ids": [1],
        "created_at": NOW,
    }
    values.update(overrides)
    return ScheduledMaintenanceEntity(**values)


def _maintenance_job(
    events,
    status_pages,
    resources,
    subscribers,
    fail_for=None,
    mail=None,
    repository_class=FakeStatusPageRepository,
):
    status_page_repository = repository_class(status_pages, resources=resources, subscribers=subscribers)
    status_page_service = StatusPageService(status_page_repository, settings=SETTINGS)
    subscriber_service = StatusPageSubscriberService(status_page_repository)
    mail = mail or RecordingMailService(fail_for=fail_for)
    sms = RecordingSmsService()
    maintenance_repository = _FakeScheduledMaintenanceRepository(events)
    job = ScheduledMaintenanceSubscriberNotifier(
        scheduled_maintenance_repository=maintenance_repository,
        status_page_repository=status_page_repository,
        status_page_service=status_page_service,
        subscriber_service=subscriber_service,
        subscriber_alert_service=SubscriberAlertService(
            status_page_repository=status_page_repository,
            status_page_service=status_page_service,
            subscriber_service=subscriber_service,
            mail_service=mail,
            sms_service=sms,
        ),
        clock=lambda: NOW,
    )
    return job, maintenance_repository, mail, sms


def test_scheduled_maintenance_job_notifies_subscribers_once() -> None:
    job, repository, mail, sms = _maintenance_job(
        [_event()],
        [make_status_page(id=1, subscriber_timezones=["UTC"], full_domain="status.acme.test")],
        [make_resource(5, name="Public API")],
        [make_subscriber(id=100, subscriber_phone="+15551234567")],
    )

    assert job.run() == 1
    assert job.run() == 0

    assert repository.notified == [1]
    assert repository.created_before == [NOW, NOW]
    envelope = mail.sent[0]
    assert envelope.template_type == EmailTemplateType.SUBSCRIBER_SCHEDULED_MAINTENANCE_EVENT_CREATED
    assert envelope.subject == "[Scheduled Maintenance] Acme Status"
    assert envelope.vars["eventTitle"] == "Database upgrade"
    assert "<strong>Expect</strong>" in envelope.vars["eventDescription"]
    assert envelope.vars["scheduledAt"] == "Oct 20, 2026 08:00 UTC"
    assert envelope.vars["resourcesAffected"] == "Public API"
    assert envelope.vars["statusPageUrl"] == "https://status.acme.test"
    assert envelope.vars["isPublicStatusPage"] == "true"
    assert sms.sent[0].message.splitlines() == [
        "Scheduled Maintenance - Acme Status",
        "Database upgrade",
        "Resources Affected: Public API",
        "To view this event, visit https://status.acme.test",
        "To update notification preferences or unsubscribe, visit "
        "https://status.acme.test/update-subscription/100",
    ]


def test_scheduled_maintenance_respects_subscriber_resource_choice() -> None:
    job, _, mail, _ = _maintenance_job(
        [_event()],
        [make_status_page(id=1, allow_subscribers_to_choose_resources=True)],
        [make_resource(5)],
        [
            make_subscriber(id=100, subscriber_email="all@example.com"),
            make_subscriber(
                id=101,
                subscriber_email="picked@example.com",
                is_subscribed_to_all_resources=False,
                status_page_resource_ids=[5],
            ),
            make_subscriber(
                id=102,
                subscriber_email="other@example.com",
                is_subscribed_to_all_resources=False,
                status_page_resource_ids=[9],
            ),
        ],
    )

    job.run()

    assert [envelope.to_email for envelope in mail.sent] == ["all@example.com", "picked@example.com"]


def test_failed_send_still_marks_event_notified() -> None:
    job, repository, mail, _ = _maintenance_job(
        [_event()],
        [make_status_page(id=1)],
        [make_resource(5)],
        [make_subscriber(id=100, subscriber_email="broken@example.com")],
        fail_for={"broken@example.com"},
    )

    assert job.run() == 1
    assert repository.notified == [1]
    assert mail.sent == []


class _CrashingMailService(RecordingMailService):
    def send_mail(self, envelope, mail_server=None) -> None:
        if envelope.to_email in self.fail_for:
            raise RuntimeError("template exploded")
        super().send_mail(envelope, mail_server)


def test_unexpected_send_error_does_not_stop_other_subscribers_or_events(
    caplog: pytest.LogCaptureFixture,
) -> None:
    job, repository, mail, _ = _maintenance_job(
        [_event(id=1), _event(id=2, title="Cache flush")],
        [make_status_page(id=1)],
        [make_resource(5)],
        [
            make_subscriber(id=100, subscriber_email="broken@example.com"),
            make_subscriber(id=101, subscriber_email="ok@example.com"),
        ],
        mail=_CrashingMailService(fail_for={"broken@example.com"}),
    )

    with caplog.at_level(logging.ERROR):
        assert job.run() == 2

    assert repository.notified == [1, 2]
    assert [(envelope.to_email, envelope.vars["eventTitle"]) for envelope in mail.sent] == [
        ("ok@example.com", "Database upgrade"),
        ("ok@example.com", "Cache flush"),
    ]
    assert "Unexpected error sending email to subscriber 100" in caplog.text


class _BrokenResourcesRepository(FakeStatusPageRepository):
    def list_resources_by_monitor_ids(self, monitor_ids, connection=None):
        if 99 in monitor_ids:
            raise RuntimeError("resource lookup failed")
        return super().list_resources_by_monitor_ids(monitor_ids, connection)


def test_failing_event_is_logged_and_next_event_still_sent(caplog: pytest.LogCaptureFixture) -> None:
    job, repository, mail, _ = _maintenance_job(
        [_event(id=1, monitor_ids=[99]), _event(id=2)],
        [make_status_page(id=1)],
        [make_resource(5)],
        [make_subscriber(id=100, subscriber_email="ok@example.com")],
        repository_class=_BrokenResourcesRepository,
    )

    with caplog.at_level(logging.ERROR):
        assert job.run() == 2

    assert repository.notified == [1, 2]
    assert len(mail.sent) == 1
    assert "Failed to notify subscribers of scheduled maintenance 1" in caplog.text


class _CollectingSmtp:
    def __init__(self, outbox: list) -> None:
        self.outbox = outbox

    def __enter__(self) -> "_CollectingSmtp":
        return self

    def __exit__(self, *exc_info) -> None:
        return None

    def login(self, username: str, password: str) -> None:
        return None

    def send_message(self, message) -> None:
        self.outbox.append(message)


def test_multiline_page_title_still_delivers_every_email() -> None:
    outbox: list = []
    job, repository, _, _ = _maintenance_job(
        [_event(id=1), _event(id=2)],
        [make_status_page(id=1, page_title="Acme\nStatus")],
        [make_resource(5)],
        [
            make_subscriber(id=100, subscriber_email="first@example.com"),
            make_subscriber(id=101, subscriber_email="second@example.com"),
        ],
        mail=MailService(settings=SETTINGS, smtp_factory=lambda server: _CollectingSmtp(outbox)),
    )

    assert job.run() == 2

    assert repository.notified == [1, 2]
    assert [message["To"] for message in outbox] == [
        "first@example.com",
        "second@example.com",
        "first@example.com",
        "second@example.com",
    ]
    assert outbox[0]["Subject"] == "[Scheduled Maintenance] Acme Status"


class _FakeOwnerRepository:
    def __init__(self, teams, users) -> None:
        self.teams = teams
        self.users = users
        self.marked_teams: list[int] = []
        self.marked_users: list[int] = []

    def list_unnotified_teams(self, *, limit: int = 1000, connection=None):
        return [team for team in self.teams if team.id not in self.marked_teams]

    def list_unnotified_users(self, *, limit: int = 1000, connection=None):
        return [user for user in self.users if user.id not in self.marked_users]

    def mark_team_notified(self, owner_team_id: int, connection=None) -> bool:
        self.marked_teams.append(owner_team_id)
        return True

    def mark_user_notified(self, owner_user_id: int, connection=None) -> bool:
        self.marked_users.append(owner_user_id)
        return True


class _FakeTeamMemberService:
    def get_users_in_teams(self, team_ids):
        return [make_user(7), make_user(8)]


class _RecordingUserNotifications:
    def __init__(self) -> None:
        self.sent: list[dict] = []

    def send_user_notification(self, **kwargs):
        self.sent.append(kwargs)
        return ["email"]


def _owner_job(owner_repository, status_pages):
    status_page_repository = FakeStatusPageRepository(status_pages)
    notifications = _RecordingUserNotifications()
    job = StatusPageOwnerAddedNotifier(
        owner_repository=owner_repository,
        status_page_repository=status_page_repository,
        status_page_service=StatusPageService(status_page_repository, settings=SETTINGS),
        team_member_service=_FakeTeamMemberService(),
        user_notification_setting_service=notifications,
    )
    return job, notifications


def test_owner_job_notifies_team_and_user_owners_once_per_page() -> None:
    owner_repository = _FakeOwnerRepository(
        teams=[StatusPageOwnerTeamEntity(id=1, status_page_id=1, team_id=3, is_owner_notified=False)],
        users=[
            StatusPageOwnerUserEntity(id=2, status_page_id=1, user=make_user(7), is_owner_notified=False),
            StatusPageOwnerUserEntity(id=3, status_page_id=2, user=make_user(9), is_owner_notified=False),
        ],
    )
    job, notifications = _owner_job(
        owner_repository,
        [make_status_page(id=1, description="Public *status*"), make_status_page(id=2, name="Internal")],
    )

    assert job.run() == 3
    assert job.run() == 0

    assert owner_repository.marked_teams == [1]
    assert owner_repository.marked_users == [2, 3]
    assert [item["user_id"] for item in notifications.sent] == [7, 8, 9]
    first = notifications.sent[0]
    assert first["email_envelope"].subject == OWNER_ADDED_SUBJECT
    assert first["email_envelope"].vars["statusPageViewLink"] == "https://oneuptime.test/dashboard/1/status-pages/1"
    assert "<em>status</em>" in first["email_envelope"].vars["statusPageDescription"]
    assert first["sms_message"].message == (
        "This is a message from OneUptime. You have been added as the owner of the status page. "
        "Status Page Name: Acme Status. To unsubscribe from this notification go to User Settings "
        "in OneUptime Dashboard."
    )
    assert first["call_request_message"].say_messages[0].endswith("OneUptime Dashboard. Good bye.")


def test_owner_job_skips_missing_status_page(caplog: pytest.LogCaptureFixture) -> None:
    owner_repository = _FakeOwnerRepository(
        teams=[],
        users=[StatusPageOwnerUserEntity(id=2, status_page_id=5, user=make_user(7), is_owner_notified=False)],
    )
    job, notifications = _owner_job(owner_repository, [])

    assert job.run() == 0
    assert notifications.sent == []
    assert owner_repository.marked_users == [2]
    assert "Status page 5 no longer exists" in caplog.text


def test_runner_rejects_duplicate_and_unknown_jobs() -> None:
    runner = JobRunner()
    runner.register(CronJob(name="a", func=lambda: None, interval_seconds=60))

    with pytest.raises(ValueError):
        runner.register(CronJob(name="a", func=lambda: None, interval_seconds=60))
    with pytest.raises(KeyError):
        runner.run_job("missing")


def test_runner_logs_failures_and_keeps_going(caplog: pytest.LogCaptureFixture) -> None:
    calls: list[str] = []

    def broken() -> None:
        calls.append("broken")
        raise RuntimeError("smtp down")

    runner = JobRunner()
    runner.register(CronJob(name="broken", func=broken, interval_seconds=60))
    runner.register(CronJob(name="ok", func=lambda: calls.append("ok"), interval_seconds=60))

    with caplog.at_level(logging.ERROR, logger="oneuptime.jobs.runner"):
        results = runner.run_once()

    assert results == {"broken": False, "ok": True}
    assert calls == ["broken", "ok"]
    assert "Job broken failed" in caplog.text


def test_runner_threads_run_jobs_until_stopped() -> None:
    ran = threading.Event()
    runner = JobRunner()
    runner.register(CronJob(name="tick", func=ran.set, interval_seconds=0.01, run_on_startup=True))

    runner.start()
    try:
        assert ran.wait(timeout=2)
    finally:
        runner.stop()


def _stub_runner(monkeypatch: pytest.MonkeyPatch, results: dict[str, bool]) -> JobRunner:
    runner = JobRunner()
    for name, succeeds in results.items():
        runner.register(
            CronJob(
                name=name,
                func=(lambda: None) if succeeds else (lambda: 1 / 0),
                interval_seconds=60,
            )
        )
    monkeypatch.setattr(runner_module, "get_settings", lambda: SETTINGS)
    monkeypatch.setattr(runner_module, "configure_logging", lambda level: None)
    monkeypatch.setattr(runner_module, "build_default_runner", lambda settings: runner)
    return runner


def test_main_lists_jobs(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    _stub_runner(monkeypatch, {"first": True, "second": True})

    assert main(["--list"]) == 0
    assert capsys.readouterr().out.splitlines() == ["first", "second"]


def test_main_once_reports_failures(monkeypatch: pytest.MonkeyPatch) -> None:
    _stub_runner(monkeypatch, {"first": True, "second": False})

    assert main(["--once", "--job", "first"]) == 0
    assert main(["--once"]) == 1


def test_main_rejects_unknown_job(monkeypatch: pytest.MonkeyPatch) -> None:
    _stub_runner(monkeypatch, {"first": True})

    with pytest.raises(SystemExit):
        main(["--once", "--job", "nope"])


def test_default_runner_registers_both_jobs() -> None:
    runner = runner_module.build_default_runner(SETTINGS)

    assert runner.job_names == [
        "ScheduledMaintenance:SendNotificationToSubscribers",
        "StatusPageOwner:SendOwnerAddedEmail",
    ]
