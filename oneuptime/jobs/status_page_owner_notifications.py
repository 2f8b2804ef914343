import logging
from collections import defaultdict

from oneuptime.core.config import Settings, get_settings
from oneuptime.models.entities import UserEntity
from oneuptime.notifications.markdown_render import MarkdownContentType, convert_to_html
from oneuptime.notifications.messages import (
    CallRequestMessage,
    EmailEnvelope,
    EmailTemplateType,
    NotificationSettingEventType,
    SmsMessage,
)
from oneuptime.repositories.status_page_owner_repository import StatusPageOwnerRepository
from oneuptime.repositories.status_page_repository import StatusPageRepository
from oneuptime.repositories.team_member_repository import TeamMemberRepository
from oneuptime.services.builders import build_user_notification_setting_service
from oneuptime.services.status_page_service import StatusPageService
from oneuptime.services.team_member_service import TeamMemberService
from oneuptime.services.user_notification_setting_service import (
    UserNotificationSettingService,
)

logger = logging.getLogger(__name__)

JOB_NAME = "StatusPageOwner:SendOwnerAddedEmail"
OWNER_ADDED_SUBJECT = "You have been added as the owner of the status page."


class StatusPageOwnerAddedNotifier:
    def __init__(
        self,
        owner_repository: StatusPageOwnerRepository,
        status_page_repository: StatusPageRepository,
        status_page_service: StatusPageService,
        team_member_service: TeamMemberService,
        user_notification_setting_service: UserNotificationSettingService,
    ) -> None:
        self.owner_repository = owner_repository
        self.status_page_repository = status_page_repository
        self.status_page_service = status_page_service
        self.team_member_service = team_member_service
        self.user_notification_setting_service = user_notification_setting_service

    def collect_new_owners(self) -> dict[int, list[UserEntity]]:
        """Gather owners nobody has told yet, flagging each owner row as notified."""
        owners: dict[int, dict[int, UserEntity]] = defaultdict(dict)

        for owner_team in self.owner_repository.list_unnotified_teams():
            for user in self.team_member_service.get_users_in_teams([owner_team.team_id]):
                owners[owner_team.status_page_id][user.id] = user
            self.owner_repository.mark_team_notified(owner_team.id)

        for owner_user in self.owner_repository.list_unnotified_users():
            owners[owner_user.status_page_id][owner_user.user.id] = owner_user.user
            self.owner_repository.mark_user_notified(owner_user.id)

        return {page_id: list(users.values()) for page_id, users in owners.items() if users}

    def run(self) -> int:
        notified = 0
        for status_page_id, users in self.collect_new_owners().items():
            status_page = self.status_page_repository.get_by_id(status_page_id)
            if status_page is None:
                logger.warning("Status page %s no longer exists, skipping owners", status_page_id)
                continue

            variables = {
                "statusPageName": status_page.name,
                "projectName": status_page.project_name or "",
                "statusPageDescription": convert_to_html(
                    status_page.description or "",
                    MarkdownContentType.EMAIL,
                ),
                "statusPageViewLink": self.status_page_service.get_status_page_link_in_dashboard(
                    status_page.project_id,
                    status_page.id,
                ),
            }

            for user in users:
                self.user_notification_setting_service.send_user_notification(
                    user_id=user.id,
                    project_id=status_page.project_id,
                    email_envelope=EmailEnvelope(
                        template_type=EmailTemplateType.STATUS_PAGE_OWNER_ADDED,
                        subject=OWNER_ADDED_SUBJECT,
                        vars=dict(variables),
                    ),
                    sms_message=SmsMessage(
                        message=(
                            "This is a message from OneUptime. You have been added as the owner "
                            f"of the status page. Status Page Name: {status_page.name}. "
                            "To unsubscribe from this notification go to User Settings in "
                            "OneUptime Dashboard."
                        )
                    ),
                    call_request_message=CallRequestMessage(
                        say_messages=[
                            "This is a message from OneUptime. You have been added as the owner "
                            f"of the status page. Status Page {status_page.name}. "
                            "To unsubscribe from this notification go to User Settings in "
                            "OneUptime Dashboard. Good bye."
                        ]
                    ),
                    event_type=NotificationSettingEventType.SEND_STATUS_PAGE_OWNER_ADDED_NOTIFICATION,
                )
                notified += 1

        if notified:
            logger.info("Sent owner added notifications to %s users", notified)
        return notified


def build_status_page_owner_job(settings: Settings | None = None) -> StatusPageOwnerAddedNotifier:
    settings = settings or get_settings()
    status_page_repository = StatusPageRepository()
    return StatusPageOwnerAddedNotifier(
        owner_repository=StatusPageOwnerRepository(),
        status_page_repository=status_page_repository,
        status_page_service=StatusPageService(status_page_repository, settings=settings),
        team_member_service=TeamMemberService(TeamMemberRepository()),
        user_notification_setting_service=build_user_notification_setting_service(settings),
    )
