from fastapi import status

from oneuptime.core.config import Settings, get_settings
from oneuptime.core.errors import AppError
from oneuptime.models.entities import (
    StatusPageEntity,
    StatusPageResourceEntity,
    StatusPageSubscriberEntity,
)
from oneuptime.repositories.status_page_repository import StatusPageRepository

DEFAULT_STATUS_PAGE_NAME = "Status Page"


class StatusPageService:
    def __init__(
        self,
        status_page_repository: StatusPageRepository,
        settings: Settings | None = None,
    ) -> None:
        self.status_page_repository = status_page_repository
        self.settings = settings or get_settings()

    def get_status_page(self, status_page_id: int) -> StatusPageEntity:
        status_page = self.status_page_repository.get_by_id(status_page_id)
        if status_page is None:
            raise AppError(
                status_code=status.HTTP_404_NOT_FOUND,
                code="STATUS_PAGE_NOT_FOUND",
                message="Status page not found.",
                details={"status_page_id": status_page_id},
            )
        return status_page

    def get_status_page_url(self, status_page: StatusPageEntity | int) -> str:
        if isinstance(status_page, int):
            status_page = self.get_status_page(status_page)
        if status_page.full_domain:
            return f"https://{status_page.full_domain}"
        return f"{self.settings.public_base_url}/status-page/{status_page.id}"

    def get_status_page_link_in_dashboard(self, project_id: int, status_page_id: int) -> str:
        return f"{self.settings.dashboard_url.rstrip('/')}/{project_id}/status-pages/{status_page_id}"

    def get_logo_url(self, status_page: StatusPageEntity) -> str:
        if not status_page.logo_file_id:
            return ""
        return f"{self.settings.public_base_url}/file/image/{status_page.logo_file_id}"

    @staticmethod
    def get_display_name(status_page: StatusPageEntity) -> str:
        return status_page.page_title or status_page.name or DEFAULT_STATUS_PAGE_NAME


class StatusPageSubscriberService:
    def __init__(self, status_page_repository: StatusPageRepository) -> None:
        self.status_page_repository = status_page_repository

    def get_status_pages_to_send_notification(
        self,
        status_page_ids: list[int],
    ) -> list[StatusPageEntity]:
        deduped_ids = list(dict.fromkeys(status_page_ids))
        return self.status_page_repository.list_by_ids(deduped_ids)

    def get_subscribers_by_status_page(
        self,
        status_page_id: int,
    ) -> list[StatusPageSubscriberEntity]:
        return self.status_page_repository.list_subscribers(status_page_id)

    @staticmethod
    def should_send_notification(
        *,
        subscriber: StatusPageSubscriberEntity,
        status_page_resources: list[StatusPageResourceEntity],
        status_page: StatusPageEntity,
    ) -> bool:
        if subscriber.is_unsubscribed:
            return False

        if (
            status_page.allow_subscribers_to_choose_resources
            and not subscriber.is_subscribed_to_all_resources
        ):
            affected_ids = {resource.id for resource in status_page_resources}
            return any(
                resource_id in affected_ids
                for resource_id in subscriber.status_page_resource_ids
            )

        return True

    @staticmethod
    def get_unsubscribe_link(status_page_url: str, subscriber_id: int) -> str:
        return f"{status_page_url.rstrip('/')}/update-subscription/{subscriber_id}"
