from oneuptime.models.entities import NotificationEntity, NotificationIcon
from oneuptime.repositories.notification_repository import NotificationRepository


class NotificationService:
    """In-app notifications shown in the dashboard feed."""

    def __init__(self, notification_repository: NotificationRepository) -> None:
        self.notification_repository = notification_repository

    def create(
        self,
        project_id: int,
        message: str,
        created_by: str,
        icon: NotificationIcon,
    ) -> NotificationEntity:
        return self.notification_repository.create(
            project_id=project_id,
            message=message,
            created_by=created_by,
            icon=icon,
        )

    def list_for_project(self, project_id: int, limit: int = 50) -> list[NotificationEntity]:
        return self.notification_repository.list_by_project(project_id, limit=limit)
