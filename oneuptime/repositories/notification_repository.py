from typing import Any

from psycopg import Connection

from oneuptime.models.entities import (
    IntegrationType,
    NotificationEntity,
    NotificationIcon,
    ProjectIntegrationEntity,
    UserNotificationSettingEntity,
)
from oneuptime.repositories.base import BaseRepository


def _to_notification_entity(row: dict[str, Any]) -> NotificationEntity:
    return NotificationEntity(
        id=row["id"],
        project_id=row["project_id"],
        message=row["message"],
        created_by=row["created_by"],
        icon=row["icon"],
        created_at=row["created_at"],
    )


class NotificationRepository(BaseRepository):
    def create(
        self,
        *,
        project_id: int,
        message: str,
        created_by: str,
        icon: NotificationIcon,
        connection: Connection | None = None,
    ) -> NotificationEntity:
        query = """
            INSERT INTO notifications (project_id, message, created_by, icon)
            VALUES (%s, %s, %s, %s)
            RETURNING id, project_id, message, created_by, icon, created_at
        """
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (project_id, message, created_by, icon))
                row = cursor.fetchone()
        if row is None:
            raise RuntimeError("Failed to create notification.")
        return _to_notification_entity(row)

    def list_by_project(
        self,
        project_id: int,
        *,
        limit: int = 50,
        connection: Connection | None = None,
    ) -> list[NotificationEntity]:
        query = """
            SELECT id, project_id, message, created_by, icon, created_at
            FROM notifications
            WHERE project_id = %s
            ORDER BY created_at DESC, id DESC
            LIMIT %s
        """
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (project_id, limit))
                rows = cursor.fetchall()
        return [_to_notification_entity(row) for row in rows]


class UserNotificationSettingRepository(BaseRepository):
    def get(
        self,
        *,
        user_id: int,
        event_type: str,
        connection: Connection | None = None,
    ) -> UserNotificationSettingEntity | None:
        query = """
            SELECT user_id, event_type, alert_by_email, alert_by_sms, alert_by_call
            FROM user_notification_settings
            WHERE user_id = %s AND event_type = %s
        """
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (user_id, event_type))
                row = cursor.fetchone()
        if row is None:
            return None
        return UserNotificationSettingEntity(
            user_id=row["user_id"],
            event_type=row["event_type"],
            alert_by_email=row["alert_by_email"],
            alert_by_sms=row["alert_by_sms"],
            alert_by_call=row["alert_by_call"],
        )


class IntegrationRepository(BaseRepository):
    def list_by_project(
        self,
        project_id: int,
        integration_type: IntegrationType,
        connection: Connection | None = None,
    ) -> list[ProjectIntegrationEntity]:
        query = """
            SELECT id, project_id, integration_type, endpoint_url, events, monitor_ids
            FROM project_integrations
            WHERE project_id = %s AND integration_type = %s
            ORDER BY id ASC
        """
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (project_id, integration_type))
                rows = cursor.fetchall()
        return [
            ProjectIntegrationEntity(
                id=row["id"],
                project_id=row["project_id"],
                integration_type=row["integration_type"],
                endpoint_url=row["endpoint_url"],
                events=list(row["events"] or []),
                monitor_ids=list(row["monitor_ids"] or []),
            )
            for row in rows
        ]
