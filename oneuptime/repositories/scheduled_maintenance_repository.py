from datetime import datetime
from typing import Any

from psycopg import Connection

from oneuptime.models.entities import ScheduledMaintenanceEntity
from oneuptime.repositories.base import BaseRepository


def _to_scheduled_maintenance_entity(row: dict[str, Any]) -> ScheduledMaintenanceEntity:
    return ScheduledMaintenanceEntity(
        id=row["id"],
        project_id=row["project_id"],
        title=row["title"],
        description=row["description"],
        starts_at=row["starts_at"],
        ends_at=row["ends_at"],
        monitor_ids=list(row["monitor_ids"] or []),
        status_page_ids=list(row["status_page_ids"] or []),
        created_at=row["created_at"],
    )


class ScheduledMaintenanceRepository(BaseRepository):
    def list_pending_subscriber_notifications(
        self,
        *,
        created_before: datetime,
        limit: int = 1000,
        connection: Connection | None = None,
    ) -> list[ScheduledMaintenanceEntity]:
        query = """
            SELECT
                id,
                project_id,
                title,
                description,
                starts_at,
                ends_at,
                monitor_ids,
                status_page_ids,
                created_at
            FROM scheduled_maintenances
            WHERE is_status_page_subscribers_notified_on_event_scheduled = false
              AND should_status_page_subscribers_be_notified_on_event_created = true
              AND created_at < %s
            ORDER BY created_at ASC
            LIMIT %s
        """
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (created_before, limit))
                rows = cursor.fetchall()
        return [_to_scheduled_maintenance_entity(row) for row in rows]

    def mark_subscribers_notified(
        self,
        event_id: int,
        connection: Connection | None = None,
    ) -> bool:
        query = """
            UPDATE scheduled_maintenances
            SET is_status_page_subscribers_notified_on_event_scheduled = true,
                updated_at = NOW()
            WHERE id = %s
        """
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (event_id,))
                return cursor.rowcount > 0
