from typing import Any

from psycopg import Connection

from oneuptime.models.entities import MonitorEntity
from oneuptime.repositories.base import BaseRepository


def _to_monitor_entity(row: dict[str, Any]) -> MonitorEntity:
    return MonitorEntity(
        id=row["id"],
        project_id=row["project_id"],
        name=row["name"],
        third_party_variables=list(row["third_party_variables"] or []),
    )


class MonitorRepository(BaseRepository):
    def get_by_id(
        self,
        monitor_id: int,
        connection: Connection | None = None,
    ) -> MonitorEntity | None:
        query = """
            SELECT id, project_id, name, third_party_variables
            FROM monitors
            WHERE id = %s
        """
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (monitor_id,))
                row = cursor.fetchone()
        if row is None:
            return None
        return _to_monitor_entity(row)

    def list_by_project(
        self,
        project_id: int,
        connection: Connection | None = None,
    ) -> list[MonitorEntity]:
        query = """
            SELECT id, project_id, name, third_party_variables
            FROM monitors
            WHERE project_id = %s
            ORDER BY id ASC
        """
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (project_id,))
                rows = cursor.fetchall()
        return [_to_monitor_entity(row) for row in rows]

    def list_by_ids(
        self,
        monitor_ids: list[int],
        connection: Connection | None = None,
    ) -> list[MonitorEntity]:
        if not monitor_ids:
            return []

        query = """
            SELECT id, project_id, name, third_party_variables
            FROM monitors
            WHERE id = ANY(%s)
            ORDER BY id ASC
        """
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (monitor_ids,))
                rows = cursor.fetchall()
        return [_to_monitor_entity(row) for row in rows]
