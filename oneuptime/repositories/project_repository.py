from typing import Any

from psycopg import Connection

from oneuptime.models.entities import ProjectEntity
from oneuptime.repositories.base import BaseRepository


def _to_project_entity(row: dict[str, Any]) -> ProjectEntity:
    return ProjectEntity(
        id=row["id"],
        name=row["name"],
        parent_project_id=row["parent_project_id"],
        created_at=row["created_at"],
    )


class ProjectRepository(BaseRepository):
    def get_by_id(
        self,
        project_id: int,
        connection: Connection | None = None,
    ) -> ProjectEntity | None:
        query = """
            SELECT id, name, parent_project_id, created_at
            FROM projects
            WHERE id = %s
        """
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (project_id,))
                row = cursor.fetchone()
        if row is None:
            return None
        return _to_project_entity(row)

    def list_user_ids(self, project_id: int, connection: Connection | None = None) -> list[int]:
        query = """
            SELECT user_id
            FROM project_users
            WHERE project_id = %s
            ORDER BY user_id ASC
        """
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (project_id,))
                rows = cursor.fetchall()
        return [row["user_id"] for row in rows]
