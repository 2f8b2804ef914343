from typing import Any

from psycopg import Connection

from oneuptime.models.entities import StatusPageOwnerTeamEntity, StatusPageOwnerUserEntity
from oneuptime.repositories.base import BaseRepository
from oneuptime.repositories.user_repository import to_user_entity


def _to_owner_team_entity(row: dict[str, Any]) -> StatusPageOwnerTeamEntity:
    return StatusPageOwnerTeamEntity(
        id=row["id"],
        status_page_id=row["status_page_id"],
        team_id=row["team_id"],
        is_owner_notified=row["is_owner_notified"],
    )


def _to_owner_user_entity(row: dict[str, Any]) -> StatusPageOwnerUserEntity:
    return StatusPageOwnerUserEntity(
        id=row["id"],
        status_page_id=row["status_page_id"],
        user=to_user_entity(row, prefix="user_"),
        is_owner_notified=row["is_owner_notified"],
    )


class StatusPageOwnerRepository(BaseRepository):
    def list_unnotified_teams(
        self,
        *,
        limit: int = 1000,
        connection: Connection | None = None,
    ) -> list[StatusPageOwnerTeamEntity]:
        query = """
            SELECT id, status_page_id, team_id, is_owner_notified
            FROM status_page_owner_teams
            WHERE is_owner_notified = false
            ORDER BY id ASC
            LIMIT %s
        """
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (limit,))
                rows = cursor.fetchall()
        return [_to_owner_team_entity(row) for row in rows]

    def list_unnotified_users(
        self,
        *,
        limit: int = 1000,
        connection: Connection | None = None,
    ) -> list[StatusPageOwnerUserEntity]:
        query = """
            SELECT
                o.id,
                o.status_page_id,
                o.is_owner_notified,
                u.id AS user_id,
                u.name AS user_name,
                u.email AS user_email,
                u.phone AS user_phone
            FROM status_page_owner_users o
            JOIN users u ON u.id = o.user_id
            WHERE o.is_owner_notified = false
            ORDER BY o.id ASC
            LIMIT %s
        """
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (limit,))
                rows = cursor.fetchall()
        return [_to_owner_user_entity(row) for row in rows]

    def mark_team_notified(self, owner_team_id: int, connection: Connection | None = None) -> bool:
        query = """
            UPDATE status_page_owner_teams
            SET is_owner_notified = true,
                updated_at = NOW()
            WHERE id = %s
        """
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (owner_team_id,))
                return cursor.rowcount > 0

    def mark_user_notified(self, owner_user_id: int, connection: Connection | None = None) -> bool:
        query = """
            UPDATE status_page_owner_users
            SET is_owner_notified = true,
                updated_at = NOW()
            WHERE id = %s
        """
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (owner_user_id,))
                return cursor.rowcount > 0
