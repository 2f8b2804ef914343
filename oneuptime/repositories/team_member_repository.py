from psycopg import Connection

from oneuptime.models.entities import UserEntity
from oneuptime.repositories.base import BaseRepository
from oneuptime.repositories.user_repository import to_user_entity


class TeamMemberRepository(BaseRepository):
    def list_users_in_teams(
        self,
        team_ids: list[int],
        connection: Connection | None = None,
    ) -> list[UserEntity]:
        if not team_ids:
            return []

        query = """
            SELECT DISTINCT u.id, u.name, u.email, u.phone
            FROM team_members tm
            JOIN users u ON u.id = tm.user_id
            WHERE tm.team_id = ANY(%s)
            ORDER BY u.id ASC
        """
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (team_ids,))
                rows = cursor.fetchall()
        return [to_user_entity(row) for row in rows]
