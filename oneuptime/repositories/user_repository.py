from typing import Any

from psycopg import Connection

from oneuptime.models.entities import UserEntity
from oneuptime.repositories.base import BaseRepository


def to_user_entity(row: dict[str, Any], prefix: str = "") -> UserEntity:
    return UserEntity(
        id=row[f"{prefix}id"],
        name=row[f"{prefix}name"],
        email=row[f"{prefix}email"],
        phone=row[f"{prefix}phone"],
    )


class UserRepository(BaseRepository):
    def get_by_id(self, user_id: int, connection: Connection | None = None) -> UserEntity | None:
        query = "SELECT id, name, email, phone FROM users WHERE id = %s"
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (user_id,))
                row = cursor.fetchone()
        if row is None:
            return None
        return to_user_entity(row)

    def list_by_ids(
        self,
        user_ids: list[int],
        connection: Connection | None = None,
    ) -> list[UserEntity]:
        if not user_ids:
            return []

        query = """
            SELECT id, name, email, phone
            FROM users
            WHERE id = ANY(%s)
            ORDER BY id ASC
        """
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (user_ids,))
                rows = cursor.fetchall()
        return [to_user_entity(row) for row in rows]
