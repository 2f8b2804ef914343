from typing import Any

from psycopg import Connection

from oneuptime.models.entities import DomainEntity
from oneuptime.repositories.base import BaseRepository

_COLUMNS = "id, project_id, domain, domain_verification_text, is_verified, created_at, updated_at"


def _to_domain_entity(row: dict[str, Any]) -> DomainEntity:
    return DomainEntity(
        id=row["id"],
        project_id=row["project_id"],
        domain=row["domain"],
        domain_verification_text=row["domain_verification_text"],
        is_verified=row["is_verified"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class DomainRepository(BaseRepository):
    def create(
        self,
        *,
        project_id: int,
        domain: str,
        domain_verification_text: str,
        connection: Connection | None = None,
    ) -> DomainEntity:
        query = f"""
            INSERT INTO domains (project_id, domain, domain_verification_text)
            VALUES (%s, %s, %s)
            RETURNING {_COLUMNS}
        """
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (project_id, domain, domain_verification_text))
                row = cursor.fetchone()
        if row is None:
            raise RuntimeError("Failed to create domain.")
        return _to_domain_entity(row)

    def get_by_id(
        self,
        domain_id: int,
        *,
        project_id: int | None = None,
        connection: Connection | None = None,
    ) -> DomainEntity | None:
        query = f"SELECT {_COLUMNS} FROM domains WHERE id = %s"
        params: list[Any] = [domain_id]
        if project_id is not None:
            query += " AND project_id = %s"
            params.append(project_id)

        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, params)
                row = cursor.fetchone()
        if row is None:
            return None
        return _to_domain_entity(row)

    def list_by_project(
        self,
        project_id: int,
        connection: Connection | None = None,
    ) -> list[DomainEntity]:
        query = f"SELECT {_COLUMNS} FROM domains WHERE project_id = %s ORDER BY id ASC"
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (project_id,))
                rows = cursor.fetchall()
        return [_to_domain_entity(row) for row in rows]

    def set_verified(
        self,
        *,
        domain_id: int,
        is_verified: bool,
        connection: Connection | None = None,
    ) -> DomainEntity | None:
        query = f"""
            UPDATE domains
            SET is_verified = %s,
                updated_at = NOW()
            WHERE id = %s
            RETURNING {_COLUMNS}
        """
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (is_verified, domain_id))
                row = cursor.fetchone()
        if row is None:
            return None
        return _to_domain_entity(row)

    def delete(
        self,
        domain_id: int,
        *,
        project_id: int,
        connection: Connection | None = None,
    ) -> bool:
        query = "DELETE FROM domains WHERE id = %s AND project_id = %s"
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (domain_id, project_id))
                return cursor.rowcount > 0
