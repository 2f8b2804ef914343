from dataclasses import dataclass
from typing import Any

from psycopg import Connection, sql

from oneuptime.models.entities import IncidentEntity, IncidentType
from oneuptime.repositories.base import BaseRepository, build_set_clause

_SELECT_INCIDENT = """
    SELECT
        i.id,
        i.project_id,
        i.monitor_id,
        m.name AS monitor_name,
        i.created_by_id,
        cu.name AS created_by_name,
        i.incident_type,
        i.manually_created,
        i.acknowledged,
        i.acknowledged_by,
        au.name AS acknowledged_by_name,
        i.acknowledged_at,
        i.acknowledged_by_zapier,
        i.resolved,
        i.resolved_by,
        ru.name AS resolved_by_name,
        i.resolved_at,
        i.resolved_by_zapier,
        i.created_by_zapier,
        i.internal_note,
        i.investigation_note,
        i.not_closed_by,
        i.created_at,
        i.updated_at
    FROM incidents i
    LEFT JOIN monitors m ON m.id = i.monitor_id
    LEFT JOIN users cu ON cu.id = i.created_by_id
    LEFT JOIN users au ON au.id = i.acknowledged_by
    LEFT JOIN users ru ON ru.id = i.resolved_by
"""


@dataclass(slots=True)
class IncidentFilter:
    id: int | None = None
    project_ids: list[int] | None = None
    monitor_id: int | None = None
    acknowledged: bool | None = None
    resolved: bool | None = None
    not_closed_by: int | None = None


def _to_incident_entity(row: dict[str, Any]) -> IncidentEntity:
    return IncidentEntity(
        id=row["id"],
        project_id=row["project_id"],
        monitor_id=row["monitor_id"],
        monitor_name=row["monitor_name"],
        created_by_id=row["created_by_id"],
        created_by_name=row["created_by_name"],
        incident_type=row["incident_type"],
        manually_created=row["manually_created"],
        acknowledged=row["acknowledged"],
        acknowledged_by=row["acknowledged_by"],
        acknowledged_by_name=row["acknowledged_by_name"],
        acknowledged_at=row["acknowledged_at"],
        acknowledged_by_zapier=row["acknowledged_by_zapier"],
        resolved=row["resolved"],
        resolved_by=row["resolved_by"],
        resolved_by_name=row["resolved_by_name"],
        resolved_at=row["resolved_at"],
        resolved_by_zapier=row["resolved_by_zapier"],
        created_by_zapier=row["created_by_zapier"],
        internal_note=row["internal_note"],
        investigation_note=row["investigation_note"],
        not_closed_by=list(row["not_closed_by"] or []),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _build_where(
    incident_filter: IncidentFilter,
    *,
    include_deleted: bool = False,
) -> tuple[str, list[Any]]:
    where_clauses = [] if include_deleted else ["i.deleted = false"]
    params: list[Any] = []

    if incident_filter.id is not None:
        where_clauses.append("i.id = %s")
        params.append(incident_filter.id)

    if incident_filter.project_ids is not None:
        where_clauses.append("i.project_id = ANY(%s)")
        params.append(incident_filter.project_ids)

    if incident_filter.monitor_id is not None:
        where_clauses.append("i.monitor_id = %s")
        params.append(incident_filter.monitor_id)

    if incident_filter.acknowledged is not None:
        where_clauses.append("i.acknowledged = %s")
        params.append(incident_filter.acknowledged)

    if incident_filter.resolved is not None:
        where_clauses.append("i.resolved = %s")
        params.append(incident_filter.resolved)

    if incident_filter.not_closed_by is not None:
        where_clauses.append("%s = ANY(i.not_closed_by)")
        params.append(incident_filter.not_closed_by)

    if not where_clauses:
        return "", params
    return "WHERE " + " AND ".join(where_clauses), params


class IncidentRepository(BaseRepository):
    def find_by(
        self,
        incident_filter: IncidentFilter,
        *,
        limit: int = 0,
        offset: int = 0,
        connection: Connection | None = None,
    ) -> list[IncidentEntity]:
        where_sql, params = _build_where(incident_filter)
        query = f"{_SELECT_INCIDENT} {where_sql} ORDER BY i.created_at DESC, i.id DESC"
        if limit > 0:
            query += " LIMIT %s"
            params.append(limit)
        if offset > 0:
            query += " OFFSET %s"
            params.append(offset)

        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, params)
                rows = cursor.fetchall()
        return [_to_incident_entity(row) for row in rows]

    def find_one_by(
        self,
        incident_filter: IncidentFilter,
        connection: Connection | None = None,
    ) -> IncidentEntity | None:
        incidents = self.find_by(incident_filter, limit=1, connection=connection)
        return incidents[0] if incidents else None

    def get_by_id(
        self,
        incident_id: int,
        connection: Connection | None = None,
    ) -> IncidentEntity | None:
        return self.find_one_by(IncidentFilter(id=incident_id), connection=connection)

    def count_by(
        self,
        incident_filter: IncidentFilter,
        connection: Connection | None = None,
    ) -> int:
        where_sql, params = _build_where(incident_filter)
        query = f"SELECT COUNT(1) AS total FROM incidents i {where_sql}"
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, params)
                row = cursor.fetchone()
        return int(row["total"]) if row is not None else 0

    def create(
        self,
        *,
        project_id: int,
        monitor_id: int,
        created_by_id: int | None,
        incident_type: IncidentType,
        manually_created: bool,
        created_by_zapier: bool,
        not_closed_by: list[int],
        connection: Connection | None = None,
    ) -> IncidentEntity:
        query = """
            INSERT INTO incidents (
                project_id,
                monitor_id,
                created_by_id,
                incident_type,
                manually_created,
                created_by_zapier,
                not_closed_by
            )
            VALUES (%s, %s, %s, %s, %s, %s, %s)
            RETURNING id
        """
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(
                    query,
                    (
                        project_id,
                        monitor_id,
                        created_by_id,
                        incident_type,
                        manually_created,
                        created_by_zapier,
                        not_closed_by,
                    ),
                )
                created = cursor.fetchone()
            if created is None:
                raise RuntimeError("Failed to create incident.")
            incident = self.get_by_id(created["id"], connection=active_connection)
        if incident is None:
            raise RuntimeError("Failed to load created incident.")
        return incident

    def update(
        self,
        incident_id: int,
        fields: dict[str, Any],
        connection: Connection | None = None,
    ) -> IncidentEntity | None:
        set_sql, params = build_set_clause(fields)
        query = sql.SQL(
            "UPDATE incidents SET {} WHERE id = %s AND deleted = false RETURNING id"
        ).format(set_sql)
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, [*params, incident_id])
                row = cursor.fetchone()
            if row is None:
                return None
            return self.get_by_id(incident_id, connection=active_connection)

    def remove_not_closed_by(
        self,
        incident_id: int,
        user_id: int,
        connection: Connection | None = None,
    ) -> IncidentEntity | None:
        query = """
            UPDATE incidents
            SET not_closed_by = array_remove(not_closed_by, %s),
                updated_at = NOW()
            WHERE id = %s AND deleted = false
            RETURNING id
        """
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (user_id, incident_id))
                row = cursor.fetchone()
            if row is None:
                return None
            return self.get_by_id(incident_id, connection=active_connection)

    def soft_delete_by(
        self,
        incident_filter: IncidentFilter,
        deleted_by_id: int | None,
        connection: Connection | None = None,
    ) -> int | None:
        where_sql, params = _build_where(incident_filter)
        query = f"""
            UPDATE incidents
            SET deleted = true,
                deleted_at = NOW(),
                deleted_by_id = %s,
                updated_at = NOW()
            WHERE id = (SELECT i.id FROM incidents i {where_sql} ORDER BY i.id ASC LIMIT 1)
            RETURNING id
        """
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, [deleted_by_id, *params])
                row = cursor.fetchone()
        return row["id"] if row is not None else None

    def hard_delete_by(
        self,
        incident_filter: IncidentFilter,
        connection: Connection | None = None,
    ) -> int:
        where_sql, params = _build_where(incident_filter, include_deleted=True)
        query = f"DELETE FROM incidents i {where_sql}"
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, params)
                return cursor.rowcount
