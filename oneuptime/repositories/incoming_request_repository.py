from dataclasses import dataclass
from typing import Any

from psycopg import Connection, sql

from oneuptime.models.entities import FilterCondition, IncomingRequestEntity
from oneuptime.repositories.base import BaseRepository, build_set_clause

_COLUMNS = """
    id,
    project_id,
    name,
    url,
    is_default,
    create_incident,
    filter_criteria,
    filter_condition,
    filter_text,
    monitor_ids,
    deleted,
    deleted_at,
    created_at,
    updated_at
"""


@dataclass(slots=True)
class IncomingRequestFilter:
    id: int | None = None
    project_id: int | None = None
    is_default: bool | None = None
    filter_text: str | None = None
    monitor_id: int | None = None


def _to_incoming_request_entity(row: dict[str, Any]) -> IncomingRequestEntity:
    return IncomingRequestEntity(
        id=row["id"],
        project_id=row["project_id"],
        name=row["name"],
        url=row["url"],
        is_default=row["is_default"],
        create_incident=row["create_incident"],
        filter_criteria=row["filter_criteria"],
        filter_condition=row["filter_condition"],
        filter_text=row["filter_text"],
        monitor_ids=list(row["monitor_ids"] or []),
        deleted=row["deleted"],
        deleted_at=row["deleted_at"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _build_where(
    request_filter: IncomingRequestFilter,
    *,
    include_deleted: bool = False,
) -> tuple[str, list[Any]]:
    where_clauses = [] if include_deleted else ["deleted = false"]
    params: list[Any] = []

    if request_filter.id is not None:
        where_clauses.append("id = %s")
        params.append(request_filter.id)

    if request_filter.project_id is not None:
        where_clauses.append("project_id = %s")
        params.append(request_filter.project_id)

    if request_filter.is_default is not None:
        where_clauses.append("is_default = %s")
        params.append(request_filter.is_default)

    if request_filter.filter_text is not None:
        where_clauses.append("filter_text = %s")
        params.append(request_filter.filter_text)

    if request_filter.monitor_id is not None:
        where_clauses.append("%s = ANY(monitor_ids)")
        params.append(request_filter.monitor_id)

    if not where_clauses:
        return "", params
    return "WHERE " + " AND ".join(where_clauses), params


class IncomingRequestRepository(BaseRepository):
    def find_by(
        self,
        request_filter: IncomingRequestFilter,
        *,
        limit: int = 0,
        offset: int = 0,
        connection: Connection | None = None,
    ) -> list[IncomingRequestEntity]:
        where_sql, params = _build_where(request_filter)
        query = f"SELECT {_COLUMNS} FROM incoming_requests {where_sql} ORDER BY created_at DESC, id DESC"
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
        return [_to_incoming_request_entity(row) for row in rows]

    def find_one_by(
        self,
        request_filter: IncomingRequestFilter,
        connection: Connection | None = None,
    ) -> IncomingRequestEntity | None:
        found = self.find_by(request_filter, limit=1, connection=connection)
        return found[0] if found else None

    def count_by(
        self,
        request_filter: IncomingRequestFilter,
        connection: Connection | None = None,
    ) -> int:
        where_sql, params = _build_where(request_filter)
        query = f"SELECT COUNT(1) AS total FROM incoming_requests {where_sql}"
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, params)
                row = cursor.fetchone()
        return int(row["total"]) if row is not None else 0

    def create(
        self,
        *,
        project_id: int,
        name: str,
        is_default: bool,
        create_incident: bool,
        filter_criteria: str | None,
        filter_condition: FilterCondition | None,
        filter_text: str | None,
        monitor_ids: list[int],
        connection: Connection | None = None,
    ) -> IncomingRequestEntity:
        query = f"""
            INSERT INTO incoming_requests (
                project_id,
                name,
                is_default,
                create_incident,
                filter_criteria,
                filter_condition,
                filter_text,
                monitor_ids
            )
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING {_COLUMNS}
        """
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(
                    query,
                    (
                        project_id,
                        name,
                        is_default,
                        create_incident,
                        filter_criteria,
                        filter_condition,
                        filter_text,
                        monitor_ids,
                    ),
                )
                row = cursor.fetchone()
        if row is None:
            raise RuntimeError("Failed to create incoming request.")
        return _to_incoming_request_entity(row)

    def update(
        self,
        request_id: int,
        fields: dict[str, Any],
        connection: Connection | None = None,
    ) -> IncomingRequestEntity | None:
        set_sql, params = build_set_clause(fields)
        query = sql.SQL(
            "UPDATE incoming_requests SET {} WHERE id = %s AND deleted = false RETURNING "
            + _COLUMNS
        ).format(set_sql)
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, [*params, request_id])
                row = cursor.fetchone()
        if row is None:
            return None
        return _to_incoming_request_entity(row)

    def update_by(
        self,
        request_filter: IncomingRequestFilter,
        fields: dict[str, Any],
        connection: Connection | None = None,
    ) -> int:
        set_sql, set_params = build_set_clause(fields)
        where_sql, where_params = _build_where(request_filter)
        query = sql.SQL("UPDATE incoming_requests SET {} " + where_sql).format(set_sql)
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, [*set_params, *where_params])
                return cursor.rowcount

    def soft_delete_by(
        self,
        request_filter: IncomingRequestFilter,
        connection: Connection | None = None,
    ) -> IncomingRequestEntity | None:
        where_sql, params = _build_where(request_filter)
        query = f"""
            UPDATE incoming_requests
            SET deleted = true,
                deleted_at = NOW(),
                updated_at = NOW()
            WHERE id = (SELECT id FROM incoming_requests {where_sql} ORDER BY id ASC LIMIT 1)
            RETURNING {_COLUMNS}
        """
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, params)
                row = cursor.fetchone()
        if row is None:
            return None
        return _to_incoming_request_entity(row)

    def hard_delete_by(
        self,
        request_filter: IncomingRequestFilter,
        connection: Connection | None = None,
    ) -> int:
        where_sql, params = _build_where(request_filter, include_deleted=True)
        query = f"DELETE FROM incoming_requests {where_sql}"
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, params)
                return cursor.rowcount
