from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from psycopg import Connection, sql

from oneuptime.core.database import get_connection


class BaseRepository:
    def __init__(self, database_url: str | None = None) -> None:
        self.database_url = database_url

    @contextmanager
    def _use_connection(self, connection: Connection | None) -> Iterator[Connection]:
        if connection is not None:
            yield connection
            return
        with get_connection(self.database_url) as managed:
            yield managed


def build_set_clause(fields: Mapping[str, Any]) -> tuple[sql.Composed, list[Any]]:
    """Build ``col = %s, ...`` for an UPDATE, always bumping ``updated_at``."""
    assignments = [
        sql.SQL("{} = %s").format(sql.Identifier(column)) for column in fields
    ]
    assignments.append(sql.SQL("updated_at = NOW()"))
    return sql.SQL(", ").join(assignments), list(fields.values())
