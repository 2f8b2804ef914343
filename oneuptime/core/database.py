import logging
from collections.abc import Iterator
from contextlib import contextmanager

from psycopg import Connection, connect
from psycopg.rows import dict_row

from oneuptime.core.config import get_settings

logger = logging.getLogger(__name__)


def get_database_url() -> str:
    return get_settings().database_url


@contextmanager
def get_connection(database_url: str | None = None) -> Iterator[Connection]:
    url = database_url or get_database_url()
    with connect(url, row_factory=dict_row) as connection:
        yield connection


def ping_database(database_url: str, timeout_seconds: int = 3) -> tuple[bool, str | None]:
    try:
        with connect(database_url, connect_timeout=timeout_seconds) as connection:
            with connection.cursor() as cursor:
                cursor.execute("SELECT 1")
                result = cursor.fetchone()
    except Exception as exc:
        logger.warning("Database ping failed: %s", exc)
        return False, str(exc)
    if result and result[0] == 1:
        return True, None
    return False, "Database ping returned an unexpected result."
