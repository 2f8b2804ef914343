"""Load seed.sql into the configured database.

Usage: python scripts/seed_db.py [path/to/seed.sql]
"""

import logging
import sys
from pathlib import Path

import psycopg

from oneuptime.core.config import PROJECT_ROOT, get_settings
from oneuptime.core.logging_config import configure_logging

logger = logging.getLogger("seed_db")

DEFAULT_SEED_PATH = PROJECT_ROOT / "seed.sql"


def clean_sql(raw_sql: str) -> str:
    # psql meta commands such as \set are not SQL
    return "\n".join(line for line in raw_sql.splitlines() if not line.lstrip().startswith("\\"))


def split_statements(sql_text: str) -> list[str]:
    statements: list[str] = []
    current: list[str] = []
    in_string = False

    for char in sql_text:
        current.append(char)
        if char == "'":
            in_string = not in_string
        elif char == ";" and not in_string:
            statement = "".join(current).strip()
            if statement:
                statements.append(statement)
            current = []

    tail = "".join(current).strip()
    if tail:
        statements.append(tail)
    return statements


def execute_seed(database_url: str, seed_path: Path) -> int:
    if not seed_path.exists():
        raise FileNotFoundError(f"Seed file not found: {seed_path}")

    statements = split_statements(clean_sql(seed_path.read_text(encoding="utf-8")))
    if not statements:
        raise RuntimeError(f"No SQL statements found in {seed_path}")

    with psycopg.connect(database_url) as connection:
        with connection.cursor() as cursor:
            for statement in statements:
                cursor.execute(statement)
                if cursor.description:
                    for row in cursor.fetchall():
                        logger.info("%s", row)
    return len(statements)


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    seed_path = Path(sys.argv[1]) if len(sys.argv) > 1 else DEFAULT_SEED_PATH
    executed = execute_seed(settings.database_url, seed_path)
    logger.info("Seed completed: %s statements from %s", executed, seed_path)


if __name__ == "__main__":
    main()
