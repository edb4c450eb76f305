"""
PostgreSQL connection helpers: open one physical connection, run a statement, read rows.

Connections use psycopg's RawCursor, so statements take PostgreSQL-native
placeholders ($1, $2, ...) and parameters are always bound server-side.
"""

from collections.abc import Sequence
from typing import Any

import psycopg

from pgaccess.core.config import Settings


def connect(db_settings: Settings) -> psycopg.Connection:
    """
    Open a connection to PostgreSQL from DB_* settings.

    - autocommit: every statement commits on its own; release only resets state.
    - sslmode: "require" when DB_SSL is on (certificate not verified), else "disable".
    - DB_STATEMENT_TIMEOUT (seconds) is applied server-side via startup options.
    """
    kwargs: dict[str, Any] = {
        "host": db_settings.DB_HOST,
        "port": int(db_settings.DB_PORT),
        "dbname": db_settings.DB_NAME,
        "user": db_settings.DB_USER,
        "password": db_settings.DB_PASSWORD or "",
        "sslmode": db_settings.sslmode,
        "connect_timeout": db_settings.DB_CONNECT_TIMEOUT,
        "application_name": db_settings.DB_APPLICATION_NAME,
    }
    timeout_sec = db_settings.DB_STATEMENT_TIMEOUT
    if timeout_sec is not None and timeout_sec > 0:
        kwargs["options"] = f"-c statement_timeout={int(timeout_sec * 1000)}"

    return psycopg.connect(
        autocommit=True,
        cursor_factory=psycopg.RawCursor,
        **kwargs,
    )


def execute(
    conn: Any,
    sql: str,
    params: Sequence[Any] | None = None,
) -> Any:
    """
    Execute SQL and return the cursor. Caller uses cursor_to_dicts(cursor) or cursor.rowcount.

    Empty params run the statement without bind parameters; the server decides
    whether the placeholder count matches.
    """
    cur = conn.cursor()
    try:
        if params:
            cur.execute(sql, list(params))
        else:
            cur.execute(sql)
    except Exception:
        cur.close()
        raise
    return cur


def cursor_to_dicts(cursor: Any) -> list[dict[str, Any]]:
    """Convert cursor result to list of dicts. No result set (e.g. plain INSERT) gives []."""
    desc = cursor.description
    if not desc:
        return []
    names = [d[0] for d in desc]
    return [dict(zip(names, row, strict=True)) for row in cursor.fetchall()]
