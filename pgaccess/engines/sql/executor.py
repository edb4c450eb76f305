"""
Execute one parameterized statement against the pool.

Statements use PostgreSQL placeholders ($1, $2, ...); parameters travel
separately from the SQL text and are bound by the server.

Uses core.pool (execute, cursor_to_dicts, PoolManager).
"""

from collections.abc import Sequence
from typing import Any

import psycopg

from pgaccess.core.pool import (
    PoolManager,
    QueryError,
    cursor_to_dicts,
    execute,
    get_pool_manager,
)


class QueryExecutor:
    """Runs statements on connections checked out from an injected PoolManager."""

    def __init__(self, pool: PoolManager) -> None:
        self._pool = pool

    @property
    def pool(self) -> PoolManager:
        return self._pool

    def execute(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        """
        Run *sql* with *params* bound positionally and return the rows as dicts.

        - Acquisition errors (PoolConnectionError / PoolTimeoutError) propagate as-is.
        - Any driver error while executing or fetching becomes QueryError.
        - The connection is released on every exit path.
        """
        with self._pool.connection() as conn:
            try:
                cur = execute(conn, sql, params)
                try:
                    return cursor_to_dicts(cur)
                finally:
                    cur.close()
            except psycopg.Error as exc:
                raise QueryError.from_driver_error(exc) from exc


def execute_query(
    sql: str,
    params: Sequence[Any] = (),
    *,
    pool: PoolManager | None = None,
) -> list[dict[str, Any]]:
    """
    Run one statement and return its rows.

    pool: PoolManager to use; defaults to the process-wide get_pool_manager().
    """
    return QueryExecutor(pool if pool is not None else get_pool_manager()).execute(sql, params)
