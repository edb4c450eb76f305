"""
pgaccess: pooled PostgreSQL connections and parameterized query execution.

    from pgaccess import execute_query

    rows = execute_query("SELECT * FROM users WHERE id = $1", [5])
"""

from pgaccess.core.config import Settings, settings
from pgaccess.core.pool import (
    PoolConnectionError,
    PoolManager,
    PooledConnection,
    PoolTimeoutError,
    QueryError,
    close_pool_manager,
    get_pool_manager,
    health_check,
)
from pgaccess.engines.sql import QueryExecutor, execute_query

__all__ = [
    "Settings",
    "settings",
    "PoolManager",
    "PooledConnection",
    "get_pool_manager",
    "close_pool_manager",
    "health_check",
    "QueryExecutor",
    "execute_query",
    "PoolConnectionError",
    "PoolTimeoutError",
    "QueryError",
]
