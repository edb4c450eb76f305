"""
PostgreSQL connection and connection pool.

psycopg is the only driver; DB_* settings are enough to connect.
"""

from .connect import connect, cursor_to_dicts, execute
from .errors import PoolConnectionError, PoolTimeoutError, QueryError
from .health import health_check
from .manager import PoolManager, PooledConnection, close_pool_manager, get_pool_manager

__all__ = [
    "connect",
    "execute",
    "cursor_to_dicts",
    "health_check",
    "PoolManager",
    "PooledConnection",
    "get_pool_manager",
    "close_pool_manager",
    "PoolConnectionError",
    "PoolTimeoutError",
    "QueryError",
]
