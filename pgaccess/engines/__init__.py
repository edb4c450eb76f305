"""
Engines: SQL query execution against the pool.
"""

from pgaccess.engines.sql import QueryExecutor, execute_query

__all__ = [
    "QueryExecutor",
    "execute_query",
]
