"""
Parameterized SQL execution.

Exports: QueryExecutor, execute_query.
"""

from pgaccess.engines.sql.executor import QueryExecutor, execute_query

__all__ = [
    "QueryExecutor",
    "execute_query",
]
