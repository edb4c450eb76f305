"""
Errors raised by the pool and the query executor.
"""

from typing import Any


class PoolConnectionError(ConnectionError):
    """A connection could not be obtained (unreachable server, rejected credentials, disposed pool)."""


class PoolTimeoutError(PoolConnectionError):
    """All connections stayed checked out for longer than the acquire timeout."""


class QueryError(RuntimeError):
    """The database rejected or failed a statement. The driver error is kept as __cause__."""

    def __init__(self, message: str, *, sqlstate: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.sqlstate = sqlstate

    @classmethod
    def from_driver_error(cls, exc: Any) -> "QueryError":
        message = str(exc).strip() or exc.__class__.__name__
        return cls(message, sqlstate=getattr(exc, "sqlstate", None))
