"""
Bounded connection pool for PostgreSQL.

Connections are opened lazily and reused. At most max_size connections exist at
once (idle + checked out + being opened); callers beyond that wait until one is
released or the acquire timeout expires. Includes health-check on checkout,
max-age eviction, and thread-safe singleton initialisation.

Every checkout hands out a fresh PooledConnection. Releasing it ends that
checkout only, so a late release from an earlier holder cannot give the
underlying connection back while someone else is using it.
"""

import logging
import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, NamedTuple

import psycopg

from pgaccess.core.config import Settings, settings

from .connect import connect
from .errors import PoolConnectionError, PoolTimeoutError
from .health import health_check

_log = logging.getLogger(__name__)

_PING_IDLE_THRESHOLD = 30.0  # only ping connections idle longer than this (seconds)


class _PoolEntry(NamedTuple):
    conn: Any
    created_at: float  # time.monotonic() when the connection was opened
    last_used: float   # time.monotonic() when last returned to pool


class PooledConnection:
    """
    One checkout of a pooled connection.

    Attribute access goes to the underlying psycopg connection until the
    checkout is released; after that any use raises PoolConnectionError.
    """

    __slots__ = ("_conn",)

    def __init__(self, conn: Any) -> None:
        self._conn = conn

    @property
    def raw(self) -> Any:
        """The underlying psycopg connection."""
        if self._conn is None:
            raise PoolConnectionError("Connection was already returned to the pool")
        return self._conn

    @property
    def released(self) -> bool:
        return self._conn is None

    def __getattr__(self, name: str) -> Any:
        return getattr(self.raw, name)

    def __repr__(self) -> str:
        state = "released" if self._conn is None else repr(self._conn)
        return f"<PooledConnection {state}>"


class _Checkout(NamedTuple):
    lease: PooledConnection
    entry: _PoolEntry


class PoolManager:
    """Bounded connection pool with health-check and max-age."""

    def __init__(self, db_settings: Settings | None = None) -> None:
        self._settings = db_settings if db_settings is not None else settings
        self._max_size: int = self._settings.DB_POOL_MAX_SIZE
        self._timeout: float = float(self._settings.DB_POOL_TIMEOUT)
        self._max_age: float = float(self._settings.DB_POOL_MAX_AGE_SEC)
        self._idle: list[_PoolEntry] = []
        self._in_use: dict[int, _Checkout] = {}  # keyed by id(lease)
        self._opening = 0
        self._closed = False
        self._cond = threading.Condition(threading.Lock())

    @property
    def max_size(self) -> int:
        return self._max_size

    def acquire(self, timeout: float | None = None) -> PooledConnection:
        """
        Check out a connection: an idle one if available, else a new one while
        under max_size, else wait up to *timeout* seconds (default DB_POOL_TIMEOUT).

        Raises PoolConnectionError if the server cannot be reached, and
        PoolTimeoutError if no connection frees up in time.
        """
        wait = self._timeout if timeout is None else float(timeout)
        deadline = time.monotonic() + wait
        while True:
            checkout = self._checkout(deadline, wait)
            if checkout is None:
                return self._open()
            if self._is_usable(checkout.entry):
                return checkout.lease
            self._discard(checkout)

    def release(self, lease: PooledConnection) -> None:
        """
        End a checkout: return the connection to the pool, or close it if it is
        broken or the pool is disposed. Releasing the same checkout again, or
        anything this pool did not hand out, does nothing.
        """
        with self._cond:
            checkout = self._in_use.get(id(lease))
        if checkout is None or checkout.lease is not lease:
            _log.debug("Ignoring release of a connection that is not checked out")
            return

        conn = checkout.entry.conn
        healthy = self._reset(conn)

        with self._cond:
            if self._in_use.pop(id(lease), None) is None:
                return
            lease._conn = None
            keep = healthy and not self._closed
            if keep:
                self._idle.append(checkout.entry._replace(last_used=time.monotonic()))
            self._cond.notify()

        if not keep:
            self._close_quiet(conn)

    @contextmanager
    def connection(self, timeout: float | None = None) -> Iterator[PooledConnection]:
        """
        Acquire a connection for the duration of a with-block.

        The connection goes back to the pool on every exit path.

        Example:
            with pool.connection() as conn:
                cur = execute(conn, "SELECT 1")
        """
        conn = self.acquire(timeout)
        try:
            yield conn
        finally:
            self.release(conn)

    def dispose(self) -> None:
        """Close idle connections and stop handing out new ones. Checked-out ones close on release."""
        with self._cond:
            entries = self._idle
            self._idle = []
            self._closed = True
            self._cond.notify_all()
        for e in entries:
            self._close_quiet(e.conn)
        _log.info("Postgres connection pool disposed (%d idle connections closed)", len(entries))

    def stats(self) -> dict[str, int]:
        """Return pool statistics for monitoring."""
        with self._cond:
            return {
                "max_size": self._max_size,
                "idle": len(self._idle),
                "in_use": len(self._in_use),
                "opening": self._opening,
            }

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _size(self) -> int:
        return len(self._idle) + len(self._in_use) + self._opening

    def _lend(self, entry: _PoolEntry) -> _Checkout:
        """Register a new checkout of *entry*. Caller holds the lock."""
        checkout = _Checkout(lease=PooledConnection(entry.conn), entry=entry)
        self._in_use[id(checkout.lease)] = checkout
        return checkout

    def _checkout(self, deadline: float, wait: float) -> _Checkout | None:
        """Take an idle entry, or reserve a slot for a new connection (returns None)."""
        with self._cond:
            while True:
                if self._closed:
                    raise PoolConnectionError("Connection pool is closed")
                if self._idle:
                    return self._lend(self._idle.pop())
                if self._size() < self._max_size:
                    self._opening += 1
                    return None
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise PoolTimeoutError(
                        f"Timed out after {wait:g}s waiting for a database connection "
                        f"(max_size={self._max_size})"
                    )
                self._cond.wait(remaining)

    def _open(self) -> PooledConnection:
        """Open a physical connection into a slot reserved by _checkout."""
        s = self._settings
        conn = None
        checkout = None
        try:
            conn = connect(s)
        except psycopg.Error as exc:
            _log.error(
                "Error connecting to Postgres at %s:%s/%s: %s",
                s.DB_HOST, s.DB_PORT, s.DB_NAME, exc,
            )
            raise PoolConnectionError(f"Error connecting to Postgres: {exc}") from exc
        finally:
            with self._cond:
                self._opening -= 1
                if conn is not None:
                    now = time.monotonic()
                    checkout = self._lend(_PoolEntry(conn=conn, created_at=now, last_used=now))
                else:
                    self._cond.notify()
        _log.info("Successfully connected to Postgres at %s:%s/%s", s.DB_HOST, s.DB_PORT, s.DB_NAME)
        return checkout.lease

    def _is_usable(self, entry: _PoolEntry) -> bool:
        now = time.monotonic()
        if (now - entry.created_at) > self._max_age:
            return False
        idle_sec = now - entry.last_used
        if idle_sec > _PING_IDLE_THRESHOLD and not health_check(entry.conn):
            return False
        return True

    def _discard(self, checkout: _Checkout) -> None:
        with self._cond:
            self._in_use.pop(id(checkout.lease), None)
            checkout.lease._conn = None
            self._cond.notify()
        _log.debug("Discarding expired or dead pooled connection")
        self._close_quiet(checkout.entry.conn)

    @staticmethod
    def _reset(conn: Any) -> bool:
        """Roll back anything left open; False means the connection is unusable."""
        try:
            conn.rollback()
            return True
        except Exception:
            _log.warning("Connection reset failed; closing it instead of pooling", exc_info=True)
            return False

    @staticmethod
    def _close_quiet(conn: Any) -> None:
        try:
            conn.close()
        except Exception:
            pass


_pool_manager: PoolManager | None = None
_pool_lock = threading.Lock()


def get_pool_manager() -> PoolManager:
    """Return the singleton PoolManager (thread-safe double-checked locking)."""
    global _pool_manager
    if _pool_manager is None:
        with _pool_lock:
            if _pool_manager is None:
                _pool_manager = PoolManager()
    return _pool_manager


def close_pool_manager() -> None:
    """
    Dispose the singleton PoolManager.
    Should be called on application shutdown.
    """
    global _pool_manager
    with _pool_lock:
        pm, _pool_manager = _pool_manager, None
    if pm is not None:
        pm.dispose()
