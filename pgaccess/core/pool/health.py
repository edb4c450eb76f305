"""
Liveness ping for PostgreSQL connections.

PoolManager pings connections that sat idle longer than _PING_IDLE_THRESHOLD
before handing them out again. Callers can ping a checked-out PooledConnection
the same way; a released one reports unhealthy.
"""

from typing import Any

from .connect import execute


def health_check(conn: Any) -> bool:
    """True when SELECT 1 round-trips on *conn*; any driver, network or pool error gives False."""
    try:
        cur = execute(conn, "SELECT 1")
    except Exception:
        return False
    try:
        return cur.fetchone() is not None
    except Exception:
        return False
    finally:
        cur.close()
