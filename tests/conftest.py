import psycopg
import pytest

from pgaccess.core.config import Settings
from pgaccess.core.pool import connect


@pytest.fixture
def pg_settings() -> Settings:
    """DB_* settings for a live Postgres; skips the test when the server is not reachable."""
    s = Settings(DB_CONNECT_TIMEOUT=3)
    try:
        conn = connect(s)
    except psycopg.Error as exc:
        pytest.skip(f"Postgres not reachable at {s.DB_HOST}:{s.DB_PORT}: {exc}")
    conn.close()
    return s
