"""
Integration tests against a live Postgres: PoolManager + QueryExecutor end to end.

Uses DB_HOST, DB_PORT, DB_USER, DB_PASSWORD, DB_NAME from env (or .env).
Skipped when the server is not reachable.
"""

import threading
import uuid
from collections.abc import Iterator

import pytest

from pgaccess.core.config import Settings
from pgaccess.core.pool import PoolConnectionError, PoolManager, QueryError, health_check
from pgaccess.engines.sql import QueryExecutor


@pytest.fixture
def pool(pg_settings: Settings) -> Iterator[PoolManager]:
    pm = PoolManager(pg_settings.model_copy(update={"DB_POOL_MAX_SIZE": 2}))
    yield pm
    pm.dispose()


@pytest.fixture
def table(pool: PoolManager) -> Iterator[str]:
    name = f"itest_{uuid.uuid4().hex[:12]}"
    executor = QueryExecutor(pool)
    executor.execute(f"CREATE TABLE {name} (id int PRIMARY KEY, name text NOT NULL)")
    executor.execute(f"INSERT INTO {name} (id, name) VALUES ($1, $2), ($3, $4)", [5, "five", 6, "six"])
    yield name
    executor.execute(f"DROP TABLE IF EXISTS {name}")


def test_select_one(pool: PoolManager) -> None:
    rows = QueryExecutor(pool).execute("SELECT 1 AS n")
    assert rows == [{"n": 1}]
    assert pool.stats()["in_use"] == 0


def test_pool_connection_is_healthy(pool: PoolManager) -> None:
    with pool.connection() as conn:
        assert health_check(conn) is True


def test_select_with_param(pool: PoolManager, table: str) -> None:
    rows = QueryExecutor(pool).execute(f"SELECT id, name FROM {table} WHERE id = $1", [5])
    assert rows == [{"id": 5, "name": "five"}]


def test_param_is_data_not_sql(pool: PoolManager, table: str) -> None:
    executor = QueryExecutor(pool)
    rows = executor.execute(
        f"SELECT * FROM {table} WHERE name = $1",
        [f"five'; DROP TABLE {table}; --"],
    )
    assert rows == []
    assert len(executor.execute(f"SELECT * FROM {table}")) == 2


def test_empty_result(pool: PoolManager, table: str) -> None:
    assert QueryExecutor(pool).execute(f"SELECT * FROM {table} WHERE 1 = 0") == []


def test_insert_is_committed(pool: PoolManager, table: str) -> None:
    executor = QueryExecutor(pool)
    returned = executor.execute(f"INSERT INTO {table} (id, name) VALUES ($1, $2) RETURNING id", [7, "seven"])
    assert returned == [{"id": 7}]
    assert executor.execute(f"SELECT name FROM {table} WHERE id = $1", [7]) == [{"name": "seven"}]


def test_missing_table_raises_query_error(pool: PoolManager) -> None:
    with pytest.raises(QueryError, match="nope") as info:
        QueryExecutor(pool).execute("SELECT * FROM nope")
    assert info.value.sqlstate == "42P01"
    assert pool.stats()["in_use"] == 0


def test_connection_reusable_after_error(pool: PoolManager, table: str) -> None:
    executor = QueryExecutor(pool)
    with pytest.raises(QueryError):
        executor.execute(f"INSERT INTO {table} (id, name) VALUES ($1, $2)", [5, "dup"])
    assert executor.execute("SELECT 1 AS n") == [{"n": 1}]


def test_concurrent_queries_over_small_pool(pool: PoolManager) -> None:
    executor = QueryExecutor(pool)
    results: list = []
    lock = threading.Lock()

    def worker(i: int) -> None:
        rows = executor.execute("SELECT $1::int AS n, pg_sleep(0.05)::text AS s", [i])
        with lock:
            results.append(rows[0]["n"])

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(6)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)

    assert sorted(results) == list(range(6))
    assert pool.stats()["in_use"] == 0
    assert pool.stats()["idle"] <= 2


def test_unknown_database_raises_connection_error(pg_settings: Settings) -> None:
    pm = PoolManager(pg_settings.model_copy(update={"DB_NAME": "missing_" + uuid.uuid4().hex[:12]}))
    try:
        with pytest.raises(PoolConnectionError):
            pm.acquire()
    finally:
        pm.dispose()
