"""Integration tests for DuckDB adapter — runs real queries in-memory."""

import asyncio

import pytest

from sqlgate.adapters._base import AdapterError, ConnectionConfig, DatabaseAdapter, DatabaseType
from sqlgate.adapters.duckdb import DuckDBAdapter


@pytest.fixture
def adapter():
    a = DuckDBAdapter()
    config = ConnectionConfig(name="test", db_type=DatabaseType.DUCKDB, params={"path": ":memory:"})
    asyncio.run(a.connect(config))
    yield a
    asyncio.run(a.close())


def test_satisfies_protocol():
    assert isinstance(DuckDBAdapter(), DatabaseAdapter)


def test_execute_simple(adapter):
    result = asyncio.run(adapter.execute("SELECT 1 AS x, 'hello' AS y"))
    assert result.columns == ["x", "y"]
    assert result.row_count == 1
    assert result.rows == [{"x": 1, "y": "hello"}]
    assert result.duration_ms is not None


def test_execute_max_rows(adapter):
    result = asyncio.run(adapter.execute("SELECT * FROM range(50) t(n)", max_rows=10))
    assert result.row_count == 10
    assert result.rows[0] == {"n": 0}


def test_execute_error(adapter):
    with pytest.raises(AdapterError, match="DuckDB execution failed"):
        asyncio.run(adapter.execute("SELECT * FROM no_such_table"))


def test_execute_before_connect():
    with pytest.raises(AdapterError, match="Not connected"):
        asyncio.run(DuckDBAdapter().execute("SELECT 1"))


def test_close_is_idempotent(adapter):
    asyncio.run(adapter.close())
    asyncio.run(adapter.close())


def test_read_only_file(tmp_path):
    path = tmp_path / "store.duckdb"
    setup = DuckDBAdapter()
    asyncio.run(setup.connect(ConnectionConfig("w", DatabaseType.DUCKDB, {"path": str(path)})))
    asyncio.run(setup.execute("CREATE TABLE sessions (id INTEGER)"))
    asyncio.run(setup.close())

    ro = DuckDBAdapter()
    config = ConnectionConfig("ro", DatabaseType.DUCKDB, {"path": str(path), "read_only": "true"})
    asyncio.run(ro.connect(config))
    try:
        assert asyncio.run(ro.execute("SELECT COUNT(*) AS n FROM sessions")).rows == [{"n": 0}]
        with pytest.raises(AdapterError, match="execution failed"):
            asyncio.run(ro.execute("INSERT INTO sessions VALUES (1)"))
    finally:
        asyncio.run(ro.close())


def test_read_only_ignored_for_memory():
    a = DuckDBAdapter()
    config = ConnectionConfig("m", DatabaseType.DUCKDB, {"path": ":memory:", "read_only": "1"})
    asyncio.run(a.connect(config))
    assert asyncio.run(a.execute("SELECT 2 AS n")).rows == [{"n": 2}]
    asyncio.run(a.close())


def test_connect_failure(tmp_path):
    a = DuckDBAdapter()
    path = tmp_path / "missing-dir" / "store.duckdb"
    with pytest.raises(AdapterError, match="DuckDB connection failed"):
        asyncio.run(a.connect(ConnectionConfig("x", DatabaseType.DUCKDB, {"path": str(path)})))


def test_dialect(adapter):
    assert adapter.dialect() == "duckdb"


def test_db_type(adapter):
    assert adapter.db_type() == DatabaseType.DUCKDB
