"""PostgreSQL adapter — read-only sessions with a statement timeout."""

from __future__ import annotations

import time

import psycopg

from sqlgate.adapters._base import (
    AdapterError,
    ConnectionConfig,
    DatabaseType,
    ExecutionResult,
)

DEFAULT_STATEMENT_TIMEOUT_MS = 5000


def _session_options(config: ConnectionConfig) -> str:
    """libpq ``options`` string: read-only transactions plus a statement timeout."""
    raw = config.params.get("statement_timeout_ms", str(DEFAULT_STATEMENT_TIMEOUT_MS))
    try:
        timeout_ms = int(raw)
    except ValueError as e:
        raise AdapterError(f"statement_timeout_ms must be an integer, got '{raw}'") from e
    if timeout_ms < 0:
        raise AdapterError(f"statement_timeout_ms must be >= 0, got {timeout_ms}")
    return f"-c default_transaction_read_only=on -c statement_timeout={timeout_ms}"


class PostgresAdapter:
    """PostgreSQL adapter using psycopg (async)."""

    def __init__(self) -> None:
        self._conn: psycopg.AsyncConnection | None = None

    async def connect(self, config: ConnectionConfig) -> None:
        dsn = config.params.get("dsn")
        if not dsn:
            raise AdapterError("PostgreSQL requires 'dsn' in connection params")
        options = _session_options(config)
        try:
            self._conn = await psycopg.AsyncConnection.connect(
                dsn, autocommit=True, application_name="sqlgate", options=options
            )
        except Exception as e:
            raise AdapterError(f"PostgreSQL connection failed: {e}") from e

    async def close(self) -> None:
        if self._conn is not None:
            await self._conn.close()
            self._conn = None

    def _ensure_conn(self) -> psycopg.AsyncConnection:
        if self._conn is None:
            raise AdapterError("Not connected. Call connect() first.")
        return self._conn

    async def execute(self, sql: str, *, max_rows: int | None = None) -> ExecutionResult:
        conn = self._ensure_conn()

        t0 = time.monotonic()
        try:
            async with conn.cursor() as cur:
                await cur.execute(sql)
                columns = [desc.name for desc in cur.description] if cur.description else []
                if not cur.description:
                    rows_raw = []
                elif max_rows is None:
                    rows_raw = await cur.fetchall()
                else:
                    rows_raw = await cur.fetchmany(max_rows)
        except Exception as e:
            raise AdapterError(f"PostgreSQL execution failed: {e}") from e
        duration_ms = (time.monotonic() - t0) * 1000

        rows = [dict(zip(columns, row, strict=True)) for row in rows_raw]

        return ExecutionResult(
            columns=columns,
            rows=rows,
            row_count=len(rows),
            duration_ms=duration_ms,
        )

    def db_type(self) -> DatabaseType:
        return DatabaseType.POSTGRES

    def dialect(self) -> str:
        return "postgres"
