"""Database adapter protocol — the boundary between the gateway and drivers."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable


class DatabaseType(enum.Enum):
    POSTGRES = "postgres"
    DUCKDB = "duckdb"


@dataclass
class ConnectionConfig:
    name: str
    db_type: DatabaseType
    params: dict[str, str] = field(default_factory=dict)


@dataclass
class ExecutionResult:
    """Query execution result."""

    columns: list[str]
    rows: list[dict[str, object]]
    row_count: int
    duration_ms: float | None = None


class AdapterError(Exception):
    """Raised by adapters for connection/execution failures."""


def is_truthy(value: str | None) -> bool:
    return (value or "").strip().lower() in {"1", "true", "yes", "on"}


@runtime_checkable
class DatabaseAdapter(Protocol):
    async def connect(self, config: ConnectionConfig) -> None: ...
    async def close(self) -> None: ...
    async def execute(self, sql: str, *, max_rows: int | None = None) -> ExecutionResult: ...
    def db_type(self) -> DatabaseType: ...
    def dialect(self) -> str: ...
