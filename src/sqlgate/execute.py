"""Guarded execution: the only path from candidate SQL to a database.

The adapter only ever sees ``verdict.sql`` from an accepted verdict; the
original candidate text is never executed.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlgate.adapters._base import DatabaseAdapter, ExecutionResult
from sqlgate.diagnostics import Verdict
from sqlgate.policy import PolicyConfig, PolicyViolation, evaluate


@dataclass
class GuardedRun:
    verdict: Verdict
    result: ExecutionResult | None = None

    @property
    def executed(self) -> bool:
        return self.result is not None


async def execute_verdict(
    verdict: Verdict, adapter: DatabaseAdapter, policy: PolicyConfig
) -> ExecutionResult:
    """Execute an accepted verdict's SQL on a connected adapter.

    Raises PolicyViolation for a rejected verdict. Fetching is capped at
    ``policy.max_row_limit`` rows.
    """
    if not verdict.accepted:
        raise PolicyViolation(verdict)
    return await adapter.execute(verdict.sql, max_rows=policy.max_row_limit)


async def run_guarded(sql: str, adapter: DatabaseAdapter, policy: PolicyConfig) -> GuardedRun:
    """Evaluate ``sql`` and execute it only if accepted.

    Rejected queries return without touching the adapter.
    """
    verdict = evaluate(sql, policy)
    if not verdict.accepted:
        return GuardedRun(verdict=verdict)
    result = await execute_verdict(verdict, adapter, policy)
    return GuardedRun(verdict=verdict, result=result)
