"""The `query` command: gateway → execute pipeline.

Only the verdict's rewritten SQL is executed, and only when accepted.
Every decision is appended to the verdict log.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import click

from sqlgate.adapters._base import AdapterError, ConnectionConfig
from sqlgate.adapters._registry import get_adapter
from sqlgate.cli._output import emit_output
from sqlgate.cli._shared import parse_db, policy_option, resolve_policy, resolve_sql_stdin
from sqlgate.execute import execute_verdict
from sqlgate.policy import PolicyConfig, evaluate
from sqlgate.querylog import cleanup_old_logs, log_verdict


async def _run_query(
    sql: str,
    config: ConnectionConfig,
    policy: PolicyConfig,
    *,
    output_format: str,
) -> int:
    """Run the pipeline: gateway → connect → execute. Returns exit code."""
    # Step 1: Gateway. Rejected queries never open a connection.
    verdict = evaluate(sql, policy)
    if not verdict.accepted:
        emit_output(output_format, verdict)
        log_verdict(verdict, db=config.name)
        return 1

    # Step 2: Connect and execute the approved text
    adapter = get_adapter(config.db_type)()
    try:
        await adapter.connect(config)
        result = await execute_verdict(verdict, adapter, policy)
    except AdapterError as e:
        emit_output(output_format, verdict, error=str(e))
        log_verdict(verdict, db=config.name, error=str(e))
        return 1
    finally:
        await adapter.close()

    emit_output(output_format, verdict, exec_result=result)
    log_verdict(
        verdict,
        db=config.name,
        executed=True,
        row_count=result.row_count,
        duration_ms=result.duration_ms,
    )
    return 0


@click.command()
@click.argument("sql", required=False, default=None)
@click.option("--from-stdin", is_flag=True, help="Read SQL from stdin instead of argument.")
@click.option("--db", required=True, envvar="SQLGATE_DB", help="Connection as type:key=val.")
@click.option("--dialect", default=None, help="SQL dialect for the read-shape check.")
@policy_option
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "text"]),
    default="json",
    help="Output format.",
)
def query(
    sql: str | None,
    from_stdin: bool,
    db: str,
    dialect: str | None,
    policy_path: Path | None,
    output_format: str,
) -> None:
    """Execute a query if, and only if, the gateway accepts it."""
    cleanup_old_logs()
    sql = resolve_sql_stdin(sql, from_stdin)

    try:
        config = parse_db(db)
    except click.BadParameter as e:
        click.echo(f"error: {e.format_message()}", err=True)
        raise SystemExit(1) from e

    policy = resolve_policy(policy_path, dialect=dialect)

    try:
        exit_code = asyncio.run(_run_query(sql, config, policy, output_format=output_format))
    except AdapterError as e:
        if output_format == "json":
            click.echo(json.dumps({"decision": "deny", "error": str(e)}, indent=2))
        else:
            click.echo(f"error: {e}", err=True)
        raise SystemExit(1) from e

    if exit_code != 0:
        raise SystemExit(exit_code)
