"""The `validate` command: run SQL through the gateway without executing."""

from __future__ import annotations

from pathlib import Path

import click

from sqlgate.cli._output import format_verdict
from sqlgate.cli._shared import format_option, policy_option, resolve_policy, resolve_sql_stdin
from sqlgate.policy import evaluate


@click.command()
@click.argument("sql", required=False, default=None)
@click.option("--from-stdin", is_flag=True, help="Read SQL from stdin instead of argument.")
@click.option("--dialect", default=None, help="SQL dialect for the read-shape check.")
@policy_option
@format_option
def validate(
    sql: str | None,
    from_stdin: bool,
    dialect: str | None,
    policy_path: Path | None,
    output_format: str,
) -> None:
    """Validate SQL through the gateway without executing. Exits 1 when rejected."""
    sql = resolve_sql_stdin(sql, from_stdin)
    policy = resolve_policy(policy_path, dialect=dialect)
    verdict = evaluate(sql, policy)
    output = format_verdict(verdict, output_format=output_format)
    if output:
        click.echo(output)
    if not verdict.accepted:
        raise SystemExit(1)
