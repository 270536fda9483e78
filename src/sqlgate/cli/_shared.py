"""Shared helpers for CLI commands."""

from __future__ import annotations

import dataclasses
import sys
from pathlib import Path

import click

from sqlgate.adapters._base import ConnectionConfig, DatabaseType
from sqlgate.policy import PolicyConfig, PolicyConfigError, load_policy

policy_option = click.option(
    "--policy",
    "policy_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Policy TOML file (default: $SQLGATE_POLICY, then ~/.sqlgate/policy.toml).",
)

format_option = click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "text"]),
    default="text",
    help="Output format.",
)


def resolve_sql_stdin(sql: str | None, from_stdin: bool) -> str:
    """Resolve SQL from positional argument or stdin. Exactly one source required."""
    if sql and from_stdin:
        raise click.UsageError("Provide SQL as an argument or --from-stdin, not both.")
    if from_stdin:
        if sys.stdin.isatty():
            raise click.UsageError("--from-stdin requires piped input (stdin is a terminal).")
        return sys.stdin.read()
    if sql is None:
        raise click.UsageError("Missing argument 'SQL'. Provide SQL or use --from-stdin.")
    return sql


def resolve_policy(policy_path: Path | None, *, dialect: str | None = None) -> PolicyConfig:
    """Load the effective policy, exiting with status 1 on a bad policy file."""
    try:
        policy = load_policy(policy_path)
        if dialect is not None:
            policy = dataclasses.replace(policy, dialect=dialect)
    except PolicyConfigError as e:
        click.echo(f"error: {e}", err=True)
        raise SystemExit(1) from e
    return policy


def parse_db(value: str) -> ConnectionConfig:
    """Parse a --db value in 'type:key=val,key=val' format."""
    if ":" not in value:
        raise click.BadParameter(
            f"Expected 'type:key=val' format, got '{value}'",
            param_hint="'--db'",
        )
    db_type_str, params_str = value.split(":", 1)

    try:
        db_type = DatabaseType(db_type_str)
    except ValueError as e:
        valid = ", ".join(t.value for t in DatabaseType)
        raise click.BadParameter(
            f"Unknown database type '{db_type_str}'. Valid: {valid}",
            param_hint="'--db'",
        ) from e

    params: dict[str, str] = {}
    if params_str:
        for part in params_str.split(","):
            if "=" not in part:
                raise click.BadParameter(
                    f"Expected key=value pair, got '{part}'",
                    param_hint="'--db'",
                )
            k, v = part.split("=", 1)
            params[k.strip()] = v.strip()

    return ConnectionConfig(name=db_type_str, db_type=db_type, params=params)
