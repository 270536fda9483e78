"""The `policy` command: print the effective policy."""

from __future__ import annotations

import json
from pathlib import Path

import click

from sqlgate.cli._shared import policy_option, resolve_policy


@click.command()
@policy_option
def policy(policy_path: Path | None) -> None:
    """Print the effective policy as JSON."""
    effective = resolve_policy(policy_path)
    click.echo(json.dumps(effective.to_dict(), indent=2))
