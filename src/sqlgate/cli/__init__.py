"""CLI entry point."""

from __future__ import annotations

import click

from sqlgate.cli.policy import policy
from sqlgate.cli.query import query
from sqlgate.cli.validate import validate


@click.group()
@click.version_option(package_name="sqlgate")
def main() -> None:
    """sqlgate: a safety gateway for generated analytics SQL."""


main.add_command(validate)
main.add_command(query)
main.add_command(policy)
