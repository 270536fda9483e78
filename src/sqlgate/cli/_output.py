"""Shared output formatting for CLI commands."""

from __future__ import annotations

import json

import click

from sqlgate.adapters._base import ExecutionResult
from sqlgate.diagnostics import Verdict
from sqlgate.diagnostics.render import render_json, render_text


def format_verdict(verdict: Verdict, *, output_format: str = "text") -> str:
    if output_format == "json":
        return json.dumps(render_json(verdict), indent=2)
    return render_text(verdict)


def format_execution_result(result: ExecutionResult) -> str:
    """Render rows as a simple text table."""
    lines: list[str] = []
    if result.columns:
        lines.append(" | ".join(result.columns))
        lines.append("-+-".join("-" * max(len(c), 5) for c in result.columns))
        for row in result.rows:
            lines.append(" | ".join(str(row.get(c, "")) for c in result.columns))

    duration = f", {result.duration_ms:.0f}ms" if result.duration_ms is not None else ""
    lines.append(f"\n({result.row_count} rows{duration})")
    return "\n".join(lines)


def emit_output(
    output_format: str,
    verdict: Verdict,
    *,
    exec_result: ExecutionResult | None = None,
    error: str | None = None,
) -> None:
    """Emit a single output document (JSON or text)."""
    decision = "allow" if verdict.accepted and error is None else "deny"

    if output_format == "json":
        envelope: dict[str, object] = {"decision": decision}
        envelope.update(render_json(verdict))
        if exec_result is not None:
            envelope["columns"] = exec_result.columns
            envelope["rows"] = exec_result.rows
            envelope["row_count"] = exec_result.row_count
            envelope["duration_ms"] = exec_result.duration_ms
        if error is not None:
            envelope["error"] = error
        click.echo(json.dumps(envelope, indent=2, default=str))
        return

    if decision == "deny":
        click.echo("decision: deny")
    output = render_text(verdict)
    if output:
        click.echo(output)
    if error is not None:
        click.echo(f"\nerror: {error}")
    if exec_result is not None:
        click.echo(format_execution_result(exec_result))
