"""Render verdicts for terminal (text) and machine (JSON) output."""

from __future__ import annotations

from sqlgate.diagnostics.types import Diagnostic, Verdict


def render_json(verdict: Verdict) -> dict:
    """Render a Verdict as a JSON-serializable dict."""
    return {
        "accepted": verdict.accepted,
        "original_sql": verdict.original_sql,
        "sql": verdict.sql,
        "tables": verdict.tables,
        "violations": [diagnostic_to_dict(d) for d in verdict.violations],
        "advisories": [diagnostic_to_dict(d) for d in verdict.advisories],
    }


def render_text(verdict: Verdict) -> str:
    """Render a Verdict as human-readable text."""
    lines: list[str] = []
    for d in verdict.diagnostics:
        lines.append(f"{d.level.name.lower()}[{d.code}]: {d.message}")
        for note in d.notes:
            lines.append(f"  = note: {note}")

    if verdict.sql:
        if lines:
            lines.append("")
        status = "accepted" if verdict.accepted else "rejected"
        lines.append(f"{status}: {verdict.sql}")

    return "\n".join(lines)


def diagnostic_to_dict(d: Diagnostic) -> dict:
    return {
        "tag": d.tag,
        "code": str(d.code),
        "level": d.level.name.lower(),
        "message": d.message,
        "subject": d.subject,
        "data": d.data,
        "notes": d.notes,
    }
