"""Limit enforcement: every query leaves with exactly one bounded top-level LIMIT."""

from __future__ import annotations

import re

from sqlgate.diagnostics import Diagnostic, codes
from sqlgate.policy._lexing import TextMap
from sqlgate.policy.config import PolicyConfig

_LIMIT_RE = re.compile(r"\bLIMIT\b", re.IGNORECASE)
_OFFSET_RE = re.compile(r"\bOFFSET\b", re.IGNORECASE)
_INTEGER_RE = re.compile(r"[0-9]+")
_TRAILING_TERMINATORS_RE = re.compile(r"[\s;]+$")
# A keyword right after a qualifier dot or AS is a column name or alias.
_IDENTIFIER_CONTEXT_RE = re.compile(r"(?:\.|\bAS) ?$", re.IGNORECASE)


def enforce_limit(normalized: str, policy: PolicyConfig) -> tuple[str, Diagnostic | None]:
    """Add, keep, or clamp the top-level LIMIT.

    Returns the rewritten SQL and an optional advisory. Trailing statement
    terminators are dropped. Only the last LIMIT outside parentheses and
    quoted text bounds the result; limits inside subqueries are left alone.
    Re-running on the output is a no-op.
    """
    sql = _TRAILING_TERMINATORS_RE.sub("", normalized)
    cap = policy.max_row_limit
    text_map = TextMap(sql)

    limits = _clause_matches(text_map, _LIMIT_RE)
    if not limits:
        diag = (
            Diagnostic.info(codes.LIMIT_INJECTED, f"LIMIT {cap} added to unbounded SELECT")
            .with_data(value=cap)
        )
        return f"{sql} LIMIT {cap}", diag

    clause = limits[-1]
    value_start = clause.end()
    offsets = _clause_matches(text_map, _OFFSET_RE, start=value_start)
    value_end = offsets[0].start() if offsets else len(sql)
    value = sql[value_start:value_end].strip()

    if _INTEGER_RE.fullmatch(value):
        current = int(value)
        if current <= cap:
            return sql, None
        diag = (
            Diagnostic.warning(
                codes.LIMIT_CLAMPED, f"LIMIT {current} exceeds maximum {cap}, set to {cap}"
            )
            .with_data(**{"from": current, "to": cap})
        )
    else:
        diag = (
            Diagnostic.warning(
                codes.LIMIT_REPLACED, f"LIMIT {value or '(empty)'} replaced with LIMIT {cap}"
            )
            .with_data(**{"from": value, "to": cap})
            .note("only integer literals are accepted as row limits")
        )

    rest = sql[value_end:]
    rewritten = f"{sql[:value_start]} {cap}" + (f" {rest}" if rest else "")
    return rewritten, diag


def _clause_matches(
    text_map: TextMap, pattern: re.Pattern[str], *, start: int = 0
) -> list[re.Match[str]]:
    return [
        m
        for m in text_map.top_level_matches(pattern, start=start)
        if _IDENTIFIER_CONTEXT_RE.search(text_map.text, 0, m.start()) is None
    ]
