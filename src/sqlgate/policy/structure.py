"""Structural gate: one plausible SELECT with a data source, or stop here."""

from __future__ import annotations

import re

from sqlgate.diagnostics import Diagnostic, codes
from sqlgate.policy._lexing import TextMap, keyword_re
from sqlgate.policy.config import PolicyConfig
from sqlgate.policy.tables import is_function_from

_SELECT_RE = re.compile(r"SELECT\b", re.IGNORECASE)
_FROM_RE = re.compile(r"\bFROM\b", re.IGNORECASE)


def check_structure(normalized: str, policy: PolicyConfig) -> Diagnostic | None:
    """Return the single fatal structural violation, or None.

    Downstream stages assume a single SELECT with a FROM clause, so the
    gateway stops at the first structural failure.
    """
    if not normalized:
        return Diagnostic.error(codes.EMPTY_INPUT, "SQL query is empty")

    if not _SELECT_RE.match(normalized):
        leading = _leading_forbidden_keyword(normalized, policy)
        if leading is not None:
            return (
                Diagnostic.error(
                    codes.FORBIDDEN_OPERATION,
                    f"forbidden operation: {leading}",
                    subject=leading,
                )
                .note("only read queries starting with SELECT are allowed")
            )
        return (
            Diagnostic.error(codes.MISSING_SELECT, "query must start with SELECT")
            .note("only read queries are allowed")
        )

    text_map = TextMap(normalized)
    if not any(
        _is_source_from(normalized, m.start(), text_map) for m in _FROM_RE.finditer(normalized)
    ):
        return (
            Diagnostic.error(codes.MISSING_SOURCE, "query must contain a FROM clause")
            .note(f"allowed tables: {', '.join(sorted(policy.allowed_tables))}")
        )

    return None


def _is_source_from(text: str, pos: int, text_map: TextMap) -> bool:
    return not text_map.in_literal(pos) and not is_function_from(text, pos, text_map)


def _leading_forbidden_keyword(normalized: str, policy: PolicyConfig) -> str | None:
    for keyword in policy.forbidden_keywords:
        match = keyword_re(keyword).match(normalized)
        if match is not None:
            return keyword
    return None
