"""Normalizer: strip comments, collapse whitespace, keep quoted text intact."""

from __future__ import annotations

import re

# Literals are matched first so comment markers and whitespace inside them
# survive untouched. Everything else between tokens (whitespace, line
# comments, closed block comments) collapses to one space.
_TOKEN_RE = re.compile(
    r"""
    (?P<literal>'(?:[^']|'')*'|"(?:[^"]|"")*")
    |(?P<gap>(?:\s+|--[^\n]*|/\*.*?\*/)+)
    """,
    re.VERBOSE | re.DOTALL,
)


def _replace(match: re.Match[str]) -> str:
    if match.lastgroup == "literal":
        return match.group()
    return " "


def normalize(sql: str) -> str:
    """Return ``sql`` with comments removed and whitespace collapsed.

    Each removed comment becomes a single space, so ``SEL/**/ECT`` turns into
    ``SEL ECT`` rather than ``SELECT``. An unterminated ``/*`` is left in
    place for the injection heuristics to flag.
    """
    return _TOKEN_RE.sub(_replace, sql).strip()
