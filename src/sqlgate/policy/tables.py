"""Table extraction: textual FROM/JOIN scanning plus sqlglot scope analysis."""

from __future__ import annotations

import re

from sqlglot import exp
from sqlglot.optimizer.scope import traverse_scope

from sqlgate.diagnostics import Diagnostic, codes
from sqlgate.policy._lexing import TextMap
from sqlgate.policy.config import PolicyConfig

_IDENT = r'(?:"(?:[^"]|"")+"|[A-Za-z_][\w$]*)'
_QUALIFIED = rf"{_IDENT}(?: ?\. ?{_IDENT})*"

_SOURCE_RE = re.compile(rf"\b(?:FROM|JOIN)\b ?({_QUALIFIED})", re.IGNORECASE)

# Continuation of a comma-separated FROM list: optional alias, comma, next table.
_LIST_ITEM_RE = re.compile(
    rf"(?: (?:AS )?{_IDENT})? ?, ?({_QUALIFIED})",
    re.IGNORECASE,
)

_PART_RE = re.compile(_IDENT)

# FROM inside these calls is part of the function syntax, not a data source.
_FROM_FUNCTIONS = frozenset({"EXTRACT", "SUBSTRING", "SUBSTR", "TRIM", "OVERLAY", "POSITION"})

_DISTINCT_FROM_RE = re.compile(r"\bDISTINCT $", re.IGNORECASE)


def unlisted_table(name: str, policy: PolicyConfig) -> Diagnostic:
    return (
        Diagnostic.error(codes.UNLISTED_TABLE, f"table not allowed: {name}", subject=name)
        .note(f"allowed tables: {', '.join(sorted(policy.allowed_tables))}")
    )


def extract_source_tables(normalized: str) -> list[str]:
    """Return every identifier that follows FROM or JOIN, in order of appearance.

    Names are lowercased with quotes removed; schema-qualified names keep
    their dots (``public.sessions``). Duplicates are dropped.
    """
    text_map = TextMap(normalized)
    found: list[str] = []

    for match in _SOURCE_RE.finditer(normalized):
        if is_function_from(normalized, match.start(), text_map):
            continue
        _add(found, match.group(1))

        pos = match.end()
        if match.group(0)[:4].upper() != "FROM":
            continue
        while True:
            item = _LIST_ITEM_RE.match(normalized, pos)
            if item is None:
                break
            _add(found, item.group(1))
            pos = item.end()

    return found


def is_function_from(text: str, pos: int, text_map: TextMap) -> bool:
    """True when the FROM at ``pos`` is function syntax rather than a data source."""
    if text_map.call_at(pos) in _FROM_FUNCTIONS:
        return True
    return _DISTINCT_FROM_RE.search(text, 0, pos) is not None


def _add(found: list[str], raw: str) -> None:
    name = canonical_name(raw)
    if name and name not in found:
        found.append(name)


def canonical_name(raw: str) -> str:
    """``"Public" . "Sessions"`` -> ``public.sessions``."""
    parts = []
    for part in _PART_RE.findall(raw):
        if part.startswith('"'):
            part = part[1:-1].replace('""', '"')
        parts.append(part.lower())
    return ".".join(parts)


def extract_tables(statement: exp.Expression) -> list[str]:
    """Extract all physical table names referenced by a parsed statement.

    Resolves CTEs: only real table names are returned, lowercased, sorted.
    """
    cte_names: set[str] = set()
    source_tables: set[str] = set()

    try:
        scopes = list(traverse_scope(statement))
    except Exception:
        # Scope analysis fails on statements without scopes (DDL and friends).
        return _walk_tables(statement)

    if not scopes:
        return _walk_tables(statement)

    for scope in scopes:
        if scope.is_cte:
            cte_names.add(scope.expression.parent.alias.lower())

    for scope in scopes:
        for table in scope.tables:
            if table.name and table.name.lower() not in cte_names:
                source_tables.add(_qualified_name(table))

    return sorted(source_tables)


def _walk_tables(statement: exp.Expression) -> list[str]:
    tables: set[str] = set()
    for node in statement.walk():
        if isinstance(node, exp.Table) and node.name:
            tables.add(_qualified_name(node))
    return sorted(tables)


def _qualified_name(table: exp.Table) -> str:
    parts = [table.catalog, table.db, table.name]
    return ".".join(p for p in parts if p).lower()
