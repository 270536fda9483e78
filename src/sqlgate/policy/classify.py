"""Read-shape check: classify parsed statements with sqlglot.

Text scanning cannot see that ``SELECT * INTO copy FROM sessions`` creates a
table, or that a comma join hides a table behind a subquery. When the
candidate parses, this stage classifies every statement and runs scope
analysis for tables; anything other than a plain READ is a violation.
"""

from __future__ import annotations

import sqlglot
from sqlglot import exp

from sqlgate.diagnostics import Diagnostic, codes
from sqlgate.policy._lexing import TextMap
from sqlgate.policy._types import StatementType
from sqlgate.policy.config import PolicyConfig
from sqlgate.policy.tables import extract_tables, unlisted_table

_READ_TYPES = (exp.Select, exp.Union, exp.Intersect, exp.Except)
_DML_TYPES = (exp.Insert, exp.Update, exp.Delete, exp.Merge)
_DDL_TYPES = (exp.Create, exp.Drop, exp.Alter, exp.TruncateTable)

# Statements that are always rejected (privilege changes, data movement, etc.).
_BLOCKED_TYPES = (exp.Grant, exp.Copy, exp.Command)


def _has_dml_in_cte(statement: exp.Expression) -> bool:
    """Check if any CTE contains a DML operation (writable CTE)."""
    return any(
        isinstance(cte.this, _DML_TYPES)
        for cte in statement.find_all(exp.CTE)
    )


def _has_into(statement: exp.Expression) -> bool:
    """Check for SELECT INTO (creates a table despite being a SELECT)."""
    return isinstance(statement, exp.Select) and statement.find(exp.Into) is not None


def classify(statement: exp.Expression) -> StatementType:
    """Classify a parsed SQL statement.

    Anything that can't be positively identified as a READ is classified as
    DML, DDL, ADMIN or UNKNOWN.
    """
    if isinstance(statement, _BLOCKED_TYPES):
        return StatementType.ADMIN
    if isinstance(statement, _READ_TYPES):
        if _has_dml_in_cte(statement):
            return StatementType.DML
        if _has_into(statement):
            return StatementType.DDL
        return StatementType.READ
    if isinstance(statement, _DML_TYPES):
        return StatementType.DML
    if isinstance(statement, _DDL_TYPES):
        return StatementType.DDL
    return StatementType.UNKNOWN


def check_read_shape(normalized: str, policy: PolicyConfig) -> list[Diagnostic]:
    if TextMap(normalized).unterminated_literal:
        return [
            Diagnostic.error(
                codes.UNPARSEABLE_QUERY,
                "unterminated quoted string or identifier",
                subject="unterminated_literal",
            )
        ]

    try:
        statements = sqlglot.parse(normalized, dialect=policy.dialect)
    except RecursionError:
        return [
            Diagnostic.error(
                codes.UNPARSEABLE_QUERY,
                "query is nested too deeply to analyze",
                subject="nesting_depth",
            )
        ]
    except sqlglot.errors.SqlglotError as e:
        if not policy.require_parse:
            return []
        reason = str(e).splitlines()[0] if str(e) else type(e).__name__
        return [
            Diagnostic.error(
                codes.UNPARSEABLE_QUERY,
                f"SQL could not be parsed: {reason}",
                subject="parse_error",
            ).note("this policy only accepts queries the SQL parser understands")
        ]

    diagnostics: list[Diagnostic] = []
    for statement in statements:
        if statement is None:
            continue
        stmt_type = classify(statement)
        if stmt_type != StatementType.READ:
            diagnostics.append(
                Diagnostic.error(
                    codes.NON_READ_STATEMENT,
                    f"{stmt_type.value} statement is not a read query",
                    subject=stmt_type.value,
                )
            )
        for table in extract_tables(statement):
            if not policy.allows_table(table):
                diagnostics.append(unlisted_table(table, policy))
    return diagnostics
