"""Stable, searchable diagnostic code registry.

Every code has a numeric form (``Q0101``) and a snake_case tag
(``forbidden_operation``). Both are part of the reporting surface: logs,
JSON output and tests match on them, never on message prose.

Ranges:
- Q00xx: Structure (fatal, short-circuit)
- Q01xx: Policy violations (fatal, accumulated)
- Q06xx: Advisories (rewrites and style, never fatal)
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DiagnosticCode:
    value: int
    tag: str

    def __str__(self) -> str:
        return f"Q{self.value:04d}"


# Structure (Q00xx)
EMPTY_INPUT = DiagnosticCode(1, "empty_input")
MISSING_SELECT = DiagnosticCode(2, "missing_select")
MISSING_SOURCE = DiagnosticCode(3, "missing_source")

# Policy violations (Q01xx)
FORBIDDEN_OPERATION = DiagnosticCode(101, "forbidden_operation")
INJECTION_PATTERN = DiagnosticCode(102, "injection_pattern")
UNLISTED_TABLE = DiagnosticCode(103, "unlisted_table")
MULTIPLE_STATEMENTS = DiagnosticCode(104, "multiple_statements")
NON_READ_STATEMENT = DiagnosticCode(105, "non_read_statement")
UNPARSEABLE_QUERY = DiagnosticCode(106, "unparseable_query")

# Advisories (Q06xx)
LIMIT_INJECTED = DiagnosticCode(601, "limit_injected")
LIMIT_CLAMPED = DiagnosticCode(602, "limit_clamped")
LIMIT_REPLACED = DiagnosticCode(603, "limit_replaced")
WILDCARD_PROJECTION = DiagnosticCode(604, "wildcard_projection")
NO_FILTER_CLAUSE = DiagnosticCode(605, "no_filter_clause")

ALL_CODES: tuple[DiagnosticCode, ...] = (
    EMPTY_INPUT,
    MISSING_SELECT,
    MISSING_SOURCE,
    FORBIDDEN_OPERATION,
    INJECTION_PATTERN,
    UNLISTED_TABLE,
    MULTIPLE_STATEMENTS,
    NON_READ_STATEMENT,
    UNPARSEABLE_QUERY,
    LIMIT_INJECTED,
    LIMIT_CLAMPED,
    LIMIT_REPLACED,
    WILDCARD_PROJECTION,
    NO_FILTER_CLAUSE,
)

STRUCTURAL_CODES = frozenset({EMPTY_INPUT, MISSING_SELECT, MISSING_SOURCE})

_BY_TAG = {code.tag: code for code in ALL_CODES}


def by_tag(tag: str) -> DiagnosticCode:
    """Look up a code by its tag. Raises KeyError for unknown tags."""
    return _BY_TAG[tag]
