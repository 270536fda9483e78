"""Style advisories: informational notes that never block a query."""

from __future__ import annotations

import re

from sqlgate.diagnostics import Diagnostic, codes

# A bare or table-qualified ``*`` as a projection item; ``COUNT(*)`` is not one.
_WILDCARD_RE = re.compile(
    r"(?:\bSELECT(?: DISTINCT)?|,) ?(?:\w+ ?\. ?)?\*(?= ?(?:,|\bFROM\b))",
    re.IGNORECASE,
)
_FILTER_RE = re.compile(r"\bWHERE\b|\bGROUP\s+BY\b", re.IGNORECASE)


def check_wildcard_projection(normalized: str) -> Diagnostic | None:
    if _WILDCARD_RE.search(normalized) is None:
        return None
    return (
        Diagnostic.warning(codes.WILDCARD_PROJECTION, "SELECT * is discouraged")
        .note("list the columns you need explicitly")
    )


def check_no_filter(normalized: str) -> Diagnostic | None:
    if _FILTER_RE.search(normalized) is not None:
        return None
    return (
        Diagnostic.warning(codes.NO_FILTER_CLAUSE, "query has no WHERE or GROUP BY clause")
        .note("it may return a large share of the table")
    )
