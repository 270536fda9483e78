"""Policy scanner: ordered, non-short-circuiting checks over normalized SQL."""

from __future__ import annotations

from collections.abc import Callable

from sqlgate.diagnostics import Diagnostic, codes
from sqlgate.policy._lexing import keyword_re
from sqlgate.policy.classify import check_read_shape
from sqlgate.policy.config import PolicyConfig
from sqlgate.policy.tables import extract_source_tables, unlisted_table

Check = Callable[[str, PolicyConfig], list[Diagnostic]]


def check_forbidden_keywords(normalized: str, policy: PolicyConfig) -> list[Diagnostic]:
    """One violation per forbidden keyword present as a whole word."""
    return [
        Diagnostic.error(
            codes.FORBIDDEN_OPERATION, f"forbidden operation: {keyword}", subject=keyword
        )
        for keyword in policy.forbidden_keywords
        if keyword_re(keyword).search(normalized)
    ]


def check_injection_patterns(normalized: str, policy: PolicyConfig) -> list[Diagnostic]:
    return [
        Diagnostic.error(
            codes.INJECTION_PATTERN,
            f"suspicious pattern detected: {pattern.id}",
            subject=pattern.id,
        ).note("possible SQL injection")
        for pattern in policy.injection_patterns
        if pattern.search(normalized)
    ]


def check_tables(normalized: str, policy: PolicyConfig) -> list[Diagnostic]:
    return [
        unlisted_table(name, policy)
        for name in extract_source_tables(normalized)
        if not policy.allows_table(name)
    ]


def check_multiple_statements(normalized: str, policy: PolicyConfig) -> list[Diagnostic]:
    """Reject more than one non-empty ``;``-separated segment.

    Independent of the injection heuristics: a harmless-looking second
    statement is still a second statement.
    """
    segments = [s for s in normalized.split(";") if s.strip()]
    if len(segments) <= 1:
        return []
    return [
        Diagnostic.error(codes.MULTIPLE_STATEMENTS, "multiple statements detected")
        .note("only single statements are allowed (possible SQL injection)")
    ]


CHECKS: tuple[Check, ...] = (
    check_forbidden_keywords,
    check_injection_patterns,
    check_tables,
    check_multiple_statements,
    check_read_shape,
)


def scan(normalized: str, policy: PolicyConfig) -> list[Diagnostic]:
    """Run every check and collect all violations, in check order.

    A violation with the same code and subject is reported once, at its
    first occurrence.
    """
    seen: set[tuple] = set()
    violations: list[Diagnostic] = []
    for check in CHECKS:
        for diag in check(normalized, policy):
            if diag.key in seen:
                continue
            seen.add(diag.key)
            violations.append(diag)
    return violations
