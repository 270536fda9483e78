"""Gateway: normalize, gate structure, scan, enforce LIMIT, return a Verdict."""

from __future__ import annotations

from sqlgate.diagnostics import Diagnostic, Verdict
from sqlgate.policy.advise import check_no_filter, check_wildcard_projection
from sqlgate.policy.config import (
    DEFAULT_POLICY,
    InjectionPattern,
    PolicyConfig,
    PolicyConfigError,
    load_policy,
)
from sqlgate.policy.limit import enforce_limit
from sqlgate.policy.normalize import normalize
from sqlgate.policy.scan import scan
from sqlgate.policy.structure import check_structure
from sqlgate.policy.tables import extract_source_tables

__all__ = [
    "DEFAULT_POLICY",
    "InjectionPattern",
    "PolicyConfig",
    "PolicyConfigError",
    "PolicyViolation",
    "evaluate",
    "evaluate_strict",
    "load_policy",
]


class PolicyViolation(Exception):
    """Raised by evaluate_strict when the gateway rejects a query."""

    def __init__(self, verdict: Verdict) -> None:
        self.verdict = verdict
        self.violations: list[Diagnostic] = list(verdict.violations)
        summary = ", ".join(
            f"{d.tag}({d.subject})" if d.subject else d.tag for d in self.violations
        )
        super().__init__(f"query rejected: {summary}")


def evaluate(sql: str, policy: PolicyConfig) -> Verdict:
    """Run the full gateway pipeline on a candidate SQL string.

    Steps:
        1. Normalize (strip comments, collapse whitespace)
        2. Structural gate (empty, not a SELECT, no FROM), short-circuiting
        3. Policy scan (keywords, injection heuristics, tables,
           multiple statements, read shape), collecting every violation
        4. Limit enforcement, run even when step 3 found violations
        5. Style advisories (wildcard projection, no filter)

    Args:
        sql: Untrusted candidate SQL, whatever its origin.
        policy: The policy to enforce.

    Returns:
        Verdict whose ``sql`` is the rewritten text; ``accepted`` is True
        only when no violation was found.

    Raises:
        TypeError: ``sql`` is not a string or ``policy`` is not a PolicyConfig.
            Policy outcomes never raise.
    """
    if not isinstance(policy, PolicyConfig):
        raise TypeError(f"policy must be a PolicyConfig, got {type(policy).__name__}")
    if not isinstance(sql, str):
        raise TypeError(f"sql must be a str, got {type(sql).__name__}")

    normalized = normalize(sql)

    fatal = check_structure(normalized, policy)
    if fatal is not None:
        return Verdict(original_sql=sql, sql=normalized, violations=[fatal])

    violations = scan(normalized, policy)
    effective_sql, limit_diag = enforce_limit(normalized, policy)

    advisories = [
        d
        for d in (limit_diag, check_wildcard_projection(normalized), check_no_filter(normalized))
        if d is not None
    ]

    return Verdict(
        original_sql=sql,
        sql=effective_sql,
        violations=violations,
        advisories=advisories,
        tables=extract_source_tables(normalized),
    )


def evaluate_strict(sql: str, policy: PolicyConfig) -> str:
    """Return the approved SQL, or raise PolicyViolation carrying every violation."""
    verdict = evaluate(sql, policy)
    if not verdict.accepted:
        raise PolicyViolation(verdict)
    return verdict.sql
