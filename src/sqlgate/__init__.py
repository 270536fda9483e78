"""sqlgate: a safety gateway between generated SQL and an analytics database."""

from sqlgate.diagnostics import Verdict
from sqlgate.policy import (
    DEFAULT_POLICY,
    PolicyConfig,
    PolicyViolation,
    evaluate,
    evaluate_strict,
    load_policy,
)

__all__ = [
    "DEFAULT_POLICY",
    "PolicyConfig",
    "PolicyViolation",
    "Verdict",
    "evaluate",
    "evaluate_strict",
    "load_policy",
]
