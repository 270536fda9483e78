"""Diagnostic system: codes, types and rendering."""

from sqlgate.diagnostics import codes
from sqlgate.diagnostics.codes import DiagnosticCode
from sqlgate.diagnostics.types import Diagnostic, Level, Verdict

__all__ = [
    "Diagnostic",
    "DiagnosticCode",
    "Level",
    "Verdict",
    "codes",
]
