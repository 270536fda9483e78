"""Diagnostic values produced by the gateway.

Violations and advisories share one type. A violation is a Diagnostic at
ERROR level; an advisory is INFO or WARNING. Every stage of the gateway
returns Diagnostic values instead of raising, so a rejected query is an
ordinary, fully described return value.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from sqlgate.diagnostics.codes import DiagnosticCode


class Level(enum.IntEnum):
    INFO = 0
    WARNING = 1
    ERROR = 2


@dataclass
class Diagnostic:
    level: Level
    code: DiagnosticCode
    message: str
    subject: str | None = None
    data: dict[str, object] = field(default_factory=dict)
    notes: list[str] = field(default_factory=list)

    # -- Builder classmethods ---------------------------------------------------

    @classmethod
    def error(cls, code: DiagnosticCode, message: str, *, subject: str | None = None) -> Diagnostic:
        return cls(level=Level.ERROR, code=code, message=message, subject=subject)

    @classmethod
    def warning(
        cls, code: DiagnosticCode, message: str, *, subject: str | None = None
    ) -> Diagnostic:
        return cls(level=Level.WARNING, code=code, message=message, subject=subject)

    @classmethod
    def info(cls, code: DiagnosticCode, message: str, *, subject: str | None = None) -> Diagnostic:
        return cls(level=Level.INFO, code=code, message=message, subject=subject)

    # -- Builder chain methods --------------------------------------------------

    def note(self, note: str) -> Diagnostic:
        self.notes.append(note)
        return self

    def with_data(self, **data: object) -> Diagnostic:
        self.data.update(data)
        return self

    # -- Query methods ----------------------------------------------------------

    @property
    def tag(self) -> str:
        return self.code.tag

    @property
    def is_blocking(self) -> bool:
        return self.level == Level.ERROR

    @property
    def key(self) -> tuple[DiagnosticCode, str | None]:
        """Identity used to de-duplicate diagnostics within one verdict."""
        return (self.code, self.subject.lower() if self.subject else None)


@dataclass
class Verdict:
    """The gateway's complete decision for one candidate query.

    ``sql`` always holds the best-effort rewritten text, even when the query
    is rejected. ``accepted`` is derived from ``violations`` and cannot drift
    from it.
    """

    original_sql: str
    sql: str
    violations: list[Diagnostic] = field(default_factory=list)
    advisories: list[Diagnostic] = field(default_factory=list)
    tables: list[str] = field(default_factory=list)

    @property
    def accepted(self) -> bool:
        return not self.violations

    @property
    def diagnostics(self) -> list[Diagnostic]:
        return [*self.violations, *self.advisories]

    def violation_tags(self) -> list[str]:
        return [d.tag for d in self.violations]

    def advisory_tags(self) -> list[str]:
        return [d.tag for d in self.advisories]

    @property
    def max_level(self) -> Level | None:
        if not self.diagnostics:
            return None
        return max(d.level for d in self.diagnostics)
