"""Policy registry: allowlist, forbidden keywords, injection heuristics, row cap.

A PolicyConfig is built once (from defaults or a TOML file) and passed
explicitly into every gateway call. It is frozen; there is no mutation API.
"""

from __future__ import annotations

import os
import re
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

_POLICY_FILE = Path.home() / ".sqlgate" / "policy.toml"
POLICY_ENV_VAR = "SQLGATE_POLICY"

DEFAULT_ALLOWED_TABLES = frozenset({"sessions", "events"})

DEFAULT_FORBIDDEN_KEYWORDS = (
    "INSERT",
    "UPDATE",
    "DELETE",
    "DROP",
    "CREATE",
    "ALTER",
    "TRUNCATE",
    "EXEC",
    "EXECUTE",
    "GRANT",
    "REVOKE",
    "COMMIT",
    "ROLLBACK",
    "SAVEPOINT",
    "MERGE",
    "COPY",
    "VACUUM",
    "ANALYZE",
    "EXPLAIN",
)

DEFAULT_MAX_ROW_LIMIT = 1000
DEFAULT_DIALECT = "postgres"

_KEYWORD_RE = re.compile(r"^[A-Za-z_]+(?: [A-Za-z_]+)*$")


class PolicyConfigError(ValueError):
    """Raised for invalid policy values or an unreadable policy file."""


@dataclass(frozen=True)
class InjectionPattern:
    id: str
    pattern: re.Pattern[str] = field(compare=False)

    @classmethod
    def compile(cls, id: str, regex: str, *, ignore_case: bool = True) -> InjectionPattern:
        flags = re.IGNORECASE if ignore_case else 0
        try:
            return cls(id=id, pattern=re.compile(regex, flags))
        except re.error as e:
            raise PolicyConfigError(f"injection pattern '{id}' is not a valid regex: {e}") from e

    def search(self, text: str) -> bool:
        return self.pattern.search(text) is not None


DEFAULT_INJECTION_PATTERNS = (
    InjectionPattern.compile("terminator_drop", r";\s*DROP\b"),
    InjectionPattern.compile("terminator_delete", r";\s*DELETE\b"),
    InjectionPattern.compile("terminator_insert", r";\s*INSERT\b"),
    InjectionPattern.compile("line_comment", r"--"),
    InjectionPattern.compile("block_comment", r"/\*"),
    InjectionPattern.compile("xp_cmdshell", r"xp_cmdshell"),
    InjectionPattern.compile("exec_call", r"\bexec\s*\("),
    # Quoting the normalizer does not model: E'\'' escapes and $tag$ bodies.
    InjectionPattern.compile("backslash_quote", r"\\'"),
    InjectionPattern.compile("dollar_quote", r"\$\w*\$"),
)


@dataclass(frozen=True)
class PolicyConfig:
    allowed_tables: frozenset[str] = DEFAULT_ALLOWED_TABLES
    forbidden_keywords: tuple[str, ...] = DEFAULT_FORBIDDEN_KEYWORDS
    injection_patterns: tuple[InjectionPattern, ...] = DEFAULT_INJECTION_PATTERNS
    max_row_limit: int = DEFAULT_MAX_ROW_LIMIT
    dialect: str | None = DEFAULT_DIALECT
    require_parse: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.max_row_limit, bool) or not isinstance(self.max_row_limit, int):
            raise PolicyConfigError("max_row_limit must be an integer")
        if self.max_row_limit <= 0:
            raise PolicyConfigError(f"max_row_limit must be > 0, got {self.max_row_limit}")

        tables = frozenset(t.strip().lower() for t in self.allowed_tables if t.strip())
        if not tables:
            raise PolicyConfigError("allowed_tables must name at least one table")

        keywords: list[str] = []
        for kw in self.forbidden_keywords:
            kw = " ".join(kw.split()).upper()
            if not _KEYWORD_RE.match(kw):
                raise PolicyConfigError(f"forbidden keyword must be a plain word, got {kw!r}")
            if kw not in keywords:
                keywords.append(kw)

        # Frozen dataclass: canonicalize in place once, at construction.
        object.__setattr__(self, "allowed_tables", tables)
        object.__setattr__(self, "forbidden_keywords", tuple(keywords))
        object.__setattr__(self, "injection_patterns", tuple(self.injection_patterns))

    def allows_table(self, name: str) -> bool:
        return name.lower() in self.allowed_tables

    def to_dict(self) -> dict:
        return {
            "allowed_tables": sorted(self.allowed_tables),
            "forbidden_keywords": list(self.forbidden_keywords),
            "injection_patterns": [
                {"id": p.id, "regex": p.pattern.pattern} for p in self.injection_patterns
            ],
            "max_row_limit": self.max_row_limit,
            "dialect": self.dialect,
            "require_parse": self.require_parse,
        }


DEFAULT_POLICY = PolicyConfig()


def policy_from_dict(data: dict) -> PolicyConfig:
    """Build a PolicyConfig from the ``[policy]`` table of a policy file.

    Missing keys fall back to the built-in defaults. A present
    ``injection_patterns`` list replaces the default pattern set.
    """
    kwargs: dict[str, object] = {}

    if "allowed_tables" in data:
        kwargs["allowed_tables"] = frozenset(_str_list(data, "allowed_tables"))
    if "forbidden_keywords" in data:
        kwargs["forbidden_keywords"] = tuple(_str_list(data, "forbidden_keywords"))
    if "injection_patterns" in data:
        entries = data["injection_patterns"]
        if not isinstance(entries, list):
            raise PolicyConfigError("injection_patterns must be an array of tables")
        patterns: list[InjectionPattern] = []
        for entry in entries:
            if not isinstance(entry, dict) or "id" not in entry or "regex" not in entry:
                raise PolicyConfigError("each injection pattern needs 'id' and 'regex'")
            patterns.append(
                InjectionPattern.compile(
                    str(entry["id"]),
                    str(entry["regex"]),
                    ignore_case=bool(entry.get("ignore_case", True)),
                )
            )
        kwargs["injection_patterns"] = tuple(patterns)
    if "max_row_limit" in data:
        kwargs["max_row_limit"] = data["max_row_limit"]
    if "dialect" in data:
        dialect = data["dialect"]
        kwargs["dialect"] = str(dialect) if dialect else None
    if "require_parse" in data:
        kwargs["require_parse"] = bool(data["require_parse"])

    unknown = set(data) - {
        "allowed_tables",
        "forbidden_keywords",
        "injection_patterns",
        "max_row_limit",
        "dialect",
        "require_parse",
    }
    if unknown:
        raise PolicyConfigError(f"unknown policy keys: {', '.join(sorted(unknown))}")

    return PolicyConfig(**kwargs)


def _str_list(data: dict, key: str) -> list[str]:
    value = data[key]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise PolicyConfigError(f"{key} must be an array of strings")
    return value


def resolve_policy_path(path: Path | None = None) -> Path | None:
    """Pick the policy file: explicit path, then $SQLGATE_POLICY, then ~/.sqlgate."""
    if path is not None:
        return path
    env_path = os.environ.get(POLICY_ENV_VAR)
    if env_path:
        return Path(env_path)
    if _POLICY_FILE.exists():
        return _POLICY_FILE
    return None


def load_policy(path: Path | None = None) -> PolicyConfig:
    """Load the effective policy. Built-in defaults apply when no file is found."""
    resolved = resolve_policy_path(path)
    if resolved is None:
        return DEFAULT_POLICY

    try:
        data = tomllib.loads(resolved.read_text())
    except OSError as e:
        raise PolicyConfigError(f"cannot read policy file {resolved}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise PolicyConfigError(f"invalid TOML in policy file {resolved}: {e}") from e

    section = data.get("policy", {})
    if not isinstance(section, dict):
        raise PolicyConfigError(f"{resolved}: [policy] must be a table")
    return policy_from_dict(section)
