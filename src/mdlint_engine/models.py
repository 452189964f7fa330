from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from types import MappingProxyType
from typing import Any, Mapping

DOCS_URL_TEMPLATE = "https://github.com/DavidAnson/markdownlint/blob/main/doc/{rule}.md"


class Severity(IntEnum):
    """Diagnostic severity; ordering is meaningful (NONE and SILENT never report)."""

    NONE = 0
    SILENT = 1
    SUGGESTION = 2
    WARNING = 3
    ERROR = 4

    @property
    def label(self) -> str:
        return self.name.lower()


@dataclass(frozen=True, slots=True)
class RuleDescriptor:
    """Static description of a lint rule as registered in the catalog."""

    id: str
    name: str
    aliases: tuple[str, ...]
    description: str
    default_severity: Severity = Severity.WARNING
    enabled_by_default: bool = True

    @property
    def documentation_url(self) -> str:
        return DOCS_URL_TEMPLATE.format(rule=self.id.lower())

    @property
    def identifiers(self) -> tuple[str, ...]:
        """Id, name and aliases in lookup order."""
        return (self.id, self.name, *self.aliases)


def _freeze(parameters: Mapping[str, str] | None) -> Mapping[str, str]:
    return MappingProxyType(dict(parameters or {}))


@dataclass(frozen=True, slots=True)
class RuleConfiguration:
    """Effective configuration for one rule during one analysis run."""

    enabled: bool = True
    severity: Severity = Severity.WARNING
    value: str | None = None
    parameters: Mapping[str, str] = field(default_factory=dict)
    indent_size: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "parameters", _freeze(self.parameters))

    @property
    def is_active(self) -> bool:
        return self.enabled and self.severity != Severity.NONE

    def get_int(self, name: str, default: int) -> int:
        """Return a named integer parameter, falling back to the residual value."""
        for candidate in (self.parameters.get(name), self.value):
            if candidate is None:
                continue
            try:
                return int(candidate.strip())
            except ValueError:
                continue
        return default

    def get_str(self, name: str, default: str) -> str:
        if name in self.parameters:
            return self.parameters[name]
        if self.value:
            return self.value
        return default

    def get_bool(self, name: str, default: bool) -> bool:
        raw = self.parameters.get(name)
        if raw is None:
            return default
        return raw.strip().lower() in {"true", "1", "yes", "on"}


@dataclass(frozen=True, slots=True)
class Violation:
    """A single finding reported by a check."""

    rule_id: str
    line: int
    column_start: int
    column_end: int
    message: str
    severity: Severity = Severity.WARNING
    fix_hint: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "rule_id": self.rule_id,
            "line": self.line,
            "column_start": self.column_start,
            "column_end": self.column_end,
            "message": self.message,
            "severity": self.severity.label,
            "fix_hint": self.fix_hint,
        }
