from __future__ import annotations

from pathlib import Path
from typing import Iterable, Mapping

from mdlint_engine.checks import Check
from mdlint_engine.config import LintOptions
from mdlint_engine.engine import LintEngine
from mdlint_engine.models import RuleDescriptor, Severity, Violation
from mdlint_engine.settings import ConfigurationResolver, MappingSettingsSource


class FakeClock:
    """Manually advanced replacement for time.monotonic."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_engine(
    properties: Mapping[str, str] | None = None,
    options: LintOptions | None = None,
    checks: Iterable[Check] | None = None,
    max_workers: int | None = None,
) -> LintEngine:
    """Engine whose per-file settings come from an in-memory property mapping."""
    options = options or LintOptions()
    resolver = ConfigurationResolver(
        source=MappingSettingsSource(properties or {}), options=options
    )
    return LintEngine(
        checks=checks, resolver=resolver, options=options, max_workers=max_workers
    )


def lint(text: str, rule_id: str | None = None, **kwargs) -> list[Violation]:
    violations = make_engine(**kwargs).lint_text(text, file_path="doc.md")
    if rule_id is None:
        return violations
    return [v for v in violations if v.rule_id == rule_id]


def make_descriptor(
    rule_id: str = "XX001",
    name: str = "custom-rule",
    severity: Severity = Severity.WARNING,
    enabled_by_default: bool = True,
) -> RuleDescriptor:
    return RuleDescriptor(
        id=rule_id,
        name=name,
        aliases=(name.replace("-", "_"),),
        description="Custom rule used in tests",
        default_severity=severity,
        enabled_by_default=enabled_by_default,
    )


def write_markdown(directory: Path, name: str, text: str) -> Path:
    """Write a Markdown file next to a root .editorconfig that isolates the test."""
    editorconfig = directory / ".editorconfig"
    if not editorconfig.exists():
        editorconfig.write_text("root = true\n", encoding="utf-8")
    path = directory / name
    path.write_text(text, encoding="utf-8")
    return path
