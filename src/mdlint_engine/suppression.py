"""
Inline ``<!-- markdownlint-... -->`` directive handling.

File-level directives (``disable-file`` and ``configure-file``) are resolved
first against the whole document; scoped directives are then applied line by
line in document order, with ``capture``/``restore`` backed by a snapshot stack.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, FrozenSet, List, Mapping, Sequence, Set, Tuple

from .catalog import normalize_rule_key
from .models import RuleDescriptor

DIRECTIVE_PATTERN = re.compile(
    r"<!--\s*markdownlint-(disable|enable|disable-line|disable-next-line|capture|restore"
    r"|disable-file|configure-file)(?:\s+([^>]+?))?\s*-->",
    re.IGNORECASE,
)
RULE_TOKEN_PATTERN = re.compile(r"(MD\d{3}|[a-zA-Z][a-zA-Z0-9_-]*)", re.IGNORECASE)

FILE_LEVEL_DIRECTIVES = frozenset({"disable-file", "configure-file"})


@dataclass(frozen=True, slots=True)
class Directive:
    """The first markdownlint directive found on a line."""

    line: int
    name: str
    rules: FrozenSet[str] = frozenset()


@dataclass(frozen=True, slots=True)
class SuppressionMap:
    """Per-line suppression state for a single document."""

    line_count: int
    all_suppressed_lines: FrozenSet[int] = frozenset()
    rules_by_line: Mapping[int, FrozenSet[str]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "rules_by_line", MappingProxyType(dict(self.rules_by_line)))

    @property
    def has_any_suppressions(self) -> bool:
        return bool(self.all_suppressed_lines) or bool(self.rules_by_line)

    def all_suppressed(self, line: int) -> bool:
        return line in self.all_suppressed_lines

    def suppressed_rules(self, line: int) -> FrozenSet[str]:
        return self.rules_by_line.get(line, frozenset())

    def is_suppressed(self, line: int, *identifiers: str) -> bool:
        """Return True when every rule, or any of ``identifiers``, is silenced on ``line``."""
        if line in self.all_suppressed_lines:
            return True
        rules = self.rules_by_line.get(line)
        if not rules:
            return False
        return any(normalize_rule_key(identifier) in rules for identifier in identifiers if identifier)

    def is_rule_suppressed(self, line: int, descriptor: RuleDescriptor) -> bool:
        return self.is_suppressed(line, *descriptor.identifiers)


EMPTY_SUPPRESSIONS = SuppressionMap(line_count=0)


def parse_directive(line_number: int, line: str) -> Directive | None:
    match = DIRECTIVE_PATTERN.search(line)
    if match is None:
        return None
    return Directive(
        line=line_number,
        name=match.group(1).lower(),
        rules=parse_rule_list(match.group(2)),
    )


def parse_rule_list(text: str | None) -> FrozenSet[str]:
    if not text or not text.strip():
        return frozenset()
    return frozenset(normalize_rule_key(token) for token in RULE_TOKEN_PATTERN.findall(text))


class _MapBuilder:
    def __init__(self, line_count: int) -> None:
        self.line_count = line_count
        self.all_lines: Set[int] = set()
        self.rules: Dict[int, Set[str]] = {}

    def suppress_all(self, line: int) -> None:
        if 0 <= line < self.line_count:
            self.all_lines.add(line)

    def suppress_rules(self, line: int, rules: Set[str] | FrozenSet[str]) -> None:
        if not rules or not 0 <= line < self.line_count:
            return
        self.rules.setdefault(line, set()).update(rules)

    def apply(self, line: int, disable_all: bool, disabled: Set[str]) -> None:
        if disable_all:
            self.suppress_all(line)
        else:
            self.suppress_rules(line, disabled)

    def build(self) -> SuppressionMap:
        return SuppressionMap(
            line_count=self.line_count,
            all_suppressed_lines=frozenset(self.all_lines),
            rules_by_line={line: frozenset(rules) for line, rules in self.rules.items()},
        )


def parse_suppressions(lines: Sequence[str]) -> SuppressionMap:
    """Compute the suppression map for ``lines``."""
    builder = _MapBuilder(len(lines))
    directives: List[Directive | None] = [
        parse_directive(number, line) for number, line in enumerate(lines)
    ]

    file_rules: Set[str] = set()
    for directive in directives:
        if directive is None or directive.name not in FILE_LEVEL_DIRECTIVES:
            continue
        if directive.name == "disable-file" and not directive.rules:
            for line in range(len(lines)):
                builder.suppress_all(line)
            return builder.build()
        file_rules.update(directive.rules)

    if file_rules:
        for line in range(len(lines)):
            builder.suppress_rules(line, file_rules)

    _apply_scoped(directives, builder)
    return builder.build()


def _apply_scoped(directives: Sequence[Directive | None], builder: _MapBuilder) -> None:
    disable_all = False
    disabled: Set[str] = set()
    stack: List[Tuple[bool, Set[str]]] = []

    for line, directive in enumerate(directives):
        if directive is None:
            builder.apply(line, disable_all, disabled)
            continue

        name, rules = directive.name, directive.rules
        if name == "disable":
            if rules:
                disabled.update(rules)
            else:
                disable_all = True
        elif name == "enable":
            if rules:
                disabled.difference_update(rules)
            else:
                disable_all = False
                disabled.clear()
        elif name == "disable-line":
            _suppress_one(builder, line, rules)
        elif name == "disable-next-line":
            _suppress_one(builder, line + 1, rules)
        elif name == "capture":
            stack.append((disable_all, set(disabled)))
        elif name == "restore":
            if stack:
                disable_all, disabled = stack.pop()
            else:
                disable_all, disabled = False, set()

        builder.apply(line, disable_all, disabled)


def _suppress_one(builder: _MapBuilder, line: int, rules: FrozenSet[str]) -> None:
    if rules:
        builder.suppress_rules(line, rules)
    else:
        builder.suppress_all(line)
