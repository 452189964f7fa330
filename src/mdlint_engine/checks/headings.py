from __future__ import annotations

import re
from typing import Iterator

from ..blocks import Block
from ..cancellation import CancellationToken, check_cancelled
from ..document import DEFAULT_TITLE_PATTERN, Document
from ..models import RuleConfiguration, Violation
from .base import Check

_ATX_CLOSED = re.compile(r"^#{1,6}\s+.+\s+#{1,6}\s*$")
_ATX_NO_SPACE = re.compile(r"^#{1,6}[^#\s]")


def _body_headings(document: Document) -> list[Block]:
    return [
        heading
        for heading in document.headings()
        if not document.is_line_in_front_matter(heading.start_line)
    ]


class HeadingIncrementCheck(Check):
    """MD001: heading levels only increment by one at a time."""

    rule_id = "MD001"

    def analyze(
        self,
        document: Document,
        config: RuleConfiguration,
        cancellation: CancellationToken | None = None,
    ) -> Iterator[Violation]:
        pattern = config.parameters.get("front_matter_title", DEFAULT_TITLE_PATTERN)
        previous = 0
        # A front matter title stands in for the h1.
        if pattern and document.has_front_matter_title(pattern):
            previous = 1

        for heading in _body_headings(document):

            check_cancelled(cancellation)
            level = heading.level
            if previous and level > previous + 1:
                yield self.line_violation(
                    config,
                    document,
                    heading.start_line,
                    "Heading level should increment by one level at a time "
                    f"(expected h{previous + 1}, found h{level})",
                )
            previous = level


def heading_style(document: Document, heading: Block) -> str:
    if heading.is_setext:
        return "setext"
    if _ATX_CLOSED.match(document.get_line(heading.start_line)):
        return "atx_closed"
    return "atx"


class HeadingStyleCheck(Check):
    """MD003: heading style is consistent (or matches the configured style)."""

    rule_id = "MD003"

    def analyze(
        self,
        document: Document,
        config: RuleConfiguration,
        cancellation: CancellationToken | None = None,
    ) -> Iterator[Violation]:
        style = config.get_str("style", "consistent").strip().lower()
        if style == "false":
            return

        detected: str | None = None
        for heading in _body_headings(document):
            check_cancelled(cancellation)
            current = heading_style(document, heading)
            message: str | None = None

            if style == "consistent":
                if detected is None:
                    detected = current
                elif current != detected and not (
                    detected == "setext" and current == "atx" and heading.level > 2
                ):
                    message = f"Heading style should be consistent (expected {detected}, found {current})"
            elif style in {"setext_with_atx", "setext_with_atx_closed"}:
                wanted = "setext" if heading.level <= 2 else style[len("setext_with_") :]
                if current != wanted:
                    scope = "h1/h2" if heading.level <= 2 else "h3+"
                    message = f"Heading style should be {wanted} for {scope} (found {current})"
            elif current != style:
                message = f"Heading style should be {style} (found {current})"

            if message:
                yield self.line_violation(config, document, heading.start_line, message)


class NoMissingSpaceAtxCheck(Check):
    """MD018: atx headings need a space after the hashes."""

    rule_id = "MD018"

    def analyze(
        self,
        document: Document,
        config: RuleConfiguration,
        cancellation: CancellationToken | None = None,
    ) -> Iterator[Violation]:
        for number, line in document.iter_lines(cancellation=cancellation):
            if _ATX_NO_SPACE.match(line):
                yield self.line_violation(
                    config,
                    document,
                    number,
                    "No space after hash on atx style heading",
                    "Add space after hash",
                )


class SingleTitleCheck(Check):
    """MD025: only one top-level heading per document."""

    rule_id = "MD025"

    def analyze(
        self,
        document: Document,
        config: RuleConfiguration,
        cancellation: CancellationToken | None = None,
    ) -> Iterator[Violation]:
        level = config.get_int("level", 1)
        top_level = [h for h in _body_headings(document) if h.level == level]
        for heading in top_level[1:]:
            check_cancelled(cancellation)
            yield self.line_violation(
                config,
                document,
                heading.start_line,
                "Multiple top-level headings in the same document",
            )
