from __future__ import annotations

from typing import Iterator

from ..cancellation import CancellationToken, check_cancelled
from ..document import Document
from ..models import RuleConfiguration, Violation
from .base import Check


class FencedCodeLanguageCheck(Check):
    """MD040: fenced code blocks declare a language."""

    rule_id = "MD040"

    def analyze(
        self,
        document: Document,
        config: RuleConfiguration,
        cancellation: CancellationToken | None = None,
    ) -> Iterator[Violation]:
        allowed = {
            part.strip().lower()
            for part in config.parameters.get("allowed_languages", "").split(",")
            if part.strip()
        }
        for block in document.fenced_code_blocks():
            check_cancelled(cancellation)
            if not block.info:
                yield self.line_violation(
                    config,
                    document,
                    block.start_line,
                    "Fenced code blocks should have a language specified",
                    "Add language identifier",
                )
                continue
            language = block.info.split(maxsplit=1)[0]
            if allowed and language.lower() not in allowed:
                yield self.line_violation(
                    config,
                    document,
                    block.start_line,
                    f"Language '{language}' is not in the allowed list",
                )


class FirstLineHeadingCheck(Check):
    """MD041: the first content line is a top-level heading."""

    rule_id = "MD041"

    def analyze(
        self,
        document: Document,
        config: RuleConfiguration,
        cancellation: CancellationToken | None = None,
    ) -> Iterator[Violation]:
        level = config.get_int("level", 1)
        title_key = config.parameters.get("front_matter_title", "title")

        if document.first_non_blank_line() is None:
            return

        start = 0
        if document.front_matter is not None:
            first, last = document.front_matter
            if title_key and any(
                document.get_line(i).lstrip().startswith(f"{title_key}:")
                for i in range(first + 1, last)
            ):
                return
            start = last + 1

        while start < document.line_count and document.is_blank_line(start):

            check_cancelled(cancellation)
            start += 1
        if start >= document.line_count:
            return

        heading = next((h for h in document.headings() if h.start_line >= start), None)
        if heading is None or heading.start_line != start:
            yield self.line_violation(
                config,
                document,
                start,
                f"First line in a file should be a top-level heading (h{level})",
                "Add heading at start of document",
            )
        elif heading.level != level:
            yield self.line_violation(
                config,
                document,
                start,
                f"First heading should be level {level} (found h{heading.level})",
            )


class SingleTrailingNewlineCheck(Check):
    """MD047: files end with exactly one newline."""

    rule_id = "MD047"

    def analyze(
        self,
        document: Document,
        config: RuleConfiguration,
        cancellation: CancellationToken | None = None,
    ) -> Iterator[Violation]:
        if not document.text:
            return
        last = document.line_count - 1
        if not document.ends_with_newline():
            yield self.line_violation(
                config,
                document,
                last,
                "Files should end with a single newline character",
                "Add newline at end of file",
            )
        elif document.ends_with_multiple_newlines():
            yield self.line_violation(
                config,
                document,
                last,
                "Files should end with a single newline character (multiple found)",
                "Remove extra newlines at end of file",
            )
