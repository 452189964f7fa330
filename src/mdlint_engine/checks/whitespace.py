from __future__ import annotations

import re
from typing import Iterator

from ..cancellation import CancellationToken, check_cancelled
from ..document import Document
from ..models import RuleConfiguration, Violation
from .base import Check

_LINK_REFERENCE_DEFINITION = re.compile(r"^\s*\[[^\]]+\]:\s*\S+")
_STANDALONE_LINK = re.compile(r"^\s*(\*{0,2}|_{0,2})!?\[[^\]]*\]\([^\)]+\)(\*{0,2}|_{0,2})\s*$")


def _split_list(raw: str) -> set[str]:
    return {part.strip().lower() for part in re.split(r"[,\s]+", raw) if part.strip()}


class NoTrailingSpacesCheck(Check):
    """MD009: no trailing spaces, except an exact hard-break run."""

    rule_id = "MD009"

    def analyze(
        self,
        document: Document,
        config: RuleConfiguration,
        cancellation: CancellationToken | None = None,
    ) -> Iterator[Violation]:
        br_spaces = config.get_int("br_spaces", 2)
        code_blocks = config.get_bool("code_blocks", False)
        list_item_empty_lines = config.get_bool("list_item_empty_lines", False)
        strict = config.get_bool("strict", False)
        # A br_spaces below 2 cannot produce a hard break.
        allowed = br_spaces if br_spaces >= 2 else 0

        for number, line in document.iter_lines(
            skip_code_blocks=not code_blocks, cancellation=cancellation
        ):
            trailing = len(line) - len(line.rstrip(" "))
            if not trailing:
                continue
            if not strict and allowed and trailing == allowed:
                continue
            if list_item_empty_lines and not line.strip():
                continue
            yield self.violation(
                config,
                number,
                len(line) - trailing,
                len(line),
                f"Trailing spaces ({trailing} found)",
                "Remove trailing spaces",
            )


class NoHardTabsCheck(Check):
    """MD010: no hard tab characters."""

    rule_id = "MD010"

    def analyze(
        self,
        document: Document,
        config: RuleConfiguration,
        cancellation: CancellationToken | None = None,
    ) -> Iterator[Violation]:
        code_blocks = config.get_bool("code_blocks", True)
        ignored = _split_list(config.parameters.get("ignore_code_languages", ""))
        spaces_per_tab = config.get_int("spaces_per_tab", 1)

        for number, line in document.iter_lines(
            skip_code_blocks=False, cancellation=cancellation
        ):
            if document.is_line_in_code_block(number):
                if not code_blocks:
                    continue
                language = document.code_block_language(number)
                if language and language in ignored:
                    continue
            column = line.find("\t")
            while column >= 0:
                yield self.violation(
                    config,
                    number,
                    column,
                    column + 1,
                    "Hard tabs",
                    f"Replace tab with {spaces_per_tab} spaces",
                )
                column = line.find("\t", column + 1)


class NoMultipleBlanksCheck(Check):
    """MD012: no runs of blank lines longer than ``maximum``."""

    rule_id = "MD012"

    def analyze(
        self,
        document: Document,
        config: RuleConfiguration,
        cancellation: CancellationToken | None = None,
    ) -> Iterator[Violation]:
        maximum = config.get_int("maximum", 1)
        run = 0
        for number in range(document.line_count):
            check_cancelled(cancellation)
            if document.is_line_in_code_block(number) or document.is_line_in_front_matter(number):
                run = 0
                continue
            if not document.is_blank_line(number):
                run = 0
                continue
            run += 1
            if run > maximum:
                yield self.line_violation(
                    config,
                    document,
                    number,
                    f"Multiple consecutive blank lines ({run} found, maximum {maximum} allowed)",
                    "Remove extra blank lines",
                )


class LineLengthCheck(Check):
    """MD013: line length limit.

    Without ``strict``, a long line is only reported when it has whitespace
    past the limit, so unbreakable tokens such as URLs are tolerated.
    """

    rule_id = "MD013"

    def analyze(
        self,
        document: Document,
        config: RuleConfiguration,
        cancellation: CancellationToken | None = None,
    ) -> Iterator[Violation]:
        line_length = config.get_int("line_length", 80)
        heading_line_length = _param_int(config, "heading_line_length", line_length)
        code_block_line_length = _param_int(config, "code_block_line_length", line_length)
        code_blocks = config.get_bool("code_blocks", True)
        headings = config.get_bool("headings", True)
        tables = config.get_bool("tables", True)
        strict = config.get_bool("strict", False)

        for number, line in document.iter_lines(
            skip_code_blocks=False, cancellation=cancellation
        ):
            if _LINK_REFERENCE_DEFINITION.match(line) or _STANDALONE_LINK.match(line):
                continue
            stripped = line.lstrip()
            limit = line_length
            if document.is_line_in_code_block(number):
                if not code_blocks:
                    continue
                limit = code_block_line_length
            elif stripped.startswith("#"):
                if not headings:
                    continue
                limit = heading_line_length
            if not tables and stripped.startswith("|"):
                continue
            if len(line) <= limit:
                continue
            if not strict and not any(char.isspace() for char in line[limit:]):
                continue
            yield self.violation(
                config,
                number,
                limit,
                len(line),
                f"Line length is {len(line)} (maximum {limit})",
            )


def _param_int(config: RuleConfiguration, name: str, default: int) -> int:
    raw = config.parameters.get(name)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default
