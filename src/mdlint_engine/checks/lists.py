from __future__ import annotations

from typing import Iterator

from ..blocks import Block
from ..cancellation import CancellationToken, check_cancelled
from ..document import Document
from ..models import RuleConfiguration, Violation
from .base import Check

_BULLET_CHAIN = frozenset({"bullet_list", "list_item"})


def leading_indent(line: str) -> int:
    """Indent width of ``line``, counting a tab as four columns."""
    width = 0
    for char in line:
        if char == " ":
            width += 1
        elif char == "\t":
            width += 4
        else:
            break
    return width


def _bullet_depth(item: Block) -> int | None:
    """Nesting depth of a list item whose ancestors are all bullet lists, else None."""
    ancestors = item.ancestors
    if not ancestors or ancestors[0] != "bullet_list":
        return None
    if any(kind not in _BULLET_CHAIN for kind in ancestors):
        return None
    return ancestors.count("bullet_list") - 1


class UlIndentCheck(Check):
    """MD007: unordered list items are indented by a fixed step."""

    rule_id = "MD007"

    def analyze(
        self,
        document: Document,
        config: RuleConfiguration,
        cancellation: CancellationToken | None = None,
    ) -> Iterator[Violation]:
        if "indent" in config.parameters or config.value:
            indent = config.get_int("indent", 2)
        elif config.indent_size is not None:
            indent = config.indent_size
        else:
            indent = 2
        start_indented = config.get_bool("start_indented", False)
        start_indent = config.get_int("start_indent", indent) if start_indented else 0

        for item in document.blocks_of("list_item"):

            check_cancelled(cancellation)
            depth = _bullet_depth(item)
            if depth is None:
                continue
            expected = start_indent + depth * indent
            line = document.get_line(item.start_line)
            actual = leading_indent(line)
            if actual != expected:
                yield self.line_violation(
                    config,
                    document,
                    item.start_line,
                    f"Unordered list indentation should be {expected} spaces (found {actual})",
                )
