"""
Adapter around markdown-it-py that flattens its syntax tree into line spans.

The engine never inspects markdown-it tokens directly; checks and the document
model only see :class:`Block` records.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List

from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode

# Parser configuration is fixed after construction, so one instance is shared.
_PARSER = MarkdownIt("commonmark").enable("table")

CODE_BLOCK_KINDS = frozenset({"fence", "code_block"})
HTML_BLOCK_KINDS = frozenset({"html_block"})


@dataclass(frozen=True, slots=True)
class Block:
    """A block-level node with its inclusive 0-based line span."""

    kind: str
    start_line: int
    end_line: int
    tag: str = ""
    markup: str = ""
    info: str = ""
    text: str = ""
    ancestors: tuple[str, ...] = ()

    @property
    def level(self) -> int:
        """Heading level derived from the tag (h1..h6), 0 for other blocks."""
        if self.kind == "heading" and len(self.tag) == 2 and self.tag[1].isdigit():
            return int(self.tag[1])
        return 0

    @property
    def is_setext(self) -> bool:
        return self.kind == "heading" and self.markup in {"=", "-"}

    def contains(self, line: int) -> bool:
        return self.start_line <= line <= self.end_line


def parse_blocks(text: str, line_count: int) -> List[Block]:
    """Parse text and return every mapped block node in document order."""
    root = SyntaxTreeNode(_PARSER.parse(text))
    last_line = max(0, line_count - 1)
    return list(_walk(root, (), last_line))


def _walk(node: SyntaxTreeNode, ancestors: tuple[str, ...], last_line: int) -> Iterator[Block]:
    for child in node.children:
        if child.type == "inline" or child.map is None:
            continue
        start, end = child.map
        start = min(start, last_line)
        end_line = min(max(start, end - 1), last_line)
        yield Block(
            kind=child.type,
            start_line=start,
            end_line=end_line,
            tag=child.tag,
            markup=child.markup,
            info=child.info.strip() if child.type == "fence" else "",
            text=_node_text(child),
            ancestors=ancestors,
        )
        yield from _walk(child, ancestors + (child.type,), last_line)


def _node_text(node: SyntaxTreeNode) -> str:
    if node.type == "heading":
        return "".join(child.content for child in node.children).strip()
    if node.type in CODE_BLOCK_KINDS or node.type in HTML_BLOCK_KINDS:
        return node.content
    return ""
