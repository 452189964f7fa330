from __future__ import annotations

import re
from bisect import bisect_right
from typing import Iterator, List, Tuple

from .blocks import CODE_BLOCK_KINDS, HTML_BLOCK_KINDS, Block, parse_blocks
from .cancellation import CancellationToken, check_cancelled

FRONT_MATTER_OPEN = "---"
FRONT_MATTER_CLOSE = frozenset({"---", "..."})
DEFAULT_TITLE_PATTERN = r"^\s*title\s*[:=]"

_DEFAULT_TITLE_RE = re.compile(DEFAULT_TITLE_PATTERN, re.IGNORECASE)


class Document:
    """Read-only, line-indexed view of a Markdown document."""

    __slots__ = (
        "_text",
        "_lines",
        "_line_starts",
        "_blocks",
        "_code_lines",
        "_html_lines",
        "_front_matter",
    )

    def __init__(
        self,
        text: str,
        lines: Tuple[str, ...],
        line_starts: Tuple[int, ...],
        blocks: Tuple[Block, ...],
        front_matter: Tuple[int, int] | None,
    ) -> None:
        self._text = text
        self._lines = lines
        self._line_starts = line_starts
        self._blocks = blocks
        self._front_matter = front_matter
        self._code_lines = _span_lines(blocks, CODE_BLOCK_KINDS)
        self._html_lines = _span_lines(blocks, HTML_BLOCK_KINDS)

    @property
    def text(self) -> str:
        return self._text

    @property
    def lines(self) -> Tuple[str, ...]:
        return self._lines

    @property
    def line_starts(self) -> Tuple[int, ...]:
        return self._line_starts

    @property
    def line_count(self) -> int:
        return len(self._lines)

    @property
    def blocks(self) -> Tuple[Block, ...]:
        return self._blocks

    @property
    def front_matter(self) -> Tuple[int, int] | None:
        """Inclusive (first, last) line range of the front matter, if any."""
        return self._front_matter

    @property
    def code_block_lines(self) -> frozenset[int]:
        return self._code_lines

    @property
    def html_block_lines(self) -> frozenset[int]:
        return self._html_lines

    def get_line(self, line: int) -> str:
        if 0 <= line < len(self._lines):
            return self._lines[line]
        return ""

    def is_line_in_code_block(self, line: int) -> bool:
        return line in self._code_lines

    def is_line_in_html_block(self, line: int) -> bool:
        return line in self._html_lines

    def is_line_in_front_matter(self, line: int) -> bool:
        if self._front_matter is None:
            return False
        start, end = self._front_matter
        return start <= line <= end

    def is_blank_line(self, line: int) -> bool:
        if not 0 <= line < len(self._lines):
            return True
        return not self._lines[line].strip()

    def first_non_blank_line(self) -> int | None:
        for index, line in enumerate(self._lines):
            if line.strip():
                return index
        return None

    def line_of_offset(self, offset: int) -> int:
        if offset <= 0:
            return 0
        return bisect_right(self._line_starts, offset) - 1

    def offset_to_position(self, offset: int) -> Tuple[int, int]:
        """Convert a character offset into a (line, column) pair."""
        if offset < 0:
            return 0, 0
        line = self.line_of_offset(offset)
        return line, offset - self._line_starts[line]

    def position_to_offset(self, line: int, column: int) -> int:
        if not 0 <= line < len(self._line_starts):
            return 0
        return self._line_starts[line] + column

    def ends_with_newline(self) -> bool:
        return self._text.endswith("\n")

    def ends_with_multiple_newlines(self) -> bool:
        if len(self._text) < 2:
            return False
        trailing = self._text.rstrip("\r\n")
        return self._text[len(trailing) :].count("\n") > 1

    def iter_lines(
        self,
        skip_code_blocks: bool = True,
        skip_front_matter: bool = True,
        cancellation: CancellationToken | None = None,
    ) -> Iterator[Tuple[int, str]]:
        """Yield (line_number, text) pairs, optionally skipping code and front matter.

        When ``cancellation`` is given it is checked before every line, so a
        check that never yields still stops promptly.
        """
        for index, line in enumerate(self._lines):
            check_cancelled(cancellation)
            if skip_front_matter and self.is_line_in_front_matter(index):
                continue
            if skip_code_blocks and index in self._code_lines:
                continue
            yield index, line

    def blocks_of(self, kind: str) -> List[Block]:
        return [block for block in self._blocks if block.kind == kind]

    def headings(self) -> List[Block]:
        return self.blocks_of("heading")

    def fenced_code_blocks(self) -> List[Block]:
        return self.blocks_of("fence")

    def code_block_language(self, line: int) -> str | None:
        """Lower-cased info string of the fenced block holding `line`, if any."""
        for block in self._blocks:
            if block.kind == "fence" and block.contains(line):
                return block.info.split(maxsplit=1)[0].lower() if block.info else ""
        return None

    def has_front_matter_title(self, pattern: str | None = None) -> bool:
        if self._front_matter is None:
            return False
        if not pattern or pattern == DEFAULT_TITLE_PATTERN:
            regex = _DEFAULT_TITLE_RE
        else:
            regex = re.compile(pattern, re.IGNORECASE)
        start, end = self._front_matter
        return any(regex.search(self._lines[i]) for i in range(start + 1, end))


def build_document(text: str | None) -> Document:
    """Build the immutable document model for `text`."""
    source = text or ""
    lines, line_starts = split_lines(source)
    front_matter = find_front_matter(lines)
    blocks = parse_blocks(_blank_front_matter(lines, front_matter), len(lines))
    return Document(source, lines, line_starts, tuple(blocks), front_matter)


def split_lines(text: str) -> Tuple[Tuple[str, ...], Tuple[int, ...]]:
    """Split on line feeds, dropping one trailing carriage return per line."""
    if not text:
        return ("",), (0,)
    lines: List[str] = []
    starts: List[int] = [0]
    start = 0
    while True:
        newline = text.find("\n", start)
        end = len(text) if newline < 0 else newline
        line = text[start:end]
        if line.endswith("\r"):
            line = line[:-1]
        lines.append(line)
        if newline < 0:
            break
        start = newline + 1
        starts.append(start)
    return tuple(lines), tuple(starts)


def find_front_matter(lines: Tuple[str, ...]) -> Tuple[int, int] | None:
    if not lines or lines[0].strip() != FRONT_MATTER_OPEN:
        return None
    for index in range(1, len(lines)):
        if lines[index].strip() in FRONT_MATTER_CLOSE:
            return 0, index
    return None


def _blank_front_matter(
    lines: Tuple[str, ...], front_matter: Tuple[int, int] | None
) -> str:
    """Parser input with the same line breaks as ``lines``.

    markdown-it treats a lone carriage return as a line break, so interior ones
    become spaces to keep block line numbers aligned with ``lines``.
    """
    parsed = tuple(line.replace("\r", " ") for line in lines)
    if front_matter is None:
        return "\n".join(parsed)
    _, end = front_matter
    return "\n".join(("",) * (end + 1) + parsed[end + 1 :])


def _span_lines(blocks: Tuple[Block, ...], kinds: frozenset[str]) -> frozenset[int]:
    marked: set[int] = set()
    for block in blocks:
        if block.kind in kinds:
            marked.update(range(block.start_line, block.end_line + 1))
    return frozenset(marked)
