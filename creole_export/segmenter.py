"""Split Creole markup into logical lines.

Creole wraps paragraphs across "soft" line breaks: a line that does not start
a block construct continues the line above it. Merging those lines up front
lets the block parser work one logical line at a time.
"""

from __future__ import annotations

from .constants import (
    BLOCK_MARKERS,
    CODE_CLOSE,
    CODE_KEYWORD,
    CODE_OPEN,
    FENCE_CLOSE,
    FENCE_OPEN,
    HEADER,
    TABLE_CELL,
)
from .models import BlockMode, LogicalLine


def split_physical_lines(markup: str) -> list[str]:
    """Split on ``\\n`` and drop one trailing ``\\r`` from each line."""
    return [line[:-1] if line.endswith("\r") else line for line in markup.split("\n")]


def is_fence_opener(line: str) -> bool:
    return line.lstrip(" ") == FENCE_OPEN


def is_code_opener(line: str) -> bool:
    # startswith keeps short lines such as "[[[" safe
    return line.lstrip(" ").startswith(CODE_OPEN + CODE_KEYWORD)


def closes_block(mode: BlockMode, line: str) -> bool:
    """Return True when `line` ends the fenced block described by `mode`."""
    stripped = line.lstrip(" ")
    if mode is BlockMode.IN_PREFORMATTED:
        return stripped.startswith(FENCE_CLOSE)
    if mode is BlockMode.IN_CODE:
        return stripped.startswith(CODE_CLOSE)
    return False


def starts_block(line: str) -> bool:
    """Return True when `line` is blank or opens a block construct."""
    stripped = line.strip()
    return not stripped or stripped.startswith(BLOCK_MARKERS)


def _absorbs_continuations(line: str) -> bool:
    stripped = line.strip()
    return bool(stripped) and not stripped.startswith((HEADER, TABLE_CELL))


def segment_lines(markup: str) -> list[LogicalLine]:
    """Merge soft line breaks and pair each logical line with its source index.

    Lines inside ``{{{`` and ``[[[code`` blocks are kept one per line, as are
    blank lines, headers and table rows.

    Args:
        markup: Complete Creole document.

    Returns:
        list[LogicalLine]: Logical lines in document order. Never empty; the
            last entry always refers to the last physical line.

    Examples:
        segment_lines("one\\ntwo\\n\\n* item")
        # [LogicalLine("one two", 1), LogicalLine("", 2), LogicalLine("* item", 3)]
    """
    physical = split_physical_lines(markup)
    logical: list[LogicalLine] = []
    mode = BlockMode.NORMAL
    index = 0

    while index < len(physical):
        line = physical[index]

        if mode is not BlockMode.NORMAL:
            if closes_block(mode, line):
                mode = BlockMode.NORMAL
        elif is_fence_opener(line):
            mode = BlockMode.IN_PREFORMATTED
        elif is_code_opener(line):
            mode = BlockMode.IN_CODE
        elif _absorbs_continuations(line):
            while index + 1 < len(physical) and not starts_block(physical[index + 1]):
                index += 1
                line = f"{line} {physical[index].strip()}"

        logical.append(LogicalLine(line, index))
        index += 1

    return logical
