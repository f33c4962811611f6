"""Escape-aware token search over Creole fragments.

Links, images, fenced spans and code spans may contain markup of their own,
so a search for an inline token has to step over them. `iter_regions` splits
a fragment into those bracketed regions and the plain text between them;
`find_token` only accepts matches inside plain text.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum, auto

from .constants import (
    CODE_CLOSE,
    CODE_OPEN,
    ESCAPE,
    FENCE_CLOSE,
    FENCE_OPEN,
    IMAGE_CLOSE,
    IMAGE_OPEN,
    LINK_CLOSE,
    LINK_OPEN,
)


class RegionKind(Enum):
    """Kinds of spans produced by `iter_regions`."""

    TEXT = auto()
    FENCE = auto()
    CODE = auto()
    LINK = auto()
    IMAGE = auto()


@dataclass(frozen=True)
class Region:
    """A half-open ``[start, end)`` span of a fragment."""

    kind: RegionKind
    start: int
    end: int


# Tried in this order at every position; a region whose closer is missing
# falls through to the next candidate.
_BRACKETED = (
    (RegionKind.FENCE, FENCE_OPEN, FENCE_CLOSE),
    (RegionKind.CODE, CODE_OPEN, CODE_CLOSE),
    (RegionKind.LINK, LINK_OPEN, LINK_CLOSE),
    (RegionKind.IMAGE, IMAGE_OPEN, IMAGE_CLOSE),
)


def is_escaped(text: str, pos: int) -> bool:
    """Determine whether the token at `pos` is escaped by a tilde.

    A single tilde right before `pos` escapes the token; a doubled tilde is an
    escaped tilde and leaves the token live.

    Args:
        text: Text containing the token.
        pos: Zero-based index of the token.

    Returns:
        bool: True when the token is escaped, otherwise False.

    Examples:
        is_escaped("~**", 1)  # True
        is_escaped("~~**", 2)  # False
    """
    if pos < 1 or text[pos - 1] != ESCAPE:
        return False
    return not (pos >= 2 and text[pos - 2] == ESCAPE)


def _skippable(token: str) -> list[tuple[RegionKind, str, str]]:
    # A search for a region's own marker must not step over that region.
    return [
        (kind, opener, closer)
        for kind, opener, closer in _BRACKETED
        if token not in (opener, closer)
    ]


def _region_at(
    text: str, pos: int, candidates: list[tuple[RegionKind, str, str]]
) -> tuple[RegionKind, int] | None:
    for kind, opener, closer in candidates:
        if not text.startswith(opener, pos):
            continue
        close_at = text.find(closer, pos)
        if close_at > 0:
            return kind, close_at + len(closer)
    return None


def iter_regions(text: str, token: str) -> Iterator[Region]:
    """Split `text` into bracketed regions and plain text as seen by a `token` search.

    Region openers are only recognised at positions where `token` could still
    fit, and a region is only formed when its closer exists somewhere after
    the opener.

    Args:
        text: Fragment to split.
        token: Token the caller is about to search for.

    Yields:
        Region: Consecutive, non-overlapping regions covering `text`.

    Examples:
        list(iter_regions("a [[b]] c", "**"))
        # [Region(TEXT, 0, 2), Region(LINK, 2, 7), Region(TEXT, 7, 9)]
    """
    candidates = _skippable(token)
    limit = len(text) - len(token)
    text_start = 0
    pos = 0

    while pos <= limit:
        found = _region_at(text, pos, candidates)
        if found is None:
            pos += 1
            continue
        kind, end = found
        if text_start < pos:
            yield Region(RegionKind.TEXT, text_start, pos)
        yield Region(kind, pos, end)
        pos = text_start = end

    if text_start < len(text):
        yield Region(RegionKind.TEXT, text_start, len(text))


def find_token(text: str, token: str, start: int = 0) -> int:
    """Find the next unescaped `token` at or after `start`, outside bracketed regions.

    Regions are always computed from the beginning of `text`, so `start` never
    lands a search inside a link or image.

    Args:
        text: Fragment to search.
        token: Token to look for.
        start: Smallest index a match may have.

    Returns:
        int: Index of the match, or -1 when there is none.

    Examples:
        find_token("**a** [[x|**b**]]", "**", 5)  # -1
        find_token("~**a**", "**")  # 4
    """
    last = len(text) - len(token)
    for region in iter_regions(text, token):
        if region.kind is not RegionKind.TEXT or region.end <= start:
            continue
        for pos in range(max(region.start, start), min(region.end, last + 1)):
            if text.startswith(token, pos) and not is_escaped(text, pos):
                return pos
    return -1


def find_whitespace(text: str, start: int = 0) -> int:
    """Find the next unescaped space or tab outside bracketed regions."""
    matches = [find_token(text, " ", start), find_token(text, "\t", start)]
    matches = [pos for pos in matches if pos >= 0]
    return min(matches) if matches else -1
