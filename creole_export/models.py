"""Data models for creole-export."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, NamedTuple


class LinkTarget(Enum):
    """How a wiki link should open.

    Attributes:
        INTERNAL: Page inside the wiki; rendered as a plain anchor.
        EXTERNAL: Opens in a new window.
        UNKNOWN: Rendered with a dashed underline.
    """

    INTERNAL = auto()
    EXTERNAL = auto()
    UNKNOWN = auto()


@dataclass
class LinkDescription:
    """Describe one ``[[...]]`` occurrence before its anchor is emitted.

    A link hook receives this object and may rewrite `href`, `text` and
    `target` in place.

    Attributes:
        link: Destination as written, before any interwiki rewrite.
        href: Destination the anchor will point to.
        text: Display text, already rendered when it came after a ``|``.
        target: Link classification; External unless a hook changes it.
    """

    link: str
    href: str
    text: str
    target: LinkTarget = LinkTarget.EXTERNAL


LinkHook = Callable[[LinkDescription], None]


class LogicalLine(NamedTuple):
    """A line after soft line breaks are merged.

    Attributes:
        text: Content of the line, continuation lines joined by a space.
        source_index: Zero-based index of the last physical line consumed.
    """

    text: str
    source_index: int


class BlockMode(Enum):
    """Block states used while walking logical lines.

    Attributes:
        NORMAL: Regular markup.
        IN_PREFORMATTED: Inside a ``{{{`` block; lines pass through verbatim.
        IN_CODE: Inside a ``[[[code`` block; lines are escaped.
    """

    NORMAL = auto()
    IN_PREFORMATTED = auto()
    IN_CODE = auto()


@dataclass
class BlockContext:
    """Mutable state owned by a single render call.

    Attributes:
        mode: Current block mode.
        bullet_depth: Number of open ``<UL>`` levels.
        number_depth: Number of open ``<OL>`` levels.
        in_table: Whether a ``<TABLE>`` is open.
    """

    mode: BlockMode = BlockMode.NORMAL
    bullet_depth: int = 0
    number_depth: int = 0
    in_table: bool = False


@dataclass(frozen=True)
class PageRef:
    """A page listed by a document source.

    Attributes:
        title: Page title, used for output file names.
        key: Source-specific handle used to fetch the page's documents.
    """

    title: str
    key: Any = None


@dataclass(frozen=True)
class SourceDocument:
    """Raw markup for one page version."""

    title: str
    text: str


@dataclass
class ExportReport:
    """Outcome of an export run.

    Attributes:
        exported: Titles written successfully, in processing order.
        failed: ``(title, reason)`` pairs for documents that failed.
    """

    exported: list[str] = field(default_factory=list)
    failed: list[tuple[str, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed
