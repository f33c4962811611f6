"""Creole to HTML rendering."""

from __future__ import annotations

import html
from pathlib import Path

from .config import CreoleConfig, validate_config
from .constants import (
    BULLET,
    CELL_PLACEHOLDER,
    CODE_LINE_BREAK,
    HEADER,
    NUMBER,
    PARAGRAPH_ID_FORMAT,
    TABLE_CELL,
    TABLE_HEADER_CELL,
)
from .exceptions import RenderFileError
from .filesystem import safe_read
from .inline import apply_headers, render_fragment
from .models import BlockContext, BlockMode, LinkHook
from .scanner import find_token
from .segmenter import closes_block, is_code_opener, is_fence_opener, segment_lines


def _open_paragraph(config: CreoleConfig, source_index: int) -> str:
    tag = config.start_tag("<P>")
    return tag.replace("<P", f"<P {PARAGRAPH_ID_FORMAT.format(index=source_index)}", 1)


def _close_list(depth: int, close_tag: str) -> str:
    return f"{close_tag}\n" * depth


def _close_lists(ctx: BlockContext) -> str:
    """Close every open list, ordered lists first, and reset both depths."""
    markup = _close_list(ctx.number_depth, "</OL>") + _close_list(ctx.bullet_depth, "</UL>")
    ctx.number_depth = 0
    ctx.bullet_depth = 0
    return markup


def _list_item(
    line: str,
    marker: str,
    depth: int,
    open_tag: str,
    close_tag: str,
    config: CreoleConfig,
    link_hook: LinkHook | None,
) -> tuple[str, int]:
    """Level the list to the marker count of `line` and render it as an item.

    Args:
        line: Line with leading spaces removed, starting with `marker`.
        marker: ``*`` or ``#``.
        depth: Currently open depth for this list type.
        open_tag: Markup opening one list level.
        close_tag: Markup closing one list level.
        config: Render configuration.
        link_hook: Optional link callback.

    Returns:
        tuple[str, int]: Emitted markup and the new depth.

    Examples:
        _list_item("** b", "*", 1, "<UL>", "</UL>", CreoleConfig(), None)
        # ("<UL>\\n<LI> b</LI>\\n", 2)
    """
    new_depth = len(line) - len(line.lstrip(marker))
    parts = []
    while new_depth < depth:
        parts.append(f"{close_tag}\n")
        depth -= 1
    while new_depth > depth:
        parts.append(f"{open_tag}\n")
        depth += 1
    item = render_fragment(line[new_depth:], config, link_hook)
    parts.append(f"{config.start_tag('<LI>')}{item}</LI>\n")
    return "".join(parts), depth


def _cell(raw: str, config: CreoleConfig, link_hook: LinkHook | None) -> str:
    if not raw.strip():
        content = CELL_PLACEHOLDER
    else:
        content = render_fragment(raw, config, link_hook).strip() or CELL_PLACEHOLDER
    return f"{config.start_tag('<TD>')}{content}</TD>"


def render_table_header(line: str, config: CreoleConfig, link_hook: LinkHook | None = None) -> str:
    """Open a table and render its ``|=`` header row.

    Examples:
        render_table_header("|=A|=B", CreoleConfig())
        # "<TABLE><THEAD>\\n<TR>\\n<TD>A</TD><TD>B</TD></TR>\\n</THEAD>\\n"
    """
    cells = []
    pos = find_token(line, TABLE_HEADER_CELL)
    while pos >= 0:
        start = pos + len(TABLE_HEADER_CELL)
        end = find_token(line, TABLE_HEADER_CELL, pos + 1)
        if end > pos:
            raw = line[start:end]
        else:
            raw = line[start:].rstrip(TABLE_CELL)
        cells.append(_cell(raw, config, link_hook))
        pos = end

    opening = config.start_tag("<TABLE>") + config.start_tag("<THEAD>")
    return f"{opening}\n{config.start_tag('<TR>')}\n{''.join(cells)}</TR>\n</THEAD>\n"


def render_table_row(line: str, config: CreoleConfig, link_hook: LinkHook | None = None) -> str:
    """Render a ``|`` body row; text after the last ``|`` is a cell too.

    Examples:
        render_table_row("|1|2", CreoleConfig())  # "<TR><TD>1</TD><TD>2</TD></TR>"
    """
    cells = []
    pos = find_token(line, TABLE_CELL)
    while pos >= 0:
        start = pos + len(TABLE_CELL)
        end = find_token(line, TABLE_CELL, start)
        raw = line[start:end] if end >= 0 else line[start:]
        if end < 0 and not raw.strip():
            break
        cells.append(_cell(raw, config, link_hook))
        pos = end
    return f"{config.start_tag('<TR>')}{''.join(cells)}</TR>"


def _fenced_line(ctx: BlockContext, line: str) -> str:
    """Render a line inside a ``{{{`` or ``[[[code`` block, closing it when due."""
    if ctx.mode is BlockMode.IN_PREFORMATTED:
        if closes_block(ctx.mode, line):
            ctx.mode = BlockMode.NORMAL
            return "</PRE>\n"
        return f"{line}\n"

    if closes_block(ctx.mode, line):
        ctx.mode = BlockMode.NORMAL
        return "</CODE>\n"
    return f"{html.escape(line)}{CODE_LINE_BREAK}\n"


def _close_open_blocks(ctx: BlockContext) -> str:
    # A fenced block always opens last, so it closes first
    markup = ""
    if ctx.mode is BlockMode.IN_PREFORMATTED:
        markup += "</PRE>\n"
    elif ctx.mode is BlockMode.IN_CODE:
        markup += "</CODE>\n"
    ctx.mode = BlockMode.NORMAL
    markup += _close_lists(ctx)
    if ctx.in_table:
        markup += "</TABLE>"
        ctx.in_table = False
    return markup


def render_creole(
    markup: str, config: CreoleConfig | None = None, link_hook: LinkHook | None = None
) -> str:
    """Render a Creole document as an HTML fragment.

    Malformed markup never raises: unterminated inline markup is closed at the
    end of its line, and every block still open at the end of the document is
    closed.

    Args:
        markup: The complete Creole document.
        config: Tag overrides, interwiki map and tab stop. Defaults to a new
            `CreoleConfig` when omitted.
        link_hook: Optional callback invoked with a `LinkDescription` for every
            ``[[...]]`` link; it may rewrite the destination, text or target.

    Returns:
        str: The HTML fragment, starting with ``<P id="CreoleLine0">``.

    Raises:
        ConfigError: If the configuration fails validation.

    Examples:
        render_creole("**bold** text")
        # '<P id="CreoleLine0"><STRONG>bold</STRONG> text\\n</P>'
    """
    config = config or CreoleConfig()
    validate_config(config)

    lines = segment_lines(markup)
    ctx = BlockContext()
    parts = [_open_paragraph(config, 0)]

    for index, logical in enumerate(lines):
        line = logical.text[:-1] if logical.text.endswith("\r") else logical.text
        stripped = line.lstrip(" ")

        if ctx.mode is not BlockMode.NORMAL:
            parts.append(_fenced_line(ctx, line))
            continue

        # Anything but another row ends a table
        if ctx.in_table and stripped and not stripped.startswith(TABLE_CELL):
            parts.append("</TABLE>")
            ctx.in_table = False

        if not stripped.strip():
            next_index = logical.source_index
            if index + 1 < len(lines):
                next_index = lines[index + 1].source_index
            parts.append(_close_lists(ctx))
            parts.append(f"</P>\n{_open_paragraph(config, next_index)}")

        elif stripped.startswith(BULLET):
            if stripped[1:2] == BULLET and ctx.bullet_depth == 0:
                # "**" outside a list is bold, not a nested bullet
                parts.append(f"{render_fragment(line, config, link_hook)}\n")
                continue
            if ctx.number_depth > 0:
                parts.append(_close_list(ctx.number_depth, "</OL>"))
                ctx.number_depth = 0
            item, ctx.bullet_depth = _list_item(
                stripped,
                BULLET,
                ctx.bullet_depth,
                config.start_tag("<UL>"),
                "</UL>",
                config,
                link_hook,
            )
            parts.append(item)

        elif stripped.startswith(NUMBER):
            if ctx.bullet_depth > 0:
                parts.append(_close_list(ctx.bullet_depth, "</UL>"))
                ctx.bullet_depth = 0
            item, ctx.number_depth = _list_item(
                stripped,
                NUMBER,
                ctx.number_depth,
                config.start_tag("<OL>"),
                "</OL>",
                config,
                link_hook,
            )
            parts.append(item)

        elif stripped.startswith(HEADER):
            parts.append(_close_lists(ctx))
            parts.append(render_fragment(apply_headers(line, config), config, link_hook))

        elif not ctx.in_table and stripped.startswith(TABLE_HEADER_CELL):
            parts.append(_close_lists(ctx))
            ctx.in_table = True
            parts.append(render_table_header(stripped, config, link_hook))

        elif ctx.in_table and stripped.startswith(TABLE_CELL):
            parts.append(render_table_row(stripped, config, link_hook))

        elif is_fence_opener(line):
            parts.append(config.start_tag("<PRE>"))
            ctx.mode = BlockMode.IN_PREFORMATTED

        elif is_code_opener(line):
            parts.append(config.start_tag("<CODE>"))
            ctx.mode = BlockMode.IN_CODE

        else:
            parts.append(f"{render_fragment(line, config, link_hook)}\n")

    parts.append(_close_open_blocks(ctx))
    parts.append("</P>")

    rendered = "".join(parts)
    if config.tab_stop > 0:
        rendered = rendered.replace("\t", config.tab_expansion)
    return rendered


def render_file(
    filepath: Path, config: CreoleConfig | None = None, link_hook: LinkHook | None = None
) -> str:
    """Render a Creole file.

    Args:
        filepath: Path to a UTF-8 encoded Creole file.
        config: Render configuration; defaults to a new `CreoleConfig`.
        link_hook: Optional link callback, see `render_creole`.

    Returns:
        str: The HTML fragment.

    Raises:
        RenderFileError: If the file cannot be read or decoded.
        ConfigError: If the configuration fails validation.

    Examples:
        html_fragment = render_file(Path("Home.creole"))
    """
    try:
        with safe_read(filepath) as file:
            content = file.read()
    except UnicodeDecodeError as error:
        error_message = f"Invalid UTF-8 sequence in {filepath}: {error}"
        raise RenderFileError(error_message) from error
    except OSError as error:
        raise RenderFileError(str(error)) from error

    return render_creole(content, config, link_hook)
