"""Inline Creole transforms applied to a single line or cell."""

from __future__ import annotations

import re

from .config import CreoleConfig
from .constants import (
    ANCHOR_FORMAT,
    ANCHOR_NEW_WINDOW,
    ANCHOR_UNKNOWN_STYLE,
    BRACKETING_TOKENS,
    FENCE_CLOSE,
    FENCE_OPEN,
    FREE_LINK_FORMAT,
    FREE_LINK_SCHEMES,
    HEADER,
    HEADER_LEVELS,
    HORIZONTAL_RULE,
    IMAGE_CLOSE,
    IMAGE_FORMAT,
    IMAGE_OPEN,
    LINE_BREAK,
    LINK_CLOSE,
    LINK_OPEN,
    URL_PREFIXES,
)
from .models import LinkDescription, LinkHook, LinkTarget
from .scanner import find_token, find_whitespace

ITALIC = "//"
TILDE_ESCAPE_PATTERN = re.compile(r"~(~|\S)")


def _follows_url_scheme(text: str, pos: int) -> bool:
    prefix = text[:pos].lower()
    return any(prefix.endswith(scheme) for scheme in URL_PREFIXES)


def _find_delimiter(text: str, token: str, start: int) -> int:
    pos = find_token(text, token, start)
    if token == ITALIC:
        # "//" right after a URL scheme belongs to the URL
        while pos >= 0 and _follows_url_scheme(text, pos):
            pos = find_token(text, token, pos + 1)
    return pos


def apply_bracketing(text: str, token: str, start_tag: str, end_tag: str) -> str:
    """Replace paired `token` delimiters with `start_tag` and `end_tag`.

    An opening delimiter without a partner is closed at the end of `text`.
    Empty spans such as ``****`` are left alone.

    Args:
        text: Fragment to transform.
        token: Delimiter, e.g. ``"**"``.
        start_tag: Markup replacing the opening delimiter.
        end_tag: Markup replacing the closing delimiter.

    Returns:
        str: The transformed fragment.

    Examples:
        apply_bracketing("a **b** c", "**", "<STRONG>", "</STRONG>")
        # "a <STRONG>b</STRONG> c"
        apply_bracketing("=Title", "=", "<H1>", "</H1>")  # "<H1>Title</H1>"
    """
    pos = _find_delimiter(text, token, 0)
    while pos >= 0:
        inner_start = pos + len(token)
        end = _find_delimiter(text, token, inner_start)
        if end < 0:
            return text[:pos] + start_tag + text[inner_start:] + end_tag

        inner = text[inner_start:end]
        if inner:
            replacement = start_tag + inner + end_tag
            text = text[:pos] + replacement + text[end + len(token) :]
            resume = pos + len(replacement)
        else:
            resume = end + len(token)
        pos = _find_delimiter(text, token, resume)
    return text


def apply_headers(text: str, config: CreoleConfig) -> str:
    """Turn ``=`` runs into ``<H1>``..``<H6>``, longest run first."""
    for level in range(HEADER_LEVELS, 0, -1):
        start_tag = config.start_tag(f"<H{level}>")
        text = apply_bracketing(text, HEADER * level, start_tag, f"</H{level}>")
    return text


def apply_line_breaks(text: str, config: CreoleConfig) -> str:
    tag = config.start_tag("<BR />")
    pos = find_token(text, LINE_BREAK)
    while pos >= 0:
        text = text[:pos] + tag + text[pos + len(LINE_BREAK) :]
        pos = find_token(text, LINE_BREAK, pos + len(tag))
    return text


def apply_horizontal_rule(text: str, config: CreoleConfig) -> str:
    if text.startswith(HORIZONTAL_RULE):
        return config.start_tag("<HR />") + text[len(HORIZONTAL_RULE) :]
    return text


def apply_free_links(text: str) -> str:
    """Wrap bare ``ftp:``, ``http:`` and ``https:`` URLs in anchors.

    A URL runs up to the next space or tab, or to the end of `text`.

    Examples:
        apply_free_links("see http://example.com now")
        # 'see <A target=_blank href="http://example.com">http://example.com</A> now'
    """
    for scheme in FREE_LINK_SCHEMES:
        pos = find_token(text, scheme)
        while pos >= 0:
            end = find_whitespace(text, pos)
            if end < 0:
                text = text[:pos] + FREE_LINK_FORMAT.format(href=text[pos:])
                break
            anchor = FREE_LINK_FORMAT.format(href=text[pos:end])
            text = text[:pos] + anchor + text[end:]
            pos = find_token(text, scheme, pos + len(anchor))
    return text


def _split_content(content: str) -> tuple[str, str | None]:
    # A leading "|" is part of the destination, not a separator.
    split = content.find("|")
    if split > 0:
        return content[:split], content[split + 1 :]
    return content, None


def apply_images(text: str, config: CreoleConfig, link_hook: LinkHook | None = None) -> str:
    """Render ``{{source|alt}}`` as ``<IMG>``; alt text is rendered recursively."""
    pos = find_token(text, IMAGE_OPEN)
    while pos >= 0:
        end = find_token(text, IMAGE_CLOSE, pos)
        if end <= pos:
            break
        source, alt = _split_content(text[pos + len(IMAGE_OPEN) : end])
        alt = source if alt is None else render_fragment(alt, config, link_hook)
        image = IMAGE_FORMAT.format(src=source, alt=alt)
        text = text[:pos] + image + text[end + len(IMAGE_CLOSE) :]
        pos = find_token(text, IMAGE_OPEN, pos + len(image))
    return text


def resolve_interwiki(destination: str, config: CreoleConfig) -> str:
    """Expand ``scheme:rest`` with the configured URL prefix for `scheme`.

    The prefix and the rest are concatenated as is; unknown schemes are left
    untouched.

    Examples:
        resolve_interwiki("wiki:Home", CreoleConfig(interwiki={"wiki": "https://w/"}))
        # "https://w/Home"
    """
    colon = destination.find(":")
    if colon > 0:
        prefix = config.interwiki.get(destination[:colon])
        if prefix is not None:
            return prefix + destination[colon + 1 :]
    return destination


def format_anchor(description: LinkDescription) -> str:
    return ANCHOR_FORMAT.format(
        href=description.href,
        text=description.text,
        target=ANCHOR_NEW_WINDOW if description.target is LinkTarget.EXTERNAL else "",
        style=ANCHOR_UNKNOWN_STYLE if description.target is LinkTarget.UNKNOWN else "",
    )


def apply_links(text: str, config: CreoleConfig, link_hook: LinkHook | None = None) -> str:
    """Render ``[[destination|text]]`` as anchors.

    Each link is described by a `LinkDescription` that `link_hook`, when
    given, may rewrite before the anchor is emitted.

    Args:
        text: Fragment to transform.
        config: Render configuration supplying the interwiki map.
        link_hook: Optional callback invoked once per link.

    Returns:
        str: The fragment with links replaced by anchors.
    """
    pos = find_token(text, LINK_OPEN)
    while pos >= 0:
        end = find_token(text, LINK_CLOSE, pos)
        if end <= pos:
            break
        destination, label = _split_content(text[pos + len(LINK_OPEN) : end])
        label = destination if label is None else render_fragment(label, config, link_hook)
        description = LinkDescription(
            link=destination,
            href=resolve_interwiki(destination, config),
            text=label,
        )
        if link_hook is not None:
            link_hook(description)
        anchor = format_anchor(description)
        text = text[:pos] + anchor + text[end + len(LINK_CLOSE) :]
        pos = find_token(text, LINK_OPEN, pos + len(anchor))
    return text


def strip_fenced_escapes(text: str, config: CreoleConfig) -> str:
    """Render leftover inline ``{{{...}}}`` spans as monospace."""
    tag = config.start_tag("<TT>")
    pos = text.find(FENCE_OPEN)
    while pos >= 0:
        end = text.find(FENCE_CLOSE, pos)
        if end <= pos:
            break
        replacement = tag + text[pos + len(FENCE_OPEN) : end] + "</TT>"
        text = text[:pos] + replacement + text[end + len(FENCE_CLOSE) :]
        pos = text.find(FENCE_OPEN, pos + len(replacement))
    return text


def unescape_tildes(text: str) -> str:
    """Drop escape tildes: ``~~`` becomes ``~`` and ``~x`` becomes ``x``.

    A tilde followed by whitespace, or ending the text, is kept.
    """
    return TILDE_ESCAPE_PATTERN.sub(r"\1", text)


def render_fragment(
    fragment: str, config: CreoleConfig | None = None, link_hook: LinkHook | None = None
) -> str:
    """Apply every inline transform to `fragment`, in order.

    Args:
        fragment: A line, list item, table cell, link label or image alt text.
        config: Render configuration. Defaults to a new `CreoleConfig`.
        link_hook: Optional callback invoked once per wiki link.

    Returns:
        str: HTML for the fragment.

    Examples:
        render_fragment("**bold** and //italic//")
        # "<STRONG>bold</STRONG> and <EM>italic</EM>"
    """
    config = config or CreoleConfig()
    for token, start_tag, end_tag in BRACKETING_TOKENS:
        fragment = apply_bracketing(fragment, token, config.start_tag(start_tag), end_tag)
    fragment = apply_line_breaks(fragment, config)
    fragment = apply_horizontal_rule(fragment, config)
    fragment = apply_free_links(fragment)
    fragment = apply_images(fragment, config, link_hook)
    fragment = apply_links(fragment, config, link_hook)
    fragment = strip_fenced_escapes(fragment, config)
    return unescape_tildes(fragment)
