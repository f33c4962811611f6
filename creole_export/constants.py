"""Constants used across the creole-export package."""

from __future__ import annotations

# Block and region markers
FENCE_OPEN = "{{{"
FENCE_CLOSE = "}}}"
CODE_OPEN = "[[["
CODE_CLOSE = "]]]"
CODE_KEYWORD = "code"
LINK_OPEN = "[["
LINK_CLOSE = "]]"
IMAGE_OPEN = "{{"
IMAGE_CLOSE = "}}"
HORIZONTAL_RULE = "----"
LINE_BREAK = "\\\\"
TABLE_HEADER_CELL = "|="
TABLE_CELL = "|"
BULLET = "*"
NUMBER = "#"
HEADER = "="
ESCAPE = "~"

# Lines starting with any of these never merge into the line above
BLOCK_MARKERS = (NUMBER, BULLET, HEADER, TABLE_CELL, FENCE_OPEN, CODE_OPEN, HORIZONTAL_RULE)

# Bracketing tokens paired with the default tag they become
BRACKETING_TOKENS = (
    ("**", "<STRONG>", "</STRONG>"),
    ("//", "<EM>", "</EM>"),
    ("__", "<U>", "</U>"),
    ("^^", "<SUP>", "</SUP>"),
    (",,", "<SUB>", "</SUB>"),
    ("--", "<DEL>", "</DEL>"),
)
HEADER_LEVELS = 6
URL_PREFIXES = ("https:", "http:", "ftp:")
FREE_LINK_SCHEMES = ("ftp:", "http:", "https:")

# Opening tags callers may replace through `CreoleConfig.tag_overrides`
DEFAULT_TAGS = frozenset(
    {
        "<P>",
        "<UL>",
        "<OL>",
        "<LI>",
        "<TABLE>",
        "<THEAD>",
        "<TR>",
        "<TD>",
        "<PRE>",
        "<CODE>",
        "<STRONG>",
        "<EM>",
        "<U>",
        "<SUP>",
        "<SUB>",
        "<DEL>",
        "<BR />",
        "<HR />",
        "<TT>",
        *(f"<H{level}>" for level in range(1, HEADER_LEVELS + 1)),
    }
)

PARAGRAPH_ID_FORMAT = 'id="CreoleLine{index}"'
CELL_PLACEHOLDER = "&nbsp;"
TAB_ENTITY = "&nbsp;"
DEFAULT_TAB_STOP = 7
CODE_LINE_BREAK = "<BR />"

ANCHOR_FORMAT = '<A href="{href}" {target} {style}>{text}</A>'
ANCHOR_NEW_WINDOW = "target=_blank "
ANCHOR_UNKNOWN_STYLE = "style='border-bottom:1px dashed #000000; text-decoration:none'"
FREE_LINK_FORMAT = '<A target=_blank href="{href}">{href}</A>'
IMAGE_FORMAT = "<IMG src='{src}' alt='{alt}'/>"

# Export layout
CREOLE_DIRNAME = "Creole"
HTML_DIRNAME = "Html"
CREOLE_SUFFIX = ".creole"
HTML_SUFFIX = ".html"
DEFAULT_PAGES_COLLECTION = "Page"
DEFAULT_CONTENTS_COLLECTION = "PageContent"
CONFIG_TABLE = "creole-export"
CONFIG_DOTFILE = ".creole-export.toml"
