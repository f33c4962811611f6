from __future__ import annotations

import pytest

from creole_export.config import CreoleConfig
from creole_export.inline import (
    apply_bracketing,
    apply_headers,
    render_fragment,
    resolve_interwiki,
    unescape_tildes,
)
from creole_export.models import LinkDescription, LinkTarget

UNKNOWN_STYLE = "style='border-bottom:1px dashed #000000; text-decoration:none'"


@pytest.mark.parametrize(
    ("fragment", "expected"),
    [
        ("**bold**", "<STRONG>bold</STRONG>"),
        ("//italic//", "<EM>italic</EM>"),
        ("__under__", "<U>under</U>"),
        ("^^sup^^", "<SUP>sup</SUP>"),
        (",,sub,,", "<SUB>sub</SUB>"),
        ("--del--", "<DEL>del</DEL>"),
        ("**a** and **b**", "<STRONG>a</STRONG> and <STRONG>b</STRONG>"),
        ("**//both//**", "<STRONG><EM>both</EM></STRONG>"),
    ],
)
def test_bracketing_markup(fragment: str, expected: str):
    assert render_fragment(fragment) == expected


def test_unterminated_bracketing_closes_at_end():
    assert render_fragment("**bold") == "<STRONG>bold</STRONG>"


def test_empty_span_is_left_alone():
    assert apply_bracketing("****", "**", "<STRONG>", "</STRONG>") == "****"


def test_tilde_escapes_bold():
    rendered = render_fragment("~**not bold**")

    assert "<STRONG>not bold</STRONG>" not in rendered
    assert rendered.startswith("**not bold")


def test_italic_ignores_url_slashes():
    rendered = render_fragment("see http://example.com")
    assert "<EM>" not in rendered
    assert rendered == 'see <A target=_blank href="http://example.com">http://example.com</A>'


@pytest.mark.parametrize(
    ("fragment", "expected"),
    [
        (
            "get ftp://files.example/a",
            'get <A target=_blank href="ftp://files.example/a">ftp://files.example/a</A>',
        ),
        (
            "see https://example.com/x",
            'see <A target=_blank href="https://example.com/x">https://example.com/x</A>',
        ),
        ("HTTPS://example.com", "HTTPS://example.com"),
        (
            "//a// ftp://b //c//",
            '<EM>a</EM> <A target=_blank href="ftp://b">ftp://b</A> <EM>c</EM>',
        ),
    ],
)
def test_italic_url_guard_covers_every_scheme(fragment: str, expected: str):
    assert render_fragment(fragment) == expected


@pytest.mark.parametrize(
    ("fragment", "expected"),
    [
        ("~~**bold**", "~<STRONG>bold</STRONG>"),
        ("x~~ **b**", "x~ <STRONG>b</STRONG>"),
    ],
)
def test_doubled_tilde_escape(fragment: str, expected: str):
    assert render_fragment(fragment) == expected


def test_italic_closer_ignores_url_slashes():
    rendered = render_fragment("//x// and https://y")
    assert rendered == '<EM>x</EM> and <A target=_blank href="https://y">https://y</A>'


@pytest.mark.parametrize(
    ("line", "expected"),
    [
        ("====Four====", "<H4>Four</H4>"),
        ("=One", "<H1>One</H1>"),
        ("======Six======", "<H6>Six</H6>"),
        ("== Two ==", "<H2> Two </H2>"),
    ],
)
def test_headers_match_longest_run_first(line: str, expected: str):
    assert apply_headers(line, CreoleConfig()) == expected


def test_header_tag_override():
    config = CreoleConfig(tag_overrides={"<H2>": '<H2 class="title">'})
    assert apply_headers("==x==", config) == '<H2 class="title">x</H2>'


def test_line_break():
    assert render_fragment("a\\\\b") == "a<BR />b"


def test_horizontal_rule():
    assert render_fragment("----") == "<HR />"


def test_free_links_stop_at_whitespace():
    rendered = render_fragment("http://a.com and ftp://b.org\tnext")
    assert rendered == (
        '<A target=_blank href="http://a.com">http://a.com</A> and '
        '<A target=_blank href="ftp://b.org">ftp://b.org</A>\tnext'
    )


def test_image_with_alt_text_rendered_recursively():
    rendered = render_fragment("{{pic.png|A **bold** pic}}")
    assert rendered == "<IMG src='pic.png' alt='A <STRONG>bold</STRONG> pic'/>"


def test_image_without_alt_uses_source():
    assert render_fragment("{{pic.png}}") == "<IMG src='pic.png' alt='pic.png'/>"


def test_link_defaults_to_external():
    assert render_fragment("[[Home]]") == '<A href="Home" target=_blank  >Home</A>'


def test_link_label_is_rendered():
    rendered = render_fragment("[[Home|**Start**]]")
    assert rendered == '<A href="Home" target=_blank  ><STRONG>Start</STRONG></A>'


def test_link_label_may_hold_an_image():
    rendered = render_fragment("[[Home|{{logo.png|Logo}}]]")
    assert rendered == "<A href=\"Home\" target=_blank  ><IMG src='logo.png' alt='Logo'/></A>"


def test_link_with_leading_pipe_keeps_whole_destination():
    assert render_fragment("[[|x]]") == '<A href="|x" target=_blank  >|x</A>'


def test_interwiki_concatenates_prefix():
    config = CreoleConfig(interwiki={"wiki": "https://wiki.example/"})
    rendered = render_fragment("[[wiki:Home]]", config)
    assert rendered == '<A href="https://wiki.example/Home" target=_blank  >wiki:Home</A>'


def test_unknown_interwiki_scheme_is_unchanged():
    config = CreoleConfig(interwiki={"wiki": "https://wiki.example/"})
    assert resolve_interwiki("other:Page", config) == "other:Page"
    assert resolve_interwiki(":Page", config) == ":Page"


def test_link_hook_receives_description():
    seen: list[LinkDescription] = []
    config = CreoleConfig(interwiki={"wiki": "https://wiki.example/"})

    render_fragment("[[wiki:Home|Go //home//]]", config, link_hook=seen.append)

    assert seen == [
        LinkDescription(
            link="wiki:Home",
            href="https://wiki.example/Home",
            text="Go <EM>home</EM>",
            target=LinkTarget.EXTERNAL,
        )
    ]


def test_link_hook_internal_drops_new_window():
    def classify(link: LinkDescription) -> None:
        if "://" not in link.href:
            link.target = LinkTarget.INTERNAL

    default = render_fragment("[[Home]]")
    rendered = render_fragment("[[Home]]", link_hook=classify)

    assert "target=_blank" in default
    assert rendered == '<A href="Home"  >Home</A>'


def test_link_hook_unknown_adds_dashed_style():
    def classify(link: LinkDescription) -> None:
        link.target = LinkTarget.UNKNOWN

    rendered = render_fragment("[[Missing]]", link_hook=classify)
    assert rendered == f'<A href="Missing"  {UNKNOWN_STYLE}>Missing</A>'


def test_link_hook_may_rewrite_destination_and_text():
    def rewrite(link: LinkDescription) -> None:
        link.href = f"/wiki/{link.href}"
        link.text = link.text.upper()

    rendered = render_fragment("[[Home]]", link_hook=rewrite)
    assert rendered == '<A href="/wiki/Home" target=_blank  >HOME</A>'


def test_inline_fence_becomes_monospace_and_is_not_parsed():
    assert render_fragment("use {{{**raw**}}} here") == "use <TT>**raw**</TT> here"


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("~~x", "~x"),
        ("~a", "a"),
        ("a ~ b", "a ~ b"),
        ("end~", "end~"),
        ("~~~x", "~x"),
    ],
)
def test_unescape_tildes(text: str, expected: str):
    assert unescape_tildes(text) == expected
