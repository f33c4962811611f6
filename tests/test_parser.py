from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from creole_export.config import CreoleConfig
from creole_export.exceptions import ConfigError, RenderFileError
from creole_export.models import LinkDescription, LinkTarget
from creole_export.parser import (
    render_creole,
    render_file,
    render_table_header,
    render_table_row,
)

NBSP = "&nbsp;"


def _write_creole(tmp_path: Path, content: str) -> Path:
    target = tmp_path / "Home.creole"
    target.write_text(textwrap.dedent(content).lstrip(), encoding="utf-8")
    return target


def test_bold_paragraph():
    assert render_creole("**bold**") == '<P id="CreoleLine0"><STRONG>bold</STRONG>\n</P>'


def test_escaped_bold_is_literal():
    rendered = render_creole("~**not bold**")
    assert "<STRONG>not bold</STRONG>" not in rendered
    assert "**not bold" in rendered


@pytest.mark.parametrize(
    ("markup", "expected"),
    [
        ("~~**bold**", '<P id="CreoleLine0">~<STRONG>bold</STRONG>\n</P>'),
        ("a ~~//it//", '<P id="CreoleLine0">a ~<EM>it</EM>\n</P>'),
    ],
)
def test_doubled_tilde_is_literal_and_leaves_markup_live(markup: str, expected: str):
    assert render_creole(markup) == expected


def test_headers_longest_run_wins():
    assert render_creole("====Four====") == '<P id="CreoleLine0"><H4>Four</H4></P>'
    assert render_creole("=One") == '<P id="CreoleLine0"><H1>One</H1></P>'


def test_header_closes_open_list():
    rendered = render_creole("* a\n= Title")
    assert rendered == '<P id="CreoleLine0"><UL>\n<LI> a</LI>\n</UL>\n<H1> Title</H1></P>'


def test_nested_bullets_open_and_close_levels():
    assert render_creole("* a\n** b\n* c") == (
        '<P id="CreoleLine0"><UL>\n<LI> a</LI>\n<UL>\n<LI> b</LI>\n</UL>\n'
        "<LI> c</LI>\n</UL>\n</P>"
    )


def test_switching_list_type_closes_previous_list():
    assert render_creole("* a\n# b") == (
        '<P id="CreoleLine0"><UL>\n<LI> a</LI>\n</UL>\n<OL>\n<LI> b</LI>\n</OL>\n</P>'
    )


def test_double_star_outside_list_is_bold():
    assert render_creole("**a** b") == '<P id="CreoleLine0"><STRONG>a</STRONG> b\n</P>'


def test_list_item_continuation_is_merged():
    rendered = render_creole("* first\n  still first")
    assert "<LI> first still first</LI>" in rendered


def test_table_with_header_and_body():
    assert render_creole("|=A|=B\n|1|2\nafter") == (
        '<P id="CreoleLine0"><TABLE><THEAD>\n<TR>\n<TD>A</TD><TD>B</TD></TR>\n</THEAD>\n'
        "<TR><TD>1</TD><TD>2</TD></TR></TABLE>after\n</P>"
    )


def test_table_closed_at_end_of_document():
    assert render_creole("|=A\n|1").endswith("<TR><TD>1</TD></TR></TABLE></P>")


def test_empty_cells_get_placeholder():
    assert render_table_row("|1||3", CreoleConfig()) == (
        f"<TR><TD>1</TD><TD>{NBSP}</TD><TD>3</TD></TR>"
    )
    assert render_table_header("|=A|=|=C", CreoleConfig()) == (
        f"<TABLE><THEAD>\n<TR>\n<TD>A</TD><TD>{NBSP}</TD><TD>C</TD></TR>\n</THEAD>\n"
    )


def test_trailing_pipe_does_not_add_a_cell():
    assert render_table_row("|1|2|", CreoleConfig()) == "<TR><TD>1</TD><TD>2</TD></TR>"


def test_cell_markup_is_rendered():
    assert render_table_row("|**x**|[[Home]]", CreoleConfig()) == (
        '<TR><TD><STRONG>x</STRONG></TD><TD><A href="Home" target=_blank  >Home</A></TD></TR>'
    )


def test_pipe_inside_link_does_not_split_cell():
    row = render_table_row("|[[Home|Start]]|2", CreoleConfig())
    assert row.count("<TD>") == 2


def test_blank_line_starts_paragraph_with_next_source_index():
    assert render_creole("one\n\ntwo") == (
        '<P id="CreoleLine0">one\n</P>\n<P id="CreoleLine2">two\n</P>'
    )
    assert '<P id="CreoleLine3">c' in render_creole("a\nb\n\nc")


def test_trailing_blank_line_opens_empty_paragraph():
    assert render_creole("a\n") == '<P id="CreoleLine0">a\n</P>\n<P id="CreoleLine1"></P>'


def test_blank_line_closes_lists():
    assert render_creole("* a\n\nb") == (
        '<P id="CreoleLine0"><UL>\n<LI> a</LI>\n</UL>\n</P>\n<P id="CreoleLine2">b\n</P>'
    )


def test_preformatted_block_is_verbatim():
    assert render_creole("{{{\n**raw** <b>\n}}}") == (
        '<P id="CreoleLine0"><PRE>**raw** <b>\n</PRE>\n</P>'
    )


def test_code_block_is_escaped():
    assert render_creole("[[[code\nif a < b:\n]]]") == (
        '<P id="CreoleLine0"><CODE>if a &lt; b:<BR />\n</CODE>\n</P>'
    )


def test_unterminated_preformatted_block_is_closed():
    assert render_creole("{{{\ncode") == '<P id="CreoleLine0"><PRE>code\n</PRE>\n</P>'


@pytest.mark.parametrize(
    ("markup", "expected"),
    [
        (
            "* a\n{{{\nx",
            '<P id="CreoleLine0"><UL>\n<LI> a</LI>\n<PRE>x\n</PRE>\n</UL>\n</P>',
        ),
        (
            "# a\n[[[code\nx",
            '<P id="CreoleLine0"><OL>\n<LI> a</LI>\n<CODE>x<BR />\n</CODE>\n</OL>\n</P>',
        ),
    ],
)
def test_unterminated_fenced_block_closes_inside_open_list(markup: str, expected: str):
    assert render_creole(markup) == expected


def test_short_bracket_line_is_plain_text():
    assert render_creole("[[[") == '<P id="CreoleLine0">[[[\n</P>'


def test_horizontal_rule_line():
    assert render_creole("----") == '<P id="CreoleLine0"><HR />\n</P>'


def test_free_link_in_paragraph():
    assert render_creole("Contact http://example.com now") == (
        '<P id="CreoleLine0">Contact '
        '<A target=_blank href="http://example.com">http://example.com</A> now\n</P>'
    )


def test_interwiki_link():
    config = CreoleConfig(interwiki={"wikipedia": "https://en.wikipedia.org/wiki/"})
    rendered = render_creole("[[wikipedia:Creole]]", config)
    assert 'href="https://en.wikipedia.org/wiki/Creole"' in rendered


def test_link_hook_marks_internal_links():
    def classify(link: LinkDescription) -> None:
        if "://" not in link.href:
            link.target = LinkTarget.INTERNAL

    default = render_creole("[[Home]] [[http://x.org|X]]")
    hooked = render_creole("[[Home]] [[http://x.org|X]]", link_hook=classify)

    assert '<A href="Home" target=_blank  >Home</A>' in default
    assert '<A href="Home"  >Home</A>' in hooked
    assert '<A href="http://x.org" target=_blank  >X</A>' in hooked


def test_tabs_expand_to_non_breaking_spaces():
    assert render_creole("a\tb") == f'<P id="CreoleLine0">a{NBSP * 7}b\n</P>'
    assert render_creole("a\tb", CreoleConfig(tab_stop=2)) == (
        f'<P id="CreoleLine0">a{NBSP * 2}b\n</P>'
    )
    assert render_creole("a\tb", CreoleConfig(tab_stop=0)) == '<P id="CreoleLine0">a\tb\n</P>'


def test_tag_overrides_replace_opening_tags():
    config = CreoleConfig(tag_overrides={"<p>": '<P class="wiki">', "<TD>": '<TD class="c">'})
    rendered = render_creole("|=A", config)

    assert rendered.startswith('<P id="CreoleLine0" class="wiki">')
    assert '<TD class="c">A</TD>' in rendered


def test_invalid_config_is_rejected():
    with pytest.raises(ConfigError):
        render_creole("text", CreoleConfig(tab_stop=-1))


def test_render_is_repeatable():
    markup = "= Title\n* a\n** b\n|=H\n|c\n{{{\nx\n"
    assert render_creole(markup) == render_creole(markup)


def test_render_file_reads_utf8(tmp_path: Path):
    target = _write_creole(tmp_path, "**héllo**\n")
    assert render_file(target) == render_creole("**héllo**\n")


def test_render_file_rejects_invalid_utf8(tmp_path: Path):
    target = tmp_path / "broken.creole"
    target.write_bytes(b"\xff\xfe\xfa")

    with pytest.raises(RenderFileError, match="Invalid UTF-8"):
        render_file(target)


def test_render_file_missing_file(tmp_path: Path):
    with pytest.raises(RenderFileError):
        render_file(tmp_path / "missing.creole")
