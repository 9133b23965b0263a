from __future__ import annotations

from bs4 import BeautifulSoup, NavigableString


def _soup(markup: str) -> BeautifulSoup:
    return BeautifulSoup(markup, "html.parser")


def test_extract_lines_in_document_order():
    from extraction.line_extractor import extract_lines

    lines = extract_lines(_soup("<h1>Title</h1><p>First</p><ul><li>One</li><li>Two</li></ul><pre>x = 1</pre>"))

    assert [line.text for line in lines] == ["Title", "First", "One", "Two", "x = 1"]
    assert [line.tag for line in lines] == ["h1", "p", "li", "li", "pre"]
    assert [line.sequence_index for line in lines] == [0, 1, 2, 3, 4]


def test_text_is_verbatim_not_trimmed():
    from extraction.line_extractor import extract_lines

    soup = _soup("<p></p>")
    bold = soup.new_tag("b")
    bold.string = "bold"
    soup.p.append(NavigableString("  Hello\t "))
    soup.p.append(bold)
    soup.p.append(NavigableString("  "))

    lines = extract_lines(soup)
    assert lines[0].text == "  Hello\t bold  "
    assert lines[0].normalized_text == "hello bold"


def test_table_content_is_excluded():
    from extraction.line_extractor import extract_lines

    markup = "<p>Before</p><table><tr><td><p>In cell</p></td></tr></table><p>After</p>"
    assert [line.text for line in extract_lines(_soup(markup))] == ["Before", "After"]


def test_wrapper_around_table_is_not_a_line():
    from extraction.line_extractor import extract_lines

    markup = "<div><table><tr><td>Cell</td></tr></table></div><p>After</p>"
    assert [line.text for line in extract_lines(_soup(markup))] == ["After"]


def test_block_text_skips_inner_table_text():
    from extraction.line_extractor import extract_lines

    lines = extract_lines(_soup("<div>Intro <table><tr><td>Cell</td></tr></table></div>"))
    assert [line.text for line in lines] == ["Intro "]
    assert lines[0].source_ref.name == "span"


def test_container_blocks_yield_their_children():
    from extraction.line_extractor import extract_lines

    lines = extract_lines(_soup("<div><p>A</p><div><p>B</p></div></div><div>C</div>"))
    assert [line.text for line in lines] == ["A", "B", "C"]


class TestLooseInlineRuns:
    def test_text_beside_inner_blocks_becomes_a_line(self):
        from extraction.line_extractor import LOOSE_RUN_ATTR, extract_lines

        soup = _soup("<div>Intro <b>old</b> <p>Body</p> tail</div>")
        lines = extract_lines(soup)

        assert [line.text for line in lines] == ["Intro old", "Body", " tail"]
        assert [line.tag for line in lines] == ["span", "p", "span"]
        wrapper = lines[0].source_ref
        assert wrapper.has_attr(LOOSE_RUN_ATTR)
        assert wrapper.parent is soup.div
        assert str(wrapper) == '<span data-diff-run="">Intro <b>old</b></span>'
        assert lines[0].formatting.bold is True

    def test_text_directly_under_the_root(self):
        from extraction.line_extractor import extract_lines

        lines = extract_lines(_soup("Loose text<p>Para</p>"))
        assert [line.text for line in lines] == ["Loose text", "Para"]

    def test_text_directly_under_body(self):
        from extraction.line_extractor import extract_lines

        markup = "<html><head><title>T</title></head><body>\n  Just text\n</body></html>"
        assert [line.text for line in extract_lines(_soup(markup))] == ["\n  Just text\n"]

    def test_whitespace_and_empty_inline_content_is_not_a_line(self):
        from extraction.line_extractor import extract_lines

        soup = _soup('<div>\n  <img src="a.png"> <p>x</p>\n</div>')
        before = str(soup)
        assert [line.text for line in extract_lines(soup)] == ["x"]
        assert str(soup) == before


class TestTagRoot:
    def test_block_root_is_a_line(self):
        from extraction.line_extractor import extract_lines

        para = _soup("<p>The cat sat.</p>").p
        lines = extract_lines(para)
        assert [line.text for line in lines] == ["The cat sat."]
        assert lines[0].source_ref is para

    def test_container_root_is_walked(self):
        from extraction.line_extractor import extract_lines

        div = _soup("<div><p>A</p><p>B</p></div>").div
        assert [line.text for line in extract_lines(div)] == ["A", "B"]

    def test_ignored_root_yields_nothing(self):
        from extraction.line_extractor import extract_lines

        assert extract_lines(_soup("<script>var x = 1;</script>").script) == []


def test_ignored_tags_do_not_contribute_text():
    from extraction.line_extractor import extract_lines

    lines = extract_lines(_soup("<p>Visible<script>var x = 1;</script><!-- note --></p><style>p {}</style>"))
    assert [line.text for line in lines] == ["Visible"]


def test_empty_document_yields_no_lines():
    from extraction.line_extractor import extract_lines

    assert extract_lines(_soup("")) == []
    assert extract_lines(None) == []


def test_empty_block_is_still_a_line():
    from extraction.line_extractor import extract_lines

    lines = extract_lines(_soup("<p></p><p>  </p>"))
    assert len(lines) == 2
    assert [line.text.strip() for line in lines] == ["", ""]


class TestExtractFormatting:
    def test_inline_tags_anywhere_in_block(self):
        from extraction.line_extractor import extract_lines

        line = extract_lines(_soup("<p>plain <span><strong>x</strong></span> <em>y</em> <u>z</u></p>"))[0]
        assert line.formatting.bold is True
        assert line.formatting.italic is True
        assert line.formatting.underline is True

    def test_css_styles(self):
        from extraction.line_extractor import extract_lines

        markup = '<p style="font-weight: 700; font-style: italic; text-decoration: underline">x</p>'
        fmt = extract_lines(_soup(markup))[0].formatting
        assert (fmt.bold, fmt.italic, fmt.underline) == (True, True, True)

    def test_plain_block(self):
        from extraction.line_extractor import extract_lines

        fmt = extract_lines(_soup("<p>x</p>"))[0].formatting
        assert (fmt.bold, fmt.italic, fmt.underline) == (False, False, False)
        assert fmt.font_size is None
        assert fmt.text_align is None

    def test_effective_font_size_and_alignment_are_inherited(self):
        from extraction.line_extractor import extract_lines

        markup = '<div style="font-size: 14pt; text-align: Center"><p>x</p></div>'
        fmt = extract_lines(_soup(markup))[0].formatting
        assert fmt.font_size == "14pt"
        assert fmt.text_align == "center"

    def test_nearest_declaration_wins(self):
        from extraction.line_extractor import extract_lines

        markup = '<div style="font-size: 14pt"><p style="font-size: 10pt">x</p></div>'
        assert extract_lines(_soup(markup))[0].formatting.font_size == "10pt"

    def test_legacy_align_attribute(self):
        from extraction.line_extractor import extract_lines

        assert extract_lines(_soup('<p align="right">x</p>'))[0].formatting.text_align == "right"
