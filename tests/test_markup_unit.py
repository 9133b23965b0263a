from __future__ import annotations

import pytest
from bs4 import BeautifulSoup

from comparison.markup import (
    add_class,
    apply_inline_plan,
    css_class,
    insert_placeholder,
    mark_line,
    plan_inline_tokens,
    unwrap_loose_runs,
)
from comparison.text_comparison import diff_text


def _soup(markup: str) -> BeautifulSoup:
    return BeautifulSoup(markup, "html.parser")


def _apply(node, tokens, side, **kwargs) -> int:
    return apply_inline_plan(plan_inline_tokens(node, tokens, side, **kwargs))


def test_css_class_uses_prefix(monkeypatch):
    from config.settings import settings

    assert css_class("line", "added") == "diff-line-added"
    monkeypatch.setattr(settings, "css_class_prefix", "cmp")
    assert css_class("cell", "removed") == "cmp-cell-removed"


def test_add_class_keeps_existing_and_is_idempotent():
    soup = _soup('<p class="lead">x</p>')
    para = soup.p
    add_class(para, "diff-line-added")
    add_class(para, "diff-line-added")
    assert para["class"] == ["lead", "diff-line-added"]


def test_mark_line_records_format_changes():
    soup = _soup("<p>Note</p>")
    mark_line(soup.p, "formatting", ["bold: off → on", "fontSize: unset → 14pt"])
    assert soup.p["class"] == ["diff-line-formatting"]
    assert soup.p["data-diff-format"] == "bold: off → on; fontSize: unset → 14pt"


class TestApplyInline:
    def test_left_side_shows_only_removed_words(self):
        soup = _soup("<p>The cat sat.</p>")
        tokens = diff_text("The cat sat.", "The dog sat.")

        inserted = _apply(soup.p, tokens, "left", visible_whitespace=False)

        assert inserted == 1
        assert str(soup.p) == '<p>The <span class="diff-inline-removed">cat</span> sat.</p>'

    def test_right_side_shows_only_added_words(self):
        soup = _soup("<p>The dog sat.</p>")
        tokens = diff_text("The cat sat.", "The dog sat.")

        _apply(soup.p, tokens, "right", visible_whitespace=False)

        assert str(soup.p) == '<p>The <span class="diff-inline-added">dog</span> sat.</p>'

    def test_nested_formatting_is_preserved(self):
        soup = _soup("<p>Hello <b>big world</b>!</p>")
        tokens = diff_text("Hello big world!", "Hello small world!")

        _apply(soup.p, tokens, "left", visible_whitespace=False)

        assert str(soup.p) == '<p>Hello <b><span class="diff-inline-removed">big</span> world</b>!</p>'
        assert soup.p.get_text() == "Hello big world!"

    def test_run_crossing_element_boundary_is_split(self):
        soup = _soup("<p>one <i>two</i> three</p>")
        tokens = diff_text("one two three", "")

        assert _apply(soup.p, tokens, "left", visible_whitespace=False) == 3
        assert soup.p.get_text() == "one two three"
        assert len(soup.p.find_all("span", class_="diff-inline-removed")) == 3

    def test_whitespace_glyphs_in_changed_runs(self):
        soup = _soup("<p>a  b</p>")
        tokens = diff_text("a b", "a  b")

        _apply(soup.p, tokens, "right", visible_whitespace=True)

        assert soup.p.find("span").string == "··"

    def test_mismatched_tokens_raise(self):
        soup = _soup("<p>Something else</p>")
        with pytest.raises(ValueError):
            _apply(soup.p, diff_text("The cat", "The dog"), "left")

    def test_skip_tags_limit_the_text(self):
        soup = _soup("<div>Intro <table><tr><td>cell</td></tr></table></div>")
        tokens = diff_text("Intro ", "Outro ")

        _apply(soup.div, tokens, "left", skip_tags={"table", "tr", "td"}, visible_whitespace=False)

        assert soup.td.string == "cell"
        assert soup.find("span", class_="diff-inline-removed").string == "Intro"


class TestInsertPlaceholder:
    def test_after_anchor_and_ordering(self):
        soup = _soup("<p>A</p><p>D</p>")
        first = soup.find_all("p")[0]

        ph1 = insert_placeholder(soup, "h2", "added", after=first)
        insert_placeholder(soup, "p", "added", after=ph1)

        tags = [(el.name, el.get("data-diff-placeholder")) for el in soup.find_all(True)]
        assert tags == [("p", None), ("h2", "added"), ("p", "added"), ("p", None)]
        assert ph1["class"] == "diff-placeholder" or ph1["class"] == ["diff-placeholder"]

    def test_before_anchor_when_nothing_precedes(self):
        soup = _soup("<p>B</p>")
        insert_placeholder(soup, "p", "removed", before=soup.p)
        assert soup.find_all("p")[0].get("data-diff-placeholder") == "removed"

    def test_appends_to_empty_document(self):
        soup = _soup("")
        insert_placeholder(soup, "li", "added")
        assert str(soup) == '<li class="diff-placeholder" data-diff-placeholder="added"></li>'


class TestInlinePlan:
    def test_planning_leaves_the_tree_untouched(self):
        soup = _soup("<p>The cat sat.</p>")
        plan = plan_inline_tokens(soup.p, diff_text("The cat sat.", "The dog sat."), "left")

        assert str(soup) == "<p>The cat sat.</p>"
        assert plan.span_count == 1
        assert apply_inline_plan(plan) == 1
        assert soup.p.span.string == "cat"

    def test_mismatch_is_raised_before_anything_changes(self):
        left = _soup("<p>The cat sat.</p>")
        right = _soup("<p>Something else</p>")
        tokens = diff_text("The cat sat.", "The dog sat.")

        plan_inline_tokens(left.p, tokens, "left")
        with pytest.raises(ValueError, match="right text"):
            plan_inline_tokens(right.p, tokens, "right")
        assert str(left) == "<p>The cat sat.</p>"


class TestUnwrapLooseRuns:
    def test_unmarked_wrappers_are_removed(self):
        from extraction.line_extractor import extract_lines

        soup = _soup("<div>Intro <b>x</b><p>Body</p>Tail</div>")
        before = str(soup)
        extract_lines(soup)
        assert str(soup) != before

        assert unwrap_loose_runs(soup) == 2
        assert str(soup) == before

    def test_marked_wrappers_stay_as_plain_spans(self):
        from extraction.line_extractor import extract_lines

        soup = _soup("<div>Intro<p>Body</p></div>")
        lines = extract_lines(soup)
        mark_line(lines[0].source_ref, "added")

        assert unwrap_loose_runs(soup) == 0
        assert str(soup) == '<div><span class="diff-line-added">Intro</span><p>Body</p></div>'
