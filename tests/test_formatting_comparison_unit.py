from __future__ import annotations

from comparison.models import Formatting, Line


def _line(text: str, **formatting) -> Line:
    return Line(text=text, formatting=Formatting(**formatting))


def test_bold_added():
    from comparison.formatting_comparison import compare_formatting

    assert compare_formatting(_line("Note"), _line("Note", bold=True)) == ["bold: off → on"]


def test_each_attribute_reported_independently_in_fixed_order():
    from comparison.formatting_comparison import compare_formatting

    old = _line("x", italic=True, font_size="12pt")
    new = _line("x", underline=True, font_size="14pt", text_align="center")

    assert compare_formatting(old, new) == [
        "italic: on → off",
        "underline: off → on",
        "fontSize: 12pt → 14pt",
        "textAlign: unset → center",
    ]


def test_identical_formatting_yields_nothing():
    from comparison.formatting_comparison import compare_formatting

    assert compare_formatting(_line("a", bold=True), _line("b", bold=True)) == []


def test_formatting_key_is_stable():
    assert Formatting().key == "off|off|off|unset|unset"
    assert Formatting(bold=True, font_size="9pt").key == "on|off|off|9pt|unset"
