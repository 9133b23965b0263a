from __future__ import annotations

import pytest

from comparison.diff_classifier import classify_modification, compute_similarity, get_report_summary
from comparison.models import DetailedReportEntry


@pytest.mark.parametrize(
    "old,new,expected",
    [
        ("a  b", "a b", "whitespace"),
        ("Hello World", "hello world", "case"),
        ("Hello, world.", "Hello world!", "punctuation"),
        ("The cat sat on the mat.", "The dog sat on the mat.", "text_modification"),
        ("1999", "abc", "semantic_change"),
    ],
)
def test_classify_modification(old, new, expected):
    subtype, similarity = classify_modification(old, new)
    assert subtype == expected
    assert 0.0 <= similarity <= 1.0


def test_similarity_uses_normalized_text():
    assert compute_similarity("Hello  World", "hello world") == 1.0
    assert compute_similarity("abc", "xyz") == 0.0


def test_semantic_threshold_follows_settings(monkeypatch):
    from config.settings import settings

    monkeypatch.setattr(settings, "semantic_change_threshold", 0.99)
    assert classify_modification("The cat sat.", "The dog sat.")[0] == "semantic_change"


def test_get_report_summary():
    entries = [
        DetailedReportEntry(kind="line", status="UNCHANGED"),
        DetailedReportEntry(kind="line", status="MODIFIED", subtype="text_modification"),
        DetailedReportEntry(kind="table_cell", status="MODIFIED", subtype="punctuation"),
        DetailedReportEntry(kind="image", status="ADDED"),
    ]
    summary = get_report_summary(entries)

    assert summary["total"] == 4
    assert summary["by_status"] == {"UNCHANGED": 1, "MODIFIED": 2, "ADDED": 1}
    assert summary["by_kind"] == {"line": 2, "table_cell": 1, "image": 1}
    assert summary["by_subtype"] == {"text_modification": 1, "punctuation": 1}


def test_get_report_summary_handles_missing_report():
    assert get_report_summary(None)["total"] == 0
