"""Classify modified lines and cells for the detailed report."""
from __future__ import annotations

import re
from typing import List, Optional, Tuple

from rapidfuzz import fuzz

from comparison.models import DetailedReportEntry
from comparison.text_normalizer import normalize
from config.settings import settings


def classify_modification(old_text: str, new_text: str) -> Tuple[str, float]:
    """
    Rule-based subtype for a text modification.

    Subtypes, checked in order: whitespace, case, punctuation, then
    text_modification or semantic_change depending on similarity.
    Reporting only; alignment never looks at this.

    Returns:
        (subtype, similarity in [0, 1])
    """
    old_text = old_text or ""
    new_text = new_text or ""
    similarity = compute_similarity(old_text, new_text)

    if _is_whitespace_only_change(old_text, new_text):
        return "whitespace", similarity
    if _is_case_only_change(old_text, new_text):
        return "case", similarity
    if _is_punctuation_only_change(old_text, new_text):
        return "punctuation", similarity
    if similarity < settings.semantic_change_threshold:
        return "semantic_change", similarity
    return "text_modification", similarity


def compute_similarity(text_a: str, text_b: str) -> float:
    """Normalized-text similarity in [0, 1]."""
    return round(fuzz.ratio(normalize(text_a), normalize(text_b)) / 100.0, 4)


def _is_whitespace_only_change(text_a: str, text_b: str) -> bool:
    return text_a != text_b and "".join(text_a.split()) == "".join(text_b.split())


def _is_case_only_change(text_a: str, text_b: str) -> bool:
    return text_a != text_b and text_a.lower() == text_b.lower()


def _is_punctuation_only_change(text_a: str, text_b: str) -> bool:
    """Check if the only difference is punctuation."""
    text_a_clean = re.sub(r"[^\w\s]", "", text_a)
    text_b_clean = re.sub(r"[^\w\s]", "", text_b)
    return normalize(text_a_clean) == normalize(text_b_clean) and text_a != text_b


def get_report_summary(entries: Optional[List[DetailedReportEntry]]) -> dict:
    """Generate a summary of detailed report entries."""
    entries = entries or []
    summary = {
        "total": len(entries),
        "by_status": {},
        "by_kind": {},
        "by_subtype": {},
    }

    for entry in entries:
        summary["by_status"][entry.status] = summary["by_status"].get(entry.status, 0) + 1
        summary["by_kind"][entry.kind] = summary["by_kind"].get(entry.kind, 0) + 1
        if entry.subtype:
            summary["by_subtype"][entry.subtype] = summary["by_subtype"].get(entry.subtype, 0) + 1

    return summary
