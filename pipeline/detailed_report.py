"""Builders for detailed report entries (one per line, cell, table or image)."""
from __future__ import annotations

from typing import List, Optional

from comparison.cell_by_cell_table import TableCell
from comparison.diff_classifier import classify_modification
from comparison.figure_comparison import short_locator
from comparison.models import DetailedReportEntry, Line, LineStatus, StructuralChangeRecord, WordToken
from comparison.text_comparison import render_tokens

_STRUCTURAL_STATUS = {"added": "ADDED", "removed": "REMOVED", "modified": "MODIFIED"}


def _markup(tokens: List[WordToken], visible_whitespace: Optional[bool]) -> str:
    return render_tokens(tokens, visible_whitespace=visible_whitespace, whitespace_everywhere=True)


def line_entry(
    status: LineStatus,
    left: Optional[Line] = None,
    right: Optional[Line] = None,
    tokens: Optional[List[WordToken]] = None,
    format_changes: Optional[List[str]] = None,
    visible_whitespace: Optional[bool] = None,
) -> DetailedReportEntry:
    """
    Report row for one aligned line position.

    Line numbers are 1-based. Without explicit tokens the markup shows the
    present side's whole text with the status implied by `status`.
    """
    if tokens is None:
        if status == "ADDED":
            tokens = [WordToken(right.text, "added")]
        elif status == "REMOVED":
            tokens = [WordToken(left.text, "removed")]
        else:
            tokens = [WordToken((left or right).text, "unchanged")]
    tokens = [token for token in tokens if token.text]

    entry = DetailedReportEntry(
        kind="line",
        status=status,
        left_line_number=left.sequence_index + 1 if left is not None else None,
        right_line_number=right.sequence_index + 1 if right is not None else None,
        inline_diff_markup=_markup(tokens, visible_whitespace),
        format_changes=list(format_changes or []),
        location={"tag": (left or right).tag},
    )
    if status == "MODIFIED" and left is not None and right is not None:
        entry.subtype, entry.similarity = classify_modification(left.text, right.text)
    return entry


def cell_entry(record: StructuralChangeRecord, visible_whitespace: Optional[bool] = None) -> DetailedReportEntry:
    if record.status == "modified":
        tokens = record.tokens
    elif record.status == "added":
        tokens = [WordToken(record.new_text or "", "added")]
    else:
        tokens = [WordToken(record.old_text or "", "removed")]
    tokens = [token for token in tokens if token.text]

    entry = DetailedReportEntry(
        kind="table_cell",
        status=_STRUCTURAL_STATUS[record.status],
        inline_diff_markup=_markup(tokens, visible_whitespace),
        location={"table": record.index, "row": record.row, "col": record.col},
    )
    if record.status == "modified":
        entry.subtype, entry.similarity = classify_modification(record.old_text, record.new_text)
    return entry


def table_entry(record: StructuralChangeRecord) -> DetailedReportEntry:
    return DetailedReportEntry(
        kind="table",
        status=_STRUCTURAL_STATUS[record.status],
        location={"table": record.index},
    )


def image_entry(record: StructuralChangeRecord) -> DetailedReportEntry:
    """Image rows show the locator change; long data URIs are shortened."""
    tokens = []
    if record.old_text is not None:
        tokens.append(WordToken(short_locator(record.old_text), "removed"))
    if record.new_text is not None:
        tokens.append(WordToken(short_locator(record.new_text), "added"))
    return DetailedReportEntry(
        kind="image",
        status=_STRUCTURAL_STATUS[record.status],
        inline_diff_markup=render_tokens([token for token in tokens if token.text], visible_whitespace=False),
        location={"index": record.index, "old": record.old_text, "new": record.new_text},
    )


def unchanged_cell_entry(
    table_index: int, cell: TableCell, visible_whitespace: Optional[bool] = None,
) -> DetailedReportEntry:
    """Row for a cell whose text matches on both sides."""
    tokens = [WordToken(cell.text, "unchanged")] if cell.text else []
    return DetailedReportEntry(
        kind="table_cell",
        status="UNCHANGED",
        inline_diff_markup=_markup(tokens, visible_whitespace),
        location={"table": table_index, "row": cell.row, "col": cell.col},
    )
