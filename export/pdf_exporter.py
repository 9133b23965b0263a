"""Generate PDF comparison reports."""
from __future__ import annotations

import textwrap
from pathlib import Path
from typing import List

from bs4 import BeautifulSoup

from comparison.diff_classifier import get_report_summary
from comparison.models import ComparisonResult, DetailedReportEntry
from comparison.text_comparison import inline_class
from utils.logging import logger

_MARGIN = 72
_LINE_HEIGHT = 16
_WRAP_WIDTH = 90
_STATUS_COLORS = {
    "ADDED": (0, 0.5, 0),
    "REMOVED": (0.8, 0, 0),
    "MODIFIED": (0.75, 0.55, 0),
    "FORMATTING_ONLY": (0, 0.3, 0.8),
}


def plain_diff(markup: str) -> str:
    """Inline diff markup as plain text: removed runs as [-x-], added runs as {+x+}."""
    soup = BeautifulSoup(markup or "", "html.parser")
    for span in soup.find_all("span"):
        classes = span.get("class") or []
        if inline_class("removed") in classes:
            span.replace_with(f"[-{span.get_text()}-]")
        elif inline_class("added") in classes:
            span.replace_with(f"{{+{span.get_text()}+}}")
    return soup.get_text()


def _entry_label(entry: DetailedReportEntry) -> str:
    if entry.kind == "line":
        left = f"L{entry.left_line_number}" if entry.left_line_number is not None else "-"
        right = f"R{entry.right_line_number}" if entry.right_line_number is not None else "-"
        return f"{left}/{right}"
    where = ",".join(str(entry.location[key]) for key in ("table", "row", "col", "index") if entry.location.get(key) is not None)
    return f"{entry.kind}[{where}]"


class _Writer:
    """Writes text lines top to bottom, starting new pages as needed."""

    def __init__(self, doc):
        self.doc = doc
        self.page = None
        self.y_pos = 0
        self._new_page()

    def _new_page(self) -> None:
        self.page = self.doc.new_page()
        self.y_pos = _MARGIN

    def line(self, text: str, fontsize: float = 11, color=(0, 0, 0), indent: int = 0) -> None:
        if self.y_pos > self.page.rect.height - _MARGIN:
            self._new_page()
        self.page.insert_text((_MARGIN + indent, self.y_pos), text, fontsize=fontsize, color=color)
        self.y_pos += _LINE_HEIGHT

    def gap(self, lines: int = 1) -> None:
        self.y_pos += _LINE_HEIGHT * lines


def export_pdf(
    result: ComparisonResult,
    output_path: str | Path,
    left_name: str = "Original",
    right_name: str = "Modified",
) -> Path:
    """
    Generate a PDF report: summary counters followed by every changed entry
    of the detailed report.

    Args:
        result: ComparisonResult to report on
        output_path: Path to save the output PDF

    Returns:
        Path to the generated PDF
    """
    output = Path(output_path)
    logger.info("Generating PDF report -> %s", output)

    try:
        import fitz  # PyMuPDF
    except ImportError as exc:
        raise RuntimeError(
            "PyMuPDF is required for PDF export. Install via `pip install PyMuPDF`."
        ) from exc

    doc = fitz.open()
    writer = _Writer(doc)
    _add_summary(writer, result, left_name, right_name)

    entries: List[DetailedReportEntry] = [
        entry for entry in (result.detailed_report or []) if entry.status != "UNCHANGED"
    ]
    if entries:
        writer.gap()
        writer.line("Changes:", fontsize=14)
        for entry in entries:
            color = _STATUS_COLORS.get(entry.status, (0, 0, 0))
            writer.line(f"{_entry_label(entry)}  {entry.status.replace('_', '-')}", fontsize=11, color=color)
            for chunk in textwrap.wrap(plain_diff(entry.inline_diff_markup), _WRAP_WIDTH)[:6]:
                writer.line(chunk, fontsize=10, indent=18)
            for change in entry.format_changes:
                writer.line(change, fontsize=10, indent=18, color=_STATUS_COLORS["FORMATTING_ONLY"])

    doc.save(output)
    doc.close()

    logger.info("PDF report generated: %s", output)
    return output


def _add_summary(writer: _Writer, result: ComparisonResult, left_name: str, right_name: str) -> None:
    """Add the summary block at the top of the report."""
    writer.line("Document Comparison Report", fontsize=16)
    writer.gap()
    writer.line(f"Original: {left_name}", fontsize=12)
    writer.line(f"Modified: {right_name}", fontsize=12)
    writer.gap()

    summary = result.summary
    writer.line("Summary:", fontsize=14)
    writer.line(f"Additions: {summary.additions}")
    writer.line(f"Deletions: {summary.deletions}")
    writer.line(f"Total changes: {summary.changes}")

    report_summary = get_report_summary(result.detailed_report)
    if report_summary["by_status"]:
        writer.gap()
        writer.line("By status:", fontsize=12)
        for status, count in sorted(report_summary["by_status"].items()):
            writer.line(f"{status}: {count}", indent=18)
    if result.failures:
        writer.gap()
        writer.line(f"Items that could not be annotated: {len(result.failures)}", color=(0.8, 0, 0))
