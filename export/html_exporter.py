"""Standalone side-by-side HTML report."""
from __future__ import annotations

import html
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from bs4 import Tag

from comparison.models import ComparisonResult, DetailedReportEntry
from config.settings import settings
from utils.logging import logger


def diff_stylesheet(prefix: Optional[str] = None) -> str:
    """CSS for every class the annotator emits."""
    p = prefix or settings.css_class_prefix
    return f"""
        .{p}-line-added, .{p}-cell-added, .{p}-row-added > td, .{p}-row-added > th {{ background: #e6ffed; }}
        .{p}-line-removed, .{p}-cell-removed, .{p}-row-removed > td, .{p}-row-removed > th {{ background: #ffeef0; }}
        .{p}-line-modified, .{p}-cell-modified {{ background: #fffbdd; }}
        .{p}-line-formatting {{ background: #f1f8ff; border-left: 3px solid #0366d6; }}
        .{p}-inline-added {{ background: #acf2bd; color: #155724; }}
        .{p}-inline-removed {{ background: #fdb8c0; color: #721c24; text-decoration: line-through; }}
        .{p}-placeholder {{ min-height: 1.2em; background: repeating-linear-gradient(45deg, #fafbfc, #fafbfc 4px, #eaecef 4px, #eaecef 8px); }}
        .{p}-table-added {{ outline: 3px solid #28a745; }}
        .{p}-table-removed {{ outline: 3px solid #d73a49; }}
        .{p}-image-added {{ outline: 3px solid #28a745; }}
        .{p}-image-removed {{ outline: 3px solid #d73a49; }}
        .{p}-image-modified {{ outline: 3px solid #dbab09; }}
    """


def _panel_content(tree) -> str:
    """Body content of an annotated tree, or the whole fragment."""
    body = tree.find("body") if isinstance(tree, Tag) else None
    if body is not None:
        return body.decode_contents()
    return str(tree)


def _report_rows(entries: List[DetailedReportEntry]) -> str:
    rows = []
    for entry in entries:
        if entry.kind == "line":
            left = entry.left_line_number if entry.left_line_number is not None else ""
            right = entry.right_line_number if entry.right_line_number is not None else ""
        else:
            where = ", ".join(f"{key} {value}" for key, value in entry.location.items() if key in ("table", "row", "col", "index"))
            left, right = html.escape(f"{entry.kind}: {where}"), ""
        changes = "<br>".join(html.escape(change) for change in entry.format_changes)
        rows.append(
            f"<tr class=\"status-{entry.status.lower()}\"><td>{left}</td><td>{right}</td>"
            f"<td>{entry.status.replace('_', '-')}</td><td class=\"inline\">{entry.inline_diff_markup}</td>"
            f"<td>{changes}</td></tr>"
        )
    return "\n".join(rows)


def render_html_report(
    result: ComparisonResult,
    left_name: str = "Original",
    right_name: str = "Modified",
) -> str:
    summary = result.summary
    detailed = ""
    if result.detailed_report:
        detailed = f"""
    <div class="report">
        <h2>Detailed report</h2>
        <table>
            <thead><tr><th>v1</th><th>v2</th><th>Status</th><th>Inline diff (spaces visible)</th><th>Format changes</th></tr></thead>
            <tbody>
{_report_rows(result.detailed_report)}
            </tbody>
        </table>
    </div>"""

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Document Comparison Report</title>
    <style>
        body {{ font-family: Arial, sans-serif; margin: 20px; }}
        .header {{ text-align: center; margin-bottom: 30px; }}
        .summary {{ background: #f5f5f5; padding: 20px; border-radius: 8px; margin-bottom: 30px; }}
        .documents {{ display: grid; grid-template-columns: 1fr 1fr; gap: 20px; }}
        .document {{ border: 1px solid #ddd; border-radius: 8px; overflow: hidden; }}
        .document-header {{ background: #f8f9fa; padding: 15px; font-weight: bold; }}
        .document-content {{ padding: 20px; max-height: 600px; overflow-y: auto; }}
        .report table {{ border-collapse: collapse; width: 100%; margin-top: 30px; }}
        .report td, .report th {{ border: 1px solid #ddd; padding: 4px 8px; vertical-align: top; }}
        .report td.inline {{ font-family: monospace; white-space: pre-wrap; }}
        @media (max-width: 768px) {{ .documents {{ grid-template-columns: 1fr; }} }}
{diff_stylesheet()}
    </style>
</head>
<body>
    <div class="header">
        <h1>Document Comparison Report</h1>
        <p>Generated on {datetime.now().strftime("%Y-%m-%d %H:%M:%S")}</p>
    </div>

    <div class="summary">
        <h2>Summary</h2>
        <p><strong>Additions:</strong> {summary.additions}</p>
        <p><strong>Deletions:</strong> {summary.deletions}</p>
        <p><strong>Total Changes:</strong> {summary.changes}</p>
    </div>

    <div class="documents">
        <div class="document">
            <div class="document-header">Original: {html.escape(left_name)}</div>
            <div class="document-content">{_panel_content(result.left_annotated_tree)}</div>
        </div>
        <div class="document">
            <div class="document-header">Modified: {html.escape(right_name)}</div>
            <div class="document-content">{_panel_content(result.right_annotated_tree)}</div>
        </div>
    </div>
{detailed}
</body>
</html>
"""


def export_html(
    result: ComparisonResult,
    output_path: str | Path,
    left_name: str = "Original",
    right_name: str = "Modified",
) -> Path:
    """Write a standalone side-by-side HTML report."""
    output = Path(output_path)
    logger.info("Writing HTML report to %s", output)
    output.write_text(render_html_report(result, left_name, right_name), encoding="utf-8")
    return output
