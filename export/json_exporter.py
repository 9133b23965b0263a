"""Export comparison results as JSON."""
from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from comparison.diff_classifier import get_report_summary
from comparison.models import ComparisonResult
from comparison.text_normalizer import DEFAULT_CONFIG
from utils.logging import logger


def document_info(name: Optional[str]) -> Dict[str, Any]:
    """Name of a compared document, plus size and mtime when it is a file on disk."""
    info: Dict[str, Any] = {"name": Path(name).name if name else None}
    if name and Path(name).is_file():
        stat = Path(name).stat()
        info["size"] = stat.st_size
        info["last_modified"] = datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc).isoformat()
    return info


def build_payload(
    result: ComparisonResult,
    left_name: Optional[str] = None,
    right_name: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    entries = result.detailed_report
    return {
        "metadata": {
            "export_date": datetime.now(timezone.utc).isoformat(),
            "left_document": document_info(left_name),
            "right_document": document_info(right_name),
            "normalization": DEFAULT_CONFIG.to_dict(),
            **(metadata or {}),
        },
        "summary": result.summary.to_dict(),
        "short_circuited": result.short_circuited,
        "report_summary": get_report_summary(entries),
        "detailed_report": [entry.to_dict() for entry in entries] if entries is not None else None,
        "structural_changes": [record.to_dict() for record in result.structural_changes],
        "failures": [
            {"side": failure.side, "location": failure.location, "message": failure.message}
            for failure in result.failures
        ],
        "comparison": {
            "left_content": result.left_html,
            "right_content": result.right_html,
        },
        "metrics": result.metrics,
    }


def export_json(
    result: ComparisonResult,
    output_path: str | Path,
    left_name: Optional[str] = None,
    right_name: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Path:
    """
    Export a comparison result as JSON.

    The payload carries document metadata, the summary counters, the
    detailed report (null when it was not requested), structural change
    records, annotation failures and both annotated documents as HTML.
    """
    output = Path(output_path)
    logger.info("Writing JSON comparison to %s", output)

    payload = build_payload(result, left_name, right_name, metadata)
    output.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
    return output
