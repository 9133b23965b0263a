"""Compare two HTML documents block by block and print the summary."""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from comparison.diff_classifier import get_report_summary
from comparison.errors import InvalidInputError
from config.settings import settings
from export import export_html, export_json, export_pdf
from pipeline import ComparisonPipeline, PipelineConfig
from utils.logging import configure_logging, logger
from utils.validation import validate_html_path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("left", help="Original HTML document")
    parser.add_argument("right", help="Modified HTML document")
    parser.add_argument("--json", dest="json_out", help="Write the full result as JSON")
    parser.add_argument("--html", dest="html_out", help="Write a side-by-side HTML report")
    parser.add_argument("--pdf", dest="pdf_out", help="Write a PDF report")
    parser.add_argument("--no-detail", action="store_true", help="Skip the per-line detailed report")
    parser.add_argument("--plain-whitespace", action="store_true", help="Do not render whitespace glyphs in changed runs")
    parser.add_argument("--max-blocks", type=int, default=None, help="Reject documents with more blocks (0 = no limit)")
    parser.add_argument("--log-level", default=settings.log_level)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    try:
        left_path = validate_html_path(args.left)
        right_path = validate_html_path(args.right)
    except ValueError as exc:
        logger.error("%s", exc)
        return 2

    config = PipelineConfig(
        detailed=not args.no_detail,
        visible_whitespace=False if args.plain_whitespace else None,
        max_blocks=args.max_blocks,
    )
    try:
        result = ComparisonPipeline(config).compare(
            left_path.read_text(encoding="utf-8"),
            right_path.read_text(encoding="utf-8"),
        )
    except InvalidInputError as exc:
        logger.error("Comparison failed: %s", exc)
        return 2

    if args.json_out:
        export_json(result, args.json_out, left_name=str(left_path), right_name=str(right_path))
    if args.html_out:
        export_html(result, args.html_out, left_name=left_path.name, right_name=right_path.name)
    if args.pdf_out:
        export_pdf(result, args.pdf_out, left_name=left_path.name, right_name=right_path.name)

    output = {"summary": result.summary.to_dict()}
    if result.detailed_report is not None:
        output["report"] = get_report_summary(result.detailed_report)
    if result.failures:
        output["failures"] = len(result.failures)
    print(json.dumps(output, ensure_ascii=False, indent=2))

    timings = result.metrics.get("timings", {})
    logger.debug("Timings: %s", timings)
    return 0


if __name__ == "__main__":
    sys.exit(main())
