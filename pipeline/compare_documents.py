"""
Main orchestrator: block-level comparison of two documents.

Provides a single entrypoint that:
1. Clones both input trees (callers' trees are never mutated)
2. Extracts lines, images and tables from the clones
3. Short-circuits when both documents are the same after normalization
4. Aligns lines, diffs modified pairs word by word, compares formatting
5. Compares images and tables positionally
6. Annotates the clones in place and returns a ComparisonResult
"""
from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Generator, List, Optional

from bs4 import Tag

from comparison.cell_by_cell_table import (
    ParsedTable,
    compare_tables,
    extract_tables,
    missing_rows,
    summarize_table_changes,
)
from comparison.figure_comparison import Figure, compare_images, extract_images, summarize_image_changes
from comparison.formatting_comparison import compare_formatting
from comparison.line_alignment import align_lines
from comparison.markup import (
    apply_inline_plan,
    insert_placeholder,
    mark_cell,
    mark_image,
    mark_line,
    mark_row,
    mark_table,
    plan_inline_tokens,
    unwrap_loose_runs,
)
from comparison.models import (
    AlignedRun,
    AnnotationFailure,
    ComparisonResult,
    ComparisonSummary,
    DetailedReportEntry,
    Line,
    StructuralChangeRecord,
)
from comparison.text_comparison import count_changes, diff_text
from comparison.text_normalizer import compute_document_fingerprint
from config.settings import settings
from extraction.document_tree import clone_document, load_document
from extraction.line_extractor import extract_lines, line_skip_tags
from pipeline.detailed_report import cell_entry, image_entry, line_entry, table_entry, unchanged_cell_entry
from utils.logging import logger
from utils.performance import Timing, timings_to_dict, track_time
from utils.validation import check_block_budget


@dataclass
class PipelineConfig:
    """Per-call overrides; None falls back to the global settings."""

    detailed: Optional[bool] = None
    visible_whitespace: Optional[bool] = None
    max_blocks: Optional[int] = None

    @property
    def include_detailed_report(self) -> bool:
        return settings.detailed_report_default if self.detailed is None else self.detailed


@dataclass
class _DocumentView:
    """Everything extracted from one side's working copy."""
    root: Tag
    lines: List[Line]
    images: List[Figure]
    tables: List[ParsedTable]

    def fingerprint(self) -> str:
        cells = []
        for table in self.tables:
            cells.append((table.index, -1, -1, ""))
            cells.extend((table.index, c.row, c.col, c.text) for row in table.cells for c in row)
        return compute_document_fingerprint(
            (line.text for line in self.lines),
            (figure.locator for figure in self.images),
            cells,
            line_styles=(line.formatting.key for line in self.lines),
        )

    def release_loose_runs(self) -> None:
        """Drop the wrappers of loose inline runs that were not marked."""
        unwrap_loose_runs(self.root)


@dataclass
class _Annotation:
    """Mutable state of one comparison call."""
    left: _DocumentView
    right: _DocumentView
    detailed: bool
    visible_whitespace: Optional[bool]
    summary: ComparisonSummary = field(default_factory=ComparisonSummary)
    entries: List[DetailedReportEntry] = field(default_factory=list)
    failures: List[AnnotationFailure] = field(default_factory=list)

    def report(self, entry_factory, *args, **kwargs) -> None:
        if self.detailed:
            self.entries.append(entry_factory(*args, **kwargs))

    @contextmanager
    def guard(self, side: str, location: str) -> Generator[None, None, None]:
        """Record a failure for one item and carry on with the rest."""
        try:
            yield
        except Exception as exc:
            logger.warning("Annotation failed for %s (%s side): %s", location, side, exc)
            self.failures.append(AnnotationFailure(side=side, location=location, message=str(exc)))


class ComparisonPipeline:
    """
    Block-level document comparison pipeline.

    Usage:
        pipeline = ComparisonPipeline(PipelineConfig(detailed=False))
        result = pipeline.compare(left_html, right_html)
        print(result.summary.to_dict())

    The pipeline holds only its configuration, so one instance can serve
    concurrent calls.
    """

    def __init__(self, config: Optional[PipelineConfig] = None):
        self.config = config or PipelineConfig()

    def compare(self, left_tree: Any, right_tree: Any) -> ComparisonResult:
        """
        Compare two documents.

        Args:
            left_tree: Old version (HTML string/bytes or a BeautifulSoup tree)
            right_tree: New version

        Returns:
            ComparisonResult with both annotated working copies

        Raises:
            InvalidInputError: an input is missing or cannot be walked
            DocumentTooLargeError: an input has more blocks than allowed
        """
        logger.info("=== Starting comparison pipeline ===")
        timings: List[Timing] = []

        left_doc = load_document(left_tree, side="left")
        right_doc = load_document(right_tree, side="right")

        with track_time("extract", timings):
            left = self._extract(left_doc, "left")
            right = self._extract(right_doc, "right")
        logger.info(
            "Extracted left: %d lines, %d images, %d tables; right: %d lines, %d images, %d tables",
            len(left.lines), len(left.images), len(left.tables),
            len(right.lines), len(right.images), len(right.tables),
        )

        detailed = self.config.include_detailed_report
        if left.fingerprint() == right.fingerprint():
            logger.info("Documents are identical after normalization; skipping annotation")
            left.release_loose_runs()
            right.release_loose_runs()
            return ComparisonResult(
                left_annotated_tree=left.root,
                right_annotated_tree=right.root,
                detailed_report=[] if detailed else None,
                short_circuited=True,
                metrics=self._metrics(timings, left, right, runs=[]),
            )

        with track_time("align", timings):
            runs = align_lines(left.lines, right.lines)

        state = _Annotation(
            left=left,
            right=right,
            detailed=detailed,
            visible_whitespace=self.config.visible_whitespace,
        )
        with track_time("annotate_lines", timings):
            self._annotate_runs(state, runs)

        with track_time("structural", timings):
            table_records = compare_tables(left.tables, right.tables)
            image_records = compare_images(left.images, right.images)
            self._annotate_tables(state, table_records)
            self._annotate_images(state, image_records)
        left.release_loose_runs()
        right.release_loose_runs()

        result = ComparisonResult(
            left_annotated_tree=left.root,
            right_annotated_tree=right.root,
            summary=state.summary,
            detailed_report=state.entries if detailed else None,
            runs=runs,
            structural_changes=table_records + image_records,
            failures=state.failures,
            metrics=self._metrics(timings, left, right, runs),
        )

        logger.info("=== Pipeline complete ===")
        logger.info(
            "Summary: %d additions, %d deletions, %d changes",
            result.summary.additions, result.summary.deletions, result.summary.changes,
        )
        if state.failures:
            logger.warning("%d items could not be annotated", len(state.failures))
        return result

    def _extract(self, document: Tag, side: str) -> _DocumentView:
        root = clone_document(document)
        lines = extract_lines(root)
        check_block_budget(len(lines), side=side, limit=self.config.max_blocks)
        return _DocumentView(
            root=root,
            lines=lines,
            images=extract_images(root),
            tables=extract_tables(root),
        )

    @staticmethod
    def _metrics(timings: List[Timing], left: _DocumentView, right: _DocumentView, runs: List[AlignedRun]) -> dict:
        return {
            "timings": timings_to_dict(timings),
            "left_lines": len(left.lines),
            "right_lines": len(right.lines),
            "runs": len(runs),
        }

    # ------------------------------------------------------------------
    # Lines
    # ------------------------------------------------------------------

    def _annotate_runs(self, state: _Annotation, runs: List[AlignedRun]) -> None:
        """
        Walk runs in order, marking lines and filling gaps with placeholders.

        `left_prev` / `right_prev` track the last element emitted on each side
        so consecutive placeholders keep their relative order.
        """
        left_prev: Optional[Tag] = None
        right_prev: Optional[Tag] = None
        left_pos = right_pos = 0

        for run in runs:
            if run.kind == "inserted_only":
                for line in run.right_lines:
                    with state.guard("right", f"line R{line.sequence_index + 1}"):
                        mark_line(line.source_ref, "added")
                        left_prev = self._placeholder(state.left, line, "added", left_prev, left_pos)
                        state.summary.add(additions=1)
                        state.report(line_entry, "ADDED", right=line, visible_whitespace=state.visible_whitespace)
                    right_prev = line.source_ref
                right_pos += len(run.right_lines)
                continue

            if run.kind == "deleted_only":
                for line in run.left_lines:
                    with state.guard("left", f"line L{line.sequence_index + 1}"):
                        mark_line(line.source_ref, "removed")
                        right_prev = self._placeholder(state.right, line, "removed", right_prev, right_pos)
                        state.summary.add(deletions=1)
                        state.report(line_entry, "REMOVED", left=line, visible_whitespace=state.visible_whitespace)
                    left_prev = line.source_ref
                left_pos += len(run.left_lines)
                continue

            for left_line, right_line in run.pairs():
                location = f"line L{left_line.sequence_index + 1}/R{right_line.sequence_index + 1}"
                with state.guard("both", location):
                    if run.kind == "modified_pair":
                        self._annotate_modified(state, left_line, right_line)
                    else:
                        self._annotate_unchanged(state, left_line, right_line)
                left_prev = left_line.source_ref
                right_prev = right_line.source_ref
            left_pos += len(run.left_lines)
            right_pos += len(run.right_lines)

    @staticmethod
    def _placeholder(view: _DocumentView, missing: Line, kind: str, prev: Optional[Tag], pos: int) -> Tag:
        following = view.lines[pos].source_ref if prev is None and pos < len(view.lines) else None
        return insert_placeholder(view.root, missing.tag, kind, after=prev, before=following)

    def _annotate_modified(self, state: _Annotation, left_line: Line, right_line: Line) -> None:
        tokens = diff_text(left_line.text, right_line.text)
        skip_tags = line_skip_tags()
        # plan both sides before touching either tree
        left_plan = plan_inline_tokens(
            left_line.source_ref, tokens, "left",
            skip_tags=skip_tags, visible_whitespace=state.visible_whitespace,
        )
        right_plan = plan_inline_tokens(
            right_line.source_ref, tokens, "right",
            skip_tags=skip_tags, visible_whitespace=state.visible_whitespace,
        )
        apply_inline_plan(left_plan)
        apply_inline_plan(right_plan)
        mark_line(left_line.source_ref, "modified")
        mark_line(right_line.source_ref, "modified")

        additions, deletions = count_changes(tokens)
        state.summary.add(additions, deletions)
        state.report(
            line_entry, "MODIFIED", left_line, right_line,
            tokens=tokens,
            format_changes=compare_formatting(left_line, right_line),
            visible_whitespace=state.visible_whitespace,
        )

    def _annotate_unchanged(self, state: _Annotation, left_line: Line, right_line: Line) -> None:
        format_changes = compare_formatting(left_line, right_line)
        if not format_changes:
            state.report(line_entry, "UNCHANGED", left_line, right_line, visible_whitespace=state.visible_whitespace)
            return

        mark_line(left_line.source_ref, "formatting", format_changes)
        mark_line(right_line.source_ref, "formatting", format_changes)
        logger.debug(
            "Formatting-only change at L%d/R%d: %s",
            left_line.sequence_index + 1, right_line.sequence_index + 1, "; ".join(format_changes),
        )
        state.report(
            line_entry, "FORMATTING_ONLY", left_line, right_line,
            format_changes=format_changes,
            visible_whitespace=state.visible_whitespace,
        )

    # ------------------------------------------------------------------
    # Tables and images
    # ------------------------------------------------------------------

    def _annotate_tables(self, state: _Annotation, records: List[StructuralChangeRecord]) -> None:
        """
        Mark table changes and report every cell position of tables both sides have.

        Cells that match after normalization get an UNCHANGED row, like lines.
        Tables present on one side only follow as single table-level rows.
        """
        cell_records = {
            (record.index, record.row, record.col): record
            for record in records if record.element_type == "table_cell"
        }
        for t_idx in range(min(len(state.left.tables), len(state.right.tables))):
            left_table = state.left.tables[t_idx]
            right_table = state.right.tables[t_idx]
            for row in range(max(left_table.rows, right_table.rows)):
                for col in range(max(left_table.row_width(row), right_table.row_width(row))):
                    record = cell_records.get((t_idx, row, col))
                    if record is None:
                        state.report(
                            unchanged_cell_entry, t_idx, left_table.cell(row, col),
                            visible_whitespace=state.visible_whitespace,
                        )
                        continue
                    with state.guard(_record_side(record), f"table {t_idx} cell ({row}, {col})"):
                        self._annotate_cell(state, record, left_table, right_table)

        for record in records:
            if record.element_type != "table":
                continue
            with state.guard(_record_side(record), f"table {record.index}"):
                self._mark_table(state, record)
                state.summary.merge(summarize_table_changes([record]))
                state.report(table_entry, record)

    @staticmethod
    def _annotate_cell(
        state: _Annotation, record: StructuralChangeRecord, left_table: ParsedTable, right_table: ParsedTable,
    ) -> None:
        if record.status == "removed":
            mark_cell(left_table.cell(record.row, record.col).node, "removed")
            if record.row in missing_rows(left_table, right_table):
                mark_row(left_table.row_nodes[record.row], "removed")
        elif record.status == "added":
            mark_cell(right_table.cell(record.row, record.col).node, "added")
            if record.row in missing_rows(right_table, left_table):
                mark_row(right_table.row_nodes[record.row], "added")
        else:
            left_cell = left_table.cell(record.row, record.col).node
            right_cell = right_table.cell(record.row, record.col).node
            left_plan = plan_inline_tokens(left_cell, record.tokens, "left", visible_whitespace=state.visible_whitespace)
            right_plan = plan_inline_tokens(right_cell, record.tokens, "right", visible_whitespace=state.visible_whitespace)
            apply_inline_plan(left_plan)
            apply_inline_plan(right_plan)
            mark_cell(left_cell, "modified")
            mark_cell(right_cell, "modified")

        state.summary.merge(summarize_table_changes([record]))
        state.report(cell_entry, record, visible_whitespace=state.visible_whitespace)

    @staticmethod
    def _mark_table(state: _Annotation, record: StructuralChangeRecord) -> None:
        if record.status == "removed":
            mark_table(state.left.tables[record.index].node, "removed")
        else:
            mark_table(state.right.tables[record.index].node, "added")

    def _annotate_images(self, state: _Annotation, records: List[StructuralChangeRecord]) -> None:
        for record in records:
            with state.guard(_record_side(record), f"image {record.index}"):
                if record.status in ("removed", "modified"):
                    mark_image(state.left.images[record.index].node, record.status)
                if record.status in ("added", "modified"):
                    mark_image(state.right.images[record.index].node, record.status)
                state.summary.merge(summarize_image_changes([record]))
                state.report(image_entry, record)


def _record_side(record: StructuralChangeRecord) -> str:
    return {"removed": "left", "added": "right"}.get(record.status, "both")


def compare_blocks(left_tree: Any, right_tree: Any, *, detailed: Optional[bool] = None) -> ComparisonResult:
    """
    Compare two documents block by block.

    This is the main entrypoint for programmatic usage.

    Args:
        left_tree: Old version (HTML string/bytes or a BeautifulSoup tree)
        right_tree: New version
        detailed: Build the per-line detailed report
            (defaults to settings.detailed_report_default)

    Returns:
        ComparisonResult; the input trees are left untouched

    Example:
        from pipeline import compare_blocks

        result = compare_blocks("<p>The cat sat.</p>", "<p>The dog sat.</p>")
        print(result.summary.to_dict())   # {'additions': 1, 'deletions': 1, 'changes': 2}
        print(result.right_html)
    """
    return ComparisonPipeline(PipelineConfig(detailed=detailed)).compare(left_tree, right_tree)


__all__ = ["ComparisonPipeline", "PipelineConfig", "compare_blocks", "diff_text"]
