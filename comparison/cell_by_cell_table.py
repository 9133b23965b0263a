"""Cell-by-cell table comparison with strictly positional identity."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from bs4 import Tag

from comparison.models import ComparisonSummary, StructuralChangeRecord
from comparison.text_comparison import count_changes, diff_text
from comparison.text_normalizer import normalize
from config.settings import settings
from extraction.document_tree import children, is_inside, iter_elements, tag, text
from utils.logging import logger


@dataclass
class TableCell:
    """Represents a single table cell."""
    row: int
    col: int
    text: str
    node: Optional[Tag] = None

    @property
    def normalized_text(self) -> str:
        return normalize(self.text)


@dataclass
class ParsedTable:
    """Represents a parsed table structure."""
    index: int
    rows: int
    cols: int
    cells: List[List[TableCell]]  # cells[row][col]; rows may be ragged
    row_nodes: List[Tag] = field(default_factory=list)
    node: Optional[Tag] = None

    def cell(self, row: int, col: int) -> Optional[TableCell]:
        if row < len(self.cells) and col < len(self.cells[row]):
            return self.cells[row][col]
        return None

    def row_width(self, row: int) -> int:
        return len(self.cells[row]) if row < len(self.cells) else 0


def parse_table_structure(table_elem: Tag, index: int = 0) -> ParsedTable:
    """
    Parse an HTML table element into a grid.

    Rows of nested tables are not part of the outer grid; a nested table's
    text still counts towards the text of the cell that contains it.

    Args:
        table_elem: <table> element
        index: Position of the table among the document's tables

    Returns:
        ParsedTable with rows in document order (thead, tbody, tfoot as written)
    """
    ignored_tags = settings.ignored_tags
    row_nodes = [row for row in iter_elements(table_elem) if tag(row) == "tr" and _owning_table(row) is table_elem]

    cells: List[List[TableCell]] = []
    for row_idx, row_elem in enumerate(row_nodes):
        row_cells: List[TableCell] = []
        for cell_elem in children(row_elem):
            if tag(cell_elem) not in ("td", "th"):
                continue
            cell_text = text(cell_elem, ignored_tags)
            row_cells.append(TableCell(row=row_idx, col=len(row_cells), text=cell_text, node=cell_elem))
        cells.append(row_cells)

    cols = max((len(row) for row in cells), default=0)
    return ParsedTable(
        index=index,
        rows=len(cells),
        cols=cols,
        cells=cells,
        row_nodes=row_nodes,
        node=table_elem,
    )


def _owning_table(node: Tag) -> Optional[Tag]:
    for parent in node.parents:
        if tag(parent) == "table":
            return parent
    return None


def extract_tables(root: Tag) -> List[ParsedTable]:
    """Top-level tables of a document in order; nested tables belong to their cell."""
    tables: List[ParsedTable] = []
    for node in [root, *iter_elements(root)]:
        if tag(node) != "table" or is_inside(node, ("table",)):
            continue
        tables.append(parse_table_structure(node, index=len(tables)))
    logger.debug("Extracted %d tables", len(tables))
    return tables


def compare_tables(left_tables: List[ParsedTable], right_tables: List[ParsedTable]) -> List[StructuralChangeRecord]:
    """
    Compare two documents' tables by position.

    A table present on one side only is a single table-level event; its
    cells are not reported individually.

    Returns:
        Table and cell change records ordered by table, row, column
    """
    records: List[StructuralChangeRecord] = []
    for t_idx in range(max(len(left_tables), len(right_tables))):
        left = left_tables[t_idx] if t_idx < len(left_tables) else None
        right = right_tables[t_idx] if t_idx < len(right_tables) else None

        if right is None:
            records.append(StructuralChangeRecord(
                element_type="table", index=t_idx, status="removed", identity=str(t_idx),
            ))
        elif left is None:
            records.append(StructuralChangeRecord(
                element_type="table", index=t_idx, status="added", identity=str(t_idx),
            ))
        else:
            records.extend(compare_tables_cell_by_cell(left, right))

    if records:
        logger.info("Detected %d table changes", len(records))
    return records


def compare_tables_cell_by_cell(table_a: ParsedTable, table_b: ParsedTable) -> List[StructuralChangeRecord]:
    """
    Compare two tables cell by cell at identical (row, col) coordinates.

    Cells are never matched by content across positions, so a reordered row
    shows up as modified cells.
    """
    records: List[StructuralChangeRecord] = []
    t_idx = table_a.index

    for row_idx in range(max(table_a.rows, table_b.rows)):
        for col_idx in range(max(table_a.row_width(row_idx), table_b.row_width(row_idx))):
            cell_a = table_a.cell(row_idx, col_idx)
            cell_b = table_b.cell(row_idx, col_idx)
            identity = f"{t_idx}:{row_idx}:{col_idx}"

            if cell_b is None:
                records.append(StructuralChangeRecord(
                    element_type="table_cell", index=t_idx, status="removed", identity=identity,
                    row=row_idx, col=col_idx, old_text=cell_a.text,
                ))
            elif cell_a is None:
                records.append(StructuralChangeRecord(
                    element_type="table_cell", index=t_idx, status="added", identity=identity,
                    row=row_idx, col=col_idx, new_text=cell_b.text,
                ))
            elif cell_a.normalized_text != cell_b.normalized_text:
                records.append(StructuralChangeRecord(
                    element_type="table_cell", index=t_idx, status="modified", identity=identity,
                    row=row_idx, col=col_idx, old_text=cell_a.text, new_text=cell_b.text,
                    tokens=diff_text(cell_a.text, cell_b.text),
                ))

    if table_a.rows != table_b.rows or table_a.cols != table_b.cols:
        logger.debug(
            "Table %d structure changed: %dx%d -> %dx%d",
            t_idx, table_a.rows, table_a.cols, table_b.rows, table_b.cols,
        )
    return records


def missing_rows(table_a: ParsedTable, table_b: ParsedTable) -> List[int]:
    """Row indices of `table_a` with no row at all in `table_b`."""
    return list(range(table_b.rows, table_a.rows))


def summarize_table_changes(records: List[StructuralChangeRecord]) -> ComparisonSummary:
    """Whole tables and one-sided cells count once; modified cells count their changed runs."""
    summary = ComparisonSummary()
    for record in records:
        if record.element_type not in ("table", "table_cell"):
            continue
        if record.status == "added":
            summary.add(additions=1)
        elif record.status == "removed":
            summary.add(deletions=1)
        else:
            additions, deletions = count_changes(record.tokens)
            summary.add(additions, deletions)
    return summary
