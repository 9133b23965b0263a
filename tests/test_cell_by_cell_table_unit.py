"""Unit tests for comparison/cell_by_cell_table.py."""
from __future__ import annotations

from bs4 import BeautifulSoup


def _tables(markup: str):
    from comparison.cell_by_cell_table import extract_tables

    return extract_tables(BeautifulSoup(markup, "html.parser"))


def _table(*rows) -> str:
    body = "".join("<tr>" + "".join(f"<td>{cell}</td>" for cell in row) + "</tr>" for row in rows)
    return f"<table>{body}</table>"


class TestParseTableStructure:
    def test_grid(self):
        [table] = _tables("<table><thead><tr><th>Name</th><th>Qty</th></tr></thead>"
                          "<tbody><tr><td>Apple</td><td>3</td></tr></tbody></table>")

        assert (table.rows, table.cols) == (2, 2)
        assert table.cell(1, 0).text == "Apple"
        assert table.cell(1, 1).node.name == "td"
        assert table.cell(5, 5) is None

    def test_ragged_rows(self):
        [table] = _tables(_table(["a", "b", "c"], ["d"]))
        assert table.cols == 3
        assert table.row_width(0) == 3
        assert table.row_width(1) == 1
        assert table.row_width(9) == 0

    def test_nested_tables_belong_to_their_cell(self):
        tables = _tables("<table><tr><td>outer<table><tr><td>inner</td></tr></table></td></tr></table>")

        assert len(tables) == 1
        assert tables[0].rows == 1
        assert tables[0].cell(0, 0).text == "outerinner"

    def test_tables_are_indexed_in_document_order(self):
        tables = _tables(_table(["a"]) + "<p>between</p>" + _table(["b"]))
        assert [t.index for t in tables] == [0, 1]


class TestCompareTables:
    def test_modified_cell_gets_inline_diff(self):
        from comparison.cell_by_cell_table import compare_tables

        records = compare_tables(_tables(_table(["Price", "10 EUR"])), _tables(_table(["Price", "12 EUR"])))

        assert len(records) == 1
        record = records[0]
        assert (record.element_type, record.status, record.row, record.col) == ("table_cell", "modified", 0, 1)
        assert record.identity == "0:0:1"
        assert [(t.text, t.status) for t in record.tokens] == [
            ("10", "removed"), ("12", "added"), (" EUR", "unchanged"),
        ]

    def test_normalized_equal_cells_are_unchanged(self):
        from comparison.cell_by_cell_table import compare_tables

        assert compare_tables(_tables(_table(["Hello  World"])), _tables(_table(["hello world"]))) == []

    def test_removed_row_and_added_cell(self):
        from comparison.cell_by_cell_table import compare_tables, missing_rows

        left = _tables(_table(["a", "b"], ["c", "d"]))
        right = _tables(_table(["a", "b", "e"]))

        records = compare_tables(left, right)
        assert [(r.status, r.row, r.col) for r in records] == [
            ("added", 0, 2),
            ("removed", 1, 0),
            ("removed", 1, 1),
        ]
        assert missing_rows(left[0], right[0]) == [1]
        assert missing_rows(right[0], left[0]) == []

    def test_whole_table_added_or_removed(self):
        from comparison.cell_by_cell_table import compare_tables

        one = _tables(_table(["a"]))
        two = _tables(_table(["a"]) + _table(["x", "y"]))

        added = compare_tables(one, two)
        assert [(r.element_type, r.index, r.status) for r in added] == [("table", 1, "added")]

        removed = compare_tables(two, one)
        assert [(r.element_type, r.index, r.status) for r in removed] == [("table", 1, "removed")]

    def test_reordered_rows_are_positional_modifications(self):
        from comparison.cell_by_cell_table import compare_tables

        records = compare_tables(_tables(_table(["a"], ["b"])), _tables(_table(["b"], ["a"])))
        assert [(r.status, r.row) for r in records] == [("modified", 0), ("modified", 1)]


def test_summarize_table_changes():
    from comparison.cell_by_cell_table import compare_tables, summarize_table_changes

    left = _tables(_table(["a", "10 EUR"], ["gone", "x"]))
    right = _tables(_table(["a", "12 EUR"]) + _table(["new"]))

    summary = summarize_table_changes(compare_tables(left, right))
    # modified cell: 1 added + 1 removed run; two removed cells; one added table
    assert (summary.additions, summary.deletions) == (2, 3)
    assert summary.changes == 5


def test_table_root_is_extracted():
    from comparison.cell_by_cell_table import extract_tables

    table = BeautifulSoup(_table(["a", "b"]), "html.parser").table
    [parsed] = extract_tables(table)
    assert parsed.node is table
    assert parsed.cell(0, 1).text == "b"
