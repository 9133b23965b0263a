from __future__ import annotations

import pytest

from utils.validation import check_block_budget, validate_html_path


class TestValidateHtmlPath:
    def test_accepts_html_files(self, tmp_path):
        doc = tmp_path / "doc.HTML"
        doc.write_text("<p>x</p>", encoding="utf-8")
        assert validate_html_path(str(doc)) == doc

    def test_missing_file(self, tmp_path):
        with pytest.raises(ValueError, match="File not found"):
            validate_html_path(tmp_path / "missing.html")

    def test_unsupported_extension(self, tmp_path):
        doc = tmp_path / "doc.pdf"
        doc.write_bytes(b"%PDF")
        with pytest.raises(ValueError, match="Unsupported file type"):
            validate_html_path(doc)


class TestCheckBlockBudget:
    def test_within_limit(self):
        assert check_block_budget(10, limit=10) == 10

    def test_over_limit(self):
        from comparison.errors import DocumentTooLargeError

        with pytest.raises(DocumentTooLargeError) as exc_info:
            check_block_budget(11, side="left", limit=10)
        assert exc_info.value.count == 11
        assert exc_info.value.limit == 10
        assert str(exc_info.value) == "left document: 11 blocks exceeds the limit of 10"

    def test_zero_disables_the_cap(self):
        assert check_block_budget(10**6, limit=0) == 10**6

    def test_defaults_to_settings(self, monkeypatch):
        from comparison.errors import DocumentTooLargeError
        from config.settings import settings

        monkeypatch.setattr(settings, "max_blocks", 3)
        with pytest.raises(DocumentTooLargeError):
            check_block_budget(4)
