"""Input validation helpers."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from comparison.errors import DocumentTooLargeError
from config.settings import settings

SUPPORTED_EXTENSIONS = {".html", ".htm", ".xhtml"}


def validate_html_path(path: str | os.PathLike) -> Path:
    html_path = Path(path)
    if not html_path.exists():
        raise ValueError(f"File not found: {html_path}")
    if html_path.suffix.lower() not in SUPPORTED_EXTENSIONS:
        raise ValueError(f"Unsupported file type: {html_path.suffix}")
    return html_path


def check_block_budget(count: int, side: Optional[str] = None, limit: Optional[int] = None) -> int:
    """Reject documents with more blocks than the configured cap (0 disables the cap)."""
    if limit is None:
        limit = settings.max_blocks
    if limit and count > limit:
        raise DocumentTooLargeError(count, limit, side=side)
    return count
