"""Block formatting difference detection."""
from __future__ import annotations

from typing import List, Tuple

from comparison.models import Formatting, Line

# (dataclass field, name used in change descriptors)
FORMAT_ATTRIBUTES: Tuple[Tuple[str, str], ...] = (
    ("bold", "bold"),
    ("italic", "italic"),
    ("underline", "underline"),
    ("font_size", "fontSize"),
    ("text_align", "textAlign"),
)


def compare_formatting(line_a: Line, line_b: Line) -> List[str]:
    """
    Compare formatting of two lines whose text is already known to match.

    Each attribute is compared on its own; text content plays no part.

    Returns:
        Descriptors like "bold: off → on", one per differing attribute,
        in a fixed attribute order
    """
    return compare_styles(line_a.formatting, line_b.formatting)


def compare_styles(style_a: Formatting, style_b: Formatting) -> List[str]:
    changes: List[str] = []
    for field_name, label in FORMAT_ATTRIBUTES:
        old = style_a.describe(field_name)
        new = style_b.describe(field_name)
        if old != new:
            changes.append(f"{label}: {old} → {new}")
    return changes
