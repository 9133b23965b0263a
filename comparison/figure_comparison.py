"""Image comparison by position and source locator."""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from bs4 import Tag

from comparison.errors import UnsupportedStructureError
from comparison.models import ComparisonSummary, StructuralChangeRecord
from config.settings import settings
from extraction.document_tree import attr, iter_elements, tag
from utils.logging import logger


@dataclass
class Figure:
    """An image element of a document."""
    index: int
    locator: str
    node: Optional[Tag] = None


def classify_structural_element(node: Tag) -> Optional[str]:
    """
    Return "image" or "table" for supported structural elements, None otherwise.

    Raises:
        UnsupportedStructureError: for embedded objects that would need a
            structural identity but cannot be given one
    """
    name = tag(node)
    if name == "img":
        return "image"
    if name == "table":
        return "table"
    if name in settings.unsupported_embed_tags:
        raise UnsupportedStructureError(name, "embedded object has no comparable identity")
    return None


def extract_images(root: Tag) -> List[Figure]:
    """
    Collect images in document order.

    Embedded objects that cannot be classified are skipped and left in the
    tree untouched.
    """
    figures: List[Figure] = []
    for node in [root, *iter_elements(root)]:
        try:
            kind = classify_structural_element(node)
        except UnsupportedStructureError as exc:
            logger.debug("Skipping structural element: %s", exc)
            continue
        if kind != "image":
            continue
        figures.append(Figure(
            index=len(figures),
            locator=attr(node, "src") or "",
            node=node,
        ))
    return figures


def compare_images(left: List[Figure], right: List[Figure]) -> List[StructuralChangeRecord]:
    """
    Compare images index by index.

    Identity is the exact source locator. Position, not content, decides which
    images are compared: an image at index i is only ever compared with the
    image at index i on the other side.

    Returns:
        One record per index that differs
    """
    records: List[StructuralChangeRecord] = []
    for idx in range(max(len(left), len(right))):
        left_fig = left[idx] if idx < len(left) else None
        right_fig = right[idx] if idx < len(right) else None

        if left_fig is not None and right_fig is None:
            records.append(StructuralChangeRecord(
                element_type="image",
                index=idx,
                status="removed",
                identity=left_fig.locator,
                old_text=left_fig.locator,
            ))
        elif left_fig is None and right_fig is not None:
            records.append(StructuralChangeRecord(
                element_type="image",
                index=idx,
                status="added",
                identity=right_fig.locator,
                new_text=right_fig.locator,
            ))
        elif left_fig is not None and right_fig is not None and left_fig.locator != right_fig.locator:
            records.append(StructuralChangeRecord(
                element_type="image",
                index=idx,
                status="modified",
                identity=right_fig.locator,
                old_text=left_fig.locator,
                new_text=right_fig.locator,
            ))

    if records:
        logger.info("Detected %d image changes", len(records))
    return records


def summarize_image_changes(records: List[StructuralChangeRecord]) -> ComparisonSummary:
    """A replaced image counts as one deletion plus one addition."""
    summary = ComparisonSummary()
    for record in records:
        if record.element_type != "image":
            continue
        if record.status in ("added", "modified"):
            summary.add(additions=1)
        if record.status in ("removed", "modified"):
            summary.add(deletions=1)
    return summary


def short_locator(locator: str, limit: int = 60) -> str:
    """Locator shortened for display (data URIs can be very long)."""
    if locator.startswith("data:"):
        head = locator.split(",", 1)[0]
        return f"{head},…"
    if len(locator) > limit:
        return locator[: limit - 1] + "…"
    return locator
