"""In-place change markup for working copies of document trees.

Everything here except plan_inline_tokens mutates the tree it is given. The
pipeline only ever passes clones, never caller-owned trees.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from bs4 import BeautifulSoup, NavigableString, Tag

from comparison.models import Side, WordToken
from comparison.text_comparison import inline_class, make_whitespace_visible, side_text, tokens_for_side
from config.settings import settings
from extraction.document_tree import iter_text_nodes
from extraction.line_extractor import LOOSE_RUN_ATTR

PLACEHOLDER_ATTR = "data-diff-placeholder"
FORMAT_CHANGES_ATTR = "data-diff-format"


def css_class(*parts: str) -> str:
    """Prefixed class name, e.g. css_class("line", "added") -> "diff-line-added"."""
    return "-".join((settings.css_class_prefix, *parts))


def add_class(node: Tag, name: str) -> None:
    classes = node.get("class") or []
    if isinstance(classes, str):
        classes = classes.split()
    if name not in classes:
        node["class"] = [*classes, name]


def mark_line(node: Tag, status: str, format_changes: Optional[List[str]] = None) -> None:
    """Tag a block as added, removed, modified or formatting."""
    add_class(node, css_class("line", status))
    if format_changes:
        node[FORMAT_CHANGES_ATTR] = "; ".join(format_changes)


def mark_cell(node: Tag, status: str) -> None:
    add_class(node, css_class("cell", status))


def mark_row(node: Tag, status: str) -> None:
    add_class(node, css_class("row", status))


def mark_table(node: Tag, status: str) -> None:
    add_class(node, css_class("table", status))


def mark_image(node: Tag, status: str) -> None:
    add_class(node, css_class("image", status))


@dataclass
class InlinePlan:
    """Text-node replacements for one side, computed without touching the tree."""
    node: Tag
    visible_whitespace: bool
    edits: List[Tuple[NavigableString, List[Tuple[str, str]]]] = field(default_factory=list)

    @property
    def span_count(self) -> int:
        return sum(1 for _, pieces in self.edits for _, status in pieces if status != "unchanged")


def plan_inline_tokens(
    node: Tag,
    tokens: List[WordToken],
    side: Side,
    *,
    skip_tags: Optional[Iterable[str]] = None,
    visible_whitespace: Optional[bool] = None,
) -> InlinePlan:
    """
    Work out where the changed runs of one side's text fall in `node`.

    Nothing is modified; pass the plan to apply_inline_plan. Planning both
    sides first means a mismatch on either side leaves both trees untouched.

    Args:
        node: Block or cell element whose text the tokens describe
        tokens: Edit script from diff_text(left_text, right_text)
        side: Which side `node` belongs to
        skip_tags: Tags whose text is not part of `node`'s text (defaults to
            settings.ignored_tags); must match how the text was extracted
        visible_whitespace: Render whitespace in changed runs as glyphs
            (defaults to settings.annotate_whitespace)

    Raises:
        ValueError: the tokens do not reconstruct the node's text
    """
    if visible_whitespace is None:
        visible_whitespace = settings.annotate_whitespace
    if skip_tags is None:
        skip_tags = settings.ignored_tags

    own_tokens = tokens_for_side(tokens, side)
    text_nodes = list(iter_text_nodes(node, skip_tags))
    node_text = "".join(str(s) for s in text_nodes)
    if side_text(tokens, side) != node_text:
        raise ValueError(f"inline tokens do not match the {side} text of <{node.name}>")

    plan = InlinePlan(node=node, visible_whitespace=visible_whitespace)
    segments = _token_segments(own_tokens)
    offset = 0
    for text_node in text_nodes:
        value = str(text_node)
        start, end = offset, offset + len(value)
        offset = end
        pieces = _slice_segments(segments, start, end, value)
        if any(status != "unchanged" for _, status in pieces):
            plan.edits.append((text_node, pieces))
    return plan


def apply_inline_plan(plan: InlinePlan) -> int:
    """
    Split the planned text nodes in place, wrapping changed pieces in spans.

    Nested inline formatting (<b>, <a>, ...) is kept; a changed run that
    crosses an element boundary becomes one span per text node it touches.

    Returns:
        Number of spans inserted
    """
    soup = _soup_for(plan.node)
    inserted = 0
    for text_node, pieces in plan.edits:
        replacements = []
        for piece, status in pieces:
            if status == "unchanged":
                replacements.append(NavigableString(piece))
                continue
            span = soup.new_tag("span", attrs={"class": inline_class(status)})
            span.string = make_whitespace_visible(piece) if plan.visible_whitespace else piece
            replacements.append(span)
            inserted += 1
        text_node.replace_with(*replacements)
    return inserted


def unwrap_loose_runs(root: Tag) -> int:
    """
    Remove the wrappers extraction put around loose inline runs.

    Wrappers that received change markup stay as plain spans; the rest are
    unwrapped so untouched content reads exactly as it came in.

    Returns:
        Number of wrappers unwrapped
    """
    removed = 0
    for wrapper in root.find_all("span", attrs={LOOSE_RUN_ATTR: True}):
        if wrapper.get("class"):
            del wrapper[LOOSE_RUN_ATTR]
            continue
        wrapper.unwrap()
        removed += 1
    return removed


def _token_segments(tokens: List[WordToken]) -> List[Tuple[int, int, str]]:
    segments = []
    offset = 0
    for token in tokens:
        segments.append((offset, offset + len(token.text), token.status))
        offset += len(token.text)
    return segments


def _slice_segments(
    segments: List[Tuple[int, int, str]], start: int, end: int, value: str,
) -> List[Tuple[str, str]]:
    """Pieces of one text node ([start, end) in block coordinates) with their status."""
    pieces: List[Tuple[str, str]] = []
    for seg_start, seg_end, status in segments:
        lo, hi = max(seg_start, start), min(seg_end, end)
        if lo >= hi:
            continue
        pieces.append((value[lo - start:hi - start], status))
    return pieces


def insert_placeholder(
    root: Tag,
    tag_name: str,
    kind: str,
    after: Optional[Tag] = None,
    before: Optional[Tag] = None,
) -> Tag:
    """
    Insert an empty slot standing in for a line that only the other side has.

    The slot goes right after `after` when given, else right before `before`,
    else at the end of `root`.

    Args:
        root: Tree being annotated
        tag_name: Tag of the missing line, so the slot takes a similar shape
        kind: "added" (the line exists only on the right) or "removed"

    Returns:
        The placeholder element (use it as `after` for the next slot to keep order)
    """
    placeholder = _soup_for(root).new_tag(
        tag_name or "div",
        attrs={"class": css_class("placeholder"), PLACEHOLDER_ATTR: kind},
    )
    if after is not None and after.parent is not None:
        after.insert_after(placeholder)
    elif before is not None and before.parent is not None:
        before.insert_before(placeholder)
    else:
        root.append(placeholder)
    return placeholder


def _soup_for(node: Tag) -> BeautifulSoup:
    if isinstance(node, BeautifulSoup):
        return node
    for parent in node.parents:
        if isinstance(parent, BeautifulSoup):
            return parent
    return BeautifulSoup("", "html.parser")
