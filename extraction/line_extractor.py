"""Block-level line extraction from document trees."""
from __future__ import annotations

import re
from typing import List, Optional, Set

from bs4 import BeautifulSoup, Comment, NavigableString, Tag
from bs4.element import Declaration, Doctype, ProcessingInstruction

from comparison.models import Formatting, Line
from config.settings import settings
from extraction.document_tree import attr, children, iter_elements, style_declarations, tag, text
from utils.logging import logger

_BOLD_WEIGHT_RE = re.compile(r"^(bold|bolder|[6-9]00)$")

# Always walked into, never wrapped as inline content
_DOCUMENT_TAGS = {"html", "body"}

LOOSE_RUN_ATTR = "data-diff-run"


def extract_lines(root: Tag) -> List[Line]:
    """
    Walk a document tree in order and collect its paragraph-like blocks.

    Blocks inside tables are skipped (tables are compared cell by cell). A
    block that wraps other blocks or a table is treated as a container: its
    inner blocks become lines, and so does each run of loose inline content
    sitting between them (text directly under the document root included).
    Such a run is wrapped in place in a ``<span data-diff-run>`` so it can be
    annotated like any block; callers pass working copies, and
    ``comparison.markup.unwrap_loose_runs`` removes wrappers that stayed
    unmarked.

    A root that is itself a block element is a line of its own.

    Args:
        root: Document tree (BeautifulSoup or Tag)

    Returns:
        Lines in document order with sequence_index set
    """
    if root is None:
        return []

    walker = _LineWalker()
    if isinstance(root, BeautifulSoup):
        walker.visit(root)
    else:
        kind = walker.classify(root)
        if kind == "line":
            walker.add_line(root)
        elif kind == "container" or (kind == "inline" and tag(root) not in walker.ignored_tags):
            walker.visit(root)

    logger.debug("Extracted %d lines", len(walker.lines))
    return walker.lines


def line_skip_tags() -> Set[str]:
    """Tags whose text never belongs to a line: ignored tags and table content."""
    return set(settings.ignored_tags) | set(settings.table_tags)


class _LineWalker:
    """Collects lines from containers, one child at a time."""

    def __init__(self):
        self.block_tags = set(settings.block_tags)
        self.table_tags = set(settings.table_tags)
        self.ignored_tags = set(settings.ignored_tags)
        self.skip_tags = line_skip_tags()
        self.lines: List[Line] = []

    def classify(self, node) -> str:
        """One of "line", "container", "inline" or "skip"."""
        if isinstance(node, (Declaration, Doctype, ProcessingInstruction)):
            return "skip"
        if isinstance(node, NavigableString):
            return "inline"
        name = tag(node)
        if name in self.table_tags:
            return "skip"
        if name in self.ignored_tags:
            return "inline"
        if name in _DOCUMENT_TAGS:
            return "container"
        if _contains_block(node, self.block_tags, self.table_tags) or _contains_table(node):
            return "container"
        return "line" if name in self.block_tags else "inline"

    def visit(self, container: Tag) -> None:
        run: list = []
        for child in list(container.children):
            kind = self.classify(child)
            if kind == "inline":
                run.append(child)
                continue
            self._flush(run)
            run = []
            if kind == "line":
                self.add_line(child)
            elif kind == "container":
                self.visit(child)
        self._flush(run)

    def add_line(self, node: Tag) -> None:
        self.lines.append(Line(
            text=text(node, self.skip_tags),
            formatting=extract_formatting(node),
            source_ref=node,
            sequence_index=len(self.lines),
            tag=tag(node) or "span",
        ))

    def _flush(self, run: list) -> None:
        """Turn a run of loose inline content into a line when it has visible text."""
        while run and _is_blank_string(run[0]):
            run = run[1:]
        while run and _is_blank_string(run[-1]):
            run = run[:-1]
        if not run or not "".join(_run_text(node, self.skip_tags) for node in run).strip():
            return
        self.add_line(_wrap(run))


def _is_blank_string(node) -> bool:
    return isinstance(node, NavigableString) and not str(node).strip()


def _run_text(node, skip_tags: Set[str]) -> str:
    if isinstance(node, Tag):
        return "" if tag(node) in skip_tags else text(node, skip_tags)
    return "" if isinstance(node, Comment) else str(node)


def _wrap(nodes: list) -> Tag:
    first = nodes[0]
    soup = next((p for p in first.parents if isinstance(p, BeautifulSoup)), None)
    if soup is None:
        soup = BeautifulSoup("", "html.parser")
    wrapper = soup.new_tag("span", attrs={LOOSE_RUN_ATTR: ""})
    first.insert_before(wrapper)
    for node in nodes:
        wrapper.append(node.extract())
    return wrapper


def _contains_block(node: Tag, block_tags: set, table_tags: set) -> bool:
    """True if a block tag sits below `node` outside of any nested table."""
    stack = list(children(node))
    while stack:
        child = stack.pop()
        name = tag(child)
        if name in table_tags:
            continue
        if name in block_tags:
            return True
        stack.extend(children(child))
    return False


def _contains_table(node: Tag) -> bool:
    return any(tag(element) == "table" for element in iter_elements(node))


def extract_formatting(node: Tag) -> Formatting:
    """
    Coarse block formatting.

    Bold/italic/underline are "present anywhere inside the block"; font size
    and alignment are the effective values inherited from the nearest
    ancestor that declares them.
    """
    bold = italic = underline = False
    for element in [node, *iter_elements(node)]:
        name = tag(element)
        styles = style_declarations(element)
        if name in settings.bold_tags or _BOLD_WEIGHT_RE.match(styles.get("font-weight", "")):
            bold = True
        if name in settings.italic_tags or styles.get("font-style") in ("italic", "oblique"):
            italic = True
        if name in settings.underline_tags or "underline" in styles.get("text-decoration", ""):
            underline = True

    return Formatting(
        bold=bold,
        italic=italic,
        underline=underline,
        font_size=_effective_style(node, "font-size"),
        text_align=_effective_style(node, "text-align", fallback_attr="align"),
    )


def _effective_style(node: Tag, prop: str, fallback_attr: Optional[str] = None) -> Optional[str]:
    current = node
    while isinstance(current, Tag) and tag(current):
        value = style_declarations(current).get(prop)
        if value:
            return value
        if fallback_attr:
            legacy = attr(current, fallback_attr)
            if legacy:
                return legacy.strip().lower()
        current = current.parent
    return None
