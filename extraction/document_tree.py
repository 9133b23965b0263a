"""Tree-visitor helpers over BeautifulSoup document trees.

The comparison engine only needs a handful of read operations on a document:
children, tag name, text and attributes. Everything else in the package goes
through these helpers so the walk logic stays in one place.
"""
from __future__ import annotations

import copy
import re
from typing import Iterable, Iterator, List, Optional

from bs4 import BeautifulSoup, Comment, NavigableString, Tag
from bs4.element import Declaration, Doctype, ProcessingInstruction

from comparison.errors import InvalidInputError

_NON_TEXT_STRINGS = (Comment, Declaration, Doctype, ProcessingInstruction)
_STYLE_DECL_RE = re.compile(r"\s*([\w-]+)\s*:\s*([^;]+)\s*;?")


def load_document(source, side: str | None = None) -> Tag:
    """Return a walkable tree for an HTML string or an existing bs4 tree.

    Raises:
        InvalidInputError: source is None or neither a string nor a bs4 Tag
    """
    if source is None:
        raise InvalidInputError("no document given", side=side)
    if isinstance(source, Tag):
        return source
    if isinstance(source, bytes):
        source = source.decode("utf-8", errors="replace")
    if isinstance(source, str):
        return BeautifulSoup(source, "html.parser")
    raise InvalidInputError(f"cannot walk a {type(source).__name__}", side=side)


def clone_document(tree: Tag) -> Tag:
    """Deep copy of a tree; annotation always happens on a clone."""
    return copy.copy(tree)


def children(node: Tag) -> List[Tag]:
    """Element children of `node` in document order."""
    return [child for child in node.children if isinstance(child, Tag)]


def tag(node) -> str:
    """Lower-cased tag name ('' for the document root and text nodes)."""
    if isinstance(node, BeautifulSoup) or not isinstance(node, Tag):
        return ""
    return (node.name or "").lower()


def attr(node: Tag, name: str) -> Optional[str]:
    """Attribute value as a string; multi-valued attributes are space-joined."""
    value = node.get(name)
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return " ".join(value)
    return str(value)


def iter_elements(node: Tag) -> Iterator[Tag]:
    """All element descendants of `node` in document order."""
    for descendant in node.descendants:
        if isinstance(descendant, Tag):
            yield descendant


def iter_text_nodes(node: Tag, ignored_tags: Iterable[str] = ()) -> Iterator[NavigableString]:
    """Visible text nodes under `node`, skipping comments and ignored tags."""
    ignored = set(ignored_tags)
    for descendant in node.descendants:
        if not isinstance(descendant, NavigableString) or isinstance(descendant, _NON_TEXT_STRINGS):
            continue
        if ignored and any(tag(parent) in ignored for parent in _parents_within(descendant, node)):
            continue
        yield descendant


def text(node: Tag, ignored_tags: Iterable[str] = ()) -> str:
    """Full inner text of `node`, verbatim."""
    return "".join(str(s) for s in iter_text_nodes(node, ignored_tags))


def is_inside(node: Tag, tags: Iterable[str]) -> bool:
    """True if any ancestor of `node` has one of `tags`."""
    names = set(tags)
    return any(tag(parent) in names for parent in node.parents)


def style_declarations(node: Tag) -> dict:
    """Parse an inline `style` attribute into a {property: value} dict."""
    raw = attr(node, "style")
    if not raw:
        return {}
    return {
        match.group(1).lower(): match.group(2).strip().lower()
        for match in _STYLE_DECL_RE.finditer(raw)
    }


def _parents_within(string: NavigableString, root: Tag) -> Iterator[Tag]:
    parent = string.parent
    while parent is not None and parent is not root:
        yield parent
        parent = parent.parent
