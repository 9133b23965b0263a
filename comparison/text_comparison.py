"""Word-level inline diffing for text known to differ."""
from __future__ import annotations

import html
import re
# NOTE: Using difflib.SequenceMatcher for token-list alignment (word-level diff).
from difflib import SequenceMatcher
from typing import List, Optional, Tuple

from comparison.models import Side, WordToken
from config.settings import settings

# Words, whitespace runs and single punctuation marks; together they cover
# every character of the input.
_TOKEN_RE = re.compile(r"\s+|\w+|[^\w\s]")


def tokenize(text: str) -> List[str]:
    """Split text into alternating word / whitespace / punctuation tokens."""
    return _TOKEN_RE.findall(text)


def diff_text(left_text: str, right_text: str) -> List[WordToken]:
    """
    Word-and-whitespace diff of two strings.

    The result is a true edit script: dropping "added" tokens rebuilds
    `left_text`, dropping "removed" tokens rebuilds `right_text`. Within a
    replaced span removed tokens come before added ones, and consecutive
    tokens of the same status are merged.

    Examples:
        >>> [(t.text, t.status) for t in diff_text("The cat sat.", "The dog sat.")]
        [('The ', 'unchanged'), ('cat', 'removed'), ('dog', 'added'), (' sat.', 'unchanged')]
    """
    left_text = left_text or ""
    right_text = right_text or ""

    if left_text == right_text:
        return [WordToken(left_text, "unchanged")] if left_text else []
    if not left_text:
        return [WordToken(right_text, "added")]
    if not right_text:
        return [WordToken(left_text, "removed")]

    left_tokens = tokenize(left_text)
    right_tokens = tokenize(right_text)
    matcher = SequenceMatcher(None, left_tokens, right_tokens, autojunk=False)

    tokens: List[WordToken] = []
    for op, i1, i2, j1, j2 in matcher.get_opcodes():
        if op == "equal":
            _push(tokens, "".join(left_tokens[i1:i2]), "unchanged")
            continue
        if i2 > i1:
            _push(tokens, "".join(left_tokens[i1:i2]), "removed")
        if j2 > j1:
            _push(tokens, "".join(right_tokens[j1:j2]), "added")
    return tokens


def _push(tokens: List[WordToken], text: str, status: str) -> None:
    if not text:
        return
    if tokens and tokens[-1].status == status:
        tokens[-1] = WordToken(tokens[-1].text + text, status)
        return
    tokens.append(WordToken(text, status))


def tokens_for_side(tokens: List[WordToken], side: Side) -> List[WordToken]:
    """Tokens visible on one side: the left never shows right-only words and vice versa."""
    hidden = "added" if side == "left" else "removed"
    return [token for token in tokens if token.status != hidden]


def side_text(tokens: List[WordToken], side: Side) -> str:
    """Reconstruct one side's text from an edit script."""
    return "".join(token.text for token in tokens_for_side(tokens, side))


def count_changes(tokens: List[WordToken]) -> Tuple[int, int]:
    """(additions, deletions) counted as merged token runs."""
    additions = sum(1 for token in tokens if token.status == "added")
    deletions = sum(1 for token in tokens if token.status == "removed")
    return additions, deletions


def make_whitespace_visible(text: str) -> str:
    """Swap whitespace characters for display glyphs."""
    return (
        text.replace("\r\n", "\n")
        .replace("\u00a0", " ")
        .replace(" ", settings.space_glyph)
        .replace("\t", settings.tab_glyph)
        .replace("\n", settings.newline_glyph)
    )


def inline_class(status: str) -> str:
    return f"{settings.css_class_prefix}-inline-{status}"


def render_tokens(
    tokens: List[WordToken],
    side: Optional[Side] = None,
    *,
    visible_whitespace: Optional[bool] = None,
    whitespace_everywhere: bool = False,
) -> str:
    """
    Render tokens as escaped HTML with inline diff spans.

    Args:
        tokens: Edit script from diff_text
        side: Restrict output to one side's tokens; None renders both
        visible_whitespace: Show whitespace of changed runs as glyphs
            (defaults to settings.annotate_whitespace)
        whitespace_everywhere: Also show glyphs in unchanged runs

    Returns:
        HTML fragment
    """
    if visible_whitespace is None:
        visible_whitespace = settings.annotate_whitespace
    if side is not None:
        tokens = tokens_for_side(tokens, side)

    parts: List[str] = []
    for token in tokens:
        changed = token.status != "unchanged"
        content = token.text
        if visible_whitespace and (changed or whitespace_everywhere):
            content = make_whitespace_visible(content)
        content = html.escape(content, quote=False)
        if changed:
            parts.append(f'<span class="{inline_class(token.status)}">{content}</span>')
        else:
            parts.append(content)
    return "".join(parts)
