"""Line-level alignment utilities."""
from __future__ import annotations

# NOTE: Using difflib.SequenceMatcher for list-of-lines alignment.
# rapidfuzz only supports string comparison, not list-of-tokens matching with opcodes.
from difflib import SequenceMatcher
from typing import List, Literal, Tuple

from comparison.models import AlignedRun, Line
from utils.logging import logger

SegmentTag = Literal["equal", "removed", "added"]
Segment = Tuple[SegmentTag, List[Line], List[Line]]


def raw_segments(left_lines: List[Line], right_lines: List[Line]) -> List[Segment]:
    """
    Array diff over normalized line text, each line an atomic token.

    Returns segments tagged "equal" (both sides, paired 1:1), "removed"
    (left only) or "added" (right only). A replaced block is emitted as a
    "removed" segment immediately followed by an "added" segment.
    """
    left_keys = [line.normalized_text for line in left_lines]
    right_keys = [line.normalized_text for line in right_lines]
    matcher = SequenceMatcher(None, left_keys, right_keys, autojunk=False)

    segments: List[Segment] = []
    for op, i1, i2, j1, j2 in matcher.get_opcodes():
        if op == "equal":
            segments.append(("equal", left_lines[i1:i2], right_lines[j1:j2]))
            continue
        if i2 > i1:
            segments.append(("removed", left_lines[i1:i2], []))
        if j2 > j1:
            segments.append(("added", [], right_lines[j1:j2]))
    return segments


def align_lines(left_lines: List[Line], right_lines: List[Line]) -> List[AlignedRun]:
    """
    Align two line sequences into runs.

    A "removed" segment directly followed by an "added" segment is read as
    "these paragraphs changed": the first min(R, A) lines of each are paired
    as modifications, the rest stay plain deletions or insertions. Pairs
    whose normalized text turns out equal are downgraded to unchanged.

    Returns:
        Runs covering every line of both inputs exactly once, in order
    """
    if not left_lines and not right_lines:
        return []

    segments = raw_segments(left_lines, right_lines)
    runs: List[AlignedRun] = []

    idx = 0
    while idx < len(segments):
        seg_tag, seg_left, seg_right = segments[idx]

        if seg_tag == "equal":
            _append(runs, "unchanged", seg_left, seg_right)
            idx += 1
            continue

        if seg_tag == "removed" and idx + 1 < len(segments) and segments[idx + 1][0] == "added":
            added = segments[idx + 1][2]
            paired = min(len(seg_left), len(added))
            for left_line, right_line in zip(seg_left[:paired], added[:paired]):
                kind = "unchanged" if left_line.normalized_text == right_line.normalized_text else "modified_pair"
                _append(runs, kind, [left_line], [right_line])
            if len(seg_left) > paired:
                _append(runs, "deleted_only", seg_left[paired:], [])
            if len(added) > paired:
                _append(runs, "inserted_only", [], added[paired:])
            idx += 2
            continue

        if seg_tag == "removed":
            _append(runs, "deleted_only", seg_left, [])
        else:
            _append(runs, "inserted_only", [], seg_right)
        idx += 1

    logger.debug(
        "Aligned %d vs %d lines into %d runs",
        len(left_lines), len(right_lines), len(runs),
    )
    return runs


def _append(runs: List[AlignedRun], kind: str, left: List[Line], right: List[Line]) -> None:
    """Append lines to the previous run when it has the same kind, keeping runs maximal."""
    if runs and runs[-1].kind == kind:
        runs[-1].left_lines.extend(left)
        runs[-1].right_lines.extend(right)
        return
    runs.append(AlignedRun(kind=kind, left_lines=list(left), right_lines=list(right)))
