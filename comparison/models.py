"""Shared data models for extraction and comparison."""
from __future__ import annotations

from dataclasses import dataclass, field
from functools import cached_property
from typing import Any, Dict, List, Literal, Optional

from comparison.text_normalizer import normalize

Side = Literal["left", "right"]
RunKind = Literal["unchanged", "inserted_only", "deleted_only", "modified_pair"]
TokenStatus = Literal["unchanged", "added", "removed"]
StructuralStatus = Literal["added", "removed", "modified"]
ElementType = Literal["image", "table", "table_cell"]
LineStatus = Literal["UNCHANGED", "ADDED", "REMOVED", "MODIFIED", "FORMATTING_ONLY"]
EntryKind = Literal["line", "table_cell", "table", "image"]


@dataclass(frozen=True)
class Formatting:
    bold: bool = False
    italic: bool = False
    underline: bool = False
    font_size: Optional[str] = None
    text_align: Optional[str] = None

    def describe(self, name: str) -> str:
        """Display value of one attribute (on/off for flags, unset for missing values)."""
        value = getattr(self, name)
        if isinstance(value, bool):
            return "on" if value else "off"
        return value if value else "unset"

    @property
    def key(self) -> str:
        """Stable string form, used in document fingerprints."""
        return "|".join(self.describe(name) for name in ("bold", "italic", "underline", "font_size", "text_align"))


@dataclass(eq=False)
class Line:
    """One block-level content unit of a document."""
    text: str
    formatting: Formatting = field(default_factory=Formatting)
    source_ref: Any = None  # bs4 Tag in the working tree; not owned
    sequence_index: int = 0
    tag: str = "p"

    @cached_property
    def normalized_text(self) -> str:
        return normalize(self.text)


@dataclass
class AlignedRun:
    kind: RunKind
    left_lines: List[Line] = field(default_factory=list)
    right_lines: List[Line] = field(default_factory=list)

    def pairs(self) -> List[tuple[Line, Line]]:
        """Positional pairs for unchanged and modified runs."""
        return list(zip(self.left_lines, self.right_lines))


@dataclass(frozen=True)
class WordToken:
    text: str
    status: TokenStatus


@dataclass
class StructuralChangeRecord:
    element_type: ElementType
    index: int
    status: StructuralStatus
    identity: str
    row: Optional[int] = None
    col: Optional[int] = None
    old_text: Optional[str] = None
    new_text: Optional[str] = None
    tokens: List[WordToken] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "element_type": self.element_type,
            "index": self.index,
            "status": self.status,
            "identity": self.identity,
            "row": self.row,
            "col": self.col,
            "old_text": self.old_text,
            "new_text": self.new_text,
        }


@dataclass
class ComparisonSummary:
    """Aggregate counts; `changes` is always additions + deletions."""
    additions: int = 0
    deletions: int = 0

    @property
    def changes(self) -> int:
        return self.additions + self.deletions

    def add(self, additions: int = 0, deletions: int = 0) -> None:
        self.additions += additions
        self.deletions += deletions

    def merge(self, other: "ComparisonSummary") -> None:
        self.add(other.additions, other.deletions)

    def to_dict(self) -> Dict[str, int]:
        return {"additions": self.additions, "deletions": self.deletions, "changes": self.changes}


@dataclass
class DetailedReportEntry:
    kind: EntryKind
    status: LineStatus
    left_line_number: Optional[int] = None
    right_line_number: Optional[int] = None
    inline_diff_markup: str = ""
    format_changes: List[str] = field(default_factory=list)
    location: Dict[str, Any] = field(default_factory=dict)
    subtype: Optional[str] = None
    similarity: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "status": self.status,
            "left_line_number": self.left_line_number,
            "right_line_number": self.right_line_number,
            "inline_diff_markup": self.inline_diff_markup,
            "format_changes": list(self.format_changes),
            "location": dict(self.location),
            "subtype": self.subtype,
            "similarity": self.similarity,
        }


@dataclass
class AnnotationFailure:
    side: str
    location: str
    message: str


@dataclass
class ComparisonResult:
    left_annotated_tree: Any
    right_annotated_tree: Any
    summary: ComparisonSummary = field(default_factory=ComparisonSummary)
    detailed_report: Optional[List[DetailedReportEntry]] = None
    runs: List[AlignedRun] = field(default_factory=list)
    structural_changes: List[StructuralChangeRecord] = field(default_factory=list)
    failures: List[AnnotationFailure] = field(default_factory=list)
    short_circuited: bool = False
    metrics: dict = field(default_factory=dict)

    @property
    def left_html(self) -> str:
        return str(self.left_annotated_tree)

    @property
    def right_html(self) -> str:
        return str(self.right_annotated_tree)
