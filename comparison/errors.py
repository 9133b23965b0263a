"""Exceptions raised by the comparison engine."""
from __future__ import annotations


class InvalidInputError(ValueError):
    """An input document is missing or cannot be walked as a tree."""

    def __init__(self, message: str, side: str | None = None):
        self.side = side
        if side:
            message = f"{side} document: {message}"
        super().__init__(message)


class DocumentTooLargeError(InvalidInputError):
    """A document exceeds the configured block cap."""

    def __init__(self, count: int, limit: int, side: str | None = None):
        self.count = count
        self.limit = limit
        super().__init__(f"{count} blocks exceeds the limit of {limit}", side=side)


class UnsupportedStructureError(ValueError):
    """An element cannot be classified as a supported structural element."""

    def __init__(self, tag: str, reason: str = "unsupported element"):
        self.tag = tag
        super().__init__(f"<{tag}>: {reason}")
