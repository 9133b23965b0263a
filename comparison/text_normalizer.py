"""
Text Normalizer Module

Implements the two-text model used throughout the comparison:
- display text: the original block text, never altered (rendering, inline diffs)
- compare text: canonical form used only for equality decisions

Normalization steps:
- Unicode NFC
- Special space and zero-width character cleanup
- Quote/dash normalization
- Whitespace collapse
- Case folding
"""
from __future__ import annotations

import hashlib
import re
import unicodedata
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple


# =============================================================================
# Unicode Normalization Tables
# =============================================================================

# Quote variants to normalize
QUOTE_VARIANTS = {
    # Single quotes
    "\u2018": "'",  # LEFT SINGLE QUOTATION MARK
    "\u2019": "'",  # RIGHT SINGLE QUOTATION MARK
    "\u201A": "'",  # SINGLE LOW-9 QUOTATION MARK
    "\u201B": "'",  # SINGLE HIGH-REVERSED-9 QUOTATION MARK
    "\u2032": "'",  # PRIME
    "`": "'",       # GRAVE ACCENT
    # Double quotes
    "\u201C": '"',  # LEFT DOUBLE QUOTATION MARK
    "\u201D": '"',  # RIGHT DOUBLE QUOTATION MARK
    "\u201E": '"',  # DOUBLE LOW-9 QUOTATION MARK
    "\u201F": '"',  # DOUBLE HIGH-REVERSED-9 QUOTATION MARK
    "\u2033": '"',  # DOUBLE PRIME
    "\u00AB": '"',  # LEFT-POINTING DOUBLE ANGLE QUOTATION MARK
    "\u00BB": '"',  # RIGHT-POINTING DOUBLE ANGLE QUOTATION MARK
}

# Dash/hyphen variants to normalize
DASH_VARIANTS = {
    "\u2010": "-",  # HYPHEN
    "\u2011": "-",  # NON-BREAKING HYPHEN
    "\u2012": "-",  # FIGURE DASH
    "\u2013": "-",  # EN DASH
    "\u2014": "-",  # EM DASH
    "\u2015": "-",  # HORIZONTAL BAR
    "\u2212": "-",  # MINUS SIGN
    "\uFE58": "-",  # SMALL EM DASH
    "\uFE63": "-",  # SMALL HYPHEN-MINUS
    "\uFF0D": "-",  # FULLWIDTH HYPHEN-MINUS
}

# Special whitespace characters
SPECIAL_SPACES = {
    "\u00A0": " ",  # NO-BREAK SPACE
    "\u2002": " ",  # EN SPACE
    "\u2003": " ",  # EM SPACE
    "\u2007": " ",  # FIGURE SPACE
    "\u2009": " ",  # THIN SPACE
    "\u200A": " ",  # HAIR SPACE
    "\u202F": " ",  # NARROW NO-BREAK SPACE
    "\u3000": " ",  # IDEOGRAPHIC SPACE
}

# Zero-width characters to remove
ZERO_WIDTH_CHARS = {
    "\u200B",  # ZERO WIDTH SPACE
    "\u200C",  # ZERO WIDTH NON-JOINER
    "\u200D",  # ZERO WIDTH JOINER
    "\uFEFF",  # ZERO WIDTH NO-BREAK SPACE (BOM)
    "\u2060",  # WORD JOINER
    "\u00AD",  # SOFT HYPHEN
}

_QUOTE_TABLE = str.maketrans(QUOTE_VARIANTS)
_DASH_TABLE = str.maketrans(DASH_VARIANTS)
_SPACE_TABLE = str.maketrans(SPECIAL_SPACES)

_ZERO_WIDTH_RE = re.compile(f"[{''.join(re.escape(c) for c in sorted(ZERO_WIDTH_CHARS))}]")
_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class NormalizationConfig:
    """Which transformations turn display text into compare text."""
    lowercase: bool = True
    nfc_normalize: bool = True
    collapse_whitespace: bool = True
    normalize_special_spaces: bool = True
    strip_zero_width: bool = True
    normalize_quotes: bool = True
    normalize_dashes: bool = True

    def to_dict(self) -> dict:
        """Export config to JSON-serializable dict."""
        return {
            "lowercase": self.lowercase,
            "nfc_normalize": self.nfc_normalize,
            "collapse_whitespace": self.collapse_whitespace,
            "normalize_special_spaces": self.normalize_special_spaces,
            "strip_zero_width": self.strip_zero_width,
            "normalize_quotes": self.normalize_quotes,
            "normalize_dashes": self.normalize_dashes,
        }


DEFAULT_CONFIG = NormalizationConfig()


def normalize_compare(text: str, config: Optional[NormalizationConfig] = None) -> str:
    """Full normalization for equality decisions.

    Args:
        text: Raw input text
        config: Normalization configuration

    Returns:
        Normalized text; never used for display
    """
    if not text:
        return ""

    if config is None:
        config = DEFAULT_CONFIG

    result = text

    if config.nfc_normalize:
        result = unicodedata.normalize("NFC", result)

    if config.normalize_special_spaces:
        result = result.translate(_SPACE_TABLE)

    if config.strip_zero_width:
        result = _ZERO_WIDTH_RE.sub("", result)

    if config.normalize_quotes:
        result = result.translate(_QUOTE_TABLE)

    if config.normalize_dashes:
        result = result.translate(_DASH_TABLE)

    if config.collapse_whitespace:
        result = _WHITESPACE_RE.sub(" ", result)

    if config.lowercase:
        result = result.lower()

    return result.strip()


def normalize(text: str) -> str:
    """Canonical comparison form of `text` with the default configuration."""
    return normalize_compare(text, DEFAULT_CONFIG)


def compute_document_fingerprint(
    line_texts: Iterable[str],
    image_locators: Iterable[str] = (),
    table_cells: Iterable[Tuple[int, int, int, str]] = (),
    line_styles: Iterable[str] = (),
) -> str:
    """Fingerprint of everything the comparison looks at, in normalized form.

    Two documents with equal fingerprints compare as a no-op: same normalized
    line sequence, same image locators in the same order, same normalized
    cell text at the same table coordinates and the same per-line style keys.
    """
    digest = hashlib.sha1()
    for text in line_texts:
        digest.update(b"L\x1f")
        digest.update(normalize(text).encode("utf-8"))
        digest.update(b"\x1e")
    for locator in image_locators:
        digest.update(b"I\x1f")
        digest.update(locator.encode("utf-8"))
        digest.update(b"\x1e")
    for table_idx, row, col, text in table_cells:
        digest.update(f"T\x1f{table_idx}:{row}:{col}\x1f".encode("utf-8"))
        digest.update(normalize(text).encode("utf-8"))
        digest.update(b"\x1e")
    for style in line_styles:
        digest.update(b"S\x1f")
        digest.update(style.encode("utf-8"))
        digest.update(b"\x1e")
    return digest.hexdigest()
