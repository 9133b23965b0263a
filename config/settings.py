"""Configuration management for block extraction, markup and comparison thresholds."""
from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from typing import List

from pydantic import Field


class Settings(BaseSettings):
    # Block extraction
    block_tags: List[str] = Field(
        default=["p", "h1", "h2", "h3", "h4", "h5", "h6", "li", "pre", "div", "blockquote"],
        description="Paragraph-like tags that become lines in the block sequence",
    )
    table_tags: List[str] = Field(
        default=["table", "thead", "tbody", "tfoot", "tr", "td", "th"],
        description="Tags whose descendants are excluded from the line sequence",
    )
    ignored_tags: List[str] = Field(
        default=["head", "script", "style", "template"],
        description="Tags whose text never contributes to a line",
    )
    unsupported_embed_tags: List[str] = Field(
        default=["svg", "object", "embed", "iframe", "video", "audio", "canvas"],
        description="Embedded objects that cannot be given a structural identity (passed through)",
    )

    # Formatting detection
    bold_tags: List[str] = Field(default=["b", "strong"], description="Inline tags implying bold")
    italic_tags: List[str] = Field(default=["i", "em"], description="Inline tags implying italic")
    underline_tags: List[str] = Field(default=["u", "ins"], description="Inline tags implying underline")

    # Guards
    max_blocks: int = Field(
        default=50_000,
        description="Maximum number of lines per document (0 disables the cap)",
    )

    # Inline diff rendering
    annotate_whitespace: bool = Field(
        default=True,
        description="Render whitespace inside changed runs as visible glyphs",
    )
    space_glyph: str = Field(default="·", description="Glyph shown for a space inside diff output")
    tab_glyph: str = Field(default="→", description="Glyph shown for a tab inside diff output")
    newline_glyph: str = Field(default="↵", description="Glyph shown for a newline inside diff output")
    css_class_prefix: str = Field(default="diff", description="Prefix for every injected CSS class")

    # Reporting
    detailed_report_default: bool = Field(
        default=True,
        description="Build the detailed per-line report unless the caller opts out",
    )
    semantic_change_threshold: float = Field(
        default=0.5,
        description="Similarity below which a modified line is classified as a semantic change",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Default log level for CLI entry points")

    model_config = SettingsConfigDict(
        env_prefix="BLOCKDIFF_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


def get_settings() -> Settings:
    """Return a cached settings instance."""
    return _get_settings()


@lru_cache()
def _get_settings() -> Settings:
    return Settings()


settings = get_settings()
