"""Pipeline module - orchestrates end-to-end document comparison."""
from pipeline.compare_documents import (
    compare_blocks,
    diff_text,
    ComparisonPipeline,
    PipelineConfig,
)

__all__ = [
    "compare_blocks",
    "diff_text",
    "ComparisonPipeline",
    "PipelineConfig",
]
