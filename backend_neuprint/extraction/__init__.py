"""
Backend extraction: deterministic segmentation, lexical counts and the
raw-feature filler that merges them into the extractor's record.
"""

from backend_neuprint.extraction.lexical_counts import LexicalCounts, compute_lexical_counts
from backend_neuprint.extraction.normalizer import can_fill, fill_extraction
from backend_neuprint.extraction.segmenter import (
    SegmentationResult,
    compute_unit_lengths,
    segment_text,
)

__all__ = [
    "LexicalCounts",
    "SegmentationResult",
    "can_fill",
    "compute_lexical_counts",
    "compute_unit_lengths",
    "fill_extraction",
    "segment_text",
]
