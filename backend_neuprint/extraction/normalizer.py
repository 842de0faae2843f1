"""
Extraction filler: merge segmenter and lexical-counter output into raw features.

Takes the extractor's raw-feature record plus the original input text and
overwrites ONLY backend-computable fields, keeping the schema unchanged:

- layer_0.units, layer_0.unit_lengths
- layer_0.per_unit.revisions (recomputed), layer_0.per_unit.transitions (resized)
- layer_0.reasons
- layer_2.revisions, layer_2.revision_depth_sum
- layer_3.hedges
- root adjacency_links, evidence_types

Never renames fields and never adds a root "raw_features" key.
"""

from __future__ import annotations

import copy
from typing import Any

from backend_neuprint.extraction.lexical_counts import compute_lexical_counts
from backend_neuprint.extraction.segmenter import compute_unit_lengths, segment_text
from backend_neuprint.neuprint_logging import get_logger

logger = get_logger(__name__)

REQUIRED_LAYERS = ("layer_0", "layer_1", "layer_2", "layer_3")
FORBIDDEN_ROOT_KEY = "raw_features"


def resize(values: Any, n: int, fill: float = 0) -> list[Any]:
    """Copy of values truncated or padded with fill to exactly n entries."""
    out = list(values) if isinstance(values, (list, tuple)) else []
    if len(out) > n:
        return out[:n]
    return out + [fill] * (n - len(out))


def can_fill(raw: Any, input_text: str | None) -> bool:
    """Fill only when text is present and all four layers exist."""
    if not isinstance(input_text, str) or not input_text:
        return False
    if not isinstance(raw, dict):
        return False
    return all(isinstance(raw.get(layer), dict) for layer in REQUIRED_LAYERS)


def fill_extraction(raw: dict[str, Any], input_text: str) -> tuple[dict[str, Any], list[str]]:
    """
    Return (filled copy of raw, unit_texts).

    The input record is never mutated.
    """
    filled = copy.deepcopy(raw)
    segmentation = segment_text(input_text or "")
    unit_texts = segmentation.unit_texts
    n = len(unit_texts)
    counts = compute_lexical_counts(unit_texts)

    layer_0 = filled["layer_0"]
    layer_0["units"] = n
    layer_0["unit_lengths"] = compute_unit_lengths(unit_texts)
    per_unit = layer_0.get("per_unit")
    if not isinstance(per_unit, dict):
        per_unit = {}
        layer_0["per_unit"] = per_unit
    per_unit["transitions"] = resize(per_unit.get("transitions"), n, 0)
    per_unit["revisions"] = resize(counts.per_unit_revisions, n, 0)
    layer_0["reasons"] = counts.reasons

    filled["layer_2"]["revisions"] = counts.revisions
    filled["layer_2"]["revision_depth_sum"] = counts.revision_depth_sum
    filled["layer_3"]["hedges"] = counts.hedges

    filled["adjacency_links"] = counts.adjacency_links
    filled["evidence_types"] = list(counts.evidence_types)

    reserved = filled.get("backend_reserved")
    if not isinstance(reserved, dict):
        filled["backend_reserved"] = {"kpf_sim": None, "tps_h": None}
    else:
        reserved.setdefault("kpf_sim", None)
        reserved.setdefault("tps_h", None)

    filled.pop(FORBIDDEN_ROOT_KEY, None)

    logger.debug(
        "extraction_fill_result",
        segmentation_mode=segmentation.mode,
        units=n,
        reasons=counts.reasons,
        revisions=counts.revisions,
        hedges=counts.hedges,
    )
    return filled, unit_texts
