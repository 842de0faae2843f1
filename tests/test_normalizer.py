"""
Pytest tests for the extraction filler: only backend-computable fields change.
"""

from __future__ import annotations

import copy

import pytest

from backend_neuprint.extraction.normalizer import can_fill, fill_extraction, resize


def test_resize_truncates_and_pads():
    assert resize([1, 2, 3], 2) == [1, 2]
    assert resize([1], 3) == [1, 0, 0]
    assert resize(None, 2) == [0, 0]


def test_can_fill_requires_text_and_all_layers(raw_features):
    """Missing text or a missing layer disables the fill."""
    assert can_fill(raw_features, "Some text.") is True
    assert can_fill(raw_features, "") is False
    assert can_fill(raw_features, None) is False
    del raw_features["layer_3"]
    assert can_fill(raw_features, "Some text.") is False


def test_fill_extraction_overwrites_backend_fields(raw_features, essay_text):
    """Units, lengths, reasons, revisions, hedges, adjacency and evidence come from the text."""
    original = copy.deepcopy(raw_features)
    filled, unit_texts = fill_extraction(raw_features, essay_text)

    assert raw_features == original
    assert len(unit_texts) == 3

    layer_0 = filled["layer_0"]
    assert layer_0["units"] == 3
    assert layer_0["unit_lengths"] == [len(u) for u in unit_texts]
    assert layer_0["per_unit"]["transitions"] == [1, 1, 0]
    assert layer_0["per_unit"]["revisions"] == [0, 1, 0]
    assert layer_0["reasons"] == 2

    assert filled["layer_2"]["revisions"] == 1
    assert filled["layer_2"]["revision_depth_sum"] == pytest.approx(0.5)
    assert filled["layer_3"]["hedges"] == 2
    assert filled["adjacency_links"] == 2
    assert filled["evidence_types"] == ["example", "data", "authority"]


def test_fill_extraction_keeps_extractor_fields(raw_features, essay_text):
    """Claims, evidence, layer_1 and the other extractor fields are untouched."""
    filled, _ = fill_extraction(raw_features, essay_text)
    assert filled["layer_0"]["claims"] == 4
    assert filled["layer_0"]["per_unit"]["claims"] == [1, 1, 1, 1]
    assert filled["layer_1"] == raw_features["layer_1"]
    assert filled["layer_2"]["belief_change"] is True
    assert filled["layer_3"]["intent_markers"] == 2


def test_fill_extraction_reserved_and_forbidden_keys(raw_features, essay_text):
    """backend_reserved is kept or created; a nested raw_features key is dropped."""
    raw_features["backend_reserved"] = {"kpf_sim": 0.8}
    raw_features["raw_features"] = {"nested": True}
    filled, _ = fill_extraction(raw_features, essay_text)
    assert filled["backend_reserved"] == {"kpf_sim": 0.8, "tps_h": None}
    assert "raw_features" not in filled

    del raw_features["backend_reserved"]
    filled, _ = fill_extraction(raw_features, essay_text)
    assert filled["backend_reserved"] == {"kpf_sim": None, "tps_h": None}
