"""
Pytest tests for structural control signals (agency indicators).
"""

from __future__ import annotations

import pytest

from backend_neuprint.analytics.raw_features import RawFeatures
from backend_neuprint.analytics.structural_control import (
    AgencyRaw,
    agency_raw_from_features,
    avg_chain_length,
    choose_k,
    compute_structural_control,
    interval_diffs,
    revision_depth,
    segment_ranges,
    structural_variance,
)


@pytest.mark.parametrize("units, k", [(1, 3), (5, 3), (9, 3), (16, 4), (36, 6), (100, 8)])
def test_choose_k(units, k):
    assert choose_k(units) == k


def test_segment_ranges_cover_all_units():
    assert segment_ranges(4, 3) == [(0, 1), (1, 2), (2, 4)]
    assert segment_ranges(7, 3) == [(0, 2), (2, 4), (4, 7)]


def test_sample_signals(raw_features):
    """Variance saturates; rhythm mixes length and transition-interval CV; depth 0.7 / 3."""
    signals = compute_structural_control(RawFeatures.from_mapping(raw_features))
    assert signals.to_dict() == {
        "structural_variance": 1.0,
        "human_rhythm_index": 0.35,
        "transition_flow": 0.92,
        "revision_depth": 0.23,
    }


def test_arrays_with_wrong_length_are_ignored(raw_features):
    """units=5 with 4-entry arrays: no per-unit data, no lengths."""
    raw_features["layer_0"]["units"] = 5
    agency = agency_raw_from_features(RawFeatures.from_mapping(raw_features))
    assert agency.per_unit is None
    assert agency.unit_lengths is None
    assert structural_variance(agency) == 0.0


def test_uniform_segments_have_no_variance():
    agency = AgencyRaw(units=6, per_unit={"claims": [1.0] * 6, "reasons": [2.0] * 6})
    assert structural_variance(agency) == 0.0


def test_chain_and_interval_helpers():
    assert avg_chain_length([1, 1, 0, 1]) == 1.5
    assert avg_chain_length([0, 0]) == 1.0
    assert avg_chain_length(None) == 1.0
    assert interval_diffs([3, 0, 1]) == [1, 2]
    assert interval_diffs([2]) == []


def test_revision_depth_falls_back_to_log_count():
    """Without any depth value, ln(1 + revisions) / ln(13)."""
    agency = AgencyRaw(units=4, totals={"revision_depth_sum": None, "revisions": 12})
    assert revision_depth(agency) == pytest.approx(1.0)
    agency = AgencyRaw(units=4, totals={"revision_depth_sum": 6.0, "revisions": 1})
    assert revision_depth(agency) == 1.0


def test_empty_record():
    signals = compute_structural_control(RawFeatures())
    assert signals.structural_variance == 0.0
    assert signals.human_rhythm_index == 0.0
    assert signals.revision_depth == 0.0
