"""
Pytest tests for the SRI engine (rubric4, instability scores, bands).
"""

from __future__ import annotations

import math

import pytest

from backend_neuprint.analytics.raw_features import RawFeatures
from backend_neuprint.analytics.sri import (
    SRI_INSUFFICIENT_NOTE,
    SRI_NOTES,
    SRIBand,
    band_for,
    compute_rubric4,
    compute_sri,
    compute_sri_from_raw,
    meta_imbalance_score,
    safe_int,
    transition_jump_score,
)


def test_flat_vector_without_instability_is_high():
    result = compute_sri([0.5, 0.5, 0.5, 0.5], 0.0, 0.0)
    assert result.sri == pytest.approx(1.0)
    assert result.band is SRIBand.HIGH
    assert result.to_dict() == {"score": 1.0, "interpretation": SRI_NOTES[SRIBand.HIGH]}


def test_spread_vector_is_low():
    """std 0.5 saturates the variance term: instability 0.4 + 0.3*0.5 + 0.3*0.5."""
    result = compute_sri([1, 0, 1, 0], 0.5, 0.5)
    assert result.variance_score == pytest.approx(1.0)
    assert result.sri == pytest.approx(0.3)
    assert result.band is SRIBand.LOW


def test_non_finite_instability_scores_are_neutral():
    result = compute_sri([0.5, 0.5, 0.5, 0.5], math.nan, None)
    assert result.transition_score == 0.5
    assert result.meta_score == 0.5
    assert result.sri == pytest.approx(0.7)
    assert result.band is SRIBand.MODERATE


def test_short_vector_is_insufficient():
    result = compute_sri([0.4], 0.1, 0.1)
    assert result.sri == 0.5
    assert result.notes == SRI_INSUFFICIENT_NOTE
    assert compute_sri(None, 0, 0).band is SRIBand.MODERATE


@pytest.mark.parametrize("sri, band", [(0.8, SRIBand.HIGH), (0.65, SRIBand.MODERATE), (0.6499, SRIBand.LOW)])
def test_band_boundaries(sri, band):
    assert band_for(sri) is band


def test_safe_int():
    assert safe_int(3.9) == 3
    assert safe_int(-2) == 0
    assert safe_int(None, 7) == 7


def test_rubric_and_sub_scores_on_sample(raw_features):
    """Coherence: full transition quality, adjacency 3/15, no drift -> 4.0."""
    rf = RawFeatures.from_mapping(raw_features)
    rubric = compute_rubric4(rf)
    assert rubric.coherence == 4.0
    assert all(0 <= x <= 1 for x in rubric.vector())
    assert transition_jump_score(rf) == pytest.approx(0.10486, abs=1e-4)
    assert meta_imbalance_score(rf) == pytest.approx(0.0818, abs=1e-3)


def test_small_unit_penalty():
    """Fewer than three units adds 0.15; missing arrays count 0.5 volatility each."""
    rf = RawFeatures(units=2, transitions=1, transition_ok=1)
    assert transition_jump_score(rf) == pytest.approx(0.25 * 0.5 + 0.25 * 0.5 + 0.15)


def test_compute_sri_from_raw_attaches_rubric(raw_features):
    result = compute_sri_from_raw(RawFeatures.from_mapping(raw_features))
    assert result.rubric is not None
    assert 0.0 <= result.sri <= 1.0
    diag = result.diagnostics()
    assert diag["band"] == result.band.value
    assert diag["weights"] == {"w_var": 0.4, "w_trans": 0.3, "w_meta": 0.3}
