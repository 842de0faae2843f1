"""
Pytest tests for the FRI engine.
"""

from __future__ import annotations

import pytest

from backend_neuprint.analytics.fri import (
    FRI_BANDS,
    compute_fri,
    compute_fri_from_dimensions,
    fri_note,
    get_r_score,
)


def test_fri_worked_example(dimensions):
    """R3=R4=R5=4, R6=3 -> CRS 4.0, RM 1.03, FRI 4.12."""
    result = compute_fri_from_dimensions(dimensions)
    assert result.crs == pytest.approx(4.0)
    assert result.rm == pytest.approx(1.03)
    assert result.score == 4.12
    assert result.interpretation == FRI_BANDS[-1][1]


def test_fri_clamped_to_five():
    """All fives: 5 * 1.15 clamps to 5."""
    assert compute_fri(5, 5, 5, 5).score == 5.0


def test_fri_zero_when_dimensions_missing():
    result = compute_fri_from_dimensions([])
    assert result.score == 0.0
    assert result.interpretation == FRI_BANDS[0][1]


def test_get_r_score_first_match_and_clamp():
    dims = [{"code": "R3", "score_1to5": 9}, {"code": "R3", "score_1to5": 1}, {"code": "R4", "score_1to5": "x"}]
    assert get_r_score(dims, "R3") == 5.0
    assert get_r_score(dims, "R4") == 0.0
    assert get_r_score(None, "R5") == 0.0


@pytest.mark.parametrize(
    "fri, band",
    [(0.8, 0), (0.81, 1), (2.4, 2), (3.2, 3), (4.0, 4), (4.01, 5)],
)
def test_fri_band_boundaries_are_inclusive(fri, band):
    """Upper bounds are inclusive."""
    assert fri_note(fri) == FRI_BANDS[band][1]


def test_fri_to_dict(dimensions):
    assert set(compute_fri_from_dimensions(dimensions).to_dict()) == {"score", "interpretation"}
