"""
Pytest tests for the cohort percentile engine.
"""

from __future__ import annotations

from backend_neuprint.analytics.cohort import (
    COHORT_BANDS,
    COHORT_TOP_TEXT,
    DEGENERATE_PERCENTILE,
    compute_cohort,
    percentile_0to1,
    percentile_from_curve,
    top_percent_label,
)


def test_reference_list_counts_strictly_lower():
    """Share of reference values strictly below; ties are not counted."""
    assert percentile_0to1(3, [1, 2, 3, 4]) == 0.5
    assert percentile_0to1(0, [1, 2]) == 0.0


def test_default_curve_at_worked_example():
    """Trapezoid area below 4.12 over total area 128."""
    assert percentile_from_curve(4.12) == 0.929
    assert percentile_from_curve(2.5) == 0.389


def test_default_curve_edges():
    assert percentile_from_curve(0.0) == 0.0
    assert percentile_from_curve(5.0) == 1.0
    assert percentile_from_curve(9.0) == 1.0


def test_degenerate_curve():
    assert percentile_from_curve(3.0, [(1.0, 5)]) == DEGENERATE_PERCENTILE
    assert percentile_from_curve(3.0, [(1.0, 0), (2.0, 0)]) == DEGENERATE_PERCENTILE


def test_top_percent_label_floor_of_one():
    assert top_percent_label(0.5) == "Top 50%"
    assert top_percent_label(0.995) == "Top 1%"
    assert top_percent_label(1.0) == "Top 1%"
    assert top_percent_label(0.0) == "Top 100%"


def test_compute_cohort_default_curve():
    """FRI 4.12 -> Top 7%, the band for at least 5 percent."""
    result = compute_cohort(4.12)
    assert result.percentile_0to1 == 0.929
    assert result.top_percent_label == "Top 7%"
    assert result.interpretation == COHORT_BANDS[4][1]


def test_compute_cohort_bands_with_reference():
    """Median of the reference -> Top 50% band; above everything -> top text."""
    assert compute_cohort(3, [1, 2, 3, 4]).interpretation == COHORT_BANDS[0][1]
    top = compute_cohort(5, [1, 2, 3, 4])
    assert top.top_percent_label == "Top 1%"
    assert top.interpretation == COHORT_TOP_TEXT
    assert set(top.to_dict()) == {"percentile_0to1", "top_percent_label", "interpretation"}
