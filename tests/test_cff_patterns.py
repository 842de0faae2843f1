"""
Pytest tests for observed-pattern scoring and selection.
"""

from __future__ import annotations

import pytest

from backend_neuprint.analytics.cff_patterns import (
    PROFILE_META,
    REASON_MISSING,
    REASON_NO_KPF_TPS,
    CoreAxes,
    authenticity,
    avg,
    compute_patterns,
    machine_score,
)

SAMPLE_INDICES = {"AAS": 0.62, "CTF": 0.85, "RMD": 1.0, "RDX": 0.445, "EDS": 0.6, "IFD": 1.0}


def _scores(result):
    return {p.meta.code: p.score for p in result.all_profiles}


def test_missing_safe_helpers():
    assert avg(None, 0.4) == 0.4
    assert avg(0.2, 0.4) == pytest.approx(0.3)
    assert avg(None, None) is None
    assert authenticity(0.2, None) == pytest.approx(0.8)
    assert machine_score(None, 0.3) == pytest.approx(0.7)


def test_meta_axes_from_indices():
    core = CoreAxes.from_indices(SAMPLE_INDICES)
    assert core.Analyticity == pytest.approx(0.61)
    assert core.Flow == pytest.approx(0.925)
    assert core.MetacogRaw == pytest.approx(0.7225)


def test_sample_profile_scores_and_selection():
    """IE and RE pass 0.62; HE and MD stay unresolved without KPF/TPS."""
    result = compute_patterns(CoreAxes.from_indices(SAMPLE_INDICES))
    scores = _scores(result)
    assert scores["RE"] == pytest.approx(0.70525)
    assert scores["IE"] == pytest.approx(0.711)
    assert scores["EW"] == pytest.approx(0.609)
    assert scores["AR"] == pytest.approx(0.443)
    assert scores["SI"] == pytest.approx(0.61)
    assert scores["RR"] == pytest.approx(0.267)
    assert scores["HE"] is None and scores["MD"] is None
    assert [p.meta.code for p in result.selected] == ["IE", "RE"]
    assert result.to_dict()["primary_label"] == "Intuitive Explorer"
    assert result.to_dict()["secondary_label"] == "Reflective Explorer"


def test_unresolved_reasons():
    result = compute_patterns(CoreAxes.from_indices(SAMPLE_INDICES))
    by_code = {p.meta.code: p for p in result.all_profiles}
    assert by_code["HE"].reasons == [REASON_NO_KPF_TPS]
    assert by_code["HE"].to_dict()["score"] is None
    assert by_code["AR"].reasons == ["score < threshold (0.62)"]


def test_min_count_fills_from_pool():
    """Only RR passes, so the second slot is the next best resolved score."""
    indices = {"AAS": 0.2, "CTF": 0.2, "RMD": 0.2, "RDX": 0.9, "EDS": 0.2, "IFD": 0.1}
    result = compute_patterns(CoreAxes.from_indices(indices))
    assert [p.meta.code for p in result.selected] == ["RR", "RE"]
    assert result.primary.code == "RR"


def test_kpf_tps_resolve_human_expression():
    """Low KPF and high TPS make HE the top profile."""
    result = compute_patterns(CoreAxes.from_indices(SAMPLE_INDICES, kpf=0.1, tps=0.9))
    scores = _scores(result)
    assert scores["HE"] == pytest.approx(0.9075)
    assert scores["MD"] == pytest.approx(0.1)
    assert result.primary.code == "HE"


def test_no_axes_uses_default_pair():
    result = compute_patterns(CoreAxes())
    assert result.selected == []
    assert result.primary == PROFILE_META["RE"]
    assert result.secondary == PROFILE_META["EW"]
    assert {p.reasons[0] for p in result.all_profiles if p.meta.code == "RE"} == {REASON_MISSING}
