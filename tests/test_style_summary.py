"""
Pytest tests for the 9-type cognitive style summary.
"""

from __future__ import annotations

import pytest

from backend_neuprint.analytics.style_summary import (
    PHRASES,
    PRIMARY_PATTERNS,
    StyleInputs,
    classify_style_id,
    compute_style_summary,
    exploration_score,
    structure_score,
)

SAMPLE_CFF = {"AAS": 0.62, "CTF": 0.85, "RMD": 1.0, "RDX": 0.445, "EDS": 0.6, "IFD": 1.0}


@pytest.mark.parametrize(
    "structure, exploration, style_id",
    [(0.9, 0.9, 1), (0.67, 0.45, 2), (0.67, 0.1, 3), (0.5, 0.5, 5), (0.44, 0.67, 7), (0.1, 0.1, 9)],
)
def test_classify_style_id_grid(structure, exploration, style_id):
    assert classify_style_id(structure, exploration) == style_id


def test_sample_scores_balanced_and_adaptive():
    """structure .484 and exploration .6325 are both medium -> id 5."""
    inputs = StyleInputs.from_scores(SAMPLE_CFF)
    assert structure_score(inputs) == pytest.approx(0.484)
    assert exploration_score(inputs) == pytest.approx(0.6325)
    summary = compute_style_summary(inputs)
    assert summary.style_id == 5
    assert summary.to_dict() == {
        "primary_pattern": PRIMARY_PATTERNS[5],
        "representative_phrase": PHRASES[5],
    }
    assert summary.diagnostics()["structure"] == 0.48


def test_rsl_inputs_raise_exploration():
    inputs = StyleInputs.from_scores(SAMPLE_CFF, {"rsl_hypothesis": 1.0, "rsl_expansion": 1.0})
    assert exploration_score(inputs) == pytest.approx(0.9325)
    assert compute_style_summary(inputs).style_id == 4


def test_missing_and_bad_values_read_as_zero():
    inputs = StyleInputs.from_scores({"AAS": None, "CTF": "x", "RMD": 7}, {"rsl_control": float("nan")})
    assert inputs.aas == 0.0
    assert inputs.ctf == 0.0
    assert inputs.rmd == 1.0
    assert inputs.rsl_control == 0.0
