"""
Pytest tests for RSL signal states and the gated level engine.
"""

from __future__ import annotations

import pytest

from backend_neuprint.analytics.fri import compute_fri
from backend_neuprint.analytics.rsl_level import (
    BASIS_FRI_BAND,
    BASIS_L5_FAILED,
    BASIS_L5_PASSED,
    BASIS_L6,
    CUT_L2,
    CUT_L6,
    base_level,
    compute_rsl_level,
    strict_numeric_gate,
)
from backend_neuprint.analytics.signals import (
    SignalState,
    compute_signals,
    is_a7_present,
    sanitize_quotes,
)

SELF_REPAIR = {"self_repair_quote_candidates": ["On reflection I was wrong about the cost."]}
FULL_QUOTES = {
    "self_repair_quote_candidates": ["On reflection I was wrong about the cost."],
    "framework_generation_quote_candidates": ["A three-step test can be reused for any city."],
    "A7_value_aware_quote_candidates": ["Safety must come before convenience."],
}


def test_a7_states():
    """Constraint or numeric markers -> Present; value words -> Emerging; no marker -> Emerging."""
    assert compute_signals({"A7_value_aware_quote_candidates": ["We should weigh the cost."]}).A7_value_aware.state is SignalState.PRESENT
    assert compute_signals({"A7_value_aware_quote_candidates": ["This matters: it is important."]}).A7_value_aware.state is SignalState.EMERGING
    assert compute_signals({"A7_value_aware_quote_candidates": ["Nice weather today."]}).A7_value_aware.state is SignalState.EMERGING
    assert compute_signals({}).A7_value_aware.state is SignalState.NOT_EVIDENCED


def test_a7_markers_respect_word_boundaries():
    """'if' inside 'clarify' is not a condition; a number or a Korean stem is enough."""
    assert not is_a7_present("Let me clarify.")
    assert is_a7_present("Keep it under 30 minutes.")
    assert is_a7_present("비용이 너무 크다")


def test_a8_states():
    assert compute_signals({"A8_perspective_flexible_quote_candidates": ["Cars are fast, but bikes are cheap."]}).A8_perspective_flexible.state is SignalState.PRESENT
    assert compute_signals({"A8_perspective_flexible_quote_candidates": ["A different perspective helps."]}).A8_perspective_flexible.state is SignalState.EMERGING


def test_binary_signals_and_quotes():
    """self_repair and framework_generation are Present whenever a quote survives."""
    signals = compute_signals(FULL_QUOTES)
    assert signals.self_repair.is_present()
    assert signals.framework_generation.is_present()
    assert signals.A8_perspective_flexible.to_dict() == {"state": "Not_evidenced", "evidence_quotes": []}


def test_sanitize_quotes():
    """Multi-line, over-long and duplicate quotes are dropped; at most two are kept."""
    quotes = sanitize_quotes(["two\nlines", "x" * 221, "Keep  this", "keep this", "second", "third"])
    assert quotes == ["Keep this", "second"]


def test_base_level_cuts():
    assert base_level(0) == "L1"
    assert base_level(CUT_L2 - 0.001) == "L1"
    assert base_level(CUT_L2) == "L2"
    assert base_level(3.5) == "L4"
    assert base_level(5) == "L5"


@pytest.mark.parametrize(
    "fri, level",
    [
        (2.0833333333, "L2"),
        (2.0833, "L1"),
        (2.75, "L3"),
        (2.7499, "L2"),
        (3.4166666667, "L4"),
        (3.4166, "L3"),
        (4.0, "L5"),
        (3.9999, "L4"),
    ],
)
def test_base_level_exact_boundaries(fri, level):
    """Cuts are 5/6 of the legacy 0..6 cuts and apply with >=."""
    assert base_level(fri) == level


def test_l5_gate_fails_without_self_repair():
    """FRI 4.12 is an L5 band but without self_repair the level drops to L4."""
    result = compute_rsl_level(4.12, 3, 3, 3, None)
    assert result.code == "L4"
    assert result.basis == [BASIS_FRI_BAND, BASIS_L5_FAILED]
    assert result.to_dict()["short_name"] == "L4 Integrated"


def test_l5_gate_passes_with_self_repair():
    result = compute_rsl_level(4.12, 3, 3, 3, SELF_REPAIR)
    assert result.code == "L5"
    assert result.basis == [BASIS_FRI_BAND, BASIS_L5_PASSED]


def test_l6_promotion_requires_strict_numeric_gate():
    """All signals present: L6 only when FRI >= 4.5, R6 >= 4 and R7 or R8 >= 4."""
    assert compute_rsl_level(4.12, 5, 5, 5, FULL_QUOTES).code == "L5"
    promoted = compute_rsl_level(4.6, 4, 3, 4, FULL_QUOTES)
    assert promoted.code == "L6"
    assert promoted.basis[-1] == BASIS_L6
    assert promoted.to_dict()["full_name"] == "L6 Generative Reasoning"
    assert compute_rsl_level(4.6, 4, 3, 3, FULL_QUOTES).code == "L5"


def test_emerging_expansion_never_promotes():
    quotes = dict(FULL_QUOTES)
    quotes["A7_value_aware_quote_candidates"] = ["It is important."]
    assert compute_rsl_level(4.8, 5, 5, 5, quotes).code == "L5"


@pytest.mark.parametrize(
    "fri, r6, r7, r8, expected",
    [(4.5, 4, 4, 0, True), (4.5, 4, 0, 4, True), (4.49, 4, 4, 4, False), (4.9, 3, 5, 5, False)],
)
def test_strict_numeric_gate(fri, r6, r7, r8, expected):
    assert strict_numeric_gate(fri, r6, r7, r8) is expected


def test_fri_of_exactly_four_point_five_reaches_l6():
    """R3..R5 at 4.13 with R6 = 4 round to FRI 4.50, which sits on the L6 cut."""
    fri = compute_fri(4.13, 4.13, 4.13, 4).score
    assert fri == 4.5
    assert CUT_L6 == 4.5
    result = compute_rsl_level(fri, 4, 4, 4, FULL_QUOTES)
    assert result.code == "L6"
    assert result.basis[-1] == BASIS_L6
