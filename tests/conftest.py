"""
Pytest fixtures for NeuPrint tests: a realistic raw-feature record, RSL
rubric dimensions, an essay text and the combined payload.
"""

from __future__ import annotations

import copy

import pytest

ESSAY_TEXT = (
    "Cities face a choice about how to spend limited transport budgets.\n\n"
    "First, protected bike lanes reduce injuries because they separate riders from traffic. "
    "For example, according to a city report, crashes fell 30 percent after one corridor opened.\n\n"
    "Second, some residents argue that lanes hurt local shops. "
    "I change my view here: rather than removing parking everywhere, planners could phase lanes in.\n\n"
    "Finally, the evidence may not transfer to every city, which means pilots should come first."
)

RAW_FEATURES = {
    "layer_0": {
        "units": 4,
        "claims": 4,
        "reasons": 5,
        "evidence": 3,
        "unit_lengths": [210, 180, 240, 150],
        "per_unit": {
            "claims": [1, 1, 1, 1],
            "reasons": [2, 1, 1, 1],
            "evidence": [1, 1, 1, 0],
            "transitions": [1, 1, 0, 1],
            "transition_ok": [1, 1, 0, 1],
            "revisions": [0, 1, 0, 1],
        },
    },
    "layer_1": {
        "sub_claims": 2,
        "warrants": 3,
        "counterpoints": 1,
        "refutations": 1,
        "structure_type": "hierarchical",
    },
    "layer_2": {
        "transitions": 3,
        "transition_ok": 3,
        "revisions": 2,
        "revision_depth_sum": 0.7,
        "belief_change": True,
        "evidence_types": ["data", "authority"],
    },
    "layer_3": {
        "intent_markers": 2,
        "drift_segments": 0,
        "hedges": 1,
        "loops": 0,
        "self_regulation_signals": 1,
    },
    "adjacency_links": 3,
    "backend_reserved": {"kpf_sim": None, "tps_h": None},
}

DIMENSIONS = [
    {"code": "R1", "score_1to5": 4},
    {"code": "R2", "score_1to5": 4},
    {"code": "R3", "score_1to5": 4},
    {"code": "R4", "score_1to5": 4},
    {"code": "R5", "score_1to5": 4},
    {"code": "R6", "score_1to5": 3},
    {"code": "R7", "score_1to5": 3},
    {"code": "R8", "score_1to5": 3},
]


@pytest.fixture
def essay_text() -> str:
    return ESSAY_TEXT


@pytest.fixture
def raw_features() -> dict:
    """Fresh deep copy of the sample raw-feature record."""
    return copy.deepcopy(RAW_FEATURES)


@pytest.fixture
def dimensions() -> list[dict]:
    """R1..R8 rubric scores; R3..R6 give the FRI worked example (4.12)."""
    return copy.deepcopy(DIMENSIONS)


@pytest.fixture
def payload(raw_features, dimensions) -> dict:
    """Wrapped payload without input text (no extraction fill)."""
    return {"raw_features": raw_features, "rsl": {"dimensions": dimensions}}
