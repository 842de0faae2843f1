"""
FRI engine: fluency/rigor index (0..5) from rubric dimensions R3..R6.

CRS = 0.30*R3 + 0.40*R4 + 0.30*R5
RM  = 0.85 + (R6/5) * 0.30          (0.85..1.15)
FRI = clamp(CRS * RM, 0, 5), rounded to 2 decimals.

R3 evidence quality, R4 reasoning & counterfactuals, R5 coherence & clarity,
R6 metacognition & self-repair.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from backend_neuprint.core.numeric import clamp0to5, is_finite_number, round2
from backend_neuprint.neuprint_logging import get_logger

logger = get_logger(__name__)

W_R3 = 0.30
W_R4 = 0.40
W_R5 = 0.30
RM_BASE = 0.85
RM_SPAN = 0.30

# (inclusive upper bound, text); the last band has no bound
FRI_BANDS: tuple[tuple[float | None, str], ...] = (
    (0.8, "Your reasoning structure is still taking shape. Ideas often appear separately, making connections harder to follow."),
    (1.6, "Early signs of structure are beginning to appear. Some steps are present, but connections and checks are not yet consistent."),
    (2.4, "A basic reasoning structure is forming. Key steps align, though stability can drop as complexity increases."),
    (3.2, "Your reasoning structure works well overall. Most ideas connect, with occasional gaps in validation or monitoring."),
    (4.0, "Your reasoning structure is stable in most situations. Connections and evaluations usually remain consistent."),
    (None, "You can reason structurally even in complex situations. Your thinking stays stable and self-regulated as ideas scale."),
)


@dataclass
class FRIResult:
    score: float
    interpretation: str
    crs: float
    rm: float

    def to_dict(self) -> dict[str, Any]:
        return {"score": self.score, "interpretation": self.interpretation}


def get_r_score(dimensions: Sequence[Any] | None, code: str) -> float:
    """Score of the first dimension with this code, clamped to [0, 5]; 0 when absent."""
    for dim in dimensions or ():
        if isinstance(dim, dict) and dim.get("code") == code:
            value = dim.get("score_1to5")
            return clamp0to5(value) if is_finite_number(value) else 0.0
    return 0.0


def fri_note(fri: float) -> str:
    x = clamp0to5(fri)
    for upper, text in FRI_BANDS:
        if upper is None or x <= upper:
            return text
    return FRI_BANDS[-1][1]


def compute_fri(r3: float, r4: float, r5: float, r6: float) -> FRIResult:
    r3, r4, r5, r6 = clamp0to5(r3), clamp0to5(r4), clamp0to5(r5), clamp0to5(r6)
    crs = W_R3 * r3 + W_R4 * r4 + W_R5 * r5
    rm = RM_BASE + (r6 / 5) * RM_SPAN
    score = round2(clamp0to5(crs * rm))
    result = FRIResult(score=score, interpretation=fri_note(score), crs=crs, rm=rm)
    logger.debug("fri_engine_result", crs=round2(crs), rm=round2(rm), fri=score)
    return result


def compute_fri_from_dimensions(dimensions: Sequence[Any] | None) -> FRIResult:
    return compute_fri(
        get_r_score(dimensions, "R3"),
        get_r_score(dimensions, "R4"),
        get_r_score(dimensions, "R5"),
        get_r_score(dimensions, "R6"),
    )
