"""
SRI engine: structural reliability index (0..1) from raw features.

Pipeline:
1. raw -> rubric4 (coherence, structure, evaluation, integration), each 0..5
2. rubric4 -> rsl vector (0..1, length 4)
3. raw -> transitionJumpScore, metaImbalanceScore (0..1, higher is worse)
4. instability = 0.4*clamp(std(vector)/0.5) + 0.3*transitionJump + 0.3*metaImbalance
   SRI = 1 - instability

Bands: HIGH >= 0.8, MODERATE >= 0.65, LOW otherwise. The public output is
only {score, interpretation}; band and sub-scores stay in diagnostics.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

from backend_neuprint.analytics.raw_features import RawFeatures
from backend_neuprint.core.numeric import (
    clamp01,
    entropy01,
    is_finite_number,
    mean,
    peak01,
    pstd,
    round2,
)
from backend_neuprint.neuprint_logging import get_logger

logger = get_logger(__name__)

W_VAR = 0.4
W_TRANS = 0.3
W_META = 0.3

VARIANCE_REF = 0.5
REV_DEPTH_REF = 1.5
COUNTER_REF = 0.6
HEDGE_REF = 0.7
DRIFT_REF = 0.25
REV_RATE_TARGET = 0.15
REV_RATE_WIDTH = 0.15

NEUTRAL_SCORE = 0.5


class SRIBand(str, Enum):
    HIGH = "HIGH"
    MODERATE = "MODERATE"
    LOW = "LOW"


SRI_NOTES = {
    SRIBand.HIGH: (
        "Structural coherence is consistently maintained across reasoning segments. "
        "The structural reference is considered stable."
    ),
    SRIBand.MODERATE: (
        "Structural coherence is generally maintained, with localized variability across segments. "
        "Stability is acceptable with moderate fluctuation."
    ),
    SRIBand.LOW: (
        "Structural variability is evident across reasoning segments. "
        "Stability is limited and interpretive caution is advised."
    ),
}
SRI_INSUFFICIENT_NOTE = (
    "Structural reliability is not fully available due to insufficient structural data. "
    "Results are shown with coaching emphasis."
)


@dataclass
class Rubric4:
    coherence: float
    structure: float
    evaluation: float
    integration: float

    def vector(self) -> list[float]:
        return [clamp01(x / 5) for x in (self.coherence, self.structure, self.evaluation, self.integration)]

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


@dataclass
class SRIResult:
    sri: float
    band: SRIBand
    notes: str
    variance_score: float = NEUTRAL_SCORE
    transition_score: float = NEUTRAL_SCORE
    meta_score: float = NEUTRAL_SCORE
    instability: float = NEUTRAL_SCORE
    rubric: Rubric4 | None = None
    vector: list[float] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Public shape."""
        return {"score": round2(self.sri), "interpretation": self.notes}

    def diagnostics(self) -> dict[str, Any]:
        return {
            "sri": self.sri,
            "band": self.band.value,
            "rubric": self.rubric.to_dict() if self.rubric else None,
            "vector": list(self.vector),
            "variance_score": self.variance_score,
            "transition_score": self.transition_score,
            "meta_score": self.meta_score,
            "instability": self.instability,
            "weights": {"w_var": W_VAR, "w_trans": W_TRANS, "w_meta": W_META},
        }


def safe_int(x: Any, fallback: int = 0) -> int:
    """floor(max(0, x)) for finite numbers, fallback otherwise."""
    return max(0, math.floor(x)) if is_finite_number(x) else fallback


def finite_values(values: Sequence[Any] | None) -> list[float]:
    return [float(v) for v in values or () if is_finite_number(v)]


def compute_rubric4(raw: RawFeatures) -> Rubric4:
    units = max(1, safe_int(raw.units, 1))
    claims = safe_int(raw.claims)
    reasons = safe_int(raw.reasons)
    evidence = safe_int(raw.evidence)
    warrants = safe_int(raw.warrants)
    counter = safe_int(raw.counterpoints) + safe_int(raw.refutations)
    transitions = safe_int(raw.transitions)
    transition_ok = safe_int(raw.transition_ok)
    revisions = safe_int(raw.revisions)
    depth_sum = raw.revision_depth_sum if is_finite_number(raw.revision_depth_sum) else 0.0
    drift = safe_int(raw.drift_segments) + safe_int(raw.loops)

    trans_rate = clamp01(transitions / max(1, units - 1))
    trans_quality = clamp01(transition_ok / max(1, transitions))
    rev_rate = clamp01(revisions / max(1, units))
    rev_depth01 = clamp01((depth_sum / max(1, revisions)) / REV_DEPTH_REF)
    drift_rate = clamp01(drift / max(1, units))

    atoms = max(1, claims + reasons + warrants + evidence)
    adjacency01 = clamp01(safe_int(raw.adjacency_links) / atoms)

    per_claim = max(1, claims)
    evidence01 = clamp01(evidence / per_claim)
    warrant01 = clamp01(warrants / per_claim)
    counter_ref01 = clamp01((counter / per_claim) / COUNTER_REF)
    hedge_penalty = clamp01((safe_int(raw.hedges) / per_claim) / HEDGE_REF)
    balance = entropy01([claims, reasons, warrants, evidence])

    coherence01 = clamp01(0.45 * trans_quality + 0.25 * adjacency01 + 0.30 * (1 - drift_rate))
    structure01 = clamp01(
        0.40 * trans_rate
        + 0.30 * clamp01(safe_int(raw.intent_markers) / 2)
        + 0.30 * peak01(rev_rate, REV_RATE_TARGET, REV_RATE_WIDTH)
    )
    evaluation01 = clamp01(
        0.35 * evidence01 + 0.25 * warrant01 + 0.25 * counter_ref01 + 0.15 * (1 - hedge_penalty)
    )
    integration01 = clamp01(
        0.50 * balance
        + 0.20 * clamp01(safe_int(raw.self_regulation_signals) / 2)
        + 0.20 * trans_quality
        + 0.10 * rev_depth01
    )

    return Rubric4(
        coherence=round2(5 * coherence01),
        structure=round2(5 * structure01),
        evaluation=round2(5 * evaluation01),
        integration=round2(5 * integration01),
    )


def transition_jump_score(raw: RawFeatures) -> float:
    units = max(1, safe_int(raw.units, 1))
    transitions = safe_int(raw.transitions)
    bad_rate = clamp01(1 - clamp01(safe_int(raw.transition_ok) / max(1, transitions)))

    per_unit = finite_values(raw.per_unit_values("transitions"))
    vol = clamp01(pstd(per_unit) / max(1, mean(per_unit) + 1)) if len(per_unit) > 1 else 0.5

    lengths = finite_values(raw.unit_lengths)
    len_var = clamp01(pstd(lengths) / max(1, mean(lengths))) if len(lengths) > 1 else 0.5

    small_units_penalty = 0.15 if units < 3 else 0.0
    return clamp01(0.50 * bad_rate + 0.25 * vol + 0.25 * len_var + small_units_penalty)


def meta_imbalance_score(raw: RawFeatures) -> float:
    units = max(1, safe_int(raw.units, 1))
    claims = safe_int(raw.claims)
    balance = entropy01([claims, safe_int(raw.reasons), safe_int(raw.warrants), safe_int(raw.evidence)])
    drift_rate = clamp01((safe_int(raw.drift_segments) + safe_int(raw.loops)) / max(1, units))
    hedge_penalty = clamp01((safe_int(raw.hedges) / max(1, claims)) / HEDGE_REF)
    return clamp01(0.60 * (1 - balance) + 0.20 * clamp01(drift_rate / DRIFT_REF) + 0.20 * hedge_penalty)


def band_for(sri: float) -> SRIBand:
    if sri >= 0.8:
        return SRIBand.HIGH
    if sri >= 0.65:
        return SRIBand.MODERATE
    return SRIBand.LOW


def compute_sri(
    rsl_vector: Sequence[Any] | None,
    transition_jump: float | None,
    meta_imbalance: float | None,
) -> SRIResult:
    """Core SRI from a rubric vector and two instability scores (non-finite -> 0.5)."""
    if rsl_vector is None or len(rsl_vector) < 2:
        return SRIResult(sri=NEUTRAL_SCORE, band=SRIBand.MODERATE, notes=SRI_INSUFFICIENT_NOTE)

    v01 = [clamp01(x) for x in rsl_vector]
    variance_score = clamp01(pstd(v01) / VARIANCE_REF)
    transition_score = clamp01(transition_jump if is_finite_number(transition_jump) else NEUTRAL_SCORE)
    meta_score = clamp01(meta_imbalance if is_finite_number(meta_imbalance) else NEUTRAL_SCORE)

    instability = clamp01(W_VAR * variance_score + W_TRANS * transition_score + W_META * meta_score)
    sri = clamp01(1 - instability)
    band = band_for(sri)
    return SRIResult(
        sri=sri,
        band=band,
        notes=SRI_NOTES[band],
        variance_score=variance_score,
        transition_score=transition_score,
        meta_score=meta_score,
        instability=instability,
        vector=v01,
    )


def compute_sri_from_raw(raw: RawFeatures) -> SRIResult:
    rubric = compute_rubric4(raw)
    result = compute_sri(rubric.vector(), transition_jump_score(raw), meta_imbalance_score(raw))
    result.rubric = rubric
    logger.debug(
        "sri_result",
        sri=round2(result.sri),
        band=result.band.value,
        rubric=rubric.to_dict(),
        transition_score=round2(result.transition_score),
        meta_score=round2(result.meta_score),
    )
    return result
