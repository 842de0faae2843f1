"""
Reasoning-control summary: control vector (A, D, R) and nearest-centroid pattern.

A (agency), D (depth), R (reflection) are built from saturating transforms
sat(x, k) = x / (x + k) over per-unit and per-claim rates. The vector is
matched against nine fixed centroids (Euclidean); the distance to the
winner sets the reliability band.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, NamedTuple

from backend_neuprint.analytics.raw_features import RawFeatures
from backend_neuprint.core.numeric import clamp01, finite_or, is_finite_number, round2, safe_div, sat
from backend_neuprint.neuprint_logging import get_logger

logger = get_logger(__name__)

BAND_HIGH_MAX_DIST = 0.12
BAND_MEDIUM_MAX_DIST = 0.22


class ReliabilityBand(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class ControlVector(NamedTuple):
    A: float
    D: float
    R: float


class PatternMeta(NamedTuple):
    description: str
    interpretation: str
    band_rationale: str


# insertion order is the tie-break order
CENTROIDS: MappingProxyType[str, ControlVector] = MappingProxyType(
    {
        "deep_reflective_human": ControlVector(0.85, 0.8, 0.8),
        "moderate_reflective_human": ControlVector(0.8, 0.55, 0.6),
        "moderate_procedural_human": ControlVector(0.75, 0.55, 0.25),
        "shallow_procedural_human": ControlVector(0.7, 0.3, 0.2),
        "moderate_reflective_hybrid": ControlVector(0.55, 0.55, 0.55),
        "shallow_procedural_hybrid": ControlVector(0.5, 0.3, 0.2),
        "shallow_procedural_ai": ControlVector(0.2, 0.3, 0.15),
        "moderate_procedural_ai": ControlVector(0.15, 0.55, 0.15),
        "deep_procedural_ai": ControlVector(0.1, 0.8, 0.1),
    }
)

CONTROL_PATTERN_META: MappingProxyType[str, PatternMeta] = MappingProxyType(
    {
        "deep_reflective_human": PatternMeta(
            "Human-led reasoning with sustained reflective control and stable structural revision. "
            "The current position is centered within the human reasoning cluster.",
            "A high human proportion indicates stable human-led control at structural decision boundaries across the task.",
            "Reasoning decisions originate from explicit human-driven revision and counter-evaluative judgment "
            "rather than automated continuation flow.",
        ),
        "moderate_reflective_human": PatternMeta(
            "Human-led reasoning with localized reflective adjustment and generally stable structure. "
            "The current position remains within the human cluster with moderate dispersion.",
            "A high human proportion indicates largely human-led control, with reflective adjustment appearing in localized segments.",
            "Reasoning decisions include limited human revision but do not extend to full structural reconfiguration.",
        ),
        "moderate_procedural_human": PatternMeta(
            "Human-authored reasoning following a stable procedural structure. "
            "The current position lies within the human cluster but closer to the procedural boundary.",
            "A high human proportion indicates human-led control under a procedural sequence, with limited reflective intervention.",
            "Reasoning decisions follow a predefined structural sequence with minimal reflective intervention.",
        ),
        "shallow_procedural_human": PatternMeta(
            "Human-generated reasoning with shallow procedural progression and limited structural depth. "
            "The current position is weakly anchored within the human reasoning cluster.",
            "A high human proportion indicates human-led control, though structural decisions tend to follow "
            "shallow continuation patterns.",
            "Reasoning decisions rely on surface-level continuation rather than deliberate structural control.",
        ),
        "moderate_reflective_hybrid": PatternMeta(
            "Mixed-agency reasoning with partial human reflection and assisted structural development. "
            "The current position spans the boundary between human and hybrid clusters.",
            "A mixed distribution indicates shared control, where human intent is present but transitions "
            "partially reflect assisted continuation.",
            "Reasoning decisions reflect human intent but are partially influenced by assisted continuation patterns.",
        ),
        "shallow_procedural_hybrid": PatternMeta(
            "Hybrid reasoning with procedural structure and limited reflective control. "
            "The current position trends toward the hybrid procedural region.",
            "A mixed distribution indicates assisted procedural flow, with limited human-led structural revision "
            "at decision boundaries.",
            "Reasoning decisions follow assisted procedural flow with minimal human structural revision.",
        ),
        "shallow_procedural_ai": PatternMeta(
            "AI-dominant reasoning with shallow procedural expansion. "
            "The current position is located near the automated cluster perimeter.",
            "A low human proportion indicates control signals are dominated by automated continuation rather than "
            "human-led structural decisions.",
            "Reasoning decisions primarily arise from automated continuation without observable human control signals.",
        ),
        "moderate_procedural_ai": PatternMeta(
            "AI-generated reasoning with stable but non-reflective procedural structure. "
            "The current position is centered within the automated reasoning cluster.",
            "A low human proportion indicates stable automated continuation patterns with minimal evidence of "
            "human-originated structural control.",
            "Reasoning decisions follow internally consistent continuation patterns without human-originated revision.",
        ),
        "deep_procedural_ai": PatternMeta(
            "AI-generated reasoning exhibiting high structural complexity without reflective control. "
            "The current position is deeply embedded within the automated procedural cluster.",
            "A low human proportion indicates layered procedural expansion without consistent reflective control "
            "signals originating from the individual.",
            "Reasoning decisions reflect layered procedural expansion rather than intentional evaluative judgment.",
        ),
    }
)


@dataclass
class RCSummary:
    pattern: str
    band: ReliabilityBand
    distance: float
    vector: ControlVector

    @property
    def meta(self) -> PatternMeta:
        return CONTROL_PATTERN_META[self.pattern]

    @property
    def label(self) -> str:
        return format_pattern_label(self.pattern)

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": self.meta.description,
            "control_pattern": self.label,
            "reliability_band": self.band.value,
            "band_rationale": self.meta.band_rationale,
            "pattern_interpretation": self.meta.interpretation,
        }


def _nonneg(x: Any) -> float:
    return max(0.0, finite_or(x, 0.0))


def compute_control_vector(raw: RawFeatures) -> ControlVector:
    units = max(1, math.floor(finite_or(raw.units, 0.0)))
    claims = max(1.0, _nonneg(raw.claims))
    transitions = _nonneg(raw.transitions)
    revisions = _nonneg(raw.revisions)

    transition_density = safe_div(transitions, units)
    transition_quality = clamp01(safe_div(_nonneg(raw.transition_ok), transitions))
    revision_rate = safe_div(revisions, units)
    revision_depth_avg = safe_div(_nonneg(raw.revision_depth_sum), max(1.0, revisions))
    counter_rate = safe_div(_nonneg(raw.counterpoints) + _nonneg(raw.refutations), claims)
    intent_rate = safe_div(_nonneg(raw.intent_markers), units)
    drift_rate = safe_div(_nonneg(raw.drift_segments), units)
    self_reg_rate = safe_div(_nonneg(raw.self_regulation_signals), units)
    reason_rate = safe_div(_nonneg(raw.reasons), claims)
    evidence_rate = safe_div(_nonneg(raw.evidence), claims)

    a_core = (
        0.30 * sat(intent_rate, 0.25)
        + 0.28 * sat(revision_rate, 0.30)
        + 0.24 * sat(counter_rate, 0.35)
        + 0.12 * transition_quality
        + 0.06 * sat(self_reg_rate, 0.20)
    )
    a_penalty = 0.24 * sat(drift_rate, 0.25) + 0.16 * sat(transition_density * (1 - transition_quality), 0.25)

    d_core = 0.45 * sat(reason_rate, 0.9) + 0.35 * sat(evidence_rate, 0.7) + 0.20 * sat(transition_density, 0.7)

    r_core = (
        0.32 * sat(revision_rate, 0.28)
        + 0.24 * sat(revision_depth_avg, 0.9)
        + 0.22 * sat(counter_rate, 0.30)
        + 0.16 * sat(self_reg_rate, 0.25)
        + 0.06 * transition_quality
    )
    r_penalty = 0.12 * sat(drift_rate, 0.30)

    return ControlVector(A=clamp01(a_core - a_penalty), D=clamp01(d_core), R=clamp01(r_core - r_penalty))


def euclidean(a: ControlVector, b: ControlVector) -> float:
    return math.sqrt((a.A - b.A) ** 2 + (a.D - b.D) ** 2 + (a.R - b.R) ** 2)


def band_from_distance(d: float) -> ReliabilityBand:
    if d < BAND_HIGH_MAX_DIST:
        return ReliabilityBand.HIGH
    if d < BAND_MEDIUM_MAX_DIST:
        return ReliabilityBand.MEDIUM
    return ReliabilityBand.LOW


def format_pattern_label(pattern: str) -> str:
    return " ".join(w[:1].upper() + w[1:] for w in pattern.split("_"))


def infer_control_pattern(vector: ControlVector) -> RCSummary:
    v = ControlVector(*(clamp01(x) if is_finite_number(x) else 0.5 for x in vector))
    best = "moderate_reflective_human"
    best_dist = math.inf
    for pattern, centroid in CENTROIDS.items():
        d = euclidean(v, centroid)
        if d < best_dist:
            best, best_dist = pattern, d
    return RCSummary(pattern=best, band=band_from_distance(best_dist), distance=best_dist, vector=v)


def compute_rc_summary(raw: RawFeatures) -> RCSummary:
    summary = infer_control_pattern(compute_control_vector(raw))
    logger.debug(
        "rc_summary_result",
        A=round2(summary.vector.A),
        D=round2(summary.vector.D),
        R=round2(summary.vector.R),
        pattern=summary.pattern,
        distance=round2(summary.distance),
        band=summary.band.value,
    )
    return summary
