"""
CFF indicator engine (v1.0 fixed formulas).

Six core indices, each clamped to [0, 1]:
    AAS  argument architecture style
    CTF  cognitive transition flow
    RMD  reasoning momentum delta
    RDX  revision depth index
    EDS  evidence diversity score
    IFD  intent friction delta

KPF-Sim / TPS-H are externally supplied; when absent they are a neutral 0.5
inside CFF8 and "N/A" in the UI value list.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from backend_neuprint.analytics.raw_features import RawFeatures
from backend_neuprint.core.numeric import clamp01, is_finite_number, round2, safe_div
from backend_neuprint.neuprint_logging import get_logger

logger = get_logger(__name__)

STRUCTURE_WEIGHTS = {"linear": 0.3, "hierarchical": 0.6, "networked": 1.0}
DEFAULT_STRUCTURE_WEIGHT = 0.3
EVIDENCE_TYPE_SLOTS = 4
NEUTRAL = 0.5
NA = "N/A"

UI_LABELS = ("AAS", "CTF", "RMD", "RDX", "EDS", "IFD", "KPF-Sim", "TPS-H")
CORE_CODES = ("AAS", "CTF", "RMD", "RDX", "EDS", "IFD")


@dataclass(frozen=True)
class CFF6:
    AAS: float
    CTF: float
    RMD: float
    RDX: float
    EDS: float
    IFD: float

    def to_dict(self) -> dict[str, float]:
        return {code: getattr(self, code) for code in CORE_CODES}


@dataclass(frozen=True)
class CFF8(CFF6):
    KPF_SIM: float = NEUTRAL
    TPS_H: float = NEUTRAL

    def to_dict(self) -> dict[str, float]:
        out = super().to_dict()
        out["KPF_SIM"] = self.KPF_SIM
        out["TPS_H"] = self.TPS_H
        return out


def structure_weight(structure_type: str | None) -> float:
    return STRUCTURE_WEIGHTS.get(structure_type or "linear", DEFAULT_STRUCTURE_WEIGHT)


def _nonneg(x: float | None) -> float:
    return max(0.0, x) if is_finite_number(x) else 0.0


def compute_cff6(raw: RawFeatures) -> CFF6:
    units = float(max(1, math.floor(raw.units or 1))) if is_finite_number(raw.units) else 1.0
    claims = _nonneg(raw.claims)
    transitions = _nonneg(raw.transitions)
    revisions = _nonneg(raw.revisions)

    aas = clamp01(
        0.4 * safe_div(_nonneg(raw.sub_claims), claims)
        + 0.4 * safe_div(_nonneg(raw.warrants), claims)
        + 0.2 * structure_weight(raw.structure_type)
    )
    ctf = clamp01(
        0.6 * safe_div(transitions, units) + 0.4 * safe_div(_nonneg(raw.transition_ok), transitions)
    )
    rmd = clamp01(
        0.5
        + safe_div(_nonneg(raw.reasons), units)
        - safe_div(_nonneg(raw.hedges) + _nonneg(raw.loops), units)
    )
    rdx = clamp01(
        0.7 * safe_div(_nonneg(raw.revision_depth_sum), revisions) + (0.2 if raw.belief_change else 0.0)
    )
    type_count = len(set(raw.evidence_types or ()))
    eds = clamp01(
        0.6 * safe_div(type_count, EVIDENCE_TYPE_SLOTS) + 0.4 * safe_div(_nonneg(raw.evidence), claims)
    )
    ifd = clamp01((1.0 if _nonneg(raw.intent_markers) > 0 else 0.5) - safe_div(_nonneg(raw.drift_segments), units))

    result = CFF6(AAS=aas, CTF=ctf, RMD=rmd, RDX=rdx, EDS=eds, IFD=ifd)
    logger.debug("cff6_result", **{k: round2(v) for k, v in result.to_dict().items()})
    return result


def neutral_if_missing(x: float | None) -> float:
    return clamp01(x) if is_finite_number(x) else NEUTRAL


def compute_cff8(raw: RawFeatures, base: CFF6 | None = None) -> CFF8:
    base = base or compute_cff6(raw)
    return CFF8(
        **CFF6.to_dict(base),
        KPF_SIM=neutral_if_missing(raw.kpf_sim),
        TPS_H=neutral_if_missing(raw.tps_h),
    )


def score_or_na(x: float | None) -> float | str:
    return round2(clamp01(x)) if is_finite_number(x) else NA


def compute_cff_ui(raw: RawFeatures, base: CFF6 | None = None) -> dict[str, Any]:
    """Radar-chart shape: {labels, values_0to1}; unknown KPF/TPS render as "N/A"."""
    base = base or compute_cff6(raw)
    values = [getattr(base, code) for code in CORE_CODES] + [raw.kpf_sim, raw.tps_h]
    return {"labels": list(UI_LABELS), "values_0to1": [score_or_na(v) for v in values]}
