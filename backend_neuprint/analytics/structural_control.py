"""
Structural control signals (agency indicators), each a 0..1 magnitude.

- structural_variance: K unit-index segments, per-segment normalized count
  vectors, mean L2 distance to their mean / 0.35. 0 without per-unit arrays.
- human_rhythm_index: weighted CV of unit lengths (0.6) and of transition /
  revision event intervals (0.2 each), / 0.6.
- transition_flow: (valid / total transitions) * ln(1 + mean run length).
- revision_depth: depth sum / 3.0, or ln(1 + revisions) / ln(13) when no
  depth is known.

K = 3 for fewer than 6 units, else clip(round(sqrt(units)), 3, 8).
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

import numpy as np

from backend_neuprint.analytics.raw_features import PER_UNIT_KEYS, RawFeatures
from backend_neuprint.core.numeric import (
    clamp01,
    coefficient_of_variation,
    finite_or,
    is_finite_number,
    mean,
    round2,
    round_half_up,
    safe_div,
)
from backend_neuprint.neuprint_logging import get_logger

logger = get_logger(__name__)

SV_MAX = 0.35
CV_REF = 0.6
D_MAX = 3.0
R_REF = 12

VARIANCE_KEYS = (
    "claims",
    "reasons",
    "evidence",
    "sub_claims",
    "warrants",
    "counterpoints",
    "refutations",
    "transitions",
)

TOTAL_KEYS = (
    "claims",
    "reasons",
    "evidence",
    "sub_claims",
    "warrants",
    "counterpoints",
    "refutations",
    "transitions",
    "transition_ok",
    "revisions",
    "revision_depth_sum",
    "belief_change",
)


@dataclass
class AgencyRaw:
    units: float
    unit_lengths: list[int] | None = None
    per_unit: dict[str, list[float]] | None = None
    """Only arrays whose length equals units; None when there are none."""
    totals: dict[str, float | None] = field(default_factory=dict)


@dataclass
class StructuralControlSignals:
    structural_variance: float
    human_rhythm_index: float
    transition_flow: float
    revision_depth: float

    def to_dict(self) -> dict[str, float]:
        return {
            "structural_variance": self.structural_variance,
            "human_rhythm_index": self.human_rhythm_index,
            "transition_flow": self.transition_flow,
            "revision_depth": self.revision_depth,
        }


def _nonneg(x: Any) -> float:
    return max(0.0, finite_or(x, 0.0))


def agency_raw_from_features(raw: RawFeatures) -> AgencyRaw:
    """Per-unit arrays are accepted only when their length equals units."""
    units = _nonneg(raw.units)

    lengths = raw.unit_lengths
    unit_lengths = None
    if lengths is not None and len(lengths) == units:
        unit_lengths = [max(0, math.floor(finite_or(x, 0.0))) for x in lengths]

    per_unit: dict[str, list[float]] = {}
    for key in PER_UNIT_KEYS:
        arr = raw.per_unit_values(key)
        if arr is not None and len(arr) == units:
            per_unit[key] = [_nonneg(x) for x in arr]

    totals: dict[str, float | None] = {
        "claims": _nonneg(raw.claims),
        "reasons": _nonneg(raw.reasons),
        "evidence": _nonneg(raw.evidence),
        "sub_claims": _nonneg(raw.sub_claims),
        "warrants": _nonneg(raw.warrants),
        "counterpoints": _nonneg(raw.counterpoints),
        "refutations": _nonneg(raw.refutations),
        "transitions": _nonneg(raw.transitions),
        "transition_ok": _nonneg(raw.transition_ok),
        "revisions": _nonneg(raw.revisions),
        "revision_depth_sum": _nonneg(raw.revision_depth_sum),
        "belief_change": 1.0 if raw.belief_change else 0.0,
    }

    has_any = any(len(v) > 0 for v in per_unit.values())
    return AgencyRaw(
        units=units,
        unit_lengths=unit_lengths,
        per_unit=per_unit if has_any else None,
        totals=totals,
    )


def choose_k(units: float) -> int:
    u = max(1, math.floor(finite_or(units, 1.0)))
    if u < 6:
        return 3
    return min(8, max(3, round_half_up(math.sqrt(u))))


def segment_ranges(units: float, k: int) -> list[tuple[int, int]]:
    u = max(1, math.floor(units))
    k = max(1, math.floor(k))
    return [((i * u) // k, ((i + 1) * u) // k) for i in range(k)]


def _slice_sum(arr: Sequence[float] | None, start: int, end: int) -> float:
    if not arr:
        return 0.0
    return float(sum(finite_or(x, 0.0) for x in arr[max(0, start):min(len(arr), max(start, end))]))


def structural_variance(raw: AgencyRaw) -> float:
    pu = raw.per_unit or {}
    if not any(pu.get(k) for k in VARIANCE_KEYS):
        return 0.0

    units = max(1, math.floor(finite_or(raw.units, 1.0)))
    ranges = segment_ranges(units, choose_k(units))
    seg_vecs = np.array(
        [
            [_slice_sum(pu.get(k), start, end) / max(1, end - start) for k in VARIANCE_KEYS]
            for start, end in ranges
        ],
        dtype=np.float64,
    )
    s_bar = seg_vecs.mean(axis=0)
    sv_raw = float(np.linalg.norm(seg_vecs - s_bar, axis=1).mean())
    return clamp01(safe_div(sv_raw, SV_MAX))


def event_indices(per_unit: Sequence[float] | None) -> list[int]:
    return [i for i, v in enumerate(per_unit or ()) if finite_or(v, 0.0) > 0]


def interval_diffs(indices: Sequence[int]) -> list[int]:
    if len(indices) < 2:
        return []
    xs = sorted(i for i in indices if i >= 0)
    return [b - a for a, b in zip(xs, xs[1:])]


def human_rhythm_index(raw: AgencyRaw) -> float:
    terms: list[tuple[float, float]] = []
    if raw.unit_lengths and len(raw.unit_lengths) >= 2:
        terms.append((coefficient_of_variation(raw.unit_lengths), 0.6))

    pu = raw.per_unit or {}
    for key in ("transitions", "revisions"):
        diffs = interval_diffs(event_indices(pu.get(key)))
        if len(diffs) >= 2:
            terms.append((coefficient_of_variation(diffs), 0.2))

    if not terms:
        return 0.0
    den = sum(w for _, w in terms)
    combined = sum(finite_or(v, 0.0) * w for v, w in terms) / den if den > 0 else 0.0
    return clamp01(safe_div(combined, CV_REF))


def avg_chain_length(per_unit_transitions: Sequence[float] | None) -> float:
    """Mean length of consecutive runs of units with a transition; 1 when there are none."""
    if not per_unit_transitions:
        return 1.0
    runs: list[int] = []
    cur = 0
    for v in per_unit_transitions:
        if finite_or(v, 0.0) > 0:
            cur += 1
        elif cur > 0:
            runs.append(cur)
            cur = 0
    if cur > 0:
        runs.append(cur)
    return mean(runs) if runs else 1.0


def _total_or_sum(raw: AgencyRaw, per_unit_key: str, total_key: str) -> float:
    pu = raw.per_unit or {}
    arr = pu.get(per_unit_key)
    if arr is not None:
        return float(sum(finite_or(x, 0.0) for x in arr))
    return finite_or(raw.totals.get(total_key), 0.0)


def transition_flow(raw: AgencyRaw) -> float:
    total = _total_or_sum(raw, "transitions", "transitions")
    valid = _total_or_sum(raw, "transition_ok", "transition_ok")
    ratio = safe_div(valid, max(1.0, total))
    chain = avg_chain_length((raw.per_unit or {}).get("transitions"))
    return clamp01(ratio * math.log(1 + max(0.0, chain)))


def revision_depth(raw: AgencyRaw) -> float:
    pu = raw.per_unit or {}
    if pu.get("revision_depth") is not None:
        depth_sum: float | None = float(sum(finite_or(x, 0.0) for x in pu["revision_depth"]))
    else:
        depth_sum = raw.totals.get("revision_depth_sum")
    if is_finite_number(depth_sum):
        return clamp01(safe_div(depth_sum, D_MAX))

    revisions = _total_or_sum(raw, "revisions", "revisions")
    return clamp01(safe_div(math.log(1 + max(0.0, revisions)), math.log(1 + max(1, R_REF))))


def compute_agency_indicators(raw: AgencyRaw) -> StructuralControlSignals:
    signals = StructuralControlSignals(
        structural_variance=round2(structural_variance(raw)),
        human_rhythm_index=round2(human_rhythm_index(raw)),
        transition_flow=round2(transition_flow(raw)),
        revision_depth=round2(revision_depth(raw)),
    )
    logger.debug("structural_control_result", units=raw.units, k=choose_k(raw.units), **signals.to_dict())
    return signals


def compute_structural_control(raw: RawFeatures) -> StructuralControlSignals:
    return compute_agency_indicators(agency_raw_from_features(raw))
