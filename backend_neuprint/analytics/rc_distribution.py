"""
Reasoning-control distribution: Human / Hybrid / AI shares and a final determination.

Two separate paths:

Logistic (a model is configured)
    p_human = sigmoid(clip(beta0 + sum(beta_k * cfv_k), +-z_clip))
    Human >= 0.75, Hybrid >= 0.45, else AI. Hybrid holds only when both
    probabilities are >= 0.35 and rdx < 0.40, hi >= 0.55, aas >= 0.60,
    eds >= 0.60; otherwise the larger of p_human / p_ai wins (ties Human).

Heuristic (no model)
    p_human = clamp(0.20 + 0.35 hi + 0.20 rd + 0.20 tf - 0.15 sv + 0.10 ctf)
    from the structural control signals; Human >= 0.67, AI <= 0.33, else Hybrid.

Both paths carve a hybrid overlap out of the Human / AI shares
(2 * min(pH, pA) for Hybrid, min(pH, pA) otherwise) and renormalize.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

from backend_neuprint.analytics.structural_control import StructuralControlSignals
from backend_neuprint.core.exceptions import ConfigurationError
from backend_neuprint.core.numeric import clamp, clamp01, finite_or, is_finite_number, round2, round_half_up
from backend_neuprint.neuprint_logging import get_logger

logger = get_logger(__name__)

CFV_KEYS = ("aas", "ctf", "rmd", "rdx", "eds", "hi", "tps_hist", "ifd")
DEFAULT_Z_CLIP = 20.0
SIGMOID_CLIP = 20.0

LOGISTIC_HUMAN_MIN = 0.75
LOGISTIC_HYBRID_MIN = 0.45
HYBRID_PROB_MIN = 0.35
RDX_LOW = 0.40
HI_MID = 0.55
AAS_HUMAN_LIKE = 0.60
EDS_AI_LIKE = 0.60

HEURISTIC_HUMAN_MIN = 0.67
HEURISTIC_AI_MAX = 0.33


class Determination(str, Enum):
    HUMAN = "Human"
    HYBRID = "Hybrid"
    AI = "AI"


DETERMINATION_SENTENCES = {
    Determination.HUMAN: "The combined signal profile supports classification as human-controlled reasoning.",
    Determination.HYBRID: (
        "The combined signal profile indicates mixed control dynamics across structural decision boundaries, "
        "consistent with hybrid reasoning control."
    ),
    Determination.AI: (
        "The combined signal profile supports classification as AI-assisted or AI-dominant reasoning control "
        "across structural decision boundaries."
    ),
}


@dataclass(frozen=True)
class CFV:
    """Eight normalized control features fed to the distribution model."""

    aas: float = 0.0
    ctf: float = 0.0
    rmd: float = 0.0
    rdx: float = 0.0
    eds: float = 0.0
    hi: float = 0.0
    tps_hist: float = 0.0
    ifd: float = 0.0

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class LogisticModel:
    beta0: float = 0.0
    betas: Mapping[str, float] = field(default_factory=dict)
    z_clip: float = DEFAULT_Z_CLIP

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> LogisticModel:
        if not isinstance(data, Mapping):
            raise ConfigurationError("logistic model must be a mapping with beta0 / betas / z_clip")
        betas = data.get("betas") or {}
        if not isinstance(betas, Mapping):
            raise ConfigurationError("logistic model betas must be a mapping of CFV key -> weight")
        unknown = sorted(set(betas) - set(CFV_KEYS))
        if unknown:
            raise ConfigurationError(f"logistic model has unknown CFV keys: {unknown}")
        z_clip = data.get("z_clip")
        return cls(
            beta0=finite_or(data.get("beta0"), 0.0),
            betas={k: finite_or(v, 0.0) for k, v in betas.items()},
            z_clip=float(z_clip) if is_finite_number(z_clip) else DEFAULT_Z_CLIP,
        )


@dataclass
class DistributionResult:
    p_human: float
    final: Determination
    human: float
    hybrid: float
    ai: float
    path: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "Human": pct(self.human),
            "Hybrid": pct(self.hybrid),
            "AI": pct(self.ai),
            "final_determination": self.final.value,
            "determination_sentence": DETERMINATION_SENTENCES[self.final],
        }


def pct(x01: float) -> str:
    return f"{round_half_up(clamp01(x01) * 100)}%"


def sigmoid(z: float) -> float:
    zc = clamp(finite_or(z, 0.0), -SIGMOID_CLIP, SIGMOID_CLIP)
    return 1 / (1 + math.exp(-zc))


def normalize3(a: float, b: float, c: float) -> tuple[float, float, float]:
    a, b, c = clamp01(a), clamp01(b), clamp01(c)
    s = a + b + c
    if s <= 0:
        return 1.0, 0.0, 0.0
    return a / s, b / s, c / s


def p_human_from_cfv(cfv: CFV, model: LogisticModel) -> float:
    z = finite_or(model.beta0, 0.0)
    for key in CFV_KEYS:
        z += finite_or(model.betas.get(key), 0.0) * clamp01(getattr(cfv, key))
    z_clip = model.z_clip if is_finite_number(model.z_clip) else DEFAULT_Z_CLIP
    return clamp01(sigmoid(clamp(z, -z_clip, z_clip)))


def hybrid_valid(cfv: CFV, p_human: float) -> bool:
    p_ai = clamp01(1 - p_human)
    return (
        p_human >= HYBRID_PROB_MIN
        and p_ai >= HYBRID_PROB_MIN
        and clamp01(cfv.rdx) < RDX_LOW
        and clamp01(cfv.hi) >= HI_MID
        and clamp01(cfv.aas) >= AAS_HUMAN_LIKE
        and clamp01(cfv.eds) >= EDS_AI_LIKE
    )


def determine_from_probability(cfv: CFV, p_human: float) -> Determination:
    p_h = clamp01(p_human)
    if p_h >= LOGISTIC_HUMAN_MIN:
        return Determination.HUMAN
    if p_h >= LOGISTIC_HYBRID_MIN:
        if hybrid_valid(cfv, p_h):
            return Determination.HYBRID
        return Determination.HUMAN if p_h >= 1 - p_h else Determination.AI
    return Determination.AI


def allocate(p_human: float, final: Determination) -> tuple[float, float, float]:
    """(human, hybrid, ai) shares with the hybrid overlap removed, renormalized."""
    p_h = clamp01(p_human)
    p_a = clamp01(1 - p_h)
    if final is Determination.HYBRID:
        hybrid = clamp01(2 * min(p_h, p_a))
        human = clamp01(p_h - hybrid / 2)
        ai = clamp01(p_a - hybrid / 2)
    else:
        hybrid = clamp01(min(p_h, p_a))
        human = clamp01(p_h - hybrid)
        ai = clamp01(p_a - hybrid)
    return normalize3(human, hybrid, ai)


def _result(p_human: float, final: Determination, path: str) -> DistributionResult:
    human, hybrid, ai = allocate(p_human, final)
    result = DistributionResult(p_human=p_human, final=final, human=human, hybrid=hybrid, ai=ai, path=path)
    logger.debug(
        "rc_distribution_result",
        path=path,
        p_human=round2(p_human),
        final=final.value,
        human=pct(human),
        hybrid=pct(hybrid),
        ai=pct(ai),
    )
    return result


def distribution_logistic(cfv: CFV, model: LogisticModel) -> DistributionResult:
    p_human = p_human_from_cfv(cfv, model)
    return _result(p_human, determine_from_probability(cfv, p_human), "logistic")


def heuristic_p_human(cfv: CFV, signals: StructuralControlSignals) -> float:
    return clamp01(
        0.20
        + 0.35 * clamp01(signals.human_rhythm_index)
        + 0.20 * clamp01(signals.revision_depth)
        + 0.20 * clamp01(signals.transition_flow)
        - 0.15 * clamp01(signals.structural_variance)
        + 0.10 * clamp01(cfv.ctf)
    )


def distribution_heuristic(cfv: CFV, signals: StructuralControlSignals) -> DistributionResult:
    p_human = heuristic_p_human(cfv, signals)
    if p_human >= HEURISTIC_HUMAN_MIN:
        final = Determination.HUMAN
    elif p_human <= HEURISTIC_AI_MAX:
        final = Determination.AI
    else:
        final = Determination.HYBRID
    return _result(p_human, final, "heuristic")


def compute_distribution(
    cfv: CFV,
    signals: StructuralControlSignals,
    model: LogisticModel | None = None,
) -> DistributionResult:
    if model is not None:
        return distribution_logistic(cfv, model)
    return distribution_heuristic(cfv, signals)
