"""
Observed reasoning patterns: eight fixed profiles scored from core axes.

Profiles: RE, IE, EW, AR, SI, RR, HE, MD. HE and MD need KPF-Sim or TPS-H;
without either they are unresolved (None), never scored as zero.

Selection: every resolved profile >= threshold (top max_count by score);
if fewer than min_count pass, take the top min_count of the resolved pool.
Ties keep the fixed profile order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, NamedTuple

from backend_neuprint.core.numeric import clamp01, round2
from backend_neuprint.neuprint_logging import get_logger

logger = get_logger(__name__)

OBSERVED_THRESHOLD = 0.62
OBSERVED_MIN = 2
OBSERVED_MAX = 3

REASON_NO_KPF_TPS = "KPF-Sim and TPS-H are not available, score is not computable"
REASON_PARTIAL_KPF_TPS = "KPF-Sim or TPS-H available, but required inputs for score are missing"
REASON_MISSING = "Required indicators missing, score is not computable"


class ProfileMeta(NamedTuple):
    code: str
    label: str
    description: str


PROFILE_ORDER = ("RE", "IE", "EW", "AR", "SI", "RR", "HE", "MD")

PROFILE_META: MappingProxyType[str, ProfileMeta] = MappingProxyType(
    {
        "RE": ProfileMeta(
            "RE",
            "Reflective Explorer",
            "Reflective Explorer shows active self-revision and exploratory restructuring during reasoning. "
            "Thought progresses through reflection, reassessment, and adaptive refinement.",
        ),
        "IE": ProfileMeta(
            "IE",
            "Intuitive Explorer",
            "Intuitive Explorer advances reasoning through associative leaps and conceptual exploration. "
            "Structure emerges gradually rather than being predefined.",
        ),
        "EW": ProfileMeta(
            "EW",
            "Evidence Weaver",
            "Evidence Weaver emphasizes linking claims with supporting material. "
            "Reasoning strength lies in evidence connectivity rather than abstract inference.",
        ),
        "AR": ProfileMeta(
            "AR",
            "Analytical Reasoner",
            "Analytical Reasoner breaks a problem into explicit components and evaluates them through stepwise logic. "
            "Reasoning emphasizes clear structure, rule-based validation, and consistency across claims and supporting points.",
        ),
        "SI": ProfileMeta(
            "SI",
            "Strategic Integrator",
            "Strategic Integrator aligns multiple reasoning strands into a unified direction. "
            "Decision-making reflects coordination and long-term framing.",
        ),
        "RR": ProfileMeta(
            "RR",
            "Reflective Regulator",
            "Reflective Regulator actively monitors and controls reasoning boundaries. "
            "This type prioritizes balance, restraint, and intentional stopping points.",
        ),
        "HE": ProfileMeta(
            "HE",
            "Human Expressionist",
            "Human Expressionist expresses reasoning through narrative and contextual meaning. "
            "Communication clarity and human resonance are central.",
        ),
        "MD": ProfileMeta(
            "MD",
            "Machine-Dominant",
            "Machine-Dominant pattern reflects heavy dependence on automated or system-driven reasoning flow. "
            "Human agency signals are limited.",
        ),
    }
)


def avg(a: float | None, b: float | None) -> float | None:
    """Missing-safe mean of two values."""
    if a is None:
        return b
    if b is None:
        return a
    return (a + b) / 2


def weighted_avg(terms: list[tuple[float | None, float]]) -> float | None:
    total_w = 0.0
    total = 0.0
    for value, weight in terms:
        if value is None:
            continue
        total_w += weight
        total += value * weight
    if total_w <= 0:
        return None
    return total / total_w


def authenticity(kpf: float | None, tps: float | None) -> float | None:
    """avg(1-KPF, TPS); 1-KPF or TPS alone when only one is known."""
    return avg(None if kpf is None else 1 - kpf, tps)


def machine_score(kpf: float | None, tps: float | None) -> float | None:
    """avg(KPF, 1-TPS); KPF or 1-TPS alone when only one is known."""
    return avg(kpf, None if tps is None else 1 - tps)


@dataclass
class CoreAxes:
    AAS: float | None = None
    CTF: float | None = None
    RMD: float | None = None
    RDX: float | None = None
    EDS: float | None = None
    IFD: float | None = None
    KPF: float | None = None
    """KPF-Sim, None = unknown."""
    TPS: float | None = None
    """TPS-H, None = unknown."""
    Analyticity: float | None = None
    Flow: float | None = None
    MetacogRaw: float | None = None

    @classmethod
    def from_indices(cls, indices: dict[str, float | None], kpf: float | None = None, tps: float | None = None) -> CoreAxes:
        """Build axes with the derived meta-axes filled in (missing-safe averages)."""
        aas, ctf, rmd = indices.get("AAS"), indices.get("CTF"), indices.get("RMD")
        rdx, eds, ifd = indices.get("RDX"), indices.get("EDS"), indices.get("IFD")
        return cls(
            AAS=aas,
            CTF=ctf,
            RMD=rmd,
            RDX=rdx,
            EDS=eds,
            IFD=ifd,
            KPF=kpf,
            TPS=tps,
            Analyticity=avg(aas, eds),
            Flow=avg(ctf, rmd),
            MetacogRaw=avg(rdx, ifd),
        )


def score_re(c: CoreAxes) -> float | None:
    return weighted_avg([(c.RDX, 0.45), (c.CTF, 0.30), (c.RMD, 0.25)])


def score_ie(c: CoreAxes) -> float | None:
    if c.Flow is None or c.Analyticity is None:
        return None
    return clamp01(0.60 * c.Flow + 0.40 * (1 - c.Analyticity))


def score_ew(c: CoreAxes) -> float | None:
    return weighted_avg([(c.EDS, 0.55), (c.AAS, 0.45)])


def score_ar(c: CoreAxes) -> float | None:
    base = weighted_avg([(c.AAS, 0.65), (c.EDS, 0.35)])
    if base is None and c.CTF is None:
        return None
    return clamp01((base or 0.0) - (0.0 if c.CTF is None else 0.20 * c.CTF))


def score_si(c: CoreAxes) -> float | None:
    if c.Analyticity is None or c.Flow is None or c.MetacogRaw is None:
        return None
    return clamp01(min(c.Analyticity, c.Flow, c.MetacogRaw))


def score_rr(c: CoreAxes) -> float | None:
    return weighted_avg([(c.RDX, 0.60), (None if c.IFD is None else 1 - c.IFD, 0.40)])


def score_he(c: CoreAxes) -> float | None:
    a = authenticity(c.KPF, c.TPS)
    if a is None:
        return None
    return clamp01(0.55 * a + 0.25 * (c.CTF or 0.0) + 0.20 * (c.RMD or 0.0))


def score_md(c: CoreAxes) -> float | None:
    m = machine_score(c.KPF, c.TPS)
    return None if m is None else clamp01(m)


PROFILE_SCORERS: MappingProxyType[str, Callable[[CoreAxes], float | None]] = MappingProxyType(
    {
        "RE": score_re,
        "IE": score_ie,
        "EW": score_ew,
        "AR": score_ar,
        "SI": score_si,
        "RR": score_rr,
        "HE": score_he,
        "MD": score_md,
    }
)


@dataclass
class ProfileScore:
    meta: ProfileMeta
    score: float | None
    pass_rule: bool
    reasons: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.meta.code,
            "label": self.meta.label,
            "score": None if self.score is None else round2(self.score),
            "pass_rule": self.pass_rule,
            "reason": list(self.reasons),
        }


@dataclass
class PatternResult:
    all_profiles: list[ProfileScore]
    selected: list[ProfileScore]
    primary: ProfileMeta
    secondary: ProfileMeta

    def to_dict(self) -> dict[str, Any]:
        return {
            "primary_label": self.primary.label,
            "secondary_label": self.secondary.label,
            "definition": {
                "primary": self.primary.description,
                "secondary": self.secondary.description,
            },
        }

    def diagnostics(self) -> dict[str, Any]:
        return {
            "all_profiles": [p.to_dict() for p in self.all_profiles],
            "selected": [p.meta.code for p in self.selected],
        }


def pass_rule(code: str, core: CoreAxes, score: float | None, threshold: float) -> tuple[bool, list[str]]:
    if score is None:
        if code in ("HE", "MD"):
            if core.KPF is None and core.TPS is None:
                return False, [REASON_NO_KPF_TPS]
            return False, [REASON_PARTIAL_KPF_TPS]
        return False, [REASON_MISSING]
    if score >= threshold:
        return True, []
    return False, [f"score < threshold ({threshold})"]


def _by_score(profiles: list[ProfileScore]) -> list[ProfileScore]:
    # sorted() is stable, so equal scores keep PROFILE_ORDER
    return sorted((p for p in profiles if p.score is not None), key=lambda p: -p.score)


def compute_patterns(
    core: CoreAxes,
    threshold: float = OBSERVED_THRESHOLD,
    min_count: int = OBSERVED_MIN,
    max_count: int = OBSERVED_MAX,
) -> PatternResult:
    all_profiles: list[ProfileScore] = []
    for code in PROFILE_ORDER:
        raw_score = PROFILE_SCORERS[code](core)
        score = None if raw_score is None else clamp01(raw_score)
        passed, reasons = pass_rule(code, core, score, threshold)
        all_profiles.append(ProfileScore(PROFILE_META[code], score, passed, reasons))

    pool = _by_score(all_profiles)
    picked = [p for p in pool if p.score >= threshold][:max_count]
    if len(picked) < min_count:
        picked = pool[:min_count]

    ranked = picked if len(picked) >= 2 else pool
    primary = ranked[0].meta if len(ranked) > 0 else PROFILE_META["RE"]
    secondary = ranked[1].meta if len(ranked) > 1 else PROFILE_META["EW"]

    logger.debug(
        "cff_pattern_result",
        scores={p.meta.code: (None if p.score is None else round2(p.score)) for p in all_profiles},
        selected=[p.meta.code for p in picked],
        primary=primary.code,
        secondary=secondary.code,
    )
    return PatternResult(all_profiles=all_profiles, selected=picked, primary=primary, secondary=secondary)
