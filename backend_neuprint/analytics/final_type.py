"""
Final-type determination for the CFF section.

Indicators arrive as {code: {score, status}}; only Active, finite scores
count (TPS-H above 1.01 is read as a percent). Meta-axes:

    Analyticity  = avg(AAS, EDS)
    Flow         = avg(CTF, RMD)
    MetacogRaw   = avg(RDX, IFD)
    Regulation   = avg(RDX, 1 - IFD)
    Authenticity = avg(1 - KPF, TPS)      (single value when only one is known)
    MachineScore = avg(KPF, 1 - TPS)

Track: MachineScore unknown or conservative lock -> Human; >= 0.7 -> AI;
>= 0.4 -> Hybrid; else Human. Each track walks its rule table; Hybrid and
AI fall back to the Human rule set. A rule's margin is the minimum slack
past its thresholds, and confidence = clamp(0.65 + 0.7 * margin, 0.55, 0.92).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Mapping, NamedTuple

from backend_neuprint.analytics.cff_patterns import authenticity, avg, machine_score
from backend_neuprint.core.exceptions import ConfigurationError
from backend_neuprint.core.numeric import clamp, clamp01, is_finite_number, round2
from backend_neuprint.neuprint_logging import get_logger

logger = get_logger(__name__)

INDICATOR_CODES = ("AAS", "CTF", "RMD", "RDX", "EDS", "IFD", "KPF-Sim", "TPS-H")
T2_MODES = ("Regulation", "MetacogRaw")

CONF_BASE = 0.65
CONF_SCALE = 0.7
CONF_LOW = 0.55
CONF_HIGH = 0.92
DEFAULT_T2_CONFIDENCE = 0.6

AI_TRACK_MIN = 0.7
HYBRID_TRACK_MIN = 0.4


class IndicatorStatus(str, Enum):
    ACTIVE = "Active"
    EXCLUDED = "Excluded"
    MISSING = "Missing"


class Track(str, Enum):
    HUMAN = "Human"
    HYBRID = "Hybrid"
    AI = "AI"


class TypeEntry(NamedTuple):
    type_name: str
    type_description: str


TYPE_REGISTRY: MappingProxyType[str, TypeEntry] = MappingProxyType(
    {
        "T1": TypeEntry(
            "Analytical Reasoner",
            "T1. Analytical Reasoner approaches problems through structured decomposition and logical sequencing. "
            "Reasoning is driven by explicit analysis, rule-based evaluation, and clear separation of components. "
            "This pattern prioritizes correctness, internal consistency, and stepwise justification.",
        ),
        "T2": TypeEntry(
            "Reflective Thinker",
            "T2. Reflective Thinker emphasizes self-monitoring and internal revision during reasoning. "
            "This pattern frequently revisits prior assumptions, adjusts interpretations, and refines conclusions through reflection. "
            "Reasoning quality is shaped by iterative reassessment rather than linear progression.",
        ),
        "T3": TypeEntry(
            "Intuitive Explorer",
            "T3. Intuitive Explorer relies on associative thinking and exploratory inference. "
            "Reasoning advances through pattern recognition, conceptual leaps, and hypothesis generation rather than explicit structure. "
            "This pattern prioritizes discovery and possibility over immediate validation.",
        ),
        "T4": TypeEntry(
            "Strategic Integrator",
            "T4. Strategic Integrator focuses on synthesizing multiple perspectives into a coherent direction. "
            "Reasoning involves alignment of goals, constraints, and long-term implications. "
            "This pattern emphasizes coordination, prioritization, and purposeful convergence.",
        ),
        "T5": TypeEntry(
            "Human Expressionist",
            "T5. Human Expressionist centers reasoning around meaning, context, and human experience. "
            "Thought is shaped by narrative coherence, emotional nuance, and communicative clarity. "
            "This pattern prioritizes expressiveness and interpretive depth over formal structure.",
        ),
        "T6": TypeEntry(
            "Machine-Dominant",
            "T6. Machine-Dominant pattern shows strong reliance on external systems or automated reasoning flows. "
            "Decision progression often mirrors templated logic or system-driven optimization. "
            "Human agency and self-directed revision signals remain limited.",
        ),
        "Ax-1": TypeEntry(
            "Template Generator",
            "Ax-1. Template Generator produces reasoning by following predefined structural patterns. "
            "Responses are consistent and organized but show limited adaptation beyond the template. "
            "Original restructuring signals are minimal.",
        ),
        "Ax-2": TypeEntry(
            "Evidence Synthesizer",
            "Ax-2. Evidence Synthesizer focuses on collecting and linking supporting information. "
            "Reasoning emphasizes aggregation and alignment of evidence rather than original inference. "
            "Conclusions emerge from evidence density rather than internal exploration.",
        ),
        "Ax-3": TypeEntry(
            "Style Emulator",
            "Ax-3. Style Emulator mirrors linguistic and structural patterns.",
        ),
        "Ax-4": TypeEntry(
            "Reasoning Simulator",
            "Ax-4. Reasoning Simulator reproduces the appearance of structured reasoning through iterative expansion and recombination. "
            "While transitions and revisions are present, they are driven by simulation rather than genuine internal intent formation.",
        ),
        "Hx-1": TypeEntry(
            "Draft-Assist",
            "Hx-1. Draft-Assist Type uses AI support primarily for initial idea formation. "
            "Human control increases in later stages through revision and refinement.",
        ),
        "Hx-2": TypeEntry(
            "Structure-Assist",
            "Hx-2. Structure-Assist Type relies on AI to organize and scaffold reasoning. "
            "Core ideas remain human-driven, while structural clarity is externally supported.",
        ),
        "Hx-3": TypeEntry(
            "Evidence-Assist",
            "Hx-3. Evidence-Assist Type leverages AI to gather or arrange supporting material. "
            "Human reasoning determines relevance and final judgment.",
        ),
        "Hx-4": TypeEntry(
            "Reasoning-Assist",
            "Hx-4. Reasoning-Assist Type involves AI participation in intermediate reasoning steps. "
            "Human oversight remains, but reasoning momentum is partially shared.",
        ),
    }
)

INTERPRETATION_REGISTRY: MappingProxyType[str, str] = MappingProxyType(
    {
        "Ax-4": (
            "Reasoning Simulator reflects a reasoning structure that appears coherent and well-formed, "
            "while transitions and revisions are driven by simulated control patterns rather than direct intent formation."
        ),
    }
)
GENERIC_INTERPRETATION = "{name} reflects the dominant reasoning pattern inferred from the current indicator configuration."


@dataclass(frozen=True)
class DeterminationAxes:
    """Active indicator scores plus the meta-axes the rules read."""

    AAS: float | None
    CTF: float | None
    RMD: float | None
    RDX: float | None
    EDS: float | None
    IFD: float | None
    KPF: float | None
    TPS: float | None
    Analyticity: float | None
    Flow: float | None
    MetacogRaw: float | None
    Regulation: float | None
    Authenticity: float | None
    MachineScore: float | None
    T2Axis: float | None
    """Regulation or MetacogRaw, per t2_mode."""


Margin = Callable[[DeterminationAxes], "float | None"]


class Rule(NamedTuple):
    code: str
    priority: int
    margin: Margin
    """Slack past the thresholds, or None when the rule does not fire."""


def _known(*xs: float | None) -> bool:
    return all(x is not None for x in xs)


def _t4(a: DeterminationAxes) -> float | None:
    if not _known(a.Analyticity, a.Flow, a.MetacogRaw):
        return None
    if a.Analyticity >= 0.6 and a.Flow >= 0.6 and a.MetacogRaw >= 0.6:
        return min(a.Analyticity - 0.6, a.Flow - 0.6, a.MetacogRaw - 0.6)
    return None


def _t2(a: DeterminationAxes) -> float | None:
    if a.T2Axis is not None and a.T2Axis >= 0.7:
        return a.T2Axis - 0.7
    return None


def _t1(a: DeterminationAxes) -> float | None:
    if _known(a.Analyticity, a.Flow) and a.Analyticity >= 0.7 and a.Flow < 0.55:
        return min(a.Analyticity - 0.7, 0.55 - a.Flow)
    return None


def _t3(a: DeterminationAxes) -> float | None:
    if _known(a.Flow, a.Analyticity) and a.Flow >= 0.7 and a.Analyticity < 0.55:
        return min(a.Flow - 0.7, 0.55 - a.Analyticity)
    return None


def _ax1(a: DeterminationAxes) -> float | None:
    if _known(a.AAS, a.RDX, a.RMD) and a.AAS >= 0.8 and a.RDX <= 0.4 and a.RMD <= 0.45:
        return min(a.AAS - 0.8, 0.4 - a.RDX, 0.45 - a.RMD)
    return None


def _ax2(a: DeterminationAxes) -> float | None:
    if _known(a.EDS, a.AAS, a.IFD) and a.EDS >= 0.8 and a.AAS >= 0.65 and a.IFD <= 0.4:
        return min(a.EDS - 0.8, a.AAS - 0.65, 0.4 - a.IFD)
    return None


def _ax3(a: DeterminationAxes) -> float | None:
    if _known(a.Flow, a.MachineScore) and a.Flow >= 0.65 and a.MachineScore >= 0.7:
        return min(a.Flow - 0.65, a.MachineScore - 0.7)
    return None


def _ax4(a: DeterminationAxes) -> float | None:
    if _known(a.AAS, a.RDX, a.IFD) and a.AAS >= 0.75 and a.RDX <= 0.45 and a.IFD <= 0.35:
        return min(a.AAS - 0.75, 0.45 - a.RDX, 0.35 - a.IFD)
    return None


def _kpf_mid(kpf: float) -> bool:
    return 0.25 <= kpf <= 0.55


def _hx1(a: DeterminationAxes) -> float | None:
    if a.RDX is not None and a.RDX >= 0.6 and _kpf_mid(a.KPF):
        return min(a.RDX - 0.6, a.KPF - 0.25, 0.55 - a.KPF)
    return None


def _hx2(a: DeterminationAxes) -> float | None:
    if _known(a.AAS, a.CTF) and a.AAS >= 0.6 and a.CTF >= 0.6 and _kpf_mid(a.KPF):
        return min(a.AAS - 0.6, a.CTF - 0.6, a.KPF - 0.25, 0.55 - a.KPF)
    return None


def _hx3(a: DeterminationAxes) -> float | None:
    if a.EDS is not None and a.EDS >= 0.75 and _kpf_mid(a.KPF):
        return min(a.EDS - 0.75, a.KPF - 0.25, 0.55 - a.KPF)
    return None


def _hx4(a: DeterminationAxes) -> float | None:
    if _known(a.AAS, a.RMD) and a.AAS >= 0.7 and a.RMD <= 0.45 and a.KPF >= 0.45:
        return min(a.AAS - 0.7, 0.45 - a.RMD, a.KPF - 0.45)
    return None


def _t6(a: DeterminationAxes) -> float | None:
    if a.MachineScore >= 0.7 or a.Authenticity <= 0.4:
        return max(a.MachineScore - 0.7, 0.4 - a.Authenticity)
    return None


def _t5(a: DeterminationAxes) -> float | None:
    if a.Authenticity >= 0.75:
        return a.Authenticity - 0.75
    return None


# every candidate that fires competes; highest priority, then highest confidence
HUMAN_RULES: tuple[Rule, ...] = (
    Rule("T4", 4, _t4),
    Rule("T2", 3, _t2),
    Rule("T1", 2, _t1),
    Rule("T3", 1, _t3),
)
# first firing rule wins
AI_RULES: tuple[Rule, ...] = (
    Rule("Ax-1", 4, _ax1),
    Rule("Ax-2", 3, _ax2),
    Rule("Ax-3", 2, _ax3),
    Rule("Ax-4", 1, _ax4),
)
HYBRID_RULES: tuple[Rule, ...] = (
    Rule("Hx-1", 4, _hx1),
    Rule("Hx-2", 3, _hx2),
    Rule("Hx-3", 2, _hx3),
    Rule("Hx-4", 1, _hx4),
)
EXPRESSION_RULES: tuple[Rule, ...] = (
    Rule("T6", 2, _t6),
    Rule("T5", 1, _t5),
)


@dataclass
class FinalTypeResult:
    type_code: str
    confidence: float
    track: Track
    axes: DeterminationAxes

    @property
    def label(self) -> str:
        return ensure_type_code_prefix(self.type_code, TYPE_REGISTRY[self.type_code].type_name)

    def to_dict(self) -> dict[str, Any]:
        label = self.label
        return {
            "label": label,
            "type_code": self.type_code,
            "chip_label": label,
            "confidence": self.confidence,
            "interpretation": interpretation_for(self.type_code),
        }


def confidence_from_margin(margin: float) -> float:
    return clamp01(clamp(CONF_BASE + CONF_SCALE * margin, CONF_LOW, CONF_HIGH))


def ensure_type_code_prefix(code: str, type_name: str) -> str:
    name = " ".join(str(type_name or "").split())
    if not name:
        return code
    if name.startswith(code + ".") or name.startswith(code + " "):
        return name
    return f"{code}. {name}"


def interpretation_for(code: str) -> str:
    entry = TYPE_REGISTRY.get(code)
    if entry is None:
        raise ConfigurationError(f"unknown final type code for registry: {code}")
    return INTERPRETATION_REGISTRY.get(code) or GENERIC_INTERPRETATION.format(name=entry.type_name)


def active_score(indicators: Mapping[str, Any], code: str) -> float | None:
    iv = indicators.get(code)
    if not isinstance(iv, Mapping):
        return None
    status = iv.get("status")
    if status != IndicatorStatus.ACTIVE:
        return None
    x = iv.get("score")
    if not is_finite_number(x):
        return None
    if code == "TPS-H" and x > 1.01:
        x = x / 100
    return clamp01(x)


def build_axes(indicators: Mapping[str, Any], t2_mode: str = "Regulation") -> DeterminationAxes:
    if t2_mode not in T2_MODES:
        raise ConfigurationError(f"t2_mode must be one of {T2_MODES}, got {t2_mode!r}")
    aas, ctf, rmd = active_score(indicators, "AAS"), active_score(indicators, "CTF"), active_score(indicators, "RMD")
    rdx, eds, ifd = active_score(indicators, "RDX"), active_score(indicators, "EDS"), active_score(indicators, "IFD")
    kpf, tps = active_score(indicators, "KPF-Sim"), active_score(indicators, "TPS-H")

    metacog_raw = avg(rdx, ifd)
    regulation = avg(rdx, None if ifd is None else 1 - ifd)
    return DeterminationAxes(
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
        MetacogRaw=metacog_raw,
        Regulation=regulation,
        Authenticity=authenticity(kpf, tps),
        MachineScore=machine_score(kpf, tps),
        T2Axis=regulation if t2_mode == "Regulation" else metacog_raw,
    )


def select_track(axes: DeterminationAxes, conservative_lock: bool = False) -> Track:
    if axes.MachineScore is None or conservative_lock:
        return Track.HUMAN
    if axes.MachineScore >= AI_TRACK_MIN:
        return Track.AI
    if axes.MachineScore >= HYBRID_TRACK_MIN:
        return Track.HYBRID
    return Track.HUMAN


def first_match(rules: tuple[Rule, ...], axes: DeterminationAxes) -> tuple[str, float] | None:
    for rule in rules:
        margin = rule.margin(axes)
        if margin is not None:
            return rule.code, confidence_from_margin(margin)
    return None


def choose_human_type(axes: DeterminationAxes) -> tuple[str, float]:
    candidates = []
    for rule in HUMAN_RULES:
        margin = rule.margin(axes)
        if margin is not None:
            candidates.append((rule.priority, confidence_from_margin(margin), rule.code))
    if not candidates:
        return "T2", DEFAULT_T2_CONFIDENCE
    _, conf, code = max(candidates, key=lambda c: (c[0], c[1]))
    return code, conf


def determine_final_type(
    indicators: Mapping[str, Any],
    t2_mode: str = "Regulation",
    conservative_lock: bool = False,
) -> FinalTypeResult:
    axes = build_axes(indicators, t2_mode)
    track = select_track(axes, conservative_lock)

    picked: tuple[str, float] | None = None
    if track is Track.HUMAN:
        if axes.Authenticity is not None and axes.MachineScore is not None:
            picked = first_match(EXPRESSION_RULES, axes)
    elif track is Track.HYBRID:
        if axes.KPF is not None:
            picked = first_match(HYBRID_RULES, axes)
    else:
        picked = first_match(AI_RULES, axes)
    code, conf = picked or choose_human_type(axes)

    if code not in TYPE_REGISTRY:
        raise ConfigurationError(f"unknown final type code for registry: {code}")
    result = FinalTypeResult(type_code=code, confidence=round2(clamp01(conf)), track=track, axes=axes)
    logger.debug(
        "final_type_result",
        track=track.value,
        type_code=code,
        confidence=result.confidence,
        machine_score=axes.MachineScore,
    )
    return result
