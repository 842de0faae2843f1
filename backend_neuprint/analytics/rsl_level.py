"""
RSL level engine: FRI -> L1..L6 with deterministic signal gates.

Legacy 0..6 cuts scaled by 5/6 onto the 0..5 FRI scale:
L2 >= 2.083, L3 >= 2.75, L4 >= 3.417, L5 >= 4.0, L6 >= 4.5 (+ conditions).

- L5 gate: self_repair Present, otherwise L4.
- L6 promotion (only from post-gate L5): framework_generation Present AND
  (A7 Present OR A8 Present) AND FRI >= 4.5 AND R6 >= 4 AND (R7 >= 4 OR R8 >= 4).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, NamedTuple

from backend_neuprint.analytics.signals import ComputedSignals, compute_signals
from backend_neuprint.core.numeric import clamp0to5
from backend_neuprint.neuprint_logging import get_logger

logger = get_logger(__name__)


class LevelMeta(NamedTuple):
    short_name: str
    full_name: str
    definition: str


LEVEL_METADATA: MappingProxyType[str, LevelMeta] = MappingProxyType(
    {
        "L1": LevelMeta(
            "L1 Fragmented",
            "L1 Fragmented Reasoning",
            "Disconnected statements without a traceable reasoning structure.",
        ),
        "L2": LevelMeta(
            "L2 Linear",
            "L2 Linear Reasoning",
            "Single-direction logic with limited perspective branching or qualification.",
        ),
        "L3": LevelMeta(
            "L3 Structured",
            "L3 Structured Reasoning",
            "Organized reasoning components with partial coordination across dimensions.",
        ),
        "L4": LevelMeta(
            "L4 Integrated",
            "L4 Integrated Reasoning",
            "Multiple reasoning dimensions coordinated into a stable, non-dominant structure.",
        ),
        "L5": LevelMeta(
            "L5 Reflective",
            "L5 Reflective Reasoning",
            "Explicit self-correction and value-based constraints applied within the reasoning flow.",
        ),
        "L6": LevelMeta(
            "L6 Generative",
            "L6 Generative Reasoning",
            "Reasoning that models, evaluates, and generates transferable cognitive frameworks.",
        ),
    }
)


def _scaled_cut(legacy: float) -> float:
    """Legacy 0..6 cut on the 0..5 scale, rounded so 5.4 maps to exactly 4.5."""
    return round(legacy * 5 / 6, 10)


CUT_L2 = _scaled_cut(2.5)
CUT_L3 = _scaled_cut(3.3)
CUT_L4 = _scaled_cut(4.1)
CUT_L5 = _scaled_cut(4.8)
CUT_L6 = _scaled_cut(5.4)

BASE_CUTS: tuple[tuple[float, str], ...] = (
    (CUT_L2, "L2"),
    (CUT_L3, "L3"),
    (CUT_L4, "L4"),
    (CUT_L5, "L5"),
)

STRICT_RUBRIC_MIN = 4

BASIS_FRI_BAND = "FRI band"
BASIS_L5_FAILED = "L5 gate failed (self_repair Present required)"
BASIS_L5_PASSED = "L5 gate passed (self_repair Present)"
BASIS_L6 = "L6 promotion (framework + expansion + strict numeric gate)"


@dataclass
class RSLLevelResult:
    code: str
    signals: ComputedSignals
    basis: list[str] = field(default_factory=list)

    @property
    def meta(self) -> LevelMeta:
        return LEVEL_METADATA[self.code]

    def to_dict(self) -> dict[str, Any]:
        return self.meta._asdict()


def base_level(fri: float) -> str:
    f = clamp0to5(fri)
    level = "L1"
    for cut, code in BASE_CUTS:
        if f >= cut:
            level = code
    return level


def strict_numeric_gate(fri: float, r6: float, r7: float, r8: float) -> bool:
    return (
        clamp0to5(fri) >= CUT_L6
        and clamp0to5(r6) >= STRICT_RUBRIC_MIN
        and (clamp0to5(r7) >= STRICT_RUBRIC_MIN or clamp0to5(r8) >= STRICT_RUBRIC_MIN)
    )


def compute_rsl_level(
    fri: float,
    r6: float,
    r7: float,
    r8: float,
    raw_signals_quotes: dict[str, Any] | None = None,
) -> RSLLevelResult:
    """Gated RSL level. Only Present signal states open the L5 gate or the L6 promotion."""
    signals = compute_signals(raw_signals_quotes)
    basis = [BASIS_FRI_BAND]
    level = base_level(fri)

    if level == "L5":
        if signals.self_repair.is_present():
            basis.append(BASIS_L5_PASSED)
        else:
            level = "L4"
            basis.append(BASIS_L5_FAILED)

    if level == "L5":
        expansion_ok = signals.A7_value_aware.is_present() or signals.A8_perspective_flexible.is_present()
        framework_ok = signals.framework_generation.is_present()
        if framework_ok and expansion_ok and strict_numeric_gate(fri, r6, r7, r8):
            level = "L6"
            basis.append(BASIS_L6)

    logger.debug("rsl_level_result", fri=clamp0to5(fri), level=level, basis=basis)
    return RSLLevelResult(code=level, signals=signals, basis=basis)


def level_cuts() -> dict[str, float]:
    return {"CUT_L2": CUT_L2, "CUT_L3": CUT_L3, "CUT_L4": CUT_L4, "CUT_L5": CUT_L5, "CUT_L6": CUT_L6}
