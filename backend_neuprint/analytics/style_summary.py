"""
Cognitive style 9-type summary (structure x exploration grid).

structure   = 0.40 rdx + 0.30 aas + 0.20 eds + 0.10 (1 - ifd)
exploration = 0.45 ctf + 0.25 rmd + 0.20 rsl_hypothesis + 0.10 rsl_expansion

Both axes are cut at HIGH >= 0.67 and MEDIUM >= 0.45. The result is
diagnostic only; it is not part of the closed report.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from backend_neuprint.core.numeric import clamp01, finite_or, round2
from backend_neuprint.neuprint_logging import get_logger

logger = get_logger(__name__)

HIGH_CUT = 0.67
MEDIUM_CUT = 0.45

RSL_STYLE_KEYS = ("rsl_control", "rsl_validation", "rsl_hypothesis", "rsl_expansion")

PRIMARY_PATTERNS: MappingProxyType[int, str] = MappingProxyType(
    {
        1: "Reflective Explorer",
        2: "Reflective Explorer",
        3: "Analytical Reasoner",
        4: "Intuitive Explorer",
        5: "Reflective Explorer",
        6: "Procedural Thinker",
        7: "Creative Explorer",
        8: "Associative Thinker",
        9: "Linear Responder",
    }
)

PHRASES: MappingProxyType[int, str] = MappingProxyType(
    {
        1: "structured and exploratory",
        2: "structured but exploratory",
        3: "highly structured and deliberate",
        4: "exploratory with emerging structure",
        5: "balanced and adaptive",
        6: "moderately structured and steady",
        7: "highly exploratory and fluid",
        8: "loosely structured with exploration",
        9: "unstructured and linear",
    }
)


@dataclass(frozen=True)
class StyleInputs:
    aas: float = 0.0
    ctf: float = 0.0
    rmd: float = 0.0
    rdx: float = 0.0
    eds: float = 0.0
    ifd: float = 0.0
    rsl_control: float = 0.0
    rsl_validation: float = 0.0
    rsl_hypothesis: float = 0.0
    rsl_expansion: float = 0.0

    @classmethod
    def from_scores(cls, cff: Mapping[str, Any], rsl: Mapping[str, Any] | None = None) -> StyleInputs:
        """cff keyed by upper-case codes (AAS..IFD); rsl carries the optional rsl_* values."""
        rsl = rsl or {}
        return cls(
            aas=_safe01(cff.get("AAS")),
            ctf=_safe01(cff.get("CTF")),
            rmd=_safe01(cff.get("RMD")),
            rdx=_safe01(cff.get("RDX")),
            eds=_safe01(cff.get("EDS")),
            ifd=_safe01(cff.get("IFD")),
            **{k: _safe01(rsl.get(k)) for k in RSL_STYLE_KEYS},
        )


@dataclass
class StyleSummary:
    style_id: int
    structure: float
    exploration: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "primary_pattern": PRIMARY_PATTERNS[self.style_id],
            "representative_phrase": PHRASES[self.style_id],
        }

    def diagnostics(self) -> dict[str, Any]:
        return {
            "style_id": self.style_id,
            "structure": round2(self.structure),
            "exploration": round2(self.exploration),
            **self.to_dict(),
        }


def _safe01(x: Any) -> float:
    return clamp01(finite_or(x, 0.0))


def structure_score(m: StyleInputs) -> float:
    return clamp01(0.40 * m.rdx + 0.30 * m.aas + 0.20 * m.eds + 0.10 * (1 - m.ifd))


def exploration_score(m: StyleInputs) -> float:
    return clamp01(0.45 * m.ctf + 0.25 * m.rmd + 0.20 * m.rsl_hypothesis + 0.10 * m.rsl_expansion)


def _tier(x: float) -> int:
    if x >= HIGH_CUT:
        return 0
    if x >= MEDIUM_CUT:
        return 1
    return 2


def classify_style_id(structure: float, exploration: float) -> int:
    """1..9, row by structure tier (high, medium, low), column by exploration tier."""
    return _tier(clamp01(structure)) * 3 + _tier(clamp01(exploration)) + 1


def compute_style_summary(inputs: StyleInputs) -> StyleSummary:
    s = structure_score(inputs)
    e = exploration_score(inputs)
    summary = StyleSummary(style_id=classify_style_id(s, e), structure=s, exploration=e)
    logger.debug(
        "style_summary_result",
        structure=round2(s),
        exploration=round2(e),
        style_id=summary.style_id,
    )
    return summary
