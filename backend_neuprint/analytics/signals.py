"""
Deterministic RSL signal states from quote candidates.

The extractor supplies only quote candidates; state is assigned here:
- A7 value-aware, A8 perspective-flexible: tri-state (Present / Emerging / Not_evidenced)
- self-repair, framework-generation: binary (Present / Not_evidenced)

Present requires an explicit marker; evidence without any marker stays
Emerging, and Emerging never opens a gate.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from backend_neuprint.neuprint_logging import get_logger

logger = get_logger(__name__)

MAX_EVIDENCE_QUOTES = 2
MAX_QUOTE_CHARS = 220

QUOTE_KEYS = {
    "A7_value_aware": "A7_value_aware_quote_candidates",
    "A8_perspective_flexible": "A8_perspective_flexible_quote_candidates",
    "self_repair": "self_repair_quote_candidates",
    "framework_generation": "framework_generation_quote_candidates",
}


class SignalState(str, Enum):
    PRESENT = "Present"
    EMERGING = "Emerging"
    NOT_EVIDENCED = "Not_evidenced"


def _marker_pattern(english: tuple[str, ...], korean: tuple[str, ...]) -> re.Pattern[str]:
    # English terms need word boundaries; Korean stems match anywhere in a word
    eng = r"\b(?:" + "|".join(english) + r")\b"
    kor = "|".join(korean)
    return re.compile(f"{eng}|{kor}", re.IGNORECASE)


A7_PRESENT = _marker_pattern(
    (
        "if", "unless", "only if", "provided that", "in order to", "constraint",
        r"trade[- ]?off", "cost", "benefit", "risk", "priority", "must", "should",
        "cannot", "limit", "threshold",
    ),
    ("조건", "만약", "오직", "제약", "트레이드오프", "비용", "편익", "리스크", "우선", "반드시", "해야", "불가"),
)
A7_NUMERIC = re.compile(r"\b\d+(?:\.\d+)?\b")
A7_EMERGING = _marker_pattern(
    ("value", "prefer", "important", "should", "consider", "worth", "desirable"),
    ("좋다", "중요", "선호", "바람직", "고려"),
)
A8_PRESENT = _marker_pattern(
    (
        "on the other hand", "however", "whereas", "in contrast", "compared to",
        "versus", "while", "yet", "but", "although",
    ),
    ("반면", "하지만", "비교", "대조", "한편"),
)
A8_EMERGING = _marker_pattern(
    ("perspective", "viewpoint", "stakeholder", "different", "another", "alternatively"),
    ("관점", "시각", "이해관계자", "다른", "또는", "대안"),
)

_WHITESPACE_RUN = re.compile(r"\s+")


@dataclass
class ComputedSignal:
    state: SignalState
    evidence_quotes: list[str] = field(default_factory=list)

    def is_present(self) -> bool:
        return self.state is SignalState.PRESENT

    def to_dict(self) -> dict[str, Any]:
        return {"state": self.state.value, "evidence_quotes": list(self.evidence_quotes)}


@dataclass
class ComputedSignals:
    A7_value_aware: ComputedSignal
    A8_perspective_flexible: ComputedSignal
    self_repair: ComputedSignal
    framework_generation: ComputedSignal

    def to_dict(self) -> dict[str, Any]:
        return {
            "A7_value_aware": self.A7_value_aware.to_dict(),
            "A8_perspective_flexible": self.A8_perspective_flexible.to_dict(),
            "self_repair": self.self_repair.to_dict(),
            "framework_generation": self.framework_generation.to_dict(),
        }


def normalize_candidates(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [v.strip() for v in value if isinstance(v, str) and v.strip()]


def sanitize_quotes(candidates: list[str], max_quotes: int = MAX_EVIDENCE_QUOTES) -> list[str]:
    """Single-line, collapsed, <=220 chars, case-insensitively unique; first max_quotes kept."""
    seen: set[str] = set()
    cleaned: list[str] = []
    for c in candidates:
        s = _WHITESPACE_RUN.sub(" ", c).strip()
        if not s:
            continue
        if "\r" in c or "\n" in c:
            continue
        if len(s) > MAX_QUOTE_CHARS:
            continue
        key = s.lower()
        if key in seen:
            continue
        seen.add(key)
        cleaned.append(s)
        if len(cleaned) >= max_quotes:
            break
    return cleaned


def is_a7_present(q: str) -> bool:
    return bool(A7_PRESENT.search(q) or A7_NUMERIC.search(q))


def is_a7_emerging(q: str) -> bool:
    return bool(A7_EMERGING.search(q))


def is_a8_present(q: str) -> bool:
    return bool(A8_PRESENT.search(q))


def is_a8_emerging(q: str) -> bool:
    return bool(A8_EMERGING.search(q))


def tri_state(quotes: list[str], present, emerging) -> SignalState:
    if not quotes:
        return SignalState.NOT_EVIDENCED
    if any(present(q) for q in quotes):
        return SignalState.PRESENT
    if any(emerging(q) for q in quotes):
        return SignalState.EMERGING
    # evidence without any marker: conservative, non-gating
    return SignalState.EMERGING


def binary_state(quotes: list[str]) -> SignalState:
    return SignalState.PRESENT if quotes else SignalState.NOT_EVIDENCED


def _signal(state: SignalState, quotes: list[str]) -> ComputedSignal:
    return ComputedSignal(state=state, evidence_quotes=[] if state is SignalState.NOT_EVIDENCED else quotes)


def compute_signals(raw_quotes: dict[str, Any] | None) -> ComputedSignals:
    """Signal states and evidence quotes from raw_signals_quotes (may be None)."""
    raw = raw_quotes if isinstance(raw_quotes, dict) else {}
    quotes = {
        name: sanitize_quotes(normalize_candidates(raw.get(key))) for name, key in QUOTE_KEYS.items()
    }

    a7 = tri_state(quotes["A7_value_aware"], is_a7_present, is_a7_emerging)
    a8 = tri_state(quotes["A8_perspective_flexible"], is_a8_present, is_a8_emerging)
    signals = ComputedSignals(
        A7_value_aware=_signal(a7, quotes["A7_value_aware"]),
        A8_perspective_flexible=_signal(a8, quotes["A8_perspective_flexible"]),
        self_repair=_signal(binary_state(quotes["self_repair"]), quotes["self_repair"]),
        framework_generation=_signal(
            binary_state(quotes["framework_generation"]), quotes["framework_generation"]
        ),
    )
    logger.debug(
        "rsl_signals_result",
        a7=signals.A7_value_aware.state.value,
        a8=signals.A8_perspective_flexible.state.value,
        self_repair=signals.self_repair.state.value,
        framework_generation=signals.framework_generation.state.value,
    )
    return signals
