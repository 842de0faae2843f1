"""
Observed structural signals: up to four display lines picked from the S1..S18 library.

Selection order:
1. one line per core group (REVISION, TRANSITION, COUNTER, NONAUTO),
   the lowest priority number in the group winning;
2. fill from EVIDENCE, then SPECIFICITY;
3. fill from whatever is left, by priority.

Unknown ids are ignored. Missing display slots are rendered as "".
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, NamedTuple

from backend_neuprint.neuprint_logging import get_logger

logger = get_logger(__name__)

DISPLAY_LINES = 4

CORE_GROUP_ORDER = ("REVISION", "TRANSITION", "COUNTER", "NONAUTO")
FILL_GROUP_ORDER = ("EVIDENCE", "SPECIFICITY")

DEFAULT_ACTIVE_IDS = ("S1", "S2", "S5", "S14")


class SignalTemplate(NamedTuple):
    id: str
    group: str
    priority: int
    text: str


SIGNAL_LIBRARY: MappingProxyType[str, SignalTemplate] = MappingProxyType(
    {
        t.id: t
        for t in (
            SignalTemplate("S1", "REVISION", 10, "Revision activity occurs at semantic decision boundaries."),
            SignalTemplate("S2", "REVISION", 20, "Argument order adjustments correspond to logical correction."),
            SignalTemplate("S3", "REVISION", 30, "Claim scope or conditions are refined through explicit revision."),
            SignalTemplate(
                "S4", "REVISION", 40, "Prior assumptions are explicitly re-evaluated during reasoning progression."
            ),
            SignalTemplate("S5", "TRANSITION", 10, "Consistency checks appear across structural transitions."),
            SignalTemplate(
                "S6",
                "TRANSITION",
                20,
                "Logical transitions between claims and supporting reasons are explicitly maintained.",
            ),
            SignalTemplate(
                "S7", "TRANSITION", 30, "Structural continuity is preserved across multi-step reasoning transitions."
            ),
            SignalTemplate("S8", "COUNTER", 10, "Alternative viewpoints are introduced and structurally examined."),
            SignalTemplate(
                "S9", "COUNTER", 20, "Counter-arguments are explicitly addressed through refutational reasoning."
            ),
            SignalTemplate(
                "S10",
                "COUNTER",
                30,
                "Evidence is evaluated against potential contradictions rather than accepted at face value.",
            ),
            SignalTemplate(
                "S11", "EVIDENCE", 10, "Multiple evidence types are integrated within the reasoning structure."
            ),
            SignalTemplate(
                "S12",
                "EVIDENCE",
                20,
                "Evidence placement aligns with the logical role it serves within the argument.",
            ),
            SignalTemplate(
                "S13", "EVIDENCE", 30, "Supporting evidence is selectively introduced at structurally relevant points."
            ),
            SignalTemplate(
                "S14", "NONAUTO", 10, "No sustained repetitive propagation is observed across reasoning segments."
            ),
            SignalTemplate(
                "S15", "NONAUTO", 20, "Structural variation is maintained without reliance on template-like repetition."
            ),
            SignalTemplate(
                "S16", "NONAUTO", 30, "Reasoning progression avoids uniform continuation patterns across sections."
            ),
            SignalTemplate(
                "S17",
                "SPECIFICITY",
                10,
                "Structural behavior reflects document-specific reasoning rather than generic composition patterns.",
            ),
            SignalTemplate(
                "S18",
                "SPECIFICITY",
                20,
                "Observed structural signals vary across sections in response to local reasoning demands.",
            ),
        )
    }
)


@dataclass
class ObservedSignals:
    selected: list[SignalTemplate]
    display_lines: int = DISPLAY_LINES

    @property
    def ids(self) -> list[str]:
        return [s.id for s in self.selected]

    def to_dict(self) -> dict[str, str]:
        """Numbered display lines "1".."N"; empty strings for unused slots."""
        out: dict[str, str] = {}
        for i in range(self.display_lines):
            out[str(i + 1)] = self.selected[i].text if i < len(self.selected) else ""
        return out


def active_candidates(active_ids: Iterable[Any] | None) -> list[SignalTemplate]:
    """Known ids in library order (so ties resolve the same way for any input order)."""
    wanted = {str(x).strip() for x in (active_ids or ())}
    return [t for t in SIGNAL_LIBRARY.values() if t.id in wanted]


def _best_in_group(candidates: list[SignalTemplate], group: str, used: set[str]) -> SignalTemplate | None:
    best = None
    for t in candidates:
        if t.group != group or t.id in used:
            continue
        if best is None or t.priority < best.priority:
            best = t
    return best


def select_observed_signals(
    active_ids: Iterable[Any] | None,
    band: str | None = None,
    display_lines: int = DISPLAY_LINES,
) -> ObservedSignals:
    candidates = active_candidates(active_ids)
    picked: list[SignalTemplate] = []
    used: set[str] = set()

    def take(t: SignalTemplate | None) -> None:
        if t is not None and len(picked) < display_lines:
            picked.append(t)
            used.add(t.id)

    for group in CORE_GROUP_ORDER:
        take(_best_in_group(candidates, group, used))
    for group in FILL_GROUP_ORDER:
        if len(picked) >= display_lines:
            break
        take(_best_in_group(candidates, group, used))
    for t in sorted(candidates, key=lambda t: t.priority):
        if len(picked) >= display_lines:
            break
        if t.id not in used:
            take(t)

    result = ObservedSignals(selected=picked, display_lines=display_lines)
    logger.debug(
        "observed_signals_result",
        active=[t.id for t in candidates],
        selected=result.ids,
        band=band,
    )
    return result


def default_observed_signals() -> ObservedSignals:
    """Canonical four lines used when no active ids are configured (fixed order, no reselection)."""
    return ObservedSignals(selected=[SIGNAL_LIBRARY[i] for i in DEFAULT_ACTIVE_IDS])


def to_rc_json(result: ObservedSignals) -> dict[str, Any]:
    return {"rc": {"observed_structural_signals": result.to_dict()}}
