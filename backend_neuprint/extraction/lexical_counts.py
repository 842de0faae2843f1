"""
Deterministic lexical counts over segmented units.

Counts only explicit lexical markers: reason connectors, hedge words,
adjacency connectors, revision events (at most one per unit) and
presence-only evidence types in a fixed order. Claims, evidence counts,
transitions and drift stay with the upstream extractor.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from backend_neuprint.core.numeric import round1
from backend_neuprint.extraction.rules import (
    ADJACENCY_RULES,
    EVIDENCE_RULES,
    EVIDENCE_TYPE_ORDER,
    HEDGE_RULES,
    REASON_RULES,
    REVISION_RULES,
    any_match,
    count_matches,
    first_match,
)
from backend_neuprint.extraction.segmenter import trim_edges
from backend_neuprint.neuprint_logging import get_logger

logger = get_logger(__name__)


@dataclass
class RevisionEvent:
    has_revision: bool
    depth: float
    category: str | None = None
    """correction | reframe; None when the unit has no revision."""


@dataclass
class LexicalCounts:
    reasons: int
    hedges: int
    adjacency_links: int
    revisions: int
    revision_depth_sum: float
    per_unit_revisions: list[int] = field(default_factory=list)
    """0/1 per unit, aligned with the unit list."""
    evidence_types: list[str] = field(default_factory=list)
    """Present evidence types in fixed canonical order."""

    def to_dict(self) -> dict[str, Any]:
        return {
            "reasons": self.reasons,
            "hedges": self.hedges,
            "adjacency_links": self.adjacency_links,
            "revisions": self.revisions,
            "revision_depth_sum": self.revision_depth_sum,
            "per_unit_revisions": list(self.per_unit_revisions),
            "evidence_types": list(self.evidence_types),
        }


def detect_revision(unit: str) -> RevisionEvent:
    """Single revision event for a unit: correction (0.5) > reframe (0.2) > none."""
    rule = first_match((unit or "").lower(), REVISION_RULES)
    if rule is None:
        return RevisionEvent(has_revision=False, depth=0.0)
    return RevisionEvent(has_revision=True, depth=rule.action, category=rule.category)


def detect_evidence_types(units: list[str]) -> list[str]:
    full = "\n".join(units).lower()
    return [etype for etype in EVIDENCE_TYPE_ORDER if any_match(full, EVIDENCE_RULES[etype])]


def compute_lexical_counts(unit_texts: list[str]) -> LexicalCounts:
    units = [trim_edges(u) for u in unit_texts or []]
    joined = "\n".join(units)

    per_unit: list[int] = []
    depth_sum = 0.0
    for unit in units:
        event = detect_revision(unit)
        per_unit.append(1 if event.has_revision else 0)
        depth_sum += event.depth

    counts = LexicalCounts(
        reasons=count_matches(joined, REASON_RULES),
        hedges=count_matches(joined, HEDGE_RULES),
        adjacency_links=count_matches(joined, ADJACENCY_RULES),
        revisions=sum(per_unit),
        revision_depth_sum=round1(depth_sum),
        per_unit_revisions=per_unit,
        evidence_types=detect_evidence_types(units),
    )
    logger.debug(
        "lexical_counts_result",
        units=len(units),
        reasons=counts.reasons,
        hedges=counts.hedges,
        adjacency_links=counts.adjacency_links,
        revisions=counts.revisions,
        revision_depth_sum=counts.revision_depth_sum,
        evidence_types=counts.evidence_types,
    )
    return counts
