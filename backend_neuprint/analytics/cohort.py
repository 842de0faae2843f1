"""
Cohort percentile: where an FRI value sits within a reference population.

With a reference list: share of entries strictly below the value.
Without one: area under a fixed default frequency curve (trapezoidal rule,
linear interpolation inside the boundary segment) divided by total area.
Percentiles are rounded half-up to 3 decimals.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from backend_neuprint.core.numeric import clamp01, finite_or, is_finite_number, round3, round_half_up
from backend_neuprint.neuprint_logging import get_logger

logger = get_logger(__name__)

# (fri, relative frequency)
DEFAULT_COHORT_CURVE: tuple[tuple[float, float], ...] = (
    (0.0, 2),
    (0.5, 6),
    (1.0, 14),
    (1.5, 26),
    (2.0, 30),
    (2.5, 45),
    (3.0, 58),
    (3.5, 42),
    (4.0, 22),
    (4.5, 10),
    (5.0, 4),
)

DEGENERATE_PERCENTILE = 0.5

# (minimum top-percent, text), checked in order
COHORT_BANDS: tuple[tuple[float, str], ...] = (
    (50, "Core reasoning steps are emerging, with structure still developing compared to most peers."),
    (30, "Developing structure, with several reasoning patterns beginning to align relative to comparable peers."),
    (20, "Generally well-structured reasoning compared to most peers, with room for further stabilization."),
    (10, "Consistently structured reasoning relative to comparable peers."),
    (5, "Highly consistent reasoning structure compared to most peers, even as complexity increases."),
)
COHORT_TOP_TEXT = "Exceptionally stable reasoning structure within the current comparison group."


@dataclass
class CohortResult:
    percentile_0to1: float
    top_percent_label: str
    interpretation: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "percentile_0to1": self.percentile_0to1,
            "top_percent_label": self.top_percent_label,
            "interpretation": self.interpretation,
        }


def percentile_from_curve(value: float, curve: Sequence[tuple[float, float]] = DEFAULT_COHORT_CURVE) -> float:
    pts = sorted(
        ((x, y) for x, y in curve if is_finite_number(x) and is_finite_number(y)),
        key=lambda p: p[0],
    )
    if len(pts) < 2:
        return DEGENERATE_PERCENTILE

    v = finite_or(value, 0.0)
    total_area = 0.0
    below_area = 0.0
    for (x0, y0), (x1, y1) in zip(pts, pts[1:]):
        y0, y1 = max(0.0, y0), max(0.0, y1)
        dx = x1 - x0
        if not dx > 0:
            continue
        seg_area = (y0 + y1) * 0.5 * dx
        total_area += seg_area
        if v <= x0:
            continue
        if v >= x1:
            below_area += seg_area
        else:
            t = (v - x0) / dx
            yv = y0 + (y1 - y0) * t
            below_area += (y0 + yv) * 0.5 * (v - x0)

    if not total_area > 0:
        return DEGENERATE_PERCENTILE
    return round3(min(1.0, max(0.0, below_area / total_area)))


def percentile_0to1(value: float, cohort_fri_list: Sequence[float] | None = None) -> float:
    if not cohort_fri_list:
        return percentile_from_curve(value)
    v = finite_or(value, 0.0)
    lower = sum(1 for x in cohort_fri_list if finite_or(x, 0.0) < v)
    return round3(lower / len(cohort_fri_list))


def top_percent(percentile: float) -> int:
    p = percentile if is_finite_number(percentile) else 0.5
    return round_half_up((1 - p) * 100)


def top_percent_label(percentile: float) -> str:
    top = top_percent(percentile)
    if top <= 1:
        return "Top 1%"
    return f"Top {top}%"


def cohort_interpretation(top_percent_value: float) -> str:
    t = top_percent_value if is_finite_number(top_percent_value) else 50
    for minimum, text in COHORT_BANDS:
        if t >= minimum:
            return text
    return COHORT_TOP_TEXT


def compute_cohort(fri: float, cohort_fri_list: Sequence[float] | None = None) -> CohortResult:
    percentile = percentile_0to1(fri, cohort_fri_list)
    result = CohortResult(
        percentile_0to1=clamp01(percentile),
        top_percent_label=top_percent_label(percentile),
        interpretation=cohort_interpretation(top_percent(percentile)),
    )
    logger.debug(
        "cohort_result",
        fri=fri,
        reference_size=len(cohort_fri_list or ()),
        percentile=result.percentile_0to1,
        label=result.top_percent_label,
    )
    return result
