"""
Shared numeric helpers for all engines.

Every helper is total: non-finite inputs resolve to a documented fallback
instead of propagating NaN/inf into the report. Rounding is half-up
(ties go toward +inf) so that reports are stable across platforms.
"""

from __future__ import annotations

import math
import sys
from collections.abc import Iterable, Sequence
from typing import Any

import numpy as np

EPS = sys.float_info.epsilon


def is_finite_number(x: Any) -> bool:
    """True for int/float values that are finite (bool is not a number here)."""
    return isinstance(x, (int, float)) and not isinstance(x, bool) and math.isfinite(x)


def finite_or(x: Any, fallback: float = 0.0) -> float:
    return float(x) if is_finite_number(x) else fallback


def clamp(x: float, lo: float, hi: float) -> float:
    if not is_finite_number(x):
        return lo
    return max(lo, min(hi, float(x)))


def clamp01(x: float) -> float:
    """Clamp to [0, 1]; non-finite -> 0."""
    return clamp(x, 0.0, 1.0)


def clamp0to5(x: float) -> float:
    return clamp(x, 0.0, 5.0)


def round_half_up(x: float) -> int:
    """Round to the nearest integer, ties toward +inf."""
    return int(math.floor(x + 0.5))


def round2(x: float) -> float:
    """Two-decimal half-up rounding with an epsilon nudge; non-finite -> 0."""
    if not is_finite_number(x):
        return 0.0
    return round_half_up((x + EPS) * 100) / 100


def round1(x: float) -> float:
    if not is_finite_number(x):
        return 0.0
    return round_half_up((x + EPS) * 10) / 10


def round3(x: float) -> float:
    if not is_finite_number(x):
        return 0.0
    return round_half_up(x * 1000) / 1000


def safe_div(num: float, den: float, fallback: float = 0.0) -> float:
    """num / den, or fallback when either side is non-finite or den == 0."""
    if not is_finite_number(num) or not is_finite_number(den) or den == 0:
        return fallback
    return num / den


def _finite_array(xs: Iterable[Any]) -> np.ndarray:
    return np.array([float(x) if is_finite_number(x) else 0.0 for x in xs], dtype=np.float64)


def mean(xs: Sequence[Any]) -> float:
    if not xs:
        return 0.0
    return float(np.mean(_finite_array(xs)))


def pstd(xs: Sequence[Any]) -> float:
    """Population standard deviation (ddof=0); 0 for an empty sequence."""
    if not xs:
        return 0.0
    return float(np.std(_finite_array(xs)))


def coefficient_of_variation(xs: Sequence[Any]) -> float:
    m = mean(xs)
    if m <= 0:
        return 0.0
    return pstd(xs) / m


def entropy01(counts: Sequence[Any]) -> float:
    """
    Shannon entropy of a count vector normalized by ln(#non-zero categories).

    1 means perfectly balanced, 0 means everything in one category (or no data).
    """
    arr = _finite_array(counts)
    arr = np.where(arr > 0, arr, 0.0)
    total = float(arr.sum())
    if total <= 0:
        return 0.0
    p = arr[arr > 0] / total
    h = float(-(p * np.log(p)).sum())
    h_max = math.log(len(p) or 1)
    if h_max <= 0:
        return 0.0
    return clamp01(h / h_max)


def peak01(x: float, target: float, width: float) -> float:
    """1 at target, falling linearly to 0 at target +/- width."""
    if not is_finite_number(x) or width <= 0:
        return 0.0
    return clamp01(1 - abs(x - target) / width)


def sat(x: float, k: float) -> float:
    """Saturating transform x / (x + k) for x >= 0; negative x counts as 0."""
    xx = x if is_finite_number(x) and x > 0 else 0.0
    return xx / (xx + k)
