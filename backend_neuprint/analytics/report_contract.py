"""
Report contract: the closed four-section output record.

assemble_report() picks the public fields from each engine result,
coerce_report() fills defaults and clamps numbers, validate_report()
checks the result against the pydantic models below (extra keys are
rejected) and raises ContractViolation naming the first failing path.
"""

from __future__ import annotations

import copy
import re
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from backend_neuprint.analytics.cff_indicators import NA
from backend_neuprint.analytics.cff_patterns import PatternResult
from backend_neuprint.analytics.cohort import CohortResult
from backend_neuprint.analytics.final_type import FinalTypeResult
from backend_neuprint.analytics.fri import FRIResult
from backend_neuprint.analytics.observed_signals import DISPLAY_LINES, ObservedSignals
from backend_neuprint.analytics.rc_distribution import DistributionResult
from backend_neuprint.analytics.rc_summary import RCSummary
from backend_neuprint.analytics.role_fit import RoleFitResult
from backend_neuprint.analytics.rsl_level import RSLLevelResult
from backend_neuprint.analytics.sri import SRIResult
from backend_neuprint.analytics.structural_control import StructuralControlSignals
from backend_neuprint.core.exceptions import ContractViolation
from backend_neuprint.core.numeric import clamp, clamp01, clamp0to5, is_finite_number, round_half_up
from backend_neuprint.neuprint_logging import get_logger

logger = get_logger(__name__)

TYPE_CODE_FROM_LABEL = re.compile(r"\b([A-Za-z]{1,3}\d*(?:-[0-9]+)?)\b")

EMPTY_OBSERVED = {str(i + 1): "" for i in range(DISPLAY_LINES)}
EMPTY_DISTRIBUTION = {
    "Human": "0%",
    "Hybrid": "0%",
    "AI": "0%",
    "final_determination": "",
    "determination_sentence": "",
}


class _Closed(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)


# --- rsl ---


class LevelOut(_Closed):
    short_name: str = Field(..., description="Level code L1..L6")
    full_name: str
    definition: str


class ScoreOut(_Closed):
    score: float
    interpretation: str


class FRIOut(ScoreOut):
    score: float = Field(..., ge=0, le=5, description="Foundational reasoning index (0-5)")


class CohortOut(_Closed):
    percentile_0to1: float = Field(..., ge=0, le=1)
    top_percent_label: str
    interpretation: str


class RSLOut(_Closed):
    level: LevelOut
    fri: FRIOut
    cohort: CohortOut
    sri: ScoreOut


# --- cff ---


class PatternDefinitionOut(_Closed):
    primary: str
    secondary: str


class PatternOut(_Closed):
    primary_label: str
    secondary_label: str
    definition: PatternDefinitionOut


class FinalTypeOut(_Closed):
    label: str
    type_code: str
    chip_label: str
    confidence: float = Field(..., ge=0, le=1)
    interpretation: str


class CFFOut(_Closed):
    pattern: PatternOut
    final_type: FinalTypeOut
    labels: list[str] = Field(default_factory=list)
    values_0to1: list[float | Literal["N/A"]] = Field(default_factory=list, description='0..1 or "N/A"')


# --- rc ---


class DistributionOut(_Closed):
    Human: str
    Hybrid: str
    AI: str
    final_determination: str
    determination_sentence: str


class RCOut(_Closed):
    summary: str
    control_pattern: str
    reliability_band: str
    band_rationale: str
    pattern_interpretation: str
    observed_structural_signals: dict[str, str]
    reasoning_control_distribution: DistributionOut
    structural_control_signals: dict[str, float]


# --- rfs ---


class GroupOut(_Closed):
    group_name: str
    percent: int = Field(..., ge=0, le=100)
    roles: list[str] = Field(default_factory=list)
    recommended_role: str


class RFSOut(_Closed):
    summary_lines: list[str] = Field(default_factory=list)
    top_groups: list[GroupOut] = Field(default_factory=list)
    recommended_roles_top3: list[str] = Field(default_factory=list)
    recommended_roles_line: str
    pattern_interpretation: str


class Report(_Closed):
    """The public report. No keys beyond these four sections."""

    rsl: RSLOut
    cff: CFFOut
    rc: RCOut
    rfs: RFSOut


def assemble_report(
    *,
    level: RSLLevelResult,
    fri: FRIResult,
    cohort: CohortResult,
    sri: SRIResult,
    pattern: PatternResult,
    final_type: FinalTypeResult,
    cff_ui: dict[str, Any],
    rc_summary: RCSummary,
    observed: ObservedSignals,
    distribution: DistributionResult,
    structural: StructuralControlSignals,
    role_fit: RoleFitResult,
) -> dict[str, Any]:
    """Explicit field-by-field assembly; nothing is spread from engine dicts."""
    return {
        "rsl": {
            "level": level.to_dict(),
            "fri": fri.to_dict(),
            "cohort": cohort.to_dict(),
            "sri": sri.to_dict(),
        },
        "cff": {
            "pattern": pattern.to_dict(),
            "final_type": final_type.to_dict(),
            "labels": list(cff_ui.get("labels") or []),
            "values_0to1": list(cff_ui.get("values_0to1") or []),
        },
        "rc": {
            **rc_summary.to_dict(),
            "observed_structural_signals": observed.to_dict(),
            "reasoning_control_distribution": distribution.to_dict(),
            "structural_control_signals": structural.to_dict(),
        },
        "rfs": role_fit.to_dict(),
    }


def _section(report: dict[str, Any], key: str) -> dict[str, Any]:
    value = report.get(key)
    if not isinstance(value, dict):
        value = {}
        report[key] = value
    return value


def _list(section: dict[str, Any], key: str) -> list[Any]:
    value = section.get(key)
    if not isinstance(value, list):
        value = []
        section[key] = value
    return value


def _value01(x: Any) -> float | str:
    if isinstance(x, str) and x.strip().upper() == NA:
        return NA
    return clamp01(x) if is_finite_number(x) else NA


def type_code_from_label(label: str) -> str:
    m = TYPE_CODE_FROM_LABEL.search(label or "")
    return m.group(1) if m else ""


def coerce_report(report: dict[str, Any]) -> dict[str, Any]:
    """Return a copy with container defaults filled and numeric fields clamped."""
    out = copy.deepcopy(report) if isinstance(report, dict) else {}

    rsl = _section(out, "rsl")
    fri = _section(rsl, "fri")
    if is_finite_number(fri.get("score")):
        fri["score"] = clamp0to5(fri["score"])
    cohort = _section(rsl, "cohort")
    if is_finite_number(cohort.get("percentile_0to1")):
        cohort["percentile_0to1"] = clamp01(cohort["percentile_0to1"])

    cff = _section(out, "cff")
    _list(cff, "labels")
    cff["values_0to1"] = [_value01(x) for x in _list(cff, "values_0to1")]
    final_type = _section(cff, "final_type")
    if is_finite_number(final_type.get("confidence")):
        final_type["confidence"] = clamp01(final_type["confidence"])
    if not final_type.get("type_code"):
        final_type["type_code"] = type_code_from_label(str(final_type.get("label") or ""))

    rc = _section(out, "rc")
    if not isinstance(rc.get("observed_structural_signals"), dict):
        rc["observed_structural_signals"] = dict(EMPTY_OBSERVED)
    if not isinstance(rc.get("reasoning_control_distribution"), dict):
        rc["reasoning_control_distribution"] = dict(EMPTY_DISTRIBUTION)
    if not isinstance(rc.get("structural_control_signals"), dict):
        rc["structural_control_signals"] = {}

    rfs = _section(out, "rfs")
    _list(rfs, "summary_lines")
    _list(rfs, "recommended_roles_top3")
    for group in _list(rfs, "top_groups"):
        if isinstance(group, dict) and is_finite_number(group.get("percent")):
            group["percent"] = round_half_up(clamp(group["percent"], 0.0, 100.0))
    rfs["recommended_roles_line"] = str(rfs.get("recommended_roles_line") or "")

    return out


def validate_report(report: dict[str, Any]) -> Report:
    """Raise ContractViolation for the first missing, mistyped or unexpected field."""
    try:
        return Report.model_validate(report)
    except ValidationError as e:
        err = e.errors()[0]
        path = ".".join(str(p) for p in err["loc"])
        if err["type"] == "missing":
            detail = "missing"
        elif err["type"] == "extra_forbidden":
            detail = "is not allowed"
        else:
            detail = err["msg"]
        logger.warning("report_contract_violation", path=path, detail=detail, errors=e.error_count())
        raise ContractViolation(path, detail) from e


def finalize_report(report: dict[str, Any]) -> dict[str, Any]:
    """coerce -> validate -> plain dict."""
    return validate_report(coerce_report(report)).model_dump()
