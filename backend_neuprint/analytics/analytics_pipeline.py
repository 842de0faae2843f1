"""
Analytics pipeline: run the full derivation (payload -> four-section report).

Single entrypoint for the CLI tool and any HTTP layer: normalize the
payload, optionally fill backend-owned extraction fields from the essay
text, run every engine in a fixed order and assemble the validated report.

Engine order: FRI -> RSL level -> cohort -> SRI -> CFF indices -> pattern ->
final type -> structural control -> RC summary -> distribution -> observed
signals -> style summary -> role fit -> assemble / coerce / validate.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import structlog

from backend_neuprint.analytics.cff_indicators import compute_cff6, compute_cff8, compute_cff_ui
from backend_neuprint.analytics.cff_patterns import CoreAxes, compute_patterns
from backend_neuprint.analytics.cohort import compute_cohort
from backend_neuprint.analytics.final_type import IndicatorStatus, determine_final_type
from backend_neuprint.analytics.fri import compute_fri_from_dimensions, get_r_score
from backend_neuprint.analytics.observed_signals import default_observed_signals, select_observed_signals
from backend_neuprint.analytics.options import DeriveOptions
from backend_neuprint.analytics.raw_features import RawFeatures, normalize_payload
from backend_neuprint.analytics.rc_distribution import CFV, compute_distribution
from backend_neuprint.analytics.rc_summary import compute_rc_summary
from backend_neuprint.analytics.report_contract import assemble_report, finalize_report
from backend_neuprint.analytics.role_fit import NeuprintAxes, arc_level_from_code, compute_role_fit
from backend_neuprint.analytics.rsl_level import compute_rsl_level
from backend_neuprint.analytics.sri import compute_sri_from_raw
from backend_neuprint.analytics.structural_control import compute_structural_control
from backend_neuprint.analytics.style_summary import StyleInputs, compute_style_summary
from backend_neuprint.core.numeric import clamp01, is_finite_number
from backend_neuprint.extraction import can_fill, fill_extraction
from backend_neuprint.neuprint_logging import bind_derivation, get_logger

logger = get_logger(__name__)


@dataclass
class DerivationResult:
    report: dict[str, Any]
    """The validated public report (rsl / cff / rc / rfs only)."""
    diagnostics: dict[str, Any] = field(default_factory=dict)
    """Intermediate values that never reach the report."""
    derivation_id: str = ""


def _resolve_options(options: DeriveOptions | Mapping[str, Any] | None) -> DeriveOptions:
    if isinstance(options, DeriveOptions):
        return options
    return DeriveOptions.from_mapping(options)


def _optional01(x: float | None) -> float | None:
    return clamp01(x) if is_finite_number(x) else None


def _indicator(score: float | None) -> dict[str, Any]:
    if score is None:
        return {"score": None, "status": IndicatorStatus.MISSING.value}
    return {"score": score, "status": IndicatorStatus.ACTIVE.value}


def _fill(raw_map: dict[str, Any], input_text: str) -> tuple[dict[str, Any], list[str], bool]:
    """Fill backend-owned fields; on failure keep the supplied record."""
    if not can_fill(raw_map, input_text):
        return raw_map, [], False
    try:
        filled, unit_texts = fill_extraction(raw_map, input_text)
    except Exception as e:
        logger.warning("extraction_fill_failed", error=str(e), error_type=type(e).__name__)
        return raw_map, [], False
    return filled, unit_texts, True


def derive_with_diagnostics(
    payload: Mapping[str, Any] | None,
    options: DeriveOptions | Mapping[str, Any] | None = None,
) -> DerivationResult:
    """
    Run every engine and return the report plus diagnostics.

    Raises ConfigurationError for invalid options or role configs and
    ContractViolation when the assembled report does not validate.
    """
    opts = _resolve_options(options)
    derivation_id = uuid.uuid4().hex[:12]
    log = bind_derivation(derivation_id)

    with structlog.contextvars.bound_contextvars(derivation_id=derivation_id):
        inp = normalize_payload(payload)
        log.info(
            "derive_start",
            raw_source=inp.raw_source,
            dimensions=len(inp.dimensions),
            has_text=bool(inp.input_text),
            logistic_model=opts.rc_logistic_model is not None,
            active_signal_ids=len(opts.active_signal_ids),
            role_configs=len(opts.role_configs),
        )

        raw_map, unit_texts, filled = _fill(inp.raw, inp.input_text)
        raw = RawFeatures.from_mapping(raw_map)

        # rsl
        fri = compute_fri_from_dimensions(inp.dimensions)
        r6, r7, r8 = (get_r_score(inp.dimensions, code) for code in ("R6", "R7", "R8"))
        level = compute_rsl_level(fri.score, r6, r7, r8, inp.signal_quotes)
        cohort = compute_cohort(fri.score, opts.cohort_fri_list)
        sri = compute_sri_from_raw(raw)

        # cff
        cff6 = compute_cff6(raw)
        cff_ui = compute_cff_ui(raw, cff6)
        cff8 = compute_cff8(raw, cff6)
        kpf, tps = _optional01(raw.kpf_sim), _optional01(raw.tps_h)
        pattern = compute_patterns(CoreAxes.from_indices(cff6.to_dict(), kpf=kpf, tps=tps))
        indicators = {code: _indicator(score) for code, score in cff6.to_dict().items()}
        indicators["KPF-Sim"] = _indicator(None if kpf is None else cff8.KPF_SIM)
        indicators["TPS-H"] = _indicator(None if tps is None else cff8.TPS_H)
        final_type = determine_final_type(indicators, opts.t2_mode, opts.conservative_lock)

        # rc
        structural = compute_structural_control(raw)
        rc_summary = compute_rc_summary(raw)
        cfv = CFV(
            aas=cff8.AAS,
            ctf=cff8.CTF,
            rmd=cff8.RMD,
            rdx=cff8.RDX,
            eds=cff8.EDS,
            ifd=cff8.IFD,
            hi=structural.human_rhythm_index,
            tps_hist=cff8.TPS_H,
        )
        distribution = compute_distribution(cfv, structural, opts.rc_logistic_model)
        if opts.active_signal_ids:
            observed = select_observed_signals(opts.active_signal_ids, band=rc_summary.band.value)
        else:
            observed = default_observed_signals()

        # rfs
        style = compute_style_summary(StyleInputs.from_scores(cff6.to_dict(), inp.rsl_extras))
        axes = NeuprintAxes(analyticity=cff6.AAS, flow=cff6.CTF, metacognition=cff6.RMD, authenticity=cff6.IFD)
        role_fit = compute_role_fit(
            axes,
            arc_level_from_code(level.code),
            opts.role_configs,
            strict_min_filter=opts.strict_min_filter,
        )

        report = finalize_report(
            assemble_report(
                level=level,
                fri=fri,
                cohort=cohort,
                sri=sri,
                pattern=pattern,
                final_type=final_type,
                cff_ui=cff_ui,
                rc_summary=rc_summary,
                observed=observed,
                distribution=distribution,
                structural=structural,
                role_fit=role_fit,
            )
        )

        diagnostics = {
            "filled": filled,
            "unit_texts": unit_texts,
            "fri": {"crs": fri.crs, "rm": fri.rm},
            "rsl_level": {"code": level.code, "basis": list(level.basis), "signals": level.signals.to_dict()},
            "sri": sri.diagnostics(),
            "cff8": cff8.to_dict(),
            "pattern": pattern.diagnostics(),
            "final_type": {"track": final_type.track.value, "type_code": final_type.type_code},
            "control_vector": rc_summary.vector._asdict(),
            "control_distance": rc_summary.distance,
            "cfv": cfv.to_dict(),
            "distribution": {"path": distribution.path, "p_human": distribution.p_human},
            "observed_signal_ids": observed.ids,
            "style": style.diagnostics(),
            "role_fit": role_fit.diagnostics(),
        }

        log.info(
            "derive_done",
            level=level.code,
            fri=fri.score,
            final_type=final_type.type_code,
            control_pattern=rc_summary.pattern,
            final_determination=distribution.final.value,
            filled=filled,
        )
    return DerivationResult(report=report, diagnostics=diagnostics, derivation_id=derivation_id)


def derive_all(
    payload: Mapping[str, Any] | None,
    options: DeriveOptions | Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Return only the validated four-section report."""
    return derive_with_diagnostics(payload, options).report
