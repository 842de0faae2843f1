"""
Pytest tests for the full derivation pipeline (payload -> four-section report).
"""

from __future__ import annotations

from unittest.mock import patch

import pytest
from structlog.testing import capture_logs

from backend_neuprint.analytics import DeriveOptions, derive_all, derive_with_diagnostics
from backend_neuprint.analytics.observed_signals import SIGNAL_LIBRARY, default_observed_signals
from backend_neuprint.core.exceptions import ConfigurationError


def test_report_has_only_four_sections(payload):
    report = derive_all(payload)
    assert list(report) == ["rsl", "cff", "rc", "rfs"]


def test_rsl_section(payload):
    """R3..R6 at 4/4/4/3 give FRI 4.12; no self-repair quote keeps the level at L4."""
    rsl = derive_all(payload)["rsl"]
    assert rsl["level"]["short_name"] == "L4 Integrated"
    assert rsl["fri"]["score"] == 4.12
    assert rsl["cohort"]["percentile_0to1"] == 0.929
    assert rsl["cohort"]["top_percent_label"] == "Top 7%"
    assert set(rsl["sri"]) == {"score", "interpretation"}


def test_cff_section(payload):
    cff = derive_all(payload)["cff"]
    assert cff["final_type"]["type_code"] == "T4"
    assert cff["final_type"]["label"].startswith("T4.")
    assert cff["final_type"]["confidence"] == 0.66
    assert cff["values_0to1"][:3] == [0.62, 0.85, 1.0]
    assert cff["values_0to1"][-2:] == ["N/A", "N/A"]
    assert len(cff["labels"]) == len(cff["values_0to1"])


def test_rc_section(payload):
    result = derive_with_diagnostics(payload)
    rc = result.report["rc"]
    assert rc["structural_control_signals"] == {
        "structural_variance": 1.0,
        "human_rhythm_index": 0.35,
        "transition_flow": 0.92,
        "revision_depth": 0.23,
    }
    assert rc["observed_structural_signals"] == default_observed_signals().to_dict()
    assert rc["reasoning_control_distribution"]["final_determination"] == "Hybrid"
    assert result.diagnostics["distribution"]["path"] == "heuristic"


def test_rfs_section(payload):
    """Arc 4 from L4; axes (.62, .85, 1.0, 1.0)."""
    rfs = derive_all(payload)["rfs"]
    assert rfs["summary_lines"] == [
        "Strategy·Analysis·Policy: 98%",
        "Engineering·Technology·Architecture: 91%",
        "Data·AI·Intelligence: 88%",
    ]
    assert rfs["recommended_roles_line"].startswith("Recommended roles include: ")


def test_diagnostics_stay_out_of_report(payload):
    result = derive_with_diagnostics(payload)
    assert result.diagnostics["filled"] is False
    assert result.diagnostics["pattern"]["selected"] == ["IE", "RE"]
    assert result.diagnostics["final_type"] == {"track": "Human", "type_code": "T4"}
    assert "style" in result.diagnostics
    assert "style" not in result.report["cff"]
    assert len(result.derivation_id) == 12


def test_self_repair_quote_promotes_to_l5(payload):
    payload["raw_signals_quotes"] = {
        "self_repair_quote_candidates": ["On reflection I was wrong about the cost."],
    }
    result = derive_with_diagnostics(payload)
    assert result.diagnostics["rsl_level"]["code"] == "L5"


def test_text_fills_extraction_fields(payload, essay_text):
    payload["input_text"] = essay_text
    result = derive_with_diagnostics(payload)
    assert result.diagnostics["filled"] is True
    assert len(result.diagnostics["unit_texts"]) == 3
    assert list(result.report) == ["rsl", "cff", "rc", "rfs"]


def test_fill_failure_keeps_supplied_record(payload, essay_text):
    payload["input_text"] = essay_text
    with patch(
        "backend_neuprint.analytics.analytics_pipeline.fill_extraction",
        side_effect=RuntimeError("boom"),
    ):
        with capture_logs() as logs:
            result = derive_with_diagnostics(payload)
    assert result.diagnostics["filled"] is False
    assert result.report == derive_all({k: v for k, v in payload.items() if k != "input_text"})
    failed = [e for e in logs if e["event"] == "extraction_fill_failed"]
    assert failed and failed[0]["error_type"] == "RuntimeError"


def test_backend_reserved_scores_enable_hybrid_patterns(payload):
    payload["raw_features"]["backend_reserved"] = {"kpf_sim": 0.1, "tps_h": 0.9}
    result = derive_with_diagnostics(payload)
    assert result.diagnostics["pattern"]["selected"][0] == "HE"
    assert "N/A" not in result.report["cff"]["values_0to1"]


def test_options_mapping_with_logistic_model(payload):
    result = derive_with_diagnostics(payload, {"rcLogisticModel": {"beta0": 5.0}})
    assert result.diagnostics["distribution"]["path"] == "logistic"
    assert result.report["rc"]["reasoning_control_distribution"]["final_determination"] == "Human"


def test_active_signal_ids_select_observed_lines(payload):
    options = DeriveOptions(active_signal_ids=("S14", "S9", "S5", "S1"))
    observed = derive_all(payload, options)["rc"]["observed_structural_signals"]
    assert observed["3"] == SIGNAL_LIBRARY["S9"].text


def test_cohort_reference_list(payload):
    report = derive_all(payload, DeriveOptions(cohort_fri_list=(1.0, 2.0, 3.0, 4.0, 5.0)))
    assert report["rsl"]["cohort"]["percentile_0to1"] == pytest.approx(0.8)


def test_invalid_options_raise(payload):
    with pytest.raises(ConfigurationError):
        derive_all(payload, {"t2_mode": "Loose"})
    with pytest.raises(ConfigurationError):
        derive_all(payload, {"unknownKnob": 1})


def test_empty_payload_still_validates():
    for payload in (None, {}):
        report = derive_all(payload)
        assert report["rsl"]["fri"]["score"] == 0.0
        assert report["rsl"]["level"]["short_name"].startswith("L1")
        assert len(report["rfs"]["top_groups"]) == 3


def test_start_and_done_events_carry_derivation_id(payload):
    with capture_logs() as logs:
        result = derive_with_diagnostics(payload)
    events = {e["event"]: e for e in logs}
    assert events["derive_start"]["derivation_id"] == result.derivation_id
    assert events["derive_start"]["raw_source"] == "raw_features"
    assert events["derive_done"]["level"] == "L4"
    assert events["derive_done"]["final_type"] == "T4"
