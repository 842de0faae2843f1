"""
Pytest tests for payload normalization and the canonical RawFeatures record.
"""

from __future__ import annotations

import pytest

from backend_neuprint.analytics.raw_features import (
    RawFeatures,
    normalize_payload,
    optional_bool,
    parse_number,
    string_list,
)
from backend_neuprint.core.exceptions import DataAnomaly


def test_parse_number_accepts_numeric_strings():
    assert parse_number(" 3.5 ", "x") == 3.5
    assert parse_number(2, "x") == 2.0


@pytest.mark.parametrize("value", ["abc", "", float("nan"), True, None])
def test_parse_number_rejects_unusable_values(value):
    """Non-numeric strings, NaN, booleans and None raise DataAnomaly with the field name."""
    with pytest.raises(DataAnomaly) as exc_info:
        parse_number(value, "layer_0.units")
    assert exc_info.value.field == "layer_0.units"


def test_optional_bool_words():
    assert optional_bool("yes") is True
    assert optional_bool("0") is False
    assert optional_bool("maybe") is True
    assert optional_bool("") is None
    assert optional_bool(None) is None


def test_string_list_forms():
    assert string_list(["data", " ", None, "authority"]) == ("data", "authority")
    assert string_list("data, theory") == ("data", "theory")
    assert string_list([]) is None


def test_from_mapping_reads_all_layers(raw_features):
    """Every layer field lands in the flat record; reserved values stay None."""
    rf = RawFeatures.from_mapping(raw_features)
    assert rf.units == 4
    assert rf.claims == 4
    assert rf.reasons == 5
    assert rf.sub_claims == 2
    assert rf.structure_type == "hierarchical"
    assert rf.revision_depth_sum == pytest.approx(0.7)
    assert rf.belief_change is True
    assert rf.evidence_types == ("data", "authority")
    assert rf.adjacency_links == 3
    assert rf.kpf_sim is None and rf.tps_h is None
    assert rf.per_unit_values("transitions") == (1.0, 1.0, 0.0, 1.0)
    assert rf.per_unit_values("warrants") is None


def test_from_mapping_resolves_bad_values_to_fallbacks(raw_features):
    """A garbage count becomes 0; a garbage optional becomes None."""
    raw_features["layer_0"]["claims"] = "lots"
    raw_features["layer_1"]["sub_claims"] = "?"
    raw_features["layer_0"]["per_unit"]["claims"] = [1, "x", 2]
    rf = RawFeatures.from_mapping(raw_features)
    assert rf.claims == 0.0
    assert rf.sub_claims is None
    assert rf.per_unit_values("claims") == (1.0, None, 2.0)


def test_evidence_types_fallbacks(raw_features):
    """layer_2 list wins; a root list is next; a root count map also fills evidence."""
    del raw_features["layer_2"]["evidence_types"]
    raw_features["evidence_types"] = ["theory"]
    assert RawFeatures.from_mapping(raw_features).evidence_types == ("theory",)

    raw_features["evidence_types"] = {"data": 2, "example": 0, "theory": 1}
    raw_features["layer_0"]["evidence"] = 0
    rf = RawFeatures.from_mapping(raw_features)
    assert rf.evidence_types == ("data", "theory")
    assert rf.evidence == 3


def test_normalize_payload_precedence(raw_features, dimensions):
    """raw_features beats raw; payload.rsl.dimensions beats raw.rsl; input_text beats text."""
    payload = {
        "raw": {"layer_0": {"units": 99}},
        "raw_features": raw_features,
        "rsl": {"dimensions": dimensions},
        "text": "second",
        "input_text": "first",
    }
    di = normalize_payload(payload)
    assert di.raw_source == "raw_features"
    assert di.raw["layer_0"]["units"] == 4
    assert len(di.dimensions) == 8
    assert di.input_text == "first"


def test_normalize_payload_root_layers(raw_features, dimensions):
    """Layers at the payload root; dimensions from raw.rsl_dimensions; quotes from raw."""
    raw_features["rsl_dimensions"] = dimensions
    raw_features["raw_signals_quotes"] = {"self_repair": ["I revise"]}
    di = normalize_payload(raw_features)
    assert di.raw_source == "payload"
    assert len(di.dimensions) == 8
    assert di.signal_quotes == {"self_repair": ["I revise"]}
    assert di.input_text == ""


def test_normalize_payload_handles_none():
    di = normalize_payload(None)
    assert di.raw == {}
    assert di.dimensions == []
