"""
Canonical raw-feature record and payload normalization.

Payloads arrive in several shapes (wrapped under raw_features / raw /
rawFeatures, or the four layers at the root). normalize_payload resolves
them once, in a fixed precedence order, into a DerivationInput; engines
only ever see the frozen RawFeatures record built from it.

Value parsing: finite numbers pass, numeric strings are parsed, anything
else is a DataAnomaly resolved to 0 (or None for optional fields) and
logged at debug.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from backend_neuprint.core.exceptions import DataAnomaly
from backend_neuprint.core.numeric import is_finite_number
from backend_neuprint.neuprint_logging import get_logger

logger = get_logger(__name__)

RAW_FEATURE_KEYS = ("raw_features", "raw", "rawFeatures")
INPUT_TEXT_KEYS = ("input_text", "text", "submitted_text", "essay_text")
LAYER_KEYS = ("layer_0", "layer_1", "layer_2", "layer_3")

PER_UNIT_KEYS = (
    "claims",
    "reasons",
    "evidence",
    "sub_claims",
    "warrants",
    "counterpoints",
    "refutations",
    "transitions",
    "transition_ok",
    "revisions",
    "revision_depth",
    "belief_change",
)

STRUCTURE_TYPES = ("linear", "hierarchical", "networked")

_TRUE_WORDS = ("true", "t", "yes", "y", "1")
_FALSE_WORDS = ("false", "f", "no", "n", "0")


def parse_number(value: Any, field_name: str) -> float:
    """Finite number or numeric string -> float; raises DataAnomaly otherwise."""
    if is_finite_number(value):
        return float(value)
    if isinstance(value, str) and value.strip():
        try:
            parsed = float(value.strip())
        except ValueError:
            raise DataAnomaly(field_name, value) from None
        if math.isfinite(parsed):
            return parsed
    raise DataAnomaly(field_name, value)


def number_or(value: Any, field_name: str, fallback: float = 0.0) -> float:
    if value is None:
        return fallback
    try:
        return parse_number(value, field_name)
    except DataAnomaly as e:
        logger.debug("data_anomaly", field=e.field, value=repr(e.value), fallback=fallback)
        return fallback


def optional_number(value: Any, field_name: str) -> float | None:
    """None when absent or unusable; a measured zero stays 0.0."""
    if value is None:
        return None
    try:
        return parse_number(value, field_name)
    except DataAnomaly as e:
        logger.debug("data_anomaly", field=e.field, value=repr(e.value), fallback=None)
        return None


def optional_bool(value: Any) -> bool | None:
    """true/t/yes/y/1 and false/f/no/n/0; other non-empty strings count as true."""
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value > 0 if math.isfinite(value) else None
    if isinstance(value, str):
        s = value.strip().lower()
        if not s:
            return None
        if s in _TRUE_WORDS:
            return True
        if s in _FALSE_WORDS:
            return False
        return True
    return bool(value)


def string_list(value: Any) -> tuple[str, ...] | None:
    """List of non-blank strings, or a comma-separated string; None when nothing usable."""
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        out = tuple(str(v) for v in value if v is not None and str(v).strip())
        return out or None
    if isinstance(value, str):
        parts = tuple(p.strip() for p in value.split(",") if p.strip())
        return parts or None
    return None


def number_array(value: Any, field_name: str) -> tuple[float | None, ...] | None:
    """Per-entry parse; unusable entries become None so callers choose drop vs. zero."""
    if not isinstance(value, (list, tuple)):
        return None
    return tuple(optional_number(v, field_name) for v in value)


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _evidence_type_counts(value: Any) -> dict[str, float]:
    """Map form of evidence_types: type -> positive count."""
    if not isinstance(value, Mapping):
        return {}
    out: dict[str, float] = {}
    for key, count in value.items():
        n = optional_number(count, f"evidence_types.{key}")
        if n is not None and n > 0:
            out[str(key)] = n
    return out


@dataclass(frozen=True)
class RawFeatures:
    """
    One derivation's raw measurements in canonical form.

    Counts are kept as parsed floats; each engine applies its own floor /
    non-negativity rule. Optional inputs use None for "not measured".
    """

    units: float = 0.0
    unit_lengths: tuple[float | None, ...] | None = None
    per_unit: Mapping[str, tuple[float | None, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    claims: float = 0.0
    reasons: float = 0.0
    evidence: float = 0.0

    sub_claims: float | None = None
    warrants: float = 0.0
    counterpoints: float = 0.0
    refutations: float = 0.0
    structure_type: str | None = None

    transitions: float = 0.0
    transition_ok: float = 0.0
    revisions: float = 0.0
    revision_depth_sum: float = 0.0
    belief_change: bool | None = None

    intent_markers: float = 0.0
    drift_segments: float = 0.0
    hedges: float = 0.0
    loops: float = 0.0
    self_regulation_signals: float = 0.0

    evidence_types: tuple[str, ...] | None = None
    """Distinct evidence type names; None when none were reported."""
    adjacency_links: float = 0.0
    kpf_sim: float | None = None
    """Externally supplied KPF similarity; None = unknown (never 0)."""
    tps_h: float | None = None
    """Externally supplied TPS humanness; None = unknown."""

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any] | None) -> RawFeatures:
        rf = raw if isinstance(raw, Mapping) else {}
        l0 = _as_dict(rf.get("layer_0"))
        l1 = _as_dict(rf.get("layer_1"))
        l2 = _as_dict(rf.get("layer_2"))
        l3 = _as_dict(rf.get("layer_3"))
        reserved = _as_dict(rf.get("backend_reserved"))

        per_unit_raw = _as_dict(l0.get("per_unit"))
        per_unit: dict[str, tuple[float | None, ...]] = {}
        for key in PER_UNIT_KEYS:
            arr = number_array(per_unit_raw.get(key), f"layer_0.per_unit.{key}")
            if arr is not None:
                per_unit[key] = arr

        # layer_2 list wins; then a root list; then positive keys of a root map
        root_types = rf.get("evidence_types")
        type_counts = _evidence_type_counts(root_types)
        evidence_types = string_list(l2.get("evidence_types"))
        if evidence_types is None and isinstance(root_types, (list, tuple, str)):
            evidence_types = string_list(root_types)
        if evidence_types is None and type_counts:
            evidence_types = tuple(type_counts)

        evidence = number_or(l0.get("evidence"), "layer_0.evidence")
        if evidence <= 0 and type_counts:
            evidence = sum(type_counts.values())

        adjacency = rf.get("adjacency_links")
        if adjacency is None:
            adjacency = l2.get("adjacency_links")

        structure_type = l1.get("structure_type")
        return cls(
            units=number_or(l0.get("units"), "layer_0.units"),
            unit_lengths=number_array(l0.get("unit_lengths"), "layer_0.unit_lengths"),
            per_unit=MappingProxyType(per_unit),
            claims=number_or(l0.get("claims"), "layer_0.claims"),
            reasons=number_or(l0.get("reasons"), "layer_0.reasons"),
            evidence=evidence,
            sub_claims=optional_number(l1.get("sub_claims"), "layer_1.sub_claims"),
            warrants=number_or(l1.get("warrants"), "layer_1.warrants"),
            counterpoints=number_or(l1.get("counterpoints"), "layer_1.counterpoints"),
            refutations=number_or(l1.get("refutations"), "layer_1.refutations"),
            structure_type=structure_type if isinstance(structure_type, str) else None,
            transitions=number_or(l2.get("transitions"), "layer_2.transitions"),
            transition_ok=number_or(l2.get("transition_ok"), "layer_2.transition_ok"),
            revisions=number_or(l2.get("revisions"), "layer_2.revisions"),
            revision_depth_sum=number_or(l2.get("revision_depth_sum"), "layer_2.revision_depth_sum"),
            belief_change=optional_bool(l2.get("belief_change")),
            intent_markers=number_or(l3.get("intent_markers"), "layer_3.intent_markers"),
            drift_segments=number_or(l3.get("drift_segments"), "layer_3.drift_segments"),
            hedges=number_or(l3.get("hedges"), "layer_3.hedges"),
            loops=number_or(l3.get("loops"), "layer_3.loops"),
            self_regulation_signals=number_or(
                l3.get("self_regulation_signals"), "layer_3.self_regulation_signals"
            ),
            evidence_types=evidence_types,
            adjacency_links=number_or(adjacency, "adjacency_links"),
            kpf_sim=optional_number(reserved.get("kpf_sim"), "backend_reserved.kpf_sim"),
            tps_h=optional_number(reserved.get("tps_h"), "backend_reserved.tps_h"),
        )

    def per_unit_values(self, key: str) -> tuple[float | None, ...] | None:
        return self.per_unit.get(key)


@dataclass
class DerivationInput:
    """Payload resolved into the pieces the orchestrator needs."""

    raw: dict[str, Any]
    """Raw-feature mapping (before any text-based fill)."""
    dimensions: list[dict[str, Any]] = field(default_factory=list)
    input_text: str = ""
    signal_quotes: dict[str, Any] | None = None
    rsl_extras: dict[str, Any] = field(default_factory=dict)
    """payload.rsl (or raw.rsl) block; carries optional rsl_* style inputs."""
    raw_source: str = "payload"
    """Which key the raw features came from (for logging)."""


def _dimension_list(*candidates: Any) -> list[dict[str, Any]]:
    for c in candidates:
        if isinstance(c, list):
            return [d for d in c if isinstance(d, dict)]
    return []


def normalize_payload(payload: Mapping[str, Any] | None) -> DerivationInput:
    """
    Resolve a heterogeneous payload.

    Precedence:
    - raw features: raw_features -> raw -> rawFeatures -> the payload itself
    - dimensions: payload.rsl.dimensions -> raw.rsl.dimensions -> raw.rsl_dimensions
    - input text: input_text -> text -> submitted_text -> essay_text
    - quotes: payload.raw_signals_quotes -> raw.raw_signals_quotes
    """
    g = payload if isinstance(payload, Mapping) else {}

    raw: Any = None
    source = "payload"
    for key in RAW_FEATURE_KEYS:
        if g.get(key) is not None:
            raw, source = g[key], key
            break
    if raw is None:
        raw = g
    raw = dict(raw) if isinstance(raw, Mapping) else {}

    g_rsl = _as_dict(g.get("rsl"))
    raw_rsl = _as_dict(raw.get("rsl"))
    dimensions = _dimension_list(
        g_rsl.get("dimensions"), raw_rsl.get("dimensions"), raw.get("rsl_dimensions")
    )

    input_text = ""
    for key in INPUT_TEXT_KEYS:
        value = g.get(key)
        if value is not None:
            input_text = value if isinstance(value, str) else str(value)
            break

    quotes = g.get("raw_signals_quotes")
    if quotes is None:
        quotes = raw.get("raw_signals_quotes")

    rsl_extras = g_rsl if isinstance(g.get("rsl"), dict) else raw_rsl

    logger.debug(
        "payload_normalized",
        raw_source=source,
        dimensions=len(dimensions),
        has_text=bool(input_text),
        has_quotes=isinstance(quotes, dict),
    )
    return DerivationInput(
        raw=raw,
        dimensions=dimensions,
        input_text=input_text,
        signal_quotes=quotes if isinstance(quotes, dict) else None,
        rsl_extras=rsl_extras,
        raw_source=source,
    )
