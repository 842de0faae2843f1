"""
Per-call derivation options.

Callers build these from Settings (environment) or from a loose mapping
that may use the camelCase names of the HTTP layer.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from backend_neuprint.analytics.final_type import T2_MODES
from backend_neuprint.analytics.rc_distribution import LogisticModel
from backend_neuprint.analytics.role_fit import RoleConfig
from backend_neuprint.core.exceptions import ConfigurationError
from backend_neuprint.core.numeric import is_finite_number

CAMEL_CASE_KEYS = {
    "cohortFriList": "cohort_fri_list",
    "rcLogisticModel": "rc_logistic_model",
    "activeSignalIds": "active_signal_ids",
    "roleConfigs": "role_configs",
    "strictMinFilter": "strict_min_filter",
    "t2Mode": "t2_mode",
    "conservativeLock": "conservative_lock",
}


@dataclass(frozen=True)
class DeriveOptions:
    cohort_fri_list: tuple[float, ...] = ()
    """Reference FRI values; empty -> built-in cohort curve."""
    rc_logistic_model: LogisticModel | None = None
    """None -> heuristic distribution path."""
    active_signal_ids: tuple[str, ...] = ()
    """Empty -> canonical default observed lines."""
    role_configs: tuple[RoleConfig, ...] = ()
    """Empty -> DEFAULT_ROLE_CONFIGS_MINIMAL."""
    strict_min_filter: bool = True
    t2_mode: str = "Regulation"
    conservative_lock: bool = False

    def __post_init__(self) -> None:
        if self.t2_mode not in T2_MODES:
            raise ConfigurationError(f"t2_mode must be one of {T2_MODES}, got {self.t2_mode!r}")

    @classmethod
    def from_settings(cls, settings: Any, **overrides: Any) -> DeriveOptions:
        """Build from a Settings object; keyword overrides win."""
        values: dict[str, Any] = {
            "cohort_fri_list": tuple(settings.cohort_fri_list),
            "strict_min_filter": settings.strict_min_filter,
            "t2_mode": settings.t2_mode,
            "conservative_lock": settings.conservative_lock,
        }
        values.update(overrides)
        return cls.from_mapping(values)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> DeriveOptions:
        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            raise ConfigurationError(f"options must be a mapping, got {type(data).__name__}")
        values = {CAMEL_CASE_KEYS.get(k, k): v for k, v in data.items()}
        unknown = sorted(set(values) - set(cls.__dataclass_fields__))
        if unknown:
            raise ConfigurationError(f"unknown derive options: {unknown}")

        model = values.get("rc_logistic_model")
        if model is not None and not isinstance(model, LogisticModel):
            model = LogisticModel.from_mapping(model)

        return cls(
            cohort_fri_list=tuple(
                float(x) for x in values.get("cohort_fri_list") or () if is_finite_number(x)
            ),
            rc_logistic_model=model,
            active_signal_ids=_id_tuple(values.get("active_signal_ids")),
            role_configs=tuple(RoleConfig.from_mapping(c) for c in values.get("role_configs") or ()),
            strict_min_filter=bool(values.get("strict_min_filter", True)),
            t2_mode=str(values.get("t2_mode") or "Regulation"),
            conservative_lock=bool(values.get("conservative_lock", False)),
        )


def _id_tuple(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, Iterable):
        raise ConfigurationError("active_signal_ids must be a list of signal ids")
    return tuple(s for s in (str(x).strip() for x in value) if s)
