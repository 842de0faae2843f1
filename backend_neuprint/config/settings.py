"""
Application settings.

Collects every environment-driven knob into one frozen Settings object.
The derivation core never reads the environment; callers (the CLI tool,
an HTTP layer) turn Settings into DeriveOptions.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from backend_neuprint.config.env import (
    get_cohort_fri_list,
    get_conservative_lock,
    get_log_format,
    get_log_level,
    get_strict_min_filter,
    get_t2_mode,
)


@dataclass(frozen=True)
class Settings:
    log_level: str = "INFO"
    log_format: str = "json"
    cohort_fri_list: tuple[float, ...] = field(default_factory=tuple)
    strict_min_filter: bool = True
    t2_mode: str = "Regulation"
    conservative_lock: bool = False


def get_settings() -> Settings:
    """
    Return the current settings read from the environment (and .env).

    Raises ConfigurationError when a variable is set to an unusable value.
    """
    return Settings(
        log_level=get_log_level(),
        log_format=get_log_format(),
        cohort_fri_list=tuple(get_cohort_fri_list()),
        strict_min_filter=get_strict_min_filter(),
        t2_mode=get_t2_mode(),
        conservative_lock=get_conservative_lock(),
    )
