"""
Environment variable loading for NeuPrint.

- LOG_LEVEL: DEBUG | INFO | WARNING | ERROR (default: INFO)
- LOG_FORMAT: json | console (default: json)
- NEUPRINT_COHORT_FRI_LIST: comma-separated reference FRI values (default: empty -> built-in curve)
- NEUPRINT_STRICT_MIN_FILTER: 1/0, exclude roles failing minimum requirements (default: 1)
- NEUPRINT_T2_MODE: Regulation | MetacogRaw (default: Regulation)
- NEUPRINT_CONSERVATIVE_LOCK: 1/0, force the Human track in final-type determination (default: 0)
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

from backend_neuprint.core.exceptions import ConfigurationError

# Project root: config is backend_neuprint/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_BACKEND_DIR = _CONFIG_DIR.parent
_ROOT = _BACKEND_DIR.parent
_ENV_PATH = _ROOT / ".env"

T2_MODES = ("Regulation", "MetacogRaw")

_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off")


def load_neuprint_env() -> None:
    """Load .env from project root. Safe to call multiple times; never overrides set vars."""
    if _ENV_PATH.is_file():
        load_dotenv(_ENV_PATH)


def _get_flag(name: str, default: bool) -> bool:
    raw = (os.getenv(name) or "").strip().lower()
    if not raw:
        return default
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    raise ConfigurationError(f"{name} must be one of {_TRUE + _FALSE}, got {raw!r}")


def get_log_level() -> str:
    load_neuprint_env()
    return (os.getenv("LOG_LEVEL") or "INFO").strip().upper()


def get_log_format() -> str:
    load_neuprint_env()
    return (os.getenv("LOG_FORMAT") or "json").strip().lower()


def get_cohort_fri_list() -> list[float]:
    """
    Return NEUPRINT_COHORT_FRI_LIST as floats.
    Empty or unset means "use the built-in reference curve".
    """
    load_neuprint_env()
    raw = (os.getenv("NEUPRINT_COHORT_FRI_LIST") or "").strip()
    if not raw:
        return []
    values: list[float] = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            values.append(float(part))
        except ValueError as e:
            raise ConfigurationError(f"NEUPRINT_COHORT_FRI_LIST has a non-numeric entry: {part!r}") from e
    return values


def get_strict_min_filter() -> bool:
    load_neuprint_env()
    return _get_flag("NEUPRINT_STRICT_MIN_FILTER", True)


def get_t2_mode() -> str:
    load_neuprint_env()
    raw = (os.getenv("NEUPRINT_T2_MODE") or "Regulation").strip()
    for mode in T2_MODES:
        if raw.lower() == mode.lower():
            return mode
    raise ConfigurationError(f"NEUPRINT_T2_MODE must be one of {T2_MODES}, got {raw!r}")


def get_conservative_lock() -> bool:
    load_neuprint_env()
    return _get_flag("NEUPRINT_CONSERVATIVE_LOCK", False)
