"""
structlog setup for NeuPrint derivations.

Events go to stderr as JSON lines (LOG_FORMAT=json) or as console output.
Engines emit one debug event per result; the pipeline adds derive_start,
derive_done and a derivation_id shared by every event of one call.

This module imports nothing from backend_neuprint.
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any

import structlog

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = os.getenv("LOG_FORMAT", "json").strip().lower()

LOGGER_NAME_KEY = "logger_name"


def _add_timestamp(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    event_dict.setdefault("timestamp", datetime.now(timezone.utc).isoformat())
    return event_dict


def _normalize_event(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """event -> event_type (mirrored in message); logger_name -> logger."""
    if "event" in event_dict and "event_type" not in event_dict:
        event_dict["event_type"] = event_dict.pop("event")
    if "message" not in event_dict and "event_type" in event_dict:
        event_dict["message"] = str(event_dict["event_type"])
    if LOGGER_NAME_KEY in event_dict:
        event_dict.setdefault("logger", event_dict.pop(LOGGER_NAME_KEY))
    return event_dict


def configure_structlog(level: str | None = None, fmt: str | None = None) -> None:
    level_value = getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO)
    output = (fmt or LOG_FORMAT).strip().lower()

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        _add_timestamp,
        _normalize_event,
    ]
    if output == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    # Uncached: a later configure() (CLI settings, capture_logs) reaches module-level loggers.
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level_value),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


if not structlog.is_configured():
    configure_structlog()


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Lazy logger carrying the module name; rendered as the "logger" key.

        logger = get_logger(__name__)
        logger.debug("fri_engine_result", crs=4.0, rm=1.03, fri=4.12)
    """
    return structlog.get_logger(**{LOGGER_NAME_KEY: name})


def bind_derivation(derivation_id: str) -> structlog.BoundLogger:
    return get_logger("backend_neuprint").bind(derivation_id=derivation_id)
