"""
Test that neuprint_logging can be imported without circular import and logger works.
"""

from __future__ import annotations

import pytest
import structlog
from structlog.testing import capture_logs


def test_logging_import():
    """Import get_logger from neuprint_logging and use the logger."""
    from backend_neuprint.neuprint_logging import get_logger

    logger = get_logger("test")
    assert logger is not None
    assert hasattr(logger, "info")
    assert hasattr(logger, "debug")
    assert hasattr(logger, "warning")
    assert hasattr(logger, "error")
    # Smoke test: call info (should not raise)
    logger.info("test_message", key="value")


def test_bind_derivation():
    from backend_neuprint.neuprint_logging import bind_derivation

    with capture_logs() as logs:
        bind_derivation("abc123").info("derive_start", dimensions=8)
    assert logs == [
        {
            "event": "derive_start",
            "logger_name": "backend_neuprint",
            "derivation_id": "abc123",
            "dimensions": 8,
            "log_level": "info",
        }
    ]


def test_normalize_event_renames_event():
    from backend_neuprint.neuprint_logging.logger import _add_timestamp, _normalize_event

    out = _normalize_event(None, "info", {"event": "fri_engine_result", "logger_name": "m", "fri": 4.12})
    assert out == {"event_type": "fri_engine_result", "message": "fri_engine_result", "logger": "m", "fri": 4.12}
    assert "timestamp" in _add_timestamp(None, "info", {})
    assert _add_timestamp(None, "info", {"timestamp": "t"})["timestamp"] == "t"


def test_configure_structlog_levels():
    """Below the configured level nothing reaches the processors."""
    from backend_neuprint.neuprint_logging import configure_structlog, get_logger

    try:
        configure_structlog("WARNING", "console")
        with capture_logs() as logs:
            logger = get_logger("test")
            logger.info("hidden")
            logger.warning("shown")
        assert [e["event"] for e in logs] == ["shown"]
    finally:
        configure_structlog()


def test_engine_module_events_carry_logger_name():
    """Module-level loggers stay lazy: capture_logs configured after import still sees them."""
    from backend_neuprint.analytics import report_contract
    from backend_neuprint.core.exceptions import ContractViolation

    with capture_logs() as logs:
        with pytest.raises(ContractViolation):
            report_contract.validate_report({})
    assert logs[0]["event"] == "report_contract_violation"
    assert logs[0]["logger_name"] == "backend_neuprint.analytics.report_contract"


def test_rendered_events_use_logger_key():
    from structlog.testing import LogCapture

    from backend_neuprint.analytics import report_contract
    from backend_neuprint.neuprint_logging import configure_structlog
    from backend_neuprint.neuprint_logging.logger import _normalize_event

    cap = LogCapture()
    try:
        structlog.configure(processors=[_normalize_event, cap])
        report_contract.logger.warning("contract_checked")
    finally:
        configure_structlog()
    entry = cap.entries[0]
    assert entry["logger"] == "backend_neuprint.analytics.report_contract"
    assert entry["event_type"] == "contract_checked"
    assert "logger_name" not in entry
