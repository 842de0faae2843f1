"""
Structured logging for Backend NeuPrint.

JSON logs with timestamp, event_type and engine result fields.
Use get_logger() in all modules for aggregation-friendly output.
"""

from backend_neuprint.neuprint_logging.logger import (
    bind_derivation,
    configure_structlog,
    get_logger,
)

__all__ = ["bind_derivation", "configure_structlog", "get_logger"]
