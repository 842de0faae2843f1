"""
Core utilities: exceptions and numeric helpers shared by every engine.
"""

from backend_neuprint.core.exceptions import (
    ConfigurationError,
    ContractViolation,
    DataAnomaly,
    NeuPrintError,
)

__all__ = [
    "ConfigurationError",
    "ContractViolation",
    "DataAnomaly",
    "NeuPrintError",
]
