"""
Application-level exceptions.

- ConfigurationError: invalid static or caller-supplied configuration (role
  weights, axis ranges, unknown registry codes). Fatal; aborts the derivation.
- DataAnomaly: a missing or non-finite numeric input. Never escapes an engine;
  callers resolve it locally to a fallback value.
- ContractViolation: the assembled report fails required-field validation.
  Fatal; indicates an engine bug.
"""

from __future__ import annotations


class NeuPrintError(Exception):
    """Base class for all backend_neuprint errors."""


class ConfigurationError(NeuPrintError, ValueError):
    """Invalid configuration: weights, axis ranges, registry lookups, option values."""


class DataAnomaly(NeuPrintError):
    """A raw value could not be read as a finite number or expected shape."""

    def __init__(self, field: str, value: object) -> None:
        self.field = field
        self.value = value
        super().__init__(f"{field}: unusable value {value!r}")


class ContractViolation(NeuPrintError):
    """The assembled report does not satisfy the output contract."""

    def __init__(self, path: str, detail: str = "missing") -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"report contract: {path} {detail}")
