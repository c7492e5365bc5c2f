"""
Custom exception classes for the academic market simulation.

Provides specific exception types for different failure modes so callers
batching many runs can tell configuration mistakes from logic failures.
"""


class AcademicMarketError(Exception):
    """Base exception for all simulation errors."""

    pass


class ConfigurationError(AcademicMarketError, ValueError):
    """Raised when run parameters or factory arguments are invalid.

    Always raised before any simulated year executes.
    """

    pass


class InvariantViolationError(AcademicMarketError, RuntimeError):
    """Raised when a table breaks a bookkeeping invariant (negative openings,
    duplicate ids, departments missing from a merge)."""

    pass


class ScenarioLoadError(AcademicMarketError):
    """Raised when a scenario or config file cannot be found, parsed or validated."""

    pass


class DataWriteError(AcademicMarketError):
    """Raised when a result table cannot be written."""

    pass


__all__ = [
    "AcademicMarketError",
    "ConfigurationError",
    "InvariantViolationError",
    "ScenarioLoadError",
    "DataWriteError",
]
