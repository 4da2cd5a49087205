"""Invariant and sanity checks for xstake scenarios."""

from .sanity_checks import InvariantChecker, ValidationWarning, validate_simulation_results

__all__ = [
    "InvariantChecker",
    "ValidationWarning",
    "validate_simulation_results"
]
