"""Scenario replay and Monte Carlo simulation."""

from .monte_carlo import MonteCarloRunner
from .runner import Rejection, ScenarioRunner, SimulationResult, StateSnapshot, contract_from_config

__all__ = [
    "MonteCarloRunner",
    "Rejection",
    "ScenarioRunner",
    "SimulationResult",
    "StateSnapshot",
    "contract_from_config",
]
