"""
Configuration package: run parameters, recession effects, scenarios and their loaders.
"""

from .params import (
    ANNUAL_PHD_COHORT,
    AVG_DEPT_SIZE,
    DEFAULT_PARAMS,
    NUM_DEPARTMENTS,
    RECESSION_END,
    RECESSION_START,
    SIMULATION_YEARS,
    START_YEAR,
    RecessionEffects,
    SimulationParams,
    build_params,
    default_recession_effects,
)
from .scenarios import Scenario, get_predefined_scenarios, scenario_from_dict

__all__ = [
    "ANNUAL_PHD_COHORT",
    "AVG_DEPT_SIZE",
    "DEFAULT_PARAMS",
    "NUM_DEPARTMENTS",
    "RECESSION_END",
    "RECESSION_START",
    "SIMULATION_YEARS",
    "START_YEAR",
    "RecessionEffects",
    "SimulationParams",
    "build_params",
    "default_recession_effects",
    "Scenario",
    "get_predefined_scenarios",
    "scenario_from_dict",
]
