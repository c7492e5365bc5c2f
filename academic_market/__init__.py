from academic_market.config.params import SimulationParams, build_params
from academic_market.config.scenarios import Scenario, get_predefined_scenarios
from academic_market.mc import MonteCarloRunner
from academic_market.simulation import SimulationResult, run_one_simulation

__version__ = "0.1.0"

__all__ = [
    "SimulationParams",
    "build_params",
    "Scenario",
    "get_predefined_scenarios",
    "MonteCarloRunner",
    "SimulationResult",
    "run_one_simulation",
]
