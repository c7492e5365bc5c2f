"""
Engines package for the academic market simulation.

This package contains the engines that implement the core yearly market logic.
"""

from .run_one_year import SimulationState, run_one_year

__all__ = ["SimulationState", "run_one_year"]
