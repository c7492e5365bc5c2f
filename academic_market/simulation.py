# academic_market/simulation.py
"""
Entry point for a single simulation run: builds departments and faculty, then advances
the market year by year and collects the yearly statistics and the candidate outcome log.
"""

import time
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union

import numpy as np
import pandas as pd

from academic_market.agents.factories import build_faculty_roster, create_departments
from academic_market.config.params import SimulationParams, build_params
from academic_market.config.scenarios import Scenario, scenario_from_dict
from academic_market.engines.run_one_year import SimulationState, run_one_year
from academic_market.exceptions import ConfigurationError, InvariantViolationError
from academic_market.state.schema import (
    CANDIDATE_COLS,
    CANDIDATE_DTYPES,
    OUTCOME_COLS,
    OUTCOME_DTYPES,
    STAT_PLACEMENTS_MADE,
    YEARLY_STATS_COLS,
    YEARLY_STATS_DTYPES,
    empty_frame,
    enforce_dtypes,
)
from logging_config import PERFORMANCE_LOGGER, SIMULATION_LOGGER, get_logger

sim_logger = get_logger(SIMULATION_LOGGER)
perf_logger = get_logger(PERFORMANCE_LOGGER)

ScenarioLike = Union[Scenario, Mapping[str, Any], None]


@dataclass
class SimulationResult:
    """Outputs of one run.

    Attributes:
        yearly_stats: one row per simulated year
        candidate_outcomes: one row per candidate reaching faculty or alt_career
        active_candidates: candidates still on the market after the last year
        total_candidates: number of candidates created over the run
        seed: seed the run's generator was built from
        scenario_name: name of the scenario, or None for the default recession
    """

    yearly_stats: pd.DataFrame
    candidate_outcomes: pd.DataFrame
    active_candidates: pd.DataFrame
    total_candidates: int
    seed: int
    scenario_name: Optional[str] = None

    def to_dict(self) -> Dict[str, pd.DataFrame]:
        return {
            "yearly_stats": self.yearly_stats,
            "candidate_outcomes": self.candidate_outcomes,
        }


def _resolve_scenario(scenario: ScenarioLike) -> Optional[Scenario]:
    if scenario is None or isinstance(scenario, Scenario):
        return scenario
    if isinstance(scenario, Mapping):
        return scenario_from_dict(scenario)
    raise ConfigurationError(f"scenario must be a Scenario or a mapping, got {type(scenario).__name__}")


def _check_seed(seed: Any) -> int:
    if isinstance(seed, bool) or not isinstance(seed, (int, np.integer)) or seed < 0:
        raise ConfigurationError(f"seed must be a non-negative integer, got {seed!r}")
    return int(seed)


def run_one_simulation(
    seed: int = 123,
    simulation_years: Optional[int] = None,
    annual_phd_cohort: Optional[int] = None,
    num_departments: Optional[int] = None,
    scenario: ScenarioLike = None,
    params: Union[SimulationParams, Mapping[str, Any], None] = None,
) -> SimulationResult:
    """
    Run one complete simulation.

    ``params`` may be a ``SimulationParams`` or a mapping of its fields; either way it is
    re-validated here. Explicit size arguments override the matching fields of ``params``
    (or of the defaults). Building ``SimulationParams`` directly with invalid values
    raises pydantic's ``ValidationError`` at construction time; pass a mapping (or use
    ``build_params``) to get ``ConfigurationError`` instead.

    All configuration is validated before the first year; the run either completes or
    raises, partial results are never returned. Identical arguments give identical results.

    Raises:
        ConfigurationError: on invalid sizes, parameters, scenario or seed.
        InvariantViolationError: if an internal consistency check fails mid-run.
    """
    seed = _check_seed(seed)
    params = build_params(
        params,
        simulation_years=simulation_years,
        annual_phd_cohort=annual_phd_cohort,
        num_departments=num_departments,
    )
    scenario = _resolve_scenario(scenario)
    scenario_name = scenario.name if scenario is not None else None

    start = time.perf_counter()
    sim_logger.info(
        f"[SIM seed={seed}] Starting {params.simulation_years}-year run "
        f"({params.start_year}-{params.end_year}), cohort={params.annual_phd_cohort}, "
        f"departments={params.num_departments}, scenario={scenario_name or 'default recession'}"
    )

    rng = np.random.default_rng(seed)
    departments = create_departments(
        params.num_departments,
        rng,
        avg_dept_size=params.avg_dept_size,
        min_dept_size=params.min_dept_size,
    )
    faculty = build_faculty_roster(departments, rng, params)
    state = SimulationState(
        candidates=empty_frame(CANDIDATE_COLS, CANDIDATE_DTYPES),
        faculty=faculty,
        departments=departments,
    )

    stats_rows = []
    outcome_frames = []
    for offset in range(params.simulation_years):
        year = params.start_year + offset
        year_result = run_one_year(state, year, rng, params, scenario)
        state = year_result.state
        stats_rows.append(year_result.stats)
        outcome_frames.append(year_result.outcomes)

    yearly_stats = enforce_dtypes(pd.DataFrame(stats_rows), YEARLY_STATS_COLS, YEARLY_STATS_DTYPES)
    non_empty = [df for df in outcome_frames if not df.empty]
    if non_empty:
        outcomes = enforce_dtypes(pd.concat(non_empty, ignore_index=True), OUTCOME_COLS, OUTCOME_DTYPES)
    else:
        outcomes = empty_frame(OUTCOME_COLS, OUTCOME_DTYPES)

    resolved = len(outcomes) + len(state.candidates)
    if resolved != state.candidates_created:
        raise InvariantViolationError(
            f"[SIM seed={seed}] Candidate bookkeeping mismatch: {len(outcomes)} outcomes + "
            f"{len(state.candidates)} active != {state.candidates_created} created"
        )

    elapsed = time.perf_counter() - start
    sim_logger.info(
        f"[SIM seed={seed}] Finished: placements={int(yearly_stats[STAT_PLACEMENTS_MADE].sum())} "
        f"outcomes={len(outcomes)} active={len(state.candidates)}"
    )
    perf_logger.info(f"[SIM seed={seed}] {params.simulation_years} years in {elapsed:.2f}s")

    return SimulationResult(
        yearly_stats=yearly_stats,
        candidate_outcomes=outcomes,
        active_candidates=state.candidates,
        total_candidates=state.candidates_created,
        seed=seed,
        scenario_name=scenario_name,
    )
