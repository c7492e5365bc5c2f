# academic_market/engines/run_one_year.py
"""
Orchestrates one simulated year: new cohort, candidate lifecycle, openings, hiring,
placements, yearly statistics and pruning of resolved candidates.
"""

import dataclasses
from dataclasses import dataclass
from typing import Any, Dict, NamedTuple, Optional

import numpy as np
import pandas as pd

from academic_market.agents.factories import create_candidates
from academic_market.config.params import DEFAULT_PARAMS, SimulationParams
from academic_market.config.scenarios import Scenario
from academic_market.engines.candidates import advance_candidate_pool, outcome_records
from academic_market.engines.conditions import resolve_year_conditions
from academic_market.engines.hiring import order_departments, run_hiring_market
from academic_market.engines.openings import generate_job_openings, merge_openings
from academic_market.exceptions import InvariantViolationError
from academic_market.state.schema import (
    CAND_CAREER_OUTCOME,
    CAND_ID,
    CAND_STATUS,
    CANDIDATE_COLS,
    CANDIDATE_DTYPES,
    DEPT_ID,
    DEPT_OPENINGS,
    OUTCOME_COLS,
    OUTCOME_DTYPES,
    PLACEMENT_DEPARTMENT_ID,
    STAT_CANDIDATES_SEEKING,
    STAT_FAILED_SEARCHES,
    STAT_PLACEMENTS_MADE,
    STAT_TOTAL_OPENINGS,
    YEAR,
    enforce_dtypes,
)
from academic_market.utils.status_enums import TERMINAL_STATUSES, CandidateStatus, CareerOutcome
from logging_config import get_diagnostic_logger, get_logger

logger = get_logger(__name__)
diag_logger = get_diagnostic_logger(__name__)


@dataclass(frozen=True)
class SimulationState:
    """Everything one run carries from year to year.

    ``next_candidate_id`` only ever grows, so ids are never reused even after the
    candidates holding them have left the pool.
    """

    candidates: pd.DataFrame
    faculty: pd.DataFrame
    departments: pd.DataFrame
    next_candidate_id: int = 1
    candidates_created: int = 0


class YearResult(NamedTuple):
    state: SimulationState
    stats: Dict[str, Any]
    outcomes: pd.DataFrame


def _merge_pool(pool: pd.DataFrame, cohort: pd.DataFrame, year: int) -> pd.DataFrame:
    frames = [df for df in (pool, cohort) if not df.empty]
    if not frames:
        return cohort
    merged = enforce_dtypes(
        pd.concat(frames, ignore_index=True), CANDIDATE_COLS, CANDIDATE_DTYPES
    )
    if merged[CAND_ID].duplicated().any():
        dupes = merged.loc[merged[CAND_ID].duplicated(), CAND_ID].tolist()
        raise InvariantViolationError(f"[YEAR {year}] Duplicate candidate ids after cohort merge: {dupes[:10]}")
    return merged


def _check_hires_within_openings(placements: pd.DataFrame, departments: pd.DataFrame, year: int) -> None:
    if placements.empty:
        return
    hires = placements.groupby(PLACEMENT_DEPARTMENT_ID).size()
    openings = departments.set_index(DEPT_ID)[DEPT_OPENINGS].reindex(hires.index)
    over = hires > openings
    if over.any():
        raise InvariantViolationError(
            f"[YEAR {year}] Departments hired beyond their openings: {hires[over].to_dict()}"
        )


def run_one_year(
    state: SimulationState,
    year: int,
    rng: np.random.Generator,
    params: SimulationParams = DEFAULT_PARAMS,
    scenario: Optional[Scenario] = None,
) -> YearResult:
    """
    Advance the simulation by one year.

    Order matters: it decides which candidates can be hired this year and the year
    each outcome is attributed to.

    Returns:
        YearResult with the new state (terminal candidates removed), the yearly
        statistics row and the outcome-log rows recorded this year.
    """
    conditions = resolve_year_conditions(year, params, scenario)
    logger.debug(
        f"[YEAR {year}] recession_window={conditions.in_recession_window} "
        f"recession_active={conditions.recession_active} scenario_active={conditions.scenario_active}"
    )

    # 1. New graduate cohort
    cohort = create_candidates(
        params.annual_phd_cohort, rng, cohort_year=year, start_id=state.next_candidate_id
    )

    # 2. Existing pool lifecycle
    outcome_frames = []
    pool = state.candidates
    if not pool.empty:
        update = advance_candidate_pool(pool, year, rng, conditions.postdoc_multiplier, params)
        pool = update.candidates
        outcome_frames.append(update.exits)

    # 3. Merge cohort
    pool = _merge_pool(pool, cohort, year)

    # 4. Openings from faculty attrition
    opening_results = generate_job_openings(
        state.faculty,
        state.departments,
        year,
        rng,
        recession_effects=conditions.recession_effects,
        params=params,
        apply_recession=conditions.recession_active,
    )
    departments_with_openings = merge_openings(
        order_departments(state.departments, params.hiring_order), opening_results.openings, year
    )

    # 5. Hiring market on job seekers
    job_seekers = pool[pool[CAND_STATUS] == CandidateStatus.JOB_SEEKING.value]
    market = run_hiring_market(job_seekers, departments_with_openings, year, rng, scenario, params)
    _check_hires_within_openings(market.placements, departments_with_openings, year)

    # 6. Placements
    placed = pool[CAND_ID].isin(market.placements[CAND_ID])
    pool.loc[placed, CAND_STATUS] = CandidateStatus.FACULTY.value
    pool.loc[placed, CAND_CAREER_OUTCOME] = CareerOutcome.FACULTY.value
    outcome_frames.append(outcome_records(market.placements, CareerOutcome.FACULTY.value, year))

    # 7. Yearly statistics
    stats = {
        YEAR: year,
        STAT_TOTAL_OPENINGS: int(departments_with_openings[DEPT_OPENINGS].sum()),
        STAT_CANDIDATES_SEEKING: int(len(job_seekers)),
        STAT_PLACEMENTS_MADE: int(len(market.placements)),
        STAT_FAILED_SEARCHES: int(market.failed_searches),
    }

    # 8. Drop resolved candidates
    active = pool[~pool[CAND_STATUS].isin(TERMINAL_STATUSES)].reset_index(drop=True)

    outcomes = enforce_dtypes(pd.concat(outcome_frames, ignore_index=True), OUTCOME_COLS, OUTCOME_DTYPES)
    diag_logger.debug(
        f"[YEAR {year}] stats={stats} active_pool={len(active)} "
        f"status_mix={active[CAND_STATUS].value_counts().to_dict()}"
    )

    new_state = dataclasses.replace(
        state,
        candidates=active,
        faculty=opening_results.faculty,
        next_candidate_id=state.next_candidate_id + len(cohort),
        candidates_created=state.candidates_created + len(cohort),
    )
    return YearResult(state=new_state, stats=stats, outcomes=outcomes)
