# academic_market/engines/hiring.py
"""
Engine resolving the yearly hiring market between job-seeking candidates and
departments with openings.

Departments are processed one at a time in the order they are given; each one takes
its pick from the candidates the departments before it left behind.
"""

import logging
from typing import List, NamedTuple, Optional

import numpy as np
import pandas as pd

from academic_market.config.params import DEFAULT_PARAMS, SimulationParams
from academic_market.config.scenarios import Scenario
from academic_market.engines.matching import match_quality_components
from academic_market.exceptions import ConfigurationError, InvariantViolationError
from academic_market.state.schema import (
    CAND_ID,
    CAND_POSTDOC_DURATION,
    CAND_PRESTIGE_ORIGIN,
    CAND_PRODUCTIVITY,
    CAND_RESEARCH_FOCUS,
    DEPT_FAILURE_TOLERANCE,
    DEPT_ID,
    DEPT_OPENINGS,
    DEPT_PRESTIGE_RANK,
    DEPT_RESEARCH_ORIENTATION,
    DEPT_SEARCH_STANDARDS,
    MATCH_QUALITY,
    PLACEMENT_DEPARTMENT_ID,
)

logger = logging.getLogger(__name__)

HIRING_ORDERS = ("department_id", "prestige")


class HiringResult(NamedTuple):
    placements: pd.DataFrame
    remaining_candidates: pd.DataFrame
    failed_searches: int


def order_departments(departments: pd.DataFrame, policy: str = "department_id") -> pd.DataFrame:
    """
    Return departments in hiring priority order.

    ``department_id``: ascending id. ``prestige``: ascending prestige rank
    (1 = most prestigious hires first), ties broken by id. Both sorts are stable.
    """
    if policy == "department_id":
        keys = [DEPT_ID]
    elif policy == "prestige":
        keys = [DEPT_PRESTIGE_RANK, DEPT_ID]
    else:
        raise ConfigurationError(f"Unknown hiring order '{policy}'; expected one of {HIRING_ORDERS}")
    return departments.sort_values(keys, kind="mergesort").reset_index(drop=True)


def apply_search_conditions(
    departments: pd.DataFrame,
    year: int,
    scenario: Optional[Scenario] = None,
    params: SimulationParams = DEFAULT_PARAMS,
) -> pd.DataFrame:
    """
    Adjust search standards and failure tolerance for the year's economic conditions.

    In a recession year an active scenario inflates standards by its own factor and
    overrides the failure tolerance; with no scenario the default inflation applies.
    A scenario with ``apply_recession_effects=False`` leaves departments untouched.
    """
    departments = departments.copy()
    if not params.is_recession(year):
        return departments

    if scenario is not None and scenario.apply_recession_effects:
        departments[DEPT_SEARCH_STANDARDS] = (
            departments[DEPT_SEARCH_STANDARDS] * scenario.search_standards_inflation
        )
        departments[DEPT_FAILURE_TOLERANCE] = scenario.search_failure_tolerance
    elif scenario is None:
        departments[DEPT_SEARCH_STANDARDS] = (
            departments[DEPT_SEARCH_STANDARDS] * params.recession_effects.search_standards_inflation
        )
    return departments


def _validate_inputs(candidates: pd.DataFrame, departments: pd.DataFrame, year: int) -> None:
    if DEPT_OPENINGS not in departments.columns:
        raise InvariantViolationError(f"[HIRING YR={year}] Departments table has no '{DEPT_OPENINGS}' column")
    if departments[DEPT_OPENINGS].isna().any():
        raise InvariantViolationError(f"[HIRING YR={year}] Missing opening counts for some departments")
    if (departments[DEPT_OPENINGS] < 0).any():
        raise InvariantViolationError(f"[HIRING YR={year}] Negative opening counts")
    if candidates[CAND_ID].duplicated().any():
        raise InvariantViolationError(f"[HIRING YR={year}] Duplicate candidate ids in hiring pool")


def run_hiring_market(
    candidates: pd.DataFrame,
    departments_with_openings: pd.DataFrame,
    year: int,
    rng: np.random.Generator,
    scenario: Optional[Scenario] = None,
    params: SimulationParams = DEFAULT_PARAMS,
) -> HiringResult:
    """
    Match candidates to openings for one year.

    For each department with openings (in input order): score every remaining
    candidate, drop non-positive scores and rank the rest by score (stable, so ties
    keep pool order). With no positive score the search fails. Otherwise the search
    succeeds when the best score reaches ``params.hire_quality_threshold`` or a uniform
    draw exceeds the department's failure tolerance; on success the top
    ``min(openings, positives)`` candidates are hired and leave the pool. A failed
    search adds all of the department's openings to the failed-search tally.

    Returns:
        HiringResult with placements (candidate columns plus ``department_id`` and
        ``match_quality``), the unplaced candidates and the failed-search count.
    """
    _validate_inputs(candidates, departments_with_openings, year)
    departments = apply_search_conditions(departments_with_openings, year, scenario, params)

    pool = candidates.reset_index(drop=True)
    available = np.ones(len(pool), dtype=bool)
    research_focus = pool[CAND_RESEARCH_FOCUS].to_numpy(dtype=float)
    productivity = pool[CAND_PRODUCTIVITY].to_numpy(dtype=float)
    prestige = pool[CAND_PRESTIGE_ORIGIN].to_numpy(dtype=float)
    postdoc = pool[CAND_POSTDOC_DURATION].to_numpy(dtype=float)

    placements: List[pd.DataFrame] = []
    failed_searches = 0

    hiring = departments[departments[DEPT_OPENINGS] > 0]
    for dept in hiring.to_dict("records"):
        if not available.any():
            logger.debug(
                f"[HIRING YR={year}] Candidate pool exhausted; stopping at department {dept[DEPT_ID]}"
            )
            break

        openings = int(dept[DEPT_OPENINGS])
        idx = np.flatnonzero(available)
        scores = match_quality_components(
            research_focus[idx],
            productivity[idx],
            prestige[idx],
            postdoc[idx],
            dept[DEPT_RESEARCH_ORIENTATION],
            dept[DEPT_SEARCH_STANDARDS],
        )
        positive = scores > 0
        if not positive.any():
            failed_searches += openings
            continue

        ranked = np.argsort(-scores[positive], kind="stable")
        ranked_idx = idx[positive][ranked]
        ranked_scores = scores[positive][ranked]
        top_quality = ranked_scores[0]

        search_succeeds = (
            top_quality >= params.hire_quality_threshold
            or rng.random() > dept[DEPT_FAILURE_TOLERANCE]
        )
        if not search_succeeds:
            failed_searches += openings
            continue

        n_hires = min(openings, len(ranked_idx))
        hired_idx = ranked_idx[:n_hires]
        hired = pool.iloc[hired_idx].copy()
        hired[PLACEMENT_DEPARTMENT_ID] = dept[DEPT_ID]
        hired[MATCH_QUALITY] = ranked_scores[:n_hires]
        placements.append(hired)
        available[hired_idx] = False

    placement_cols = list(pool.columns) + [PLACEMENT_DEPARTMENT_ID, MATCH_QUALITY]
    if placements:
        placements_df = pd.concat(placements, ignore_index=True)
    else:
        placements_df = pool.iloc[0:0].copy()
        placements_df[PLACEMENT_DEPARTMENT_ID] = pd.Series(dtype="int64")
        placements_df[MATCH_QUALITY] = pd.Series(dtype="float64")
    placements_df = placements_df[placement_cols]

    remaining = pool.loc[available].reset_index(drop=True)

    logger.info(
        f"[HIRING YR={year}] seekers={len(pool)} hiring_departments={len(hiring)} "
        f"placed={len(placements_df)} failed_searches={failed_searches} remaining={len(remaining)}"
    )
    return HiringResult(
        placements=placements_df,
        remaining_candidates=remaining,
        failed_searches=int(failed_searches),
    )
