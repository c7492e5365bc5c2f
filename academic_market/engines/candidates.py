# academic_market/engines/candidates.py
"""
Engine for the yearly lifecycle of candidates already on the market: postdoc entry,
exits to alternative careers and returns from postdoc to the job market.
"""

import logging
from typing import NamedTuple

import numpy as np
import pandas as pd

from academic_market.config.params import DEFAULT_PARAMS, SimulationParams
from academic_market.state.schema import (
    CAND_CAREER_OUTCOME,
    CAND_COHORT_YEAR,
    CAND_ID,
    CAND_POSTDOC_DURATION,
    CAND_PRODUCTIVITY,
    CAND_STATUS,
    CAND_YEARS_SINCE_PHD,
    OUTCOME_COLS,
    OUTCOME_DTYPES,
    OUTCOME_YEAR,
    empty_frame,
    enforce_dtypes,
)
from academic_market.utils.status_enums import CandidateStatus, CareerOutcome

logger = logging.getLogger(__name__)


class PoolUpdate(NamedTuple):
    candidates: pd.DataFrame
    exits: pd.DataFrame


def outcome_records(candidates: pd.DataFrame, outcome: str, year: int) -> pd.DataFrame:
    """Outcome-log rows for ``candidates`` reaching ``outcome`` in ``year``."""
    if candidates.empty:
        return empty_frame(OUTCOME_COLS, OUTCOME_DTYPES)
    records = pd.DataFrame(
        {
            CAND_ID: candidates[CAND_ID].to_numpy(),
            CAND_COHORT_YEAR: candidates[CAND_COHORT_YEAR].to_numpy(),
            CAND_CAREER_OUTCOME: outcome,
            OUTCOME_YEAR: year,
        }
    )
    return enforce_dtypes(records, OUTCOME_COLS, OUTCOME_DTYPES)


def advance_candidate_pool(
    candidates: pd.DataFrame,
    year: int,
    rng: np.random.Generator,
    postdoc_multiplier: float = 1.0,
    params: SimulationParams = DEFAULT_PARAMS,
) -> PoolUpdate:
    """
    Apply one year of status transitions to the active candidate pool.

    Three independent uniform vectors are drawn, in this order: postdoc entry,
    academia exit, postdoc return. Transition eligibility is judged on the status at
    the start of the year, so each candidate makes at most one transition:

    * exit: anyone more than ``alt_career_after_years`` past the PhD, with
      probability ``alt_career_prob``; exit wins over the other two transitions;
    * postdoc entry: job seekers, probability ``postdoc_entry_prob * postdoc_multiplier``;
    * postdoc return: postdocs with at least ``postdoc_min_years_for_return`` years,
      probability ``postdoc_return_prob``; returners get a productivity boost.

    Everyone in postdoc after the update accrues one more postdoc year.

    Returns:
        PoolUpdate with the updated pool (exited candidates still included, marked
        ``alt_career``) and the outcome-log rows for this year's exits.
    """
    pool = candidates.copy()
    n = len(pool)
    if n == 0:
        return PoolUpdate(pool, empty_frame(OUTCOME_COLS, OUTCOME_DTYPES))

    pool[CAND_YEARS_SINCE_PHD] = (year - pool[CAND_COHORT_YEAR]).astype("int64")

    status = pool[CAND_STATUS].to_numpy()
    seeking = status == CandidateStatus.JOB_SEEKING.value
    in_postdoc = status == CandidateStatus.POSTDOC.value

    entry_prob = np.where(seeking, min(1.0, params.postdoc_entry_prob * postdoc_multiplier), 0.0)
    exit_prob = np.where(
        pool[CAND_YEARS_SINCE_PHD].to_numpy() > params.alt_career_after_years,
        params.alt_career_prob,
        0.0,
    )
    return_prob = np.where(
        in_postdoc
        & (pool[CAND_POSTDOC_DURATION].to_numpy() >= params.postdoc_min_years_for_return),
        params.postdoc_return_prob,
        0.0,
    )

    enters_draw = rng.random(n) < entry_prob
    leaves = rng.random(n) < exit_prob
    returns_draw = rng.random(n) < return_prob

    enters = enters_draw & ~leaves
    returns = returns_draw & ~leaves

    pool.loc[enters, CAND_STATUS] = CandidateStatus.POSTDOC.value
    pool.loc[returns, CAND_STATUS] = CandidateStatus.JOB_SEEKING.value
    pool.loc[leaves, CAND_STATUS] = CandidateStatus.ALT_CAREER.value
    pool.loc[leaves, CAND_CAREER_OUTCOME] = CareerOutcome.ALT_CAREER.value

    now_postdoc = (pool[CAND_STATUS] == CandidateStatus.POSTDOC.value).to_numpy()
    pool.loc[now_postdoc, CAND_POSTDOC_DURATION] = pool.loc[now_postdoc, CAND_POSTDOC_DURATION] + 1

    n_returning = int(returns.sum())
    if n_returning:
        boost = rng.normal(
            params.postdoc_productivity_boost_mean,
            params.postdoc_productivity_boost_sd,
            size=n_returning,
        )
        pool.loc[returns, CAND_PRODUCTIVITY] = np.minimum(
            10.0, pool.loc[returns, CAND_PRODUCTIVITY].to_numpy() + boost
        )

    exits = outcome_records(pool.loc[leaves], CareerOutcome.ALT_CAREER.value, year)

    logger.debug(
        f"[CANDIDATES YR={year}] pool={n} postdoc_entries={int(enters.sum())} "
        f"exits={int(leaves.sum())} postdoc_returns={n_returning} "
        f"postdoc_multiplier={postdoc_multiplier:.2f}"
    )
    return PoolUpdate(pool, exits)
