# academic_market/engines/openings.py
"""
Engine for generating job openings from faculty attrition.
Retirement and mobility draws are made per faculty member; openings are counted per
department and topped up with growth and baseline turnover draws.
"""

import logging
from typing import NamedTuple, Optional

import numpy as np
import pandas as pd

from academic_market.config.params import DEFAULT_PARAMS, RecessionEffects, SimulationParams
from academic_market.exceptions import InvariantViolationError
from academic_market.state.schema import (
    DEPT_ID,
    DEPT_OPENINGS,
    FAC_DEPARTMENT_ID,
    FAC_MOBILITY_RISK,
    FAC_RETIREMENT_RISK,
    FAC_STATUS,
    OPENINGS_COLS,
)
from academic_market.utils.status_enums import FacultyStatus

logger = logging.getLogger(__name__)


class OpeningsResult(NamedTuple):
    faculty: pd.DataFrame
    openings: pd.DataFrame


def _check_departments(departments: pd.DataFrame, year: int) -> None:
    dupes = departments[DEPT_ID].duplicated()
    if dupes.any():
        raise InvariantViolationError(
            f"[OPENINGS YR={year}] Duplicate department ids: "
            f"{sorted(departments.loc[dupes, DEPT_ID].unique().tolist())}"
        )


def generate_job_openings(
    faculty: pd.DataFrame,
    departments: pd.DataFrame,
    year: int,
    rng: np.random.Generator,
    recession_effects: Optional[RecessionEffects] = None,
    params: SimulationParams = DEFAULT_PARAMS,
    apply_recession: bool = True,
) -> OpeningsResult:
    """
    Simulate faculty retirement and mobility decisions and count openings per department.

    Args:
        faculty: faculty roster; not modified, a copy with recomputed status is returned
        departments: department roster; every department gets exactly one openings row
        year: simulation year
        rng: random generator of the run
        recession_effects: effects used when the year is a recession year
            (defaults to ``params.recession_effects``)
        params: run parameters (recession window, Poisson rates)
        apply_recession: False disables recession adjustments regardless of year

    Returns:
        OpeningsResult with the updated faculty roster and an ``[id, openings]`` table.
    """
    _check_departments(departments, year)
    effects = recession_effects or params.recession_effects
    is_recession = apply_recession and params.is_recession(year)

    faculty = faculty.copy()
    dept_ids = departments[DEPT_ID].to_numpy()

    unknown = ~faculty[FAC_DEPARTMENT_ID].isin(dept_ids)
    if unknown.any():
        raise InvariantViolationError(
            f"[OPENINGS YR={year}] {int(unknown.sum())} faculty belong to unknown departments: "
            f"{sorted(faculty.loc[unknown, FAC_DEPARTMENT_ID].unique().tolist())[:10]}"
        )

    # Retirement decisions
    retirement_factor = effects.retirement_delay_factor if is_recession else 1.0
    retirement_prob = np.maximum(
        params.min_retirement_prob, faculty[FAC_RETIREMENT_RISK].to_numpy() * retirement_factor
    )
    retires = rng.random(len(faculty)) < retirement_prob

    # Mobility decisions (reduced during recession)
    mobility_multiplier = effects.mobility_multiplier if is_recession else 1.0
    mobility_prob = faculty[FAC_MOBILITY_RISK].to_numpy() * mobility_multiplier
    moves = (rng.random(len(faculty)) < mobility_prob) & ~retires

    faculty[FAC_STATUS] = FacultyStatus.STAYING.value
    faculty.loc[retires, FAC_STATUS] = FacultyStatus.RETIRING.value
    faculty.loc[moves, FAC_STATUS] = FacultyStatus.MOVING.value

    # Natural openings, zero-filled for departments without attrition
    natural = (
        faculty.loc[retires | moves]
        .groupby(FAC_DEPARTMENT_ID)
        .size()
        .reindex(dept_ids, fill_value=0)
        .to_numpy()
    )
    openings = natural.astype("int64")

    # Growth openings only outside recession
    if not is_recession:
        openings = openings + rng.poisson(params.growth_openings_lambda, size=len(dept_ids))

    # Baseline turnover keeps the market liquid every year
    openings = openings + rng.poisson(params.baseline_openings_lambda, size=len(dept_ids))

    openings_df = pd.DataFrame({DEPT_ID: dept_ids, DEPT_OPENINGS: openings.astype("int64")})[
        OPENINGS_COLS
    ]
    if (openings_df[DEPT_OPENINGS] < 0).any():
        raise InvariantViolationError(f"[OPENINGS YR={year}] Negative opening counts generated")

    logger.debug(
        f"[OPENINGS YR={year}] recession={is_recession} retiring={int(retires.sum())} "
        f"moving={int(moves.sum())} natural={int(natural.sum())} "
        f"total={int(openings_df[DEPT_OPENINGS].sum())}"
    )
    return OpeningsResult(faculty=faculty, openings=openings_df)


def merge_openings(departments: pd.DataFrame, openings: pd.DataFrame, year: int) -> pd.DataFrame:
    """
    Attach the year's ``openings`` to every department row, keeping department order.

    Raises:
        InvariantViolationError: if a department has no openings row, appears twice,
            or has a negative count.
    """
    base = departments.drop(columns=[DEPT_OPENINGS], errors="ignore")
    try:
        merged = base.merge(openings[OPENINGS_COLS], on=DEPT_ID, how="left", validate="one_to_one")
    except pd.errors.MergeError as e:
        raise InvariantViolationError(f"[OPENINGS YR={year}] Openings merge is not one-to-one: {e}") from e

    missing = merged[DEPT_OPENINGS].isna()
    if missing.any():
        raise InvariantViolationError(
            f"[OPENINGS YR={year}] Departments missing from openings table: "
            f"{merged.loc[missing, DEPT_ID].tolist()[:10]}"
        )
    merged[DEPT_OPENINGS] = merged[DEPT_OPENINGS].astype("int64")
    if (merged[DEPT_OPENINGS] < 0).any():
        raise InvariantViolationError(f"[OPENINGS YR={year}] Negative opening counts in merge")
    return merged
