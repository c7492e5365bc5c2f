# academic_market/agents/factories.py
"""
Factories building candidate, faculty and department records.

Batch constructors are the single source of truth: every attribute is drawn as an
independent vector of length ``n`` from the supplied ``numpy.random.Generator``.
Single-record constructors delegate to them with ``n=1`` and return a ``pd.Series``.
"""

import logging
from typing import Callable, Dict, Optional, Sequence, Union

import numpy as np
import pandas as pd

from academic_market.config.params import AVG_DEPT_SIZE, DEFAULT_PARAMS, SimulationParams
from academic_market.exceptions import ConfigurationError
from academic_market.state.schema import (
    CAND_CAREER_OUTCOME,
    CAND_COHORT_YEAR,
    CAND_ID,
    CAND_POSTDOC_DURATION,
    CAND_PRESTIGE_ORIGIN,
    CAND_PRODUCTIVITY,
    CAND_PUBLICATIONS,
    CAND_RESEARCH_FOCUS,
    CAND_STATUS,
    CAND_TEACHING,
    CAND_YEARS_SINCE_PHD,
    CANDIDATE_COLS,
    CANDIDATE_DTYPES,
    DEPARTMENT_COLS,
    DEPARTMENT_DTYPES,
    DEPT_BUDGET_CONSTRAINT,
    DEPT_FAILURE_TOLERANCE,
    DEPT_ID,
    DEPT_PRESTIGE_RANK,
    DEPT_RESEARCH_ORIENTATION,
    DEPT_SEARCH_STANDARDS,
    DEPT_SIZE,
    FAC_AGE,
    FAC_DEPARTMENT_ID,
    FAC_ID,
    FAC_MOBILITY_RISK,
    FAC_PRODUCTIVITY,
    FAC_RANK,
    FAC_RESEARCH_FOCUS,
    FAC_RETIREMENT_RISK,
    FAC_STATUS,
    FAC_TENURE_STATUS,
    FAC_YEARS_IN_POSITION,
    FACULTY_COLS,
    FACULTY_DTYPES,
    empty_frame,
    enforce_dtypes,
)
from academic_market.utils.status_enums import (
    AgentKind,
    CandidateStatus,
    FacultyRank,
    FacultyStatus,
    TenureStatus,
)

logger = logging.getLogger(__name__)

# Origin prestige 1..10, heavily skewed toward lower-ranked programs
PRESTIGE_LEVELS = np.arange(1, 11)
PRESTIGE_WEIGHTS = np.array([0.4, 0.3, 0.15, 0.08, 0.04, 0.02, 0.005, 0.003, 0.001, 0.001])

RANK_AGE_RANGES: Dict[str, tuple] = {
    FacultyRank.ASSISTANT.value: (28, 35),
    FacultyRank.ASSOCIATE.value: (35, 50),
    FacultyRank.FULL.value: (45, 68),
}

RANK_MOBILITY_RISK: Dict[str, float] = {
    FacultyRank.ASSISTANT.value: 0.15,
    FacultyRank.ASSOCIATE.value: 0.08,
    FacultyRank.FULL.value: 0.03,
}

RANK_ORDER = [r.value for r in FacultyRank]

DEFAULT_SEARCH_FAILURE_TOLERANCE = 0.3


def _check_n(n: int, kind: AgentKind) -> None:
    if n < 0:
        raise ConfigurationError(f"Cannot create a negative number of {kind.value} agents: {n}")


def retirement_risk(age) -> np.ndarray:
    """Annual retirement risk: 5% per year past 55, floored at 2%."""
    return np.maximum(0.02, (np.asarray(age, dtype=float) - 55) * 0.05)


def create_candidates(
    n: int,
    rng: np.random.Generator,
    cohort_year: Optional[int] = None,
    start_id: int = 1,
    prestige_origin: Optional[int] = None,
) -> pd.DataFrame:
    """
    Create a cohort of ``n`` newly graduated, job-seeking candidates.

    Args:
        n: cohort size
        rng: random generator owned by the calling run
        cohort_year: PhD year of the cohort (required)
        start_id: id of the first candidate; ids are consecutive
        prestige_origin: fixed origin prestige (1-10); drawn per candidate if None

    Raises:
        ConfigurationError: if ``cohort_year`` is missing or ``n`` is negative.
    """
    if cohort_year is None:
        raise ConfigurationError("cohort_year is required to create candidates")
    _check_n(n, AgentKind.CANDIDATE)
    if n == 0:
        return empty_frame(CANDIDATE_COLS, CANDIDATE_DTYPES)

    research_focus = rng.uniform(1, 10, size=n)
    teaching = rng.uniform(1, 10, size=n)
    productivity = np.clip(rng.normal(5, 2, size=n), 1, 10)
    if prestige_origin is None:
        prestige = rng.choice(PRESTIGE_LEVELS, size=n, p=PRESTIGE_WEIGHTS / PRESTIGE_WEIGHTS.sum())
    else:
        if not 1 <= prestige_origin <= 10:
            raise ConfigurationError(f"prestige_origin must be within 1-10, got {prestige_origin}")
        prestige = np.full(n, prestige_origin)
    publications = rng.poisson(2, size=n)

    df = pd.DataFrame(
        {
            CAND_ID: np.arange(start_id, start_id + n),
            CAND_COHORT_YEAR: cohort_year,
            CAND_RESEARCH_FOCUS: research_focus,
            CAND_TEACHING: teaching,
            CAND_PRODUCTIVITY: productivity,
            CAND_PRESTIGE_ORIGIN: prestige,
            CAND_PUBLICATIONS: publications,
            CAND_YEARS_SINCE_PHD: 0,
            CAND_STATUS: CandidateStatus.JOB_SEEKING.value,
            CAND_POSTDOC_DURATION: 0,
            CAND_CAREER_OUTCOME: None,
        }
    )
    return enforce_dtypes(df, CANDIDATE_COLS, CANDIDATE_DTYPES)


def create_candidate(
    id: int,
    cohort_year: int,
    rng: np.random.Generator,
    prestige_origin: Optional[int] = None,
) -> pd.Series:
    """Create a single graduate student record."""
    return create_candidates(
        1, rng, cohort_year=cohort_year, start_id=id, prestige_origin=prestige_origin
    ).iloc[0]


def create_faculty_members(
    n: int,
    rng: np.random.Generator,
    department_id: Union[int, Sequence[int], None] = None,
    rank: Union[str, Sequence[str], None] = None,
    start_id: int = 1,
    rank_mix: Sequence[float] = DEFAULT_PARAMS.rank_mix,
) -> pd.DataFrame:
    """
    Create ``n`` faculty members with rank-dependent age and risks.

    ``department_id`` and ``rank`` may be scalars or length-``n`` sequences. When
    ``rank`` is None ranks are drawn from ``rank_mix`` (assistant, associate, full).

    Raises:
        ConfigurationError: on a missing department id, unknown rank or length mismatch.
    """
    if department_id is None:
        raise ConfigurationError("department_id is required to create faculty")
    _check_n(n, AgentKind.FACULTY)
    if n == 0:
        return empty_frame(FACULTY_COLS, FACULTY_DTYPES)

    if np.ndim(department_id) == 0:
        dept_ids = np.full(n, department_id)
    else:
        dept_ids = np.asarray(department_id)
    if len(dept_ids) != n:
        raise ConfigurationError(f"Expected {n} department ids, got {len(dept_ids)}")

    if rank is None:
        ranks = rng.choice(RANK_ORDER, size=n, p=np.asarray(rank_mix) / np.sum(rank_mix))
    elif isinstance(rank, str):
        ranks = np.full(n, rank, dtype=object)
    else:
        ranks = np.asarray(rank, dtype=object)
        if len(ranks) != n:
            raise ConfigurationError(f"Expected {n} ranks, got {len(ranks)}")
    unknown = set(ranks) - set(RANK_ORDER)
    if unknown:
        raise ConfigurationError(f"Invalid faculty rank(s) {sorted(unknown)}; must be one of {RANK_ORDER}")

    low = np.array([RANK_AGE_RANGES[r][0] for r in ranks])
    high = np.array([RANK_AGE_RANGES[r][1] for r in ranks])

    research_focus = rng.uniform(1, 10, size=n)
    productivity = np.clip(rng.normal(6, 2, size=n), 1, 10)
    age = rng.integers(low, high + 1)
    years_in_position = rng.integers(1, 6, size=n)

    df = pd.DataFrame(
        {
            FAC_ID: np.arange(start_id, start_id + n),
            FAC_DEPARTMENT_ID: dept_ids,
            FAC_RANK: ranks,
            FAC_TENURE_STATUS: np.where(
                ranks == FacultyRank.ASSISTANT.value,
                TenureStatus.TENURE_TRACK.value,
                TenureStatus.TENURED.value,
            ),
            FAC_RESEARCH_FOCUS: research_focus,
            FAC_PRODUCTIVITY: productivity,
            FAC_AGE: age,
            FAC_YEARS_IN_POSITION: years_in_position,
            FAC_RETIREMENT_RISK: retirement_risk(age),
            FAC_MOBILITY_RISK: [RANK_MOBILITY_RISK[r] for r in ranks],
            FAC_STATUS: FacultyStatus.STAYING.value,
        }
    )
    return enforce_dtypes(df, FACULTY_COLS, FACULTY_DTYPES)


def create_faculty(
    id: int,
    department_id: int,
    rng: np.random.Generator,
    rank: str = FacultyRank.ASSISTANT.value,
) -> pd.Series:
    """Create a single faculty record."""
    return create_faculty_members(1, rng, department_id=department_id, rank=rank, start_id=id).iloc[0]


def create_departments(
    n: int,
    rng: np.random.Generator,
    start_id: int = 1,
    prestige_rank: Optional[int] = None,
    avg_dept_size: int = AVG_DEPT_SIZE,
    min_dept_size: int = 5,
) -> pd.DataFrame:
    """
    Create ``n`` hiring departments.

    Size is ``max(min_dept_size, Poisson(avg_dept_size))``; research orientation is
    U(3, 8) (most lean research) and search standards U(4, 7).
    """
    _check_n(n, AgentKind.DEPARTMENT)
    if n == 0:
        return empty_frame(DEPARTMENT_COLS, DEPARTMENT_DTYPES)

    if prestige_rank is None:
        prestige = rng.integers(1, 101, size=n)
    else:
        if not 1 <= prestige_rank <= 100:
            raise ConfigurationError(f"prestige_rank must be within 1-100, got {prestige_rank}")
        prestige = np.full(n, prestige_rank)
    size = np.maximum(min_dept_size, rng.poisson(avg_dept_size, size=n))
    research_orientation = rng.uniform(3, 8, size=n)
    search_standards = rng.uniform(4, 7, size=n)

    df = pd.DataFrame(
        {
            DEPT_ID: np.arange(start_id, start_id + n),
            DEPT_PRESTIGE_RANK: prestige,
            DEPT_SIZE: size,
            DEPT_RESEARCH_ORIENTATION: research_orientation,
            DEPT_BUDGET_CONSTRAINT: 1.0,
            DEPT_SEARCH_STANDARDS: search_standards,
            DEPT_FAILURE_TOLERANCE: DEFAULT_SEARCH_FAILURE_TOLERANCE,
        }
    )
    return enforce_dtypes(df, DEPARTMENT_COLS, DEPARTMENT_DTYPES)


def create_department(
    id: int,
    rng: np.random.Generator,
    prestige_rank: Optional[int] = None,
    avg_dept_size: int = AVG_DEPT_SIZE,
) -> pd.Series:
    """Create a single department record."""
    return create_departments(
        1, rng, start_id=id, prestige_rank=prestige_rank, avg_dept_size=avg_dept_size
    ).iloc[0]


def build_faculty_roster(
    departments: pd.DataFrame,
    rng: np.random.Generator,
    params: SimulationParams = DEFAULT_PARAMS,
) -> pd.DataFrame:
    """Staff every department with ``size`` faculty members, ranks drawn from the rank mix."""
    dept_ids = np.repeat(departments[DEPT_ID].to_numpy(), departments[DEPT_SIZE].to_numpy())
    roster = create_faculty_members(
        len(dept_ids), rng, department_id=dept_ids, rank_mix=params.rank_mix
    )
    logger.debug(
        f"Built faculty roster: {len(roster)} faculty across {len(departments)} departments, "
        f"ranks {roster[FAC_RANK].value_counts().to_dict() if len(roster) else {}}"
    )
    return roster


# One dedicated batch constructor per agent kind
_BATCH_FACTORIES: Dict[AgentKind, Callable[..., pd.DataFrame]] = {
    AgentKind.CANDIDATE: create_candidates,
    AgentKind.FACULTY: create_faculty_members,
    AgentKind.DEPARTMENT: create_departments,
}


def create_agents(kind: AgentKind, n: int, rng: np.random.Generator, **kwargs) -> pd.DataFrame:
    """
    Create ``n`` agents of the given kind.

    Extra keyword arguments are passed to the kind's batch constructor
    (e.g. ``cohort_year`` for candidates, ``department_id`` for faculty).
    """
    try:
        factory = _BATCH_FACTORIES[AgentKind(kind)]
    except ValueError as e:
        raise ConfigurationError(
            f"Invalid agent kind {kind!r}. Must be one of {[k.value for k in AgentKind]}"
        ) from e
    return factory(n, rng, **kwargs)
