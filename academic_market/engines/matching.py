# academic_market/engines/matching.py
"""
Match-quality scoring between candidates and a department.

Both the single-pair and the batch entry points evaluate ``match_quality_components``
so the two can never drift apart numerically.
"""

from typing import Mapping, Union

import numpy as np
import pandas as pd

from academic_market.state.schema import (
    CAND_POSTDOC_DURATION,
    CAND_PRESTIGE_ORIGIN,
    CAND_PRODUCTIVITY,
    CAND_RESEARCH_FOCUS,
    DEPT_RESEARCH_ORIENTATION,
    DEPT_SEARCH_STANDARDS,
)

PRESTIGE_BONUS_WEIGHT = 0.3
POSTDOC_BONUS_PER_YEAR = 0.1
POSTDOC_BONUS_CAP = 0.3

Record = Union[pd.Series, Mapping]


def match_quality_components(
    research_focus,
    productivity,
    prestige_origin,
    postdoc_duration,
    research_orientation: float,
    search_standards: float,
) -> np.ndarray:
    """
    Score candidates against one department.

    score = research_fit * productivity_fit + prestige_bonus + postdoc_bonus, where
    research_fit = 1 - |focus - orientation| / 10, productivity_fit is 1 when the
    candidate meets the department's standards (else 0), prestige_bonus is
    prestige / 10 * 0.3 and postdoc_bonus is min(0.1 per postdoc year, 0.3).

    The result is not bounded to [0, 1]; the bonuses are additive.
    """
    research_focus = np.asarray(research_focus, dtype=float)
    productivity = np.asarray(productivity, dtype=float)
    prestige_origin = np.asarray(prestige_origin, dtype=float)
    postdoc_duration = np.asarray(postdoc_duration, dtype=float)

    research_fit = 1 - np.abs(research_focus - research_orientation) / 10
    productivity_fit = (productivity >= search_standards).astype(float)
    prestige_bonus = (prestige_origin / 10) * PRESTIGE_BONUS_WEIGHT
    postdoc_bonus = np.minimum(postdoc_duration * POSTDOC_BONUS_PER_YEAR, POSTDOC_BONUS_CAP)

    return research_fit * productivity_fit + prestige_bonus + postdoc_bonus


def calculate_match_quality(candidate: Record, department: Record) -> float:
    """Match quality of one candidate for one department."""
    score = match_quality_components(
        candidate[CAND_RESEARCH_FOCUS],
        candidate[CAND_PRODUCTIVITY],
        candidate[CAND_PRESTIGE_ORIGIN],
        candidate[CAND_POSTDOC_DURATION],
        department[DEPT_RESEARCH_ORIENTATION],
        department[DEPT_SEARCH_STANDARDS],
    )
    return float(score)


def calculate_match_quality_vectorized(candidates: pd.DataFrame, department: Record) -> np.ndarray:
    """Match quality of every candidate in ``candidates`` for one department, in row order."""
    return match_quality_components(
        candidates[CAND_RESEARCH_FOCUS].to_numpy(),
        candidates[CAND_PRODUCTIVITY].to_numpy(),
        candidates[CAND_PRESTIGE_ORIGIN].to_numpy(),
        candidates[CAND_POSTDOC_DURATION].to_numpy(),
        department[DEPT_RESEARCH_ORIENTATION],
        department[DEPT_SEARCH_STANDARDS],
    )
