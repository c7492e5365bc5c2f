# academic_market/state/schema.py
"""Centralized schema constants for the candidate, faculty and department tables
and for the two run outputs (yearly statistics and candidate outcomes).

All other modules should import column names from here for consistency.
"""
from __future__ import annotations

from typing import Dict, List

import pandas as pd

# -----------------------------------------------------------------------------
# Shared identifiers
# -----------------------------------------------------------------------------
AGENT_ID = "id"
YEAR = "year"

# -----------------------------------------------------------------------------
# Candidate columns
# -----------------------------------------------------------------------------
CAND_ID = AGENT_ID
CAND_COHORT_YEAR = "cohort_year"
CAND_RESEARCH_FOCUS = "research_focus"
CAND_TEACHING = "teaching_orientation"
CAND_PRODUCTIVITY = "productivity"
CAND_PRESTIGE_ORIGIN = "prestige_origin"
CAND_PUBLICATIONS = "publications"
CAND_YEARS_SINCE_PHD = "years_since_phd"
CAND_STATUS = "status"
CAND_POSTDOC_DURATION = "postdoc_duration"
CAND_CAREER_OUTCOME = "career_outcome"

CANDIDATE_COLS: List[str] = [
    CAND_ID,
    CAND_COHORT_YEAR,
    CAND_RESEARCH_FOCUS,
    CAND_TEACHING,
    CAND_PRODUCTIVITY,
    CAND_PRESTIGE_ORIGIN,
    CAND_PUBLICATIONS,
    CAND_YEARS_SINCE_PHD,
    CAND_STATUS,
    CAND_POSTDOC_DURATION,
    CAND_CAREER_OUTCOME,
]

CANDIDATE_DTYPES: Dict[str, str] = {
    CAND_ID: "int64",
    CAND_COHORT_YEAR: "int64",
    CAND_RESEARCH_FOCUS: "float64",
    CAND_TEACHING: "float64",
    CAND_PRODUCTIVITY: "float64",
    CAND_PRESTIGE_ORIGIN: "int64",
    CAND_PUBLICATIONS: "int64",
    CAND_YEARS_SINCE_PHD: "int64",
    CAND_STATUS: "object",
    CAND_POSTDOC_DURATION: "int64",
    CAND_CAREER_OUTCOME: "object",
}

# -----------------------------------------------------------------------------
# Faculty columns
# -----------------------------------------------------------------------------
FAC_ID = AGENT_ID
FAC_DEPARTMENT_ID = "department_id"
FAC_RANK = "rank"
FAC_TENURE_STATUS = "tenure_status"
FAC_RESEARCH_FOCUS = "research_focus"
FAC_PRODUCTIVITY = "productivity"
FAC_AGE = "age"
FAC_YEARS_IN_POSITION = "years_in_position"
FAC_RETIREMENT_RISK = "retirement_risk"
FAC_MOBILITY_RISK = "mobility_risk"
FAC_STATUS = "status"

FACULTY_COLS: List[str] = [
    FAC_ID,
    FAC_DEPARTMENT_ID,
    FAC_RANK,
    FAC_TENURE_STATUS,
    FAC_RESEARCH_FOCUS,
    FAC_PRODUCTIVITY,
    FAC_AGE,
    FAC_YEARS_IN_POSITION,
    FAC_RETIREMENT_RISK,
    FAC_MOBILITY_RISK,
    FAC_STATUS,
]

FACULTY_DTYPES: Dict[str, str] = {
    FAC_ID: "int64",
    FAC_DEPARTMENT_ID: "int64",
    FAC_RANK: "object",
    FAC_TENURE_STATUS: "object",
    FAC_RESEARCH_FOCUS: "float64",
    FAC_PRODUCTIVITY: "float64",
    FAC_AGE: "int64",
    FAC_YEARS_IN_POSITION: "int64",
    FAC_RETIREMENT_RISK: "float64",
    FAC_MOBILITY_RISK: "float64",
    FAC_STATUS: "object",
}

# -----------------------------------------------------------------------------
# Department columns
# -----------------------------------------------------------------------------
DEPT_ID = AGENT_ID
DEPT_PRESTIGE_RANK = "prestige_rank"
DEPT_SIZE = "size"
DEPT_RESEARCH_ORIENTATION = "research_orientation"
DEPT_BUDGET_CONSTRAINT = "budget_constraint"
DEPT_SEARCH_STANDARDS = "search_standards"
DEPT_FAILURE_TOLERANCE = "search_failure_tolerance"
DEPT_OPENINGS = "openings"

DEPARTMENT_COLS: List[str] = [
    DEPT_ID,
    DEPT_PRESTIGE_RANK,
    DEPT_SIZE,
    DEPT_RESEARCH_ORIENTATION,
    DEPT_BUDGET_CONSTRAINT,
    DEPT_SEARCH_STANDARDS,
    DEPT_FAILURE_TOLERANCE,
]

DEPARTMENT_DTYPES: Dict[str, str] = {
    DEPT_ID: "int64",
    DEPT_PRESTIGE_RANK: "int64",
    DEPT_SIZE: "int64",
    DEPT_RESEARCH_ORIENTATION: "float64",
    DEPT_BUDGET_CONSTRAINT: "float64",
    DEPT_SEARCH_STANDARDS: "float64",
    DEPT_FAILURE_TOLERANCE: "float64",
}

OPENINGS_COLS: List[str] = [DEPT_ID, DEPT_OPENINGS]

# -----------------------------------------------------------------------------
# Hiring output columns
# -----------------------------------------------------------------------------
PLACEMENT_DEPARTMENT_ID = "department_id"
MATCH_QUALITY = "match_quality"

# -----------------------------------------------------------------------------
# Run outputs
# -----------------------------------------------------------------------------
STAT_TOTAL_OPENINGS = "total_openings"
STAT_CANDIDATES_SEEKING = "candidates_seeking"
STAT_PLACEMENTS_MADE = "placements_made"
STAT_FAILED_SEARCHES = "failed_searches"

YEARLY_STATS_COLS: List[str] = [
    YEAR,
    STAT_TOTAL_OPENINGS,
    STAT_CANDIDATES_SEEKING,
    STAT_PLACEMENTS_MADE,
    STAT_FAILED_SEARCHES,
]

YEARLY_STATS_DTYPES: Dict[str, str] = {col: "int64" for col in YEARLY_STATS_COLS}

OUTCOME_YEAR = "outcome_year"

OUTCOME_COLS: List[str] = [CAND_ID, CAND_COHORT_YEAR, CAND_CAREER_OUTCOME, OUTCOME_YEAR]

OUTCOME_DTYPES: Dict[str, str] = {
    CAND_ID: "int64",
    CAND_COHORT_YEAR: "int64",
    CAND_CAREER_OUTCOME: "object",
    OUTCOME_YEAR: "int64",
}


def empty_frame(columns: List[str], dtypes: Dict[str, str]) -> pd.DataFrame:
    """Return an empty DataFrame with the given column order and dtypes."""
    return pd.DataFrame({col: pd.Series(dtype=dtypes[col]) for col in columns})


def enforce_dtypes(df: pd.DataFrame, columns: List[str], dtypes: Dict[str, str]) -> pd.DataFrame:
    """Reorder ``df`` to ``columns`` and cast every column to its schema dtype."""
    return df[columns].astype({col: dtypes[col] for col in columns})


# -----------------------------------------------------------------------------
# Summary outputs
# -----------------------------------------------------------------------------
PERIOD = "period"
SIM_ID = "sim_id"
SCENARIO = "scenario"
SCENARIO_LABEL = "scenario_label"
TEST_FACTOR = "test_factor"

TR_FACULTY = "faculty"
TR_ALT_CAREER = "alt_career"
TR_TOTAL_GRADUATES = "total_graduates"
TR_FACULTY_PLACEMENTS = "faculty_placements"
TR_TRANSITION_RATE = "transition_rate"

TRANSITION_RATE_COLS: List[str] = [
    CAND_COHORT_YEAR,
    TR_FACULTY,
    TR_ALT_CAREER,
    TR_TOTAL_GRADUATES,
    TR_FACULTY_PLACEMENTS,
    TR_TRANSITION_RATE,
    PERIOD,
]

TRANSITION_RATE_DTYPES: Dict[str, str] = {
    CAND_COHORT_YEAR: "int64",
    TR_FACULTY: "int64",
    TR_ALT_CAREER: "int64",
    TR_TOTAL_GRADUATES: "int64",
    TR_FACULTY_PLACEMENTS: "int64",
    TR_TRANSITION_RATE: "float64",
    PERIOD: "object",
}

RUN_ID_COLS: List[str] = [SIM_ID, SCENARIO, SCENARIO_LABEL, TEST_FACTOR]
SCENARIO_KEYS: List[str] = [SCENARIO, SCENARIO_LABEL, TEST_FACTOR]

PLACEMENT_RATE = "placement_rate"
FAILED_SEARCH_RATE = "failed_search_rate"
MEAN_PERIOD_RATE = "mean_period_rate"
SD_PERIOD_RATE = "sd_period_rate"
RECESSION_IMPACT = "recession_impact"
PERSISTENT_IMPACT = "persistent_impact"
