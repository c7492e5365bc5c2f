import os
import sys

import numpy as np
import pandas as pd
import pytest

# Ensure project root is on sys.path before imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from academic_market.config.params import build_params  # noqa: E402
from academic_market.state.schema import (  # noqa: E402
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
    DEPT_BUDGET_CONSTRAINT,
    DEPT_FAILURE_TOLERANCE,
    DEPT_ID,
    DEPT_OPENINGS,
    DEPT_PRESTIGE_RANK,
    DEPT_RESEARCH_ORIENTATION,
    DEPT_SEARCH_STANDARDS,
    DEPT_SIZE,
    enforce_dtypes,
)


# Define pytest markers for test categories
def pytest_configure(config):
    """
    Register custom markers to avoid pytest warnings.
    """
    config.addinivalue_line("markers", "unit: mark a test as a unit test")
    config.addinivalue_line("markers", "integration: mark a test as an integration test")
    config.addinivalue_line("markers", "slow: mark a test as a slow test")
    config.addinivalue_line("markers", "config: mark a test as a config test")
    config.addinivalue_line("markers", "engines: mark a test as an engines test")
    config.addinivalue_line("markers", "reporting: mark a test as a reporting test")


CANDIDATE_DEFAULTS = {
    CAND_COHORT_YEAR: 2000,
    CAND_RESEARCH_FOCUS: 5.0,
    CAND_TEACHING: 5.0,
    CAND_PRODUCTIVITY: 6.0,
    CAND_PRESTIGE_ORIGIN: 1,
    CAND_PUBLICATIONS: 2,
    CAND_YEARS_SINCE_PHD: 0,
    CAND_STATUS: "job_seeking",
    CAND_POSTDOC_DURATION: 0,
    CAND_CAREER_OUTCOME: None,
}

DEPARTMENT_DEFAULTS = {
    DEPT_PRESTIGE_RANK: 50,
    DEPT_SIZE: 10,
    DEPT_RESEARCH_ORIENTATION: 5.0,
    DEPT_BUDGET_CONSTRAINT: 1.0,
    DEPT_SEARCH_STANDARDS: 5.0,
    DEPT_FAILURE_TOLERANCE: 0.3,
    DEPT_OPENINGS: 1,
}


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def small_params():
    """Five years around a 2001-2003 recession, small populations."""
    return build_params(
        simulation_years=5,
        annual_phd_cohort=20,
        num_departments=8,
        recession_start=2001,
        recession_end=2003,
    )


@pytest.fixture
def make_candidates():
    """Build a well-typed candidate table; ids default to 1..n."""

    def _make(rows):
        records = []
        for i, row in enumerate(rows, start=1):
            rec = {CAND_ID: i, **CANDIDATE_DEFAULTS}
            rec.update(row)
            records.append(rec)
        return enforce_dtypes(pd.DataFrame(records, columns=CANDIDATE_COLS), CANDIDATE_COLS, CANDIDATE_DTYPES)

    return _make


@pytest.fixture
def make_departments():
    """Build a department table with an ``openings`` column; ids default to 1..n."""

    def _make(rows):
        records = []
        for i, row in enumerate(rows, start=1):
            rec = {DEPT_ID: i, **DEPARTMENT_DEFAULTS}
            rec.update(row)
            records.append(rec)
        df = pd.DataFrame(records)
        df[DEPT_OPENINGS] = df[DEPT_OPENINGS].astype("int64")
        return df

    return _make
