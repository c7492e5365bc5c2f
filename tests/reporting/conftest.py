import pandas as pd
import pytest

from academic_market.mc import RunResult
from academic_market.state.schema import (
    CAND_COHORT_YEAR,
    PERIOD,
    TR_ALT_CAREER,
    TR_FACULTY,
    TR_FACULTY_PLACEMENTS,
    TR_TOTAL_GRADUATES,
    TR_TRANSITION_RATE,
    TRANSITION_RATE_COLS,
    TRANSITION_RATE_DTYPES,
    YEARLY_STATS_COLS,
    YEARLY_STATS_DTYPES,
    enforce_dtypes,
)


def _rates(rows):
    df = pd.DataFrame(
        [
            {
                CAND_COHORT_YEAR: cohort,
                TR_FACULTY: faculty,
                TR_ALT_CAREER: total - faculty,
                TR_TOTAL_GRADUATES: total,
                TR_FACULTY_PLACEMENTS: faculty,
                TR_TRANSITION_RATE: faculty / total,
                PERIOD: period,
            }
            for cohort, faculty, total, period in rows
        ],
        columns=TRANSITION_RATE_COLS,
    )
    return enforce_dtypes(df, TRANSITION_RATE_COLS, TRANSITION_RATE_DTYPES)


def _stats(rows):
    df = pd.DataFrame(rows, columns=YEARLY_STATS_COLS)
    return enforce_dtypes(df, YEARLY_STATS_COLS, YEARLY_STATS_DTYPES)


@pytest.fixture
def fake_runs():
    """Two simulations of one scenario with hand-picked rates and statistics."""
    return [
        RunResult(
            sim_id=1,
            seed=1000,
            scenario="tight",
            scenario_label="Tight Market",
            test_factor="failed_searches",
            transition_rates=_rates(
                [(2007, 2, 10, "Pre-recession"), (2009, 1, 10, "Recession"), (2014, 3, 10, "Post-recession")]
            ),
            yearly_stats=_stats([(2007, 10, 20, 5, 2), (2009, 4, 30, 2, 2)]),
        ),
        RunResult(
            sim_id=2,
            seed=2000,
            scenario="tight",
            scenario_label="Tight Market",
            test_factor="failed_searches",
            transition_rates=_rates(
                [(2007, 4, 10, "Pre-recession"), (2009, 1, 10, "Recession"), (2014, 1, 10, "Post-recession")]
            ),
            yearly_stats=_stats([(2007, 10, 20, 5, 2), (2009, 6, 30, 4, 0)]),
        ),
    ]
