import numpy as np
import pandas as pd
import pytest

from academic_market.config.params import DEFAULT_PARAMS
from academic_market.mc import MonteCarloResults
from academic_market.reporting.metrics import (
    PERIOD_ORDER,
    calculate_simple_summary,
    calculate_transition_rates,
    format_key_findings,
    key_findings,
    summarize_scenario_results,
)
from academic_market.state.schema import (
    CAND_COHORT_YEAR,
    FAILED_SEARCH_RATE,
    MEAN_PERIOD_RATE,
    OUTCOME_COLS,
    PERIOD,
    PERSISTENT_IMPACT,
    PLACEMENT_RATE,
    RECESSION_IMPACT,
    SCENARIO_LABEL,
    SD_PERIOD_RATE,
    TRANSITION_RATE_COLS,
    YEARLY_STATS_COLS,
)

pytestmark = pytest.mark.reporting


def test_transition_rates_per_cohort():
    outcomes = pd.DataFrame(
        [
            (1, 2000, "faculty", 2001),
            (2, 2000, "faculty", 2002),
            (3, 2000, "alt_career", 2006),
            (4, 2009, "alt_career", 2015),
            (5, 2014, "faculty", 2015),
        ],
        columns=OUTCOME_COLS,
    )
    rates = calculate_transition_rates(outcomes, DEFAULT_PARAMS)

    assert list(rates.columns) == TRANSITION_RATE_COLS
    assert rates[CAND_COHORT_YEAR].tolist() == [2000, 2009, 2014]
    assert rates["faculty"].tolist() == [2, 0, 1]
    assert rates["alt_career"].tolist() == [1, 1, 0]
    assert rates["total_graduates"].tolist() == [3, 1, 1]
    assert rates["transition_rate"].tolist() == pytest.approx([2 / 3, 0.0, 1.0])
    assert rates[PERIOD].tolist() == PERIOD_ORDER


def test_transition_rates_empty():
    rates = calculate_transition_rates(pd.DataFrame(columns=OUTCOME_COLS))
    assert rates.empty
    assert list(rates.columns) == TRANSITION_RATE_COLS


def test_simple_summary():
    stats = pd.DataFrame(
        [(2007, 10, 20, 5, 5), (2008, 4, 40, 2, 2), (2009, 6, 20, 4, 2), (2013, 8, 0, 0, 8)],
        columns=YEARLY_STATS_COLS,
    )
    summary = calculate_simple_summary(stats, DEFAULT_PARAMS)

    assert summary["total_years"] == 4
    assert summary["recession_years"] == 2
    assert summary["pre_openings"] == 10.0
    assert summary["pre_placement_rate"] == pytest.approx(0.25)
    assert summary["recession_openings"] == 5.0
    assert summary["recession_placements"] == 3.0
    assert summary["recession_placement_rate"] == pytest.approx((0.05 + 0.2) / 2)
    # zero seekers counts as one so the rate stays defined
    assert summary["post_placement_rate"] == 0.0


def test_simple_summary_missing_period():
    stats = pd.DataFrame([(2000, 3, 5, 1, 2)], columns=YEARLY_STATS_COLS)
    summary = calculate_simple_summary(stats, DEFAULT_PARAMS)
    assert summary["recession_years"] == 0
    assert np.isnan(summary["recession_placement_rate"])
    assert np.isnan(summary["post_openings"])


def test_summarize_scenario_results(fake_runs):
    summary = summarize_scenario_results(MonteCarloResults(runs={"tight": fake_runs}), DEFAULT_PARAMS)

    transition = summary["transition_summary"]
    assert transition[CAND_COHORT_YEAR].tolist() == [2007, 2009, 2014]
    first = transition.iloc[0]
    assert first["mean_transition_rate"] == pytest.approx(0.3)
    assert first["sd_transition_rate"] == pytest.approx(np.std([0.2, 0.4], ddof=1))
    assert first["median_transition_rate"] == pytest.approx(0.3)
    assert first["q25_transition_rate"] == pytest.approx(0.25)
    assert first["q75_transition_rate"] == pytest.approx(0.35)
    assert first["n_sims"] == 2

    period = summary["period_summary"].set_index(PERIOD)
    assert period.loc["Pre-recession", MEAN_PERIOD_RATE] == pytest.approx(0.3)
    assert period.loc["Recession", MEAN_PERIOD_RATE] == pytest.approx(0.1)
    assert period.loc["Post-recession", MEAN_PERIOD_RATE] == pytest.approx(0.2)
    # one cohort per period: no spread to measure
    assert period[SD_PERIOD_RATE].isna().all()

    yearly = summary["yearly_summary"].set_index("year")
    assert yearly.loc[2007, PLACEMENT_RATE] == pytest.approx(0.25)
    assert yearly.loc[2007, FAILED_SEARCH_RATE] == pytest.approx(0.2)
    assert yearly.loc[2009, "mean_openings"] == 5.0
    assert yearly.loc[2009, PLACEMENT_RATE] == pytest.approx(0.1)
    assert yearly.loc[2009, FAILED_SEARCH_RATE] == pytest.approx(0.2)
    assert yearly.loc[2009, PERIOD] == "Recession"

    assert len(summary["raw_transition_rates"]) == 6
    assert summary["raw_yearly_stats"]["sim_id"].tolist() == [1, 1, 2, 2]


def test_summarize_empty():
    summary = summarize_scenario_results([])
    for table in summary.values():
        assert table.empty
    assert key_findings(summary["period_summary"]).empty


def test_key_findings():
    period_summary = pd.DataFrame(
        {
            "scenario": ["s"] * 3,
            SCENARIO_LABEL: ["Scenario S"] * 3,
            "test_factor": ["baseline"] * 3,
            PERIOD: ["Pre-recession", "Recession", "Post-recession"],
            MEAN_PERIOD_RATE: [0.3, 0.2, 0.25],
            SD_PERIOD_RATE: [0.01, 0.02, 0.03],
        }
    )
    findings = key_findings(period_summary)

    assert findings.columns.tolist() == [SCENARIO_LABEL] + PERIOD_ORDER + [RECESSION_IMPACT, PERSISTENT_IMPACT]
    row = findings.iloc[0]
    assert row[RECESSION_IMPACT] == 10.0
    assert row[PERSISTENT_IMPACT] == 5.0

    text = format_key_findings(findings)
    assert "KEY FINDINGS:" in text
    assert "Scenario S" in text


def test_key_findings_missing_period():
    period_summary = pd.DataFrame(
        {
            SCENARIO_LABEL: ["Only Pre"],
            PERIOD: ["Pre-recession"],
            MEAN_PERIOD_RATE: [0.3],
        }
    )
    findings = key_findings(period_summary)
    assert np.isnan(findings.iloc[0][RECESSION_IMPACT])
