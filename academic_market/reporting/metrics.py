# academic_market/reporting/metrics.py
"""
Functions to calculate summary metrics from simulation results: per-cohort transition
rates, per-period market summaries and cross-simulation scenario summaries.
"""

import logging
from typing import Any, Dict, Iterable

import numpy as np
import pandas as pd

from academic_market.config.params import DEFAULT_PARAMS, SimulationParams
from academic_market.state.schema import (
    CAND_CAREER_OUTCOME,
    CAND_COHORT_YEAR,
    FAILED_SEARCH_RATE,
    MEAN_PERIOD_RATE,
    PERIOD,
    PERSISTENT_IMPACT,
    PLACEMENT_RATE,
    RECESSION_IMPACT,
    RUN_ID_COLS,
    SCENARIO,
    SCENARIO_KEYS,
    SCENARIO_LABEL,
    SD_PERIOD_RATE,
    SIM_ID,
    STAT_CANDIDATES_SEEKING,
    STAT_FAILED_SEARCHES,
    STAT_PLACEMENTS_MADE,
    STAT_TOTAL_OPENINGS,
    TEST_FACTOR,
    TR_ALT_CAREER,
    TR_FACULTY,
    TR_FACULTY_PLACEMENTS,
    TR_TOTAL_GRADUATES,
    TR_TRANSITION_RATE,
    TRANSITION_RATE_COLS,
    TRANSITION_RATE_DTYPES,
    YEAR,
    YEARLY_STATS_COLS,
    empty_frame,
    enforce_dtypes,
)
from academic_market.utils.status_enums import Period

logger = logging.getLogger(__name__)

PERIOD_ORDER = [p.value for p in Period]


def _period_labels(years: pd.Series, params: SimulationParams) -> pd.Series:
    return years.map(params.period_of)


def calculate_transition_rates(
    candidate_outcomes: pd.DataFrame, params: SimulationParams = DEFAULT_PARAMS
) -> pd.DataFrame:
    """
    Faculty transition rate per PhD cohort from the outcome log.

    Only resolved candidates count: ``total_graduates = faculty + alt_career``.
    Cohorts with no resolved candidates are omitted.

    Returns:
        DataFrame with one row per cohort and columns ``TRANSITION_RATE_COLS``.
    """
    if candidate_outcomes is None or candidate_outcomes.empty:
        return empty_frame(TRANSITION_RATE_COLS, TRANSITION_RATE_DTYPES)

    counts = (
        candidate_outcomes.groupby([CAND_COHORT_YEAR, CAND_CAREER_OUTCOME])
        .size()
        .unstack(fill_value=0)
        .reindex(columns=[TR_FACULTY, TR_ALT_CAREER], fill_value=0)
        .reset_index()
    )
    counts.columns.name = None
    counts[TR_TOTAL_GRADUATES] = counts[TR_FACULTY] + counts[TR_ALT_CAREER]
    counts = counts[counts[TR_TOTAL_GRADUATES] > 0].copy()
    counts[TR_FACULTY_PLACEMENTS] = counts[TR_FACULTY]
    counts[TR_TRANSITION_RATE] = counts[TR_FACULTY] / counts[TR_TOTAL_GRADUATES]
    counts[PERIOD] = _period_labels(counts[CAND_COHORT_YEAR], params)
    return enforce_dtypes(counts.reset_index(drop=True), TRANSITION_RATE_COLS, TRANSITION_RATE_DTYPES)


def calculate_simple_summary(
    yearly_stats: pd.DataFrame, params: SimulationParams = DEFAULT_PARAMS
) -> Dict[str, Any]:
    """
    Quick per-period summary of a single run's yearly statistics.

    Placement rate is ``placements / max(seeking, 1)`` averaged over the years of a
    period; periods with no years give NaN.
    """
    periods = _period_labels(yearly_stats[YEAR], params) if len(yearly_stats) else pd.Series(dtype=object)
    summary: Dict[str, Any] = {
        "total_years": int(len(yearly_stats)),
        "recession_years": int((periods == Period.RECESSION.value).sum()),
    }
    for prefix, period in (
        ("pre", Period.PRE_RECESSION),
        ("recession", Period.RECESSION),
        ("post", Period.POST_RECESSION),
    ):
        subset = yearly_stats[(periods == period.value).to_numpy()] if len(yearly_stats) else yearly_stats
        if subset.empty:
            summary[f"{prefix}_openings"] = np.nan
            summary[f"{prefix}_placements"] = np.nan
            summary[f"{prefix}_placement_rate"] = np.nan
            continue
        rate = subset[STAT_PLACEMENTS_MADE] / np.maximum(subset[STAT_CANDIDATES_SEEKING], 1)
        summary[f"{prefix}_openings"] = float(subset[STAT_TOTAL_OPENINGS].mean())
        summary[f"{prefix}_placements"] = float(subset[STAT_PLACEMENTS_MADE].mean())
        summary[f"{prefix}_placement_rate"] = float(rate.mean())
    return summary


def _q25(s: pd.Series) -> float:
    return s.quantile(0.25)


def _q75(s: pd.Series) -> float:
    return s.quantile(0.75)


def _tag(df: pd.DataFrame, run: Any) -> pd.DataFrame:
    tagged = df.copy()
    tagged[SIM_ID] = run.sim_id
    tagged[SCENARIO] = run.scenario
    tagged[SCENARIO_LABEL] = run.scenario_label
    tagged[TEST_FACTOR] = run.test_factor
    return tagged


def summarize_scenario_results(
    results: Iterable[Any], params: SimulationParams = DEFAULT_PARAMS
) -> Dict[str, pd.DataFrame]:
    """
    Aggregate Monte Carlo runs across simulations.

    Args:
        results: run results (``MonteCarloResults`` or any iterable of ``RunResult``)
        params: parameters the runs used; only the recession window is read

    Returns:
        Dict with ``transition_summary``, ``period_summary``, ``yearly_summary``,
        ``raw_transition_rates`` and ``raw_yearly_stats``.
    """
    runs = list(results)
    logger.info(f"Summarizing {len(runs)} simulation runs")

    rate_frames = [_tag(r.transition_rates, r) for r in runs if not r.transition_rates.empty]
    stats_frames = [_tag(r.yearly_stats, r) for r in runs if not r.yearly_stats.empty]

    raw_rates = (
        pd.concat(rate_frames, ignore_index=True)
        if rate_frames
        else pd.DataFrame(columns=TRANSITION_RATE_COLS + RUN_ID_COLS)
    )
    raw_stats = (
        pd.concat(stats_frames, ignore_index=True)
        if stats_frames
        else pd.DataFrame(columns=YEARLY_STATS_COLS + RUN_ID_COLS)
    )

    if raw_rates.empty:
        transition_summary = pd.DataFrame(
            columns=SCENARIO_KEYS
            + [
                CAND_COHORT_YEAR,
                PERIOD,
                "mean_transition_rate",
                "sd_transition_rate",
                "median_transition_rate",
                "q25_transition_rate",
                "q75_transition_rate",
                "n_sims",
            ]
        )
        period_summary = pd.DataFrame(columns=SCENARIO_KEYS + [PERIOD, MEAN_PERIOD_RATE, SD_PERIOD_RATE])
    else:
        transition_summary = (
            raw_rates.groupby(SCENARIO_KEYS + [CAND_COHORT_YEAR, PERIOD], sort=False)[TR_TRANSITION_RATE]
            .agg(
                mean_transition_rate="mean",
                sd_transition_rate="std",
                median_transition_rate="median",
                q25_transition_rate=_q25,
                q75_transition_rate=_q75,
                n_sims="count",
            )
            .reset_index()
            .sort_values(SCENARIO_KEYS[:1] + [CAND_COHORT_YEAR], kind="mergesort")
            .reset_index(drop=True)
        )
        period_summary = (
            transition_summary.groupby(SCENARIO_KEYS + [PERIOD], sort=False)["mean_transition_rate"]
            .agg(**{MEAN_PERIOD_RATE: "mean", SD_PERIOD_RATE: "std"})
            .reset_index()
        )

    if raw_stats.empty:
        yearly_summary = pd.DataFrame(
            columns=SCENARIO_KEYS
            + [
                YEAR,
                "mean_openings",
                "mean_candidates",
                "mean_placements",
                "mean_failed_searches",
                PLACEMENT_RATE,
                FAILED_SEARCH_RATE,
                PERIOD,
            ]
        )
    else:
        yearly_summary = (
            raw_stats.groupby(SCENARIO_KEYS + [YEAR], sort=False)
            .agg(
                mean_openings=(STAT_TOTAL_OPENINGS, "mean"),
                mean_candidates=(STAT_CANDIDATES_SEEKING, "mean"),
                mean_placements=(STAT_PLACEMENTS_MADE, "mean"),
                mean_failed_searches=(STAT_FAILED_SEARCHES, "mean"),
            )
            .reset_index()
        )
        yearly_summary[PLACEMENT_RATE] = yearly_summary["mean_placements"] / np.maximum(
            yearly_summary["mean_candidates"], 1
        )
        yearly_summary[FAILED_SEARCH_RATE] = yearly_summary["mean_failed_searches"] / np.maximum(
            yearly_summary["mean_openings"], 1
        )
        yearly_summary[PERIOD] = _period_labels(yearly_summary[YEAR], params)

    return {
        "transition_summary": transition_summary,
        "period_summary": period_summary,
        "yearly_summary": yearly_summary,
        "raw_transition_rates": raw_rates,
        "raw_yearly_stats": raw_stats,
    }


def key_findings(period_summary: pd.DataFrame) -> pd.DataFrame:
    """
    One row per scenario with its mean transition rate per period and the
    percentage-point drops relative to the pre-recession rate.

    ``recession_impact = (pre - recession) * 100`` and
    ``persistent_impact = (pre - post) * 100``, rounded to one decimal; NaN when a
    period is missing.
    """
    if period_summary.empty:
        return pd.DataFrame(columns=[SCENARIO_LABEL] + PERIOD_ORDER + [RECESSION_IMPACT, PERSISTENT_IMPACT])

    wide = period_summary.pivot_table(
        index=SCENARIO_LABEL, columns=PERIOD, values=MEAN_PERIOD_RATE, aggfunc="mean", sort=False
    )
    wide = wide.reindex(columns=PERIOD_ORDER)
    wide.columns.name = None

    pre = wide[Period.PRE_RECESSION.value]
    wide[RECESSION_IMPACT] = ((pre - wide[Period.RECESSION.value]) * 100).round(1)
    wide[PERSISTENT_IMPACT] = ((pre - wide[Period.POST_RECESSION.value]) * 100).round(1)
    return wide.reset_index()


def format_key_findings(findings: pd.DataFrame, width: int = 60) -> str:
    """Render :func:`key_findings` as a console block."""
    rule = "=" * width
    lines = [rule, "KEY FINDINGS:", rule, findings.to_string(index=False, float_format=lambda x: f"{x:.3f}")]
    lines.append("")
    lines.append("Impact interpretation:")
    lines.append("- recession_impact: Percentage point drop during recession")
    lines.append("- persistent_impact: Percentage point drop in post-recession period")
    return "\n".join(lines)
