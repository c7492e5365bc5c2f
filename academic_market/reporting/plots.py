# academic_market/reporting/plots.py
"""
Plotting of scenario summaries and single-run diagnostics.
Figures are written as PNG files; column names come from academic_market.state.schema.
"""

import logging
from pathlib import Path
from typing import Dict, Optional

import pandas as pd

# To prevent GUI errors on headless servers
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import matplotlib.ticker as mtick

from academic_market.config.params import DEFAULT_PARAMS, SimulationParams
from academic_market.state import schema
from academic_market.utils.status_enums import Period

logger = logging.getLogger(__name__)

# Observed pre- and post-2008 PhD-to-faculty transition rates
OBSERVED_PRE_2008_RATE = 0.25
OBSERVED_POST_2008_RATE = 0.12


def _percent_axis(ax) -> None:
    ax.yaxis.set_major_formatter(mtick.PercentFormatter(xmax=1.0))


def _save(fig, path: Path) -> Path:
    fig.tight_layout()
    fig.savefig(path)
    plt.close(fig)
    logger.info(f"Saved plot to {path}")
    return path


def plot_transition_rates(
    transition_summary: pd.DataFrame,
    output_path: Path,
    params: SimulationParams = DEFAULT_PARAMS,
    include_ribbons: bool = True,
) -> Optional[Path]:
    """Mean faculty transition rate per cohort, one line per scenario."""
    if transition_summary.empty:
        logger.warning("Transition summary is empty. Skipping transition-rate plot.")
        return None

    fig, ax = plt.subplots(figsize=(12, 7))
    for label, group in transition_summary.groupby(schema.SCENARIO_LABEL, sort=False):
        group = group.sort_values(schema.CAND_COHORT_YEAR)
        x = group[schema.CAND_COHORT_YEAR]
        mean = group["mean_transition_rate"].astype(float)
        line, = ax.plot(x, mean, marker='o', linewidth=1.5, label=label)
        if include_ribbons:
            half_sd = group["sd_transition_rate"].astype(float).fillna(0) / 2
            ax.fill_between(
                x, (mean - half_sd).clip(lower=0), (mean + half_sd).clip(upper=1),
                color=line.get_color(), alpha=0.2,
            )

    ax.axhline(OBSERVED_PRE_2008_RATE, linestyle='--', color='blue', alpha=0.7)
    ax.axhline(OBSERVED_POST_2008_RATE, linestyle='--', color='red', alpha=0.7)
    ax.axvline(params.recession_start, linestyle=':', color='black', alpha=0.7)
    ax.set_title("Faculty Transition Rates by Scenario")
    ax.set_xlabel("PhD Cohort Year")
    ax.set_ylabel("Faculty Transition Rate")
    _percent_axis(ax)
    ax.legend(loc='upper center', bbox_to_anchor=(0.5, -0.12), ncol=3)
    return _save(fig, output_path)


def plot_period_comparison(period_summary: pd.DataFrame, output_path: Path) -> Optional[Path]:
    """Grouped bars of the mean transition rate per period and scenario, with sd error bars."""
    if period_summary.empty:
        logger.warning("Period summary is empty. Skipping period comparison plot.")
        return None

    periods = [p.value for p in Period if p.value in set(period_summary[schema.PERIOD])]
    labels = list(dict.fromkeys(period_summary[schema.SCENARIO_LABEL]))
    width = 0.8 / max(len(labels), 1)

    fig, ax = plt.subplots(figsize=(12, 7))
    for i, label in enumerate(labels):
        rows = (
            period_summary[period_summary[schema.SCENARIO_LABEL] == label]
            .set_index(schema.PERIOD)
            .reindex(periods)
        )
        positions = [p + i * width for p in range(len(periods))]
        ax.bar(
            positions,
            rows[schema.MEAN_PERIOD_RATE].astype(float),
            width=width,
            yerr=rows[schema.SD_PERIOD_RATE].astype(float).fillna(0),
            capsize=3,
            alpha=0.8,
            label=label,
        )

    ax.set_xticks([p + width * (len(labels) - 1) / 2 for p in range(len(periods))])
    ax.set_xticklabels(periods)
    ax.set_title("Average Faculty Transition Rates by Period and Scenario")
    ax.set_xlabel("Period")
    ax.set_ylabel("Mean Faculty Transition Rate")
    _percent_axis(ax)
    ax.legend(loc='upper center', bbox_to_anchor=(0.5, -0.12), ncol=3)
    return _save(fig, output_path)


def plot_yearly_rate(
    yearly_summary: pd.DataFrame,
    rate_col: str,
    title: str,
    output_path: Path,
    params: SimulationParams = DEFAULT_PARAMS,
) -> Optional[Path]:
    """One line per scenario of a yearly rate column (placement or failed-search rate)."""
    if yearly_summary.empty:
        logger.warning(f"Yearly summary is empty. Skipping '{title}' plot.")
        return None

    fig, ax = plt.subplots(figsize=(12, 7))
    for label, group in yearly_summary.groupby(schema.SCENARIO_LABEL, sort=False):
        group = group.sort_values(schema.YEAR)
        ax.plot(group[schema.YEAR], group[rate_col].astype(float), linewidth=1.5, label=label)
    ax.axvline(params.recession_start, linestyle=':', color='black', alpha=0.7)
    ax.set_title(title)
    ax.set_xlabel("Year")
    _percent_axis(ax)
    ax.legend(loc='upper center', bbox_to_anchor=(0.5, -0.12), ncol=3)
    return _save(fig, output_path)


def plot_single_simulation(
    yearly_stats: pd.DataFrame,
    output_dir: Path,
    params: SimulationParams = DEFAULT_PARAMS,
    file_prefix: str = "simulation",
) -> Dict[str, Path]:
    """
    Diagnostics for one run: annual placement rate, and openings against job seekers.
    """
    if yearly_stats.empty:
        logger.warning("Yearly stats are empty. Skipping single-run plots.")
        return {}
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    years = yearly_stats[schema.YEAR]
    placement_rate = yearly_stats[schema.STAT_PLACEMENTS_MADE] / yearly_stats[
        schema.STAT_CANDIDATES_SEEKING
    ].clip(lower=1)

    created: Dict[str, Path] = {}

    fig, ax = plt.subplots(figsize=(10, 6))
    ax.plot(years, placement_rate, color='tab:blue', marker='o')
    ax.axvline(params.recession_start, linestyle='--', color='red', alpha=0.7)
    ax.set_title("Annual Placement Rates")
    ax.set_xlabel("Year")
    ax.set_ylabel("Placement Rate (Placements / Job Seekers)")
    _percent_axis(ax)
    created["placement_rate"] = _save(fig, output_dir / f"{file_prefix}_placement_rate.png")

    fig, ax = plt.subplots(figsize=(10, 6))
    ax.plot(years, yearly_stats[schema.STAT_TOTAL_OPENINGS], color='tab:green', label="Openings")
    ax.plot(years, yearly_stats[schema.STAT_CANDIDATES_SEEKING], color='tab:orange', label="Candidates")
    ax.axvline(params.recession_start, linestyle='--', color='black', alpha=0.7)
    ax.set_title("Supply vs Demand")
    ax.set_xlabel("Year")
    ax.set_ylabel("Count")
    ax.yaxis.set_major_formatter(mtick.StrMethodFormatter('{x:,.0f}'))
    ax.legend()
    created["supply_vs_demand"] = _save(fig, output_dir / f"{file_prefix}_supply_vs_demand.png")

    return created


def create_analysis_plots(
    summary: Dict[str, pd.DataFrame],
    output_dir: Path,
    params: SimulationParams = DEFAULT_PARAMS,
    file_prefix: str = "academic_market",
) -> Dict[str, Path]:
    """
    Write every scenario-analysis plot that the summary has data for.

    Returns:
        Mapping of plot name to the written file.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    logger.info(f"Plotting scenario results to {output_dir}...")

    planned = {
        "transition_rates": lambda path: plot_transition_rates(
            summary["transition_summary"], path, params
        ),
        "period_comparison": lambda path: plot_period_comparison(summary["period_summary"], path),
        "placement_rates": lambda path: plot_yearly_rate(
            summary["yearly_summary"], schema.PLACEMENT_RATE, "Annual Placement Rates by Scenario",
            path, params,
        ),
        "failed_search_rates": lambda path: plot_yearly_rate(
            summary["yearly_summary"], schema.FAILED_SEARCH_RATE, "Failed Search Rates by Scenario",
            path, params,
        ),
    }

    created: Dict[str, Path] = {}
    for name, draw in planned.items():
        try:
            path = draw(output_dir / f"{file_prefix}_{name}.png")
        except Exception as e:
            logger.error(f"Error while plotting {name}: {e}", exc_info=True)
            plt.close('all')
            continue
        if path is not None:
            created[name] = path
    return created
