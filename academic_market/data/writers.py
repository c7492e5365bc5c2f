# academic_market/data/writers.py
"""
Functions for writing simulation outputs (single-run tables, scenario summaries) to CSV.
"""

import logging
from pathlib import Path
from typing import Dict, Optional

import pandas as pd

from academic_market.exceptions import DataWriteError

logger = logging.getLogger(__name__)

# Summary tables written by save_summary_tables, with their file suffixes
SUMMARY_TABLE_FILES = {
    "transition_summary": "transition_rates_summary",
    "period_summary": "period_summary",
    "yearly_summary": "yearly_market_dynamics",
}


def write_table(df: pd.DataFrame, path: Path) -> Path:
    """
    Write one DataFrame to CSV.

    Raises:
        DataWriteError: If writing fails.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        df.to_csv(path, index=False, float_format="%.4f")
    except OSError as e:
        logger.exception(f"Failed to write table {path}")
        raise DataWriteError(f"Failed to write table {path}") from e
    logger.info(f"Wrote {len(df)} rows to {path}")
    return path


def save_summary_tables(
    summary: Dict[str, pd.DataFrame],
    output_dir: Path,
    file_prefix: str = "academic_market",
) -> Dict[str, Path]:
    """
    Writes the scenario summary tables to CSV files.

    The yearly summary is skipped when it has no rows.

    Args:
        summary: output of ``summarize_scenario_results``
        output_dir: directory for the CSV files (created if needed)
        file_prefix: prefix for every file name

    Returns:
        Mapping of table name to the written file.
    """
    output_dir = Path(output_dir)
    logger.info(f"Saving summary tables to {output_dir}...")
    created: Dict[str, Path] = {}
    for key, suffix in SUMMARY_TABLE_FILES.items():
        table: Optional[pd.DataFrame] = summary.get(key)
        if table is None:
            continue
        if key == "yearly_summary" and table.empty:
            logger.warning("Yearly summary is empty; not writing it.")
            continue
        created[key] = write_table(table, output_dir / f"{file_prefix}_{suffix}.csv")
    return created


def save_simulation_result(result, output_dir: Path, file_prefix: Optional[str] = None) -> Dict[str, Path]:
    """
    Writes the yearly statistics and candidate outcome log of one run.

    Files are named ``<prefix>_yearly_stats.csv`` and ``<prefix>_candidate_outcomes.csv``
    where the prefix defaults to ``seed<seed>``.
    """
    output_dir = Path(output_dir)
    prefix = file_prefix or f"seed{result.seed}"
    return {
        name: write_table(df, output_dir / f"{prefix}_{name}.csv")
        for name, df in result.to_dict().items()
    }
