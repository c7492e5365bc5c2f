import pandas as pd
import pytest

from academic_market.data.writers import save_simulation_result, save_summary_tables, write_table
from academic_market.exceptions import DataWriteError
from academic_market.reporting.metrics import summarize_scenario_results
from academic_market.reporting.plots import create_analysis_plots, plot_single_simulation
from academic_market.simulation import run_one_simulation

pytestmark = pytest.mark.reporting


@pytest.fixture
def summary(fake_runs):
    return summarize_scenario_results(fake_runs)


def test_save_summary_tables(tmp_path, summary):
    files = save_summary_tables(summary, tmp_path / "out", file_prefix="test")

    assert set(files) == {"transition_summary", "period_summary", "yearly_summary"}
    assert files["transition_summary"].name == "test_transition_rates_summary.csv"
    assert files["yearly_summary"].name == "test_yearly_market_dynamics.csv"
    for path in files.values():
        assert path.exists()

    written = pd.read_csv(files["transition_summary"])
    assert written["mean_transition_rate"].iloc[0] == pytest.approx(0.3)


def test_empty_yearly_summary_skipped(tmp_path, summary):
    summary = dict(summary, yearly_summary=summary["yearly_summary"].iloc[0:0])
    files = save_summary_tables(summary, tmp_path)
    assert "yearly_summary" not in files
    assert not (tmp_path / "academic_market_yearly_market_dynamics.csv").exists()


def test_write_table_wraps_os_errors(tmp_path, monkeypatch):
    def fail(*args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr(pd.DataFrame, "to_csv", fail)
    with pytest.raises(DataWriteError):
        write_table(pd.DataFrame({"a": [1]}), tmp_path / "a.csv")


def test_save_simulation_result(tmp_path):
    result = run_one_simulation(seed=4, simulation_years=2, annual_phd_cohort=10, num_departments=4)
    files = save_simulation_result(result, tmp_path)

    assert files["yearly_stats"].name == "seed4_yearly_stats.csv"
    assert files["candidate_outcomes"].name == "seed4_candidate_outcomes.csv"
    assert len(pd.read_csv(files["yearly_stats"])) == 2


def test_create_analysis_plots(tmp_path, summary):
    files = create_analysis_plots(summary, tmp_path, file_prefix="test")
    assert set(files) == {"transition_rates", "period_comparison", "placement_rates", "failed_search_rates"}
    for path in files.values():
        assert path.exists()
        assert path.suffix == ".png"


def test_create_analysis_plots_empty(tmp_path):
    assert create_analysis_plots(summarize_scenario_results([]), tmp_path) == {}


def test_plot_single_simulation(tmp_path, fake_runs):
    files = plot_single_simulation(fake_runs[0].yearly_stats, tmp_path, file_prefix="seed1")
    assert sorted(p.name for p in files.values()) == [
        "seed1_placement_rate.png",
        "seed1_supply_vs_demand.png",
    ]
