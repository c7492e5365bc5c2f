# academic_market/cli.py
# Command-line interface entry point (argparse)
import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from academic_market.config.loaders import load_run_config, load_scenarios
from academic_market.config.params import DEFAULT_PARAMS, SimulationParams, build_params
from academic_market.config.scenarios import Scenario, get_predefined_scenarios
from academic_market.data.writers import save_simulation_result, save_summary_tables
from academic_market.exceptions import AcademicMarketError, ConfigurationError
from academic_market.mc import MonteCarloRunner
from academic_market.reporting.metrics import (
    calculate_simple_summary,
    format_key_findings,
    key_findings,
    summarize_scenario_results,
)
from academic_market.simulation import run_one_simulation

# Import logging configuration
from logging_config import ERROR_LOGGER, PERFORMANCE_LOGGER, SIMULATION_LOGGER, setup_logging

# Get logger for this module
logger = logging.getLogger(__name__)

# Directory for log files
LOG_DIR = Path("output_dev/simulation_logs")


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to a YAML run configuration (simulation, recession_effects, scenarios, monte_carlo)."
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )
    parser.add_argument(
        "--log-dir",
        type=str,
        default=str(LOG_DIR),
        help=f"Directory to store log files (default: {LOG_DIR})"
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default=None,
        help="Directory to save CSV and plot outputs. Nothing is written if omitted."
    )
    parser.add_argument("--years", type=int, default=None, help="Number of years to simulate.")
    parser.add_argument("--cohort", type=int, default=None, help="New PhDs per year.")
    parser.add_argument("--departments", type=int, default=None, help="Number of hiring departments.")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with the ``run`` and ``scenarios`` subcommands."""
    parser = argparse.ArgumentParser(
        prog="academic-market",
        description="Agent-based simulation of the academic job market around the 2008 recession.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run a single simulation.")
    _add_common_arguments(run_parser)
    run_parser.add_argument("--seed", type=int, default=123, help="Random seed (default: 123).")
    run_parser.add_argument(
        "--scenario",
        type=str,
        default=None,
        help="Scenario key (predefined, or defined in --config/--scenarios-path). "
             "Omit for the default recession."
    )
    run_parser.add_argument(
        "--scenarios-path",
        type=str,
        default=None,
        help="YAML scenario file or directory of scenario files."
    )
    run_parser.add_argument("--plots", action="store_true", help="Also write diagnostic plots.")

    mc_parser = subparsers.add_parser("scenarios", help="Monte Carlo analysis across scenarios.")
    _add_common_arguments(mc_parser)
    mc_parser.add_argument("--n-sims", type=int, default=None, help="Simulations per scenario.")
    mc_parser.add_argument("--n-workers", type=int, default=None, help="Worker processes (1 = in-process).")
    mc_parser.add_argument("--base-seed", type=int, default=None, help="Offset added to every seed.")
    mc_parser.add_argument(
        "--scenarios-path",
        type=str,
        default=None,
        help="YAML scenario file or directory; defaults to the predefined scenarios."
    )
    mc_parser.add_argument(
        "--only",
        nargs="+",
        default=None,
        help="Restrict the analysis to these scenario keys."
    )
    mc_parser.add_argument("--file-prefix", type=str, default="academic_market", help="Output file prefix.")
    mc_parser.add_argument("--no-plots", action="store_true", help="Skip writing plots.")

    return parser


def initialize_logging(debug: bool = False, log_dir: Path = LOG_DIR) -> None:
    """Initialize the logging configuration.

    Args:
        debug: Whether to enable debug logging
        log_dir: Directory to store log files
    """
    setup_logging(log_dir=log_dir, debug=debug)

    logger.info("Starting academic market simulation")
    logger.info(f"Command line arguments: {sys.argv}")
    logger.info(f"Python version: {sys.version}")
    logger.info(f"Pandas version: {pd.__version__}")
    logger.info(f"NumPy version: {np.__version__}")

    if debug:
        logger.debug("Debug logging enabled")


def _resolve_configuration(args: argparse.Namespace) -> Tuple[SimulationParams, Dict[str, Scenario], Dict]:
    """Combine the config file, scenario files and command-line overrides."""
    if args.config:
        logger.info(f"Loading configuration from: {args.config}")
        params, scenarios, mc_options = load_run_config(args.config)
    else:
        params, scenarios, mc_options = DEFAULT_PARAMS, {}, {}

    if args.scenarios_path:
        scenarios = {**scenarios, **load_scenarios(args.scenarios_path)}

    params = build_params(
        params,
        simulation_years=args.years,
        annual_phd_cohort=args.cohort,
        num_departments=args.departments,
    )
    return params, scenarios, mc_options


def _pick_scenarios(
    available: Dict[str, Scenario], only: Optional[List[str]]
) -> Dict[str, Scenario]:
    if not only:
        return available
    unknown = [key for key in only if key not in available]
    if unknown:
        raise ConfigurationError(f"Unknown scenario(s) {unknown}; available: {sorted(available)}")
    return {key: available[key] for key in only}


def command_run(args: argparse.Namespace) -> int:
    params, scenarios, _ = _resolve_configuration(args)

    scenario = None
    if args.scenario:
        available = {**get_predefined_scenarios(), **scenarios}
        scenario = _pick_scenarios(available, [args.scenario])[args.scenario]

    result = run_one_simulation(seed=args.seed, scenario=scenario, params=params)

    print("\nYearly market statistics:")
    print(result.yearly_stats.to_string(index=False))
    print("\nSummary:")
    for key, value in calculate_simple_summary(result.yearly_stats, params).items():
        print(f"  {key}: {value:.3f}" if isinstance(value, float) else f"  {key}: {value}")
    print(
        f"\nCandidates created: {result.total_candidates}, resolved: {len(result.candidate_outcomes)}, "
        f"still active: {len(result.active_candidates)}"
    )

    if args.output_dir:
        output_dir = Path(args.output_dir)
        save_simulation_result(result, output_dir)
        if args.plots:
            from academic_market.reporting.plots import plot_single_simulation

            plot_single_simulation(result.yearly_stats, output_dir, params, file_prefix=f"seed{result.seed}")
        print(f"\nResults saved to: {output_dir}")
    return 0


def command_scenarios(args: argparse.Namespace) -> int:
    params, scenarios, mc_options = _resolve_configuration(args)
    scenarios = _pick_scenarios(scenarios or get_predefined_scenarios(), args.only)

    runner = MonteCarloRunner(
        scenarios=scenarios,
        n_sims=args.n_sims or mc_options.get("n_sims", 100),
        n_workers=args.n_workers or mc_options.get("n_workers"),
        params=params,
        base_seed=args.base_seed if args.base_seed is not None else mc_options.get("base_seed", 0),
    )
    print(f"Running {len(scenarios)} scenarios with {runner.n_sims} simulations each "
          f"on {runner.n_workers} worker(s)")
    results = runner.run()

    if results.failures:
        print(f"Warning: {len(results.failures)} run(s) failed; see the error log for details.")

    summary = summarize_scenario_results(results, params)
    findings = key_findings(summary["period_summary"])
    print("\n" + format_key_findings(findings))

    if args.output_dir:
        output_dir = Path(args.output_dir)
        files = save_summary_tables(summary, output_dir, file_prefix=args.file_prefix)
        if not args.no_plots:
            from academic_market.reporting.plots import create_analysis_plots

            files.update(create_analysis_plots(summary, output_dir, params, file_prefix=args.file_prefix))
        print(f"\nResults saved to: {output_dir}")
        for path in files.values():
            print(f"  - {path.name}")
    return 1 if results.n_completed == 0 else 0


COMMANDS = {
    "run": command_run,
    "scenarios": command_scenarios,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the academic market CLI."""
    args = build_parser().parse_args(argv)
    initialize_logging(debug=args.debug, log_dir=Path(args.log_dir))

    sim_logger = logging.getLogger(SIMULATION_LOGGER)
    perf_logger = logging.getLogger(PERFORMANCE_LOGGER)
    err_logger = logging.getLogger(ERROR_LOGGER)

    sim_logger.info(f"Starting '{args.command}' with arguments: {vars(args)}")
    perf_logger.info("Performance monitoring initialized")

    try:
        return COMMANDS[args.command](args)
    except AcademicMarketError as e:
        err_logger.error(f"{type(e).__name__}: {e}", exc_info=args.debug)
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
