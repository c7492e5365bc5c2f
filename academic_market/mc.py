# academic_market/mc.py
"""
Monte Carlo driver running every scenario many times with reproducible seeds.

Seeds depend only on the simulation index (``base_seed + sim_id * 1000``), so all
scenarios share common random numbers for a given ``sim_id``.
"""

import concurrent.futures
import os
import threading
import time
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Mapping, NamedTuple, Optional

import pandas as pd

from academic_market.config.params import DEFAULT_PARAMS, SimulationParams
from academic_market.config.scenarios import Scenario, get_predefined_scenarios
from academic_market.exceptions import ConfigurationError
from academic_market.reporting.metrics import calculate_transition_rates
from academic_market.simulation import run_one_simulation
from logging_config import ERROR_LOGGER, PERFORMANCE_LOGGER, SIMULATION_LOGGER, get_logger

logger = get_logger(SIMULATION_LOGGER)
perf_logger = get_logger(PERFORMANCE_LOGGER)
error_logger = get_logger(ERROR_LOGGER)

__all__ = ["MonteCarloRunner", "MonteCarloResults", "RunResult", "RunFailure", "seed_for"]

SEED_STRIDE = 1000


def seed_for(sim_id: int, base_seed: int = 0) -> int:
    return base_seed + sim_id * SEED_STRIDE


@dataclass
class RunResult:
    sim_id: int
    seed: int
    scenario: str
    scenario_label: str
    test_factor: str
    transition_rates: pd.DataFrame
    yearly_stats: pd.DataFrame


@dataclass
class RunFailure:
    sim_id: int
    seed: int
    scenario: str
    error: str


@dataclass
class MonteCarloResults:
    """Completed runs grouped by scenario key, plus the runs that failed.

    Iterating yields every successful run, scenario by scenario, in sim_id order.
    """

    runs: Dict[str, List[RunResult]] = field(default_factory=dict)
    failures: List[RunFailure] = field(default_factory=list)
    cancelled: int = 0

    def __iter__(self) -> Iterator[RunResult]:
        for scenario_runs in self.runs.values():
            yield from scenario_runs

    @property
    def n_completed(self) -> int:
        return sum(len(r) for r in self.runs.values())


class _Task(NamedTuple):
    scenario_key: str
    scenario: Scenario
    sim_id: int
    seed: int
    params: SimulationParams


def _run_task(task: _Task) -> RunResult:
    """Worker entry point; module level so it can be pickled into a process pool."""
    result = run_one_simulation(seed=task.seed, scenario=task.scenario, params=task.params)
    return RunResult(
        sim_id=task.sim_id,
        seed=task.seed,
        scenario=task.scenario_key,
        scenario_label=task.scenario.name,
        test_factor=task.scenario.factor_label,
        transition_rates=calculate_transition_rates(result.candidate_outcomes, task.params),
        yearly_stats=result.yearly_stats,
    )


class MonteCarloRunner:
    """
    Drive Monte Carlo simulations for multiple scenarios.

    Attributes:
        scenarios: mapping of scenario keys to Scenario objects
        n_sims: number of Monte Carlo iterations per scenario
        n_workers: worker processes; 1 runs everything in-process
        params: simulation parameters shared by every run
        base_seed: offset added to every per-simulation seed
    """

    def __init__(
        self,
        scenarios: Optional[Mapping[str, Scenario]] = None,
        n_sims: int = 100,
        n_workers: Optional[int] = None,
        params: Optional[SimulationParams] = None,
        base_seed: int = 0,
    ):
        if n_sims < 1:
            raise ConfigurationError(f"n_sims must be at least 1, got {n_sims}")
        if n_workers is None:
            n_workers = max(1, (os.cpu_count() or 2) - 1)
        if n_workers < 1:
            raise ConfigurationError(f"n_workers must be at least 1, got {n_workers}")
        self.scenarios = dict(scenarios) if scenarios is not None else get_predefined_scenarios()
        if not self.scenarios:
            raise ConfigurationError("At least one scenario is required")
        self.n_sims = n_sims
        self.n_workers = n_workers
        self.params = params or DEFAULT_PARAMS
        self.base_seed = base_seed
        self._stop_event = threading.Event()

    def cancel(self) -> None:
        """Ask a running :meth:`run` to stop; tasks not yet started are skipped."""
        self._stop_event.set()

    def _tasks(self) -> List[_Task]:
        return [
            _Task(key, scenario, sim_id, seed_for(sim_id, self.base_seed), self.params)
            for key, scenario in self.scenarios.items()
            for sim_id in range(1, self.n_sims + 1)
        ]

    def run(self) -> MonteCarloResults:
        """
        Execute all (scenario, simulation) pairs.

        A failing run is recorded in ``failures`` and does not stop its siblings.

        Returns:
            MonteCarloResults with runs ordered by scenario then sim_id.
        """
        self._stop_event.clear()
        tasks = self._tasks()
        logger.info(
            f"[MC] Running {len(self.scenarios)} scenarios x {self.n_sims} simulations "
            f"= {len(tasks)} runs on {self.n_workers} worker(s)"
        )
        start = time.perf_counter()

        results = MonteCarloResults(runs={key: [] for key in self.scenarios})
        if self.n_workers == 1:
            self._run_sequential(tasks, results)
        else:
            self._run_parallel(tasks, results)

        for runs in results.runs.values():
            runs.sort(key=lambda r: r.sim_id)
        results.failures.sort(key=lambda f: (f.scenario, f.sim_id))

        elapsed = time.perf_counter() - start
        perf_logger.info(
            f"[MC] {results.n_completed} runs completed, {len(results.failures)} failed, "
            f"{results.cancelled} cancelled in {elapsed:.1f}s"
        )
        return results

    def _record_failure(self, task: _Task, exc: BaseException, results: MonteCarloResults) -> None:
        error_logger.error(
            f"[MC] Run failed: scenario={task.scenario_key} sim_id={task.sim_id} seed={task.seed}: "
            f"{type(exc).__name__}: {exc}"
        )
        results.failures.append(
            RunFailure(task.sim_id, task.seed, task.scenario_key, f"{type(exc).__name__}: {exc}")
        )

    def _run_sequential(self, tasks: List[_Task], results: MonteCarloResults) -> None:
        for i, task in enumerate(tasks):
            if self._stop_event.is_set():
                results.cancelled = len(tasks) - i
                logger.warning(f"[MC] Cancelled; skipping {results.cancelled} remaining runs")
                return
            try:
                run = _run_task(task)
            except Exception as e:
                self._record_failure(task, e, results)
                continue
            results.runs[task.scenario_key].append(run)

    def _run_parallel(self, tasks: List[_Task], results: MonteCarloResults) -> None:
        with ProcessPoolExecutor(max_workers=self.n_workers) as executor:
            future_map: Dict[concurrent.futures.Future, _Task] = {}
            next_idx = 0

            # Keep at most n_workers runs in flight so cancel() leaves little queued work
            while next_idx < len(tasks) and len(future_map) < self.n_workers:
                future_map[executor.submit(_run_task, tasks[next_idx])] = tasks[next_idx]
                next_idx += 1

            while future_map:
                done, _ = concurrent.futures.wait(
                    set(future_map), return_when=concurrent.futures.FIRST_COMPLETED
                )
                for fut in done:
                    task = future_map.pop(fut)
                    try:
                        results.runs[task.scenario_key].append(fut.result())
                    except Exception as e:
                        self._record_failure(task, e, results)

                    if self._stop_event.is_set():
                        continue
                    if next_idx < len(tasks):
                        future_map[executor.submit(_run_task, tasks[next_idx])] = tasks[next_idx]
                        next_idx += 1

            if next_idx < len(tasks):
                results.cancelled = len(tasks) - next_idx
                logger.warning(f"[MC] Cancelled; skipped {results.cancelled} runs never started")
