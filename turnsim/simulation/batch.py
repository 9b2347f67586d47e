"""
Batch driver - many seeds, one isolated Simulation each.

Provides:
1. BatchConfig - worker, chunking and error-handling knobs
2. BatchResult - per-iteration results, errors and aggregate statistics
3. BatchSimulator - runs the iterations in a process pool (or in-process)

Every iteration builds its own Simulation from the shared SimConfig with a
derived seed, so results never depend on which worker ran them or in what
order chunks completed. Results are returned in seed order.

Usage:
    batch = BatchSimulator(load_config("battle.json"), BatchConfig(iterations=1000))
    result = batch.run()
    print(result.summary())
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import FIRST_COMPLETED, Future, ProcessPoolExecutor, wait
from dataclasses import dataclass, field
from multiprocessing import cpu_count
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import numpy as np

from .config import SimConfig
from .simulation import IterationResult, Simulation

logger = logging.getLogger(__name__)

Seed = Union[int, str]


# =============================================================================
# Configuration
# =============================================================================

@dataclass
class BatchConfig:
    """Configuration for a batch of simulations."""

    iterations: int = 100
    n_workers: int = 0  # 0 = auto-detect (cpu_count - 1); 1 = run in-process
    chunk_size: int = 25  # Iterations per task for IPC efficiency

    # Progress tracking
    report_interval: int = 100  # Log progress every N iterations

    # Error handling
    continue_on_error: bool = True  # Record failed iterations and keep going
    max_errors: int = 100  # Stop submitting work after this many failures

    def __post_init__(self):
        if self.n_workers <= 0:
            # Leave one core for main process
            self.n_workers = max(1, cpu_count() - 1)
        if self.chunk_size <= 0:
            self.chunk_size = 1


def derive_seeds(base: Seed, count: int) -> List[Seed]:
    """Seeds for `count` iterations: base+i for ints, base + zero-padded i for strings."""
    if isinstance(base, int):
        return [base + i for i in range(count)]
    return [f"{base}{i:04d}" for i in range(count)]


# =============================================================================
# Result
# =============================================================================

def _describe(values: List[float]) -> Dict[str, float]:
    if not values:
        return {"mean": 0.0, "std": 0.0, "min": 0.0, "p5": 0.0, "p50": 0.0, "p95": 0.0, "max": 0.0}
    arr = np.asarray(values, dtype=np.float64)
    p5, p50, p95 = np.percentile(arr, [5, 50, 95])
    return {
        "mean": float(arr.mean()),
        "std": float(arr.std()),
        "min": float(arr.min()),
        "p5": float(p5),
        "p50": float(p50),
        "p95": float(p95),
        "max": float(arr.max()),
    }


@dataclass
class BatchResult:
    """Result of a batch run."""

    total_tasks: int
    completed_tasks: int
    failed_tasks: int
    total_time_ms: float
    tasks_per_second: float
    cancelled: bool = False

    # Per-iteration results, in seed order
    results: List[IterationResult] = field(default_factory=list)
    errors: List[Tuple[Seed, str]] = field(default_factory=list)  # (seed, error_msg)

    def success_rate(self) -> float:
        """Get success rate as percentage."""
        if self.total_tasks == 0:
            return 0.0
        return self.completed_tasks / self.total_tasks * 100

    def win_rate(self) -> float:
        if not self.results:
            return 0.0
        return float(np.mean([r.victory for r in self.results]))

    def damage_stats(self) -> Dict[str, float]:
        return _describe([r.total_damage for r in self.results])

    def turn_stats(self) -> Dict[str, float]:
        return _describe([float(r.turns) for r in self.results])

    def cycle_stats(self) -> Dict[str, float]:
        return _describe([float(r.cycles) for r in self.results])

    def summary(self) -> Dict[str, Any]:
        return {
            "total_tasks": self.total_tasks,
            "completed_tasks": self.completed_tasks,
            "failed_tasks": self.failed_tasks,
            "cancelled": self.cancelled,
            "success_rate": self.success_rate(),
            "win_rate": self.win_rate(),
            "total_damage": self.damage_stats(),
            "turns": self.turn_stats(),
            "cycles": self.cycle_stats(),
            "total_time_ms": self.total_time_ms,
            "tasks_per_second": self.tasks_per_second,
            "errors": [[seed, msg] for seed, msg in self.errors],
        }


# =============================================================================
# Worker functions (run in separate processes)
# =============================================================================

# (seed, result or None, error message or None)
_Outcome = Tuple[Seed, Optional[IterationResult], Optional[str]]


def _run_one(config: SimConfig, seed: Seed, continue_on_error: bool,
             cancel: Optional[threading.Event] = None) -> _Outcome:
    try:
        return seed, Simulation(config.with_seed(seed)).run(cancel), None
    except Exception as e:
        if not continue_on_error:
            raise
        return seed, None, f"{type(e).__name__}: {e}"


def _run_chunk(config: SimConfig, seeds: List[Seed], continue_on_error: bool) -> List[_Outcome]:
    """Run a chunk of iterations."""
    return [_run_one(config, seed, continue_on_error) for seed in seeds]


# =============================================================================
# Batch simulator
# =============================================================================

class BatchSimulator:
    """
    Runs `iterations` independent simulations of one SimConfig.

    With n_workers > 1 chunks go to a ProcessPoolExecutor. At most two
    chunks per worker are in flight; cancellation and the error limit stop
    further submissions, and chunks already running finish normally.
    """

    def __init__(self, config: SimConfig, batch: Optional[BatchConfig] = None):
        self.config = config
        self.batch = batch or BatchConfig()

    def seeds(self) -> List[Seed]:
        return derive_seeds(self.config.seed, self.batch.iterations)

    def run(
        self,
        cancel: Optional[threading.Event] = None,
        progress_callback: Optional[Callable[[int, int], None]] = None,
    ) -> BatchResult:
        """
        Args:
            cancel: Set to stop the batch between iterations (in-process) or
                between chunks (process pool)
            progress_callback: Optional callback(done, total)
        """
        seeds = self.seeds()
        start_time = time.perf_counter()
        logger.info("batch start: %d iterations, %d worker(s)", len(seeds), self.batch.n_workers)

        outcomes: Dict[Seed, _Outcome] = {}
        if self.batch.n_workers <= 1:
            cancelled = self._run_serial(seeds, outcomes, cancel, progress_callback)
        else:
            cancelled = self._run_parallel(seeds, outcomes, cancel, progress_callback)

        results: List[IterationResult] = []
        errors: List[Tuple[Seed, str]] = []
        for seed in seeds:
            if seed not in outcomes:
                continue
            _, result, error = outcomes[seed]
            if result is not None:
                results.append(result)
            else:
                errors.append((seed, error))

        total_time_ms = (time.perf_counter() - start_time) * 1000
        tasks_per_second = len(results) / (total_time_ms / 1000) if total_time_ms > 0 else 0

        logger.info("batch finished: %d ok, %d failed, %.0f ms",
                    len(results), len(errors), total_time_ms)
        return BatchResult(
            total_tasks=len(seeds),
            completed_tasks=len(results),
            failed_tasks=len(errors),
            total_time_ms=total_time_ms,
            tasks_per_second=tasks_per_second,
            cancelled=cancelled,
            results=results,
            errors=errors,
        )

    def _record(self, outcome: _Outcome, outcomes: Dict[Seed, _Outcome]) -> int:
        """Store one outcome; returns 1 if it was a failure, else 0."""
        seed, _, error = outcome
        outcomes[seed] = outcome
        if error is None:
            return 0
        logger.error("iteration failed (seed=%s): %s", seed, error)
        return 1

    def _progress(self, done: int, total: int, callback: Optional[Callable[[int, int], None]]) -> None:
        if callback:
            callback(done, total)
        if self.batch.report_interval and done % self.batch.report_interval == 0:
            logger.info("batch progress: %d/%d", done, total)

    def _run_serial(self, seeds, outcomes, cancel, progress_callback) -> bool:
        failures = 0
        for seed in seeds:
            if cancel is not None and cancel.is_set():
                logger.warning("batch cancelled after %d iterations", len(outcomes))
                return True
            outcome = _run_one(self.config, seed, self.batch.continue_on_error, cancel)
            failures += self._record(outcome, outcomes)
            self._progress(len(outcomes), len(seeds), progress_callback)
            if failures >= self.batch.max_errors:
                logger.warning("batch stopped: %d errors", failures)
                break
        return False

    def _run_parallel(self, seeds, outcomes, cancel, progress_callback) -> bool:
        size = self.batch.chunk_size
        chunks = [seeds[i:i + size] for i in range(0, len(seeds), size)]
        max_in_flight = self.batch.n_workers * 2
        cancelled = False
        failures = 0

        executor = ProcessPoolExecutor(max_workers=self.batch.n_workers)
        try:
            pending: List[Future] = []
            next_chunk = 0
            while next_chunk < len(chunks) or pending:
                stop = failures >= self.batch.max_errors
                if cancel is not None and cancel.is_set() and not cancelled:
                    logger.warning("batch cancelled; %d chunk(s) not submitted", len(chunks) - next_chunk)
                    cancelled = True
                while not (cancelled or stop) and next_chunk < len(chunks) and len(pending) < max_in_flight:
                    pending.append(executor.submit(
                        _run_chunk, self.config, chunks[next_chunk], self.batch.continue_on_error,
                    ))
                    next_chunk += 1
                if not pending:
                    break

                done, not_done = wait(pending, return_when=FIRST_COMPLETED)
                pending = list(not_done)
                for future in done:
                    for outcome in future.result():
                        failures += self._record(outcome, outcomes)
                        self._progress(len(outcomes), len(seeds), progress_callback)
                if failures >= self.batch.max_errors and next_chunk < len(chunks):
                    logger.warning("batch stopped: %d errors", failures)
                    next_chunk = len(chunks)
        finally:
            executor.shutdown(wait=True, cancel_futures=True)
        return cancelled


__all__ = ["BatchConfig", "BatchResult", "BatchSimulator", "derive_seeds"]
