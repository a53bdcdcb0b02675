"""
Interactive planning session and batch planning.

PlanningSession recomputes the plan whenever an input changes. A newer
request supersedes any older one still pending: the older future is
cancelled if it has not started, and its result is dropped if it finishes
late. plan_batch fans independent plans out over worker processes.
"""

import logging
import threading
from concurrent.futures import Future, ProcessPoolExecutor, ThreadPoolExecutor
from dataclasses import replace
from multiprocessing import cpu_count
from typing import List, Optional

from .planner import DiveParameters, DivePlanner, PlanningResult

logger = logging.getLogger(__name__)


class PlanningSession:
    """Keeps the latest plan for a set of dive parameters that may change."""

    def __init__(self, params: DiveParameters, planner: Optional[DivePlanner] = None):
        self.planner = planner or DivePlanner()
        self._executor = ThreadPoolExecutor(max_workers=1)
        self._lock = threading.Lock()
        self._generation = 0
        self._pending: Optional[Future] = None
        self._latest: Optional[PlanningResult] = None
        self.params = params
        self._submit(params)

    def _run(self, generation: int, params: DiveParameters) -> Optional[PlanningResult]:
        result = self.planner.plan(params)
        with self._lock:
            if generation != self._generation:
                logger.debug(f"Discarding superseded plan #{generation}")
                return None
            self._latest = result
        return result

    def _submit(self, params: DiveParameters) -> Future:
        with self._lock:
            self._generation += 1
            generation = self._generation
            if self._pending is not None and self._pending.cancel():
                logger.debug(f"Cancelled pending plan #{generation - 1}")
            self._latest = None
            self._pending = self._executor.submit(self._run, generation, params)
            return self._pending

    def update(self, **changes) -> Future:
        """Replace some inputs and restart planning.

        Raises InvalidDiveParametersError before anything is scheduled if
        the new inputs are invalid.
        """
        params = replace(self.params, **changes)
        self.params = params
        return self._submit(params)

    @property
    def latest(self) -> Optional[PlanningResult]:
        """Plan for the current parameters, or None while it is computing."""
        with self._lock:
            return self._latest

    def result(self, timeout: Optional[float] = None) -> Optional[PlanningResult]:
        """Wait for the current request and return its plan.

        Returns None if another update() superseded the request meanwhile.
        """
        with self._lock:
            pending = self._pending
        return pending.result(timeout=timeout)

    def close(self) -> None:
        self._executor.shutdown(wait=True, cancel_futures=True)

    def __enter__(self) -> "PlanningSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def _plan_single(params: DiveParameters) -> PlanningResult:
    """Helper function for parallel planning."""
    return DivePlanner().plan(params)


def plan_batch(
    params_list: List[DiveParameters], n_workers: Optional[int] = None
) -> List[PlanningResult]:
    """Plan many independent dives in parallel, results in input order."""
    if not params_list:
        return []
    if n_workers is None:
        n_workers = max(1, min(cpu_count(), len(params_list)))
    if n_workers == 1:
        return [_plan_single(p) for p in params_list]

    with ProcessPoolExecutor(max_workers=n_workers) as executor:
        return list(executor.map(_plan_single, params_list))
