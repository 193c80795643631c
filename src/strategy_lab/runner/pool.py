"""Thread pool for running independent backtests concurrently."""

from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Iterable, Optional, Sequence

from strategy_lab.runner.models import BacktestRequest, BacktestRun
from strategy_lab.runner.service import BacktestRunner
from strategy_lab.simulator.models import MarketBar
from strategy_lab.strategy.base import TradingStrategy


class BacktestPool:
    """Runs backtests on worker threads, one execution per run id at a time."""

    def __init__(self, runner: BacktestRunner, max_workers: int = 4) -> None:
        self.runner = runner
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="backtest")
        self._in_flight: set[str] = set()
        self._lock = threading.Lock()

    def __enter__(self) -> "BacktestPool":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    def in_flight(self) -> set[str]:
        with self._lock:
            return set(self._in_flight)

    def submit(
        self,
        request: BacktestRequest,
        bars: Sequence[MarketBar],
        strategy: Optional[TradingStrategy] = None,
    ) -> Future:
        run_id = request.run_id
        with self._lock:
            if run_id in self._in_flight:
                raise RuntimeError(f"Run {run_id} is already executing")
            self._in_flight.add(run_id)
        try:
            future = self._executor.submit(self.runner.execute, request, bars, strategy)
        except Exception:
            self._release(run_id)
            raise
        future.add_done_callback(lambda _: self._release(run_id))
        return future

    def run_all(self, jobs: Iterable[tuple[BacktestRequest, Sequence[MarketBar]]]) -> list[BacktestRun]:
        futures = [self.submit(request, bars) for request, bars in jobs]
        return [future.result() for future in futures]

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def _release(self, run_id: str) -> None:
        with self._lock:
            self._in_flight.discard(run_id)
