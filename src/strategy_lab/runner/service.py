"""Backtest run lifecycle: validation, execution and status reporting."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Sequence

from strategy_lab.errors import BacktestCancelled, InvalidParametersError
from strategy_lab.monitoring.audit import AuditLog
from strategy_lab.runner.models import BacktestRequest, BacktestRun, BacktestStatus
from strategy_lab.runner.store import RunStore, serialize_result
from strategy_lab.simulator.engine import BacktestSimulator, SimulationConfig
from strategy_lab.simulator.models import MarketBar
from strategy_lab.strategy.base import TradingStrategy
from strategy_lab.strategy.parameters import StrategyParameters
from strategy_lab.strategy.registry import build_strategy

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BacktestRunner:
    """Executes one backtest request at a time and reports its lifecycle.

    Configuration problems (unknown strategy, invalid parameters) raise
    before any run record exists. Anything that goes wrong once the bar
    loop starts is captured on the returned run as ``failed``.
    """

    def __init__(
        self,
        store: Optional[RunStore] = None,
        audit_log: Optional[AuditLog] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.store = store
        self.audit_log = audit_log
        self.clock = clock

    def prepare(
        self,
        request: BacktestRequest,
        strategy: Optional[TradingStrategy] = None,
    ) -> tuple[TradingStrategy, StrategyParameters]:
        if strategy is None:
            strategy = build_strategy(request.strategy)
        parameters = request.parameters
        if isinstance(parameters, dict):
            try:
                parameters = strategy.parameters_from_dict(parameters)
            except (TypeError, ValueError) as exc:
                raise InvalidParametersError(f"Invalid parameters for {strategy.name}: {exc}") from exc

        valid, message = strategy.validate_parameters(parameters)
        if not valid:
            raise InvalidParametersError(message)
        if not request.initial_balance.is_finite() or request.initial_balance <= 0:
            raise InvalidParametersError("initial_balance must be greater than 0")
        if not request.commission_rate.is_finite() or not 0 <= request.commission_rate < 1:
            raise InvalidParametersError("commission_rate must be between 0 and 1")
        return strategy, parameters

    def execute(
        self,
        request: BacktestRequest,
        bars: Sequence[MarketBar],
        strategy: Optional[TradingStrategy] = None,
        should_cancel: Optional[Callable[[], bool]] = None,
    ) -> BacktestRun:
        strategy, parameters = self.prepare(request, strategy)
        if parameters.position_size_percent != 100:
            logger.warning(
                "position_size_percent=%s is not applied; run %s commits the full balance",
                parameters.position_size_percent,
                request.run_id,
            )

        run = BacktestRun(request=request, parameters=parameters, created_at=self.clock())
        self._transition(run)
        run.mark_running(self.clock())
        self._transition(run)

        simulator = BacktestSimulator(
            SimulationConfig(
                initial_balance=request.initial_balance,
                commission_rate=request.commission_rate,
                symbol=request.symbol,
                exchange=request.exchange.value,
                enforce_take_profit=request.enforce_take_profit,
            )
        )
        try:
            outcome = simulator.run(bars, strategy, parameters, should_cancel=should_cancel)
        except BacktestCancelled as exc:
            run.mark_finished(BacktestStatus.CANCELLED, self.clock(), str(exc))
            self._transition(run)
            return run
        except Exception as exc:
            logger.exception("Backtest %s failed", run.run_id)
            run.mark_finished(BacktestStatus.FAILED, self.clock(), str(exc) or type(exc).__name__)
            self._transition(run)
            return run

        run.result = outcome.result
        run.trades = outcome.trades
        run.equity_curve = outcome.equity_curve
        run.mark_finished(BacktestStatus.COMPLETED, self.clock())
        self._transition(run)
        return run

    def _transition(self, run: BacktestRun) -> None:
        logger.info("Backtest %s is %s", run.run_id, run.status.value)

        if self.audit_log is not None:
            payload: dict[str, Any] = {
                "status": run.status.value,
                "strategy": run.request.strategy,
                "symbol": run.request.symbol,
            }
            if run.error_message:
                payload["error_message"] = run.error_message
            if run.execution_duration is not None:
                payload["execution_duration_seconds"] = run.execution_duration.total_seconds()
            if run.result is not None:
                payload["result"] = serialize_result(run.result)
            self.audit_log.log("run_status", payload, run_id=run.run_id)

        if self.store is not None:
            if run.status == BacktestStatus.COMPLETED:
                self.store.save_results(run)
            else:
                self.store.save_status(run)
