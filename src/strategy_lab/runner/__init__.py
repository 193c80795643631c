"""Backtest run lifecycle, persistence hooks and worker pool."""

from strategy_lab.runner.context import create_run_id
from strategy_lab.runner.models import (
    BacktestRequest,
    BacktestRun,
    BacktestStatus,
    Exchange,
    Timeframe,
)
from strategy_lab.runner.pool import BacktestPool
from strategy_lab.runner.service import BacktestRunner
from strategy_lab.runner.store import (
    JsonRunStore,
    RunStore,
    serialize_equity_curve,
    serialize_result,
    serialize_run,
    serialize_trade,
)

__all__ = [
    "BacktestPool",
    "BacktestRequest",
    "BacktestRun",
    "BacktestRunner",
    "BacktestStatus",
    "Exchange",
    "JsonRunStore",
    "RunStore",
    "Timeframe",
    "create_run_id",
    "serialize_equity_curve",
    "serialize_result",
    "serialize_run",
    "serialize_trade",
]
