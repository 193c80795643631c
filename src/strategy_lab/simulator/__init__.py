"""Backtest simulation helpers."""

from strategy_lab.simulator.engine import BacktestSimulator, SimulationConfig
from strategy_lab.simulator.market_data import load_bars_csv, normalize_bars
from strategy_lab.simulator.models import (
    BacktestResult,
    EquityPoint,
    MarketBar,
    Position,
    Signal,
    SignalAction,
    SimulationOutcome,
    TradeRecord,
    TradeType,
)
from strategy_lab.simulator.performance import (
    DrawdownTracker,
    aggregate_performance,
    max_drawdown_percent,
)

__all__ = [
    "BacktestResult",
    "BacktestSimulator",
    "DrawdownTracker",
    "EquityPoint",
    "MarketBar",
    "Position",
    "Signal",
    "SignalAction",
    "SimulationConfig",
    "SimulationOutcome",
    "TradeRecord",
    "TradeType",
    "aggregate_performance",
    "load_bars_csv",
    "max_drawdown_percent",
    "normalize_bars",
]
