"""Configuration models for reproducible backtest runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Optional

from strategy_lab.runner.models import BacktestRequest, Exchange, Timeframe


@dataclass(frozen=True)
class StrategyConfig:
    name: str
    parameters: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DataConfig:
    bars_path: Optional[str] = None


@dataclass(frozen=True)
class SimulationOptions:
    enforce_take_profit: bool = False


@dataclass(frozen=True)
class MonitoringConfig:
    log_level: str = "INFO"
    log_file: Optional[str] = None
    audit_log_path: str = "runtime/audit.log"
    runs_dir: str = "runtime/runs"


@dataclass(frozen=True)
class BacktestConfig:
    name: str
    version: str
    run_id_prefix: str
    symbol: str
    strategy: StrategyConfig
    exchange: Exchange = Exchange.BINANCE
    timeframe: Timeframe = Timeframe.ONE_HOUR
    initial_balance: Decimal = Decimal("10000")
    commission_rate: Decimal = Decimal("0.001")
    data: DataConfig = DataConfig()
    simulation: SimulationOptions = SimulationOptions()
    monitoring: MonitoringConfig = MonitoringConfig()

    def to_request(self, run_id: str) -> BacktestRequest:
        return BacktestRequest(
            run_id=run_id,
            name=self.name,
            strategy=self.strategy.name,
            parameters=dict(self.strategy.parameters),
            symbol=self.symbol,
            exchange=self.exchange,
            timeframe=self.timeframe,
            initial_balance=self.initial_balance,
            commission_rate=self.commission_rate,
            enforce_take_profit=self.simulation.enforce_take_profit,
        )
