"""Backtest run requests, status and lifecycle records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any, Optional, Union

from strategy_lab.errors import UnsupportedConfigurationError
from strategy_lab.simulator.models import BacktestResult, EquityPoint, TradeRecord, to_decimal
from strategy_lab.strategy.parameters import StrategyParameters


class BacktestStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class Timeframe(str, Enum):
    ONE_MINUTE = "1m"
    FIVE_MINUTES = "5m"
    FIFTEEN_MINUTES = "15m"
    THIRTY_MINUTES = "30m"
    ONE_HOUR = "1h"
    FOUR_HOURS = "4h"
    ONE_DAY = "1d"
    ONE_WEEK = "1w"
    ONE_MONTH = "1M"

    @property
    def minutes(self) -> int:
        return _TIMEFRAME_MINUTES[self]

    @staticmethod
    def parse(value: Any) -> "Timeframe":
        if isinstance(value, Timeframe):
            return value
        try:
            return Timeframe(str(value))
        except ValueError as exc:
            raise UnsupportedConfigurationError(f"Unsupported timeframe: {value}") from exc


_TIMEFRAME_MINUTES = {
    Timeframe.ONE_MINUTE: 1,
    Timeframe.FIVE_MINUTES: 5,
    Timeframe.FIFTEEN_MINUTES: 15,
    Timeframe.THIRTY_MINUTES: 30,
    Timeframe.ONE_HOUR: 60,
    Timeframe.FOUR_HOURS: 240,
    Timeframe.ONE_DAY: 1440,
    Timeframe.ONE_WEEK: 10080,
    Timeframe.ONE_MONTH: 43200,
}


class Exchange(str, Enum):
    BINANCE = "binance"
    COINBASE_PRO = "coinbase_pro"
    KRAKEN = "kraken"
    BITFINEX = "bitfinex"
    KUCOIN = "kucoin"
    HUOBI = "huobi"
    OKX = "okx"
    BYBIT = "bybit"

    @staticmethod
    def parse(value: Any) -> "Exchange":
        if isinstance(value, Exchange):
            return value
        try:
            return Exchange(str(value).lower())
        except ValueError as exc:
            raise UnsupportedConfigurationError(f"Unsupported exchange: {value}") from exc


@dataclass(frozen=True)
class BacktestRequest:
    run_id: str
    strategy: str
    symbol: str
    parameters: Union[StrategyParameters, dict[str, Any]] = field(default_factory=dict)
    name: str = ""
    exchange: Exchange = Exchange.BINANCE
    timeframe: Timeframe = Timeframe.ONE_HOUR
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    initial_balance: Decimal = Decimal("10000")
    commission_rate: Decimal = Decimal("0.001")
    enforce_take_profit: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "exchange", Exchange.parse(self.exchange))
        object.__setattr__(self, "timeframe", Timeframe.parse(self.timeframe))
        object.__setattr__(self, "initial_balance", to_decimal(self.initial_balance))
        object.__setattr__(self, "commission_rate", to_decimal(self.commission_rate))


@dataclass
class BacktestRun:
    request: BacktestRequest
    parameters: StrategyParameters
    created_at: datetime
    status: BacktestStatus = BacktestStatus.PENDING
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    execution_duration: Optional[timedelta] = None
    error_message: str = ""
    result: Optional[BacktestResult] = None
    trades: list[TradeRecord] = field(default_factory=list)
    equity_curve: list[EquityPoint] = field(default_factory=list)

    @property
    def run_id(self) -> str:
        return self.request.run_id

    def mark_running(self, now: datetime) -> None:
        self.status = BacktestStatus.RUNNING
        self.started_at = now

    def mark_finished(self, status: BacktestStatus, now: datetime, error_message: str = "") -> None:
        self.status = status
        self.completed_at = now
        self.execution_duration = now - (self.started_at or self.created_at)
        self.error_message = error_message
