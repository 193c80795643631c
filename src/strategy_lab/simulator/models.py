"""Simulation data structures."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional


def to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    try:
        return Decimal(value)
    except InvalidOperation as exc:
        raise ValueError(f"Not a decimal number: {value!r}") from exc


def optional_decimal(value: Any) -> Optional[Decimal]:
    if value is None:
        return None
    return to_decimal(value)


@dataclass(frozen=True)
class MarketBar:
    timestamp: datetime
    open: Decimal
    high: Decimal
    low: Decimal
    close: Decimal
    volume: Decimal
    vwap: Optional[Decimal] = None
    trade_count: Optional[int] = None

    def __post_init__(self) -> None:
        for name in ("open", "high", "low", "close", "volume"):
            object.__setattr__(self, name, to_decimal(getattr(self, name)))
        object.__setattr__(self, "vwap", optional_decimal(self.vwap))


class SignalAction(str, Enum):
    BUY = "buy"
    SELL = "sell"
    HOLD = "hold"


@dataclass(frozen=True)
class Signal:
    action: SignalAction
    reason: str
    entry_price: Optional[Decimal] = None
    stop_loss: Optional[Decimal] = None
    take_profit: Optional[Decimal] = None
    confidence: Optional[Decimal] = None

    @staticmethod
    def hold(reason: str) -> "Signal":
        return Signal(action=SignalAction.HOLD, reason=reason)


@dataclass
class Position:
    quantity: Decimal
    entry_price: Decimal
    entry_time: datetime
    current_value: Decimal
    unrealized_pnl: Decimal = Decimal(0)
    stop_price: Optional[Decimal] = None
    take_profit: Optional[Decimal] = None
    cost_basis: Decimal = Decimal(0)

    def mark(self, price: Decimal) -> None:
        self.current_value = self.quantity * price
        self.unrealized_pnl = self.current_value - self.quantity * self.entry_price


class TradeType(str, Enum):
    BUY = "buy"
    SELL = "sell"


@dataclass(frozen=True)
class TradeRecord:
    symbol: str
    exchange: str
    trade_type: TradeType
    price: Decimal
    quantity: Decimal
    value: Decimal
    commission: Decimal
    executed_at: datetime
    reason: str
    net_value: Decimal
    balance_before: Decimal
    balance_after: Decimal
    confidence: Optional[Decimal] = None
    realized_pnl: Optional[Decimal] = None
    realized_pnl_percent: Optional[Decimal] = None


@dataclass(frozen=True)
class EquityPoint:
    time: datetime
    equity: Decimal
    drawdown_percent: Decimal = Decimal(0)


@dataclass(frozen=True)
class BacktestResult:
    initial_balance: Decimal
    final_balance: Decimal
    total_return_percent: Decimal
    max_drawdown_percent: Decimal
    total_trades: int
    winning_trades: int
    losing_trades: int
    win_rate_percent: Decimal
    average_trade_return_percent: Decimal = Decimal(0)
    sharpe_ratio: Decimal = Decimal(0)


@dataclass(frozen=True)
class SimulationOutcome:
    trades: list[TradeRecord]
    equity_curve: list[EquityPoint]
    result: BacktestResult
    bars_processed: int = 0
    stop_loss_exits: int = 0
