"""Performance aggregation over trade logs and equity paths."""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Optional, Sequence

from strategy_lab.simulator.models import BacktestResult, TradeRecord, TradeType

HUNDRED = Decimal(100)
ZERO = Decimal(0)


class DrawdownTracker:
    def __init__(self, initial_equity: Decimal) -> None:
        self.peak = initial_equity
        self.max_drawdown_percent = ZERO
        self.current_drawdown_percent = ZERO

    def update(self, equity: Decimal) -> Decimal:
        if equity > self.peak:
            self.peak = equity
        if equity < self.peak and self.peak > 0:
            self.current_drawdown_percent = (self.peak - equity) / self.peak * HUNDRED
            self.max_drawdown_percent = max(self.max_drawdown_percent, self.current_drawdown_percent)
        else:
            self.current_drawdown_percent = ZERO
        return self.current_drawdown_percent


def max_drawdown_percent(equity_values: Iterable[Decimal]) -> Decimal:
    tracker: Optional[DrawdownTracker] = None
    for equity in equity_values:
        if tracker is None:
            tracker = DrawdownTracker(equity)
        tracker.update(equity)
    return tracker.max_drawdown_percent if tracker is not None else ZERO


def attribute_trades(trades: Iterable[TradeRecord]) -> tuple[int, int, list[Decimal]]:
    """Count winning and losing sells against the most recent buy price.

    Sells with no earlier buy are left out of the counts.
    """
    winning = 0
    losing = 0
    returns: list[Decimal] = []
    last_buy_price: Optional[Decimal] = None
    for trade in trades:
        if trade.trade_type == TradeType.BUY:
            last_buy_price = trade.price
            continue
        if last_buy_price is None:
            continue
        if trade.price > last_buy_price:
            winning += 1
        else:
            losing += 1
        if last_buy_price > 0:
            returns.append((trade.price - last_buy_price) / last_buy_price * HUNDRED)
    return winning, losing, returns


def sharpe_ratio(equity_values: Sequence[Decimal]) -> Decimal:
    returns = [
        (current - previous) / previous
        for previous, current in zip(equity_values, equity_values[1:])
        if previous > 0
    ]
    if len(returns) < 2:
        return ZERO
    mean = sum(returns, ZERO) / len(returns)
    variance = sum(((value - mean) ** 2 for value in returns), ZERO) / len(returns)
    deviation = variance.sqrt()
    if deviation == 0:
        return ZERO
    return mean / deviation


def aggregate_performance(
    initial_balance: Decimal,
    final_balance: Decimal,
    trades: Sequence[TradeRecord],
    equity_values: Sequence[Decimal] = (),
) -> BacktestResult:
    total_trades = len(trades)
    winning, losing, returns = attribute_trades(trades)

    if initial_balance:
        total_return = (final_balance - initial_balance) / initial_balance * HUNDRED
    else:
        total_return = ZERO
    win_rate = Decimal(winning) / Decimal(total_trades) * HUNDRED if total_trades else ZERO
    average_return = sum(returns, ZERO) / len(returns) if returns else ZERO
    equity_list = list(equity_values)

    return BacktestResult(
        initial_balance=initial_balance,
        final_balance=final_balance,
        total_return_percent=total_return,
        max_drawdown_percent=max_drawdown_percent(equity_list),
        total_trades=total_trades,
        winning_trades=winning,
        losing_trades=losing,
        win_rate_percent=win_rate,
        average_trade_return_percent=average_return,
        sharpe_ratio=sharpe_ratio(equity_list),
    )
