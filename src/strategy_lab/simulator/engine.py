"""Bar-by-bar backtest simulator."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, Callable, Optional, Sequence

from strategy_lab.errors import BacktestCancelled
from strategy_lab.simulator.models import (
    EquityPoint,
    MarketBar,
    Position,
    Signal,
    SignalAction,
    SimulationOutcome,
    TradeRecord,
    TradeType,
    to_decimal,
)
from strategy_lab.simulator.performance import DrawdownTracker, aggregate_performance

if TYPE_CHECKING:
    from strategy_lab.strategy.base import TradingStrategy
    from strategy_lab.strategy.parameters import StrategyParameters

logger = logging.getLogger(__name__)

HUNDRED = Decimal(100)
ZERO = Decimal(0)

STOP_LOSS_REASON = "Stop Loss"
TAKE_PROFIT_REASON = "Take Profit"
FINAL_CLOSE_REASON = "Final Close"


@dataclass(frozen=True)
class SimulationConfig:
    initial_balance: Decimal
    commission_rate: Decimal = Decimal("0.001")
    symbol: str = ""
    exchange: str = ""
    enforce_take_profit: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "initial_balance", to_decimal(self.initial_balance))
        object.__setattr__(self, "commission_rate", to_decimal(self.commission_rate))


class BacktestSimulator:
    """Single-instrument, all-in, long-only simulator.

    Each bar is processed in a fixed order: stop-loss (and optional
    take-profit) exits first, then mark-to-market, then the strategy
    signal, then the equity and drawdown update. A bar that exits on a
    protective level never consults the strategy.
    """

    def __init__(self, config: SimulationConfig) -> None:
        self.config = config

    def run(
        self,
        bars: Sequence[MarketBar],
        strategy: "TradingStrategy",
        parameters: "StrategyParameters",
        should_cancel: Optional[Callable[[], bool]] = None,
    ) -> SimulationOutcome:
        config = self.config
        balance = config.initial_balance
        position: Optional[Position] = None
        trades: list[TradeRecord] = []
        drawdown = DrawdownTracker(balance)
        equity_curve: list[EquityPoint] = []
        stop_loss_exits = 0

        if bars:
            equity_curve.append(EquityPoint(time=bars[0].timestamp, equity=balance))

        previous: Optional[MarketBar] = None
        for index, bar in enumerate(bars):
            if should_cancel is not None and should_cancel():
                raise BacktestCancelled(f"Backtest cancelled before bar {index}")
            if previous is not None and bar.timestamp < previous.timestamp:
                raise ValueError(
                    f"Bars must be sorted by timestamp: {bar.timestamp} follows {previous.timestamp}"
                )
            previous = bar

            exited = False
            if position is not None:
                if position.stop_price is not None and bar.low <= position.stop_price:
                    balance = self._close(position, position.stop_price, bar, STOP_LOSS_REASON, None, trades)
                    position = None
                    exited = True
                    stop_loss_exits += 1
                elif (
                    config.enforce_take_profit
                    and position.take_profit is not None
                    and bar.high >= position.take_profit
                ):
                    balance = self._close(position, position.take_profit, bar, TAKE_PROFIT_REASON, None, trades)
                    position = None
                    exited = True
                else:
                    position.mark(bar.close)

            if not exited:
                signal = strategy.analyze(bars[: index + 1], position, parameters)
                if signal is None:
                    raise RuntimeError(f"{strategy.name} returned no signal at bar {index}")
                if signal.action == SignalAction.BUY and position is None and balance > 0:
                    opened = self._open(balance, bar, signal, parameters, trades)
                    if opened is not None:
                        position = opened
                        balance = ZERO
                elif signal.action == SignalAction.SELL and position is not None:
                    price = signal.entry_price if signal.entry_price is not None else bar.close
                    balance = self._close(position, price, bar, signal.reason, signal.confidence, trades)
                    position = None

            equity = balance + (position.current_value if position is not None else ZERO)
            current_drawdown = drawdown.update(equity)
            equity_curve.append(EquityPoint(time=bar.timestamp, equity=equity, drawdown_percent=current_drawdown))

        if position is not None:
            last = bars[-1]
            balance = self._close(position, last.close, last, FINAL_CLOSE_REASON, None, trades)
            position = None
            current_drawdown = drawdown.update(balance)
            equity_curve.append(EquityPoint(time=last.timestamp, equity=balance, drawdown_percent=current_drawdown))

        result = aggregate_performance(
            config.initial_balance,
            balance,
            trades,
            [point.equity for point in equity_curve],
        )
        logger.debug(
            "Simulated %s bars for %s: %s trades, final balance %s",
            len(bars),
            strategy.name,
            len(trades),
            balance,
        )
        return SimulationOutcome(
            trades=trades,
            equity_curve=equity_curve,
            result=result,
            bars_processed=len(bars),
            stop_loss_exits=stop_loss_exits,
        )

    def _open(
        self,
        balance: Decimal,
        bar: MarketBar,
        signal: Signal,
        parameters: "StrategyParameters",
        trades: list[TradeRecord],
    ) -> Optional[Position]:
        price = signal.entry_price if signal.entry_price is not None else bar.close
        commission_per_unit = price * self.config.commission_rate
        if price + commission_per_unit > balance:
            logger.debug("Skipping buy at %s: balance %s cannot cover price and commission", price, balance)
            return None

        quantity = balance / (price + commission_per_unit)
        value = quantity * price
        # Total for the fill, not per unit: value + commission equals the committed balance.
        commission = quantity * commission_per_unit
        trades.append(
            TradeRecord(
                symbol=self.config.symbol,
                exchange=self.config.exchange,
                trade_type=TradeType.BUY,
                price=price,
                quantity=quantity,
                value=value,
                commission=commission,
                executed_at=bar.timestamp,
                reason=signal.reason,
                net_value=value + commission,
                balance_before=balance,
                balance_after=ZERO,
                confidence=signal.confidence,
            )
        )

        if parameters.use_atr_for_stops and signal.stop_loss is not None:
            stop_price = signal.stop_loss
        else:
            stop_price = price * (1 - parameters.stop_loss_percent / HUNDRED)
        if signal.take_profit is not None:
            take_profit = signal.take_profit
        else:
            take_profit = price * (1 + parameters.take_profit_percent / HUNDRED)

        position = Position(
            quantity=quantity,
            entry_price=price,
            entry_time=bar.timestamp,
            current_value=quantity * price,
            stop_price=stop_price,
            take_profit=take_profit,
            cost_basis=balance,
        )
        position.mark(bar.close)
        return position

    def _close(
        self,
        position: Position,
        price: Decimal,
        bar: MarketBar,
        reason: str,
        confidence: Optional[Decimal],
        trades: list[TradeRecord],
    ) -> Decimal:
        sale_value = position.quantity * price
        commission = sale_value * self.config.commission_rate
        proceeds = sale_value - commission
        realized = proceeds - position.cost_basis
        realized_percent = realized / position.cost_basis * HUNDRED if position.cost_basis else ZERO
        trades.append(
            TradeRecord(
                symbol=self.config.symbol,
                exchange=self.config.exchange,
                trade_type=TradeType.SELL,
                price=price,
                quantity=position.quantity,
                value=sale_value,
                commission=commission,
                executed_at=bar.timestamp,
                reason=reason,
                net_value=proceeds,
                balance_before=ZERO,
                balance_after=proceeds,
                confidence=confidence,
                realized_pnl=realized,
                realized_pnl_percent=realized_percent,
            )
        )
        return proceeds
