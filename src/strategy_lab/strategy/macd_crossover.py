"""MACD signal line crossover strategy."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from strategy_lab.simulator.models import Position, Signal
from strategy_lab.strategy.base import INSUFFICIENT_DATA, INSUFFICIENT_VOLUME, TradingStrategy
from strategy_lab.strategy.indicators import IndicatorSeries
from strategy_lab.strategy.models import ParameterDefinition, ParameterType, StrategyType
from strategy_lab.strategy.parameters import MacdParameters

CONFIDENCE = Decimal("0.75")


class MacdCrossoverStrategy(TradingStrategy):
    strategy_id = "macd_crossover"
    name = "MACD Crossover"
    description = "Buys when the MACD line crosses above its signal line and sells on the opposite cross."
    strategy_type = StrategyType.TREND_FOLLOWING
    parameters_cls = MacdParameters

    def min_bars(self, parameters: MacdParameters) -> int:
        return max(parameters.slow_period, parameters.fast_period) + parameters.signal_period + 1

    def evaluate(
        self,
        series: IndicatorSeries,
        position: Optional[Position],
        parameters: MacdParameters,
    ) -> Signal:
        periods = (parameters.fast_period, parameters.slow_period, parameters.signal_period)
        current = series.macd(*periods)
        previous = series.previous().macd(*periods)
        if current is None or previous is None:
            return Signal.hold(INSUFFICIENT_DATA)

        if not self.volume_confirmed(series, parameters):
            return Signal.hold(INSUFFICIENT_VOLUME)

        if position is None and previous.macd <= previous.signal and current.macd > current.signal:
            return self.buy_signal(
                series,
                parameters,
                f"MACD crossed above signal (MACD: {current.macd:.4f}, Signal: {current.signal:.4f})",
                CONFIDENCE,
            )
        if position is not None and previous.macd >= previous.signal and current.macd < current.signal:
            return self.sell_signal(
                series,
                f"MACD crossed below signal (MACD: {current.macd:.4f}, Signal: {current.signal:.4f})",
                CONFIDENCE,
            )
        return Signal.hold(f"No MACD crossover (Histogram: {current.histogram:.4f})")

    def strategy_parameter_definitions(self) -> list[ParameterDefinition]:
        defaults = MacdParameters()
        return [
            ParameterDefinition(
                name="fast_period",
                display_name="Fast Period",
                parameter_type=ParameterType.INTEGER,
                default_value=defaults.fast_period,
                min_value=5,
                max_value=50,
                description="Bars in the fast EMA",
                display_order=1,
            ),
            ParameterDefinition(
                name="slow_period",
                display_name="Slow Period",
                parameter_type=ParameterType.INTEGER,
                default_value=defaults.slow_period,
                min_value=10,
                max_value=100,
                description="Bars in the slow EMA",
                display_order=2,
            ),
            ParameterDefinition(
                name="signal_period",
                display_name="Signal Period",
                parameter_type=ParameterType.INTEGER,
                default_value=defaults.signal_period,
                min_value=3,
                max_value=30,
                description="Bars in the signal line EMA",
                display_order=3,
            ),
        ]
