"""Moving average crossover strategy."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from strategy_lab.simulator.models import Position, Signal
from strategy_lab.strategy.base import INSUFFICIENT_DATA, INSUFFICIENT_VOLUME, TradingStrategy
from strategy_lab.strategy.indicators import IndicatorSeries
from strategy_lab.strategy.models import (
    MovingAverageType,
    ParameterDefinition,
    ParameterType,
    StrategyType,
)
from strategy_lab.strategy.parameters import MovingAverageCrossoverParameters

CONFIDENCE = Decimal("0.75")


def _average(series: IndicatorSeries, period: int, ma_type: MovingAverageType) -> Optional[Decimal]:
    if ma_type == MovingAverageType.EMA:
        return series.ema(period)
    return series.sma(period)


class MovingAverageCrossoverStrategy(TradingStrategy):
    strategy_id = "moving_average_crossover"
    name = "Moving Average Crossover"
    description = "Buys on a golden cross of the fast over the slow moving average and sells on the death cross."
    strategy_type = StrategyType.TREND_FOLLOWING
    parameters_cls = MovingAverageCrossoverParameters

    def min_bars(self, parameters: MovingAverageCrossoverParameters) -> int:
        return max(parameters.fast_period, parameters.slow_period) + 1

    def evaluate(
        self,
        series: IndicatorSeries,
        position: Optional[Position],
        parameters: MovingAverageCrossoverParameters,
    ) -> Signal:
        previous = series.previous()
        fast = _average(series, parameters.fast_period, parameters.ma_type)
        slow = _average(series, parameters.slow_period, parameters.ma_type)
        prev_fast = _average(previous, parameters.fast_period, parameters.ma_type)
        prev_slow = _average(previous, parameters.slow_period, parameters.ma_type)
        if fast is None or slow is None or prev_fast is None or prev_slow is None:
            return Signal.hold(INSUFFICIENT_DATA)

        if not self.volume_confirmed(series, parameters):
            return Signal.hold(INSUFFICIENT_VOLUME)

        if position is None and prev_fast <= prev_slow and fast > slow:
            return self.buy_signal(
                series,
                parameters,
                f"Golden Cross: Fast MA ({fast:.2f}) crossed above Slow MA ({slow:.2f})",
                CONFIDENCE,
            )
        if position is not None and prev_fast >= prev_slow and fast < slow:
            return self.sell_signal(
                series,
                f"Death Cross: Fast MA ({fast:.2f}) crossed below Slow MA ({slow:.2f})",
                CONFIDENCE,
            )
        return Signal.hold(f"No crossover (Fast MA: {fast:.2f}, Slow MA: {slow:.2f})")

    def strategy_parameter_definitions(self) -> list[ParameterDefinition]:
        defaults = MovingAverageCrossoverParameters()
        return [
            ParameterDefinition(
                name="fast_period",
                display_name="Fast Period",
                parameter_type=ParameterType.INTEGER,
                default_value=defaults.fast_period,
                min_value=1,
                max_value=200,
                description="Bars in the fast moving average",
                display_order=1,
            ),
            ParameterDefinition(
                name="slow_period",
                display_name="Slow Period",
                parameter_type=ParameterType.INTEGER,
                default_value=defaults.slow_period,
                min_value=2,
                max_value=500,
                description="Bars in the slow moving average",
                display_order=2,
            ),
            ParameterDefinition(
                name="ma_type",
                display_name="Moving Average Type",
                parameter_type=ParameterType.ENUM,
                default_value=defaults.ma_type.value,
                description="Simple or exponential moving average",
                display_order=3,
                options=tuple(item.value for item in MovingAverageType),
            ),
        ]
