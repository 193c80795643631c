"""RSI mean reversion strategy."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from strategy_lab.simulator.models import Position, Signal
from strategy_lab.strategy.base import INSUFFICIENT_DATA, INSUFFICIENT_VOLUME, TradingStrategy
from strategy_lab.strategy.indicators import IndicatorSeries
from strategy_lab.strategy.models import ParameterDefinition, ParameterType, StrategyType
from strategy_lab.strategy.parameters import RsiMeanReversionParameters

CONFIDENCE = Decimal("0.70")


class RsiMeanReversionStrategy(TradingStrategy):
    strategy_id = "rsi_mean_reversion"
    name = "RSI Mean Reversion"
    description = "Buys when RSI falls below the oversold level and sells when it rises above the overbought level."
    strategy_type = StrategyType.MEAN_REVERSION
    parameters_cls = RsiMeanReversionParameters

    def min_bars(self, parameters: RsiMeanReversionParameters) -> int:
        return parameters.rsi_period + 1

    def evaluate(
        self,
        series: IndicatorSeries,
        position: Optional[Position],
        parameters: RsiMeanReversionParameters,
    ) -> Signal:
        value = series.rsi(parameters.rsi_period)
        if value is None:
            return Signal.hold(INSUFFICIENT_DATA)

        if not self.volume_confirmed(series, parameters):
            return Signal.hold(INSUFFICIENT_VOLUME)

        if position is None and value < parameters.oversold_threshold:
            return self.buy_signal(
                series,
                parameters,
                f"RSI oversold (RSI: {value:.2f} < {parameters.oversold_threshold})",
                CONFIDENCE,
            )
        if position is not None and value > parameters.overbought_threshold:
            return self.sell_signal(
                series,
                f"RSI overbought (RSI: {value:.2f} > {parameters.overbought_threshold})",
                CONFIDENCE,
            )
        return Signal.hold(f"RSI neutral (RSI: {value:.2f})")

    def strategy_parameter_definitions(self) -> list[ParameterDefinition]:
        defaults = RsiMeanReversionParameters()
        return [
            ParameterDefinition(
                name="rsi_period",
                display_name="RSI Period",
                parameter_type=ParameterType.INTEGER,
                default_value=defaults.rsi_period,
                min_value=2,
                max_value=50,
                description="Bars used to compute RSI",
                display_order=1,
            ),
            ParameterDefinition(
                name="oversold_threshold",
                display_name="Oversold Threshold",
                parameter_type=ParameterType.DECIMAL,
                default_value=defaults.oversold_threshold,
                min_value=Decimal("10"),
                max_value=Decimal("40"),
                description="Buy when RSI drops below this level",
                display_order=2,
            ),
            ParameterDefinition(
                name="overbought_threshold",
                display_name="Overbought Threshold",
                parameter_type=ParameterType.DECIMAL,
                default_value=defaults.overbought_threshold,
                min_value=Decimal("60"),
                max_value=Decimal("90"),
                description="Sell when RSI rises above this level",
                display_order=3,
            ),
        ]
