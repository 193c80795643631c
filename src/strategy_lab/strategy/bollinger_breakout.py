"""Bollinger band breakout strategy."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from strategy_lab.simulator.models import Position, Signal
from strategy_lab.strategy.base import INSUFFICIENT_DATA, INSUFFICIENT_VOLUME, TradingStrategy
from strategy_lab.strategy.indicators import IndicatorSeries
from strategy_lab.strategy.models import ParameterDefinition, ParameterType, StrategyType
from strategy_lab.strategy.parameters import BollingerBandsParameters

CONFIDENCE = Decimal("0.65")


class BollingerBandsBreakoutStrategy(TradingStrategy):
    strategy_id = "bollinger_bands_breakout"
    name = "Bollinger Bands Breakout"
    description = (
        "Buys when price moves down into the lower band, optionally confirmed by an up close, "
        "and sells when price reaches the upper band."
    )
    strategy_type = StrategyType.BREAKOUT
    parameters_cls = BollingerBandsParameters

    def min_bars(self, parameters: BollingerBandsParameters) -> int:
        return parameters.period + 1

    def evaluate(
        self,
        series: IndicatorSeries,
        position: Optional[Position],
        parameters: BollingerBandsParameters,
    ) -> Signal:
        bands = series.bollinger(parameters.period, parameters.std_devs)
        previous_bands = series.previous().bollinger(parameters.period, parameters.std_devs)
        if bands is None or previous_bands is None:
            return Signal.hold(INSUFFICIENT_DATA)

        if not self.volume_confirmed(series, parameters):
            return Signal.hold(INSUFFICIENT_VOLUME)

        current = series.bars[-1]
        previous = series.bars[-2]
        touched_lower = previous.low >= previous_bands.lower and current.low <= bands.lower
        touched_upper = previous.high <= previous_bands.upper and current.high >= bands.upper

        if position is None and touched_lower:
            if parameters.require_momentum_confirmation and current.close <= previous.close:
                return Signal.hold(f"Lower band touch at {bands.lower:.2f} without momentum confirmation")
            return self.buy_signal(
                series,
                parameters,
                f"Price touched lower band ({bands.lower:.2f})",
                CONFIDENCE,
            )
        if position is not None and touched_upper:
            return self.sell_signal(
                series,
                f"Price touched upper band ({bands.upper:.2f})",
                CONFIDENCE,
            )
        return Signal.hold(
            f"Price within bands (Lower: {bands.lower:.2f}, Upper: {bands.upper:.2f})"
        )

    def strategy_parameter_definitions(self) -> list[ParameterDefinition]:
        defaults = BollingerBandsParameters()
        return [
            ParameterDefinition(
                name="period",
                display_name="Period",
                parameter_type=ParameterType.INTEGER,
                default_value=defaults.period,
                min_value=5,
                max_value=100,
                description="Bars in the moving average and deviation window",
                display_order=1,
            ),
            ParameterDefinition(
                name="std_devs",
                display_name="Standard Deviations",
                parameter_type=ParameterType.DECIMAL,
                default_value=defaults.std_devs,
                min_value=Decimal("1.0"),
                max_value=Decimal("3.0"),
                description="Band width in standard deviations",
                display_order=2,
            ),
            ParameterDefinition(
                name="require_momentum_confirmation",
                display_name="Require Momentum Confirmation",
                parameter_type=ParameterType.BOOLEAN,
                default_value=defaults.require_momentum_confirmation,
                description="Require an up close on the bar that touches the lower band",
                display_order=3,
            ),
        ]
