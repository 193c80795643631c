"""Volume weighted average price reversion strategy."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from strategy_lab.simulator.models import Position, Signal
from strategy_lab.strategy.base import INSUFFICIENT_DATA, INSUFFICIENT_VOLUME, TradingStrategy
from strategy_lab.strategy.indicators import HUNDRED, IndicatorSeries
from strategy_lab.strategy.models import ParameterDefinition, ParameterType, StrategyType
from strategy_lab.strategy.parameters import VwapParameters

CONFIDENCE = Decimal("0.70")


class VwapStrategy(TradingStrategy):
    strategy_id = "vwap"
    name = "Volume Weighted Average Price"
    description = "Buys when price trades far enough below VWAP and sells when it trades far enough above."
    strategy_type = StrategyType.MEAN_REVERSION
    parameters_cls = VwapParameters

    def min_bars(self, parameters: VwapParameters) -> int:
        return parameters.period

    def evaluate(
        self,
        series: IndicatorSeries,
        position: Optional[Position],
        parameters: VwapParameters,
    ) -> Signal:
        value = series.vwap(parameters.period)
        if value is None or value == 0:
            return Signal.hold(INSUFFICIENT_DATA)

        if not self.volume_confirmed(series, parameters):
            return Signal.hold(INSUFFICIENT_VOLUME)

        close = series.closes[-1]
        deviation = (close - value) / value * HUNDRED
        if position is None and deviation <= -parameters.deviation_threshold:
            return self.buy_signal(
                series,
                parameters,
                f"Price {abs(deviation):.2f}% below VWAP ({value:.2f})",
                CONFIDENCE,
            )
        if position is not None and deviation >= parameters.deviation_threshold:
            return self.sell_signal(
                series,
                f"Price {deviation:.2f}% above VWAP ({value:.2f})",
                CONFIDENCE,
            )
        return Signal.hold(f"Price near VWAP (Deviation: {deviation:.2f}%)")

    def strategy_parameter_definitions(self) -> list[ParameterDefinition]:
        defaults = VwapParameters()
        return [
            ParameterDefinition(
                name="period",
                display_name="VWAP Period",
                parameter_type=ParameterType.INTEGER,
                default_value=defaults.period,
                min_value=5,
                max_value=50,
                description="Bars in the rolling VWAP window",
                display_order=1,
            ),
            ParameterDefinition(
                name="deviation_threshold",
                display_name="Deviation Threshold %",
                parameter_type=ParameterType.DECIMAL,
                default_value=defaults.deviation_threshold,
                min_value=Decimal("0.5"),
                max_value=Decimal("10.0"),
                description="Distance from VWAP, in percent, that triggers a trade",
                display_order=2,
            ),
        ]
