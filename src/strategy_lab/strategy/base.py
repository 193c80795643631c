"""Strategy base interface shared by every trading algorithm."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Optional, Sequence

from strategy_lab.errors import InvalidParametersError
from strategy_lab.simulator.models import MarketBar, Position, Signal, SignalAction
from strategy_lab.strategy.indicators import HUNDRED, IndicatorSeries
from strategy_lab.strategy.models import (
    ParameterDefinition,
    ParameterType,
    StrategyInfo,
    StrategySource,
    StrategyType,
)
from strategy_lab.strategy.parameters import StrategyParameters

logger = logging.getLogger(__name__)

INSUFFICIENT_DATA = "Insufficient data"
INSUFFICIENT_VOLUME = "Insufficient volume"


class TradingStrategy(ABC):
    strategy_id: str
    name: str
    description: str = ""
    strategy_type: StrategyType = StrategyType.UNKNOWN
    source: StrategySource = StrategySource.HARD_CODED
    parameters_cls: type[StrategyParameters] = StrategyParameters

    def analyze(
        self,
        bars: Optional[Sequence[MarketBar]],
        position: Optional[Position],
        parameters: StrategyParameters,
    ) -> Signal:
        if not isinstance(parameters, self.parameters_cls):
            raise InvalidParametersError(
                f"{self.name} expects {self.parameters_cls.__name__}, got {type(parameters).__name__}"
            )
        if not bars or len(bars) < self.min_bars(parameters):
            return Signal.hold(INSUFFICIENT_DATA)

        signal = self.evaluate(IndicatorSeries(bars), position, parameters)
        if signal is None:
            raise RuntimeError(f"{self.name} returned no signal")
        if signal.action == SignalAction.BUY and position is not None:
            return Signal.hold("Position already open")
        if signal.action == SignalAction.SELL and position is None:
            return Signal.hold("No open position")
        return signal

    @abstractmethod
    def evaluate(
        self,
        series: IndicatorSeries,
        position: Optional[Position],
        parameters: StrategyParameters,
    ) -> Signal:
        raise NotImplementedError

    @abstractmethod
    def min_bars(self, parameters: StrategyParameters) -> int:
        raise NotImplementedError

    def default_parameters(self) -> StrategyParameters:
        return self.parameters_cls()

    def parameters_from_dict(self, data: dict) -> StrategyParameters:
        return self.parameters_cls.from_dict(data)

    def validate_parameters(self, parameters: StrategyParameters) -> tuple[bool, str]:
        if not isinstance(parameters, self.parameters_cls):
            return False, "Invalid parameter type"
        error = parameters.validation_error()
        if error is not None:
            return False, error
        return True, ""

    def parameter_definitions(self) -> list[ParameterDefinition]:
        return self.strategy_parameter_definitions() + common_parameter_definitions(
            self.default_parameters(), start_order=100
        )

    def strategy_parameter_definitions(self) -> list[ParameterDefinition]:
        return []

    def info(self) -> StrategyInfo:
        return StrategyInfo(
            strategy_id=self.strategy_id,
            name=self.name,
            strategy_type=self.strategy_type,
            source=self.source,
            description=self.description,
        )

    def volume_confirmed(self, series: IndicatorSeries, parameters: StrategyParameters) -> bool:
        if not parameters.require_volume_confirmation:
            return True
        average = series.average_volume()
        if average is None:
            return False
        return series.volumes[-1] >= average * parameters.volume_multiplier

    def buy_signal(
        self,
        series: IndicatorSeries,
        parameters: StrategyParameters,
        reason: str,
        confidence: Decimal,
    ) -> Signal:
        entry_price = series.closes[-1]
        stop_loss = entry_price * (1 - parameters.stop_loss_percent / HUNDRED)
        if parameters.use_atr_for_stops:
            atr_value = series.atr(parameters.atr_period)
            if atr_value is not None:
                stop_loss = entry_price - atr_value * parameters.atr_multiplier
            else:
                logger.debug("%s: ATR(%s) unavailable, using percentage stop", self.name, parameters.atr_period)
        return Signal(
            action=SignalAction.BUY,
            reason=reason,
            entry_price=entry_price,
            stop_loss=stop_loss,
            take_profit=entry_price * (1 + parameters.take_profit_percent / HUNDRED),
            confidence=confidence,
        )

    def sell_signal(self, series: IndicatorSeries, reason: str, confidence: Decimal) -> Signal:
        return Signal(
            action=SignalAction.SELL,
            reason=reason,
            entry_price=series.closes[-1],
            confidence=confidence,
        )


def common_parameter_definitions(
    defaults: StrategyParameters,
    start_order: int = 100,
) -> list[ParameterDefinition]:
    return [
        ParameterDefinition(
            name="stop_loss_percent",
            display_name="Stop Loss %",
            parameter_type=ParameterType.DECIMAL,
            default_value=defaults.stop_loss_percent,
            min_value=Decimal("0.1"),
            max_value=Decimal("50"),
            description="Percentage below entry price to exit a losing position",
            display_order=start_order,
        ),
        ParameterDefinition(
            name="take_profit_percent",
            display_name="Take Profit %",
            parameter_type=ParameterType.DECIMAL,
            default_value=defaults.take_profit_percent,
            min_value=Decimal("0.1"),
            max_value=Decimal("100"),
            description="Percentage above entry price to take profit",
            display_order=start_order + 1,
        ),
        ParameterDefinition(
            name="position_size_percent",
            display_name="Position Size %",
            parameter_type=ParameterType.DECIMAL,
            default_value=defaults.position_size_percent,
            min_value=Decimal("1"),
            max_value=Decimal("100"),
            description="Share of the balance to commit per entry (runs currently commit the full balance)",
            display_order=start_order + 2,
        ),
        ParameterDefinition(
            name="use_atr_for_stops",
            display_name="Use ATR Stops",
            parameter_type=ParameterType.BOOLEAN,
            default_value=defaults.use_atr_for_stops,
            description="Place the stop at ATR x multiplier below entry instead of a fixed percentage",
            display_order=start_order + 3,
        ),
        ParameterDefinition(
            name="atr_multiplier",
            display_name="ATR Multiplier",
            parameter_type=ParameterType.DECIMAL,
            default_value=defaults.atr_multiplier,
            min_value=Decimal("0.5"),
            max_value=Decimal("10"),
            description="Number of ATRs between entry and stop",
            display_order=start_order + 4,
        ),
        ParameterDefinition(
            name="atr_period",
            display_name="ATR Period",
            parameter_type=ParameterType.INTEGER,
            default_value=defaults.atr_period,
            min_value=2,
            max_value=100,
            description="Bars used for the average true range",
            display_order=start_order + 5,
        ),
        ParameterDefinition(
            name="require_volume_confirmation",
            display_name="Require Volume Confirmation",
            parameter_type=ParameterType.BOOLEAN,
            default_value=defaults.require_volume_confirmation,
            description="Only act when volume exceeds the recent average",
            display_order=start_order + 6,
        ),
        ParameterDefinition(
            name="volume_multiplier",
            display_name="Volume Multiplier",
            parameter_type=ParameterType.DECIMAL,
            default_value=defaults.volume_multiplier,
            min_value=Decimal("1.0"),
            max_value=Decimal("5.0"),
            description="Required multiple of the 20-bar average volume",
            display_order=start_order + 7,
        ),
    ]
