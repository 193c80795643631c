"""Adapter for strategies evaluated outside the built-in set."""

from __future__ import annotations

from typing import Callable, Optional, Sequence

from strategy_lab.simulator.models import MarketBar, Position, Signal
from strategy_lab.strategy.base import TradingStrategy
from strategy_lab.strategy.indicators import IndicatorSeries
from strategy_lab.strategy.models import StrategySource, StrategyType
from strategy_lab.strategy.parameters import StrategyParameters

AnalyzeFn = Callable[[Sequence[MarketBar], Optional[Position], StrategyParameters], Signal]


class ExternalStrategy(TradingStrategy):
    """Wraps a callable with the ``analyze`` signature.

    The callable is expected to talk to whatever sandbox or worker actually
    runs the custom logic; this class only enforces the shared contract
    (window check, position gating, parameter validation).
    """

    source = StrategySource.CUSTOM

    def __init__(
        self,
        strategy_id: str,
        analyze_fn: AnalyzeFn,
        name: Optional[str] = None,
        description: str = "",
        strategy_type: StrategyType = StrategyType.UNKNOWN,
        min_bars: int = 1,
        parameters_cls: type[StrategyParameters] = StrategyParameters,
    ) -> None:
        if min_bars < 1:
            raise ValueError("min_bars must be at least 1")
        self.strategy_id = strategy_id
        self.name = name or strategy_id
        self.description = description
        self.strategy_type = strategy_type
        self.parameters_cls = parameters_cls
        self._analyze_fn = analyze_fn
        self._min_bars = min_bars

    def min_bars(self, parameters: StrategyParameters) -> int:
        return self._min_bars

    def evaluate(
        self,
        series: IndicatorSeries,
        position: Optional[Position],
        parameters: StrategyParameters,
    ) -> Signal:
        return self._analyze_fn(series.bars, position, parameters)
