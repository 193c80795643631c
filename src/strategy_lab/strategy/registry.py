"""Static registry of hard-coded strategies."""

from __future__ import annotations

from typing import Callable, Optional

from strategy_lab.errors import UnsupportedConfigurationError
from strategy_lab.strategy.base import TradingStrategy
from strategy_lab.strategy.bollinger_breakout import BollingerBandsBreakoutStrategy
from strategy_lab.strategy.macd_crossover import MacdCrossoverStrategy
from strategy_lab.strategy.models import StrategyInfo
from strategy_lab.strategy.moving_average import MovingAverageCrossoverStrategy
from strategy_lab.strategy.rsi_mean_reversion import RsiMeanReversionStrategy
from strategy_lab.strategy.vwap import VwapStrategy

STRATEGY_REGISTRY: dict[str, Callable[[], TradingStrategy]] = {
    MovingAverageCrossoverStrategy.strategy_id: MovingAverageCrossoverStrategy,
    RsiMeanReversionStrategy.strategy_id: RsiMeanReversionStrategy,
    BollingerBandsBreakoutStrategy.strategy_id: BollingerBandsBreakoutStrategy,
    MacdCrossoverStrategy.strategy_id: MacdCrossoverStrategy,
    VwapStrategy.strategy_id: VwapStrategy,
}

_DISPLAY_NAMES: dict[str, str] = {
    factory.name.lower(): strategy_id for strategy_id, factory in STRATEGY_REGISTRY.items()
}


def resolve_strategy_id(name: str) -> Optional[str]:
    key = name.strip().lower()
    if key in STRATEGY_REGISTRY:
        return key
    return _DISPLAY_NAMES.get(key)


def build_strategy(name: str) -> TradingStrategy:
    strategy_id = resolve_strategy_id(name)
    if strategy_id is None:
        raise UnsupportedConfigurationError(f"Unknown strategy: {name}")
    return STRATEGY_REGISTRY[strategy_id]()


def available_strategies() -> list[StrategyInfo]:
    return [factory().info() for factory in STRATEGY_REGISTRY.values()]
