"""Strategy contract, indicators and the hard-coded strategy set."""

from strategy_lab.strategy.base import INSUFFICIENT_DATA, INSUFFICIENT_VOLUME, TradingStrategy
from strategy_lab.strategy.bollinger_breakout import BollingerBandsBreakoutStrategy
from strategy_lab.strategy.external import ExternalStrategy
from strategy_lab.strategy.indicators import Bands, IndicatorSeries, MacdValue
from strategy_lab.strategy.macd_crossover import MacdCrossoverStrategy
from strategy_lab.strategy.models import (
    MovingAverageType,
    ParameterDefinition,
    ParameterType,
    StrategyInfo,
    StrategySource,
    StrategyType,
)
from strategy_lab.strategy.moving_average import MovingAverageCrossoverStrategy
from strategy_lab.strategy.parameters import (
    BollingerBandsParameters,
    MacdParameters,
    MovingAverageCrossoverParameters,
    RsiMeanReversionParameters,
    StrategyParameters,
    VwapParameters,
)
from strategy_lab.strategy.registry import (
    STRATEGY_REGISTRY,
    available_strategies,
    build_strategy,
    resolve_strategy_id,
)
from strategy_lab.strategy.rsi_mean_reversion import RsiMeanReversionStrategy
from strategy_lab.strategy.vwap import VwapStrategy

__all__ = [
    "Bands",
    "BollingerBandsBreakoutStrategy",
    "BollingerBandsParameters",
    "ExternalStrategy",
    "INSUFFICIENT_DATA",
    "INSUFFICIENT_VOLUME",
    "IndicatorSeries",
    "MacdCrossoverStrategy",
    "MacdParameters",
    "MacdValue",
    "MovingAverageCrossoverParameters",
    "MovingAverageCrossoverStrategy",
    "MovingAverageType",
    "ParameterDefinition",
    "ParameterType",
    "RsiMeanReversionParameters",
    "RsiMeanReversionStrategy",
    "STRATEGY_REGISTRY",
    "StrategyInfo",
    "StrategyParameters",
    "StrategySource",
    "StrategyType",
    "TradingStrategy",
    "VwapParameters",
    "VwapStrategy",
    "available_strategies",
    "build_strategy",
    "resolve_strategy_id",
]
