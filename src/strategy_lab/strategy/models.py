"""Strategy identity and parameter metadata models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class StrategyType(str, Enum):
    UNKNOWN = "unknown"
    TREND_FOLLOWING = "trend_following"
    MEAN_REVERSION = "mean_reversion"
    BREAKOUT = "breakout"
    MOMENTUM = "momentum"
    VOLATILITY = "volatility"
    MULTI_SIGNAL = "multi_signal"


class StrategySource(str, Enum):
    HARD_CODED = "hard_coded"
    CUSTOM = "custom"


class ParameterType(str, Enum):
    INTEGER = "integer"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"
    STRING = "string"
    ENUM = "enum"


class MovingAverageType(str, Enum):
    SMA = "sma"
    EMA = "ema"


@dataclass(frozen=True)
class ParameterDefinition:
    name: str
    display_name: str
    parameter_type: ParameterType
    default_value: Any
    description: str
    display_order: int
    min_value: Optional[Any] = None
    max_value: Optional[Any] = None
    options: tuple[str, ...] = ()


@dataclass(frozen=True)
class StrategyInfo:
    strategy_id: str
    name: str
    strategy_type: StrategyType
    source: StrategySource
    description: str
