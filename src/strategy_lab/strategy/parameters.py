"""Per-strategy parameter sets and their validation."""

from __future__ import annotations

from dataclasses import dataclass, fields
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from strategy_lab.simulator.models import to_decimal
from strategy_lab.strategy.models import MovingAverageType


def _decimal(data: dict, key: str, default: str) -> Decimal:
    try:
        value = to_decimal(data.get(key, Decimal(default)))
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{key} must be a number") from exc
    if not value.is_finite():
        raise ValueError(f"{key} must be a finite number")
    return value


def _int(data: dict, key: str, default: int) -> int:
    try:
        return int(data.get(key, default))
    except (TypeError, ValueError, OverflowError) as exc:
        raise ValueError(f"{key} must be an integer") from exc


def _flag(data: dict, key: str, default: bool) -> bool:
    value = data.get(key, default)
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def _common(data: dict) -> dict[str, Any]:
    return {
        "stop_loss_percent": _decimal(data, "stop_loss_percent", "5.0"),
        "take_profit_percent": _decimal(data, "take_profit_percent", "10.0"),
        "position_size_percent": _decimal(data, "position_size_percent", "100"),
        "use_atr_for_stops": _flag(data, "use_atr_for_stops", False),
        "atr_multiplier": _decimal(data, "atr_multiplier", "2.0"),
        "atr_period": _int(data, "atr_period", 14),
        "require_volume_confirmation": _flag(data, "require_volume_confirmation", False),
        "volume_multiplier": _decimal(data, "volume_multiplier", "1.3"),
    }


@dataclass(frozen=True)
class StrategyParameters:
    stop_loss_percent: Decimal = Decimal("5.0")
    take_profit_percent: Decimal = Decimal("10.0")
    position_size_percent: Decimal = Decimal("100")
    use_atr_for_stops: bool = False
    atr_multiplier: Decimal = Decimal("2.0")
    atr_period: int = 14
    require_volume_confirmation: bool = False
    volume_multiplier: Decimal = Decimal("1.3")

    @staticmethod
    def from_dict(data: dict) -> "StrategyParameters":
        return StrategyParameters(**_common(data))

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        for item in fields(self):
            value = getattr(self, item.name)
            if isinstance(value, Decimal):
                value = str(value)
            elif isinstance(value, Enum):
                value = value.value
            payload[item.name] = value
        return payload

    def validation_error(self) -> Optional[str]:
        """Return a message naming the first invalid field, or None."""
        for item in fields(self):
            value = getattr(self, item.name)
            if isinstance(value, Decimal) and not value.is_finite():
                return f"{item.name} must be a finite number"
        return self.range_error()

    def range_error(self) -> Optional[str]:
        if not 0 < self.stop_loss_percent <= 100:
            return "stop_loss_percent must be between 0 and 100"
        if not 0 < self.take_profit_percent <= 1000:
            return "take_profit_percent must be between 0 and 1000"
        if not 0 < self.position_size_percent <= 100:
            return "position_size_percent must be between 0 and 100"
        if self.atr_period <= 0:
            return "atr_period must be greater than 0"
        if self.atr_multiplier <= 0:
            return "atr_multiplier must be greater than 0"
        if self.volume_multiplier <= 0:
            return "volume_multiplier must be greater than 0"
        return None


@dataclass(frozen=True)
class MovingAverageCrossoverParameters(StrategyParameters):
    fast_period: int = 9
    slow_period: int = 21
    ma_type: MovingAverageType = MovingAverageType.SMA

    @staticmethod
    def from_dict(data: dict) -> "MovingAverageCrossoverParameters":
        return MovingAverageCrossoverParameters(
            fast_period=_int(data, "fast_period", 9),
            slow_period=_int(data, "slow_period", 21),
            ma_type=MovingAverageType(str(data.get("ma_type", "sma")).lower()),
            **_common(data),
        )

    def range_error(self) -> Optional[str]:
        if self.fast_period <= 0 or self.fast_period >= self.slow_period:
            return "fast_period must be greater than 0 and less than slow_period"
        return super().range_error()


@dataclass(frozen=True)
class RsiMeanReversionParameters(StrategyParameters):
    rsi_period: int = 14
    oversold_threshold: Decimal = Decimal("30")
    overbought_threshold: Decimal = Decimal("70")

    @staticmethod
    def from_dict(data: dict) -> "RsiMeanReversionParameters":
        return RsiMeanReversionParameters(
            rsi_period=_int(data, "rsi_period", 14),
            oversold_threshold=_decimal(data, "oversold_threshold", "30"),
            overbought_threshold=_decimal(data, "overbought_threshold", "70"),
            **_common(data),
        )

    def range_error(self) -> Optional[str]:
        if self.rsi_period <= 0:
            return "rsi_period must be greater than 0"
        if not 0 < self.oversold_threshold < 50:
            return "oversold_threshold must be between 0 and 50"
        if not 50 < self.overbought_threshold < 100:
            return "overbought_threshold must be between 50 and 100"
        if self.oversold_threshold >= self.overbought_threshold:
            return "oversold_threshold must be less than overbought_threshold"
        return super().range_error()


@dataclass(frozen=True)
class BollingerBandsParameters(StrategyParameters):
    period: int = 20
    std_devs: Decimal = Decimal("2.0")
    require_momentum_confirmation: bool = True

    @staticmethod
    def from_dict(data: dict) -> "BollingerBandsParameters":
        return BollingerBandsParameters(
            period=_int(data, "period", 20),
            std_devs=_decimal(data, "std_devs", "2.0"),
            require_momentum_confirmation=_flag(data, "require_momentum_confirmation", True),
            **_common(data),
        )

    def range_error(self) -> Optional[str]:
        if self.period <= 0:
            return "period must be greater than 0"
        if not 0 < self.std_devs <= 5:
            return "std_devs must be between 0 and 5"
        return super().range_error()


@dataclass(frozen=True)
class MacdParameters(StrategyParameters):
    fast_period: int = 12
    slow_period: int = 26
    signal_period: int = 9

    @staticmethod
    def from_dict(data: dict) -> "MacdParameters":
        return MacdParameters(
            fast_period=_int(data, "fast_period", 12),
            slow_period=_int(data, "slow_period", 26),
            signal_period=_int(data, "signal_period", 9),
            **_common(data),
        )

    def range_error(self) -> Optional[str]:
        if self.fast_period <= 0:
            return "fast_period must be greater than 0"
        if self.slow_period <= self.fast_period:
            return "slow_period must be greater than fast_period"
        if self.signal_period <= 0:
            return "signal_period must be greater than 0"
        return super().range_error()


@dataclass(frozen=True)
class VwapParameters(StrategyParameters):
    period: int = 14
    deviation_threshold: Decimal = Decimal("2.0")

    @staticmethod
    def from_dict(data: dict) -> "VwapParameters":
        return VwapParameters(
            period=_int(data, "period", 14),
            deviation_threshold=_decimal(data, "deviation_threshold", "2.0"),
            **_common(data),
        )

    def range_error(self) -> Optional[str]:
        if self.period <= 0:
            return "period must be greater than 0"
        if not 0 < self.deviation_threshold <= 50:
            return "deviation_threshold must be between 0 and 50"
        return super().range_error()
